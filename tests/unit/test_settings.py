"""Unit tests for Sturdy settings.

Covers defaults, env var overrides, the optional TOML file, validation,
immutability and ``with_overrides``.
"""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from sturdy.exceptions import ConfigurationError
from sturdy.settings import DEFAULTS, get_settings
from sturdy.settings.config import SturdySettings


class TestSettings:
    """Core settings loading and override mechanics."""

    def test_default_settings_load(self):
        s = SturdySettings()
        assert s.default_timeout == 10.0
        assert s.polling_interval == 0.25
        assert s.retry_attempts == 2
        assert s.retry_base_backoff == 0.3
        assert s.screenshot_on_failure is True

    def test_defaults_table_matches_fields(self):
        s = SturdySettings()
        for key, value in DEFAULTS.items():
            assert getattr(s, key) == value

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("STURDY_RETRY_ATTEMPTS", "5")
        monkeypatch.setenv("STURDY_SCREENSHOT_ON_FAILURE", "false")

        s = SturdySettings()
        assert s.retry_attempts == 5
        assert s.screenshot_on_failure is False

    def test_explicit_values_beat_env(self, monkeypatch):
        monkeypatch.setenv("STURDY_DEFAULT_TIMEOUT", "30")

        s = SturdySettings(default_timeout=2.0)
        assert s.default_timeout == 2.0

    def test_get_settings_is_cached(self):
        assert get_settings() is get_settings()


class TestTomlFile:
    """The optional file named by STURDY_CONFIG_FILE."""

    def test_toml_file_is_layered_under_env(self, monkeypatch, tmp_path):
        config = tmp_path / "sturdy.toml"
        config.write_text("[sturdy]\ndefault_timeout = 3.5\nretry_attempts = 7\n")
        monkeypatch.setenv("STURDY_CONFIG_FILE", str(config))
        monkeypatch.setenv("STURDY_RETRY_ATTEMPTS", "1")

        s = SturdySettings()
        assert s.default_timeout == 3.5
        assert s.retry_attempts == 1

    def test_flat_toml_file(self, monkeypatch, tmp_path):
        config = tmp_path / "flat.toml"
        config.write_text("polling_interval = 0.5\n")
        monkeypatch.setenv("STURDY_CONFIG_FILE", str(config))

        assert SturdySettings().polling_interval == 0.5

    def test_missing_toml_file_is_ignored(self, monkeypatch, tmp_path):
        monkeypatch.setenv("STURDY_CONFIG_FILE", str(tmp_path / "nope.toml"))

        assert SturdySettings().default_timeout == 10.0


class TestValidation:
    """Invalid values fail construction; nothing is clamped."""

    @pytest.mark.parametrize(
        "field, value",
        [
            ("default_timeout", 0),
            ("default_timeout", -1.0),
            ("polling_interval", 0),
            ("retry_attempts", -1),
            ("retry_base_backoff", -0.1),
            ("action_timeout_ms", 0),
        ],
    )
    def test_rejects_out_of_range(self, field, value):
        with pytest.raises(ValidationError):
            SturdySettings(**{field: value})

    def test_zero_retries_and_zero_backoff_are_valid(self):
        s = SturdySettings(retry_attempts=0, retry_base_backoff=0)
        assert s.retry_attempts == 0
        assert s.retry_base_backoff == 0

    def test_settings_are_frozen(self):
        s = SturdySettings()
        with pytest.raises(ValidationError):
            s.retry_attempts = 9


class TestWithOverrides:
    def test_returns_new_instance(self):
        base = SturdySettings()
        changed = base.with_overrides(retry_attempts=0, default_timeout=1.0)

        assert changed is not base
        assert changed.retry_attempts == 0
        assert changed.default_timeout == 1.0
        assert base.retry_attempts == 2

    def test_overrides_are_validated(self):
        with pytest.raises(ValidationError):
            SturdySettings().with_overrides(polling_interval=0)

    def test_unknown_override_is_rejected(self):
        with pytest.raises(ConfigurationError, match="pollling"):
            SturdySettings().with_overrides(pollling=1)

"""Locators — immutable descriptions of how to find elements on a page."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class LocatorStrategy(str, Enum):
    """Element lookup strategies understood by the bundled backends."""

    CSS = "css"
    XPATH = "xpath"
    ID = "id"
    NAME = "name"
    TEXT = "text"
    TEST_ID = "test_id"


@dataclass(frozen=True, slots=True)
class Locator:
    """How to find one or more elements: a strategy plus its value.

    Locators are opaque to the waiter and interaction layers; only the
    driver backend interprets them.
    """

    strategy: LocatorStrategy
    value: str

    @classmethod
    def css(cls, selector: str) -> Locator:
        return cls(LocatorStrategy.CSS, selector)

    @classmethod
    def xpath(cls, expression: str) -> Locator:
        return cls(LocatorStrategy.XPATH, expression)

    @classmethod
    def id(cls, element_id: str) -> Locator:
        return cls(LocatorStrategy.ID, element_id)

    @classmethod
    def name(cls, name: str) -> Locator:
        return cls(LocatorStrategy.NAME, name)

    @classmethod
    def text(cls, text: str) -> Locator:
        return cls(LocatorStrategy.TEXT, text)

    @classmethod
    def test_id(cls, test_id: str) -> Locator:
        return cls(LocatorStrategy.TEST_ID, test_id)

    def describe(self) -> str:
        """Human-friendly form for logs and messages, e.g. ``css('#login')``."""
        return f"{self.strategy.value}('{self.value}')"

    def __str__(self) -> str:
        return self.describe()

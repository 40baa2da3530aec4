"""Collaborator protocols consumed by the waiter and interaction layers.

Any backend that satisfies these protocols can be plugged in: the bundled
Playwright adapter (``playwright_driver``) or the in-memory fake (``memory``).

Contract notes:

* ``Driver.find_all`` returns an empty list when nothing matches; it never
  raises for "not found".
* ``Element.is_displayed`` returns ``False`` for stale handles instead of raising.
* ``ScriptRunner.run`` propagates backend errors; retry policy is decided
  by the caller.
* ``ScreenshotService.capture`` returns ``None`` when capture is unsupported
  and raises only when a capture was attempted and failed.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from sturdy.models.locator import Locator


@runtime_checkable
class Element(Protocol):
    """A handle to one element on the page."""

    async def is_displayed(self) -> bool: ...

    async def is_enabled(self) -> bool: ...

    async def click(self) -> None: ...

    async def clear(self) -> None: ...

    async def send_keys(self, text: str) -> None: ...

    async def get_attribute(self, name: str) -> str | None: ...

    async def text(self) -> str: ...

    async def select_option(
        self,
        *,
        label: str | None = None,
        value: str | None = None,
        index: int | None = None,
    ) -> None:
        """Select an option of a native ``<select>`` by exactly one criterion."""
        ...


@runtime_checkable
class Driver(Protocol):
    """Element lookup for one browser session."""

    async def find_all(self, locator: Locator) -> list[Element]: ...


@runtime_checkable
class ScriptRunner(Protocol):
    """Runs a JavaScript function in the page.

    Scripts are written as arrow functions receiving the positional
    arguments, e.g. ``"(el, alignToTop) => el.scrollIntoView(alignToTop)"``.
    """

    async def run(self, script: str, *args: Any) -> Any: ...


@runtime_checkable
class ScreenshotService(Protocol):
    """Out-of-band diagnostic capture."""

    async def capture(self, name_prefix: str | None = None, is_failure: bool = False) -> str | None: ...

"""In-memory backend for tests and offline experiments.

``InMemoryDriver`` maps locators to ``FakeElement`` lists.  Elements can be
scheduled to appear or disappear after a delay, and any call can be made to
fail with queued errors, which is enough to exercise every wait, retry and
diagnostic path without a browser.
"""

from __future__ import annotations

import time
from collections import defaultdict, deque
from collections.abc import Callable
from typing import Any

from sturdy.browser.driver import Element
from sturdy.browser.helpers import CLEAR_VALUE_SCRIPT, READY_STATE_SCRIPT, SCROLL_INTO_VIEW_SCRIPT
from sturdy.exceptions import ElementNotInteractableError, NoSuchElementError
from sturdy.models.locator import Locator


class _FailureQueue:
    """Queued errors keyed by method name, raised one per call."""

    def __init__(self) -> None:
        self._failures: dict[str, deque[BaseException]] = defaultdict(deque)
        self.calls: dict[str, int] = defaultdict(int)

    def fail_next(self, method: str, *errors: BaseException) -> None:
        """Make the next ``len(errors)`` calls to *method* raise *errors* in order."""
        self._failures[method].extend(errors)

    def _enter(self, method: str) -> None:
        self.calls[method] += 1
        queue = self._failures.get(method)
        if queue:
            raise queue.popleft()


class FakeElement(_FailureQueue):
    """A scriptable element.

    Args:
        displayed: Initial visibility.
        enabled: Initial enabled state.
        text: Rendered text.
        attributes: Attribute values returned by ``get_attribute``.
        value: Current input value.
        options: ``(label, value)`` pairs for a native select.
        on_click: Callback run after each successful click.
    """

    def __init__(
        self,
        *,
        displayed: bool = True,
        enabled: bool = True,
        text: str = "",
        attributes: dict[str, str] | None = None,
        value: str = "",
        options: list[tuple[str, str]] | None = None,
        on_click: Callable[[], None] | None = None,
    ) -> None:
        super().__init__()
        self.displayed = displayed
        self.enabled = enabled
        self._text = text
        self.attributes = dict(attributes or {})
        self.value = value
        self.options = list(options or [])
        self.on_click = on_click
        self.selected_index: int | None = None
        self.scrolled_into_view: bool | None = None
        self._show_at: float | None = None
        self._hide_at: float | None = None

    def show_after(self, seconds: float) -> None:
        """Become displayed *seconds* from now."""
        self.displayed = False
        self._show_at = time.monotonic() + seconds

    def hide_after(self, seconds: float) -> None:
        """Stop being displayed *seconds* from now."""
        self._hide_at = time.monotonic() + seconds

    def _visible_now(self) -> bool:
        now = time.monotonic()
        if self._hide_at is not None and now >= self._hide_at:
            return False
        if self._show_at is not None and now >= self._show_at:
            return True
        return self.displayed

    async def is_displayed(self) -> bool:
        self._enter("is_displayed")
        return self._visible_now()

    async def is_enabled(self) -> bool:
        self._enter("is_enabled")
        return self.enabled

    async def click(self) -> None:
        self._enter("click")
        if not (self._visible_now() and self.enabled):
            raise ElementNotInteractableError("element is not visible or not enabled")
        if self.on_click is not None:
            self.on_click()

    async def clear(self) -> None:
        self._enter("clear")
        self.value = ""

    async def send_keys(self, text: str) -> None:
        self._enter("send_keys")
        self.value += text

    async def get_attribute(self, name: str) -> str | None:
        self._enter("get_attribute")
        return self.attributes.get(name)

    async def text(self) -> str:
        self._enter("text")
        return self._text

    async def select_option(
        self,
        *,
        label: str | None = None,
        value: str | None = None,
        index: int | None = None,
    ) -> None:
        self._enter("select_option")
        for position, (option_label, option_value) in enumerate(self.options):
            if (
                (label is not None and option_label == label)
                or (value is not None and option_value == value)
                or (index is not None and position == index)
            ):
                self.selected_index = position
                return
        raise NoSuchElementError(f"Cannot locate option (label={label!r}, value={value!r}, index={index!r})")

    @property
    def selected(self) -> tuple[str, str] | None:
        if self.selected_index is None:
            return None
        return self.options[self.selected_index]


class InMemoryDriver(_FailureQueue):
    """``Driver`` over a locator → elements table."""

    def __init__(self) -> None:
        super().__init__()
        self.elements: dict[Locator, list[FakeElement]] = {}

    def add(self, locator: Locator, *elements: FakeElement) -> None:
        self.elements.setdefault(locator, []).extend(elements)

    def remove(self, locator: Locator) -> None:
        self.elements.pop(locator, None)

    async def find_all(self, locator: Locator) -> list[Element]:
        self._enter("find_all")
        return list(self.elements.get(locator, []))


class InMemoryScriptRunner(_FailureQueue):
    """``ScriptRunner`` that understands the handful of scripts Sturdy uses.

    Unknown scripts return ``results.get(script)``.
    """

    def __init__(self, ready_state: str = "complete") -> None:
        super().__init__()
        self.ready_state = ready_state
        self.results: dict[str, Any] = {}
        self.history: list[tuple[str, tuple[Any, ...]]] = []

    async def run(self, script: str, *args: Any) -> Any:
        self._enter("run")
        self.history.append((script, args))
        if script == READY_STATE_SCRIPT:
            return self.ready_state
        if script == CLEAR_VALUE_SCRIPT:
            args[0].value = ""
            return None
        if script == SCROLL_INTO_VIEW_SCRIPT:
            args[0].scrolled_into_view = args[1]
            return None
        return self.results.get(script)


class InMemoryScreenshotService(_FailureQueue):
    """``ScreenshotService`` recording captures instead of writing files.

    Args:
        supported: When ``False``, ``capture`` returns ``None``.
    """

    def __init__(self, *, supported: bool = True) -> None:
        super().__init__()
        self.supported = supported
        self.captures: list[tuple[str | None, bool]] = []

    async def capture(self, name_prefix: str | None = None, is_failure: bool = False) -> str | None:
        self._enter("capture")
        if not self.supported:
            return None
        self.captures.append((name_prefix, is_failure))
        folder = "failed/" if is_failure else ""
        return f"memory://{folder}{name_prefix or 'screenshot'}.png"

"""Small element helpers used by the waiter and interaction layers."""

from __future__ import annotations

import logging

from sturdy.browser.driver import Element, ScriptRunner
from sturdy.core.taxonomy import is_transient

logger = logging.getLogger(__name__)

SCROLL_INTO_VIEW_SCRIPT = "(el, alignToTop) => el.scrollIntoView(alignToTop)"
CLEAR_VALUE_SCRIPT = "(el) => { el.value = ''; }"
READY_STATE_SCRIPT = "() => document.readyState"

# Fallback order for an element's visible text
_TEXT_ATTRIBUTES = ("aria-label", "title")


async def safe_displayed(element: Element) -> bool:
    """``is_displayed`` that reports transient failures as not displayed."""
    try:
        return await element.is_displayed()
    except Exception as exc:
        if is_transient(exc):
            return False
        raise


async def safe_enabled(element: Element) -> bool:
    try:
        return await element.is_enabled()
    except Exception as exc:
        if is_transient(exc):
            return False
        raise


async def is_clickable(element: Element) -> bool:
    """True if the element is displayed and enabled."""
    return await safe_displayed(element) and await safe_enabled(element)


async def visible_text(element: Element) -> str:
    """Rendered text, else ``aria-label``, else ``title``, else ``""``.

    Each source is trimmed; blank sources are skipped and transient read
    failures are treated as blank.
    """
    try:
        text = await element.text()
        if text and text.strip():
            return text.strip()
    except Exception as exc:
        if not is_transient(exc):
            raise

    for name in _TEXT_ATTRIBUTES:
        try:
            attr = await element.get_attribute(name)
        except Exception as exc:
            if not is_transient(exc):
                raise
            continue
        if attr and attr.strip():
            return attr.strip()
    return ""


async def scroll_element_into_view(
    script: ScriptRunner, element: Element, align_to_top: bool = True
) -> None:
    await script.run(SCROLL_INTO_VIEW_SCRIPT, element, align_to_top)


async def clear_element(script: ScriptRunner, element: Element) -> None:
    """Clear the element natively, falling back to a scripted value reset on any failure."""
    try:
        await element.clear()
    except Exception as exc:
        logger.debug("Native clear failed (%s), using script fallback", type(exc).__name__)
        await script.run(CLEAR_VALUE_SCRIPT, element)


async def set_text(
    script: ScriptRunner, element: Element, text: str | None, clear_before: bool = True
) -> None:
    """Optionally clear *element*, then type *text* (``None`` types nothing)."""
    if clear_before:
        await clear_element(script, element)
    await element.send_keys(text or "")

"""Playwright-backed AutomationHandle.

Wraps a Playwright sync ``Page`` that is attached to the application under
test over the Chrome DevTools Protocol. Locators are Playwright selector
strings: CSS by default, XPath when prefixed with ``xpath=``.
"""

from __future__ import annotations

import logging
from typing import Any, Callable

from workbenchqa.engine.protocols import wait_until
from workbenchqa.models import POLL_INTERVAL

logger = logging.getLogger("workbenchqa.engine.driver")


class PlaywrightHandle:
    """AutomationHandle over a Playwright page."""

    def __init__(self, page: Any, poll_interval: float = POLL_INTERVAL) -> None:
        self._page = page
        self._poll_interval = poll_interval

    @property
    def page(self) -> Any:
        return self._page

    def find_nodes(self, locator: str, root: Any = None) -> list[Any]:
        scope = self._page if root is None else root
        return list(scope.query_selector_all(locator))

    def find_node(self, locator: str, root: Any = None) -> Any | None:
        scope = self._page if root is None else root
        return scope.query_selector(locator)

    def get_attribute(self, node: Any, name: str) -> str | None:
        return node.get_attribute(name)

    def get_text(self, node: Any) -> str:
        return node.inner_text()

    def click(self, node: Any) -> None:
        node.click()

    def send_keys(self, node: Any, keys: str) -> None:
        # Playwright key syntax: "Home", "PageDown", "Control+a"
        node.press(keys)

    def read_clipboard(self) -> str:
        return self._page.evaluate("() => navigator.clipboard.readText()")

    def wait_until(self, predicate: Callable[[], Any], timeout: float, message: str = "") -> Any:
        logger.debug("Waiting up to %.1fs: %s", timeout, message or "predicate")
        return wait_until(predicate, timeout, message or "condition not met", self._poll_interval)

"""Bottom-panel views with a channel selector and a text area."""

from __future__ import annotations

import logging
from typing import Any

from workbenchqa.engine.navigation import ItemNotFound
from workbenchqa.engine.protocols import AutomationHandle
from workbenchqa.models import (
    CONTEXT_VIEW_LOCATOR,
    DEFAULT_WAIT_TIMEOUT,
    LIST_ROW_LOCATOR,
    OPTION_TEXT_LOCATOR,
)

logger = logging.getLogger("workbenchqa.engine.views")

SELECT_ALL = "ControlOrMeta+a"
COPY = "ControlOrMeta+c"


class ChannelView:
    """A view whose actions bar holds a channel selector combo."""

    root_locator: str = ""
    actions_label: str = ""

    def __init__(self, handle: AutomationHandle, wait_timeout: float = DEFAULT_WAIT_TIMEOUT) -> None:
        self._handle = handle
        self._wait_timeout = wait_timeout

    def element(self) -> Any:
        node = self._handle.find_node(self.root_locator)
        if node is None:
            raise ItemNotFound(self.root_locator)
        return node

    def _actions_bar(self) -> Any:
        bar = self._handle.find_node(f"ul[aria-label='{self.actions_label}']", root=self.element())
        if bar is None:
            raise ItemNotFound(self.actions_label)
        return bar

    def channel_names(self) -> list[str]:
        """Names of all selectable (not disabled) channels."""
        names: list[str] = []
        for option in self._handle.find_nodes("option", root=self._actions_bar()):
            if self._handle.get_attribute(option, "disabled") is None:
                names.append(self._handle.get_attribute(option, "value") or "")
        return names

    def _menu_rows(self) -> list[Any]:
        menu = self._handle.find_node(CONTEXT_VIEW_LOCATOR)
        if menu is None:
            return []
        return self._handle.find_nodes(LIST_ROW_LOCATOR, root=menu)

    def select_channel(self, name: str) -> None:
        """Select a channel through the combo's dropdown.

        Raises ItemNotFound if no enabled channel is called *name*.
        """
        combo = self._handle.find_node("select", root=self.element())
        if combo is None:
            raise ItemNotFound(self.actions_label)

        # A dropdown left open by a previous call swallows the first click
        if self._menu_rows():
            self._handle.click(combo)
            self._handle.wait_until(lambda: not self._menu_rows(), self._wait_timeout, "channel dropdown did not close")

        self._handle.click(combo)
        rows = self._handle.wait_until(self._menu_rows, self._wait_timeout, "channel dropdown did not open")
        for row in rows:
            if "disabled" in (self._handle.get_attribute(row, "class") or "").split():
                continue
            text_node = self._handle.find_node(OPTION_TEXT_LOCATOR, root=row)
            if text_node is not None and self._handle.get_text(text_node) == name:
                self._handle.click(row)
                logger.debug("Selected channel %r", name)
                return
        raise ItemNotFound(name)


class TextView(ChannelView):
    """A channel view with a read-only text area."""

    def text(self) -> str:
        """All text of the current channel, read through the clipboard."""
        textarea = self._handle.find_node("textarea", root=self.element())
        if textarea is None:
            raise ItemNotFound("textarea")
        self._handle.send_keys(textarea, SELECT_ALL)
        self._handle.send_keys(textarea, COPY)
        text = self._handle.read_clipboard()
        self._handle.click(textarea)
        return text

    def clear_text(self) -> None:
        button = self._handle.find_node(".clear-output", root=self._actions_bar())
        if button is None:
            raise ItemNotFound("clear-output")
        self._handle.click(button)


class OutputView(TextView):
    """The Output panel."""

    root_locator = "[id='workbench.panel.output']"
    actions_label = "Output actions"

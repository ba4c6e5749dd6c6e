"""Page objects for collapsible sections and the tree items inside them.

A ``Section`` is a titled pane of the side bar whose content is a
virtualized tree list. ``TreeItem`` is a lightweight value (label, section,
level): it never caches DOM nodes or children and re-reads the live UI on
every call, so an item obtained before an unrelated expand/collapse/scroll
is still safe to use as long as its row is materialized.
"""

from __future__ import annotations

import dataclasses
import enum
import logging
from typing import Any

from workbenchqa.engine.navigation import ItemNotFound, PathResolver, VirtualListNavigator
from workbenchqa.engine.protocols import AutomationHandle
from workbenchqa.models import (
    DEFAULT_WAIT_TIMEOUT,
    HEADER_ACTION_LOCATOR,
    KEY_HOME,
    KEY_PAGE_DOWN,
    LAST_ROW_LOCATOR,
    LIST_CONTAINER_LOCATOR,
    LIST_ROW_LOCATOR,
    PANEL_HEADER_LOCATOR,
    SECTION_PANE_LOCATOR,
    SECTION_TITLE_LOCATOR,
)

logger = logging.getLogger("workbenchqa.engine.tree")


class HeaderState(enum.Enum):
    """Visual state of a section header."""

    HIDDEN = "hidden"
    COLLAPSED = "collapsed"
    EXPANDED = "expanded"


def _row_level(handle: AutomationHandle, row: Any) -> int:
    raw = handle.get_attribute(row, "aria-level")
    try:
        return int(raw) if raw else 1
    except ValueError:
        return 1


def _row_label(handle: AutomationHandle, row: Any) -> str:
    return handle.get_attribute(row, "aria-label") or ""


# ---------------------------------------------------------------------------
# Section
# ---------------------------------------------------------------------------

class Section:
    """A collapsible content section of the side bar, found by title.

    Title matching is case-insensitive. Sections whose header is hidden
    (a view with a single section) treat ``expand``/``collapse`` as no-ops.
    """

    def __init__(
        self,
        handle: AutomationHandle,
        title: str,
        root: Any = None,
        wait_timeout: float = DEFAULT_WAIT_TIMEOUT,
    ) -> None:
        self._handle = handle
        self._title = title
        self._root = root
        self._wait_timeout = wait_timeout

    def __repr__(self) -> str:
        return f"Section({self._title!r})"

    @property
    def title(self) -> str:
        return self._title

    @property
    def handle(self) -> AutomationHandle:
        return self._handle

    @property
    def wait_timeout(self) -> float:
        return self._wait_timeout

    # -- Element lookup ------------------------------------------------------

    def element(self) -> Any:
        """Return the live pane node for this section."""
        wanted = self._title.lower()
        for pane in self._handle.find_nodes(SECTION_PANE_LOCATOR, root=self._root):
            title_node = self._handle.find_node(SECTION_TITLE_LOCATOR, root=pane)
            if title_node is not None and self._handle.get_text(title_node).strip().lower() == wanted:
                return pane
        raise ItemNotFound(self._title)

    def _header(self) -> Any | None:
        return self._handle.find_node(PANEL_HEADER_LOCATOR, root=self.element())

    def row_nodes(self) -> list[Any]:
        """Currently materialized row nodes, in display order."""
        container = self._handle.find_node(LIST_CONTAINER_LOCATOR, root=self.element())
        if container is None:
            return []
        return self._handle.find_nodes(LIST_ROW_LOCATOR, root=container)

    # -- Header state --------------------------------------------------------

    def header_state(self) -> HeaderState:
        header = self._header()
        if header is None:
            return HeaderState.HIDDEN
        classes = (self._handle.get_attribute(header, "class") or "").split()
        if "hidden" in classes:
            return HeaderState.HIDDEN
        if self._handle.get_attribute(header, "aria-expanded") == "true":
            return HeaderState.EXPANDED
        return HeaderState.COLLAPSED

    def is_expanded(self) -> bool:
        """True unless the header is shown and collapsed.

        A hidden header always shows its content.
        """
        return self.header_state() is not HeaderState.COLLAPSED

    def expand(self) -> None:
        """Expand the section if collapsed."""
        self._toggle_to(HeaderState.EXPANDED)

    def collapse(self) -> None:
        """Collapse the section if expanded."""
        self._toggle_to(HeaderState.COLLAPSED)

    def _toggle_to(self, target: HeaderState) -> None:
        state = self.header_state()
        if state is HeaderState.HIDDEN or state is target:
            return
        self._handle.click(self._header())
        self._handle.wait_until(
            lambda: self.header_state() is target,
            self._wait_timeout,
            f"section {self._title!r} did not become {target.value}",
        )
        logger.debug("Section %r is now %s", self._title, target.value)

    # -- Items ---------------------------------------------------------------

    def list_container(self) -> SectionList:
        return SectionList(self)

    def visible_items(self) -> list[TreeItem]:
        """Items currently materialized in the section.

        Items beyond the scrolled window are not returned.
        """
        return self.list_container().materialized_rows()

    def find_item(self, label: str, max_level: int = 0) -> TreeItem | None:
        """Find an item by label, scrolling through all expanded content.

        Does not expand tree nodes. ``max_level`` limits how deep the match
        may sit (0 means unlimited).
        """
        self.expand()
        return VirtualListNavigator(self.list_container(), self._wait_timeout).locate(label, max_level)

    def open_item(self, *path: str) -> list[TreeItem]:
        """Open the item at *path* and return its children.

        e.g. ``open_item("folder", "file")`` opens ``file`` inside ``folder``.
        Returns an empty list when the last reachable item is a leaf.
        """
        self.expand()
        return PathResolver(self._wait_timeout).open_path(self.list_container(), path)

    # -- Header actions ------------------------------------------------------

    def actions(self) -> list[SectionAction]:
        """Action buttons on the section header; empty if the header is hidden."""
        if self.header_state() is HeaderState.HIDDEN:
            return []
        header = self._header()
        return [
            SectionAction(self._handle.get_attribute(node, "title") or "", self)
            for node in self._handle.find_nodes(HEADER_ACTION_LOCATOR, root=header)
        ]

    def action(self, label: str) -> SectionAction:
        return SectionAction(label, self)


@dataclasses.dataclass(frozen=True)
class SectionAction:
    """An action button on a section header, identified by its title."""

    label: str
    section: Section = dataclasses.field(compare=False, repr=False)

    def click(self) -> None:
        handle = self.section.handle
        header = handle.find_node(PANEL_HEADER_LOCATOR, root=self.section.element())
        if header is not None:
            for node in handle.find_nodes(HEADER_ACTION_LOCATOR, root=header):
                if handle.get_attribute(node, "title") == self.label:
                    handle.click(node)
                    return
        raise ItemNotFound(self.label)


# ---------------------------------------------------------------------------
# SectionList -- the ListContainer for a section's tree
# ---------------------------------------------------------------------------

class SectionList:
    """Virtualized row list of a Section.

    ``Home`` resets the scroll window, ``PageDown`` advances it, and the row
    carrying ``data-last-element='true'`` is the end-of-list sentinel.
    """

    def __init__(self, section: Section) -> None:
        self._section = section
        self._handle = section.handle

    def _container(self) -> Any:
        container = self._handle.find_node(LIST_CONTAINER_LOCATOR, root=self._section.element())
        if container is None:
            raise ItemNotFound(self._section.title)
        return container

    def materialized_rows(self) -> list[TreeItem]:
        return [
            TreeItem(_row_label(self._handle, row), self._section, _row_level(self._handle, row))
            for row in self._section.row_nodes()
        ]

    def scroll_to_top(self) -> None:
        self._handle.send_keys(self._container(), KEY_HOME)

    def page_forward(self) -> None:
        self._handle.send_keys(self._container(), KEY_PAGE_DOWN)

    def end_reached(self) -> bool:
        return self._handle.find_node(LAST_ROW_LOCATOR, root=self._container()) is not None


# ---------------------------------------------------------------------------
# TreeItem
# ---------------------------------------------------------------------------

@dataclasses.dataclass(frozen=True)
class TreeItem:
    """A row in a section's tree, identified by (label, section, level).

    Labels are only unique among siblings. Items returned by ``children()``
    keep their parent and resolve their row beneath the parent's row; an
    item without a parent matches the first row with its label and level.
    """

    label: str
    section: Section = dataclasses.field(compare=False, repr=False)
    level: int = 1
    parent: TreeItem | None = dataclasses.field(default=None, compare=False, repr=False)

    def _index(self, rows: list[Any]) -> int:
        handle = self.section.handle
        start, floor = 0, 0
        if self.parent is not None:
            start, floor = self.parent._index(rows) + 1, self.parent.level
        for i in range(start, len(rows)):
            level = _row_level(handle, rows[i])
            if level <= floor:
                break
            if level == self.level and _row_label(handle, rows[i]) == self.label:
                return i
        raise ItemNotFound(self.label)

    def _node(self) -> Any:
        rows = self.section.row_nodes()
        return rows[self._index(rows)]

    def has_children(self) -> bool:
        # Only expandable rows carry aria-expanded
        return self.section.handle.get_attribute(self._node(), "aria-expanded") is not None

    def is_expanded(self) -> bool:
        return self.section.handle.get_attribute(self._node(), "aria-expanded") == "true"

    def tooltip(self) -> str:
        return self.section.handle.get_attribute(self._node(), "title") or ""

    def expand(self) -> None:
        if self.has_children() and not self.is_expanded():
            self._toggle(expanded=True)

    def collapse(self) -> None:
        if self.has_children() and self.is_expanded():
            self._toggle(expanded=False)

    def _toggle(self, expanded: bool) -> None:
        handle = self.section.handle
        handle.click(self._node())
        handle.wait_until(
            lambda: self.is_expanded() is expanded,
            self.section.wait_timeout,
            f"item {self.label!r} did not {'expand' if expanded else 'collapse'}",
        )

    def select(self) -> list[TreeItem]:
        """Click the item; return its children once expanded (empty for a leaf)."""
        handle = self.section.handle
        expandable = self.has_children()
        handle.click(self._node())
        if not expandable:
            return []
        handle.wait_until(
            self.is_expanded,
            self.section.wait_timeout,
            f"item {self.label!r} did not expand",
        )
        return self.children()

    def children(self) -> list[TreeItem]:
        """Immediate children among the currently materialized rows."""
        handle = self.section.handle
        rows = self.section.row_nodes()
        children: list[TreeItem] = []
        for row in rows[self._index(rows) + 1:]:
            level = _row_level(handle, row)
            if level <= self.level:
                break
            if level == self.level + 1:
                children.append(TreeItem(_row_label(handle, row), self.section, level, self))
        return children

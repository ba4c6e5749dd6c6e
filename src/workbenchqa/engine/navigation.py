"""Virtualized-list item resolution and hierarchical path navigation.

``VirtualListNavigator`` finds a row by label in a list that only
materializes its scrolled window: it rewinds to the top, scans the window,
and pages forward until the row appears or the end-of-list sentinel is seen.
There is no iteration cap; the loop is bounded by the list's real length.

``PathResolver`` walks a sequence of labels down a tree of expandable rows,
one level per label, and stops early at a leaf.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Sequence

from workbenchqa.engine.protocols import ListContainer, OperationTimeout, wait_until

if TYPE_CHECKING:
    from workbenchqa.engine.tree import TreeItem

logger = logging.getLogger("workbenchqa.engine.navigation")


class ItemNotFound(Exception):
    """Raised when a requested label cannot be resolved.

    ``label`` is the label that was asked for, not the last one resolved.
    """

    def __init__(self, label: str) -> None:
        super().__init__(f"Item {label!r} not found")
        self.label = label


class VirtualListNavigator:
    """Resolves labels inside one virtualized list container."""

    def __init__(self, container: ListContainer, settle_timeout: float = 0.0) -> None:
        self._container = container
        self._settle_timeout = settle_timeout

    def locate(self, label: str, max_level: int = 0) -> TreeItem | None:
        """Return the first row labelled *label* within *max_level*, or None.

        ``max_level`` of 0 accepts any depth. A row with the right label but
        too deep does not stop the search. An empty first window is given
        up to ``settle_timeout`` seconds to render. Scrolls the container as
        a side effect.
        """
        self._container.scroll_to_top()
        rows = self._first_window()
        pages = 0
        while True:
            for row in rows:
                if row.label == label and (max_level == 0 or row.level <= max_level):
                    logger.debug("Located %r at level %d after %d page(s)", label, row.level, pages)
                    return row
            # An empty list never shows the sentinel
            if not rows or self._container.end_reached():
                logger.debug("%r not found; end of list reached after %d page(s)", label, pages)
                return None
            self._container.page_forward()
            pages += 1
            rows = self._container.materialized_rows()

    def _first_window(self) -> list[TreeItem]:
        # A list that is still rendering has no rows yet and no sentinel either
        try:
            return wait_until(self._container.materialized_rows, self._settle_timeout, "list rows did not render")
        except OperationTimeout:
            return []

    def require(self, label: str, max_level: int = 0) -> TreeItem:
        """Like ``locate`` but raises ItemNotFound instead of returning None."""
        item = self.locate(label, max_level)
        if item is None:
            raise ItemNotFound(label)
        return item


class PathResolver:
    """Opens a path of labels in a tree list, one level per label."""

    def __init__(self, settle_timeout: float = 0.0) -> None:
        self._settle_timeout = settle_timeout

    def open_path(self, root: ListContainer, labels: Sequence[str]) -> list[TreeItem]:
        """Open the item at *labels* and return its immediate children.

        The first label is matched among top-level rows only (level 1). Each
        later label is matched among the children returned by selecting its
        parent. If a leaf is reached before the path is consumed, the empty
        list is returned and the remaining labels are ignored.

        Raises:
            ValueError: if *labels* is empty.
            ItemNotFound: if a label along the path does not exist.
        """
        if not labels:
            raise ValueError("open_path requires at least one label")

        current = VirtualListNavigator(root, self._settle_timeout).locate(labels[0], max_level=1)
        items: list[TreeItem] = []

        for i, label in enumerate(labels):
            if current is None:
                raise ItemNotFound(label)
            # Collapse first so selecting re-expands from a known state
            if current.has_children() and current.is_expanded():
                current.collapse()
            items = current.select()
            if not items:
                if i + 1 < len(labels):
                    logger.debug("Leaf %r reached; ignoring remaining path %s", label, list(labels[i + 1:]))
                return items
            if i + 1 < len(labels):
                next_label = labels[i + 1]
                current = next((item for item in items if item.label == next_label), None)

        return items

"""Unit tests for workbenchqa.engine.navigation -- label lookup and path opening."""

from __future__ import annotations

import time

import pytest

from fakes import Entry, FakePane, leaves, make_section_handle
from workbenchqa.engine.navigation import ItemNotFound, PathResolver, VirtualListNavigator
from workbenchqa.engine.tree import Section
from workbenchqa.models import KEY_HOME


def _make_section(entries: list[Entry], page_size: int = 10) -> tuple[Section, object]:
    pane = FakePane("Explorer", entries, page_size=page_size)
    handle = make_section_handle(pane)
    return Section(handle, "Explorer", wait_timeout=0.2), handle


def _make_navigator(entries: list[Entry], page_size: int = 10):
    section, handle = _make_section(entries, page_size)
    return VirtualListNavigator(section.list_container()), handle


# ---------------------------------------------------------------------------
# 1. VirtualListNavigator.locate() -- paging
# ---------------------------------------------------------------------------

class TestLocatePaging:
    """locate() should page forward only as far as needed."""

    def test_finds_item_in_first_window_without_paging(self):
        navigator, handle = _make_navigator(leaves("file", 30))
        item = navigator.locate("file03")
        assert item is not None
        assert item.label == "file03"
        assert handle.page_downs() == 0

    def test_rewinds_to_top_before_scanning(self):
        navigator, handle = _make_navigator(leaves("file", 30))
        navigator.locate("file03")
        assert handle.keys[0] == KEY_HOME

    def test_nested_target_on_third_page_needs_two_page_forwards(self):
        """30 rows, 10 per page, target is row 25 at depth 2."""
        entries = leaves("top", 24)
        entries.append(Entry("folder", [Entry("target")] + leaves("inner", 4), expanded=True))
        navigator, handle = _make_navigator(entries)

        item = navigator.locate("target", max_level=2)

        assert item is not None
        assert item.label == "target"
        assert item.level == 2
        assert handle.page_downs() == 2

    def test_later_lookup_starts_from_the_top_again(self):
        navigator, handle = _make_navigator(leaves("file", 30))
        navigator.locate("file25")
        navigator.locate("file01")
        assert handle.keys.count(KEY_HOME) == 2
        assert handle.page_downs() == 2


# ---------------------------------------------------------------------------
# 2. VirtualListNavigator.locate() -- not found
# ---------------------------------------------------------------------------

class TestLocateNotFound:
    """A missing label is reported only once the end-of-list sentinel is seen."""

    def test_absent_label_returns_none_after_reaching_the_end(self):
        navigator, handle = _make_navigator(leaves("file", 30))
        assert navigator.locate("nope") is None
        assert handle.page_downs() == 2

    @pytest.mark.parametrize("length, page_size", [(25, 10), (30, 10), (7, 10), (41, 8)])
    def test_page_forwards_bounded_by_list_length(self, length: int, page_size: int):
        navigator, handle = _make_navigator(leaves("file", length), page_size=page_size)
        navigator.locate("nope")
        pages = -(-length // page_size)
        assert handle.page_downs() == pages - 1

    def test_no_page_forward_after_the_sentinel_is_visible(self):
        navigator, handle = _make_navigator(leaves("file", 5))
        assert navigator.locate("nope") is None
        assert handle.page_downs() == 0

    def test_empty_list_returns_none(self):
        navigator, handle = _make_navigator([])
        assert navigator.locate("anything") is None
        assert handle.page_downs() == 0

    def test_require_raises_with_requested_label(self):
        navigator, _ = _make_navigator(leaves("file", 12))
        with pytest.raises(ItemNotFound) as excinfo:
            navigator.require("ghost.txt")
        assert excinfo.value.label == "ghost.txt"
        assert "ghost.txt" in str(excinfo.value)


# ---------------------------------------------------------------------------
# 3. VirtualListNavigator.locate() -- max_level
# ---------------------------------------------------------------------------

class TestLocateMaxLevel:
    """max_level filters matches by depth; 0 means unconstrained."""

    def _entries(self) -> list[Entry]:
        nested = Entry("src", [Entry("dup"), Entry("other")], expanded=True)
        return [nested] + leaves("pad", 10) + [Entry("dup")]

    def test_zero_accepts_first_match_at_any_depth(self):
        navigator, _ = _make_navigator(self._entries())
        item = navigator.locate("dup", max_level=0)
        assert item.level == 2

    def test_duplicate_labels_disambiguated_by_max_level(self):
        navigator, _ = _make_navigator(self._entries())
        item = navigator.locate("dup", max_level=1)
        assert item is not None
        assert item.level == 1

    def test_match_only_too_deep_is_not_found(self):
        entries = [Entry("src", [Entry("deep")], expanded=True)] + leaves("pad", 3)
        navigator, _ = _make_navigator(entries)
        assert navigator.locate("deep", max_level=1) is None

    def test_exact_level_is_accepted(self):
        entries = [Entry("src", [Entry("deep")], expanded=True)]
        navigator, _ = _make_navigator(entries)
        assert navigator.locate("deep", max_level=2).level == 2


# ---------------------------------------------------------------------------
# 4. PathResolver.open_path()
# ---------------------------------------------------------------------------

class TestOpenPath:
    """open_path() walks one level per label and returns the final children."""

    def _entries(self) -> list[Entry]:
        return [
            Entry("folder", [
                Entry("sub", [Entry("deep.txt")]),
                Entry("x.txt"),
            ]),
            Entry("a.txt"),
            Entry("empty", []),
        ]

    def test_single_label_returns_children(self):
        section, _ = _make_section(self._entries())
        children = PathResolver().open_path(section.list_container(), ["folder"])
        assert [c.label for c in children] == ["sub", "x.txt"]
        assert all(c.level == 2 for c in children)

    def test_nested_path_returns_grandchildren(self):
        section, _ = _make_section(self._entries())
        children = PathResolver().open_path(section.list_container(), ["folder", "sub"])
        assert [c.label for c in children] == ["deep.txt"]
        assert children[0].level == 3

    def test_leaf_returns_empty(self):
        section, _ = _make_section(self._entries())
        assert PathResolver().open_path(section.list_container(), ["a.txt"]) == []

    def test_leaf_short_circuits_remaining_labels(self):
        section, _ = _make_section(self._entries())
        assert PathResolver().open_path(section.list_container(), ["a.txt", "b"]) == []

    def test_expandable_without_children_returns_empty(self):
        section, _ = _make_section(self._entries())
        assert PathResolver().open_path(section.list_container(), ["empty", "whatever"]) == []

    def test_missing_child_raises_with_requested_label(self):
        section, _ = _make_section(self._entries())
        with pytest.raises(ItemNotFound) as excinfo:
            PathResolver().open_path(section.list_container(), ["folder", "missing.txt"])
        assert excinfo.value.label == "missing.txt"

    def test_missing_first_label_raises(self):
        section, _ = _make_section(self._entries())
        with pytest.raises(ItemNotFound) as excinfo:
            PathResolver().open_path(section.list_container(), ["nowhere"])
        assert excinfo.value.label == "nowhere"

    def test_first_label_only_matches_top_level(self):
        section, _ = _make_section([Entry("folder", [Entry("inner")], expanded=True)])
        with pytest.raises(ItemNotFound):
            PathResolver().open_path(section.list_container(), ["inner"])

    def test_empty_path_raises_value_error(self):
        section, _ = _make_section(self._entries())
        with pytest.raises(ValueError):
            PathResolver().open_path(section.list_container(), [])


# ---------------------------------------------------------------------------
# 5. PathResolver.open_path() -- collapse before select
# ---------------------------------------------------------------------------

class TestOpenPathNormalizesExpansion:
    """An already-expanded item gives the same result as a collapsed one."""

    def test_already_expanded_folder_yields_same_children(self):
        collapsed, _ = _make_section([Entry("folder", [Entry("a"), Entry("b")])])
        expanded, _ = _make_section([Entry("folder", [Entry("a"), Entry("b")], expanded=True)])

        from_collapsed = PathResolver().open_path(collapsed.list_container(), ["folder"])
        from_expanded = PathResolver().open_path(expanded.list_container(), ["folder"])

        assert [c.label for c in from_collapsed] == [c.label for c in from_expanded] == ["a", "b"]

    def test_folder_is_left_expanded(self):
        entries = [Entry("folder", [Entry("a")], expanded=True)]
        section, _ = _make_section(entries)
        PathResolver().open_path(section.list_container(), ["folder"])
        assert entries[0].expanded is True

    def test_expanded_folder_is_clicked_twice(self):
        section, handle = _make_section([Entry("folder", [Entry("a")], expanded=True)])
        PathResolver().open_path(section.list_container(), ["folder"])
        assert len(handle.clicks) == 2


# ---------------------------------------------------------------------------
# 6. Labels repeated under sibling folders
# ---------------------------------------------------------------------------

class TestOpenPathRepeatedLabels:
    """A child label shared by sibling folders resolves under the right parent."""

    def _entries(self) -> list[Entry]:
        return [
            Entry("a", [Entry("src", [Entry("a_only.py")], expanded=True)], expanded=True),
            Entry("b", [Entry("src", [Entry("b_only.py")])]),
        ]

    def test_second_folder_child_is_opened(self):
        entries = self._entries()
        section, _ = _make_section(entries)

        children = PathResolver().open_path(section.list_container(), ["b", "src"])

        assert [c.label for c in children] == ["b_only.py"]
        assert entries[1].children[0].expanded is True
        assert entries[0].children[0].expanded is True

    def test_first_folder_child_is_opened(self):
        section, _ = _make_section(self._entries())
        children = PathResolver().open_path(section.list_container(), ["a", "src"])
        assert [c.label for c in children] == ["a_only.py"]

    def test_returned_children_keep_their_parent(self):
        section, _ = _make_section(self._entries())
        children = PathResolver().open_path(section.list_container(), ["b"])
        assert [c.label for c in children] == ["src"]
        assert children[0].parent.label == "b"
        assert children[0].has_children() is True
        assert children[0].is_expanded() is False


# ---------------------------------------------------------------------------
# 7. Lists that are still rendering
# ---------------------------------------------------------------------------

class TestLocateWaitsForRows:
    """An empty first window is given time to render before giving up."""

    def test_rows_rendered_late_are_found(self):
        pane = FakePane("Explorer", leaves("file", 5))
        ready_at = time.monotonic() + 0.05
        pane.list._shown = lambda: time.monotonic() >= ready_at
        section = Section(make_section_handle(pane), "Explorer", wait_timeout=0.2)

        item = VirtualListNavigator(section.list_container(), settle_timeout=2).locate("file03")

        assert item is not None
        assert item.label == "file03"

    def test_list_that_stays_empty_returns_none(self):
        pane = FakePane("Explorer", [])
        section = Section(make_section_handle(pane), "Explorer", wait_timeout=0.2)
        assert VirtualListNavigator(section.list_container(), settle_timeout=0.05).locate("file03") is None

    def test_section_find_item_waits_for_rows(self):
        pane = FakePane("Explorer", leaves("file", 5))
        ready_at = time.monotonic() + 0.05
        pane.list._shown = lambda: time.monotonic() >= ready_at
        section = Section(make_section_handle(pane), "Explorer", wait_timeout=2)
        assert section.find_item("file01") is not None

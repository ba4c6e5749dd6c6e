"""Unit tests for workbenchqa.engine.views -- channel selection and text views."""

from __future__ import annotations

import pytest

from fakes import FakeHandle, FakeOutputPanel
from workbenchqa.engine.navigation import ItemNotFound
from workbenchqa.engine.views import COPY, SELECT_ALL, OutputView


def _make_view(channels=("Tasks", "Git", "Extensions"), disabled=(), clipboard=""):
    panel = FakeOutputPanel(list(channels), disabled=disabled, clipboard=clipboard)
    return OutputView(panel.handle, wait_timeout=0.2), panel


# ---------------------------------------------------------------------------
# 1. Channel names
# ---------------------------------------------------------------------------

class TestChannelNames:

    def test_lists_all_channels(self):
        view, _ = _make_view()
        assert view.channel_names() == ["Tasks", "Git", "Extensions"]

    def test_skips_disabled_channels(self):
        view, _ = _make_view(disabled=("Git",))
        assert view.channel_names() == ["Tasks", "Extensions"]

    def test_missing_panel_raises(self):
        view = OutputView(FakeHandle())
        with pytest.raises(ItemNotFound):
            view.channel_names()


# ---------------------------------------------------------------------------
# 2. select_channel()
# ---------------------------------------------------------------------------

class TestSelectChannel:
    """select_channel() opens the dropdown and clicks the matching row."""

    def test_selects_named_channel(self):
        view, panel = _make_view()
        view.select_channel("Git")
        assert panel.menu.selected == "Git"
        assert panel.menu.open is False

    def test_closes_dropdown_left_open(self):
        view, panel = _make_view()
        panel.menu.open = True
        view.select_channel("Extensions")
        assert panel.menu.selected == "Extensions"

    def test_unknown_channel_raises(self):
        view, _ = _make_view()
        with pytest.raises(ItemNotFound) as excinfo:
            view.select_channel("Nope")
        assert excinfo.value.label == "Nope"

    def test_disabled_channel_is_not_selectable(self):
        view, panel = _make_view(disabled=("Git",))
        with pytest.raises(ItemNotFound):
            view.select_channel("Git")
        assert panel.menu.selected is None


# ---------------------------------------------------------------------------
# 3. Text area
# ---------------------------------------------------------------------------

class TestTextView:

    def test_text_reads_through_clipboard(self):
        view, panel = _make_view(clipboard="[info] build finished")
        assert view.text() == "[info] build finished"
        assert panel.handle.keys == [SELECT_ALL, COPY]
        # Click clears the selection
        assert panel.handle.clicks == [panel.textarea]

    def test_clear_text_clicks_clear_button(self):
        view, panel = _make_view()
        view.clear_text()
        assert panel.handle.clicks == [panel.clear_button]

"""Tests for the runtime trace category filter."""
from __future__ import annotations

import pytest

import debug_trace
from debug_trace import category_enabled, parse_trace_setting


class TestParseTraceSetting:
    @pytest.mark.parametrize("value", ["", "0", "  "])
    def test_off(self, value):
        assert parse_trace_setting(value) is None

    def test_on(self):
        assert parse_trace_setting("1") == frozenset()

    def test_all(self):
        assert parse_trace_setting("ALL") == frozenset({"*"})

    def test_category_list(self):
        assert parse_trace_setting("map, tool,") == frozenset({"MAP", "TOOL"})


class TestCategoryEnabled:
    def test_default_skips_zoom(self):
        selected = parse_trace_setting("1")
        assert category_enabled("MAP", selected)
        assert not category_enabled("ZOOM", selected)

    def test_all_includes_zoom(self):
        assert category_enabled("ZOOM", parse_trace_setting("all"))

    def test_listed_categories_only(self):
        selected = parse_trace_setting("MAP")
        assert category_enabled("MAP", selected)
        assert not category_enabled("TOOL", selected)
        assert category_enabled("ERROR", selected)


class TestTrace:
    def test_lines_written_to_log(self, tmp_path, monkeypatch, capsys):
        monkeypatch.setattr(debug_trace, "DEBUG_TRACE", True)
        monkeypatch.setattr(debug_trace, "TRACE_CATEGORIES", frozenset({"MAP"}))
        monkeypatch.setattr(debug_trace, "log_path", lambda: tmp_path / "logs" / "trace.log")
        debug_trace.close_log()

        debug_trace.trace("map built", "MAP")
        debug_trace.trace("tool selected", "TOOL")
        debug_trace.close_log()

        text = (tmp_path / "logs" / "trace.log").read_text(encoding="utf-8")
        assert "[MAP] map built" in text
        assert "tool selected" not in text
        assert "[MAP] map built" in capsys.readouterr().err

    def test_disabled(self, monkeypatch, capsys):
        monkeypatch.setattr(debug_trace, "DEBUG_TRACE", False)
        debug_trace.trace("quiet", "MAP")
        assert capsys.readouterr().err == ""

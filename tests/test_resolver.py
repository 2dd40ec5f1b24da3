"""Tests for the render() literal scan."""

from __future__ import annotations

import pytest
from lsprotocol import types as lsp

from yii2nav.resolver import (
    RenderCallMatch,
    find_render_calls,
    match_render_call,
    resolve_render_call,
)

LINE = "        return $this->render('index', array());"


def test_cursor_inside_literal() -> None:
    col = LINE.index("index") + 2
    match = match_render_call(LINE, col)
    assert match is not None
    assert match.view_name == "index"
    assert match.start_col <= col <= match.end_col


@pytest.mark.parametrize("offset", [0, len("index")])
def test_span_is_inclusive_at_both_ends(offset: int) -> None:
    start = LINE.index("index")
    match = match_render_call(LINE, start + offset)
    assert match is not None and match.view_name == "index"


def test_cursor_outside_literal() -> None:
    assert match_render_call(LINE, LINE.index("return")) is None
    assert match_render_call(LINE, LINE.index("array")) is None


def test_double_quotes_and_loose_whitespace() -> None:
    line = '$this -> render (  "//site/error" );'
    (match,) = find_render_calls(line)
    assert match.view_name == "//site/error"
    assert line[match.start_col : match.end_col] == "//site/error"


def test_partial_and_ajax_variants() -> None:
    line = "$this->renderPartial('_form'); $this->renderAjax(\"_list\");"
    assert [m.view_name for m in find_render_calls(line)] == ["_form", "_list"]


def test_second_call_on_same_line() -> None:
    line = "$a = $this->render('one'); $b = $this->render('two');"
    match = match_render_call(line, line.index("two") + 1, line_index=7)
    assert match == RenderCallMatch("two", line.index("two"), line.index("two") + 3, 7)


def test_variable_argument_is_ignored() -> None:
    assert find_render_calls("$this->render($view, []);") == []


def test_mismatched_quotes_do_not_match() -> None:
    assert find_render_calls("$this->render('index\");") == []


def test_other_receivers_are_ignored() -> None:
    assert find_render_calls("$controller->render('index');") == []


def test_resolve_uses_requested_line() -> None:
    text = "<?php\n" + LINE + "\n"
    match = resolve_render_call(text, lsp.Position(line=1, character=LINE.index("index")))
    assert match is not None
    assert match.line_index == 1
    assert match.view_name == "index"


def test_resolve_line_out_of_range() -> None:
    assert resolve_render_call(LINE, lsp.Position(line=3, character=0)) is None


def test_resolve_character_beyond_line() -> None:
    line = "$this->render('x')"
    assert resolve_render_call(line, lsp.Position(line=0, character=len(line) + 5)) is None


def test_resolve_counts_utf16_units() -> None:
    # the emoji is one str character but two UTF-16 code units
    line = "/* \U0001F600 */ $this->render('index');"
    col = line.index("index")
    utf16_col = col + 1

    match = resolve_render_call(line, lsp.Position(line=0, character=utf16_col))
    assert match is not None
    assert match.view_name == "index"

    # the end of "index" in str columns is one short of the UTF-16 position
    assert resolve_render_call(line, lsp.Position(line=0, character=col + len("index") + 2)) is None

"""
Locate the render() view-name literal under the editor cursor.

The scan is line based and lexical: a render call is expected to keep its
first argument on the same line as the call, and only literal view names
are understood.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from lsprotocol import types as lsp
from pygls.workspace import PositionCodec

# $this->render('view'...), $this->renderPartial("view"...), $this->renderAjax(...)
RENDER_CALL_PATTERN = re.compile(
    r"\$this\s*->\s*render(?:Partial|Ajax)?\s*\(\s*(?P<quote>['\"])(?P<name>[^'\"]+)(?P=quote)"
)

_codec = PositionCodec(lsp.PositionEncodingKind.Utf16)


@dataclass(frozen=True)
class RenderCallMatch:
    """A view-name literal found on a line.

    Columns are string indices into the line. ``start_col`` is the first
    character of the unquoted name and ``end_col`` the index just past it;
    both ends are treated as part of the span.
    """

    view_name: str
    start_col: int
    end_col: int
    line_index: int = 0

    def contains(self, column: int) -> bool:
        return self.start_col <= column <= self.end_col


def find_render_calls(line: str, line_index: int = 0) -> list[RenderCallMatch]:
    """Return every render call with a literal first argument on a line."""
    return [
        RenderCallMatch(
            view_name=m.group("name"),
            start_col=m.start("name"),
            end_col=m.end("name"),
            line_index=line_index,
        )
        for m in RENDER_CALL_PATTERN.finditer(line)
    ]


def match_render_call(line: str, column: int, line_index: int = 0) -> RenderCallMatch | None:
    """Return the first render-call literal whose span contains ``column``."""
    for match in find_render_calls(line, line_index):
        if match.contains(column):
            return match
    return None


def resolve_render_call(text: str, position: lsp.Position) -> RenderCallMatch | None:
    """
    Find the view-name literal at an editor position.

    Args:
        text: Full document text
        position: Zero-based position, ``character`` in UTF-16 code units

    Returns:
        The match under the cursor, or None.
    """
    lines = text.split("\n")
    if position.line < 0 or position.line >= len(lines):
        return None

    line = lines[position.line]
    if position.character < 0 or position.character > _codec.client_num_units(line):
        return None

    column = _codec.position_from_client_units(lines, position).character
    return match_render_call(line, column, position.line)

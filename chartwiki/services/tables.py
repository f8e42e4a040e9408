#!/usr/bin/env python
#
#
# -----------------------------------------------------------------------------
"""
Table rows
==========
Converts one ``|``-delimited table row into a ``<tr>``.

Cell syntax
-----------
|a|b|            — cells; a trailing bar is optional
|a|||b|          — empty cells widen the next cell (b gets colspan="3")
| a |            — padded both sides: centred  (class="c")
| a|             — leading space only: right   (class="r")
|a |  |a|        — otherwise left              (class="l")
@width:120  @height:40  @bg:ffeecc  @font:333333  @size:14
                 — per-cell style directives, each optional, first one wins
@newline         — line break inside a cell
|! head | row |  — header row: <th>, always centred
"""
# -----------------------------------------------------------------------------

from __future__ import annotations

import re
from typing import Optional

from chartwiki.services.inline import parse_inline


# -----------------------------------------------------------------------------

FONT_SIZE_MIN      = 10
FONT_SIZE_MAX      = 30
FONT_SIZE_OVERFLOW = 20     # sizes above FONT_SIZE_MAX fall back to this, not to the max

_WIDTH_RE     = re.compile(r"@width:(\d+)", re.IGNORECASE)
_HEIGHT_RE    = re.compile(r"@height:(\d+)", re.IGNORECASE)
_BG_RE        = re.compile(r"@bg:([a-f0-9]{6})", re.IGNORECASE)
_FONT_RE      = re.compile(r"@font:([a-f0-9]{6})", re.IGNORECASE)
_FONT_SIZE_RE = re.compile(r"@size:(\d+)", re.IGNORECASE)


# -----------------------------------------------------------------------------

def _take(pattern: re.Pattern, text: str) -> tuple[Optional[str], str]:
    """Return the first capture of *pattern* in *text* and *text* without that match."""
    m = pattern.search(text)
    if m is None:
        return None, text
    return m.group(1), text[:m.start()] + text[m.end():]


def clamp_font_size(size: int) -> int:
    if size < FONT_SIZE_MIN:
        return FONT_SIZE_MIN
    if size > FONT_SIZE_MAX:
        return FONT_SIZE_OVERFLOW
    return size


def _cell_alignment(text: str) -> str:
    leading  = text.startswith(" ")
    trailing = text.endswith(" ")
    if leading and trailing:
        return "c"
    if leading:
        return "r"
    return "l"


def _render_cell(cell: str, tag: str, colspan: int, head: bool) -> str:
    style = ""

    width, cell = _take(_WIDTH_RE, cell)
    if width is not None:
        style += f"width:{width}px;"

    height, cell = _take(_HEIGHT_RE, cell)
    if height is not None:
        style += f"height:{height}px;"

    bg, cell = _take(_BG_RE, cell)
    if bg is not None:
        style += f"background-color:#{bg};"

    font, cell = _take(_FONT_RE, cell)
    if font is not None:
        style += f"color:#{font};"

    size, cell = _take(_FONT_SIZE_RE, cell)
    if size is not None:
        style += f"font-size:{clamp_font_size(int(size))}px;"

    align = "c" if head else _cell_alignment(cell)

    attrs: list[str] = []
    if colspan > 1:
        attrs.append(f'colspan="{colspan}"')
    attrs.append(f'class="{align}"')
    if style:
        attrs.append(f'style="{style}"')

    body = parse_inline(cell.strip(), auto_float=False).replace("@newline", "<br/>")
    return f"<{tag} {' '.join(attrs)}>{body}</{tag}>"


# -----------------------------------------------------------------------------

def parse_table_row(line: str, *, head: bool = False) -> str:
    """
    Render one table row.  *line* is the row text with its leading ``|`` (or
    ``|!`` for header rows) already removed.

    Returns ``""`` for a header row with fewer than two non-empty cells, and
    for a row that produces no cells.
    """
    stripped = line.rstrip()
    # Normalise so the row always ends with exactly one terminating bar; the
    # empty piece after it is discounted from a trailing colspan run below.
    pieces = stripped.split("|") if stripped.endswith("|") else f"{line}|".split("|")

    if head and sum(1 for piece in pieces if piece) < 2:
        return ""

    tag  = "th" if head else "td"
    row: list[str] = []
    span = 0

    for cell in pieces:
        if not cell:
            span += 1
            continue
        row.append(_render_cell(cell, tag, span + 1, head))
        span = 0

    if span > 1:
        row.append(f'<{tag} colspan="{span - 1}"></{tag}>')

    return f"<tr>{''.join(row)}</tr>" if row else ""


# -----------------------------------------------------------------------------

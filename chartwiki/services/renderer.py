#!/usr/bin/env python
#
#
# -----------------------------------------------------------------------------
"""
Wiki renderer
=============
Converts wiki source to HTML in a single pass over its lines.

Supported block syntax
----------------------
= H1  /  == H2 ==  /  ... / ==== H4 ====      — headings (deeper runs cap at h4)
* item                                        — unordered list
|-  /  |-right  /  |-fright  /  |-center      — open a table (layout variant)
|! head | cells |                             — header row
| data | cells |                              — data row
\"\"\" ... \"\"\"                                 — verbatim block, one <p> per line
~~~ ... ~~~                                   — blockquote
#hidden ... #end                              — collapsible section
{{ / name: _chart / id: 42 / }}               — template block (one entry per line)
Lines not matching any block rule become <p> paragraphs; see
``chartwiki.services.inline`` for the markup allowed inside a line.

A blank line, or a line that does not continue the open list/table, closes
it.  Blocks never nest; whatever is still open at the end of the input is
closed there.

Template blocks are not resolved here.  Each one becomes an indexed
placeholder and a ``WikiTemplate`` in ``RenderResult.templates``; see
``chartwiki.services.templates`` for the second phase.
"""
# -----------------------------------------------------------------------------

from __future__ import annotations

import re
from enum import Enum
from typing import Optional

from chartwiki.schemas import RenderOptions, RenderResult, WikiTemplate
from chartwiki.services.escaping import escape_html
from chartwiki.services.inline import parse_inline
from chartwiki.services.merge import build_placeholder
from chartwiki.services.tables import parse_table_row


# -----------------------------------------------------------------------------

MAX_HEADING_LEVEL = 4

_LINE_SPLIT_RE   = re.compile(r"\r?\n")
_HEADING_TRIM_RE = re.compile(r"^[=\s]*|[=\s]*$")
_LIST_MARK_RE    = re.compile(r"^\*\s+")

_HIDDEN_OPEN  = '<div class="hidden"><span class="hide-top">{label}</span><div class="hide-body">'
_HIDDEN_CLOSE = "</div></div>"

_TABLE_OPEN = {
    "fright":  "<table style='float:right'><tbody>",
    "right":   "<div style='float:right'><table><tbody>",
    "center":  "<table class='c'><tbody>",
    "default": "<table><tbody>",
}
_TABLE_CLOSE = {
    "right": "</tbody></table></div><span class='clear'></span>",
}


# -----------------------------------------------------------------------------

class BlockKind(Enum):
    NONE  = "none"
    LIST  = "list"
    TABLE = "table"
    ORG   = "org"
    QUOTE = "quote"


# Kinds that emit an opening tag and so must be closed explicitly
_WRAPPED_KINDS = (BlockKind.LIST, BlockKind.TABLE, BlockKind.QUOTE)


# -----------------------------------------------------------------------------

def _table_layout(line: str) -> str:
    # "fright" contains "right", so it must be tested first
    for layout in ("fright", "right", "center"):
        if layout in line:
            return layout
    return "default"


def parse_template_block(lines: list[str]) -> Optional[WikiTemplate]:
    """Parse ``key: value`` lines into a WikiTemplate.

    Lines without a colon or with an empty key are skipped; values may
    contain further colons.  Returns None when there is no non-empty ``name``.
    """
    params: dict[str, str] = {}
    for line in lines:
        key, sep, value = line.partition(":")
        key = key.strip()
        if sep and key:
            params[key] = value.strip()
    name = params.pop("name", "")
    if not name:
        return None
    return WikiTemplate(name=name, params=params)


# -----------------------------------------------------------------------------

def render(content: str, options: Optional[RenderOptions] = None) -> RenderResult:
    """
    Render *content* to HTML.

    Returns the HTML, with a placeholder where each template block stood,
    and the templates in document order.  Placeholder ``data-template-idx="i"``
    corresponds to ``templates[i]``.  Never raises on malformed markup.
    """
    opts = options or RenderOptions()
    out: list[str] = []
    templates: list[WikiTemplate] = []

    mode = BlockKind.NONE
    table_layout = "default"
    in_hidden = False
    quote_carried = False           # a quote interrupted by #hidden / #end
    in_template = False
    template_lines: list[str] = []

    def _open_block(kind: BlockKind, line: str = "") -> None:
        nonlocal mode, table_layout
        mode = kind
        if kind is BlockKind.LIST:
            out.append("<ul>")
        elif kind is BlockKind.TABLE:
            table_layout = _table_layout(line)
            out.append(_TABLE_OPEN[table_layout])
        elif kind is BlockKind.QUOTE:
            out.append("<blockquote>")

    def _close_block() -> None:
        nonlocal mode, quote_carried
        quote_carried = False
        if mode is BlockKind.LIST:
            out.append("</ul>")
        elif mode is BlockKind.TABLE:
            out.append(_TABLE_CLOSE.get(table_layout, "</tbody></table>"))
        elif mode is BlockKind.QUOTE:
            out.append("</blockquote>")
        mode = BlockKind.NONE

    def _emit_template() -> None:
        tmpl = parse_template_block(template_lines)
        if tmpl is None:
            return
        idx = len(templates)
        templates.append(tmpl)
        out.append(build_placeholder(tmpl.name, idx, opts.template_label, opts.template_loading))

    def _list_item(line: str) -> str:
        return f"<li>{parse_inline(_LIST_MARK_RE.sub('', line))}</li>"

    for line in _LINE_SPLIT_RE.split(content):

        # ── collapsible sections, recognised inside any block ────────────────
        # A quote spanning the section boundary is closed and reopened on the
        # other side so the tags stay nested.
        if line == "#hidden":
            if not in_hidden:
                carry = mode is BlockKind.QUOTE
                if mode in _WRAPPED_KINDS:
                    _close_block()
                out.append(_HIDDEN_OPEN.format(label=opts.hidden_label))
                in_hidden = True
                if carry:
                    _open_block(BlockKind.QUOTE)
                    quote_carried = True
            continue
        if line == "#end" and in_hidden:
            carry = quote_carried and mode is BlockKind.QUOTE
            if mode in _WRAPPED_KINDS:
                _close_block()
            out.append(_HIDDEN_CLOSE)
            in_hidden = False
            if carry:
                _open_block(BlockKind.QUOTE)
            continue

        # ── template block: buffer until }} ──────────────────────────────────
        if in_template:
            if line == "}}":
                in_template = False
                _emit_template()
            else:
                template_lines.append(line)
            continue

        if not line:
            _close_block()
            continue

        # A list/table ends at the first line that does not continue it
        if mode is BlockKind.LIST and not line.startswith("* "):
            _close_block()
        elif mode is BlockKind.TABLE and not line.startswith("|"):
            _close_block()

        # ── block openers ────────────────────────────────────────────────────
        if mode is BlockKind.NONE:
            if line.startswith('"""'):
                mode = BlockKind.ORG
                continue
            if line.startswith("~~~"):
                _open_block(BlockKind.QUOTE)
                continue
            if line.startswith("|-"):
                _open_block(BlockKind.TABLE, line)
                continue

        if line == "{{" and mode is not BlockKind.ORG:
            _close_block()
            in_template = True
            template_lines = []
            continue

        # ── block bodies ─────────────────────────────────────────────────────
        if mode is BlockKind.ORG:
            if line == '"""':
                mode = BlockKind.NONE
            else:
                out.append(f"<p>{escape_html(line)}</p>")
            continue

        if mode is BlockKind.LIST:
            out.append(_list_item(line))
            continue

        if mode is BlockKind.TABLE:
            if line.startswith("|!"):
                row = parse_table_row(line[2:], head=True)
            elif line.startswith("|-"):
                row = ""                     # row divider
            else:
                row = parse_table_row(line[1:])
            if row:
                out.append(row)
            continue

        # ── top level or inside a blockquote ─────────────────────────────────
        if mode is BlockKind.QUOTE and line == "~~~":
            _close_block()
            continue

        if mode is BlockKind.NONE and line.startswith("="):
            level = min(len(line) - len(line.lstrip("=")), MAX_HEADING_LEVEL)
            text  = _HEADING_TRIM_RE.sub("", line)
            out.append(f"<h{level}>{escape_html(text)}</h{level}>")
            continue

        if line.startswith("* "):
            _close_block()
            _open_block(BlockKind.LIST)
            out.append(_list_item(line))
            continue

        out.append(parse_inline(line, paragraph=True))

    # ── end of input ─────────────────────────────────────────────────────────
    _close_block()
    if in_template and template_lines:
        _emit_template()
    if in_hidden:
        out.append(_HIDDEN_CLOSE)

    return RenderResult(html="".join(out), templates=templates)


# -----------------------------------------------------------------------------

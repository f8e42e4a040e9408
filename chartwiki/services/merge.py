#!/usr/bin/env python
#
#
# -----------------------------------------------------------------------------
"""
Template placeholders
=====================
The renderer leaves one placeholder ``<div>`` per ``{{ ... }}`` block, tagged
with ``data-template-idx``.  Once the template fragments are available,
``apply_template_html()`` swaps each placeholder body for its fragment by
index, operating on the rendered HTML string only.
"""
# -----------------------------------------------------------------------------

from __future__ import annotations

import re
from typing import Optional, Sequence

from chartwiki.services.escaping import escape_html


# -----------------------------------------------------------------------------

PLACEHOLDER_CLASS = "wiki-template-placeholder"
LOADED_CLASS      = "wiki-template-loaded"
WARNING_CLASS     = "wiki-template-warning"

# Only matches placeholders still showing their loading body, i.e. not yet
# resolved by a previous merge.
_PLACEHOLDER_RE = re.compile(
    r'<div class="' + PLACEHOLDER_CLASS + r'"'
    r'( data-template="[^"]*" data-template-idx="(\d+)">)'
    r'<p class="wiki-template-name">.*?</p>'
    r'<p class="wiki-template-todo">.*?</p>'
    r'</div>',
    re.DOTALL,
)


# -----------------------------------------------------------------------------

def build_placeholder(name: str, idx: int, label: str, loading: str) -> str:
    """Return the loading-state placeholder for template *idx*."""
    safe_name = escape_html(name)
    return (
        f'<div class="{PLACEHOLDER_CLASS}" data-template="{safe_name}" data-template-idx="{idx}">'
        f'<p class="wiki-template-name">{label} {safe_name}</p>'
        f'<p class="wiki-template-todo">{loading}</p>'
        f'</div>'
    )


# -----------------------------------------------------------------------------

def count_placeholders(html: str) -> int:
    return len(_PLACEHOLDER_RE.findall(html))


# -----------------------------------------------------------------------------

def apply_template_html(html: str, fragments: Sequence[Optional[str]]) -> str:
    """
    Fill placeholder ``i`` with ``fragments[i]`` and mark it loaded.

    A ``None`` or empty fragment, or an index with no fragment, leaves that
    placeholder in its loading state.
    """
    if not fragments:
        return html

    def _fill(m: re.Match) -> str:
        idx = int(m.group(2))
        fragment = fragments[idx] if idx < len(fragments) else None
        if not fragment:
            return m.group(0)
        return f'<div class="{PLACEHOLDER_CLASS} {LOADED_CLASS}"{m.group(1)}{fragment}</div>'

    return _PLACEHOLDER_RE.sub(_fill, html)


# -----------------------------------------------------------------------------

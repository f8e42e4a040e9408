#!/usr/bin/env python
#
#
# -----------------------------------------------------------------------------
"""
HTML escaping for text copied from wiki source into rendered output.
"""
# -----------------------------------------------------------------------------

from __future__ import annotations

import html as _html


# -----------------------------------------------------------------------------

def escape_html(text: str) -> str:
    """Escape ``& < > " '``.  Not idempotent: ``&amp;`` becomes ``&amp;amp;``."""
    return _html.escape(text, quote=True)


# -----------------------------------------------------------------------------

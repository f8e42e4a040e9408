#!/usr/bin/env python
#
#
# -----------------------------------------------------------------------------
"""
Asset URL helpers for template cards.
"""
# -----------------------------------------------------------------------------

from __future__ import annotations

from typing import Optional, Union

from chartwiki.core.config import get_settings


# -----------------------------------------------------------------------------

def cover_url(cover: Optional[str]) -> str:
    """Absolute URL for a chart cover path; the placeholder image when empty."""
    settings = get_settings()
    if not cover:
        return settings.empty_cover
    if cover.startswith("http"):
        return cover
    return f"{settings.cover_base.rstrip('/')}/{cover.lstrip('/')}"


def avatar_url(uid: Union[int, str]) -> str:
    return f"{get_settings().avatar_base.rstrip('/')}/{uid}!avatar64"


# -----------------------------------------------------------------------------

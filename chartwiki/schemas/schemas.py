#!/usr/bin/env python
#
#
# -----------------------------------------------------------------------------
"""
Pydantic v2 schemas shared by the wiki renderer, the template resolver and
the render API.
"""
# -----------------------------------------------------------------------------

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, Field


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Wiki rendering
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

class WikiTemplate(BaseModel):
    """A ``{{ ... }}`` block: its ``name`` entry plus the remaining key/values."""
    name: str
    params: dict[str, str] = Field(default_factory=dict)


# -----------------------------------------------------------------------------

class RenderOptions(BaseModel):
    hidden_label: str = "Hidden content"
    template_label: str = "Template:"
    template_loading: str = "Loading…"


# -----------------------------------------------------------------------------

class RenderResult(BaseModel):
    html: str
    templates: list[WikiTemplate] = Field(default_factory=list)


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Template data
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

class TemplateData(BaseModel):
    success: bool
    payload: Any = None
    error_message: Optional[str] = None

    @classmethod
    def from_response(cls, body: dict[str, Any]) -> "TemplateData":
        """Build from the remote ``{code, data, message}`` envelope (code 0 = ok)."""
        success = body.get("code") == 0
        message = body.get("message")
        return cls(
            success=success,
            payload=body.get("data"),
            error_message=None if success or not message else str(message),
        )


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Render API
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

class PageRenderRequest(BaseModel):
    content: str = Field(default="", max_length=1_000_000)
    lang: Optional[str] = None


# -----------------------------------------------------------------------------

class ResolveRequest(BaseModel):
    html: str = Field(..., max_length=4_000_000)
    templates: list[WikiTemplate] = Field(default_factory=list)
    lang: Optional[str] = None


# -----------------------------------------------------------------------------

class ResolveResponse(BaseModel):
    html: str

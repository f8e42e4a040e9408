#!/usr/bin/env python
#
#
# -----------------------------------------------------------------------------
"""
Render endpoints — live preview and template resolution for the wiki editor.

GET  /api/v1/render?content=...&lang=en   — parse only, templates left as placeholders
POST /api/v1/render/resolve               — fill the placeholders of rendered HTML
POST /api/v1/render/page                  — parse and resolve in one request
"""
# -----------------------------------------------------------------------------

from __future__ import annotations

from collections.abc import AsyncGenerator
from typing import Optional

from fastapi import APIRouter, Depends, Query

from chartwiki.schemas import PageRenderRequest, RenderResult, ResolveRequest, ResolveResponse
from chartwiki.services.i18n import get_translator, render_options
from chartwiki.services.renderer import render
from chartwiki.services.template_client import TemplateClient
from chartwiki.services.templates import FetchFn, resolve_and_merge


# -----------------------------------------------------------------------------

router = APIRouter(prefix="/render", tags=["render"])


# -----------------------------------------------------------------------------

async def get_template_fetcher() -> AsyncGenerator[FetchFn, None]:
    """Per-request template client; overridden in tests."""
    async with TemplateClient() as client:
        yield client


# -----------------------------------------------------------------------------

@router.get("", response_model=RenderResult)
async def render_preview(
    content: str           = Query(default="", max_length=1_000_000),
    lang:    Optional[str] = Query(default=None),
):
    """Return rendered HTML plus the pending templates — used by the editor preview."""
    return render(content, render_options(lang))


# -----------------------------------------------------------------------------

@router.post("/resolve", response_model=ResolveResponse)
async def resolve(
    data:  ResolveRequest,
    fetch: FetchFn = Depends(get_template_fetcher),
):
    html = await resolve_and_merge(data.html, data.templates, get_translator(data.lang), fetch=fetch)
    return ResolveResponse(html=html)


# -----------------------------------------------------------------------------

@router.post("/page", response_model=RenderResult)
async def render_page(
    data:  PageRenderRequest,
    fetch: FetchFn = Depends(get_template_fetcher),
):
    result = render(data.content, render_options(data.lang))
    html = await resolve_and_merge(result.html, result.templates, get_translator(data.lang), fetch=fetch)
    return RenderResult(html=html, templates=result.templates)


# -----------------------------------------------------------------------------

from chartwiki.schemas.schemas import (
    WikiTemplate, RenderOptions, RenderResult,
    TemplateData,
    PageRenderRequest, ResolveRequest, ResolveResponse,
)

__all__ = [
    "WikiTemplate", "RenderOptions", "RenderResult",
    "TemplateData",
    "PageRenderRequest", "ResolveRequest", "ResolveResponse",
]

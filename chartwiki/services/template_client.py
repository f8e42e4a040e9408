#!/usr/bin/env python
#
#
# -----------------------------------------------------------------------------
"""
Template data client — fetches the data behind wiki template blocks from the
community API.

GET {api_base}/wiki/template?name=_chart&id=42  →  {"code": 0, "data": {...}}
"""
# -----------------------------------------------------------------------------

from __future__ import annotations

import logging
from typing import Optional

import httpx

from chartwiki.core.config import get_settings
from chartwiki.schemas import TemplateData

log = logging.getLogger(__name__)


# -----------------------------------------------------------------------------

class TemplateFetchError(RuntimeError):
    """The template request failed or returned something other than a JSON object."""


# -----------------------------------------------------------------------------

class TemplateClient:
    """Async callable ``(name, params) -> TemplateData`` backed by httpx.

    Use as an async context manager, or call ``aclose()`` when done.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        *,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        settings = get_settings()
        self._client = httpx.AsyncClient(
            base_url=base_url or settings.api_base,
            timeout=timeout if timeout is not None else settings.template_timeout,
            transport=transport,
            headers={"Accept": "application/json"},
        )

    async def __aenter__(self) -> "TemplateClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __call__(self, name: str, params: dict[str, str]) -> TemplateData:
        query = {**params, "name": name}
        log.debug("Fetching template %s %s", name, params)
        try:
            resp = await self._client.get("/wiki/template", params=query)
            resp.raise_for_status()
            body = resp.json()
        except (httpx.HTTPError, ValueError) as exc:
            raise TemplateFetchError(f"Template '{name}' request failed: {exc}") from exc

        if not isinstance(body, dict):
            raise TemplateFetchError(f"Template '{name}' response is not a JSON object")
        return TemplateData.from_response(body)


# -----------------------------------------------------------------------------

#!/usr/bin/env python
#
#
# -----------------------------------------------------------------------------
"""
Pytest fixtures for ChartWiki tests.
The remote template API is replaced by an in-process fake, so no network is
needed.
"""
# -----------------------------------------------------------------------------

from __future__ import annotations

from typing import Optional, Union

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from chartwiki.main import create_app
from chartwiki.routes.render import get_template_fetcher
from chartwiki.schemas import TemplateData


# -----------------------------------------------------------------------------

CHART_PAYLOAD = {
    "id": 42,
    "title": "Night Drive",
    "artist": "Aoi",
    "version": "4K Hard",
    "cover": "cover/42.jpg",
    "finish": True,
}

USER_PAYLOAD = {"uid": 7, "username": "alice"}


# -----------------------------------------------------------------------------

class FakeTemplateSource:
    """Stands in for the template API: name → TemplateData, or an exception to raise."""

    def __init__(self, responses: Optional[dict[str, Union[TemplateData, Exception]]] = None):
        self.responses = responses or {}
        self.calls: list[tuple[str, dict[str, str]]] = []

    async def __call__(self, name: str, params: dict[str, str]) -> TemplateData:
        self.calls.append((name, params))
        result = self.responses.get(name, TemplateData(success=False))
        if isinstance(result, Exception):
            raise result
        return result


# -----------------------------------------------------------------------------

@pytest.fixture
def template_source() -> FakeTemplateSource:
    return FakeTemplateSource({
        "_chart": TemplateData(success=True, payload=CHART_PAYLOAD),
        "_user":  TemplateData(success=True, payload=USER_PAYLOAD),
        "_login": TemplateData(success=True),
    })


@pytest_asyncio.fixture(scope="function")
async def client(template_source):
    """HTTP test client with the template fetcher swapped for the fake source."""
    async def override_fetcher():
        yield template_source

    app = create_app()
    app.dependency_overrides[get_template_fetcher] = override_fetcher

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


# -----------------------------------------------------------------------------

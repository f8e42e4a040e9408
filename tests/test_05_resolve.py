#!/usr/bin/env python
#
#
# -----------------------------------------------------------------------------
"""
Tests for concurrent template resolution and placeholder merging.
"""
# -----------------------------------------------------------------------------

from __future__ import annotations

import asyncio
import logging
from unittest.mock import AsyncMock

import pytest

from chartwiki.schemas import RenderOptions, TemplateData, WikiTemplate
from chartwiki.services.merge import apply_template_html, build_placeholder, count_placeholders
from chartwiki.services.renderer import render
from chartwiki.services.templates import resolve_and_merge, resolve_templates
from tests.conftest import CHART_PAYLOAD, FakeTemplateSource

OPTS = RenderOptions(hidden_label="More", template_label="Template:", template_loading="Loading")

ERROR_NOTICE = '<div class="wiki-template-placeholder wiki-template-warning">Failed to load template.</div>'


# ── Placeholder merging ───────────────────────────────────────────────────────

def test_apply_fills_placeholder_by_index():
    html = build_placeholder("_a", 0, "T:", "...") + build_placeholder("_b", 1, "T:", "...")
    merged = apply_template_html(html, ["<b>A</b>", "<b>B</b>"])
    assert merged == (
        '<div class="wiki-template-placeholder wiki-template-loaded" data-template="_a" data-template-idx="0">'
        '<b>A</b></div>'
        '<div class="wiki-template-placeholder wiki-template-loaded" data-template="_b" data-template-idx="1">'
        '<b>B</b></div>'
    )


def test_apply_uses_index_not_document_order():
    html = build_placeholder("_b", 1, "T:", "...") + build_placeholder("_a", 0, "T:", "...")
    merged = apply_template_html(html, ["first", "second"])
    assert merged.index("second") < merged.index("first")
    assert 'data-template-idx="1">second</div>' in merged
    assert 'data-template-idx="0">first</div>' in merged


@pytest.mark.parametrize("fragment", [None, ""])
def test_apply_leaves_missing_fragment_loading(fragment):
    html = build_placeholder("_a", 0, "T:", "Loading") + build_placeholder("_b", 1, "T:", "Loading")
    merged = apply_template_html(html, [fragment, "done"])
    assert '<p class="wiki-template-todo">Loading</p>' in merged
    assert count_placeholders(merged) == 1
    assert "done</div>" in merged


def test_apply_ignores_indexes_past_fragments():
    html = build_placeholder("_a", 3, "T:", "Loading")
    assert apply_template_html(html, ["x"]) == html


def test_apply_without_fragments_returns_html_unchanged():
    html = "<p>hi</p>" + build_placeholder("_a", 0, "T:", "Loading")
    assert apply_template_html(html, []) is html


def test_apply_keeps_surrounding_markup():
    result = render("before\n{{\nname: _login\n}}\nafter", OPTS)
    merged = apply_template_html(result.html, ["CARD"])
    assert merged.startswith("<p>before</p>")
    assert merged.endswith("CARD</div><p>after</p>")


def test_merged_placeholders_are_not_refilled():
    html = build_placeholder("_a", 0, "T:", "Loading")
    once = apply_template_html(html, ["one"])
    assert apply_template_html(once, ["two"]) == once


# ── resolve_templates ─────────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_failure_is_isolated_and_order_preserved():
    async def fetch(name, params):
        if params["id"] == "0":
            raise RuntimeError("boom")
        await asyncio.sleep(0.01)
        return TemplateData(success=True, payload=CHART_PAYLOAD)

    templates = [
        WikiTemplate(name="_chart", params={"id": "0"}),
        WikiTemplate(name="_chart", params={"id": "1"}),
    ]
    fragments = await resolve_templates(templates, fetch)

    assert fragments[0] == ERROR_NOTICE
    assert 'href="/chart/42"' in fragments[1]


@pytest.mark.asyncio
async def test_fetch_exception_is_logged(caplog):
    source = FakeTemplateSource({"_chart": ValueError("bad payload")})
    with caplog.at_level(logging.WARNING, logger="chartwiki.services.templates"):
        fragments = await resolve_templates([WikiTemplate(name="_chart")], source)
    assert fragments == [ERROR_NOTICE]
    assert "_chart" in caplog.text


@pytest.mark.asyncio
async def test_fetch_receives_name_and_params():
    fetch = AsyncMock(return_value=TemplateData(success=True))
    await resolve_templates([WikiTemplate(name="_login", params={"a": "1"})], fetch)
    fetch.assert_awaited_once_with("_login", {"a": "1"})


@pytest.mark.asyncio
async def test_fetches_run_concurrently():
    started = 0
    both_started = asyncio.Event()

    async def fetch(name, params):
        nonlocal started
        started += 1
        if started == 2:
            both_started.set()
        # Deadlocks unless the second fetch starts while the first is waiting.
        await both_started.wait()
        return TemplateData(success=True)

    templates = [WikiTemplate(name="_login"), WikiTemplate(name="_login")]
    fragments = await asyncio.wait_for(resolve_templates(templates, fetch), timeout=2)
    assert len(fragments) == 2


@pytest.mark.asyncio
async def test_card_rendering_error_is_isolated():
    class Unprintable:
        def __str__(self):
            raise TypeError("no text form")

    source = FakeTemplateSource({
        "_chart": TemplateData(success=True, payload={"id": Unprintable()}),
        "_login": TemplateData(success=True),
    })
    fragments = await resolve_templates(
        [WikiTemplate(name="_chart"), WikiTemplate(name="_login")], source,
    )
    assert fragments[0] == ERROR_NOTICE
    assert "wiki-template-login" in fragments[1]


# ── resolve_and_merge ─────────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_merge_follows_index_not_completion_order():
    finished: list[str] = []

    async def fetch(name, params):
        if params["id"] == "slow":
            await asyncio.sleep(0.05)
            finished.append("slow")
            return TemplateData(success=False)
        finished.append("fast")
        return TemplateData(success=True, payload=CHART_PAYLOAD)

    result = render("{{\nname: _chart\nid: slow\n}}\n{{\nname: _chart\nid: fast\n}}", OPTS)
    html = await resolve_and_merge(result.html, result.templates, fetch=fetch)

    assert finished == ["fast", "slow"]
    assert f'data-template-idx="0">{ERROR_NOTICE}</div>' in html
    assert 'data-template-idx="1"><a class="wiki-template-card wiki-template-chart" href="/chart/42">' in html
    assert html.index('data-template-idx="0"') < html.index('data-template-idx="1"')


@pytest.mark.asyncio
async def test_placeholder_mismatch_is_logged(caplog):
    fetch = AsyncMock(return_value=TemplateData(success=True))
    with caplog.at_level(logging.WARNING, logger="chartwiki.services.templates"):
        html = await resolve_and_merge("<p>no placeholders</p>", [WikiTemplate(name="_login")], fetch=fetch)
    assert html == "<p>no placeholders</p>"
    assert "0 unresolved placeholders for 1 templates" in caplog.text

@pytest.mark.asyncio
async def test_resolve_and_merge_without_templates_skips_fetch():
    fetch = AsyncMock()
    assert await resolve_and_merge("<p>x</p>", [], fetch=fetch) == "<p>x</p>"
    fetch.assert_not_awaited()


@pytest.mark.asyncio
async def test_resolve_and_merge_full_page(template_source):
    src = "= Page =\n{{\nname: _chart\nid: 42\n}}\n{{\nname: _nope\n}}\n{{\nname: _user\nuid: 7\n}}"
    result = render(src, OPTS)

    html = await resolve_and_merge(result.html, result.templates, fetch=template_source)

    assert count_placeholders(html) == 0
    assert html.count("wiki-template-loaded") == 3
    assert 'href="/chart/42"' in html
    assert "Failed to load template." in html
    assert 'href="/player/7"' in html
    assert [name for name, _ in template_source.calls] == ["_chart", "_nope", "_user"]
    assert template_source.calls[0][1] == {"id": "42"}


# -----------------------------------------------------------------------------

#!/usr/bin/env python
#
#
# -----------------------------------------------------------------------------
"""
Template resolution
===================
Second rendering phase: fetch the data for every template block found by
``renderer.render()``, render each to an HTML card, and splice the cards
into the page by placeholder index.

Fetches run concurrently.  A failed or malformed template turns into a
warning notice in its own slot; it never affects its siblings.

Template names
--------------
_login                          — sign-in prompt
_user                           — user card            (requires ``uid``)
_chart / _activity / _event     — chart card           (requires ``id``)
_grouplist                      — group member list    (requires ``users``)
_eventsum                       — ranked totals        (requires a list)
_event3 / _vote / _voted / _level — "unsupported" notice
anything else                   — "unknown" notice
"""
# -----------------------------------------------------------------------------

from __future__ import annotations

import asyncio
import logging
import math
from typing import Any, Awaitable, Callable, Optional, Sequence

from chartwiki.schemas import TemplateData, WikiTemplate
from chartwiki.services.escaping import escape_html
from chartwiki.services.formatters import avatar_url, cover_url
from chartwiki.services.i18n import TranslateFn, translate as default_translate
from chartwiki.services.merge import PLACEHOLDER_CLASS, WARNING_CLASS, apply_template_html, count_placeholders

log = logging.getLogger(__name__)


# -----------------------------------------------------------------------------

FetchFn = Callable[[str, dict[str, str]], Awaitable[TemplateData]]

CHART_TEMPLATES       = frozenset({"_chart", "_activity", "_event"})
UNSUPPORTED_TEMPLATES = frozenset({"_event3", "_vote", "_voted", "_level"})


# -----------------------------------------------------------------------------
# Notices
# -----------------------------------------------------------------------------

def _notice(text: str) -> str:
    return f'<div class="{PLACEHOLDER_CLASS} {WARNING_CLASS}">{text}</div>'


def error_notice(t: TranslateFn) -> str:
    return _notice(t("wiki.template.error"))


def _empty_notice(t: TranslateFn) -> str:
    return _notice(t("wiki.template.empty"))


def _number(value: Any) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    return number if math.isfinite(number) else 0.0


# -----------------------------------------------------------------------------
# Cards
# -----------------------------------------------------------------------------

def _render_login(t: TranslateFn, tmpl: WikiTemplate, payload: Any) -> str:
    return f'<div class="wiki-template-card wiki-template-login">{t("wiki.template.login")}</div>'


def _render_user(t: TranslateFn, tmpl: WikiTemplate, payload: Any) -> str:
    if not isinstance(payload, dict) or not payload.get("uid"):
        return _empty_notice(t)
    uid      = escape_html(str(payload["uid"]))
    username = escape_html(str(payload.get("username") or ""))
    avatar   = (f'<img class="wiki-template-avatar" '
                f'src="{escape_html(avatar_url(payload["uid"]))}" alt="{username}">')
    return (
        f'<a class="wiki-template-card wiki-template-user" href="/player/{uid}">'
        f'{avatar}<p class="wiki-template-title">{username}</p></a>'
    )


def _render_chart(t: TranslateFn, tmpl: WikiTemplate, payload: Any) -> str:
    if not isinstance(payload, dict) or not payload.get("id"):
        return _empty_notice(t)

    finish = f'<span class="pill ghost">{t("wiki.template.finish")}</span>' if payload.get("finish") else ""

    condition_text = tmpl.params.get("condition")
    condition  = f'<p class="wiki-template-condition">{escape_html(condition_text)}</p>' if condition_text else ""
    body_class = "wiki-template-body wiki-template-body-compact" if condition else "wiki-template-body"

    cover = cover_url(str(payload["cover"]) if payload.get("cover") else None)
    title   = escape_html(str(payload.get("title") or ""))
    artist  = escape_html(str(payload.get("artist") or ""))
    version = escape_html(str(payload.get("version") or ""))

    return (
        f'<a class="wiki-template-card wiki-template-chart" href="/chart/{escape_html(str(payload["id"]))}">'
        f'<div class="wiki-template-cover" style="background-image:url(\'{escape_html(cover)}\')"></div>'
        f'<div class="{body_class}">'
        f'<p class="wiki-template-title">{title}</p>'
        f'<p class="wiki-template-meta">{artist} · {version}</p>'
        f'{condition}{finish}</div></a>'
    )


def _render_group(t: TranslateFn, tmpl: WikiTemplate, payload: Any) -> str:
    users = payload.get("users") if isinstance(payload, dict) else None
    if not isinstance(users, list) or not users:
        return _empty_notice(t)

    items: list[str] = []
    for user in users:
        user = user if isinstance(user, dict) else {}
        suffix = f' (UID {escape_html(str(user["uid"]))})' if user.get("uid") else ""
        items.append(f'<li>{escape_html(str(user.get("username") or ""))}{suffix}</li>')

    group_id = payload.get("groupId")
    title = t("wiki.template.group", {"id": "" if group_id is None else group_id})
    return (
        f'<div class="wiki-template-card"><p class="wiki-template-title">{title}</p>'
        f'<ul class="wiki-template-list">{"".join(items)}</ul></div>'
    )


def _render_event_sum(t: TranslateFn, tmpl: WikiTemplate, payload: Any) -> str:
    if not isinstance(payload, list) or not payload:
        return _empty_notice(t)

    rows = [row if isinstance(row, dict) else {} for row in payload]
    top  = max([_number(row.get("total")) for row in rows] + [1.0])

    items: list[str] = []
    for rank, row in enumerate(rows, 1):
        uid      = row.get("uid")
        username = row.get("username")
        if username is not None:
            name = escape_html(str(username))
        else:
            name = f"#{escape_html(str(uid))}" if uid else "-"
        percent = math.floor(_number(row.get("total")) / top * 100 + 0.5)

        if uid:
            avatar = (f'<img class="wiki-template-avatar" '
                      f'src="{escape_html(avatar_url(uid))}" alt="{name}">')
            label  = f'<a class="wiki-template-label" href="/player/{escape_html(str(uid))}">{name}</a>'
        else:
            avatar = '<span class="wiki-template-avatar placeholder" aria-hidden="true"></span>'
            label  = f'<span class="wiki-template-label">{name}</span>'

        total = row.get("total")
        items.append(
            f'<li><span class="wiki-template-rank">{rank}</span>'
            f'<div class="wiki-template-user">{avatar}{label}</div>'
            f'<span class="wiki-template-value">{escape_html(str(0 if total is None else total))}</span>'
            f'<div class="wiki-template-bar" style="width:{percent}%"></div></li>'
        )

    return (
        f'<div class="wiki-template-card"><p class="wiki-template-title">{t("wiki.template.eventsum")}</p>'
        f'<div class="wiki-template-bars-wrap"><div class="wiki-template-bars-head">'
        f'<span>{t("wiki.template.table.rank")}</span>'
        f'<span>{t("wiki.template.table.player")}</span>'
        f'<span>{t("wiki.template.table.value")}</span></div>'
        f'<ul class="wiki-template-bars">{"".join(items)}</ul></div></div>'
    )


_RENDERERS: dict[str, Callable[[TranslateFn, WikiTemplate, Any], str]] = {
    "_login":     _render_login,
    "_user":      _render_user,
    "_grouplist": _render_group,
    "_eventsum":  _render_event_sum,
    **{name: _render_chart for name in CHART_TEMPLATES},
}


# -----------------------------------------------------------------------------

def render_template_html(t: TranslateFn, tmpl: WikiTemplate, data: TemplateData) -> str:
    """Render the card for one fetched template, or the matching notice."""
    if data.error_message:
        return _notice(escape_html(data.error_message))
    if not data.success:
        return error_notice(t)

    renderer = _RENDERERS.get(tmpl.name)
    if renderer is None:
        key = "wiki.template.unsupported" if tmpl.name in UNSUPPORTED_TEMPLATES else "wiki.template.unknown"
        return _notice(t(key))
    return renderer(t, tmpl, data.payload)


# -----------------------------------------------------------------------------
# Resolution
# -----------------------------------------------------------------------------

async def resolve_templates(
    templates: Sequence[WikiTemplate],
    fetch: FetchFn,
    translate: TranslateFn = default_translate,
) -> list[str]:
    """Fetch and render every template concurrently.

    The result has one fragment per template, in the order of *templates*.
    """
    async def _resolve(tmpl: WikiTemplate) -> str:
        try:
            data = await fetch(tmpl.name, dict(tmpl.params))
            return render_template_html(translate, tmpl, data)
        except Exception:
            log.warning("Template %r could not be resolved", tmpl.name, exc_info=True)
            return error_notice(translate)

    return list(await asyncio.gather(*(_resolve(tmpl) for tmpl in templates)))


# -----------------------------------------------------------------------------

async def resolve_and_merge(
    html: str,
    templates: Sequence[WikiTemplate],
    translate: TranslateFn = default_translate,
    fetch: Optional[FetchFn] = None,
) -> str:
    """
    Resolve *templates* and fill the matching placeholders in *html*.

    *fetch* defaults to a ``TemplateClient`` for the configured API, opened
    for the duration of the call.
    """
    if not templates:
        return html

    pending = count_placeholders(html)
    if pending != len(templates):
        log.warning("HTML has %d unresolved placeholders for %d templates", pending, len(templates))

    if fetch is None:
        from chartwiki.services.template_client import TemplateClient
        async with TemplateClient() as client:
            fragments = await resolve_templates(templates, client, translate)
    else:
        fragments = await resolve_templates(templates, fetch, translate)

    return apply_template_html(html, fragments)


# -----------------------------------------------------------------------------

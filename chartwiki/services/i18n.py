#!/usr/bin/env python
#
#
# -----------------------------------------------------------------------------
"""
Message catalogue for the copy the renderer and template cards emit.

``translate(key, vars)`` looks *key* up in the requested locale, falls back
to English and then to the key itself, and substitutes ``{{name}}`` markers
from *vars*.
"""
# -----------------------------------------------------------------------------

from __future__ import annotations

from functools import partial
from typing import Callable, Mapping, Optional, Union

from chartwiki.core.config import get_settings
from chartwiki.schemas import RenderOptions


# -----------------------------------------------------------------------------

TranslateVars = Mapping[str, Union[str, int]]
TranslateFn   = Callable[..., str]

FALLBACK_LOCALE = "en"

MESSAGES: dict[str, dict[str, str]] = {
    "en": {
        "wiki.hidden":                 "Click to expand",
        "wiki.templateLabel":          "Template:",
        "wiki.template.loading":       "Loading template…",
        "wiki.template.login":         "Sign in to see this content.",
        "wiki.template.finish":        "Finished",
        "wiki.template.group":         "Group {{id}}",
        "wiki.template.eventsum":      "Event leaderboard",
        "wiki.template.table.rank":    "Rank",
        "wiki.template.table.player":  "Player",
        "wiki.template.table.value":   "Total",
        "wiki.template.empty":         "This template has no data.",
        "wiki.template.unsupported":   "This template is not supported yet.",
        "wiki.template.unknown":       "Unknown template.",
        "wiki.template.error":         "Failed to load template.",
    },
    "zh": {
        "wiki.hidden":                 "点击展开",
        "wiki.templateLabel":          "模板:",
        "wiki.template.loading":       "模板加载中…",
        "wiki.template.login":         "登录后查看此内容。",
        "wiki.template.finish":        "已完成",
        "wiki.template.group":         "用户组 {{id}}",
        "wiki.template.eventsum":      "活动排行",
        "wiki.template.table.rank":    "排名",
        "wiki.template.table.player":  "玩家",
        "wiki.template.table.value":   "总计",
        "wiki.template.empty":         "此模板暂无数据。",
        "wiki.template.unsupported":   "暂不支持此模板。",
        "wiki.template.unknown":       "未知模板。",
        "wiki.template.error":         "模板加载失败。",
    },
}


# -----------------------------------------------------------------------------

def normalize_locale(locale: Optional[str]) -> str:
    """Map ``zh-CN`` / ``en_US`` / ``None`` style values onto a catalogue locale."""
    locale = locale or get_settings().default_locale
    if not locale:
        return FALLBACK_LOCALE
    base = locale.replace("_", "-").split("-")[0].lower()
    return base if base in MESSAGES else FALLBACK_LOCALE


def translate(key: str, vars: Optional[TranslateVars] = None, *, locale: Optional[str] = None) -> str:
    lang = normalize_locale(locale)
    template = MESSAGES.get(lang, {}).get(key) or MESSAGES[FALLBACK_LOCALE].get(key) or key
    if vars:
        for name, value in vars.items():
            template = template.replace(f"{{{{{name}}}}}", str(value))
    return template


def get_translator(locale: Optional[str] = None) -> TranslateFn:
    return partial(translate, locale=locale)


def render_options(locale: Optional[str] = None) -> RenderOptions:
    t = get_translator(locale)
    return RenderOptions(
        hidden_label=t("wiki.hidden"),
        template_label=t("wiki.templateLabel"),
        template_loading=t("wiki.template.loading"),
    )


# -----------------------------------------------------------------------------

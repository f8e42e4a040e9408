#!/usr/bin/env python
#
#
# -----------------------------------------------------------------------------
"""
Inline markup
=============
Rewrites the directives embedded in one line of wiki text into HTML.

Supported syntax, applied in this order
---------------------------------------
[img:URL]  [img:URL@right]  [img:URL@center@300]  [img:URL@300]
[video:URL]  [video:URL@left@640@360]  [video:URL@640@360]
[youtube:ID]  [bili:BVID]  [xiami:ID]  [soundcloud:ID]
[https://example.com Label]                      — external link
[#ff8800:text]                                   — coloured text
[#123 Label]                                     — link to wiki page 123
[#keyword]                                       — keyword search link
[:05]                                            — emoji
**bold**  //italic//  __underline__  --strike--

The line is HTML-escaped before any directive is matched, so everything that
is not a recognised directive reaches the output as literal text.
"""
# -----------------------------------------------------------------------------

from __future__ import annotations

import html as _html
import re
from typing import Callable
from urllib.parse import quote

from chartwiki.services.escaping import escape_html


# -----------------------------------------------------------------------------

IMAGE_DEFAULT_WIDTH  = 240
VIDEO_DEFAULT_WIDTH  = 400
VIDEO_DEFAULT_HEIGHT = 320
MEDIA_MAX_SIZE       = 700

# Stand-ins for "http://" / "https://" while the italic pass runs; "//" would
# otherwise open an italic span.
_HTTP_SENTINEL  = "\x00http\x00"
_HTTPS_SENTINEL = "\x00https\x00"

_IMAGE_RE = re.compile(
    r"\[img:([^@\s\]]+)(?:@(left|right|center|\d{1,3}))?(?:@(\d{1,3}))?\]",
    re.IGNORECASE,
)
_VIDEO_RE = re.compile(
    r"\[video:([^@\s\]]+)(?:@(left|right|center|\d{1,3}))?(?:@(\d{1,3}))?(?:@(\d{1,3}))?\]",
    re.IGNORECASE,
)
_EMBED_RE      = re.compile(r"\[(xiami|soundcloud|youtube|bili):([^\]]+)\]", re.IGNORECASE)
_LINK_RE       = re.compile(r"\[(https?://[^\s\]]+)\s+([^\]]+)\]", re.IGNORECASE)
_COLOR_RE      = re.compile(r"\[#([a-f0-9]{6}):([^\]]+)\]", re.IGNORECASE)
_PAGE_ID_RE    = re.compile(r"\[#(\d+)\s+([^\]]+)\]")
_KEYWORD_RE    = re.compile(r"\[#([^\s\]<]+)\]")     # no "<": never re-match a built anchor
_EMOJI_RE      = re.compile(r"\[:(\d{2})\]")

_BOLD_RE      = re.compile(r"\*\*\s*([^*]+?)\s*\*\*")
_ITALIC_RE    = re.compile(r"//\s*([^/]+?)\s*//")
_UNDERLINE_RE = re.compile(r"__\s*([^_]+?)\s*__")
_STRIKE_RE    = re.compile(r"--\s*([^-]+?)\s*--")


# -----------------------------------------------------------------------------
# Helpers
# -----------------------------------------------------------------------------

def _clamp(value: int, maximum: int = MEDIA_MAX_SIZE, minimum: int = 0) -> int:
    return min(max(value, minimum), maximum)


def _directive_url(raw: str) -> str:
    """Undo the escaping of ``&`` so query strings in directive URLs work."""
    return raw.replace("&amp;", "&")


def _substitute(pattern: re.Pattern, line: str, build: Callable[[re.Match], str]) -> str:
    """Replace matches of *pattern* one at a time until none remain.

    The search restarts from the beginning of the line after every
    replacement, so a match that only becomes complete once an earlier one is
    rewritten is still found.  Each replacement consumes the opening ``[`` of
    its directive, which bounds the number of iterations.
    """
    m = pattern.search(line)
    while m is not None:
        line = line[:m.start()] + build(m) + line[m.end():]
        m = pattern.search(line)
    return line


# -----------------------------------------------------------------------------
# Media
# -----------------------------------------------------------------------------

def _image(m: re.Match, auto_float: bool) -> str:
    url   = _directive_url(m.group(1))
    align = (m.group(2) or "").lower()
    size  = m.group(3)
    if align.isdigit():
        # [img:URL@300] — the only number is the size; float it right
        size, align = align, "right"
    width = _clamp(int(size) if size else IMAGE_DEFAULT_WIDTH)

    if auto_float and align == "center":
        return (f'<div style="text-align:center"><img class="nobd" src="{url}" '
                f'style="width:{width}px"/></div>')
    if auto_float and align:
        return f'<img src="{url}" class="{align}" style="width:{width}px"/>'
    return f'<img src="{url}" style="width:{width}px"/>'


def _video(m: re.Match, auto_float: bool) -> str:
    url    = _directive_url(m.group(1))
    align  = (m.group(2) or "").lower()
    width  = m.group(3)
    height = m.group(4)
    if align.isdigit():
        # [video:URL@640@360] — shift the sizes left, no alignment
        width, height, align = align, width, ""
    w = _clamp(int(width) if width else VIDEO_DEFAULT_WIDTH)
    h = _clamp(int(height) if height else VIDEO_DEFAULT_HEIGHT)

    body = (f'<iframe src="{url}" width="{w}" height="{h}" loading="lazy" '
            f'allowfullscreen frameborder="0"></iframe>')
    if auto_float and align == "center":
        return f'<div style="text-align:center">{body}</div>'
    if auto_float and align:
        return f'<div class="{align}">{body}</div>'
    return body


def _embed(m: re.Match) -> str:
    service = m.group(1).lower()
    code    = m.group(2)
    if service == "xiami":
        src = f"http://www.xiami.com/widget/0_{code}/singlePlayer.swf"
        return f'<embed src="{src}" width="257" height="33"/>'
    if service == "soundcloud":
        src = ("http://player.soundcloud.com/player.swf?show_bpm=true&show_comments=false"
               f"&url=http%3A%2F%2Fapi.soundcloud.com%2Ftracks%2F{code}")
        return f'<embed src="{src}" width="300" height="81"/>'
    if service == "youtube":
        return (f'<iframe width="560" height="315" src="https://www.youtube.com/embed/{code}" '
                f'frameborder="0" allowfullscreen loading="lazy"></iframe>')
    return (f'<iframe src="//player.bilibili.com/player.html?bvid={code}&page=1&high_quality=1" '
            f'width="720" height="405" scrolling="no" frameborder="no" allowfullscreen="true"></iframe>')


# -----------------------------------------------------------------------------
# Links
# -----------------------------------------------------------------------------

def _external_link(m: re.Match) -> str:
    href = _directive_url(m.group(1))
    return f'<a href="{href}" target="_blank" rel="noreferrer">{m.group(2)}</a>'


def _keyword_link(m: re.Match) -> str:
    keyword = m.group(1)
    href    = f"/page/?query={quote(_html.unescape(keyword), safe='')}"
    return f'<a href="{href}">{keyword}</a>'


# -----------------------------------------------------------------------------
# Public entry point
# -----------------------------------------------------------------------------

def parse_inline(raw_line: str, *, paragraph: bool = False, auto_float: bool = True) -> str:
    """
    Render the inline directives of *raw_line* to an HTML fragment.

    Parameters
    ----------
    raw_line   : one line of wiki source, unescaped
    paragraph  : wrap the result in ``<p>…</p>``
    auto_float : honour image/video alignment; table cells turn this off
    """
    line = escape_html(raw_line)

    line = _substitute(_IMAGE_RE, line, lambda m: _image(m, auto_float))
    line = _substitute(_VIDEO_RE, line, lambda m: _video(m, auto_float))
    line = _substitute(_EMBED_RE, line, _embed)
    line = _substitute(_LINK_RE, line, _external_link)
    line = _substitute(
        _COLOR_RE, line,
        lambda m: f'<span style="color:#{m.group(1)};">{m.group(2)}</span>',
    )
    line = _substitute(_PAGE_ID_RE, line, lambda m: f'<a href="/wiki/{m.group(1)}">{m.group(2)}</a>')
    line = _substitute(_KEYWORD_RE, line, _keyword_link)
    line = _substitute(_EMOJI_RE, line, lambda m: f'<em class="g_emo i{int(m.group(1))}"></em>')

    line = _BOLD_RE.sub(r"<b>\1</b>", line)

    line = line.replace("http://", _HTTP_SENTINEL).replace("https://", _HTTPS_SENTINEL)
    line = _ITALIC_RE.sub(r"<i>\1</i>", line)
    line = line.replace(_HTTP_SENTINEL, "http://").replace(_HTTPS_SENTINEL, "https://")

    line = _UNDERLINE_RE.sub(r"<u>\1</u>", line)
    line = _STRIKE_RE.sub(r"<s>\1</s>", line)

    return f"<p>{line}</p>" if paragraph else line


# -----------------------------------------------------------------------------

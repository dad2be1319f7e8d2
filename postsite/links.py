from __future__ import annotations

import html
import re

INTERNAL_PREFIX = "/posts/"
FENCE_RE = re.compile(r"^(?P<indent>[ \t]*)(`{3,}|~{3,})")
CODE_SPAN_RE = re.compile(r"(`+).+?(?<!`)\1(?!`)", re.DOTALL)
LINK_RE = re.compile(
    r"(?<!!)\[(?P<text>(?:!\[[^\]]*\]\([^)]*\)|[^\]])+)\]"
    r"\(\s*(?P<url>[^)\s]+)(?:\s+(?:\"(?P<dq>[^\"]*)\"|'(?P<sq>[^']*)'))?\s*\)"
)


def _rewrite_match(match: re.Match) -> str:
    url = match.group("url")
    if url.startswith(INTERNAL_PREFIX):
        return match.group(0)
    href = html.escape(url, quote=True)
    title = match.group("dq")
    if title is None:
        title = match.group("sq")
    title_attr = f' title="{html.escape(title, quote=True)}"' if title is not None else ""
    return f'<a href="{href}"{title_attr} target="_blank" rel="noopener noreferrer">{match.group("text")}</a>'


def _rewrite_prose(text: str) -> str:
    out: list[str] = []
    pos = 0
    for span in CODE_SPAN_RE.finditer(text):
        out.append(LINK_RE.sub(_rewrite_match, text[pos : span.start()]))
        out.append(span.group(0))
        pos = span.end()
    out.append(LINK_RE.sub(_rewrite_match, text[pos:]))
    return "".join(out)


def rewrite_links(text: str) -> str:
    """Turn external markdown links into anchors that open in a new tab.

    Links into ``/posts/`` stay plain markdown. Image syntax, code spans and
    fenced code blocks are left alone.
    """
    out: list[str] = []
    prose: list[str] = []
    in_fence = False
    fence_marker = ""
    for line in text.splitlines(keepends=True):
        fence_match = FENCE_RE.match(line)
        if fence_match:
            marker = fence_match.group(2)
            if not in_fence:
                out.append(_rewrite_prose("".join(prose)))
                prose = []
                in_fence = True
                fence_marker = marker
            elif marker.startswith(fence_marker[0]) and len(marker) >= len(fence_marker):
                in_fence = False
                fence_marker = ""
            out.append(line)
            continue
        if in_fence:
            out.append(line)
        else:
            prose.append(line)
    out.append(_rewrite_prose("".join(prose)))
    return "".join(out)

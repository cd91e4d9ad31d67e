"""HTML rendering of float lines for Qt rich-text tooltips."""

from __future__ import annotations

import html
from typing import Mapping, Sequence

from lspfloat.diagnostics.render import RenderedLine

_FALLBACK_COLOR = "#cfd7e6"


def _span(text: str, name: str | None, colors: Mapping[str, str]) -> str:
    if not text:
        return ""
    escaped = html.escape(text)
    color = colors.get(name or "", "") or colors.get("NormalFloat", "") or _FALLBACK_COLOR
    weight = " font-weight:600;" if name == "Bold" else ""
    return f"<span style='color:{color};{weight}'>{escaped}</span>"


def render_line_html(line: RenderedLine, colors: Mapping[str, str]) -> str:
    text = line.text
    hl = line.highlight
    prefix_len = max(0, min(len(text), hl.prefix.length))
    suffix_len = max(0, min(len(text) - prefix_len, hl.suffix.length))
    body_end = len(text) - suffix_len
    return "".join(
        (
            _span(text[:prefix_len], hl.prefix.name, colors),
            _span(text[prefix_len:body_end], hl.name, colors),
            _span(text[body_end:], hl.suffix.name, colors),
        )
    )


def render_block_html(lines: Sequence[RenderedLine], colors: Mapping[str, str]) -> str:
    if not lines:
        return ""
    parts: list[str] = [
        "<div style='max-width:620px; white-space:pre-wrap; line-height:1.35;"
        " font-family:\"Cascadia Code\",\"Consolas\",monospace;'>",
    ]
    for line in lines:
        parts.append(f"<div>{render_line_html(line, colors) or '&nbsp;'}</div>")
    parts.append("</div>")
    return "".join(parts)

"""Turn diagnostics into decorated float lines with highlight spans."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field, replace
from typing import Any, Callable, Mapping, Sequence

from lspfloat.diagnostics.query import normalize_scope
from lspfloat.errors import DiagnosticConfigError
from lspfloat.lsp.types import Diagnostic, DiagnosticSeverity, to_severity

DEFAULT_HEADER = "Diagnostics:"
HEADER_HIGHLIGHT = "Bold"
DECORATION_HIGHLIGHT = "NormalFloat"

FLOATING_HIGHLIGHTS = {
    DiagnosticSeverity.ERROR: "DiagnosticFloatingError",
    DiagnosticSeverity.WARN: "DiagnosticFloatingWarn",
    DiagnosticSeverity.INFO: "DiagnosticFloatingInfo",
    DiagnosticSeverity.HINT: "DiagnosticFloatingHint",
}

Decoration = Callable[[Diagnostic, int, int], object]


@dataclass(frozen=True)
class Span:
    length: int = 0
    name: str | None = None


@dataclass(frozen=True)
class LineHighlight:
    name: str | None
    prefix: Span = field(default_factory=Span)
    suffix: Span = field(default_factory=Span)


@dataclass(frozen=True)
class RenderedLine:
    text: str
    highlight: LineHighlight


RenderedBlock = list[RenderedLine]


def _header_line(header: object) -> RenderedLine | None:
    if header is False or header is None:
        return None
    if isinstance(header, str):
        if not header:
            return None
        return RenderedLine(header, LineHighlight(HEADER_HIGHLIGHT))
    if isinstance(header, (list, tuple)):
        text = str(header[0] if len(header) > 0 and header[0] is not None else "")
        if not text:
            return None
        name = header[1] if len(header) > 1 and header[1] else HEADER_HIGHLIGHT
        return RenderedLine(text, LineHighlight(str(name)))
    raise DiagnosticConfigError(f"Option 'header' must be a string or a (text, highlight) pair: {header!r}")


def _format_one(formatter: object, diagnostic: Diagnostic) -> Diagnostic | None:
    if isinstance(formatter, str):
        fields = asdict(diagnostic)
        fields["severity"] = diagnostic.severity.name
        return replace(diagnostic, message=formatter.format(**fields))
    if not callable(formatter):
        raise DiagnosticConfigError(f"Option 'format' entries must be callables or templates: {formatter!r}")
    result = formatter(diagnostic)
    if result is None:
        return None
    if isinstance(result, Diagnostic):
        return result
    return replace(diagnostic, message=str(result))


def reformat_diagnostics(formatter: object, diagnostics: Sequence[Diagnostic]) -> list[Diagnostic]:
    by_severity: dict[DiagnosticSeverity, object] | None = None
    if isinstance(formatter, Mapping):
        by_severity = {to_severity(key): value for key, value in formatter.items()}
    elif not callable(formatter):
        raise DiagnosticConfigError(f"Option 'format' must be a function or a table: {formatter!r}")

    out: list[Diagnostic] = []
    for diagnostic in diagnostics:
        current = formatter
        if by_severity is not None:
            current = by_severity.get(diagnostic.severity)
            if current is None:
                out.append(diagnostic)
                continue
        formatted = _format_one(current, diagnostic)
        if formatted is not None:
            out.append(formatted)
    return out


def prefix_source(diagnostics: Sequence[Diagnostic]) -> list[Diagnostic]:
    out = []
    for d in diagnostics:
        if d.source:
            d = replace(d, message=f"{d.source}: {d.message}")
        out.append(d)
    return out


def _wants_source(source: object, source_count: int) -> bool:
    if not source:
        return False
    if source == "if_many":
        return source_count > 1
    if source is True or source == "always":
        return True
    raise DiagnosticConfigError(f"Invalid value for option 'source': {source!r}")


def _decoration(option: str, value: object) -> tuple[str, str] | Decoration | None:
    if value is False or value is None:
        return None
    if isinstance(value, str):
        return value, DECORATION_HIGHLIGHT
    if isinstance(value, (list, tuple)):
        text = value[0] if len(value) > 0 and value[0] is not None else ""
        name = value[1] if len(value) > 1 and value[1] else DECORATION_HIGHLIGHT
        return str(text), str(name)
    if callable(value):
        return value
    raise DiagnosticConfigError(f"Option '{option}' must be a string, a table or a function: {value!r}")


def _apply(decoration: tuple[str, str] | Decoration | None, d: Diagnostic, i: int, total: int) -> tuple[str, str]:
    if decoration is None:
        return "", DECORATION_HIGHLIGHT
    if isinstance(decoration, tuple):
        return decoration
    result = decoration(d, i, total)
    if isinstance(result, (list, tuple)):
        text = result[0] if len(result) > 0 and result[0] is not None else ""
        name = result[1] if len(result) > 1 and result[1] else DECORATION_HIGHLIGHT
        return str(text), str(name)
    return str(result or ""), DECORATION_HIGHLIGHT


def _numbered_prefix(_diagnostic: Diagnostic, i: int, _total: int) -> str:
    return f"{i}. "


def _code_suffix(diagnostic: Diagnostic, _i: int, _total: int) -> str:
    if diagnostic.code is None or diagnostic.code == "":
        return ""
    return f" [{diagnostic.code}]"


def render_float(
    diagnostics: Sequence[Diagnostic],
    opts: Mapping[str, Any] | None = None,
    *,
    source_count: int = 0,
) -> RenderedBlock:
    """Render diagnostics into lines ready for a floating window.

    ``source_count`` is the number of distinct sources in the target document;
    it only matters for ``source="if_many"``.
    """
    opts = opts or {}
    lines: RenderedBlock = []

    header = _header_line(opts["header"] if "header" in opts else DEFAULT_HEADER)
    if header is not None:
        lines.append(header)

    diagnostics = list(diagnostics)
    if opts.get("format") is not None:
        diagnostics = reformat_diagnostics(opts["format"], diagnostics)

    if _wants_source(opts.get("source"), source_count):
        diagnostics = prefix_source(diagnostics)

    scope = normalize_scope(opts.get("scope"))
    prefix_opt = opts.get("prefix")
    if prefix_opt is None:
        prefix_opt = "" if scope == "cursor" and len(diagnostics) <= 1 else _numbered_prefix
    suffix_opt = opts.get("suffix")
    if suffix_opt is None:
        suffix_opt = _code_suffix
    prefix_decoration = _decoration("prefix", prefix_opt)
    suffix_decoration = _decoration("suffix", suffix_opt)

    total = len(diagnostics)
    for i, diagnostic in enumerate(diagnostics, start=1):
        if not diagnostic.message:
            continue
        prefix, prefix_hl = _apply(prefix_decoration, diagnostic, i, total)
        suffix, suffix_hl = _apply(suffix_decoration, diagnostic, i, total)
        hl_name = FLOATING_HIGHLIGHTS.get(to_severity(diagnostic.severity))
        message_lines = diagnostic.message.split("\n")
        last = len(message_lines) - 1
        for j, text in enumerate(message_lines):
            pre = prefix if j == 0 else " " * len(prefix)
            suf = suffix if j == last else ""
            lines.append(
                RenderedLine(
                    pre + text + suf,
                    LineHighlight(
                        hl_name,
                        prefix=Span(len(prefix) if j == 0 else 0, prefix_hl),
                        suffix=Span(len(suffix) if j == last else 0, suffix_hl),
                    ),
                )
            )
    return lines

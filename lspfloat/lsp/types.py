"""Diagnostic records, severities and LSP payload normalization."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Callable, Mapping

from lspfloat.errors import DiagnosticConfigError


class DiagnosticSeverity(IntEnum):
    ERROR = 1
    WARN = 2
    INFO = 3
    HINT = 4


_SEVERITY_BY_NAME = {
    "error": DiagnosticSeverity.ERROR,
    "e": DiagnosticSeverity.ERROR,
    "warning": DiagnosticSeverity.WARN,
    "warn": DiagnosticSeverity.WARN,
    "w": DiagnosticSeverity.WARN,
    "info": DiagnosticSeverity.INFO,
    "information": DiagnosticSeverity.INFO,
    "i": DiagnosticSeverity.INFO,
    "hint": DiagnosticSeverity.HINT,
    "n": DiagnosticSeverity.HINT,
}


def to_severity(value: object) -> DiagnosticSeverity:
    if isinstance(value, DiagnosticSeverity):
        return value
    if isinstance(value, bool):
        raise DiagnosticConfigError(f"Invalid severity: {value!r}")
    if isinstance(value, int):
        try:
            return DiagnosticSeverity(value)
        except ValueError:
            raise DiagnosticConfigError(f"Invalid severity: {value!r}") from None
    if isinstance(value, str):
        sev = _SEVERITY_BY_NAME.get(value.strip().lower())
        if sev is not None:
            return sev
    raise DiagnosticConfigError(f"Invalid severity: {value!r}")


@dataclass(frozen=True)
class Diagnostic:
    """One reported issue. Coordinates are 0-based."""

    lnum: int
    col: int
    message: str
    severity: DiagnosticSeverity = DiagnosticSeverity.ERROR
    end_lnum: int | None = None
    end_col: int | None = None
    code: str | int | None = None
    source: str | None = None
    bufnr: int = 0
    namespace: int = 0
    user_data: Mapping[str, Any] = field(default_factory=dict, compare=False)


def codepoint_index_from_utf16_units(text: str, utf16_units: int) -> int:
    if not text:
        return max(0, int(utf16_units))
    remaining = max(0, int(utf16_units))
    idx = 0
    while idx < len(text):
        units = 1 if ord(text[idx]) <= 0xFFFF else 2
        if remaining < units:
            break
        remaining -= units
        idx += 1
    # Offsets past the end of the line stay past the end; clamping happens at query time.
    return idx + remaining


def _lsp_code(code_raw: object) -> str | int | None:
    if isinstance(code_raw, dict):
        code_raw = code_raw.get("value")
    if code_raw is None or code_raw == "":
        return None
    if isinstance(code_raw, int) and not isinstance(code_raw, bool):
        return code_raw
    return str(code_raw)


def diagnostics_from_lsp(
    diagnostics_obj: object,
    *,
    line_text: Callable[[int], str] | None = None,
) -> list[Diagnostic]:
    """Convert a ``publishDiagnostics`` diagnostics list into records.

    When ``line_text`` is given, LSP UTF-16 character offsets are converted to
    code-point columns using the text of the referenced line.
    """
    diagnostics = diagnostics_obj if isinstance(diagnostics_obj, list) else []
    out: list[Diagnostic] = []
    for item in diagnostics:
        if not isinstance(item, dict):
            continue
        rng = item.get("range")
        if not isinstance(rng, dict):
            continue
        start = rng.get("start") if isinstance(rng.get("start"), dict) else {}
        end = rng.get("end") if isinstance(rng.get("end"), dict) else {}

        lnum = int(start.get("line", 0))
        col = int(start.get("character", 0))
        end_lnum = int(end.get("line", lnum))
        end_col = int(end.get("character", col))
        if line_text is not None:
            col = codepoint_index_from_utf16_units(line_text(lnum), col)
            end_col = codepoint_index_from_utf16_units(line_text(end_lnum), end_col)

        try:
            severity = to_severity(item.get("severity", DiagnosticSeverity.WARN))
        except DiagnosticConfigError:
            severity = DiagnosticSeverity.WARN

        source = str(item.get("source") or "").strip() or None
        out.append(
            Diagnostic(
                lnum=lnum,
                col=col,
                end_lnum=end_lnum,
                end_col=end_col,
                severity=severity,
                message=str(item.get("message") or ""),
                code=_lsp_code(item.get("code")),
                source=source,
                user_data={"lsp": item},
            )
        )
    return out

"""Select, clamp, filter and sort cached diagnostics."""

from __future__ import annotations

from dataclasses import replace
from typing import Any, Mapping

from lspfloat.diagnostics.options import Deferred, option_value
from lspfloat.diagnostics.store import DiagnosticStore, filter_by_severity
from lspfloat.errors import DiagnosticConfigError
from lspfloat.lsp.types import Diagnostic
from lspfloat.services.host import EditorHost

_SCOPE_ALIASES = {"l": "line", "c": "cursor", "b": "buffer"}
SCOPES = ("line", "cursor", "buffer")


def normalize_scope(scope: object) -> str:
    if scope is None:
        return "line"
    value = _SCOPE_ALIASES.get(scope, scope) if isinstance(scope, str) else scope
    if value not in SCOPES:
        raise DiagnosticConfigError(f"Invalid value for option 'scope': {scope!r}")
    return value


def _is_int(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _clamp(record: Diagnostic, last_line: int) -> Diagnostic:
    end_lnum = record.lnum if record.end_lnum is None else record.end_lnum
    end_col = record.col if record.end_col is None else record.end_col
    if (
        record.lnum > last_line
        or end_lnum > last_line
        or record.lnum < 0
        or end_lnum < 0
        or record.col < 0
        or end_col < 0
    ):
        return replace(
            record,
            lnum=max(min(record.lnum, last_line), 0),
            end_lnum=max(min(end_lnum, last_line), 0),
            col=max(record.col, 0),
            end_col=max(end_col, 0),
        )
    return record


def sort_by_severity(diagnostics: list[Diagnostic], severity_sort: object) -> list[Diagnostic]:
    value = option_value(severity_sort)
    if isinstance(value, Deferred):
        raise DiagnosticConfigError("Option 'severity_sort' must be resolved before querying.")
    if not value:
        return diagnostics
    # sorted() is stable for both directions.
    return sorted(diagnostics, key=lambda d: d.severity, reverse=bool(value.get("reverse")))


class DiagnosticQuery:
    def __init__(self, store: DiagnosticStore, host: EditorHost) -> None:
        self.store = store
        self.host = host

    def resolve_document(self, document: int | None) -> int | None:
        if document == 0:
            return self.host.current_document()
        return document

    def target_position(self, scope: str, pos: object) -> tuple[int | None, int | None]:
        if scope == "buffer":
            return None, None
        if pos is None:
            lnum, col = self.host.cursor_position()
            return int(lnum), int(col)
        if _is_int(pos):
            return pos, 0
        if isinstance(pos, (list, tuple)) and len(pos) == 2 and all(_is_int(v) for v in pos):
            return pos[0], pos[1]
        raise DiagnosticConfigError(f"Invalid value for option 'pos': {pos!r}")

    def select(
        self,
        document: int | None,
        opts: Mapping[str, Any] | None = None,
        clamp: bool = False,
    ) -> list[Diagnostic]:
        """Gather diagnostics by document/namespace, clamping into loaded documents."""
        opts = opts or {}
        document = self.resolve_document(document)
        line_counts: dict[int, int] = {}
        lnum = opts.get("lnum")

        out: list[Diagnostic] = []
        for doc, _ns, records in self.store.iter_collections(document, opts.get("namespace")):
            loaded = clamp and self.host.is_loaded(doc)
            if loaded and doc not in line_counts:
                line_counts[doc] = self.host.line_count(doc)
            # Host callbacks can wipe the document while we iterate.
            if not self.store.has_document(doc):
                continue
            for record in records:
                if loaded:
                    record = _clamp(record, line_counts[doc] - 1)
                if lnum is not None and record.lnum != lnum:
                    continue
                out.append(record)

        severity = opts.get("severity")
        if severity is not None:
            out = filter_by_severity(severity, out)
        return out

    def query(
        self,
        document: int | None,
        opts: Mapping[str, Any] | None = None,
        clamp: bool = True,
    ) -> list[Diagnostic]:
        opts = opts or {}
        document = self.resolve_document(document)
        scope = normalize_scope(opts.get("scope"))
        lnum, col = self.target_position(scope, opts.get("pos"))

        diagnostics = self.select(document, opts, clamp)

        if scope == "line":
            diagnostics = [d for d in diagnostics if d.lnum == lnum]
        elif scope == "cursor":
            # LSP servers can send an end column past the end of the line.
            line_length = len(self.host.line_text(document, lnum)) if document else 0
            diagnostics = [
                d
                for d in diagnostics
                if d.lnum == lnum
                and min(d.col, line_length - 1) <= col
                and (d.end_col >= col or d.end_lnum > lnum)
            ]

        return sort_by_severity(diagnostics, opts.get("severity_sort"))

    def count_sources(self, document: int | None) -> int:
        document = self.resolve_document(document)
        if document is None:
            return 0
        sources = {d.source for d in self.store.get(document) if d.source}
        return len(sources)

"""Per-document, per-namespace diagnostic cache."""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Callable, Iterable, Mapping

from lspfloat.errors import DiagnosticConfigError, InvalidDocumentError
from lspfloat.lsp.types import Diagnostic, to_severity

log = logging.getLogger(__name__)

DiscardRegistrar = Callable[[int, Callable[[], None]], None]


def filter_by_severity(severity: object, diagnostics: Iterable[Diagnostic]) -> list[Diagnostic]:
    """Keep diagnostics matching a severity, a collection of them, or a min/max range."""
    if isinstance(severity, Mapping):
        unknown = set(severity) - {"min", "max"}
        if unknown:
            raise DiagnosticConfigError(f"Invalid severity filter keys: {sorted(unknown)}")
        # "min" is the least severe value allowed, which is the numerically largest.
        least = to_severity(severity["min"]) if "min" in severity else None
        most = to_severity(severity["max"]) if "max" in severity else None
        out = []
        for d in diagnostics:
            if least is not None and d.severity > least:
                continue
            if most is not None and d.severity < most:
                continue
            out.append(d)
        return out
    if isinstance(severity, (list, tuple, set, frozenset)):
        allowed = {to_severity(item) for item in severity}
        return [d for d in diagnostics if d.severity in allowed]
    wanted = to_severity(severity)
    return [d for d in diagnostics if d.severity == wanted]


def _check_document(document: int) -> None:
    if isinstance(document, bool) or not isinstance(document, int) or document <= 0:
        raise InvalidDocumentError(f"Invalid document identifier: {document!r}")


class DiagnosticStore:
    """Owns every cached record, keyed by document and then namespace.

    The per-document map is created on first write. When ``register_discard``
    is given, it is called once per newly seen document with a callback that
    drops that document's map.
    """

    def __init__(self, register_discard: DiscardRegistrar | None = None) -> None:
        self._cache: dict[int, dict[int, list[Diagnostic]]] = {}
        self._register_discard = register_discard
        self._hooked: set[int] = set()

    def put(self, document: int, namespace: int, records: Iterable[Diagnostic]) -> None:
        _check_document(document)
        stored: list[Diagnostic] = []
        for record in records or ():
            end_lnum = record.lnum if record.end_lnum is None else record.end_lnum
            end_col = record.col if record.end_col is None else record.end_col
            stored.append(
                replace(
                    record,
                    bufnr=document,
                    namespace=namespace,
                    end_lnum=end_lnum,
                    end_col=end_col,
                    severity=to_severity(record.severity),
                )
            )

        per_document = self._cache.get(document)
        if per_document is None:
            per_document = {}
            self._cache[document] = per_document
            self._hook_discard(document)
        per_document[namespace] = stored
        log.debug("Stored %d diagnostic(s) for document %s namespace %s", len(stored), document, namespace)

    def get(
        self,
        document: int | None = None,
        namespace: int | None = None,
        *,
        lnum: int | None = None,
        severity: object = None,
    ) -> list[Diagnostic]:
        out: list[Diagnostic] = []
        for _doc, _ns, records in self.iter_collections(document, namespace):
            for record in records:
                if lnum is not None and record.lnum != lnum:
                    continue
                out.append(record)
        if severity is not None:
            out = filter_by_severity(severity, out)
        return out

    def iter_collections(
        self,
        document: int | None = None,
        namespace: int | None = None,
    ) -> list[tuple[int, int, list[Diagnostic]]]:
        """Snapshot the matching (document, namespace, records) collections."""
        if document is None:
            documents = list(self._cache.items())
        else:
            documents = [(document, self._cache.get(document, {}))]

        out: list[tuple[int, int, list[Diagnostic]]] = []
        for doc, per_document in documents:
            if namespace is None:
                for ns, records in list(per_document.items()):
                    out.append((doc, ns, list(records)))
            elif namespace in per_document:
                out.append((doc, namespace, list(per_document[namespace])))
        return out

    def discard(self, document: int) -> None:
        _check_document(document)
        if self._cache.pop(document, None) is not None:
            log.debug("Discarded diagnostics for document %s", document)

    def clear(self, document: int | None = None, namespace: int | None = None) -> list[tuple[int, int]]:
        cleared: list[tuple[int, int]] = []
        for doc, ns, _records in self.iter_collections(document, namespace):
            per_document = self._cache.get(doc)
            if per_document is None:
                continue
            per_document.pop(ns, None)
            cleared.append((doc, ns))
        return cleared

    def has_document(self, document: int) -> bool:
        return document in self._cache

    def documents(self) -> list[int]:
        return list(self._cache)

    def namespaces(self, document: int) -> list[int]:
        return list(self._cache.get(document, {}))

    def _hook_discard(self, document: int) -> None:
        if self._register_discard is None or document in self._hooked:
            return
        self._hooked.add(document)
        self._register_discard(document, lambda doc=document: self._on_host_discard(doc))

    def _on_host_discard(self, document: int) -> None:
        # The host drops its callback once it fires; a later put must hook again.
        self._hooked.discard(document)
        self.discard(document)

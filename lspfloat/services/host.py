"""Editor host contract and an in-memory buffer host.

The engine only needs a handful of queries from the editor: which document
and cursor are current, whether a document is loaded, how many lines it has,
and the text of a line. It also needs a way to hear about wiped documents.
"""

from __future__ import annotations

import logging
from typing import Callable, Protocol

from PySide6.QtCore import QObject, Signal

from lspfloat.errors import InvalidDocumentError

log = logging.getLogger(__name__)


class EditorHost(Protocol):
    def current_document(self) -> int:
        ...

    def cursor_position(self) -> tuple[int, int]:
        """Return the cursor as 0-based (line, column)."""
        ...

    def is_loaded(self, document: int) -> bool:
        ...

    def line_count(self, document: int) -> int:
        ...

    def line_text(self, document: int, lnum: int) -> str:
        ...

    def watch_discard(self, document: int, callback: Callable[[], None]) -> None:
        """Call ``callback`` once when ``document`` is wiped, then forget it."""
        ...

    def document_for_uri(self, uri: str) -> int | None:
        ...


class BufferHost(QObject):
    """Keeps document text in memory and reports wipeouts."""

    documentDiscarded = Signal(int)

    def __init__(self, parent: QObject | None = None) -> None:
        super().__init__(parent)
        self._lines: dict[int, list[str]] = {}
        self._uris: dict[int, str] = {}
        self._loaded: set[int] = set()
        self._discard_callbacks: dict[int, list[Callable[[], None]]] = {}
        self._next_document = 1
        self._current = 0
        self._cursor: tuple[int, int] = (0, 0)

    def open_document(self, text: str = "", *, uri: str = "") -> int:
        document = self._next_document
        self._next_document += 1
        self._lines[document] = str(text or "").split("\n")
        self._uris[document] = str(uri or "").strip()
        self._loaded.add(document)
        if self._current == 0:
            self._current = document
        return document

    def set_text(self, document: int, text: str) -> None:
        self._require(document)
        self._lines[document] = str(text or "").split("\n")

    def set_current(self, document: int, cursor: tuple[int, int] = (0, 0)) -> None:
        self._require(document)
        self._current = document
        self.set_cursor(*cursor)

    def set_cursor(self, lnum: int, col: int = 0) -> None:
        self._cursor = (max(0, int(lnum)), max(0, int(col)))

    def unload(self, document: int) -> None:
        self._loaded.discard(document)

    def wipeout(self, document: int) -> None:
        if document not in self._lines:
            return
        callbacks = self._discard_callbacks.pop(document, [])
        self._lines.pop(document, None)
        self._uris.pop(document, None)
        self._loaded.discard(document)
        if self._current == document:
            self._current = 0
        for callback in callbacks:
            callback()
        log.debug("Wiped out document %s (%d discard hook(s))", document, len(callbacks))
        self.documentDiscarded.emit(document)

    def current_document(self) -> int:
        return self._current

    def cursor_position(self) -> tuple[int, int]:
        return self._cursor

    def is_loaded(self, document: int) -> bool:
        return document in self._loaded

    def line_count(self, document: int) -> int:
        return len(self._lines.get(document, [""]))

    def line_text(self, document: int, lnum: int) -> str:
        lines = self._lines.get(document, [])
        if 0 <= int(lnum) < len(lines):
            return lines[int(lnum)]
        return ""

    def watch_discard(self, document: int, callback: Callable[[], None]) -> None:
        self._discard_callbacks.setdefault(document, []).append(callback)

    def document_for_uri(self, uri: str) -> int | None:
        clean = str(uri or "").strip()
        if not clean:
            return None
        for document, doc_uri in self._uris.items():
            if doc_uri == clean:
                return document
        return None

    def _require(self, document: int) -> None:
        if document not in self._lines:
            raise InvalidDocumentError(f"Unknown document: {document!r}")

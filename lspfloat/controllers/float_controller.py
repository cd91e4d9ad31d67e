"""Routes LSP notifications and hover responses into the diagnostic engine."""

from __future__ import annotations

import logging

from PySide6.QtCore import QObject, Signal

from lspfloat.diagnostics.engine import DiagnosticEngine
from lspfloat.errors import DiagnosticConfigError
from lspfloat.lsp.hover import HoverMerge
from lspfloat.lsp.types import diagnostics_from_lsp

log = logging.getLogger(__name__)

PUBLISH_DIAGNOSTICS = "textDocument/publishDiagnostics"


class FloatController(QObject):
    statusMessage = Signal(str)

    def __init__(self, engine: DiagnosticEngine, hover: HoverMerge | None = None, parent: QObject | None = None):
        super().__init__(parent)
        self.engine = engine
        self.hover = hover if hover is not None else HoverMerge(engine)
        self._namespace_by_client: dict[str, int] = {}

    def attach_client(self, client: QObject, name: str) -> int:
        """Listen to a client's ``notificationReceived(method, params)`` signal."""
        namespace = self.namespace_for_client(name)
        client.notificationReceived.connect(
            lambda method, params, client_name=name: self.on_notification(client_name, method, params)
        )
        return namespace

    def namespace_for_client(self, name: str) -> int:
        clean = str(name or "").strip() or "default"
        namespace = self._namespace_by_client.get(clean)
        if namespace is None:
            namespace = self.engine.create_namespace(f"lsp:{clean}")
            self._namespace_by_client[clean] = namespace
        return namespace

    def on_notification(self, client_name: str, method: str, params_obj: object) -> None:
        if method != PUBLISH_DIAGNOSTICS:
            return
        params = params_obj if isinstance(params_obj, dict) else {}
        uri = str(params.get("uri") or "").strip()
        document = self.engine.host.document_for_uri(uri)
        if document is None:
            log.debug("Ignoring diagnostics for unknown document %s", uri)
            return
        host = self.engine.host
        records = diagnostics_from_lsp(
            params.get("diagnostics"),
            line_text=lambda lnum, doc=document: host.line_text(doc, lnum),
        )
        self.engine.set(self.namespace_for_client(client_name), document, records)

    def on_hover_result(
        self,
        result: object,
        document: int | None = None,
        pos: int | tuple[int, int] | None = None,
    ) -> None:
        try:
            self.hover.on_hover(result, document, pos)
        except DiagnosticConfigError as exc:
            log.warning("Hover float failed: %s", exc)
            self.statusMessage.emit(f"Hover float failed: {exc}")

    def open_float(self, opts: dict | None = None, document: int | None = None) -> None:
        try:
            self.engine.open_float(opts, document)
        except DiagnosticConfigError as exc:
            log.warning("Diagnostic float failed: %s", exc)
            self.statusMessage.emit(f"Diagnostic float failed: {exc}")

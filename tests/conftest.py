from __future__ import annotations

import pytest
from PySide6.QtCore import QCoreApplication

from lspfloat.diagnostics.engine import DiagnosticEngine
from lspfloat.lsp.types import Diagnostic, DiagnosticSeverity
from lspfloat.services.host import BufferHost


@pytest.fixture(scope="session", autouse=True)
def qt_app():
    app = QCoreApplication.instance() or QCoreApplication([])
    yield app


@pytest.fixture
def make_diag():
    def _make(
        lnum: int,
        col: int = 0,
        message: str = "problem",
        severity: DiagnosticSeverity | int = DiagnosticSeverity.ERROR,
        **kwargs,
    ) -> Diagnostic:
        return Diagnostic(lnum=lnum, col=col, message=message, severity=DiagnosticSeverity(severity), **kwargs)

    return _make


@pytest.fixture
def host() -> BufferHost:
    return BufferHost()


@pytest.fixture
def document(host: BufferHost) -> int:
    text = "\n".join(f"line {i}" for i in range(10))
    doc = host.open_document(text, uri="file:///project/main.py")
    host.set_current(doc, (0, 0))
    return doc


@pytest.fixture
def engine(host: BufferHost) -> DiagnosticEngine:
    return DiagnosticEngine(host)

from .diagnostics.engine import DiagnosticEngine
from .errors import DiagnosticConfigError, InvalidDocumentError, LspFloatError
from .lsp.hover import HoverMerge
from .lsp.types import Diagnostic, DiagnosticSeverity

__all__ = [
    "Diagnostic",
    "DiagnosticConfigError",
    "DiagnosticEngine",
    "DiagnosticSeverity",
    "HoverMerge",
    "InvalidDocumentError",
    "LspFloatError",
]

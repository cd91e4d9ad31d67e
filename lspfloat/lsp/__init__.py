from .types import Diagnostic, DiagnosticSeverity, diagnostics_from_lsp

__all__ = [
    "Diagnostic",
    "DiagnosticSeverity",
    "diagnostics_from_lsp",
]

"""Error taxonomy shared by the diagnostic engine."""

from __future__ import annotations


class LspFloatError(Exception):
    """Base class for engine errors."""


class InvalidDocumentError(LspFloatError, ValueError):
    """Raised when a non-positive document identifier reaches the store."""


class DiagnosticConfigError(LspFloatError, ValueError):
    """Raised for malformed scope, position, severity or option values."""

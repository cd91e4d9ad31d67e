from .options import Deferred, Disabled, Enabled, OptionResolver
from .query import DiagnosticQuery
from .render import LineHighlight, RenderedLine, Span, render_float
from .store import DiagnosticStore

__all__ = [
    "Deferred",
    "DiagnosticQuery",
    "DiagnosticStore",
    "Disabled",
    "Enabled",
    "LineHighlight",
    "OptionResolver",
    "RenderedLine",
    "Span",
    "render_float",
]

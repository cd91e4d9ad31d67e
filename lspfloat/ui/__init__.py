from .float_docs import FloatDocs, FloatMessage, format_message

__all__ = [
    "FloatDocs",
    "FloatMessage",
    "format_message",
]

"""Display-sink contract for floats plus an in-memory, signal-based implementation."""

from __future__ import annotations

import logging
from typing import Mapping, Protocol, Sequence

from PySide6.QtCore import QObject, Signal

from lspfloat.diagnostics.render import RenderedLine
from lspfloat.settings_models import default_diagnostic_settings
from lspfloat.ui.float_html import render_block_html

log = logging.getLogger(__name__)


class MessageHandle(Protocol):
    def focus(self) -> bool:
        """Return True when a view for this handle is already focused."""
        ...

    def is_empty(self) -> bool:
        ...


class DocsSink(Protocol):
    def get(self, role: str) -> MessageHandle:
        ...

    def show(self, message: MessageHandle) -> None:
        ...


class Formatter(Protocol):
    def __call__(self, message: MessageHandle, content: Sequence[RenderedLine]) -> None:
        ...


class FloatMessage:
    def __init__(self, role: str) -> None:
        self.role = role
        self.lines: list[RenderedLine] = []
        self._focused = False

    def focus(self) -> bool:
        return self._focused

    def set_focused(self, focused: bool) -> None:
        self._focused = bool(focused)

    def is_empty(self) -> bool:
        return not any(line.text.strip() for line in self.lines)

    def clear(self) -> None:
        self.lines = []


def format_message(message: FloatMessage, content: Sequence[RenderedLine]) -> None:
    """Write content into the handle, dropping leading and trailing blank lines."""
    lines = list(content)
    while lines and not lines[0].text.strip():
        lines.pop(0)
    while lines and not lines[-1].text.strip():
        lines.pop()
    message.lines = lines


class FloatDocs(QObject):
    """Keeps one message per role and announces shown floats as HTML."""

    messageShown = Signal(str, str)  # role, html

    def __init__(self, colors: Mapping[str, str] | None = None, parent: QObject | None = None) -> None:
        super().__init__(parent)
        self._messages: dict[str, FloatMessage] = {}
        if colors is None:
            colors = default_diagnostic_settings()["highlights"]
        self._colors: dict[str, str] = dict(colors)
        self.shown: list[FloatMessage] = []

    def get(self, role: str) -> FloatMessage:
        message = self._messages.get(role)
        if message is None:
            message = FloatMessage(role)
            self._messages[role] = message
        return message

    def show(self, message: FloatMessage) -> None:
        self.shown.append(message)
        log.debug("Showing %s float with %d line(s)", message.role, len(message.lines))
        self.messageShown.emit(message.role, render_block_html(message.lines, self._colors))

    def set_colors(self, colors: Mapping[str, str]) -> None:
        self._colors.update(colors)

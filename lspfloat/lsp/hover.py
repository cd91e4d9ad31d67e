"""Hover floats that lead with the diagnostics on the cursor line."""

from __future__ import annotations

import logging
from typing import Any, Mapping

from lspfloat.diagnostics.engine import DiagnosticEngine
from lspfloat.diagnostics.query import normalize_scope
from lspfloat.diagnostics.render import LineHighlight, RenderedLine
from lspfloat.ui.float_docs import DocsSink, Formatter, format_message

log = logging.getLogger(__name__)

HOVER_ROLE = "hover"


def stringify_hover_content(content_obj: object) -> str:
    if isinstance(content_obj, str):
        return content_obj
    if isinstance(content_obj, dict):
        language = str(content_obj.get("language") or "").strip()
        value = str(content_obj.get("value") or "").strip()
        if language and value:
            return f"```{language}\n{value}\n```"
        return value
    if isinstance(content_obj, list):
        parts = [stringify_hover_content(item).strip() for item in content_obj]
        return "\n\n".join(part for part in parts if part)
    return ""


def hover_content_lines(content_obj: object) -> list[RenderedLine]:
    text = stringify_hover_content(content_obj)
    if not text.strip():
        return []
    return [RenderedLine(line, LineHighlight(None)) for line in text.split("\n")]


class HoverMerge:
    """Combines cursor-line diagnostics with an LSP hover result."""

    def __init__(
        self,
        engine: DiagnosticEngine,
        *,
        docs: DocsSink | None = None,
        formatter: Formatter = format_message,
        float_opts: Mapping[str, Any] | None = None,
    ) -> None:
        self.engine = engine
        self.docs = docs if docs is not None else engine.docs
        self.formatter = formatter
        self.float_overrides: dict[str, Any] = dict(float_opts or {})

    def on_hover(
        self,
        result: object,
        document: int | None = None,
        pos: int | tuple[int, int] | None = None,
    ) -> list[RenderedLine] | None:
        """Show ``result`` with the diagnostics at ``pos`` leading.

        Without ``pos`` the host cursor is used, which only applies to the
        current document. Hovers for other documents then show the hover
        text alone.
        """
        hover_cfg = self.engine.settings.get("hover") or {}
        if not hover_cfg.get("enabled", True):
            log.debug("Hover floats are disabled")
            return None
        if not isinstance(result, dict) or not result.get("contents"):
            log.debug("Hover result has no contents")
            return None

        message = self.docs.get(HOVER_ROLE)
        if message.focus():
            log.debug("Hover float already focused; skipping merge")
            return None

        opts = {
            "scope": hover_cfg.get("diagnostics_scope", "line"),
            "header": hover_cfg.get("diagnostics_header", False),
            **self.float_overrides,
        }
        if pos is not None:
            opts["pos"] = pos
        content: list[RenderedLine] = []
        scope = normalize_scope(opts.get("scope"))
        if "pos" in opts or scope == "buffer" or self._is_current(document):
            block, _effective = self.engine.float_diagnostics(opts, document)
            content.extend(block or [])
        else:
            log.debug("No position for hover in document %s; skipping diagnostics", document)
        content.extend(hover_content_lines(result.get("contents")))

        self.formatter(message, content)
        if message.is_empty():
            log.debug("Hover float is empty after formatting")
            return None
        self.docs.show(message)
        return content

    def _is_current(self, document: int | None) -> bool:
        return document is None or document == 0 or document == self.engine.host.current_document()

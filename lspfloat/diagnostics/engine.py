"""Engine facade tying store, options, query and rendering together."""

from __future__ import annotations

import logging
from copy import deepcopy
from typing import Any, Iterable, Mapping

from PySide6.QtCore import QObject, Signal

from lspfloat.diagnostics.namespaces import Namespace, NamespaceRegistry
from lspfloat.diagnostics.options import OptionResolver
from lspfloat.diagnostics.query import DiagnosticQuery, normalize_scope
from lspfloat.diagnostics.render import RenderedBlock, render_float
from lspfloat.diagnostics.store import DiagnosticStore
from lspfloat.lsp.types import Diagnostic
from lspfloat.services.host import EditorHost
from lspfloat.settings_models import OPTION_KEYS, default_diagnostic_settings, global_options_from_settings
from lspfloat.settings_store import JsonSettingsStore, assign, lookup
from lspfloat.ui.float_docs import DocsSink, FloatDocs, Formatter, format_message

log = logging.getLogger(__name__)


class DiagnosticEngine(QObject):
    """Owns one diagnostic cache and the option tables used to present it."""

    diagnosticsChanged = Signal(int, int)  # document, namespace

    def __init__(
        self,
        host: EditorHost,
        *,
        docs: DocsSink | None = None,
        formatter: Formatter = format_message,
        settings: Mapping[str, Any] | None = None,
        settings_store: JsonSettingsStore | None = None,
        parent: QObject | None = None,
    ) -> None:
        super().__init__(parent)
        self.host = host
        self.settings_store = settings_store
        if settings is None:
            settings = settings_store.load() if settings_store is not None else default_diagnostic_settings()
        self.settings: dict[str, Any] = deepcopy(dict(settings))
        self.docs = docs if docs is not None else FloatDocs(self.settings.get("highlights"), parent=self)
        self.formatter = formatter

        self.namespaces = NamespaceRegistry()
        self.global_options: dict[str, Any] = global_options_from_settings(self.settings)
        self.resolver = OptionResolver(self.global_options, self.namespaces)
        self.store = DiagnosticStore(register_discard=host.watch_discard)
        self.queries = DiagnosticQuery(self.store, host)

    # ---------- Settings ----------

    def set_setting(self, key: str, value: Any, *, save: bool = False) -> bool:
        """Change one dotted settings key and apply it to the running engine.

        Top-level option keys replace the matching global option, dropping any
        runtime ``config`` change to it. With a settings store attached the
        change is recorded there too, and written to disk when ``save`` is set.
        """
        if self.settings_store is not None:
            changed = self.settings_store.set(key, value)
            if save and self.settings_store.dirty:
                self.settings_store.save()
            self.settings = self.settings_store.snapshot()
        else:
            changed = lookup(self.settings, key, object()) != value
            assign(self.settings, key, deepcopy(value))
        if not changed:
            return False

        section = key.split(".", 1)[0]
        if section in OPTION_KEYS:
            self.global_options[section] = deepcopy(self.settings[section])
        elif section == "highlights" and isinstance(self.docs, FloatDocs):
            self.docs.set_colors(self.settings.get("highlights") or {})
        log.debug("Setting '%s' changed", key)
        return True

    # ---------- Namespaces & configuration ----------

    def create_namespace(self, name: str) -> int:
        return self.namespaces.create(name)

    def get_namespace(self, namespace: int) -> Namespace:
        return self.namespaces.get(namespace)

    def config(self, opts: Mapping[str, Any] | None = None, namespace: int | None = None) -> dict[str, Any]:
        """Read or update the global table, or one namespace's override table."""
        target = self.namespaces.get(namespace).opts if namespace is not None else self.global_options
        if opts is not None:
            for key, value in opts.items():
                target[key] = value
        return dict(target)

    # ---------- Diagnostics ----------

    def set(self, namespace: int, document: int, diagnostics: Iterable[Diagnostic]) -> None:
        self.namespaces.get(namespace)
        document = self.queries.resolve_document(document)
        self.store.put(document, namespace, diagnostics)
        self.diagnosticsChanged.emit(document, namespace)

    def get(self, document: int | None = None, opts: Mapping[str, Any] | None = None) -> list[Diagnostic]:
        return self.queries.select(document, opts, clamp=False)

    def reset(self, namespace: int | None = None, document: int | None = None) -> None:
        document = self.queries.resolve_document(document)
        for doc, ns in self.store.clear(document, namespace):
            self.diagnosticsChanged.emit(doc, ns)

    def count_sources(self, document: int | None) -> int:
        return self.queries.count_sources(document)

    # ---------- Floats ----------

    def float_diagnostics(
        self,
        opts: Mapping[str, Any] | None = None,
        document: int | None = None,
    ) -> tuple[RenderedBlock | None, dict[str, Any]]:
        opts = dict(opts or {})
        document = self.queries.resolve_document(document if document is not None else opts.get("bufnr", 0))
        effective = self.resolver.float_options(opts, opts.get("namespace"), document)
        diagnostics = self.queries.query(document, effective, clamp=True)
        if not diagnostics:
            return None, effective
        block = render_float(diagnostics, effective, source_count=self.count_sources(document))
        return block, effective

    def open_float(
        self,
        opts: Mapping[str, Any] | None = None,
        document: int | None = None,
    ) -> RenderedBlock | None:
        block, effective = self.float_diagnostics(opts, document)
        if block is None:
            return None
        role = str(effective.get("focus_id") or normalize_scope(effective.get("scope")))
        message = self.docs.get(role)
        if message.focus():
            log.debug("Float '%s' already focused; leaving it alone", role)
            return None
        self.formatter(message, list(block))
        if message.is_empty():
            return None
        self.docs.show(message)
        return block

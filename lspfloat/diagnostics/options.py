"""Layered option resolution: call site, then namespace, then global defaults.

Resolution runs in two phases. The merge phase keeps raw values, functions
included, so that a call-site function still shadows a namespace table. The
resolution phase then turns every toggle into ``Disabled`` or ``Enabled``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Mapping, Union

from lspfloat.diagnostics.namespaces import NamespaceRegistry
from lspfloat.errors import DiagnosticConfigError

log = logging.getLogger(__name__)

TOGGLE_KEYS = ("signs", "underline", "virtual_text", "float", "update_in_insert", "severity_sort")


@dataclass(frozen=True)
class Disabled:
    def __bool__(self) -> bool:
        return False


@dataclass(frozen=True)
class Enabled:
    # None is the unresolved "inherit from the next layer down" form.
    options: Mapping[str, Any] | None = None

    def get(self, key: str, default: Any = None) -> Any:
        if self.options is None:
            return default
        return self.options.get(key, default)


@dataclass(frozen=True)
class Deferred:
    resolver: Callable[[int | None, int | None], object]


OptionValue = Union[Disabled, Enabled, Deferred]


def option_value(raw: object) -> OptionValue:
    """Coerce a raw configuration value into its tagged form."""
    if isinstance(raw, (Disabled, Enabled, Deferred)):
        return raw
    if raw is None or raw is False:
        return Disabled()
    if raw is True:
        return Enabled(None)
    if isinstance(raw, Mapping):
        return Enabled(dict(raw))
    if callable(raw):
        return Deferred(raw)
    raise DiagnosticConfigError(f"Unexpected option type: {raw!r}")


def keep_merge(*layers: Mapping[str, Any] | None) -> dict[str, Any]:
    """Shallow merge where the first layer to define a key wins.

    A key is defined when its value is not ``None``; an empty table still
    counts, so it can reset a lower layer back to defaults.
    """
    merged: dict[str, Any] = {}
    for layer in layers:
        if not layer:
            continue
        for key, value in layer.items():
            if key in merged or value is None:
                continue
            merged[key] = value
    return merged


class OptionResolver:
    """Produces effective options from a global table and namespace overrides."""

    def __init__(self, global_options: dict[str, Any], namespaces: NamespaceRegistry) -> None:
        self.global_options = global_options
        self.namespaces = namespaces

    def resolve(
        self,
        call_opts: Mapping[str, Any] | None = None,
        namespace: int | None = None,
        document: int | None = None,
    ) -> dict[str, Any]:
        ns_opts = self._namespace_opts(namespace)
        resolved = keep_merge(call_opts, ns_opts, self.global_options)
        for key in TOGGLE_KEYS:
            if key in resolved:
                resolved[key] = self.resolve_value(key, resolved[key], namespace, document)
        return resolved

    def resolve_value(
        self,
        key: str,
        raw: object,
        namespace: int | None = None,
        document: int | None = None,
    ) -> Disabled | Enabled:
        value = option_value(raw)
        if isinstance(value, Deferred):
            result = value.resolver(namespace, document)
            if callable(result) or isinstance(result, Deferred):
                raise DiagnosticConfigError(
                    f"Option '{key}' function returned another function; only one level is resolved."
                )
            value = option_value(result)
            log.debug("Option '%s' resolved dynamically to %r", key, value)
        if isinstance(value, Enabled) and value.options is None:
            return Enabled(self._enabled_table(key, namespace))
        return value

    def float_options(
        self,
        call_opts: Mapping[str, Any] | None = None,
        namespace: int | None = None,
        document: int | None = None,
    ) -> dict[str, Any]:
        """Effective options for a floating window call.

        Float keywords are mixed with the call's options, so the configured
        ``float`` table fills in whatever the call leaves unset.
        """
        raw_float = keep_merge(self._namespace_opts(namespace), self.global_options).get("float")
        configured = self.resolve_value("float", raw_float, namespace, document)
        float_table = dict(configured.options or {}) if isinstance(configured, Enabled) else {}
        merged = keep_merge(call_opts, float_table)
        merged.pop("float", None)
        return self.resolve(merged, namespace, document)

    def _namespace_opts(self, namespace: int | None) -> dict[str, Any]:
        ns = self.namespaces.find(namespace)
        return ns.opts if ns is not None else {}

    def _enabled_table(self, key: str, namespace: int | None) -> dict[str, Any]:
        for layer in (self._namespace_opts(namespace), self.global_options):
            raw = layer.get(key)
            if isinstance(raw, Mapping):
                return dict(raw)
            if isinstance(raw, Enabled) and raw.options is not None:
                return dict(raw.options)
        return {}

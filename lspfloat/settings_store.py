"""JSON file backing for the diagnostic settings an engine starts from."""

from __future__ import annotations

import json
import logging
from copy import deepcopy
from pathlib import Path
from typing import Any, Mapping

from lspfloat.settings_models import default_diagnostic_settings

log = logging.getLogger(__name__)


class SettingsStoreError(RuntimeError):
    """Raised when a settings file cannot be saved."""


def fill_defaults(data: Mapping[str, Any], defaults: Mapping[str, Any]) -> dict[str, Any]:
    """Copy ``data`` and add every key it lacks from ``defaults``.

    Nested tables are filled the same way. A value the user set is never
    replaced, even when its type differs from the default.
    """
    filled = {key: deepcopy(value) for key, value in data.items()}
    for key, fallback in defaults.items():
        if key not in filled:
            filled[key] = deepcopy(fallback)
        elif isinstance(filled[key], dict) and isinstance(fallback, Mapping):
            filled[key] = fill_defaults(filled[key], fallback)
    return filled


def lookup(data: Mapping[str, Any], path: str, default: Any = None) -> Any:
    """Read a dotted path such as ``"hover.diagnostics_scope"``."""
    node: Any = data
    for part in path.split(".") if path else ():
        if not isinstance(node, Mapping) or part not in node:
            return default
        node = node[part]
    return node


def assign(data: dict[str, Any], path: str, value: Any) -> None:
    """Write a dotted path, replacing non-table values met on the way."""
    *parents, leaf = path.split(".")
    if not leaf:
        raise ValueError(f"Invalid settings key: {path!r}")
    node = data
    for part in parents:
        child = node.get(part)
        if not isinstance(child, dict):
            child = node[part] = {}
        node = child
    node[leaf] = value


class JsonSettingsStore:
    """Diagnostic settings kept in one JSON object on disk."""

    def __init__(self, path: Path, defaults: Mapping[str, Any] | None = None) -> None:
        self.path = Path(path)
        self.defaults: dict[str, Any] = deepcopy(
            dict(defaults) if defaults is not None else dict(default_diagnostic_settings())
        )
        self.data: dict[str, Any] = fill_defaults({}, self.defaults)
        self.dirty = False
        self.last_error: str | None = None

    def load(self) -> dict[str, Any]:
        """Read the file, falling back to defaults when it is absent or broken.

        A broken file is left untouched on disk; the reason is kept in
        ``last_error``.
        """
        self.last_error = None
        user: Any = {}
        if self.path.exists():
            try:
                user = json.loads(self.path.read_text(encoding="utf-8"))
            except (OSError, ValueError) as exc:
                self.last_error = str(exc)
                user = {}
            if not isinstance(user, dict):
                self.last_error = f"Expected a JSON object in '{self.path}', got {type(user).__name__}."
                user = {}
            self.dirty = False
        else:
            self.dirty = True
        if self.last_error:
            log.warning("Using default diagnostic settings: %s", self.last_error)
        self.data = fill_defaults(user, self.defaults)
        return self.data

    def save(self) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(self.data, indent=2, sort_keys=True), encoding="utf-8")
        except OSError as exc:
            raise SettingsStoreError(f"Could not write settings file '{self.path}': {exc}") from exc
        self.dirty = False

    def get(self, key: str, default: Any = None) -> Any:
        return lookup(self.data, key, default)

    def set(self, key: str, value: Any) -> bool:
        """Assign ``key``; returns False when the value was already there."""
        if lookup(self.data, key, object()) == value:
            return False
        assign(self.data, key, value)
        self.dirty = True
        return True

    def snapshot(self) -> dict[str, Any]:
        return deepcopy(self.data)

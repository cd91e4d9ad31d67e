from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from lspfloat.errors import DiagnosticConfigError


@dataclass
class Namespace:
    id: int
    name: str
    opts: dict[str, Any] = field(default_factory=dict)


class NamespaceRegistry:
    """Maps analyzer names to stable namespace ids and their option overrides."""

    def __init__(self) -> None:
        self._by_id: dict[int, Namespace] = {}
        self._by_name: dict[str, int] = {}
        self._next_id = 1

    def create(self, name: str) -> int:
        clean = str(name or "").strip()
        if not clean:
            raise DiagnosticConfigError("Namespace name cannot be empty.")
        existing = self._by_name.get(clean)
        if existing is not None:
            return existing
        ns_id = self._next_id
        self._next_id += 1
        self._by_id[ns_id] = Namespace(id=ns_id, name=clean)
        self._by_name[clean] = ns_id
        return ns_id

    def get(self, namespace: int) -> Namespace:
        ns = self._by_id.get(namespace)
        if ns is None:
            raise DiagnosticConfigError(f"Unknown namespace: {namespace!r}")
        return ns

    def find(self, namespace: int | None) -> Namespace | None:
        if namespace is None:
            return None
        return self._by_id.get(namespace)

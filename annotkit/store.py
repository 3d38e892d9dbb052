"""
Annotation storage.

Per-node key/value maps plus one computed-key set per model, kept in a
side-table owned by the model instead of fields hidden on the nodes.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Mapping, Protocol, runtime_checkable

if TYPE_CHECKING:
    from .model import Node


@runtime_checkable
class AnnotationStore(Protocol):
    """Contract the engine needs from annotation storage."""

    def computed_keys(self) -> set[str]:
        """Mutable computed-key set of the model, created on first access."""
        ...

    def get(self, node: "Node", key: str, default: Any = None) -> Any: ...

    def has(self, node: "Node", key: str) -> bool: ...

    def set(self, node: "Node", key: str, value: Any) -> None: ...

    def remove(self, node: "Node", key: str) -> None: ...

    def annotations(self, node: "Node") -> Mapping[str, Any]: ...


class SideTableStore:
    """Default store: a dict of per-node maps keyed by node identity."""

    def __init__(self) -> None:
        self._computed: set[str] | None = None
        self._values: dict["Node", dict[str, Any]] = {}

    def computed_keys(self) -> set[str]:
        if self._computed is None:
            self._computed = set()
        return self._computed

    def get(self, node: "Node", key: str, default: Any = None) -> Any:
        return self._values.get(node, {}).get(key, default)

    def has(self, node: "Node", key: str) -> bool:
        return key in self._values.get(node, {})

    def set(self, node: "Node", key: str, value: Any) -> None:
        self._values.setdefault(node, {})[key] = value

    def remove(self, node: "Node", key: str) -> None:
        values = self._values.get(node)
        if values is None:
            return
        values.pop(key, None)
        if not values:
            del self._values[node]

    def annotations(self, node: "Node") -> Mapping[str, Any]:
        return MappingProxyType(self._values.get(node, {}))

    def __len__(self) -> int:
        return len(self._values)

"""
Strategy entries: per-(key, node type) computations.

A strategy computes one annotation value for one node. Returning None means
"not applicable" and leaves no entry on the node.
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Any, Callable, Iterable, Protocol, runtime_checkable

if TYPE_CHECKING:
    from ..model import Node
    from ..store import AnnotationStore


class ExecutionOrder(Enum):
    """Whether a strategy runs before or after the node's descendants."""

    PRE = "pre"
    POST = "post"

    @classmethod
    def parse(cls, value: "str | ExecutionOrder") -> "ExecutionOrder":
        if isinstance(value, ExecutionOrder):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ValueError(f"Unknown execution order {value!r} (expected 'pre' or 'post')") from None


@runtime_checkable
class Strategy(Protocol):
    key: str
    node_type: str
    required_keys: frozenset[str]
    order: ExecutionOrder

    def applies_to(self, node_type: str) -> bool: ...

    def compute(self, node: "Node", store: "AnnotationStore") -> Any: ...


def _key_set(keys: Iterable[str] | None) -> frozenset[str]:
    return frozenset(k.strip() for k in (keys or ()) if k and k.strip())


class Annotator:
    """Base class for configured operations.

    Subclasses implement ``compute_value``; ``parameter`` is the raw string
    from the configuration. ``default_order`` applies when the configuration
    names no order.
    """

    default_order = ExecutionOrder.PRE
    parameter_required = False

    def __init__(
        self,
        key: str,
        node_type: str,
        parameter: str | None = None,
        required_keys: Iterable[str] | None = None,
        order: ExecutionOrder | None = None,
    ):
        self.key = key
        self.node_type = node_type
        self.parameter = parameter
        self.required_keys = _key_set(required_keys)
        self.order = order or self.default_order
        if self.parameter_required:
            self.require_parameter()

    def applies_to(self, node_type: str) -> bool:
        return node_type == self.node_type

    def compute(self, node: "Node", store: "AnnotationStore") -> Any:
        return self.compute_value(node, store)

    def compute_value(self, node: "Node", store: "AnnotationStore") -> Any:
        raise NotImplementedError

    def require_parameter(self) -> str:
        if not self.parameter:
            raise ValueError(f"{type(self).__name__} for '{self.key}' needs a parameter")
        return self.parameter

    def __repr__(self) -> str:
        return f"{type(self).__name__}(key={self.key!r}, node_type={self.node_type!r})"


class FunctionStrategy(Annotator):
    """Wrap a plain ``fn(node)`` or ``fn(node, store)`` callable."""

    def __init__(
        self,
        key: str,
        node_type: str,
        fn: Callable[..., Any],
        required_keys: Iterable[str] | None = None,
        order: ExecutionOrder = ExecutionOrder.PRE,
        with_store: bool = False,
    ):
        super().__init__(key, node_type, required_keys=required_keys, order=order)
        self.fn = fn
        self.with_store = with_store

    def compute_value(self, node: "Node", store: "AnnotationStore") -> Any:
        if self.with_store:
            return self.fn(node, store)
        return self.fn(node)

"""Identifier annotators."""

from __future__ import annotations

from typing import Any

from ..annotation.strategy import Annotator
from ..model import Node
from ..store import AnnotationStore

TYPE_PLACEHOLDER = "{type}"


class DerivedIdAnnotator(Annotator):
    """Compose an id from local attribute values.

    The parameter lists attribute names separated by ``,``; ``{type}``
    stands for the node's type name. Parts are joined with ``/``. Missing
    attributes render as ``None`` so the id keeps its shape.
    """

    def __init__(self, key, node_type, parameter=None, required_keys=None, order=None):
        super().__init__(key, node_type, parameter, required_keys, order)
        parts = [p.strip() for p in self.require_parameter().split(",")]
        if not all(parts):
            raise ValueError(f"derived_id: empty attribute name in {parameter!r}")
        self.parts = parts

    def compute_value(self, node: Node, store: AnnotationStore) -> Any:
        values = []
        for part in self.parts:
            if part == TYPE_PLACEHOLDER:
                values.append(node.type_name)
            else:
                values.append(str(node.get(part)))
        return "/".join(values)


class PersistentIdAnnotator(Annotator):
    """The node's persistent ``uid``; not applicable for nodes without one."""

    def __init__(self, key, node_type, parameter=None, required_keys=None, order=None):
        super().__init__(key, node_type, None, required_keys, order)

    def compute_value(self, node: Node, store: AnnotationStore) -> Any:
        return node.uid

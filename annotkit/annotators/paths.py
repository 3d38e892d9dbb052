"""
Path annotators.

A path is the parent's value for the same key followed by this node's
segment: ``/Model/Package/Class``. They run PRE so the parent is always
done first within the same walk. A node whose parent has no value for the
key starts a new path.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable

from ..annotation.strategy import Annotator, ExecutionOrder
from ..model import Node
from ..store import AnnotationStore

logger = logging.getLogger(__name__)

SEPARATOR = "/"
NULL_SEGMENT = "<null>"
MISSING_SEGMENT = "**MissingData**"


class PathAnnotator(Annotator):
    default_order = ExecutionOrder.PRE

    def segment(self, node: Node, store: AnnotationStore) -> str:
        raise NotImplementedError

    def compute_value(self, node: Node, store: AnnotationStore) -> Any:
        segment = self.segment(node, store)
        prefix = store.get(node.parent, self.key) if node.parent is not None else None
        if prefix is None:
            return SEPARATOR + segment
        return f"{prefix}{SEPARATOR}{segment}"


class TypePathAnnotator(PathAnnotator):
    """Path of type names."""

    def __init__(self, key, node_type, parameter=None, required_keys=None, order=None):
        if parameter:
            raise ValueError(f"type_path takes no parameter (got {parameter!r})")
        super().__init__(key, node_type, parameter, required_keys, order)

    def segment(self, node: Node, store: AnnotationStore) -> str:
        return node.type_name


class AttributePathAnnotator(PathAnnotator):
    """Path of the values of the attribute named by the parameter."""

    def __init__(self, key, node_type, parameter=None, required_keys=None, order=None):
        super().__init__(key, node_type, parameter, required_keys, order)
        self.attribute = self.require_parameter()

    def segment(self, node: Node, store: AnnotationStore) -> str:
        value = node.get(self.attribute)
        if value is None:
            logger.warning(
                "Attribute %s is null on %r, using %s as path segment",
                self.attribute,
                node,
                NULL_SEGMENT,
            )
            return NULL_SEGMENT
        return str(value)


class AnnotationPathAnnotator(PathAnnotator):
    """Path of another annotation's values; that annotation becomes required."""

    def __init__(self, key, node_type, parameter=None, required_keys: Iterable[str] | None = None, order=None):
        source = (parameter or "").strip()
        if not source:
            raise ValueError("annotation_path needs the source annotation key as parameter")
        super().__init__(key, node_type, source, [*(required_keys or ()), source], order)
        self.source_key = source

    def segment(self, node: Node, store: AnnotationStore) -> str:
        if not store.has(node, self.source_key):
            return MISSING_SEGMENT
        return str(store.get(node, self.source_key))

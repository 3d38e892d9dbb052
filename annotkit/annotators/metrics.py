"""
Metric annotators: counts over children and subtrees.

Type matches are exact on ``type_name``. Counts are floats so they can be
compared and weighted together.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable

from ..annotation.strategy import Annotator
from ..model import Node
from ..store import AnnotationStore

logger = logging.getLogger(__name__)


def _split_triple(parameter: str | None, operation: str) -> tuple[str, str, str]:
    parts = [p.strip() for p in (parameter or "").split(",", 2)]
    if len(parts) != 3 or not all(parts[:2]):
        raise ValueError(f"{operation} needs 'Type,attribute,value' (got {parameter!r})")
    return parts[0], parts[1], parts[2]


def _of_type(nodes: Iterable[Node], type_name: str) -> Iterable[Node]:
    return (n for n in nodes if n.type_name == type_name)


class CountChildNodesByType(Annotator):
    parameter_required = True

    def compute_value(self, node: Node, store: AnnotationStore) -> Any:
        return float(sum(1 for _ in _of_type(node.children, self.require_parameter())))


class CountSubtreeNodesByType(Annotator):
    parameter_required = True

    def compute_value(self, node: Node, store: AnnotationStore) -> Any:
        return float(sum(1 for _ in _of_type(node.iter_subtree(), self.require_parameter())))


class _ValueMatchCounter(Annotator):
    """Count nodes of a type whose attribute matches a value."""

    operation = ""

    def __init__(self, key, node_type, parameter=None, required_keys=None, order=None):
        super().__init__(key, node_type, parameter, required_keys, order)
        self.match_type, self.attribute, self.value = _split_triple(parameter, self.operation)

    def candidates(self, node: Node) -> Iterable[Node]:
        return node.children

    def matches(self, actual: Any) -> bool:
        return actual is not None and str(actual) == self.value

    def compute_value(self, node: Node, store: AnnotationStore) -> Any:
        count = 0
        for candidate in _of_type(self.candidates(node), self.match_type):
            if self.matches(candidate.get(self.attribute)):
                count += 1
        return float(count)


class CountChildNodesByValue(_ValueMatchCounter):
    operation = "count_child_nodes_by_value"


class CountChildrenValueStartsWith(_ValueMatchCounter):
    operation = "count_children_value_starts_with"

    def matches(self, actual: Any) -> bool:
        return actual is not None and str(actual).startswith(self.value)


class CountSubtreeNodesByValue(_ValueMatchCounter):
    operation = "count_subtree_nodes_by_value"

    def candidates(self, node: Node) -> Iterable[Node]:
        return node.iter_subtree()


class AttributeValueTextLength(Annotator):
    """Length of the string form of an attribute; 0 when the node lacks it."""

    parameter_required = True

    def compute_value(self, node: Node, store: AnnotationStore) -> Any:
        attribute = self.require_parameter()
        if attribute not in node.attributes:
            logger.debug("No attribute %r on %s", attribute, node.type_name)
            return 0.0
        return float(len(str(node.attributes[attribute])))


class GetAncestorNode(Annotator):
    """Closest node of the parameter type on the way to the root (self included)."""

    parameter_required = True

    def compute_value(self, node: Node, store: AnnotationStore) -> Any:
        wanted = self.require_parameter()
        cur: Node | None = node
        while cur is not None and cur.type_name != wanted:
            cur = cur.parent
        return cur

"""Built-in annotators, addressable by operation name from configuration."""

from __future__ import annotations

from ..annotation.strategy import Annotator
from .ids import DerivedIdAnnotator, PersistentIdAnnotator
from .metrics import (
    AttributeValueTextLength,
    CountChildNodesByType,
    CountChildNodesByValue,
    CountChildrenValueStartsWith,
    CountSubtreeNodesByType,
    CountSubtreeNodesByValue,
    GetAncestorNode,
)
from .paths import AnnotationPathAnnotator, AttributePathAnnotator, TypePathAnnotator
from .values import SetAttributeAnnotator, import_object

OPERATIONS: dict[str, type[Annotator]] = {
    "type_path": TypePathAnnotator,
    "attribute_path": AttributePathAnnotator,
    "annotation_path": AnnotationPathAnnotator,
    "derived_id": DerivedIdAnnotator,
    "persistent_id": PersistentIdAnnotator,
    "set_attribute": SetAttributeAnnotator,
    "count_child_nodes_by_type": CountChildNodesByType,
    "count_subtree_nodes_by_type": CountSubtreeNodesByType,
    "count_child_nodes_by_value": CountChildNodesByValue,
    "count_children_value_starts_with": CountChildrenValueStartsWith,
    "count_subtree_nodes_by_value": CountSubtreeNodesByValue,
    "attribute_value_text_length": AttributeValueTextLength,
    "get_ancestor_node": GetAncestorNode,
}


def resolve_operation(name: str) -> type:
    """Built-in operation by short name, otherwise an importable class path."""
    op = OPERATIONS.get(name)
    if op is not None:
        return op
    if "." not in name and ":" not in name:
        raise ValueError(f"Unknown operation {name!r}")
    return import_object(name)


__all__ = ["OPERATIONS", "resolve_operation"]

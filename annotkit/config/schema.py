from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class AttributeDef:
    """One synthetic attribute: an annotation key computed by an operation."""

    name: str
    operation: str
    parameter: str | None = None
    requires: tuple[str, ...] = ()
    order: str | None = None


@dataclass(frozen=True)
class AnnotationDef:
    """Attributes computed for one node type."""

    node_type: str
    attributes: list[AttributeDef] = field(default_factory=list)


@dataclass(frozen=True)
class AnnotationConfig:
    document_type: str
    description: str | None = None
    annotations: list[AnnotationDef] = field(default_factory=list)

    def keys(self) -> set[str]:
        return {attr.name for ann in self.annotations for attr in ann.attributes}

"""Tree model, tree walker and JSON model loading."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Iterator

from .errors import ConfigFormatError
from .store import AnnotationStore, SideTableStore

Visitor = Callable[["Node"], None]


@dataclass(eq=False)
class Node:
    """A model element.

    ``type_name`` is the stable type identifier strategies dispatch on.
    Nodes compare and hash by identity so they can key the annotation
    side-table.
    """

    type_name: str
    attributes: dict[str, Any] = field(default_factory=dict)
    uid: str | None = None
    children: list["Node"] = field(default_factory=list, repr=False)
    parent: "Node | None" = field(default=None, repr=False)

    def __post_init__(self) -> None:
        for child in self.children:
            child.parent = self

    def add_child(self, child: "Node") -> "Node":
        child.parent = self
        self.children.append(child)
        return child

    def get(self, attribute: str, default: Any = None) -> Any:
        return self.attributes.get(attribute, default)

    def path_to_root(self) -> list["Node"]:
        """Ancestors from the root down to (and including) this node."""
        chain: list[Node] = []
        cur: Node | None = self
        while cur is not None:
            chain.append(cur)
            cur = cur.parent
        chain.reverse()
        return chain

    def iter_subtree(self) -> Iterator["Node"]:
        """Descendants in pre-order, excluding this node."""
        stack = list(reversed(self.children))
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))


def traverse(root: Node, on_pre_visit: Visitor | None = None, on_post_visit: Visitor | None = None) -> None:
    """Depth-first walk: pre-visit a node, walk its children, then post-visit it.

    Iterative so deep trees do not hit the recursion limit.
    """
    stack: list[tuple[Node, bool]] = [(root, False)]
    while stack:
        node, expanded = stack.pop()
        if expanded:
            if on_post_visit is not None:
                on_post_visit(node)
            continue
        if on_pre_visit is not None:
            on_pre_visit(node)
        stack.append((node, True))
        for child in reversed(node.children):
            stack.append((child, False))


@dataclass(eq=False)
class Model:
    """The unit the engine annotates: root nodes plus their annotation store."""

    roots: list[Node] = field(default_factory=list)
    store: AnnotationStore = field(default_factory=SideTableStore, repr=False)
    name: str | None = None

    @classmethod
    def of(cls, *roots: Node, name: str | None = None) -> "Model":
        return cls(roots=list(roots), name=name)

    def walk(self, on_pre_visit: Visitor | None = None, on_post_visit: Visitor | None = None) -> None:
        for root in self.roots:
            traverse(root, on_pre_visit, on_post_visit)

    def nodes(self) -> Iterator[Node]:
        for root in self.roots:
            yield root
            yield from root.iter_subtree()

    def annotations(self, node: Node) -> dict[str, Any]:
        return dict(self.store.annotations(node))


# -----------------------------------------------------------------------------
# JSON loading
# -----------------------------------------------------------------------------


def _node_from_dict(data: Any, where: str) -> Node:
    if not isinstance(data, dict):
        raise ConfigFormatError(f"{where}: node must be an object")

    type_name = str(data.get("type", "")).strip()
    if not type_name:
        raise ConfigFormatError(f"{where}: node is missing 'type'")

    attributes = data.get("attributes", {})
    if not isinstance(attributes, dict):
        raise ConfigFormatError(f"{where}: 'attributes' must be an object")

    uid = data.get("id")
    node = Node(type_name=type_name, attributes=dict(attributes), uid=str(uid) if uid is not None else None)

    children = data.get("children", [])
    if not isinstance(children, list):
        raise ConfigFormatError(f"{where}: 'children' must be a list")
    for i, raw in enumerate(children):
        node.add_child(_node_from_dict(raw, f"{where}/{type_name}[{i}]"))
    return node


def model_from_dict(data: Any, name: str | None = None) -> Model:
    """Build a model from ``{"roots": [...]}`` or a single root node object."""
    if isinstance(data, dict) and "roots" in data:
        raw_roots = data["roots"]
        if not isinstance(raw_roots, list):
            raise ConfigFormatError("'roots' must be a list")
    else:
        raw_roots = [data]
    roots = [_node_from_dict(raw, f"roots[{i}]") for i, raw in enumerate(raw_roots)]
    return Model(roots=roots, name=name)


def load_model(path: Path) -> Model:
    """Load a JSON model file."""
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ConfigFormatError(f"invalid JSON: {e}", path) from e
    try:
        return model_from_dict(data, name=path.stem)
    except ConfigFormatError as e:
        raise ConfigFormatError(str(e), path) from e

from __future__ import annotations

import json
from pathlib import Path

import pytest

from annotkit.errors import ConfigFormatError
from annotkit.model import Model, Node, load_model, model_from_dict, traverse
from annotkit.store import AnnotationStore, SideTableStore


def _tree() -> Node:
    return Node(
        "A",
        uid="a",
        children=[
            Node("B", uid="b", children=[Node("D", uid="d")]),
            Node("C", uid="c"),
        ],
    )


def test_traverse_pre_and_post_visits() -> None:
    events: list[str] = []
    traverse(_tree(), lambda n: events.append(f"+{n.uid}"), lambda n: events.append(f"-{n.uid}"))

    assert events == ["+a", "+b", "+d", "-d", "-b", "+c", "-c", "-a"]


def test_traverse_handles_deep_trees() -> None:
    root = Node("N", uid="0")
    cur = root
    for i in range(1, 5000):
        cur = cur.add_child(Node("N", uid=str(i)))

    seen: list[Node] = []
    traverse(root, seen.append)
    assert len(seen) == 5000


def test_parent_links_and_paths() -> None:
    root = _tree()
    d = root.children[0].children[0]

    assert d.parent is root.children[0]
    assert [n.uid for n in d.path_to_root()] == ["a", "b", "d"]
    assert [n.uid for n in root.iter_subtree()] == ["b", "d", "c"]


def test_model_walks_every_root() -> None:
    model = Model.of(Node("A", uid="1"), Node("A", uid="2"))
    assert [n.uid for n in model.nodes()] == ["1", "2"]


def test_side_table_store() -> None:
    store = SideTableStore()
    node = Node("A")
    other = Node("A")

    assert isinstance(store, AnnotationStore)
    assert store.computed_keys() is store.computed_keys()

    store.set(node, "k", 1)
    assert store.has(node, "k")
    assert not store.has(other, "k")
    assert store.get(other, "k", "default") == "default"
    assert dict(store.annotations(node)) == {"k": 1}

    store.remove(node, "k")
    store.remove(other, "k")
    assert not store.has(node, "k")
    assert len(store) == 0


def test_nodes_hash_by_identity() -> None:
    a, b = Node("A", {"x": 1}), Node("A", {"x": 1})
    assert a != b
    assert len({a, b}) == 2


def test_model_from_dict_single_root() -> None:
    model = model_from_dict({"type": "A", "id": 7, "attributes": {"x": 1}, "children": [{"type": "B"}]})

    root = model.roots[0]
    assert root.uid == "7"
    assert root.get("x") == 1
    assert root.children[0].parent is root
    assert root.children[0].uid is None


def test_model_from_dict_multiple_roots() -> None:
    model = model_from_dict({"roots": [{"type": "A"}, {"type": "B"}]})
    assert [r.type_name for r in model.roots] == ["A", "B"]


@pytest.mark.parametrize(
    "data",
    [
        {"attributes": {}},
        {"type": "A", "attributes": []},
        {"type": "A", "children": {"type": "B"}},
        {"roots": {"type": "A"}},
        "not a node",
    ],
)
def test_model_from_dict_rejects_malformed(data) -> None:
    with pytest.raises(ConfigFormatError):
        model_from_dict(data)


def test_load_model(model_path: Path) -> None:
    model = load_model(model_path)
    assert model.name == "library"
    assert [n.type_name for n in model.nodes()] == ["Library", "Shelf", "Book", "Book", "Shelf"]


def test_load_model_invalid_json(tmp_path: Path) -> None:
    path = tmp_path / "broken.json"
    path.write_text("{", encoding="utf-8")
    with pytest.raises(ConfigFormatError) as excinfo:
        load_model(path)
    assert excinfo.value.path == path


def test_load_model_reports_file(tmp_path: Path) -> None:
    path = tmp_path / "model.json"
    path.write_text(json.dumps({"type": "A", "children": [{"id": "x"}]}), encoding="utf-8")
    with pytest.raises(ConfigFormatError, match="model.json"):
        load_model(path)

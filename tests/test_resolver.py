from __future__ import annotations

from itertools import combinations

import pytest

from annotkit.annotation.resolver import closure, dependents, plan_rounds, ready_frontier
from annotkit.errors import CyclicDependencyError, UnresolvableDependencyError

CHAIN = {
    "a": set(),
    "b": {"a"},
    "c": {"b"},
    "d": {"a", "c"},
    "solo": set(),
}


def _is_closed(keys: set[str], requirements: dict[str, set[str]]) -> bool:
    return all(requirements[k] <= keys for k in keys)


def test_closure_includes_seed_and_transitive_requirements() -> None:
    assert closure({"d"}, CHAIN) == {"a", "b", "c", "d"}
    assert closure({"b", "solo"}, CHAIN) == {"a", "b", "solo"}
    assert closure(set(), CHAIN) == set()


def test_closure_is_smallest_closed_superset() -> None:
    keys = sorted(CHAIN)
    subsets = [set(c) for r in range(len(keys) + 1) for c in combinations(keys, r)]
    closed = [s for s in subsets if _is_closed(s, CHAIN)]

    for seed in subsets:
        result = closure(seed, CHAIN)
        assert seed <= result
        assert _is_closed(result, CHAIN)
        for candidate in closed:
            if seed <= candidate:
                assert result <= candidate


def test_closure_detects_two_key_cycle() -> None:
    with pytest.raises(CyclicDependencyError) as excinfo:
        closure({"a"}, {"a": {"b"}, "b": {"a"}})
    assert excinfo.value.key in {"a", "b"}
    assert excinfo.value.cycle[0] == excinfo.value.cycle[-1]


def test_closure_detects_self_requirement() -> None:
    with pytest.raises(CyclicDependencyError) as excinfo:
        closure({"x"}, {"x": {"x"}})
    assert excinfo.value.cycle == ["x", "x"]


def test_closure_ignores_cycles_not_reachable_from_seed() -> None:
    requirements = {"a": set(), "p": {"q"}, "q": {"p"}}
    assert closure({"a"}, requirements) == {"a"}


def test_closure_diamond_is_not_a_cycle() -> None:
    requirements = {"top": {"left", "right"}, "left": {"base"}, "right": {"base"}, "base": set()}
    assert closure({"top"}, requirements) == {"top", "left", "right", "base"}


def test_closure_reports_missing_requirement() -> None:
    with pytest.raises(UnresolvableDependencyError) as excinfo:
        closure({"b"}, {"b": {"ghost"}})
    assert excinfo.value.key == "b"
    assert excinfo.value.missing == "ghost"


def test_closure_reports_unknown_seed() -> None:
    with pytest.raises(UnresolvableDependencyError) as excinfo:
        closure({"ghost"}, CHAIN)
    assert excinfo.value.key is None
    assert excinfo.value.missing == "ghost"


def test_closure_handles_deep_chains_without_recursion() -> None:
    depth = 5000
    requirements = {f"k{i}": {f"k{i - 1}"} for i in range(1, depth)}
    requirements["k0"] = set()
    assert len(closure({f"k{depth - 1}"}, requirements)) == depth


def test_ready_frontier() -> None:
    open_keys = {"b", "c", "d", "solo"}
    assert ready_frontier(open_keys, {"a"}, CHAIN) == {"b", "solo"}
    assert ready_frontier(open_keys, {"a", "b"}, CHAIN) == {"b", "c", "solo"}
    assert ready_frontier({"unregistered"}, {"a"}, CHAIN) == set()


def test_plan_rounds_orders_requirements_first() -> None:
    rounds = plan_rounds({"d"}, CHAIN)
    assert rounds == [frozenset({"a"}), frozenset({"b"}), frozenset({"c"}), frozenset({"d"})]


def test_plan_rounds_skips_provided_keys() -> None:
    assert plan_rounds({"c"}, CHAIN, provided={"a", "b"}) == [frozenset({"c"})]


def test_dependents() -> None:
    assert dependents({"a"}, {"b", "c", "d", "solo"}, CHAIN) == {"b", "d"}

"""
Dependency resolution over the key -> required-keys map.

Pure functions over a snapshot of the requirement map; the registry owns
the map, the scheduler drives these functions round by round.
"""

from __future__ import annotations

from typing import AbstractSet, Iterable, Mapping

from ..errors import CyclicDependencyError, UnresolvableDependencyError

Requirements = Mapping[str, AbstractSet[str]]


def closure(seed: Iterable[str], requirements: Requirements) -> set[str]:
    """Return ``seed`` plus every key transitively required by it.

    Depth-first with an explicit stack. Keys on the current path are
    tracked so a cycle is reported instead of looping.

    Raises:
        UnresolvableDependencyError: a seed or required key is not in ``requirements``
        CyclicDependencyError: a key reachable from ``seed`` requires itself
    """
    done: set[str] = set()

    for start in sorted(seed):
        if start in done:
            continue
        if start not in requirements:
            raise UnresolvableDependencyError(None, start)

        path = [start]
        on_path = {start}
        pending = [iter(sorted(requirements[start]))]

        while pending:
            dep = next(pending[-1], None)
            if dep is None:
                pending.pop()
                finished = path.pop()
                on_path.discard(finished)
                done.add(finished)
                continue

            if dep in on_path:
                raise CyclicDependencyError(dep, path[path.index(dep):] + [dep])
            if dep in done:
                continue
            if dep not in requirements:
                raise UnresolvableDependencyError(path[-1], dep)

            path.append(dep)
            on_path.add(dep)
            pending.append(iter(sorted(requirements[dep])))

    return done


def ready_frontier(open_keys: Iterable[str], provided: AbstractSet[str], requirements: Requirements) -> set[str]:
    """Keys of ``open_keys`` whose requirements are all in ``provided``.

    Keys missing from ``requirements`` are never ready.
    """
    ready: set[str] = set()
    for key in open_keys:
        required = requirements.get(key)
        if required is not None and required <= provided:
            ready.add(key)
    return ready


def dependents(keys: AbstractSet[str], candidates: Iterable[str], requirements: Requirements) -> set[str]:
    """Keys among ``candidates`` that directly require one of ``keys``."""
    return {c for c in candidates if requirements.get(c, frozenset()) & keys}


def plan_rounds(
    keys: Iterable[str],
    requirements: Requirements,
    provided: AbstractSet[str] = frozenset(),
) -> list[frozenset[str]]:
    """Frontier rounds needed to compute ``keys`` on top of ``provided``.

    The closure is expanded first; keys already provided are skipped. Rounds
    stop early when nothing is ready, leaving the remainder unplanned.
    """
    open_keys = closure(keys, requirements) - set(provided)
    have = set(provided)
    rounds: list[frozenset[str]] = []
    while open_keys:
        ready = ready_frontier(open_keys, have, requirements)
        if not ready:
            break
        rounds.append(frozenset(ready))
        open_keys -= ready
        have |= ready
    return rounds

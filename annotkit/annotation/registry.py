"""
Strategy registry: annotation key -> node type -> strategy.

Each key also carries the union of the required keys of all its strategies,
so a key is requested and removed as one unit whatever node types it covers.

The registry is meant to be filled once, validated, and then only read.
Registering more strategies after validation is the caller's responsibility:
validate() again before the next annotate/remove call.
"""

from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Iterable, Mapping

from ..errors import DuplicateStrategyError
from .resolver import closure
from .strategy import Strategy

logger = logging.getLogger(__name__)


class StrategyRegistry:
    """Strategies by key and exact node type, plus the requirement graph."""

    def __init__(self) -> None:
        self._strategies: dict[str, dict[str, Strategy]] = {}
        self._requirements: dict[str, set[str]] = {}

    def register(self, entries: Iterable[Strategy]) -> None:
        """Add strategies, merging required keys per annotation key.

        Nothing is added when a duplicate is found.

        Raises:
            DuplicateStrategyError: two strategies share key and node type
        """
        batch = list(entries)
        seen: set[tuple[str, str]] = set()
        for entry in batch:
            slot = (entry.key, entry.node_type)
            if slot in seen or entry.node_type in self._strategies.get(entry.key, {}):
                raise DuplicateStrategyError(entry.key, entry.node_type)
            seen.add(slot)

        for entry in batch:
            self._strategies.setdefault(entry.key, {})[entry.node_type] = entry
            self._requirements.setdefault(entry.key, set()).update(entry.required_keys)
            logger.debug(
                "Registered %s for key=%s type=%s requires=%s",
                type(entry).__name__,
                entry.key,
                entry.node_type,
                sorted(entry.required_keys),
            )

    def validate(self) -> None:
        """Check that every key's closure is resolvable and acyclic.

        Raises:
            CyclicDependencyError
            UnresolvableDependencyError
        """
        closure(self._requirements.keys(), self._requirements)

    def dispatch(self, key: str, node_type: str) -> Strategy | None:
        """Strategy registered for exactly ``node_type`` under ``key``."""
        return self._strategies.get(key, {}).get(node_type)

    def strategies(self, key: str) -> list[Strategy]:
        return list(self._strategies.get(key, {}).values())

    def entries(self) -> list[Strategy]:
        return [s for by_type in self._strategies.values() for s in by_type.values()]

    def all_keys(self) -> frozenset[str]:
        return frozenset(self._requirements)

    def required_keys(self, key: str) -> frozenset[str]:
        return frozenset(self._requirements.get(key, ()))

    def requirements(self) -> Mapping[str, set[str]]:
        """Read-only view of the key -> required-keys map."""
        return MappingProxyType(self._requirements)

    def clear(self) -> None:
        self._strategies.clear()
        self._requirements.clear()

    def __contains__(self, key: object) -> bool:
        return key in self._requirements

    def __len__(self) -> int:
        return len(self._requirements)

"""
Annotation service: the incremental scheduler behind annotate/remove.

annotate() expands the requested keys to their closure, drops what the
model already has, then repeatedly takes the ready frontier and computes it
in one tree walk per round. remove_annotations() checks that no key staying
computed still needs a removed key before touching any node.

The service holds no per-model state; the computed-key set and the node
values live in the model's store. It is not thread-safe: callers serialize
calls on one model.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Iterable, Mapping

from ..errors import (
    AnnotationError,
    DependencyViolationError,
    StrategyError,
    UnknownKeyError,
    UnsatisfiableError,
)
from ..model import Model, Node
from .registry import StrategyRegistry
from .resolver import closure, dependents, ready_frontier
from .strategy import ExecutionOrder, Strategy

logger = logging.getLogger(__name__)

KeySpec = str | Iterable[str] | None


class _RoundJournal:
    """Store view for one round that remembers the values it overwrites.

    Strategies may also remove values of other keys (``move:``), so undoing
    a failed round restores every touched (node, key) to its prior state.
    """

    def __init__(self, store) -> None:
        self.store = store
        self._undo: list[tuple[Node, str, bool, Any]] = []

    def _record(self, node: Node, key: str) -> None:
        self._undo.append((node, key, self.store.has(node, key), self.store.get(node, key)))

    def computed_keys(self) -> set[str]:
        return self.store.computed_keys()

    def get(self, node: Node, key: str, default: Any = None) -> Any:
        return self.store.get(node, key, default)

    def has(self, node: Node, key: str) -> bool:
        return self.store.has(node, key)

    def set(self, node: Node, key: str, value: Any) -> None:
        self._record(node, key)
        self.store.set(node, key, value)

    def remove(self, node: Node, key: str) -> None:
        self._record(node, key)
        self.store.remove(node, key)

    def annotations(self, node: Node) -> Mapping[str, Any]:
        return self.store.annotations(node)

    def rollback(self) -> int:
        restored = len(self._undo)
        for node, key, had, value in reversed(self._undo):
            if had:
                self.store.set(node, key, value)
            else:
                self.store.remove(node, key)
        self._undo.clear()
        return restored


class SchedulerState(Enum):
    IDLE = "idle"
    EXPANDING = "expanding"
    EXECUTING = "executing"
    DONE = "done"
    BLOCKED = "blocked"
    FAILED = "failed"


@dataclass(frozen=True)
class AnnotateResult:
    """Outcome of one annotate() call."""

    requested: frozenset[str]
    rounds: tuple[frozenset[str], ...] = ()
    # Keys of the closure that were already computed before the call
    cached: frozenset[str] = field(default_factory=frozenset)

    @property
    def computed(self) -> frozenset[str]:
        return frozenset().union(*self.rounds)

    @property
    def was_noop(self) -> bool:
        return not self.rounds


@dataclass(frozen=True)
class RemoveResult:
    """Outcome of one remove_annotations() call."""

    removed: frozenset[str]
    # Requested keys that were not computed on the model
    ignored: frozenset[str] = field(default_factory=frozenset)
    values_removed: int = 0


class AnnotationService:
    """Compute and remove annotations on models using a strategy registry."""

    def __init__(self, registry: StrategyRegistry | None = None):
        self.registry = registry if registry is not None else StrategyRegistry()
        self.document_type: str | None = None
        self.state = SchedulerState.IDLE

    # -------------------------------------------------------------------------
    # Configuration
    # -------------------------------------------------------------------------

    def configure(self, source) -> str | None:
        """Register strategies and validate the resulting registry.

        ``source`` is a path to a TOML configuration, a loaded
        ``AnnotationConfig``, or an iterable of strategies. The registry is
        only replaced when validation succeeds.

        Returns:
            The configured document type, if the source declares one.
        """
        from ..config.load import build_entries, load_config
        from ..config.schema import AnnotationConfig

        document_type = None
        if isinstance(source, (str, Path)):
            source = load_config(Path(source))
        if isinstance(source, AnnotationConfig):
            document_type = source.document_type
            entries: list[Strategy] = build_entries(source)
        else:
            entries = list(source)

        candidate = StrategyRegistry()
        candidate.register(self.registry.entries())
        candidate.register(entries)
        candidate.validate()

        self.registry = candidate
        if document_type is not None:
            self.document_type = document_type
        logger.info("Configured %d strategies over %d keys", len(candidate.entries()), len(candidate))
        return document_type

    def deconfigure(self) -> None:
        """Drop every registered strategy.

        The registry is replaced, not cleared, so one passed in by the
        caller stays intact.
        """
        self.registry = StrategyRegistry()
        self.document_type = None

    def available_keys(self) -> frozenset[str]:
        return self.registry.all_keys()

    def executed_keys(self, model: Model) -> frozenset[str]:
        return frozenset(model.store.computed_keys())

    # -------------------------------------------------------------------------
    # Annotate
    # -------------------------------------------------------------------------

    def annotate(self, model: Model, keys: KeySpec = None) -> AnnotateResult:
        """Compute ``keys`` (all registered keys when None) and their requirements.

        Rounds completed before a failure stay recorded on the model.

        Raises:
            UnknownKeyError: a requested key is not registered
            UnsatisfiableError: open keys remain but none is ready
            StrategyError: a strategy raised; that round is discarded
        """
        requested = self._requested(keys)
        self.state = SchedulerState.EXPANDING
        try:
            self._check_known(requested)
            requirements = self.registry.requirements()
            computed = model.store.computed_keys()
            wanted = closure(requested, requirements)
            open_keys = wanted - computed

            rounds: list[frozenset[str]] = []
            self.state = SchedulerState.EXECUTING
            while open_keys:
                ready = ready_frontier(open_keys, computed, requirements)
                if not ready:
                    self.state = SchedulerState.BLOCKED
                    raise UnsatisfiableError(open_keys)

                logger.debug("Round %d: computing %s", len(rounds) + 1, sorted(ready))
                self._execute_round(model, ready)
                open_keys -= ready
                computed |= ready
                rounds.append(frozenset(ready))
        except AnnotationError:
            if self.state is not SchedulerState.BLOCKED:
                self.state = SchedulerState.FAILED
            raise

        self.state = SchedulerState.DONE
        result = AnnotateResult(
            requested=requested,
            rounds=tuple(rounds),
            cached=frozenset(wanted).difference(*rounds),
        )
        if result.was_noop:
            logger.debug("Nothing to compute for %s", sorted(requested))
        else:
            logger.info("Annotated %s in %d round(s)", sorted(result.computed), len(rounds))
        return result

    def _execute_round(self, model: Model, ready: set[str]) -> None:
        store = _RoundJournal(model.store)
        keys = sorted(ready)

        def visitor(order: ExecutionOrder):
            def visit(node: Node) -> None:
                for key in keys:
                    strategy = self.registry.dispatch(key, node.type_name)
                    if strategy is None or strategy.order is not order or not strategy.applies_to(node.type_name):
                        continue
                    try:
                        value = strategy.compute(node, store)
                    except AnnotationError:
                        raise
                    except Exception as e:
                        raise StrategyError(key, node, e) from e
                    if value is not None:
                        store.set(node, key, value)

            return visit

        try:
            model.walk(visitor(ExecutionOrder.PRE), visitor(ExecutionOrder.POST))
        except AnnotationError:
            restored = store.rollback()
            logger.debug("Round %s failed, restored %d value(s)", keys, restored)
            raise

    # -------------------------------------------------------------------------
    # Remove
    # -------------------------------------------------------------------------

    def remove_annotations(self, model: Model, keys: KeySpec = None) -> RemoveResult:
        """Remove computed ``keys`` (all registered keys when None) from every node.

        Keys never computed on the model are ignored. Nothing is modified
        when a key that stays computed still requires a removed key.

        Raises:
            UnknownKeyError: a requested key is not registered
            DependencyViolationError: the removal would strand dependents
        """
        requested = self._requested(keys)
        self.state = SchedulerState.EXPANDING
        try:
            self._check_known(requested)
            requirements = self.registry.requirements()
            computed = model.store.computed_keys()
            to_remove = requested & computed
            ignored = requested - computed
            if not to_remove:
                self.state = SchedulerState.DONE
                return RemoveResult(removed=frozenset(), ignored=frozenset(ignored))

            remaining = computed - to_remove
            # Computed keys this registry does not know have no known requirements
            needed = closure(remaining & self.registry.all_keys(), requirements)
            if not needed <= remaining:
                blocking = needed - remaining
                raise DependencyViolationError(
                    to_remove,
                    blocking,
                    dependents(blocking, remaining, requirements),
                )

            self.state = SchedulerState.EXECUTING
            keys_sorted = sorted(to_remove)
            counter = [0]

            def visit(node: Node) -> None:
                counter[0] += self._strip(model.store, node, keys_sorted)

            model.walk(visit)
            computed -= to_remove
        except AnnotationError:
            self.state = SchedulerState.FAILED
            raise

        self.state = SchedulerState.DONE
        logger.info("Removed %s (%d values)", keys_sorted, counter[0])
        return RemoveResult(removed=frozenset(to_remove), ignored=frozenset(ignored), values_removed=counter[0])

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _requested(self, keys: KeySpec) -> frozenset[str]:
        if keys is None:
            return self.registry.all_keys()
        if isinstance(keys, str):
            return frozenset([keys])
        return frozenset(keys)

    def _check_known(self, requested: frozenset[str]) -> None:
        unknown = requested - self.registry.all_keys()
        if unknown:
            raise UnknownKeyError(unknown)

    @staticmethod
    def _strip(store, node: Node, keys: list[str]) -> int:
        removed = 0
        for key in keys:
            if store.has(node, key):
                store.remove(node, key)
                removed += 1
        return removed

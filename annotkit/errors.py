"""
Error taxonomy for the annotation engine.

Two families:
- ConfigError: raised while registering or validating strategies. Fatal to the
  configuration, never retried.
- EngineError: raised by annotate/remove calls against a model.
"""

from __future__ import annotations

from typing import Any, Iterable


def _fmt(keys: Iterable[str]) -> str:
    return ", ".join(sorted(keys)) or "-"


class AnnotationError(Exception):
    """Base class for every error raised by annotkit."""


# -----------------------------------------------------------------------------
# Configuration
# -----------------------------------------------------------------------------


class ConfigError(AnnotationError, ValueError):
    """The strategy configuration cannot be used."""


class CyclicDependencyError(ConfigError):
    def __init__(self, key: str, cycle: list[str] | None = None):
        self.key = key
        self.cycle = list(cycle or [key, key])
        super().__init__(f"Annotation key '{key}' transitively requires itself ({' -> '.join(self.cycle)})")


class UnresolvableDependencyError(ConfigError):
    """A required key was never registered.

    ``key`` is the key declaring the requirement, or None when the missing key
    was requested directly.
    """

    def __init__(self, key: str | None, missing: str):
        self.key = key
        self.missing = missing
        if key is None:
            msg = f"Annotation key '{missing}' is not registered"
        else:
            msg = f"Annotation key '{key}' requires unregistered key '{missing}'"
        super().__init__(msg)


class DuplicateStrategyError(ConfigError):
    def __init__(self, key: str, node_type: str):
        self.key = key
        self.node_type = node_type
        super().__init__(f"Duplicate strategy for key '{key}' and node type '{node_type}'")


class ConfigFormatError(ConfigError):
    """A configuration source is malformed."""

    def __init__(self, message: str, path: Any = None):
        self.path = path
        if path is not None:
            message = f"{path}: {message}"
        super().__init__(message)


# -----------------------------------------------------------------------------
# Engine
# -----------------------------------------------------------------------------


class EngineError(AnnotationError, RuntimeError):
    """An annotate/remove call failed."""


class UnknownKeyError(EngineError):
    def __init__(self, keys: Iterable[str]):
        self.keys = frozenset(keys)
        super().__init__(f"Unknown annotation key(s): {_fmt(self.keys)}")


class UnsatisfiableError(EngineError):
    """No open key became ready; the registry changed after validation."""

    def __init__(self, remaining: Iterable[str]):
        self.remaining = frozenset(remaining)
        super().__init__(f"No more executable keys, still open: {_fmt(self.remaining)}")


class DependencyViolationError(EngineError):
    """Removing ``requested`` would strand keys that stay computed.

    ``blocking`` are the requested keys still needed, ``dependents`` the
    computed keys that need them.
    """

    def __init__(self, requested: Iterable[str], blocking: Iterable[str], dependents: Iterable[str] = ()):
        self.requested = frozenset(requested)
        self.blocking = frozenset(blocking)
        self.dependents = frozenset(dependents)
        msg = f"Removing {_fmt(self.requested)} breaks dependencies on {_fmt(self.blocking)}"
        if self.dependents:
            msg += f" (required by {_fmt(self.dependents)})"
        super().__init__(msg)


class StrategyError(EngineError):
    def __init__(self, key: str, node: Any, cause: BaseException):
        self.key = key
        self.node = node
        self.cause = cause
        super().__init__(f"Strategy for '{key}' failed on {node!r}: {cause}")

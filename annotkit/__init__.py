"""annotkit - dependency-aware annotation engine for tree-shaped models."""

__version__ = "0.1.0"

from .annotation import (  # noqa: E402
    AnnotateResult,
    AnnotationService,
    Annotator,
    ExecutionOrder,
    FunctionStrategy,
    RemoveResult,
    StrategyRegistry,
)
from .model import Model, Node, load_model, traverse  # noqa: E402

__all__ = [
    "__version__",
    "AnnotateResult",
    "AnnotationService",
    "Annotator",
    "ExecutionOrder",
    "FunctionStrategy",
    "Model",
    "Node",
    "RemoveResult",
    "StrategyRegistry",
    "load_model",
    "traverse",
]

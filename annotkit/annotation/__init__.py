"""Annotation engine: strategy registry, dependency resolver and scheduler."""

from .registry import StrategyRegistry
from .resolver import closure, plan_rounds, ready_frontier
from .service import AnnotateResult, AnnotationService, RemoveResult, SchedulerState
from .strategy import Annotator, ExecutionOrder, FunctionStrategy, Strategy

__all__ = [
    # Strategies
    "Annotator",
    "ExecutionOrder",
    "FunctionStrategy",
    "Strategy",
    # Registry / resolver
    "StrategyRegistry",
    "closure",
    "plan_rounds",
    "ready_frontier",
    # Service
    "AnnotateResult",
    "AnnotationService",
    "RemoveResult",
    "SchedulerState",
]

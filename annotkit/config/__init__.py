"""Declarative annotation configuration (operations as data, strategies as code)."""

from .load import build_entries, load_config, parse_config
from .schema import AnnotationConfig, AnnotationDef, AttributeDef

__all__ = [
    "AnnotationConfig",
    "AnnotationDef",
    "AttributeDef",
    "build_entries",
    "load_config",
    "parse_config",
]

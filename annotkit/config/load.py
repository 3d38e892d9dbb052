from __future__ import annotations

import tomllib
from pathlib import Path
from typing import Any

from ..annotation.strategy import ExecutionOrder, Strategy
from ..annotators import resolve_operation
from ..errors import ConfigFormatError
from .schema import AnnotationConfig, AnnotationDef, AttributeDef


def _coerce_dict(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _coerce_requires(value: Any, where: str) -> tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        items = value.split(",")
    elif isinstance(value, list):
        items = [str(v) for v in value]
    else:
        raise ConfigFormatError(f"{where}: 'requires' must be a list or a comma separated string")

    seen: list[str] = []
    for item in (i.strip() for i in items):
        if not item:
            continue
        if item in seen:
            raise ConfigFormatError(f"{where}: duplicate required key {item!r}")
        seen.append(item)
    return tuple(seen)


def parse_config(data: dict[str, Any]) -> AnnotationConfig:
    """
    Build an AnnotationConfig from parsed TOML data.

    Shape:

        document_type = "library"

        [[annotations]]
        node_type = "Book"

        [[annotations.attributes]]
        name = "type-path"
        operation = "type_path"
    """
    document_type = str(data.get("document_type", "")).strip()
    if not document_type:
        raise ConfigFormatError("document_type is required")

    annotations: list[AnnotationDef] = []
    for i, raw in enumerate(data.get("annotations", [])):
        raw = _coerce_dict(raw)
        node_type = str(raw.get("node_type", "")).strip()
        if not node_type:
            raise ConfigFormatError(f"annotations[{i}]: node_type is required")

        attributes: list[AttributeDef] = []
        for j, raw_attr in enumerate(raw.get("attributes", [])):
            raw_attr = _coerce_dict(raw_attr)
            where = f"annotations[{i}].attributes[{j}] ({node_type})"

            name = str(raw_attr.get("name", "")).strip()
            operation = str(raw_attr.get("operation", "")).strip()
            if not name or not operation:
                raise ConfigFormatError(f"{where}: 'name' and 'operation' are required")

            parameter = raw_attr.get("parameter")
            order = raw_attr.get("order")
            if order is not None and not isinstance(order, str):
                raise ConfigFormatError(f"{where}: 'order' must be \"pre\" or \"post\"")

            attributes.append(
                AttributeDef(
                    name=name,
                    operation=operation,
                    parameter=str(parameter) if parameter is not None else None,
                    requires=_coerce_requires(raw_attr.get("requires"), where),
                    order=order.strip() if order is not None else None,
                )
            )

        annotations.append(AnnotationDef(node_type=node_type, attributes=attributes))

    description = data.get("description")
    return AnnotationConfig(
        document_type=document_type,
        description=str(description) if isinstance(description, str) else None,
        annotations=annotations,
    )


def load_config(path: Path) -> AnnotationConfig:
    """Load an annotation configuration from TOML."""
    if not path.exists():
        raise ConfigFormatError("configuration file not found", path)
    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as e:
        raise ConfigFormatError(f"invalid TOML: {e}", path) from e

    try:
        return parse_config(data)
    except ConfigFormatError as e:
        raise ConfigFormatError(str(e), path) from e


def build_entries(config: AnnotationConfig) -> list[Strategy]:
    """Instantiate the configured operations as strategies."""
    entries: list[Strategy] = []
    for ann in config.annotations:
        for attr in ann.attributes:
            where = f"{attr.name} on {ann.node_type}"
            try:
                op = resolve_operation(attr.operation)
                order = ExecutionOrder.parse(attr.order) if attr.order else None
                entry = op(attr.name, ann.node_type, attr.parameter, attr.requires, order)
            except (ValueError, ImportError, TypeError) as e:
                raise ConfigFormatError(f"{where}: {e}") from e
            entries.append(entry)
    return entries

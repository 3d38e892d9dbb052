"""keys / check / annotate command implementations."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from rich.console import Console
from rich.table import Table

from ..annotation.resolver import plan_rounds
from ..annotation.service import AnnotationService
from ..errors import ConfigError, EngineError
from ..model import Model, Node, load_model


def _configured(config_path: Path, console: Console) -> AnnotationService | None:
    service = AnnotationService()
    try:
        service.configure(config_path)
    except ConfigError as e:
        console.print(f"Configuration error: {e}", style="bold red")
        return None
    return service


def _node_label(node: Node) -> str:
    return "/" + "/".join(n.type_name for n in node.path_to_root())


def _render(value: Any) -> str:
    if isinstance(value, Node):
        return f"<{_node_label(value)}>"
    return str(value)


# -----------------------------------------------------------------------------
# keys
# -----------------------------------------------------------------------------


def run_keys(config_path: Path, output_json: bool = False) -> int:
    """List configured annotation keys with their node types and requirements.

    Returns:
        Exit code (0 = success, 2 = configuration error)
    """
    console = Console(stderr=True)
    service = _configured(config_path, console)
    if service is None:
        return 2

    registry = service.registry
    rows = []
    for key in sorted(registry.all_keys()):
        strategies = sorted(registry.strategies(key), key=lambda s: s.node_type)
        rows.append(
            {
                "key": key,
                "requires": sorted(registry.required_keys(key)),
                "node_types": [s.node_type for s in strategies],
                "operations": sorted({type(s).__name__ for s in strategies}),
                "orders": sorted({s.order.value for s in strategies}),
            }
        )

    if output_json:
        print(json.dumps({"document_type": service.document_type, "keys": rows}, indent=2))
        return 0

    table = Table(title=f"Annotation keys ({service.document_type})")
    table.add_column("Key", style="bold")
    table.add_column("Requires")
    table.add_column("Node types")
    table.add_column("Operation", style="dim")
    table.add_column("Order", style="dim")
    for row in rows:
        table.add_row(
            row["key"],
            ", ".join(row["requires"]) or "-",
            ", ".join(row["node_types"]),
            ", ".join(row["operations"]),
            ", ".join(row["orders"]),
        )
    Console().print(table)
    return 0


# -----------------------------------------------------------------------------
# check
# -----------------------------------------------------------------------------


def run_check(config_path: Path, keys: list[str] | None = None) -> int:
    """Validate a configuration and show the frontier rounds it implies.

    Returns:
        Exit code (0 = valid, 1 = unknown key requested, 2 = configuration error)
    """
    console = Console(stderr=True)
    service = _configured(config_path, console)
    if service is None:
        return 2

    wanted = set(keys) if keys else set(service.available_keys())
    unknown = wanted - service.available_keys()
    if unknown:
        console.print(f"Unknown key(s): {', '.join(sorted(unknown))}", style="bold red")
        return 1

    rounds = plan_rounds(wanted, service.registry.requirements())
    console.print(f"✓ {len(service.available_keys())} key(s) configured, no cycles", style="green")
    out = Console()
    for i, batch in enumerate(rounds, start=1):
        out.print(f"Round {i}: {', '.join(sorted(batch))}")
    return 0


# -----------------------------------------------------------------------------
# annotate
# -----------------------------------------------------------------------------


def _collect(model: Model) -> list[dict[str, Any]]:
    rows = []
    for node in model.nodes():
        rows.append(
            {
                "node": _node_label(node),
                "id": node.uid,
                "annotations": {k: _render(v) for k, v in sorted(model.annotations(node).items())},
            }
        )
    return rows


def run_annotate(
    config_path: Path,
    model_path: Path,
    keys: list[str] | None = None,
    remove_keys: list[str] | None = None,
    output_json: bool = False,
) -> int:
    """Annotate a JSON model and print the resulting annotations.

    Returns:
        Exit code (0 = success, 1 = engine error, 2 = configuration or model error)
    """
    console = Console(stderr=True)
    service = _configured(config_path, console)
    if service is None:
        return 2

    try:
        model = load_model(model_path)
    except ConfigError as e:
        console.print(f"Model error: {e}", style="bold red")
        return 2

    try:
        result = service.annotate(model, keys or None)
        for i, batch in enumerate(result.rounds, start=1):
            console.print(f"Round {i}: {', '.join(sorted(batch))}", style="dim")
        if remove_keys:
            removed = service.remove_annotations(model, remove_keys)
            console.print(f"Removed {', '.join(sorted(removed.removed)) or 'nothing'}", style="dim")
    except EngineError as e:
        console.print(f"Annotation failed: {e}", style="bold red")
        return 1

    rows = _collect(model)
    executed = sorted(service.executed_keys(model))

    if output_json:
        print(json.dumps({"executed_keys": executed, "nodes": rows}, indent=2, default=str))
        return 0

    table = Table(title=f"{model.name or model_path.name}: {', '.join(executed) or 'no keys'}")
    table.add_column("Node", style="bold")
    table.add_column("Id", style="dim")
    table.add_column("Annotations")
    for row in rows:
        annotations = "\n".join(f"{k} = {v}" for k, v in row["annotations"].items())
        table.add_row(row["node"], row["id"] or "-", annotations or "-")
    Console().print(table)
    return 0

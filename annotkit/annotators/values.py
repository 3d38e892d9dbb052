"""Value annotators: constants, copies and moves of other annotations."""

from __future__ import annotations

import importlib
from typing import Any, Callable

from ..annotation.strategy import Annotator
from ..model import Node
from ..store import AnnotationStore

SET = "set:"
COPY = "copy:"
MOVE = "move:"
CREATE = "create:"


def import_object(path: str) -> Any:
    """Import ``package.module:attr`` or ``package.module.attr``."""
    module_name, sep, attr = path.partition(":")
    if not sep:
        module_name, _, attr = path.rpartition(".")
    if not module_name or not attr:
        raise ValueError(f"Not an importable path: {path!r}")
    module = importlib.import_module(module_name)
    try:
        return getattr(module, attr)
    except AttributeError:
        raise ValueError(f"{module_name} has no attribute {attr!r}") from None


class SetAttributeAnnotator(Annotator):
    """Annotate a constant, or copy/move another annotation's value.

    Parameter forms:
        set:<value>       the literal string
        copy:<key>        the node's value for <key>
        move:<key>        the same, removing <key> from the node
        create:<path>     a fresh instance of the importable factory <path>

    copy and move make <key> a required key.
    """

    def __init__(self, key, node_type, parameter=None, required_keys=None, order=None):
        parameter = (parameter or "").strip()
        required = list(required_keys or ())
        self.source_key: str | None = None
        self.factory: Callable[[], Any] | None = None

        if parameter.startswith((COPY, MOVE)):
            self.source_key = parameter.split(":", 1)[1].strip()
            if not self.source_key:
                raise ValueError(f"set_attribute: missing key in {parameter!r}")
            required.append(self.source_key)
        elif parameter.startswith(CREATE):
            self.factory = import_object(parameter[len(CREATE):].strip())
        elif not parameter.startswith(SET):
            raise ValueError(f"set_attribute parameter {parameter!r} not allowed; use set:, copy:, move: or create:")

        super().__init__(key, node_type, parameter, required, order)

    def compute_value(self, node: Node, store: AnnotationStore) -> Any:
        param = self.parameter or ""
        if param.startswith(SET):
            return param[len(SET):]
        if self.factory is not None:
            return self.factory()

        value = store.get(node, self.source_key)
        if param.startswith(MOVE):
            store.remove(node, self.source_key)
        return value

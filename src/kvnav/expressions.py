"""Expression engine protocol and engine construction.

The expression language itself (grammar, compiler, evaluator) is a third
party library. kvnav only needs dotted-field access, bracket indexing,
function/method calls and a substitutable root identifier, which both
shipped adapters provide:

- ``cel``: Common Expression Language via cel-python (default).
- ``jsonata``: JSONata via jsonata-python.
"""

from __future__ import annotations

from importlib import resources
from typing import Any, Protocol, runtime_checkable

import yaml

from kvnav.models import FunctionMetadata


@runtime_checkable
class ExpressionEngine(Protocol):
    """What the navigator and completion engine need from a language."""

    name: str
    root_marker: str

    def compile(self, expression: str) -> Any:
        """Parse *expression* and return an opaque AST.

        Raises:
            CompileError: If the syntax is invalid.
        """
        ...

    def evaluate(self, expression: str, root: Any) -> Any:
        """Evaluate *expression* with *root* bound to the root marker.

        Returns plain Python values (dict, list, str, int, float, bool,
        bytes, None).

        Raises:
            EngineError: If compilation or evaluation fails.
        """
        ...

    def list_functions(self) -> list[FunctionMetadata]:
        ...

    def list_macros(self) -> list[FunctionMetadata]:
        ...


def load_catalog(filename: str) -> dict[str, list[FunctionMetadata]]:
    """Load a packaged function catalog (``kvnav/data/<filename>``).

    A catalog is a YAML mapping with ``functions`` and ``macros`` lists of
    FunctionMetadata-shaped entries.
    """
    text = (resources.files("kvnav") / "data" / filename).read_text(
        encoding="utf-8"
    )
    raw = yaml.safe_load(text) or {}
    return {
        section: [FunctionMetadata.model_validate(e) for e in raw.get(section) or []]
        for section in ("functions", "macros")
    }


def create_engine(name: str, root_marker: str = "_") -> ExpressionEngine:
    """Build an engine adapter by name (``cel`` or ``jsonata``)."""
    match name:
        case "cel":
            from kvnav.cel_engine import CelEngine

            return CelEngine(root_marker=root_marker)
        case "jsonata":
            from kvnav.jsonata_engine import JsonataEngine

            return JsonataEngine(root_marker=root_marker)
        case _:
            raise ValueError(f"Unknown expression engine: '{name}'")

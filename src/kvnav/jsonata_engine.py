"""JSONata expression engine backed by jsonata-python.

The document is bound under the root marker, so ``_.items[0].name``
reads the same way it does in CEL. JSONata yields ``None`` for paths
that don't exist rather than failing.
"""

from __future__ import annotations

from typing import Any

import jsonata

from kvnav.errors import CompileError, EngineError
from kvnav.expressions import load_catalog
from kvnav.models import FunctionMetadata
from kvnav.values import to_plain


class JsonataEngine:
    """ExpressionEngine for JSONata."""

    name = "jsonata"

    def __init__(self, root_marker: str = "_") -> None:
        self.root_marker = root_marker
        self._catalog = load_catalog("jsonata_functions.yaml")

    def compile(self, expression: str) -> Any:
        try:
            return jsonata.Jsonata(expression)
        except Exception as e:
            raise CompileError(
                f"Invalid JSONata syntax in '{expression}': {e}"
            ) from e

    def evaluate(self, expression: str, root: Any) -> Any:
        expr = self.compile(expression)
        try:
            result = expr.evaluate({self.root_marker: to_plain(root)})
        except Exception as e:
            raise EngineError(f"Expression '{expression}' failed: {e}") from e
        return to_plain(result)

    def list_functions(self) -> list[FunctionMetadata]:
        return [f.model_copy(deep=True) for f in self._catalog["functions"]]

    def list_macros(self) -> list[FunctionMetadata]:
        return [f.model_copy(deep=True) for f in self._catalog["macros"]]

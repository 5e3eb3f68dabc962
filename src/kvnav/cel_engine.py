"""CEL expression engine backed by cel-python.

Data is converted to CEL values on the way in and back to plain Python
on the way out, so callers never see ``celpy.celtypes``. A handful of
extension functions (string case, map keys/values, list helpers, math)
are registered on every program; they are listed in
``data/cel_functions.yaml`` alongside the standard library.
"""

from __future__ import annotations

import datetime
import math
from typing import Any, Callable

import celpy
from celpy import celtypes
from celpy.celparser import CELParseError
from celpy.evaluation import CELEvalError

from kvnav.errors import CompileError, EngineError
from kvnav.expressions import load_catalog
from kvnav.models import FunctionMetadata
from kvnav.values import is_mapping, is_sequence, record_fields


# ── Value conversion ──────────────────────────────────────────────


def to_cel(value: Any) -> Any:
    """Convert a plain Python value (or record) into a CEL value."""
    if value is None:
        return celtypes.NullType()
    if isinstance(value, bool):
        return celtypes.BoolType(value)
    if isinstance(value, int):
        return celtypes.IntType(value)
    if isinstance(value, float):
        return celtypes.DoubleType(value)
    if isinstance(value, str):
        return celtypes.StringType(value)
    if isinstance(value, (bytes, bytearray)):
        return celtypes.BytesType(bytes(value))
    if isinstance(value, datetime.datetime):
        return celtypes.TimestampType(value)
    if isinstance(value, datetime.timedelta):
        return celtypes.DurationType(value)

    fields = record_fields(value)
    if fields is not None:
        value = fields
    if is_mapping(value):
        return celtypes.MapType(
            {celtypes.StringType(str(k)): to_cel(v) for k, v in value.items()}
        )
    if is_sequence(value):
        return celtypes.ListType([to_cel(v) for v in value])
    return celtypes.StringType(str(value))


def from_cel(value: Any) -> Any:
    """Convert a CEL result back into plain Python."""
    if value is None or isinstance(value, celtypes.NullType):
        return None
    if isinstance(value, celtypes.BoolType):
        return bool(value)
    if isinstance(value, (celtypes.IntType, celtypes.UintType)):
        return int(value)
    if isinstance(value, celtypes.DoubleType):
        return float(value)
    if isinstance(value, celtypes.StringType):
        return str(value)
    if isinstance(value, celtypes.BytesType):
        return bytes(value)
    if isinstance(value, celtypes.MapType):
        return {from_cel(k): from_cel(v) for k, v in value.items()}
    if isinstance(value, celtypes.ListType):
        return [from_cel(v) for v in value]
    if isinstance(value, celtypes.TypeType):
        return str(value)
    return value


# ── Extension functions ───────────────────────────────────────────
# Method calls pass the target as the first argument.


def _lower_ascii(text: Any) -> celtypes.StringType:
    return celtypes.StringType(
        "".join(c.lower() if c.isascii() else c for c in str(text))
    )


def _upper_ascii(text: Any) -> celtypes.StringType:
    return celtypes.StringType(
        "".join(c.upper() if c.isascii() else c for c in str(text))
    )


def _keys(mapping: Any) -> celtypes.ListType:
    return celtypes.ListType(list(mapping.keys()))


def _values(mapping: Any) -> celtypes.ListType:
    return celtypes.ListType(list(mapping.values()))


def _flatten(items: Any) -> celtypes.ListType:
    out: list[Any] = []
    for item in items:
        if isinstance(item, list):
            out.extend(item)
        else:
            out.append(item)
    return celtypes.ListType(out)


def _slice(items: Any, start: Any, end: Any) -> celtypes.ListType:
    return celtypes.ListType(list(items)[int(start) : int(end)])


def _sort(items: Any) -> celtypes.ListType:
    return celtypes.ListType(sorted(items))


def _abs(number: Any) -> Any:
    if isinstance(number, celtypes.DoubleType):
        return celtypes.DoubleType(abs(float(number)))
    return celtypes.IntType(abs(int(number)))


def _ceil(number: Any) -> celtypes.DoubleType:
    return celtypes.DoubleType(math.ceil(float(number)))


def _floor(number: Any) -> celtypes.DoubleType:
    return celtypes.DoubleType(math.floor(float(number)))


def _round(number: Any) -> celtypes.DoubleType:
    x = float(number)
    return celtypes.DoubleType(math.copysign(math.floor(abs(x) + 0.5), x))


def _sqrt(number: Any) -> celtypes.DoubleType:
    return celtypes.DoubleType(math.sqrt(float(number)))


EXTENSION_FUNCTIONS: dict[str, Callable[..., Any]] = {
    "lowerAscii": _lower_ascii,
    "upperAscii": _upper_ascii,
    "keys": _keys,
    "values": _values,
    "flatten": _flatten,
    "slice": _slice,
    "sort": _sort,
    "abs": _abs,
    "ceil": _ceil,
    "floor": _floor,
    "round": _round,
    "sqrt": _sqrt,
}


# ── Engine ────────────────────────────────────────────────────────


class CelEngine:
    """ExpressionEngine for the Common Expression Language."""

    name = "cel"

    def __init__(self, root_marker: str = "_") -> None:
        self.root_marker = root_marker
        self._env = celpy.Environment()
        self._catalog = load_catalog("cel_functions.yaml")

    def compile(self, expression: str) -> Any:
        try:
            return self._env.compile(expression)
        except CELParseError as e:
            raise CompileError(f"Invalid CEL syntax in '{expression}': {e}") from e

    def evaluate(self, expression: str, root: Any) -> Any:
        ast = self.compile(expression)
        try:
            program = self._env.program(ast, functions=EXTENSION_FUNCTIONS)
            result = program.evaluate({self.root_marker: to_cel(root)})
        except Exception as e:
            raise EngineError(f"Expression '{expression}' failed: {e}") from e
        if isinstance(result, CELEvalError):
            raise EngineError(f"Expression '{expression}' failed: {result}")
        return from_cel(result)

    def list_functions(self) -> list[FunctionMetadata]:
        return [f.model_copy(deep=True) for f in self._catalog["functions"]]

    def list_macros(self) -> list[FunctionMetadata]:
        return [f.model_copy(deep=True) for f in self._catalog["macros"]]

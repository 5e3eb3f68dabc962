"""Pydantic models for function metadata, completions, shapes and settings.

All data structures that cross the package boundary live here. No
business logic, just shapes.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, Field


# ── Function metadata ─────────────────────────────────────────────


class FunctionMetadata(BaseModel):
    name: str
    signature: str = ""
    description: str = ""
    category: str = "general"
    is_method: bool = False
    return_type: str = "any"
    param_types: list[str] = Field(default_factory=list)
    examples: list[str] = Field(default_factory=list)


class FunctionExample(BaseModel):
    """Configured description/examples override for a single function."""

    description: str = ""
    examples: list[str] = Field(default_factory=list)


# ── Completion ────────────────────────────────────────────────────


class CompletionKind(str, Enum):
    FIELD = "field"
    INDEX = "index"
    FUNCTION = "function"
    KEYWORD = "keyword"
    VARIABLE = "variable"


class Completion(BaseModel):
    text: str
    display: str
    kind: CompletionKind
    detail: str = ""
    description: str = ""
    score: int = 0
    function: FunctionMetadata | None = None


class CompletionContext(BaseModel):
    """Per-call completion context. Never persisted between calls.

    ``cursor_position`` and ``is_after_dot`` are carried for UI callers
    that track the editing point. Completion itself derives the split
    point from the input text, so neither field changes the result.
    """

    current_node: Any = None
    current_type: str = ""
    cursor_position: int = 0
    expression_result: Any = None
    expression_result_type: str = ""
    partial_token: str = ""
    is_after_dot: bool = False


# ── Shape ─────────────────────────────────────────────────────────


class ShapeKind(str, Enum):
    SCALAR = "scalar"
    MAP = "map"
    ARRAY = "array"
    HOMOGENEOUS_ARRAY = "homogeneous_array"


class Shape(BaseModel):
    kind: ShapeKind
    length: int = 0
    fields: list[str] | None = None


# ── Settings ──────────────────────────────────────────────────────


class SortOrder(str, Enum):
    ASCENDING = "ascending"
    DESCENDING = "descending"
    NONE = "none"


class ArrayStyle(str, Enum):
    INDEX = "index"
    NUMBERED = "numbered"
    BULLET = "bullet"
    NONE = "none"


class Settings(BaseModel):
    root_marker: str = Field(default="_", min_length=1)
    engine: Literal["cel", "jsonata"] = "cel"
    sort_order: SortOrder = SortOrder.ASCENDING
    array_style: ArrayStyle = ArrayStyle.INDEX
    field_score: int = 1000
    function_score: int = 50
    prefix_weight: int = 10
    max_examples: int = 2
    function_examples: dict[str, FunctionExample] = Field(default_factory=dict)
    function_suggestions: list[str] = Field(default_factory=list)

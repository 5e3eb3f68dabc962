"""Path parsing and expression classification.

A path is a dotted/bracketed string such as
``regions.asia.countries[0]["postal-code"]``. ``classify`` decides whether
a string can be resolved by structural traversal (SIMPLE) or needs the
expression engine (COMPLEX); ``parse_path`` turns it into typed segments.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum

from kvnav.errors import InvalidSyntax

# ---------------------------------------------------------------------------
# Segments
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Field:
    """A dotted field name, or an opaque bracket token like ``[a,b]``."""

    name: str


@dataclass(frozen=True)
class QuotedKey:
    """A bracket-quoted key: ``["key"]`` or ``['key']``."""

    name: str


@dataclass(frozen=True)
class Index:
    index: int


@dataclass(frozen=True)
class OpaqueExpr:
    """Verbatim expression tail. Always the last segment of a path."""

    expr: str


PathSegment = Field | QuotedKey | Index | OpaqueExpr


class PathKind(str, Enum):
    SIMPLE = "simple"
    COMPLEX = "complex"


COMPARISON_OPERATORS: tuple[str, ...] = ("==", "!=", "<=", ">=", "<", ">", "&&", "||")

_INT_RE = re.compile(r"-?\d+")
_IDENT_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")
_NUMERIC_DOT_RE = re.compile(r"\.(\d+)(?=[.\[]|$)")


def is_integer(text: str) -> bool:
    return _INT_RE.fullmatch(text) is not None


def is_identifier(text: str) -> bool:
    return _IDENT_RE.fullmatch(text) is not None


def is_quoted(text: str) -> bool:
    return len(text) >= 2 and text[0] == text[-1] and text[0] in "\"'"


def has_operator(text: str) -> bool:
    return any(op in text for op in COMPARISON_OPERATORS)


def has_root(text: str, root_marker: str) -> bool:
    """True when *text* is the bare root marker or starts with ``_.``/``_[``."""
    return (
        text == root_marker
        or text.startswith(root_marker + ".")
        or text.startswith(root_marker + "[")
    )


# ---------------------------------------------------------------------------
# Classification
# ---------------------------------------------------------------------------


def classify(text: str, root_marker: str = "_") -> PathKind:
    """Decide whether *text* is simple navigation or a complex expression.

    Literal and bracket checks run before the operator check so that
    ``[0]`` is never mistaken for a comparison. Operator detection is a
    plain substring test, so a quoted key containing ``<`` or ``==``
    outside a leading bracket is classified COMPLEX.
    """
    trimmed = text.strip()

    if is_quoted(trimmed):
        return PathKind.COMPLEX
    if trimmed.startswith("{"):
        return PathKind.COMPLEX
    if trimmed.startswith("["):
        close = trimmed.find("]")
        if close > 0:
            inside = trimmed[1:close]
            if is_integer(inside) or is_quoted(inside):
                return PathKind.SIMPLE
            return PathKind.COMPLEX

    open_paren = trimmed.find("(")
    if open_paren >= 0 and trimmed.find(")", open_paren) > open_paren:
        return PathKind.COMPLEX
    if trimmed.startswith(root_marker + ".") or trimmed.startswith(root_marker + "["):
        return PathKind.COMPLEX
    if has_operator(trimmed):
        return PathKind.COMPLEX
    return PathKind.SIMPLE


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


def _bracket_segment(inner: str) -> PathSegment:
    if is_quoted(inner):
        return QuotedKey(inner[1:-1])
    if is_integer(inner):
        return Index(int(inner))
    return Field(inner)


def parse_path(text: str) -> list[PathSegment]:
    """Split a path into typed segments.

    ``.`` delimits fields, ``[N]`` is an index, ``["k"]``/``['k']`` a quoted
    key and any other bracket interior an opaque bracket token. A ``(``
    at the start of a segment, or a comparison operator inside one, turns
    the rest of the input into a single OpaqueExpr.

    Raises:
        InvalidSyntax: If a ``[`` is never closed.
    """
    segments: list[PathSegment] = []
    i = 0
    n = len(text)

    while i < n:
        start = i
        if text[i] == ".":
            i += 1
            if i >= n:
                break

        ch = text[i]
        if ch == "[":
            end = text.find("]", i)
            if end == -1:
                raise InvalidSyntax(
                    f"unterminated '[' at position {i} in '{text}'", text
                )
            segments.append(_bracket_segment(text[i + 1 : end]))
            i = end + 1
            continue

        if ch == "(":
            segments.append(OpaqueExpr(text[start:]))
            break

        j = i
        while j < n and text[j] not in ".[(":
            j += 1
        name = text[i:j]
        if has_operator(name):
            segments.append(OpaqueExpr(text[start:]))
            break
        if name:
            segments.append(Field(name))
        i = j

    return segments


def reconstruct_path(segments: list[PathSegment]) -> str:
    """Rebuild a path string from segments (inverse of ``parse_path``)."""
    parts: list[str] = []
    for idx, seg in enumerate(segments):
        match seg:
            case Field(name=name):
                parts.append(f".{name}" if idx > 0 else name)
            case QuotedKey(name=name):
                parts.append(_quote_key(name))
            case Index(index=index):
                parts.append(f"[{index}]")
            case OpaqueExpr(expr=expr):
                parts.append(expr)
    return "".join(parts)


def _quote_key(name: str) -> str:
    if '"' in name and "'" not in name:
        return f"['{name}']"
    return f'["{name}"]'


def build_path(segments: list[PathSegment], root: str = "") -> str:
    """Render segments as a display path, optionally anchored at *root*.

    Numeric segments use bracket notation, identifiers dot notation and
    any other key a quoted key, so the result always re-parses to the same
    navigation steps.
    """
    out = root
    for seg in segments:
        match seg:
            case Index(index=index):
                out += f"[{index}]"
            case QuotedKey(name=name):
                out += _quote_key(name)
            case OpaqueExpr(expr=expr):
                out += expr
            case Field(name=name) if is_integer(name):
                out += f"[{name}]"
            case Field(name=name) if is_identifier(name):
                out += f".{name}" if out else name
            case Field(name=name):
                out += _quote_key(name)
    return out


def normalize_path(text: str) -> str:
    """Convert dotted numeric steps to bracket indices.

    ``items.0.tags`` becomes ``items[0].tags``.
    """
    return _NUMERIC_DOT_RE.sub(r"[\1]", text)


# ---------------------------------------------------------------------------
# Lexical segmentation (completion fallback)
# ---------------------------------------------------------------------------


def split_segments(text: str) -> list[str]:
    """Split on ``.`` and ``[...]`` without validating anything.

    Dots inside brackets are kept, and an unterminated bracket yields its
    partial interior as the last segment. Used when the structural parse
    of in-progress input fails.
    """
    segments: list[str] = []
    current: list[str] = []
    in_bracket = False

    for ch in text:
        if ch == "." and not in_bracket:
            if current:
                segments.append("".join(current))
                current = []
        elif ch == "[":
            if current:
                segments.append("".join(current))
                current = []
            in_bracket = True
        elif ch == "]" and in_bracket:
            if current:
                segments.append("".join(current))
                current = []
            in_bracket = False
        else:
            current.append(ch)

    if current:
        segments.append("".join(current))
    return segments


def lexical_segments(raw: list[str]) -> list[PathSegment]:
    """Type the raw strings produced by ``split_segments``."""
    return [_bracket_segment(s) for s in raw]

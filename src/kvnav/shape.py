"""Structural classification of values.

``detect_shape`` drives completion (which keys to offer) and external
renderers (table vs key/value layout). ``is_homogeneous_array`` is the one
place that decides whether a sequence can be shown as a table.
"""

from __future__ import annotations

from typing import Any

from kvnav.models import ArrayStyle, Shape, ShapeKind, SortOrder
from kvnav.values import as_mapping, is_sequence, stringify


def _string_keyed(value: Any) -> dict[str, Any] | None:
    mapping = as_mapping(value)
    if mapping is None:
        return None
    return {str(k): v for k, v in mapping.items()}


def is_homogeneous_array(value: Any) -> tuple[bool, list[str] | None]:
    """Check whether *value* is a non-empty sequence of same-keyed records.

    Returns:
        ``(True, sorted_fields)`` when every element is a map or record and
        all share the first element's non-empty key set, else
        ``(False, None)``.
    """
    if not is_sequence(value) or len(value) == 0:
        return False, None

    first = _string_keyed(value[0])
    if not first:
        return False, None
    keys = set(first)

    for element in value[1:]:
        mapping = _string_keyed(element)
        if mapping is None or set(mapping) != keys:
            return False, None

    return True, sorted(keys)


def detect_shape(value: Any) -> Shape:
    if as_mapping(value) is not None:
        return Shape(kind=ShapeKind.MAP)
    if not is_sequence(value):
        return Shape(kind=ShapeKind.SCALAR)
    if len(value) == 0:
        return Shape(kind=ShapeKind.ARRAY, length=0)

    homogeneous, fields = is_homogeneous_array(value)
    if homogeneous:
        return Shape(
            kind=ShapeKind.HOMOGENEOUS_ARRAY, length=len(value), fields=fields
        )
    return Shape(kind=ShapeKind.ARRAY, length=len(value))


def extract_columnar_data(
    value: Any, preferred_order: list[str] | None = None
) -> tuple[list[str], list[list[str]]] | None:
    """Lay out a homogeneous array as columns and stringified rows.

    Columns listed in *preferred_order* that exist come first, in that
    order; the remaining fields follow sorted. Returns None for anything
    that is not a homogeneous array.
    """
    homogeneous, fields = is_homogeneous_array(value)
    if not homogeneous or fields is None:
        return None

    field_set = set(fields)
    columns: list[str] = []
    for name in preferred_order or []:
        if name in field_set and name not in columns:
            columns.append(name)
    columns.extend(f for f in fields if f not in columns)

    rows = []
    for element in value:
        mapping = _string_keyed(element) or {}
        rows.append([stringify(mapping.get(col)) for col in columns])
    return columns, rows


# ---------------------------------------------------------------------------
# Key/value rows
# ---------------------------------------------------------------------------


def _array_key(index: int, style: ArrayStyle) -> str:
    match style:
        case ArrayStyle.INDEX:
            return f"[{index}]"
        case ArrayStyle.NUMBERED:
            return str(index + 1)
        case ArrayStyle.BULLET:
            return "•"
        case _:
            return ""


def node_to_rows(
    node: Any,
    sort_order: SortOrder = SortOrder.ASCENDING,
    array_style: ArrayStyle = ArrayStyle.INDEX,
) -> list[list[str]]:
    """Convert a node into ``[key, value]`` rows for a two-column table.

    Empty containers and scalars produce a single ``(value)`` row.
    """
    mapping = _string_keyed(node)
    if mapping is not None and len(mapping) > 0:
        keys = list(mapping)
        if sort_order == SortOrder.ASCENDING:
            keys.sort()
        elif sort_order == SortOrder.DESCENDING:
            keys.sort(reverse=True)
        return [[k, stringify(mapping[k])] for k in keys]

    if is_sequence(node) and len(node) > 0:
        return [
            [_array_key(i, array_style), stringify(item)]
            for i, item in enumerate(node)
        ]

    return [["(value)", stringify(node)]]

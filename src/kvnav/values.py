"""Value helpers shared by the navigator, shape detector and engines.

Data handed to kvnav is plain Python: dicts, lists/tuples, scalars and
bytes. External records (pydantic models and dataclass instances) are
exposed through ``record_fields``, which maps declared names (pydantic
aliases, dataclass ``metadata["name"]``) and native attribute names to
values, skipping private members.
"""

from __future__ import annotations

import dataclasses
import datetime
import json
from collections.abc import Mapping, Sequence
from typing import Any

from pydantic import BaseModel


def is_mapping(value: Any) -> bool:
    return isinstance(value, Mapping)


def is_sequence(value: Any) -> bool:
    return isinstance(value, Sequence) and not isinstance(
        value, (str, bytes, bytearray)
    )


def is_record(value: Any) -> bool:
    """True for external records: pydantic model or dataclass instances."""
    if isinstance(value, BaseModel):
        return True
    return dataclasses.is_dataclass(value) and not isinstance(value, type)


def record_fields(value: Any) -> dict[str, Any] | None:
    """Return a record's fields keyed by declared name, or None.

    The declared external name wins over the attribute name, matching how
    the record serializes. Members whose attribute name starts with ``_``
    are never exposed.
    """
    if isinstance(value, BaseModel):
        fields: dict[str, Any] = {}
        for attr, info in type(value).model_fields.items():
            if attr.startswith("_"):
                continue
            fields[info.alias or attr] = getattr(value, attr)
        return fields

    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        fields = {}
        for f in dataclasses.fields(value):
            if f.name.startswith("_"):
                continue
            fields[f.metadata.get("name", f.name)] = getattr(value, f.name)
        return fields

    return None


def record_lookup(value: Any, key: str) -> tuple[bool, Any]:
    """Look up a record member by declared name first, then native name."""
    fields = record_fields(value)
    if fields is None:
        return False, None
    if key in fields:
        return True, fields[key]
    if key in _record_attrs(value):
        return True, getattr(value, key)
    return False, None


def _record_attrs(value: Any) -> list[str]:
    if isinstance(value, BaseModel):
        names = list(type(value).model_fields)
    else:
        names = [f.name for f in dataclasses.fields(value)]
    return [n for n in names if not n.startswith("_")]


def as_mapping(value: Any) -> Mapping[str, Any] | None:
    """View a dict or record as a mapping. Anything else yields None."""
    if is_mapping(value):
        return value
    return record_fields(value)


def infer_type(value: Any) -> str:
    """Name a value's type the way the expression engines do."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "bool"
    if isinstance(value, int):
        return "int"
    if isinstance(value, float):
        return "double"
    if isinstance(value, str):
        return "string"
    if isinstance(value, (bytes, bytearray)):
        return "bytes"
    if isinstance(value, datetime.datetime):
        return "timestamp"
    if isinstance(value, datetime.timedelta):
        return "duration"
    if is_mapping(value) or is_record(value):
        return "map"
    if is_sequence(value):
        return "list"
    return "unknown"


def to_plain(value: Any) -> Any:
    """Recursively convert records and tuples into dicts and lists.

    Map keys become strings, as they would in JSON.
    """
    mapping = record_fields(value)
    if mapping is not None:
        return {k: to_plain(v) for k, v in mapping.items()}
    if is_mapping(value):
        return {str(k): to_plain(v) for k, v in value.items()}
    if is_sequence(value):
        return [to_plain(v) for v in value]
    return value


def _escape_newlines(text: str) -> str:
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    return text.replace("\n", "\\n")


def stringify(value: Any) -> str:
    """Compact single-line display string for any value.

    None renders empty, strings keep their text with newlines escaped,
    booleans render lowercase, containers render as compact JSON.
    """
    if value is None:
        return ""
    if isinstance(value, str):
        return _escape_newlines(value)
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode("utf-8", errors="replace")
    if is_mapping(value) or is_sequence(value) or is_record(value):
        return json.dumps(
            to_plain(value), separators=(",", ":"), sort_keys=True, default=str
        )
    return str(value)

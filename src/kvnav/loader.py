"""Settings and data document loading, plus JSON Schema validation."""

from __future__ import annotations

import json
import re
import tomllib
from pathlib import Path
from typing import Any, Callable

import jsonschema
import yaml
from pydantic import ValidationError as PydanticValidationError

from kvnav.errors import ConfigError, LoadError, SchemaValidationError
from kvnav.models import Settings


def load_settings(path: str | Path) -> Settings:
    """Load kvnav settings from a YAML file.

    Parses YAML, then validates the structure via Pydantic. An empty
    file yields the defaults.

    Raises:
        ConfigError: If the file doesn't exist, YAML is invalid, or the
            structure doesn't match the expected schema.
    """
    path = Path(path)
    if not path.is_file():
        raise ConfigError(f"Settings file not found: {path}")

    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise ConfigError(
            f"Settings YAML must be a mapping, got {type(raw).__name__}"
        )

    try:
        return Settings.model_validate(raw)
    except PydanticValidationError as e:
        raise ConfigError(f"Settings structure invalid: {e}") from e


# ---------------------------------------------------------------------------
# Data documents
# ---------------------------------------------------------------------------

_EXTENSIONS: dict[str, str] = {
    ".json": "json",
    ".ndjson": "ndjson",
    ".jsonl": "ndjson",
    ".yaml": "yaml",
    ".yml": "yaml",
    ".toml": "toml",
}

_TOML_SECTION_RE = re.compile(r"^\[[A-Za-z0-9_.\-\"' ]+\]\s*$")
_TOML_KEY_VALUE_RE = re.compile(r"^\s*[A-Za-z0-9_.\-\"]+\s*=\s*\S")


def _parse_json(text: str) -> list[Any]:
    return [json.loads(text)]


def _parse_ndjson(text: str) -> list[Any]:
    docs = [json.loads(line) for line in text.splitlines() if line.strip()]
    if not docs:
        raise ValueError("no data found in input")
    return docs


def _parse_yaml(text: str) -> list[Any]:
    docs = [d for d in yaml.safe_load_all(text) if d is not None]
    if not docs:
        raise ValueError("no data found in input")
    return docs


def _parse_toml(text: str) -> list[Any]:
    return [tomllib.loads(text)]


_PARSERS: dict[str, Callable[[str], list[Any]]] = {
    "json": _parse_json,
    "ndjson": _parse_ndjson,
    "yaml": _parse_yaml,
    "toml": _parse_toml,
}


def _is_multidoc_yaml(text: str) -> bool:
    return text.startswith("---") or "\n---" in text


def _is_likely_ndjson(text: str) -> bool:
    lines = [ln.strip() for ln in text.splitlines() if ln.strip()]
    json_lines = sum(1 for ln in lines if ln.startswith(("{", "[")))
    return len(lines) > 1 and json_lines > len(lines) // 2


def _is_likely_toml(text: str) -> bool:
    lines = [
        ln for ln in text.splitlines()
        if ln.strip() and not ln.strip().startswith("#")
    ]
    if any(_TOML_SECTION_RE.match(ln) for ln in lines):
        return True
    kv = sum(1 for ln in lines if _TOML_KEY_VALUE_RE.match(ln))
    return bool(lines) and kv > len(lines) // 2


def _candidates(text: str) -> list[str]:
    """Formats to try, most likely first, remaining ones as fallbacks."""
    order: list[str] = []
    if _is_multidoc_yaml(text):
        order.append("yaml")
    if text.startswith(("{", "[")):
        order.append("json")
    if _is_likely_ndjson(text):
        order.append("ndjson")
    if _is_likely_toml(text):
        order.append("toml")
    for fmt in ("toml", "json", "yaml"):
        if fmt not in order:
            order.append(fmt)
    return order


def load_document(text: str, fmt: str | None = None) -> Any:
    """Parse a data document into a Python value.

    Args:
        text: Document contents.
        fmt: ``json``, ``ndjson``, ``yaml`` or ``toml``. When None the
            format is guessed from the content, falling back through the
            other formats in turn.

    Returns:
        The root value. Multi-document input (NDJSON, YAML with ``---``)
        yields a list of documents.

    Raises:
        LoadError: If no format could parse the input.
    """
    text = text.strip()
    if not text:
        raise LoadError("Empty input")

    if fmt is not None:
        if fmt not in _PARSERS:
            raise LoadError(f"Unknown format: '{fmt}'")
        order = [fmt]
    else:
        order = _candidates(text)

    errors: list[str] = []
    for name in order:
        try:
            docs = _PARSERS[name](text)
        except (ValueError, yaml.YAMLError, tomllib.TOMLDecodeError) as e:
            errors.append(f"{name}: {e}")
            continue
        return docs[0] if len(docs) == 1 else docs

    raise LoadError("Could not parse input: " + "; ".join(errors))


def load_file(path: str | Path) -> Any:
    """Load a data file, choosing the format from its extension first.

    Raises:
        LoadError: If the file is missing or cannot be parsed.
    """
    path = Path(path)
    if not path.is_file():
        raise LoadError(f"Data file not found: {path}")

    text = path.read_text(encoding="utf-8")
    fmt = _EXTENSIONS.get(path.suffix.lower())
    if fmt is not None:
        try:
            return load_document(text, fmt)
        except LoadError:
            pass
    return load_document(text)


def validate_document(schema: dict[str, Any], data: Any) -> None:
    """Validate a data document against a JSON Schema.

    Raises:
        SchemaValidationError: If data doesn't match schema.
    """
    try:
        jsonschema.validate(instance=data, schema=schema)
    except jsonschema.ValidationError as e:
        raise SchemaValidationError(
            f"Document validation failed: {e.message}"
        ) from e

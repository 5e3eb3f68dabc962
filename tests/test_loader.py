"""Tests for settings loading, document parsing and schema validation."""

from __future__ import annotations

import pytest

from kvnav.errors import ConfigError, LoadError, SchemaValidationError
from kvnav.loader import load_document, load_file, load_settings, validate_document
from kvnav.models import ArrayStyle, SortOrder


# ── load_settings ─────────────────────────────────────────────────


def test_load_settings(tmp_path):
    path = tmp_path / "kvnav.yaml"
    path.write_text("""\
root_marker: doc
engine: jsonata
sort_order: descending
array_style: bullet
max_examples: 1
function_examples:
  size:
    description: Length of things
    examples: ["[1].size() => 1"]
function_suggestions:
  - "trim(s) - Trim a string"
""")
    settings = load_settings(path)
    assert settings.root_marker == "doc"
    assert settings.engine == "jsonata"
    assert settings.sort_order == SortOrder.DESCENDING
    assert settings.array_style == ArrayStyle.BULLET
    assert settings.max_examples == 1
    assert settings.function_examples["size"].examples == ["[1].size() => 1"]
    assert settings.function_suggestions == ["trim(s) - Trim a string"]


def test_empty_settings_file_gives_defaults(tmp_path):
    path = tmp_path / "kvnav.yaml"
    path.write_text("")
    settings = load_settings(path)
    assert settings.root_marker == "_"
    assert settings.engine == "cel"
    assert settings.field_score == 1000


def test_missing_settings_file(tmp_path):
    with pytest.raises(ConfigError, match="not found"):
        load_settings(tmp_path / "nope.yaml")


def test_invalid_settings_yaml(tmp_path):
    path = tmp_path / "kvnav.yaml"
    path.write_text("root_marker: [unclosed")
    with pytest.raises(ConfigError, match="Invalid YAML"):
        load_settings(path)


def test_settings_must_be_mapping(tmp_path):
    path = tmp_path / "kvnav.yaml"
    path.write_text("- a\n- b\n")
    with pytest.raises(ConfigError, match="mapping"):
        load_settings(path)


@pytest.mark.parametrize("body", ["engine: lua", "root_marker: ''", "field_score: lots"])
def test_invalid_settings_structure(tmp_path, body):
    path = tmp_path / "kvnav.yaml"
    path.write_text(body)
    with pytest.raises(ConfigError, match="structure invalid"):
        load_settings(path)


# ── load_document ─────────────────────────────────────────────────


def test_json_object():
    assert load_document('{"a": [1, 2]}') == {"a": [1, 2]}


def test_pretty_printed_json_array():
    text = '[\n  {"a": 1},\n  {"a": 2}\n]'
    assert load_document(text) == [{"a": 1}, {"a": 2}]


def test_ndjson():
    assert load_document('{"a": 1}\n{"a": 2}\n') == [{"a": 1}, {"a": 2}]


def test_yaml_single_document():
    assert load_document("a: 1\nb:\n  - x\n") == {"a": 1, "b": ["x"]}


def test_yaml_multi_document():
    assert load_document("a: 1\n---\nb: 2\n") == [{"a": 1}, {"b": 2}]


def test_toml():
    text = 'title = "x"\n\n[server]\nport = 8080\n'
    assert load_document(text) == {"title": "x", "server": {"port": 8080}}


def test_explicit_format():
    assert load_document("a = 1", fmt="toml") == {"a": 1}
    with pytest.raises(LoadError):
        load_document("a: 1", fmt="json")


def test_unknown_format():
    with pytest.raises(LoadError, match="Unknown format"):
        load_document("{}", fmt="xml")


def test_empty_input():
    with pytest.raises(LoadError, match="Empty"):
        load_document("   \n")


def test_unparseable_input():
    with pytest.raises(LoadError, match="Could not parse"):
        load_document("{: [")


# ── load_file ─────────────────────────────────────────────────────


def test_load_file_by_extension(tmp_path):
    (tmp_path / "d.json").write_text('{"a": 1}')
    (tmp_path / "d.yml").write_text("a: 2\n")
    (tmp_path / "d.toml").write_text("a = 3\n")
    (tmp_path / "d.jsonl").write_text('{"a": 4}\n{"a": 5}\n')
    assert load_file(tmp_path / "d.json") == {"a": 1}
    assert load_file(tmp_path / "d.yml") == {"a": 2}
    assert load_file(tmp_path / "d.toml") == {"a": 3}
    assert load_file(tmp_path / "d.jsonl") == [{"a": 4}, {"a": 5}]


def test_load_file_wrong_extension_falls_back(tmp_path):
    path = tmp_path / "d.json"
    path.write_text("a: 1\n")
    assert load_file(path) == {"a": 1}


def test_load_file_missing(tmp_path):
    with pytest.raises(LoadError, match="not found"):
        load_file(tmp_path / "nope.json")


# ── validate_document ─────────────────────────────────────────────


SCHEMA = {
    "type": "object",
    "properties": {"items": {"type": "array"}},
    "required": ["items"],
}


def test_validate_document_ok():
    validate_document(SCHEMA, {"items": []})


def test_validate_document_fails():
    with pytest.raises(SchemaValidationError, match="items"):
        validate_document(SCHEMA, {"other": 1})

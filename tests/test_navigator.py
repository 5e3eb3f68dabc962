"""Tests for the Navigator: structural walks, engine delegation, errors."""

from __future__ import annotations

import dataclasses

import pytest
from pydantic import BaseModel, Field

from kvnav.completion import CompletionEngine
from kvnav.errors import (
    EngineError,
    ErrorKind,
    EvaluationError,
    IndexOutOfRange,
    InvalidSyntax,
    KeyNotFound,
    NotNavigable,
    TypeMismatch,
)
from kvnav.jsonata_engine import JsonataEngine
from kvnav.models import CompletionContext, CompletionKind
from kvnav.navigator import Navigator, Resolution, node_at_path, resolve
from kvnav.session import set_session


class Address(BaseModel):
    postal_code: str = Field(alias="postalCode")
    city: str


class Customer(BaseModel):
    name: str
    address: Address


@dataclasses.dataclass
class Order:
    order_id: int = dataclasses.field(metadata={"name": "id"})
    lines: list


# ── Root and simple paths ─────────────────────────────────────────


def test_empty_path_returns_root(session, items_doc):
    nav = Navigator(session)
    assert nav.resolve(items_doc, "").value is items_doc
    assert nav.resolve(items_doc, "  ").value is items_doc


def test_root_marker_returns_root(session, items_doc):
    assert Navigator(session).resolve(items_doc, "_").value is items_doc


def test_dotted_numeric_index(session, items_doc):
    assert Navigator(session).node_at_path(items_doc, "items.0.id") == 1


def test_bracket_index(session, items_doc):
    assert Navigator(session).node_at_path(items_doc, "items[1].name") == "b"
    assert Navigator(session).node_at_path(items_doc, "tags[1]") == "y"


def test_quoted_key(session, items_doc):
    assert Navigator(session).node_at_path(items_doc, '["postal-code"]') == "123"


def test_leading_index_on_list(session):
    assert Navigator(session).node_at_path([10, 20], "[1]") == 20


def test_non_string_keys_match_by_text(session):
    doc = {"codes": {200: "ok", 404: "missing"}}
    nav = Navigator(session)
    assert nav.node_at_path(doc, 'codes["200"]') == "ok"
    assert nav.node_at_path(doc, "codes.404") == "missing"
    assert nav.node_at_path(doc, '_.codes["200"]') == "ok"


def test_completed_non_string_key_resolves(session):
    doc = {"codes": {200: "ok"}}
    context = CompletionContext(current_node=doc)
    completions = CompletionEngine(session).filter_completions("codes.", context)
    fields = [c.text for c in completions if c.kind == CompletionKind.FIELD]
    assert fields == ['codes["200"]']
    assert Navigator(session).node_at_path(doc, fields[0]) == "ok"


# ── Errors ────────────────────────────────────────────────────────


def test_index_out_of_range(session, items_doc):
    result = Navigator(session).resolve(items_doc, "items.5")
    assert not result.ok
    assert isinstance(result.error, IndexOutOfRange)
    assert result.error.kind == ErrorKind.INDEX_OUT_OF_RANGE
    assert result.error.length == 2


def test_negative_index_is_out_of_range(session, items_doc):
    result = Navigator(session).resolve(items_doc, "tags[-1]")
    assert isinstance(result.error, IndexOutOfRange)


def test_missing_key(session, items_doc):
    result = Navigator(session).resolve(items_doc, "nope")
    assert isinstance(result.error, KeyNotFound)
    assert result.error.key == "nope"
    assert result.error.path == "nope"


def test_key_on_list_is_type_mismatch(session, items_doc):
    result = Navigator(session).resolve(items_doc, "items.name")
    assert isinstance(result.error, TypeMismatch)


def test_index_on_map_is_type_mismatch(session, items_doc):
    result = Navigator(session).resolve(items_doc, "items[0][1]")
    assert isinstance(result.error, TypeMismatch)


def test_descending_into_scalar(session, items_doc):
    result = Navigator(session).resolve(items_doc, "items[0].id.x")
    assert isinstance(result.error, NotNavigable)


def test_descending_into_null(session):
    result = Navigator(session).resolve({"a": None}, "a.b")
    assert isinstance(result.error, NotNavigable)


def test_unterminated_bracket(session, items_doc):
    result = Navigator(session).resolve(items_doc, "items[0")
    assert isinstance(result.error, InvalidSyntax)


def test_node_at_path_raises(session, items_doc):
    with pytest.raises(KeyNotFound):
        Navigator(session).node_at_path(items_doc, "missing")


def test_resolution_unwrap():
    assert Resolution(value=3).unwrap() == 3
    with pytest.raises(KeyNotFound):
        Resolution(error=KeyNotFound("k")).unwrap()


# ── Records ───────────────────────────────────────────────────────


def test_pydantic_record_by_alias_and_attribute(session):
    doc = {"customer": Customer(name="ann", address=Address(postalCode="9", city="x"))}
    nav = Navigator(session)
    assert nav.node_at_path(doc, "customer.address.postalCode") == "9"
    assert nav.node_at_path(doc, "customer.address.postal_code") == "9"


def test_dataclass_record(session):
    doc = [Order(order_id=7, lines=["a", "b"])]
    nav = Navigator(session)
    assert nav.node_at_path(doc, "[0].id") == 7
    assert nav.node_at_path(doc, "[0].lines[1]") == "b"


def test_record_missing_field(session):
    result = Navigator(session).resolve(Order(order_id=1, lines=[]), "nope")
    assert isinstance(result.error, KeyNotFound)


# ── Complex expressions ───────────────────────────────────────────


def test_root_anchored_expression(session, items_doc):
    assert Navigator(session).node_at_path(items_doc, "_.items[0].name") == "a"


def test_function_call(session, items_doc):
    assert Navigator(session).node_at_path(items_doc, "_.items.size()") == 2


def test_filter_and_map(session, items_doc):
    value = Navigator(session).node_at_path(
        items_doc, "_.items.filter(x, x.id > 1).map(x, x.name)"
    )
    assert value == ["b"]


def test_engine_failure_is_evaluation_error(session, items_doc):
    result = Navigator(session).resolve(items_doc, "_.nope")
    assert isinstance(result.error, EvaluationError)
    assert isinstance(result.error.cause, EngineError)
    assert "_.nope" in str(result.error)


def test_engine_swap_is_seen_by_existing_navigator(session, items_doc):
    nav = Navigator(session)
    session.set_engine(JsonataEngine())
    assert nav.node_at_path(items_doc, "$count(_.items)") == 2


# ── Module-level helpers ──────────────────────────────────────────


def test_module_level_resolve_uses_default_session(session, items_doc):
    set_session(session)
    assert resolve(items_doc, "items[0].id").value == 1
    assert node_at_path(items_doc, "tags[2]") == "z"

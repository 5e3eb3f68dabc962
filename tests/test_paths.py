"""Tests for path classification, parsing and rebuilding."""

from __future__ import annotations

import pytest

from kvnav.errors import InvalidSyntax
from kvnav.paths import (
    Field,
    Index,
    OpaqueExpr,
    PathKind,
    QuotedKey,
    build_path,
    classify,
    has_root,
    normalize_path,
    parse_path,
    reconstruct_path,
    split_segments,
)


# ── classify ──────────────────────────────────────────────────────


@pytest.mark.parametrize(
    "text",
    [
        '"hello"',
        "'hello'",
        "{a: 1}",
        "[1, 2, 3]",
        "items.size()",
        "size(items)",
        "_.items",
        "_[0]",
        "a == b",
        "count >= 3",
        "a && b",
    ],
)
def test_classify_complex(text):
    assert classify(text) == PathKind.COMPLEX


@pytest.mark.parametrize(
    "text",
    [
        "items",
        "items[0].name",
        "items.0.name",
        "[0]",
        '["postal-code"]',
        "['key'].x",
        "",
    ],
)
def test_classify_simple(text):
    assert classify(text) == PathKind.SIMPLE


def test_bracket_index_is_not_a_comparison():
    assert classify("[0] ") == PathKind.SIMPLE


def test_unterminated_leading_bracket_falls_through():
    assert classify("[0") == PathKind.SIMPLE
    assert classify("[0 == 1") == PathKind.COMPLEX


def test_quoted_key_with_operator_is_complex():
    assert classify('a["x<y"]') == PathKind.COMPLEX


def test_classify_custom_root_marker():
    assert classify("doc.items", root_marker="doc") == PathKind.COMPLEX
    assert classify("_.items", root_marker="doc") == PathKind.SIMPLE


def test_open_paren_without_close_is_not_a_call():
    assert classify("items.filter(") == PathKind.SIMPLE


# ── parse_path ────────────────────────────────────────────────────


def test_parse_mixed_path():
    segments = parse_path('regions.asia.countries[0]["postal-code"]')
    assert segments == [
        Field("regions"),
        Field("asia"),
        Field("countries"),
        Index(0),
        QuotedKey("postal-code"),
    ]


def test_parse_single_quoted_key():
    assert parse_path("['k'].x") == [QuotedKey("k"), Field("x")]


def test_parse_leading_index():
    assert parse_path("[1].name") == [Index(1), Field("name")]


def test_parse_opaque_bracket_token():
    assert parse_path("a[b,c]") == [Field("a"), Field("b,c")]


def test_parse_numeric_field():
    assert parse_path("items.0") == [Field("items"), Field("0")]


def test_parse_call_becomes_opaque_tail():
    segments = parse_path("items.filter(x, x > 1)")
    assert segments == [Field("items"), Field("filter"), OpaqueExpr("(x, x > 1)")]


def test_parse_operator_segment_becomes_opaque():
    segments = parse_path("a.b==1")
    assert segments == [Field("a"), OpaqueExpr(".b==1")]


def test_parse_unterminated_bracket_raises():
    with pytest.raises(InvalidSyntax):
        parse_path("items[0")


def test_parse_empty():
    assert parse_path("") == []


# ── reconstruct / build / normalize ───────────────────────────────


def test_reconstruct_round_trip():
    path = 'a.b[0]["c-d"].e'
    assert reconstruct_path(parse_path(path)) == path


def test_reconstruct_opaque_tail():
    path = "items.filter(x, x > 1)"
    assert reconstruct_path(parse_path(path)) == path


def test_build_path_uses_brackets_for_numbers_and_odd_keys():
    segments = [Field("items"), Field("0"), Field("first name")]
    assert build_path(segments, "_") == '_.items[0]["first name"]'


def test_build_path_without_root():
    assert build_path([Field("items"), Index(2), Field("id")]) == "items[2].id"


def test_build_path_quotes_keys_with_double_quotes():
    assert build_path([QuotedKey('say "hi"')]) == "['say \"hi\"']"


def test_normalize_path():
    assert normalize_path("items.0.tags") == "items[0].tags"
    assert normalize_path("a.10") == "a[10]"
    assert normalize_path("a.b1.c") == "a.b1.c"


# ── split_segments / has_root ─────────────────────────────────────


def test_split_segments_lexical():
    assert split_segments("_.items[0].na") == ["_", "items", "0", "na"]


def test_split_segments_keeps_dots_in_brackets():
    assert split_segments('a["x.y"].b') == ["a", '"x.y"', "b"]


def test_split_segments_unterminated_bracket():
    assert split_segments("a[1") == ["a", "1"]


def test_has_root():
    assert has_root("_", "_")
    assert has_root("_.a", "_")
    assert has_root("_[0]", "_")
    assert not has_root("_a", "_")
    assert not has_root("items", "_")

"""Tests for engine construction and the packaged function catalogs."""

from __future__ import annotations

import pytest

from kvnav.cel_engine import CelEngine
from kvnav.expressions import ExpressionEngine, create_engine, load_catalog
from kvnav.jsonata_engine import JsonataEngine


@pytest.mark.parametrize("name,cls", [("cel", CelEngine), ("jsonata", JsonataEngine)])
def test_create_engine(name, cls):
    engine = create_engine(name, root_marker="doc")
    assert isinstance(engine, cls)
    assert isinstance(engine, ExpressionEngine)
    assert engine.name == name
    assert engine.root_marker == "doc"


def test_create_engine_unknown():
    with pytest.raises(ValueError, match="Unknown expression engine"):
        create_engine("lua")


@pytest.mark.parametrize("filename", ["cel_functions.yaml", "jsonata_functions.yaml"])
def test_catalogs_load(filename):
    catalog = load_catalog(filename)
    assert set(catalog) == {"functions", "macros"}
    assert catalog["functions"]
    names = {fn.name for fn in catalog["macros"]}
    assert {"map", "filter"} <= names


def test_cel_catalog_entries_are_categorized():
    functions = load_catalog("cel_functions.yaml")["functions"]
    by_name = {fn.name: fn for fn in functions}
    assert by_name["lowerAscii"].category == "string"
    assert by_name["lowerAscii"].is_method
    assert by_name["abs"].category == "math"
    assert not by_name["abs"].is_method

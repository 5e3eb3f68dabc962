"""Shared fixtures: sample documents and a fresh session per test."""

from __future__ import annotations

import pytest

from kvnav.models import Settings
from kvnav.session import Session, set_session


@pytest.fixture(autouse=True)
def _reset_default_session():
    yield
    set_session(None)


@pytest.fixture
def session() -> Session:
    return Session(Settings())


@pytest.fixture
def data() -> dict:
    return {
        "users": [
            {"name": "ann", "age": 30},
            {"name": "bob", "age": 17},
        ],
        "config": {"debug": True, "level": "info"},
        "title": "Report",
    }


@pytest.fixture
def items_doc() -> dict:
    return {
        "items": [{"id": 1, "name": "a"}, {"id": 2, "name": "b"}],
        "tags": ["x", "y", "z"],
        "postal-code": "123",
    }

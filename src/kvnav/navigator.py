"""Resolve paths and expressions against a root value.

Simple paths (see ``kvnav.paths.classify``) are walked structurally
without touching the expression engine. Everything else is handed
verbatim to the session's active engine.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from kvnav import nav_logger
from kvnav.errors import (
    EvaluationError,
    IndexOutOfRange,
    InvalidSyntax,
    KeyNotFound,
    NavigationError,
    NotNavigable,
    TypeMismatch,
)
from kvnav.paths import (
    Field,
    Index,
    OpaqueExpr,
    PathKind,
    PathSegment,
    QuotedKey,
    classify,
    is_integer,
    parse_path,
)
from kvnav.session import Session, get_session
from kvnav.values import is_mapping, is_record, is_sequence, record_lookup


@dataclass(frozen=True)
class Resolution:
    """Outcome of a resolve: exactly one of ``value``/``error`` is meaningful."""

    value: Any = None
    error: NavigationError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> Any:
        if self.error is not None:
            raise self.error
        return self.value


# ---------------------------------------------------------------------------
# Structural steps
# ---------------------------------------------------------------------------


def _type_name(value: Any) -> str:
    return type(value).__name__


def _lookup_key(current: Any, key: str, path: str) -> Any:
    if is_mapping(current):
        if key in current:
            return current[key]
        for k, value in current.items():
            if str(k) == key:
                return value
        raise KeyNotFound(key, path)

    if is_sequence(current):
        if is_integer(key):
            return _lookup_index(current, int(key), path)
        raise TypeMismatch(
            f"cannot look up key '{key}' on a list", path
        )

    if is_record(current):
        found, value = record_lookup(current, key)
        if not found:
            raise KeyNotFound(key, path)
        return value

    raise NotNavigable(
        f"cannot navigate into {_type_name(current)} with key '{key}'", path
    )


def _lookup_index(current: Any, index: int, path: str) -> Any:
    if is_sequence(current):
        if index < 0 or index >= len(current):
            raise IndexOutOfRange(index, len(current), path)
        return current[index]

    if is_mapping(current) or is_record(current):
        raise TypeMismatch(f"cannot index a map with [{index}]", path)

    raise NotNavigable(
        f"cannot navigate into {_type_name(current)} with index [{index}]", path
    )


def _step(current: Any, segment: PathSegment, path: str) -> Any:
    match segment:
        case Index(index=index):
            return _lookup_index(current, index, path)
        case Field(name=name) | QuotedKey(name=name):
            return _lookup_key(current, name, path)
        case OpaqueExpr(expr=expr):
            raise InvalidSyntax(
                f"expression tail '{expr}' in a simple path", path
            )


# ---------------------------------------------------------------------------
# Navigator
# ---------------------------------------------------------------------------


class Navigator:
    """Resolves paths against values using a session's active engine."""

    def __init__(self, session: Session | None = None) -> None:
        self._session = session

    @property
    def session(self) -> Session:
        return self._session or get_session()

    def resolve(self, root: Any, path: str) -> Resolution:
        """Resolve *path* against *root*. Never raises NavigationError."""
        text = path.strip()
        root_marker = self.session.root_marker

        if text == "" or text == root_marker:
            return Resolution(value=root)

        kind = classify(text, root_marker)
        try:
            if kind == PathKind.SIMPLE:
                value = self._walk(root, text)
            else:
                value = self._evaluate(root, text)
        except NavigationError as e:
            nav_logger.log_resolve(text, kind.value, str(e))
            return Resolution(error=e)

        nav_logger.log_resolve(text, kind.value)
        return Resolution(value=value)

    def node_at_path(self, root: Any, path: str) -> Any:
        """Like ``resolve`` but raises the NavigationError on failure."""
        return self.resolve(root, path).unwrap()

    def _walk(self, root: Any, path: str) -> Any:
        current = root
        for segment in parse_path(path):
            current = _step(current, segment, path)
        return current

    def _evaluate(self, root: Any, expression: str) -> Any:
        engine = self.session.engine
        try:
            return engine.evaluate(expression, root)
        except Exception as e:
            raise EvaluationError(expression, str(e), cause=e) from e


def resolve(root: Any, path: str) -> Resolution:
    """Resolve *path* against *root* using the default session."""
    return Navigator().resolve(root, path)


def node_at_path(root: Any, path: str) -> Any:
    return Navigator().node_at_path(root, path)

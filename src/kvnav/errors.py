"""Custom exception hierarchy for kvnav.

All exceptions inherit from KvnavError so callers can catch broadly
or narrowly as needed. Navigation errors also carry an ``ErrorKind`` so
renderers can show a diagnostic without matching on class names.
"""

from __future__ import annotations

from enum import Enum


class KvnavError(Exception):
    """Base for all kvnav errors."""


class ConfigError(KvnavError):
    """Settings file missing, unparseable, or structurally invalid."""


class LoadError(KvnavError):
    """A data document could not be read or parsed."""


class SchemaValidationError(KvnavError):
    """A data document failed validation against its JSON Schema."""


class EngineError(KvnavError):
    """The expression engine failed to evaluate an expression."""


class CompileError(EngineError):
    """The expression engine rejected an expression's syntax."""


# ── Navigation errors ─────────────────────────────────────────────


class ErrorKind(str, Enum):
    KEY_NOT_FOUND = "KeyNotFound"
    INDEX_OUT_OF_RANGE = "IndexOutOfRange"
    TYPE_MISMATCH = "TypeMismatch"
    NOT_NAVIGABLE = "NotNavigable"
    INVALID_SYNTAX = "InvalidSyntax"
    EVALUATION_ERROR = "EvaluationError"


class NavigationError(KvnavError):
    """A path could not be resolved against a value."""

    kind: ErrorKind

    def __init__(self, message: str, path: str = "") -> None:
        self.path = path
        super().__init__(message)


class KeyNotFound(NavigationError):
    kind = ErrorKind.KEY_NOT_FOUND

    def __init__(self, key: str, path: str = "") -> None:
        self.key = key
        super().__init__(f"key '{key}' not found", path)


class IndexOutOfRange(NavigationError):
    kind = ErrorKind.INDEX_OUT_OF_RANGE

    def __init__(self, index: int, length: int, path: str = "") -> None:
        self.index = index
        self.length = length
        super().__init__(f"index {index} out of range (length {length})", path)


class TypeMismatch(NavigationError):
    kind = ErrorKind.TYPE_MISMATCH


class NotNavigable(NavigationError):
    kind = ErrorKind.NOT_NAVIGABLE


class InvalidSyntax(NavigationError):
    kind = ErrorKind.INVALID_SYNTAX


class EvaluationError(NavigationError):
    """The expression engine failed while resolving a complex expression."""

    kind = ErrorKind.EVALUATION_ERROR

    def __init__(
        self,
        expression: str,
        message: str,
        cause: Exception | None = None,
    ) -> None:
        self.cause = cause
        super().__init__(
            f"Expression '{expression}' failed: {message}", expression
        )

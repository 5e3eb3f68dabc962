"""kvnav: path navigation, expression evaluation and autocomplete for nested data."""

from kvnav.completion import CompletionEngine, filter_completions
from kvnav.errors import (
    CompileError,
    ConfigError,
    EngineError,
    ErrorKind,
    EvaluationError,
    IndexOutOfRange,
    InvalidSyntax,
    KeyNotFound,
    KvnavError,
    LoadError,
    NavigationError,
    NotNavigable,
    SchemaValidationError,
    TypeMismatch,
)
from kvnav.expressions import ExpressionEngine, create_engine
from kvnav.help import (
    format_lines,
    format_one_liner,
    format_signature,
    render_function_help,
)
from kvnav.loader import load_document, load_file, load_settings, validate_document
from kvnav.models import (
    ArrayStyle,
    Completion,
    CompletionContext,
    CompletionKind,
    FunctionExample,
    FunctionMetadata,
    Settings,
    Shape,
    ShapeKind,
    SortOrder,
)
from kvnav.nav_logger import configure_logging
from kvnav.navigator import Navigator, Resolution, node_at_path, resolve
from kvnav.paths import PathKind, classify, parse_path, reconstruct_path
from kvnav.registry import FunctionRegistry
from kvnav.session import Session, configure, get_session, set_session
from kvnav.shape import (
    detect_shape,
    extract_columnar_data,
    is_homogeneous_array,
    node_to_rows,
)

__all__ = [
    "classify",
    "configure",
    "configure_logging",
    "create_engine",
    "detect_shape",
    "extract_columnar_data",
    "filter_completions",
    "format_lines",
    "format_one_liner",
    "format_signature",
    "get_session",
    "is_homogeneous_array",
    "load_document",
    "load_file",
    "load_settings",
    "node_at_path",
    "node_to_rows",
    "parse_path",
    "reconstruct_path",
    "render_function_help",
    "resolve",
    "set_session",
    "validate_document",
    "ArrayStyle",
    "Completion",
    "CompletionContext",
    "CompletionEngine",
    "CompletionKind",
    "ExpressionEngine",
    "FunctionExample",
    "FunctionMetadata",
    "FunctionRegistry",
    "Navigator",
    "PathKind",
    "Resolution",
    "Session",
    "Settings",
    "Shape",
    "ShapeKind",
    "SortOrder",
    "CompileError",
    "ConfigError",
    "EngineError",
    "ErrorKind",
    "EvaluationError",
    "IndexOutOfRange",
    "InvalidSyntax",
    "KeyNotFound",
    "KvnavError",
    "LoadError",
    "NavigationError",
    "NotNavigable",
    "SchemaValidationError",
    "TypeMismatch",
]

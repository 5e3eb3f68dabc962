"""Command-line interface for kvnav.

Enables execution via ``python -m kvnav`` or a plain ``kvnav`` command
after install. Every command prints JSON (or help text) to stdout and
reports failures on stderr as ``[error] Kind: message`` with exit code 1.
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any

# ── Human-readable help strings ──────────────────────────────────────────────

_TOP_DESCRIPTION = """\
Navigate, query and autocomplete paths into structured data.

Loads a JSON, NDJSON, YAML or TOML document and resolves dotted/bracketed
paths (items[0].name) or full expressions (_.items.filter(x, x.price > 10))
against it. The same engine that powers an interactive browser's
autocomplete can be queried from the command line.
"""

_TOP_EPILOG = """\
Quick examples:
  kvnav resolve data.json 'items[0].name'
  kvnav resolve data.yaml '_.items.filter(x, x.price > 10)'
  kvnav complete data.json '_.it'
  kvnav functions --category string
  kvnav shape data.json items --columns name,price
"""

_RESOLVE_DESCRIPTION = """\
Resolve a path or expression against a data document and print the result
as JSON.

Simple paths (a.b[0]["c-d"], items.0) are walked structurally. Anything
else (root-anchored _.x, calls, comparisons) is evaluated by the active
expression engine with the document bound to the root marker (default _).
"""

_RESOLVE_EPILOG = """\
Common errors:
  KeyNotFound      -- a map has no such key
  IndexOutOfRange  -- list index outside 0..len-1 (negatives included)
  TypeMismatch     -- key step on a list or index step on a map
  NotNavigable     -- descending into a scalar
  InvalidSyntax    -- unterminated bracket in a simple path
  EvaluationError  -- the expression engine rejected or failed the expression
"""

_COMPLETE_DESCRIPTION = """\
List completions for partially typed input, best first, as JSON.

Each entry has text (the full replacement), display, kind (field, index,
function), detail and score. Field and index candidates always outrank
function candidates.
"""

_FUNCTIONS_DESCRIPTION = """\
List the functions the active expression engine offers.

Without a query or filter, prints a reference grouped by category.
"""

_SHAPE_DESCRIPTION = """\
Describe the structure of a value (scalar, map, array, homogeneous_array)
and print it as key/value rows, or as a table with --columns.
"""


# ── Argument parser ───────────────────────────────────────────────────────────

def _common_options() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--config",
        type=Path,
        metavar="FILE",
        help="YAML settings file (root marker, engine, scoring, examples).",
    )
    common.add_argument(
        "--engine",
        choices=["cel", "jsonata"],
        help="Expression engine to use; overrides the settings file.",
    )
    common.add_argument(
        "--log-dir",
        type=Path,
        metavar="DIR",
        help="Write JSONL debug logs to DIR/kvnav.log.",
    )
    common.add_argument(
        "--schema",
        type=Path,
        metavar="FILE",
        help="JSON Schema file the data document must satisfy.",
    )
    return common


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="kvnav",
        description=_TOP_DESCRIPTION,
        epilog=_TOP_EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    sub = parser.add_subparsers(dest="command")
    common = _common_options()

    # ── resolve ──────────────────────────────────────────────────────────────
    res_p = sub.add_parser(
        "resolve",
        parents=[common],
        help="Resolve a path or expression and print the value as JSON",
        description=_RESOLVE_DESCRIPTION,
        epilog=_RESOLVE_EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    res_p.add_argument("data", help="Data file, or - for stdin")
    res_p.add_argument("path", help="Path or expression to resolve")

    # ── complete ─────────────────────────────────────────────────────────────
    comp_p = sub.add_parser(
        "complete",
        parents=[common],
        help="List completions for partial input",
        description=_COMPLETE_DESCRIPTION,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    comp_p.add_argument("data", help="Data file, or - for stdin")
    comp_p.add_argument("input", help="Partially typed path or expression")
    comp_p.add_argument(
        "--partial",
        default="",
        help="Explicit partial token; overrides the one derived from INPUT.",
    )
    comp_p.add_argument(
        "--type",
        default="",
        dest="type_name",
        metavar="TYPE",
        help="Fallback type (map, list, string, int, ...) if INPUT does not resolve.",
    )

    # ── functions ────────────────────────────────────────────────────────────
    fn_p = sub.add_parser(
        "functions",
        parents=[common],
        help="List or search the engine's functions",
        description=_FUNCTIONS_DESCRIPTION,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    fn_p.add_argument("query", nargs="?", default="", help="Search name/description")
    fn_p.add_argument("--category", help="Only functions in this category")
    kind = fn_p.add_mutually_exclusive_group()
    kind.add_argument("--methods", action="store_true", help="Only methods")
    kind.add_argument("--globals", action="store_true", help="Only global functions")
    fn_p.add_argument("--json", action="store_true", help="Emit metadata as JSON")

    # ── shape ────────────────────────────────────────────────────────────────
    shape_p = sub.add_parser(
        "shape",
        parents=[common],
        help="Describe the structure of a value",
        description=_SHAPE_DESCRIPTION,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    shape_p.add_argument("data", help="Data file, or - for stdin")
    shape_p.add_argument("path", nargs="?", default="", help="Path to the value (default: root)")
    shape_p.add_argument(
        "--columns",
        nargs="?",
        const="",
        metavar="NAMES",
        help=(
            "Lay out a homogeneous array as a table. NAMES is an optional "
            "comma-separated preferred column order."
        ),
    )

    return parser


# ── Shared setup ─────────────────────────────────────────────────────────────

def _session_from_args(args: argparse.Namespace):
    from kvnav import Session, Settings, configure_logging, load_settings

    if args.log_dir:
        configure_logging(args.log_dir)

    settings = load_settings(args.config) if args.config else Settings()
    if args.engine:
        settings = settings.model_copy(update={"engine": args.engine})
    return Session(settings)


def _load_data(args: argparse.Namespace) -> Any:
    from kvnav import LoadError, load_document, load_file, validate_document

    if args.data == "-":
        data = load_document(sys.stdin.read())
    else:
        data = load_file(args.data)

    if args.schema:
        try:
            schema = json.loads(Path(args.schema).read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise LoadError(f"Cannot read schema {args.schema}: {e}") from e
        validate_document(schema, data)
    return data


def _print_json(value: Any) -> None:
    from kvnav.values import to_plain

    print(json.dumps(to_plain(value), indent=2, default=str))


# ── Command handlers ──────────────────────────────────────────────────────────

def _cmd_resolve(args: argparse.Namespace) -> int:
    from kvnav import Navigator

    session = _session_from_args(args)
    data = _load_data(args)
    value = Navigator(session).node_at_path(data, args.path)
    _print_json(value)
    return 0


def _cmd_complete(args: argparse.Namespace) -> int:
    from kvnav import CompletionContext, CompletionEngine

    session = _session_from_args(args)
    data = _load_data(args)
    context = CompletionContext(
        current_node=data,
        current_type=args.type_name,
        partial_token=args.partial,
    )
    completions = CompletionEngine(session).filter_completions(args.input, context)
    _print_json([
        c.model_dump(mode="json", exclude={"function"}) for c in completions
    ])
    return 0


def _cmd_functions(args: argparse.Namespace) -> int:
    from kvnav import format_one_liner, render_function_help

    session = _session_from_args(args)
    registry = session.registry

    filtered = bool(args.query or args.methods or args.globals)
    functions = registry.search(args.query)
    if args.category:
        functions = [f for f in functions if f.category == args.category]
    if args.methods:
        functions = [f for f in functions if f.is_method]
    if args.globals:
        functions = [f for f in functions if not f.is_method]

    if args.json:
        _print_json([f.model_dump(mode="json") for f in functions])
    elif filtered:
        for fn in functions:
            print(format_one_liner(fn))
    else:
        print(
            render_function_help(
                registry,
                category=args.category,
                max_examples=session.settings.max_examples,
            ),
            end="",
        )
    return 0


def _cmd_shape(args: argparse.Namespace) -> int:
    from kvnav import Navigator, detect_shape, extract_columnar_data, node_to_rows

    session = _session_from_args(args)
    data = _load_data(args)
    node = Navigator(session).node_at_path(data, args.path)

    out: dict[str, Any] = {
        "shape": detect_shape(node).model_dump(mode="json", exclude_none=True)
    }
    if args.columns is not None:
        preferred = [c.strip() for c in args.columns.split(",") if c.strip()]
        table = extract_columnar_data(node, preferred)
        if table is None:
            out["table"] = None
        else:
            columns, rows = table
            out["table"] = {"columns": columns, "rows": rows}
    else:
        out["rows"] = node_to_rows(
            node, session.settings.sort_order, session.settings.array_style
        )
    _print_json(out)
    return 0


def _report(error: Exception) -> None:
    kind = getattr(error, "kind", None)
    name = kind.value if kind is not None else type(error).__name__
    print(f"[error] {name}: {error}", file=sys.stderr)


# ── Entry point ───────────────────────────────────────────────────────────────

_COMMANDS = {
    "resolve": _cmd_resolve,
    "complete": _cmd_complete,
    "functions": _cmd_functions,
    "shape": _cmd_shape,
}


def main(argv: list[str] | None = None) -> None:
    from kvnav import KvnavError, nav_logger

    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    try:
        code = _COMMANDS[args.command](args)
    except KvnavError as e:
        nav_logger.log_error(args.command, str(e))
        _report(e)
        sys.exit(1)
    sys.exit(code)


if __name__ == "__main__":
    main()

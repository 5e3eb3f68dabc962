"""Context-aware completion for partially typed paths and expressions.

Input is usually syntactically incomplete (``_.us``, ``_.items[``,
``_.items.filter(x, x.na``). The engine first tries a structural split:
parse the stem before the partial token and compile it with the active
engine. When that fails it falls back to a lexical split on ``.`` and
``[...]``. The base expression is then resolved against live data, and
the keys of the result are merged with type-compatible functions from
the registry into one scored list.
"""

from __future__ import annotations

from typing import Any

from kvnav import nav_logger
from kvnav.errors import InvalidSyntax
from kvnav.models import (
    Completion,
    CompletionContext,
    CompletionKind,
    FunctionMetadata,
)
from kvnav.navigator import Navigator
from kvnav.paths import (
    Field,
    Index,
    PathKind,
    PathSegment,
    QuotedKey,
    build_path,
    classify,
    has_root,
    is_identifier,
    is_integer,
    lexical_segments,
    parse_path,
    split_segments,
)
from kvnav.session import Session, get_session
from kvnav.values import as_mapping, is_sequence
from kvnav.values import infer_type as value_type

_MATH = frozenset({"abs", "ceil", "floor", "round", "sqrt"})

TYPE_FUNCTIONS: dict[str, frozenset[str]] = {
    "map": frozenset({
        "keys", "values", "filter", "map", "all", "exists", "exists_one",
        "size", "has",
    }),
    "list": frozenset({
        "filter", "map", "all", "exists", "exists_one", "size", "flatten",
        "slice", "sort",
    }),
    "string": frozenset({
        "contains", "startswith", "endswith", "matches", "lowerascii",
        "upperascii", "size",
    }),
    "double": _MATH,
    "int": _MATH,
    "uint": _MATH,
    "bool": frozenset(),
}


def normalize_function_name(name: str) -> str:
    """``list.filter()`` -> ``filter``; lowercased for comparison."""
    n = name.strip()
    dot = n.rfind(".")
    if dot >= 0:
        n = n[dot + 1 :]
    n = n.removesuffix("()").removesuffix("(")
    return n.strip().lower()


def is_compatible(name: str, type_name: str) -> bool:
    """Whether a function makes sense on a value of *type_name*."""
    normalized = normalize_function_name(name)
    if normalized == "type":
        return True
    allowed = TYPE_FUNCTIONS.get(type_name)
    if allowed is None:
        return False
    return normalized in allowed


def _strip_root(text: str, root: str) -> str:
    if text == root:
        return ""
    if text.startswith(root + "."):
        return text[len(root) + 1 :]
    if text.startswith(root + "["):
        return text[len(root) :]
    return text


def _key_segment(key: str) -> PathSegment:
    if is_identifier(key):
        return Field(key)
    return QuotedKey(key)


class CompletionEngine:
    """Produces ranked completions for a session's data and registry."""

    def __init__(self, session: Session | None = None) -> None:
        self._session = session
        self._navigator = Navigator(session)

    @property
    def session(self) -> Session:
        return self._session or get_session()

    # ── Public API ────────────────────────────────────────────────

    def filter_completions(
        self, text: str, context: CompletionContext | None = None
    ) -> list[Completion]:
        """Return completions for *text*, best first.

        Never raises for bad input; an unresolvable base yields an empty
        list unless ``context.current_type`` provides a fallback type.
        """
        context = context or CompletionContext()
        session = self.session
        root = session.root_marker

        text = text.strip() or root
        rooted = has_root(text, root)

        base, partial = self._split(text, root, rooted)
        if context.partial_token:
            partial = context.partial_token

        resolved = self._resolve_base(base, root, context)
        if resolved is None:
            nav_logger.log_completion(text, base, partial, 0)
            return []
        node, node_type, show_fields = resolved

        completions: list[Completion] = []
        if show_fields:
            completions.extend(
                self._field_candidates(node, base, partial, root, rooted)
            )
        completions.extend(
            self._function_candidates(node_type, base, partial, root, rooted)
        )

        completions.sort(key=lambda c: (-c.score, c.display))
        nav_logger.log_completion(text, base, partial, len(completions))
        return completions

    def infer_type(
        self, expression: str, context: CompletionContext | None = None
    ) -> str:
        """Type name of *expression*'s result against the context node, or ``""``."""
        context = context or CompletionContext()
        text = expression.strip()
        if not text:
            return ""
        resolution = self._navigator.resolve(context.current_node, text)
        if not resolution.ok:
            return ""
        return value_type(resolution.value)

    # ── Splitting ─────────────────────────────────────────────────

    def _split(self, text: str, root: str, rooted: bool) -> tuple[str, str]:
        """Split *text* into (base expression, partial token)."""
        at_point = text.endswith(".") or text.endswith("[")

        if text == root:
            stem, partial = root, ""
        elif at_point:
            stem, partial = text[:-1], ""
        elif text.endswith("]"):
            stem, partial = text, ""
        else:
            cut = max(text.rfind("."), text.rfind("["))
            if cut >= 0:
                stem, partial = text[:cut], text[cut + 1 :]
            else:
                stem, partial = "", text

        if stem in ("", root):
            return stem, partial

        try:
            parse_path(stem)
            self.session.engine.compile(stem)
        except Exception as e:
            nav_logger.log_probe_fallback(text, str(e))
            return self._lexical_split(text, root, rooted, at_point)
        return stem, partial

    def _lexical_split(
        self, text: str, root: str, rooted: bool, at_point: bool
    ) -> tuple[str, str]:
        segments = split_segments(text)
        partial = ""
        if not at_point and segments and not is_integer(segments[-1]):
            partial = segments.pop()

        if "(" in text:
            base = text[: len(text) - len(partial)]
            if base.endswith((".", "[")):
                base = base[:-1]
            return base, partial

        if rooted and segments and segments[0] == root:
            segments = segments[1:]
        return build_path(lexical_segments(segments), root if rooted else ""), partial

    # ── Base resolution ───────────────────────────────────────────

    def _resolve_base(
        self, base: str, root: str, context: CompletionContext
    ) -> tuple[Any, str, bool] | None:
        """Return ``(node, type, show_fields)`` or None when nothing applies."""
        if base in ("", root):
            node = context.current_node
            node_type = (
                context.expression_result_type
                or context.current_type
                or value_type(node)
            )
            return node, node_type, True

        target = base
        if not has_root(base, root) and "(" in base:
            target = f"{root}.{base}"

        resolution = self._navigator.resolve(context.current_node, target)
        if resolution.ok:
            return resolution.value, value_type(resolution.value), True
        if context.current_type:
            return None, context.current_type, False
        return None

    # ── Candidates ────────────────────────────────────────────────

    def _prefix_for(self, base: str, root: str, rooted: bool):
        """Return a function turning a new segment into full completion text.

        Simple bases are rebuilt from their segments so numeric steps come
        out in bracket notation; anything with calls or operators is kept
        verbatim and the segment is appended.
        """
        stripped = _strip_root(base, root)
        anchor = root if rooted or base == root else ""
        if classify(stripped, root) == PathKind.SIMPLE:
            try:
                prior = parse_path(stripped)
            except InvalidSyntax:
                prior = None
            if prior is not None:
                return lambda seg: build_path([*prior, seg], anchor)
        return lambda seg: build_path([seg], base)

    def _field_candidates(
        self, node: Any, base: str, partial: str, root: str, rooted: bool
    ) -> list[Completion]:
        settings = self.session.settings
        render = self._prefix_for(base, root, rooted)
        needle = partial.lower()
        out: list[Completion] = []

        mapping = as_mapping(node)
        if mapping is not None:
            for key in sorted(str(k) for k in mapping):
                if not key.lower().startswith(needle):
                    continue
                out.append(
                    Completion(
                        text=render(_key_segment(key)),
                        display=key,
                        kind=CompletionKind.FIELD,
                        detail=f"field: {key}",
                        score=settings.field_score,
                    )
                )
        elif is_sequence(node):
            for i in range(len(node)):
                if not str(i).startswith(needle):
                    continue
                out.append(
                    Completion(
                        text=render(Index(i)),
                        display=f"[{i}]",
                        kind=CompletionKind.INDEX,
                        detail=f"index: {i}",
                        score=settings.field_score,
                    )
                )
        return out

    def _function_candidates(
        self, node_type: str, base: str, partial: str, root: str, rooted: bool
    ) -> list[Completion]:
        settings = self.session.settings
        needle = partial.lower()
        score = min(
            settings.function_score + len(partial) * settings.prefix_weight,
            settings.field_score - 1,
        )

        seen: set[str] = set()
        out: list[Completion] = []
        for fn in self.session.registry.get_all():
            if not is_compatible(fn.name, node_type):
                continue
            if not fn.name.lower().startswith(needle):
                continue
            normalized = normalize_function_name(fn.name)
            if normalized in seen:
                continue
            seen.add(normalized)

            text = f"{base}.{fn.name}" if base else fn.name
            out.append(
                Completion(
                    text=text,
                    display=f"{fn.name}()",
                    kind=CompletionKind.FUNCTION,
                    detail=_function_detail(fn, settings.max_examples),
                    description=fn.description,
                    score=score,
                    function=fn,
                )
            )
        return out


def _function_detail(fn: FunctionMetadata, max_examples: int) -> str:
    detail = fn.description
    examples = fn.examples[:max_examples]
    if examples:
        detail = f"{detail} e.g. {' | '.join(examples)}".strip()
    return detail


def filter_completions(
    text: str, context: CompletionContext | None = None
) -> list[Completion]:
    """Complete *text* using the default session."""
    return CompletionEngine().filter_completions(text, context)

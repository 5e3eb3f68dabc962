"""Deduplicated, categorized index of expression-language functions.

The registry is built once from the active engine's catalog and may be
supplemented at runtime from configured suggestion strings. All
mutation happens under a lock; readers get copies of the internal lists.
"""

from __future__ import annotations

import threading
from typing import Iterable

from kvnav.expressions import ExpressionEngine
from kvnav.models import FunctionExample, FunctionMetadata
from kvnav import nav_logger

CATEGORY_ORDER: tuple[str, ...] = (
    "conversion",
    "string",
    "list",
    "map",
    "math",
    "encoding",
    "datetime",
    "regex",
    "general",
)

KNOWN_METHODS: frozenset[str] = frozenset({
    "all", "contains", "endsWith", "exists", "exists_one", "filter",
    "flatten", "keys", "lowerAscii", "map", "matches", "size", "slice",
    "sort", "startsWith", "upperAscii", "values",
})


# ── Inference helpers ─────────────────────────────────────────────


def _contains_any(text: str, needles: Iterable[str]) -> bool:
    return any(n in text for n in needles)


def categorize_function(name: str, description: str) -> str:
    """Guess a category from a function's name and description."""
    name_l = name.lower()
    desc_l = description.lower()

    if "string" in desc_l or _contains_any(
        name_l, ("string", "upper", "lower", "trim", "split", "join")
    ):
        return "string"
    if "array" in desc_l or "list" in desc_l or _contains_any(
        name_l, ("filter", "map", "all", "exists", "flatten", "slice")
    ):
        return "list"
    if "math" in desc_l or _contains_any(
        name_l, ("abs", "ceil", "floor", "round", "sqrt", "min", "max")
    ):
        return "math"
    if _contains_any(name_l, ("regex", "matches")):
        return "regex"
    if _contains_any(name_l, ("base64", "encode", "decode")):
        return "encoding"
    if _contains_any(name_l, ("keys", "values", "has")):
        return "map"
    return "general"


def infer_return_type(description: str) -> str:
    desc_l = description.lower()
    if "bool" in desc_l or "check" in desc_l:
        return "bool"
    if "string" in desc_l:
        return "string"
    if "array" in desc_l or "list" in desc_l:
        return "list"
    if "map" in desc_l:
        return "map"
    if "number" in desc_l or "int" in desc_l:
        return "int"
    return "any"


def _better(candidate: FunctionMetadata, existing: FunctionMetadata) -> bool:
    if len(candidate.examples) != len(existing.examples):
        return len(candidate.examples) > len(existing.examples)
    return len(candidate.description) > len(existing.description)


# ── Registry ──────────────────────────────────────────────────────


class FunctionRegistry:
    """Function metadata keyed by unique name, indexed by category."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._functions: dict[str, FunctionMetadata] = {}
        self._by_category: dict[str, list[str]] = {}

    # -- Loading ---------------------------------------------------------

    def load(self, functions: Iterable[FunctionMetadata]) -> None:
        """Replace the registry contents, deduplicating by name."""
        chosen: dict[str, FunctionMetadata] = {}
        for fn in functions:
            existing = chosen.get(fn.name)
            if existing is None or _better(fn, existing):
                chosen[fn.name] = fn

        by_category: dict[str, list[str]] = {}
        for name, fn in chosen.items():
            by_category.setdefault(fn.category or "general", []).append(name)
        for names in by_category.values():
            names.sort()

        with self._lock:
            self._functions = chosen
            self._by_category = by_category

    def load_from_engine(self, engine: ExpressionEngine) -> None:
        self.load(engine.list_functions() + engine.list_macros())
        nav_logger.log_registry_load(
            engine.name, self.size(), len(self.get_categories())
        )

    def supplement(self, suggestions: Iterable[str]) -> None:
        """Merge ``"name(args) - description"`` strings into the registry.

        Entries whose name already has a non-empty description are left
        alone. Category, method flag and return type are inferred.
        """
        added = skipped = 0
        with self._lock:
            for raw in suggestions:
                text = raw.strip()
                if not text:
                    continue
                signature, _, description = text.partition(" - ")
                signature = signature.strip()
                description = description.strip()

                name = signature
                paren = signature.find("(")
                if paren > 0:
                    name = signature[:paren].strip()
                if not name:
                    continue

                existing = self._functions.get(name)
                if existing is not None and existing.description:
                    skipped += 1
                    continue

                self._add(
                    FunctionMetadata(
                        name=name,
                        signature=signature,
                        description=description,
                        category=categorize_function(name, description),
                        is_method=name in KNOWN_METHODS,
                        return_type=infer_return_type(description),
                    )
                )
                added += 1
        nav_logger.log_registry_supplement(added, skipped)

    def apply_examples(self, overrides: dict[str, FunctionExample]) -> None:
        """Attach configured examples and descriptions to known functions."""
        with self._lock:
            for name, override in overrides.items():
                fn = self._functions.get(name)
                if fn is None:
                    continue
                update: dict[str, object] = {}
                if override.examples:
                    update["examples"] = list(override.examples)
                if override.description:
                    update["description"] = override.description
                self._functions[name] = fn.model_copy(update=update)

    def _add(self, fn: FunctionMetadata) -> None:
        old = self._functions.get(fn.name)
        if old is not None:
            old_names = self._by_category.get(old.category or "general", [])
            if fn.name in old_names:
                old_names.remove(fn.name)
        self._functions[fn.name] = fn
        names = self._by_category.setdefault(fn.category or "general", [])
        if fn.name not in names:
            names.append(fn.name)
            names.sort()

    # -- Queries ---------------------------------------------------------

    def get_function(self, name: str) -> FunctionMetadata | None:
        with self._lock:
            return self._functions.get(name)

    def get_all(self) -> list[FunctionMetadata]:
        """All functions, alphabetical by name."""
        with self._lock:
            return [self._functions[n] for n in sorted(self._functions)]

    def get_by_category(self, category: str) -> list[FunctionMetadata]:
        with self._lock:
            return [self._functions[n] for n in self._by_category.get(category, [])]

    def get_categories(self) -> list[str]:
        """Non-empty categories, preferred order first then first-seen."""
        with self._lock:
            present = [c for c, names in self._by_category.items() if names]
        ordered = [c for c in CATEGORY_ORDER if c in present]
        ordered.extend(c for c in present if c not in CATEGORY_ORDER)
        return ordered

    def category_count(self, category: str) -> int:
        with self._lock:
            return len(self._by_category.get(category, []))

    def search(self, query: str) -> list[FunctionMetadata]:
        if not query:
            return self.get_all()
        needle = query.lower()
        return [
            fn
            for fn in self.get_all()
            if needle in fn.name.lower() or needle in fn.description.lower()
        ]

    def get_methods(self) -> list[FunctionMetadata]:
        return [fn for fn in self.get_all() if fn.is_method]

    def get_globals(self) -> list[FunctionMetadata]:
        return [fn for fn in self.get_all() if not fn.is_method]

    def size(self) -> int:
        with self._lock:
            return len(self._functions)

    def __len__(self) -> int:
        return self.size()

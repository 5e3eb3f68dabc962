"""Shared configuration: active expression engine, registry and settings.

A Session is the single point where the engine is swapped at runtime.
Navigators and completion engines hold a session and read
``session.engine`` on every call, so a swap is observed by all of them
on their next call. A default session is created lazily on first use.
"""

from __future__ import annotations

import threading

from kvnav import nav_logger
from kvnav.expressions import ExpressionEngine, create_engine
from kvnav.models import Settings
from kvnav.registry import FunctionRegistry


class Session:
    def __init__(
        self,
        settings: Settings | None = None,
        engine: ExpressionEngine | None = None,
    ) -> None:
        self.settings = settings or Settings()
        self.registry = FunctionRegistry()
        self._lock = threading.Lock()
        self._engine = engine or create_engine(
            self.settings.engine, root_marker=self.settings.root_marker
        )
        self._rebuild_registry()

    @property
    def engine(self) -> ExpressionEngine:
        with self._lock:
            return self._engine

    @property
    def root_marker(self) -> str:
        return self.settings.root_marker

    def set_engine(self, engine: ExpressionEngine) -> None:
        """Swap the active engine and rebuild the registry from its catalog."""
        with self._lock:
            old = self._engine
            self._engine = engine
        nav_logger.log_engine_swap(old.name, engine.name)
        self._rebuild_registry()

    def _rebuild_registry(self) -> None:
        self.registry.load_from_engine(self.engine)
        if self.settings.function_examples:
            self.registry.apply_examples(self.settings.function_examples)
        if self.settings.function_suggestions:
            self.registry.supplement(self.settings.function_suggestions)


# ── Default session ───────────────────────────────────────────────

_default: Session | None = None
_default_lock = threading.Lock()


def get_session() -> Session:
    """Return the process-wide default session, creating it on first use."""
    global _default
    with _default_lock:
        if _default is None:
            _default = Session()
        return _default


def set_session(session: Session | None) -> None:
    """Replace the default session (``None`` resets to lazy creation)."""
    global _default
    with _default_lock:
        _default = session


def configure(settings: Settings) -> Session:
    """Build a session from *settings* and make it the default."""
    session = Session(settings)
    set_session(session)
    return session

"""
Extension presence checks against ``pg_extension``.

The pgai extension registers itself as ``ai``; pgvector as ``vector``.
Successful probes are memoized per checker so repeated migrations and CLI
calls hit the catalog once. A probe that fails (database unreachable,
permissions) returns ``False`` and is retried on the next call.

Usage::

    from db.extensions import get_extension_checker

    if not get_extension_checker().pgai_available():
        raise ExtensionNotAvailableError("CREATE EXTENSION ai CASCADE; first")
"""

from __future__ import annotations

import logging
import threading

from sqlalchemy import text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)

PGAI_EXTENSION = "ai"
PGVECTOR_EXTENSION = "vector"

_EXTENSION_QUERY = text("SELECT 1 FROM pg_extension WHERE extname = :name")


class ExtensionChecker:
    """Memoizing probe for installed Postgres extensions.

    Thread-safe: a lock serializes probes so concurrent callers share one
    catalog query per extension.

    Args:
        engine: SQLAlchemy engine for the target database.
    """

    def __init__(self, engine: Engine) -> None:
        self._engine = engine
        self._cache: dict[str, bool] = {}
        self._lock = threading.Lock()

    def is_installed(self, extension: str) -> bool:
        """Return True if *extension* appears in ``pg_extension``."""
        with self._lock:
            if extension in self._cache:
                logger.debug("Extension %s cached: %s", extension, self._cache[extension])
                return self._cache[extension]
            try:
                with self._engine.connect() as conn:
                    found = conn.execute(_EXTENSION_QUERY, {"name": extension}).first() is not None
            except SQLAlchemyError as exc:
                logger.debug("%s extension check failed: %s", extension, exc)
                return False
            self._cache[extension] = found
            return found

    def pgai_available(self) -> bool:
        return self.is_installed(PGAI_EXTENSION)

    def pgvector_available(self) -> bool:
        return self.is_installed(PGVECTOR_EXTENSION)

    def reset_cache(self) -> None:
        """Forget memoized results (e.g. after ``CREATE EXTENSION``)."""
        with self._lock:
            self._cache.clear()


_checker: ExtensionChecker | None = None
_checker_lock = threading.Lock()


def get_extension_checker() -> ExtensionChecker:
    """
    Return the process-wide checker bound to ``db.session.engine``.

    The engine module is imported lazily so pure callers never need a
    database URL.
    """
    global _checker  # noqa: PLW0603
    with _checker_lock:
        if _checker is None:
            from db.session import engine

            _checker = ExtensionChecker(engine)
        return _checker


def reset_extension_cache() -> None:
    """Invalidate the process-wide checker's memoized results."""
    if _checker is not None:
        _checker.reset_cache()

"""
Migration helpers for creating and dropping pgai vectorizers.

Wraps a SQLAlchemy ``Connection`` (usually from ``engine.begin()``) and
executes statements rendered by ``core.vectorizer``::

    with engine.begin() as conn:
        migration = VectorizerMigration(conn)
        with migration.create_vectorizer("posts") as v:
            v.loading_column("content")
            v.embedding("ollama", model="nomic-embed-text", dimensions=768)

The ``create_vectorizer`` block is only executed if it exits normally; an
exception inside the block propagates and nothing is sent to the database.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from sqlalchemy import text
from sqlalchemy.engine import Connection

from core.config import DEFAULT_PGAI_CONFIG, PgaiConfig
from core.errors import ExtensionNotAvailableError
from core.vectorizer import VectorizerBuilder, drop_vectorizer_sql
from db.extensions import ExtensionChecker

logger = logging.getLogger(__name__)

_EXISTS_QUERY = text("SELECT 1 FROM ai.vectorizer WHERE name = :name")


class VectorizerMigration:
    """
    Executes vectorizer statements on a connection.

    Args:
        connection: Open SQLAlchemy connection. Transaction handling is the
            caller's concern.
        config: Defaults passed to every builder created here.
        checker: Optional extension checker; enables ``require_extension``.
    """

    def __init__(
        self,
        connection: Connection,
        *,
        config: PgaiConfig = DEFAULT_PGAI_CONFIG,
        checker: ExtensionChecker | None = None,
    ) -> None:
        self._conn = connection
        self._config = config
        self._checker = checker

    def execute(self, sql: str) -> Any:
        """Run a fully rendered statement.

        Goes through ``exec_driver_sql`` with ``no_parameters`` so colons and
        percent signs inside templates reach Postgres untouched.
        """
        logger.info("Executing: %s", sql)
        return self._conn.exec_driver_sql(sql, execution_options={"no_parameters": True})

    @contextmanager
    def create_vectorizer(
        self, table_name: str, *, name: str | None = None
    ) -> Iterator[VectorizerBuilder]:
        """Yield a fresh builder and execute its statement when the block ends."""
        builder = VectorizerBuilder(table_name, name, config=self._config)
        yield builder
        self.execute(builder.to_sql())

    def drop_vectorizer(self, name: str) -> Any:
        return self.execute(drop_vectorizer_sql(name))

    def vectorizer_exists(self, name: str) -> bool:
        """True if a vectorizer called *name* is registered in ``ai.vectorizer``."""
        return self._conn.execute(_EXISTS_QUERY, {"name": name}).first() is not None

    def require_extension(self) -> None:
        """
        Raise unless the pgai extension is installed.

        A migration without a checker skips the probe.

        Raises:
            ExtensionNotAvailableError: If the checker reports pgai missing.
        """
        if self._checker is None:
            return
        if not self._checker.pgai_available():
            raise ExtensionNotAvailableError(
                "The pgai extension is not installed. Run: CREATE EXTENSION IF NOT EXISTS ai CASCADE;"
            )

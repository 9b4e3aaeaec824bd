"""
Shared fixtures for the test suite.

Centralizes the fake SQLAlchemy engine/connection plumbing so the extension
and migration tests don't need a running Postgres.
"""

from unittest.mock import MagicMock

import pytest

from core.providers import ProviderRegistry, get_registry

# ---------------------------------------------------------------------------
# Fake engine
# ---------------------------------------------------------------------------


def make_mock_engine(installed: set[str] | None = None) -> MagicMock:
    """
    Build a MagicMock engine whose ``connect()`` context manager yields a
    connection answering ``pg_extension`` probes.

    ``installed`` lists extension names the fake catalog reports as present.
    """
    installed = installed or set()
    conn = MagicMock()

    def _execute(_statement, params):
        result = MagicMock()
        result.first.return_value = (1,) if params["name"] in installed else None
        return result

    conn.execute.side_effect = _execute
    engine = MagicMock()
    engine.connect.return_value.__enter__.return_value = conn
    engine.connect.return_value.__exit__.return_value = False
    return engine


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def make_engine():
    """Factory fixture: ``make_engine({"ai"})`` -> fake engine with pgai installed."""
    return make_mock_engine


@pytest.fixture()
def registry() -> ProviderRegistry:
    return get_registry()


@pytest.fixture()
def mock_connection() -> MagicMock:
    """Connection double for ``VectorizerMigration``; no vectorizers exist."""
    conn = MagicMock()
    conn.execute.return_value.first.return_value = None
    return conn


@pytest.fixture()
def clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path):
    """Run inside an empty directory with no pgai variables set."""
    for var in (
        "PGAI_CONFIG",
        "OLLAMA_BASE_URL",
        "PGAI_DEFAULT_PROVIDER",
        "PGAI_DEFAULT_MODEL",
        "PGAI_DEFAULT_DIMENSIONS",
    ):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path

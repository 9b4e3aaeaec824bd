"""
Configuration loader.

Builds a ``PgaiConfig`` from, in increasing precedence:

1. built-in defaults,
2. a YAML file (``pgai.yml`` in the working directory, or an explicit path),
3. environment variables, optionally populated from a ``.env`` file.

Environment variables
---------------------
``PGAI_CONFIG``
    Path of the YAML file when none is passed explicitly.
``OLLAMA_BASE_URL``
    Base URL for self-hosted Ollama embeddings.
``PGAI_DEFAULT_PROVIDER`` / ``PGAI_DEFAULT_MODEL`` / ``PGAI_DEFAULT_DIMENSIONS``
    Generator defaults.
"""

import logging
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from dotenv import find_dotenv, load_dotenv

from core.config import PgaiConfig
from core.errors import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = "pgai.yml"

_ENV_OVERRIDES: dict[str, str] = {
    "OLLAMA_BASE_URL": "ollama_base_url",
    "PGAI_DEFAULT_PROVIDER": "default_provider",
    "PGAI_DEFAULT_MODEL": "default_model",
    "PGAI_DEFAULT_DIMENSIONS": "default_dimensions",
}


def read_config_file(path: Path) -> dict[str, Any]:
    """Parse a YAML config file into a dict (empty file -> empty dict)."""
    logger.info("Loading config from: %s", path)
    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"{path} must contain a mapping, got {type(data).__name__}")
    return data


def env_overrides(environ: Mapping[str, str]) -> dict[str, Any]:
    """Extract config values from environment variables."""
    values: dict[str, Any] = {}
    for var, key in _ENV_OVERRIDES.items():
        raw = environ.get(var)
        if not raw:
            continue
        if key == "default_dimensions":
            try:
                values[key] = int(raw)
            except ValueError as exc:
                raise ConfigurationError(f"{var} must be an integer, got {raw!r}") from exc
        else:
            values[key] = raw
    return values


def load_config(
    path: Path | str | None = None,
    environ: Mapping[str, str] | None = None,
    *,
    dotenv: bool = True,
) -> PgaiConfig:
    """
    Load configuration from YAML and the environment.

    Args:
        path: Explicit YAML file. Must exist when given.
        environ: Environment mapping (defaults to ``os.environ``).
        dotenv: Load ``.env`` into the process environment first.

    Raises:
        FileNotFoundError: If *path* (or ``PGAI_CONFIG``) does not exist.
        ConfigurationError: On malformed values.
    """
    if dotenv:
        load_dotenv(find_dotenv(usecwd=True))
    environ = os.environ if environ is None else environ

    explicit = path or environ.get("PGAI_CONFIG")
    data: dict[str, Any] = {}
    if explicit:
        config_path = Path(explicit)
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")
        data = read_config_file(config_path)
    elif Path(DEFAULT_CONFIG_FILE).exists():
        data = read_config_file(Path(DEFAULT_CONFIG_FILE))

    data.update(env_overrides(environ))
    try:
        return PgaiConfig.from_mapping(data)
    except ValueError as exc:
        raise ConfigurationError(str(exc)) from exc

"""
Configuration dataclasses for vectorizer provisioning.

These immutable config objects are passed explicitly into the statement
builder and the generators instead of living in process-wide mutable state,
so tests can build distinct configurations without leaking between cases.
Loading from ``.env`` / YAML / the environment lives in ``tasks.settings``;
this module stays pure.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any

from core.providers import get_registry

# Chunking strategies understood by pgai, in the order they are listed to users.
CHUNKING_METHODS: tuple[str, ...] = ("character", "recursive")

DEFAULT_OLLAMA_BASE_URL = "http://localhost:11434"


def _freeze(options: Mapping[str, Mapping[str, Any]] | None) -> Mapping[str, Mapping[str, Any]]:
    if options is None:
        options = {}
    if not isinstance(options, Mapping):
        raise ValueError(f"provider_configs must be a mapping, got {type(options).__name__}")
    frozen = {}
    for key, bag in options.items():
        if bag is None:
            bag = {}
        if not isinstance(bag, Mapping):
            raise ValueError(
                f"provider_configs[{str(key)!r}] must be a mapping, got {type(bag).__name__}"
            )
        frozen[str(key)] = MappingProxyType(dict(bag))
    return MappingProxyType(frozen)


@dataclass(frozen=True)
class PgaiConfig:
    """
    Process-wide defaults consulted when building vectorizers.

    Attributes:
        ollama_base_url: Base URL emitted for self-hosted Ollama embeddings
            when the caller does not pass one. ``None`` omits the parameter.
        default_provider: Provider used by generators when none is given.
        default_model: Model used by generators when none is given.
        default_dimensions: Last-resort vector size when neither the caller
            nor the registry can supply one.
        auto_vectorize: Whether generated models expect automatic vectorization.
        fallback_on_error: Whether callers should degrade gracefully when the
            extension is unavailable.
        provider_configs: Per-provider option bags keyed by provider token.

    Example:
        >>> config = PgaiConfig(ollama_base_url="http://ollama:11434")
        >>> config = config.with_provider("openai", api_key_name="OPENAI_API_KEY")
    """

    ollama_base_url: str | None = DEFAULT_OLLAMA_BASE_URL
    default_provider: str = "ollama"
    default_model: str = "nomic-embed-text"
    default_dimensions: int = 768
    auto_vectorize: bool = True
    fallback_on_error: bool = True
    provider_configs: Mapping[str, Mapping[str, Any]] = field(
        default_factory=lambda: MappingProxyType({})
    )

    def __post_init__(self) -> None:
        """Validate configuration parameters."""
        if isinstance(self.default_dimensions, bool) or not isinstance(
            self.default_dimensions, int
        ):
            raise ValueError(
                f"default_dimensions must be an integer, got {self.default_dimensions!r}"
            )
        if self.default_dimensions <= 0:
            raise ValueError(
                f"default_dimensions must be positive, got {self.default_dimensions}"
            )
        registry = get_registry()
        if not registry.is_supported(self.default_provider):
            raise ValueError(
                f"Unknown default_provider {self.default_provider!r}, "
                f"valid options: {list(registry.provider_names())}"
            )
        # Normalize enum members and freeze nested option bags.
        provider = getattr(self.default_provider, "value", self.default_provider)
        object.__setattr__(self, "default_provider", str(provider))
        object.__setattr__(self, "provider_configs", _freeze(self.provider_configs))
        if not self.ollama_base_url:
            # an empty URL means "no default"; the parameter is omitted
            object.__setattr__(self, "ollama_base_url", None)

    def provider_config(self, provider: object) -> Mapping[str, Any]:
        """Return the option bag configured for *provider* (empty if none)."""
        key = str(getattr(provider, "value", provider))
        return self.provider_configs.get(key, MappingProxyType({}))

    def with_provider(self, provider: object, **options: Any) -> "PgaiConfig":
        """Return a copy with *options* registered for *provider*."""
        key = str(getattr(provider, "value", provider))
        merged = {k: dict(v) for k, v in self.provider_configs.items()}
        merged[key] = options
        return replace(self, provider_configs=merged)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "PgaiConfig":
        """
        Build a config from a plain mapping (e.g. a parsed ``pgai.yml``).

        Unknown keys are rejected so typos surface instead of being ignored.
        """
        known = set(cls.__dataclass_fields__)
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f"Unknown configuration keys: {unknown}")
        return cls(**dict(data))


@dataclass(frozen=True)
class ChunkingConfig:
    """
    Chunking parameters for a generated vectorizer.

    Attributes:
        method: ``character`` or ``recursive``.
        size: Maximum characters per chunk. Defaults to 512.
        overlap: Characters shared between consecutive chunks. Defaults to 50.
    """

    method: str = "character"
    size: int = 512
    overlap: int = 50

    def __post_init__(self) -> None:
        """Validate configuration parameters."""
        if self.size <= 0:
            raise ValueError(f"size must be positive, got {self.size}")
        if self.overlap < 0:
            raise ValueError(f"overlap must be non-negative, got {self.overlap}")
        if self.overlap >= self.size:
            raise ValueError(f"overlap ({self.overlap}) must be less than size ({self.size})")
        if self.method not in CHUNKING_METHODS:
            raise ValueError(
                f"Unknown chunking method {self.method!r}, valid options: {list(CHUNKING_METHODS)}"
            )


DEFAULT_PGAI_CONFIG = PgaiConfig()
"""Defaults: local Ollama with nomic-embed-text at 768 dimensions."""

DEFAULT_CHUNKING = ChunkingConfig()
"""Default chunking: character splitter, 512 size, 50 overlap."""

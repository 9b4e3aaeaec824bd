"""
Validated options shared by the migration and model generators.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field

from core.config import CHUNKING_METHODS, ChunkingConfig, PgaiConfig
from core.errors import ConfigurationError
from core.providers import get_registry

# Keyword options of VectorizerBuilder.embedding a provider_configs bag may set.
EMBEDDING_OPTION_KEYS = ("api_key_name", "base_url", "model_parameters", "keep_alive", "input_type")


@dataclass(frozen=True)
class GeneratorOptions:
    """
    What the generated vectorizer migration will configure.

    Validation happens at construction so a bad provider or chunking method
    is reported before any file is written.

    Attributes:
        provider: Embedding provider token.
        model: Embedding model name.
        dimensions: Vector size; ``None`` auto-detects from the registry.
        content_column: Column whose text is embedded.
        chunking_method: ``character`` or ``recursive``.
        chunk_size: Characters per chunk.
        chunk_overlap: Characters shared between chunks.
        embedding_options: Extra ``embedding()`` keywords written into the
            migration, usually the provider's ``provider_configs`` bag.
    """

    provider: str = "ollama"
    model: str = "nomic-embed-text"
    dimensions: int | None = None
    content_column: str = "content"
    chunking_method: str = "character"
    chunk_size: int = 512
    chunk_overlap: int = 50
    embedding_options: Mapping[str, str] = field(default_factory=dict)
    chunking: ChunkingConfig = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        registry = get_registry()
        if not registry.is_supported(self.provider):
            raise ConfigurationError(
                f"Unsupported provider: {self.provider}. "
                f"Supported providers: {', '.join(registry.provider_names())}"
            )
        object.__setattr__(self, "provider", registry.lookup(self.provider).name)
        unknown = sorted(set(self.embedding_options) - set(EMBEDDING_OPTION_KEYS))
        if unknown:
            raise ConfigurationError(
                f"Unknown options for {self.provider}: {', '.join(unknown)}. "
                f"Supported options: {', '.join(EMBEDDING_OPTION_KEYS)}"
            )
        if self.chunking_method not in CHUNKING_METHODS:
            raise ConfigurationError(
                f"Invalid chunking method: {self.chunking_method}. "
                f"Supported methods: {', '.join(CHUNKING_METHODS)}"
            )
        if self.dimensions is not None and self.dimensions <= 0:
            raise ConfigurationError(f"dimensions must be positive, got {self.dimensions}")
        try:
            chunking = ChunkingConfig(
                method=self.chunking_method, size=self.chunk_size, overlap=self.chunk_overlap
            )
        except ValueError as exc:
            raise ConfigurationError(str(exc)) from exc
        object.__setattr__(self, "chunking", chunking)

    @classmethod
    def from_config(cls, config: PgaiConfig, **overrides: object) -> "GeneratorOptions":
        """
        Options seeded from *config* defaults; ``None`` overrides are ignored.

        The chosen provider's ``provider_configs`` bag becomes
        ``embedding_options`` unless one is passed explicitly.
        """
        values: dict[str, object] = {
            "provider": config.default_provider,
            "model": config.default_model,
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        values.setdefault("embedding_options", dict(config.provider_config(values["provider"])))
        return cls(**values)  # type: ignore[arg-type]

    @property
    def resolved_dimensions(self) -> int:
        """Explicit dimensions, else the registry's size for the model."""
        if self.dimensions is not None:
            return self.dimensions
        # provider validated in __post_init__, so the lookup cannot miss
        return get_registry().model_dimensions(self.provider, self.model)  # type: ignore[return-value]

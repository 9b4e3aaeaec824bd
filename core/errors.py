"""
Error taxonomy for vectorizer configuration and provisioning.

Builder errors are input-validation errors meant for the developer writing a
migration. They are raised synchronously at the offending call (or at render
time for missing required clauses) and are never retried.
"""

from collections.abc import Iterable


class PgaiError(Exception):
    """Base class for all errors raised by this package."""


class ConfigurationError(PgaiError, ValueError):
    """Invalid configuration or generator options."""


class ExtensionNotAvailableError(PgaiError):
    """The pgai extension is not installed in the target database."""


class VectorizerError(PgaiError):
    """A vectorizer statement could not be built."""


class UnsupportedProviderError(VectorizerError, ValueError):
    """Raised when an embedding call names a provider absent from the registry.

    Args:
        provider: The offending provider token, as passed by the caller.
        supported: Every supported provider name, in registry order.
    """

    def __init__(self, provider: object, supported: Iterable[str]) -> None:
        self.provider = provider
        self.supported = tuple(supported)
        super().__init__(
            f"Unsupported provider: {_token(provider)}. "
            f"Supported providers: {', '.join(self.supported)}"
        )


class UnsupportedChunkingError(VectorizerError, ValueError):
    """Raised for a chunking strategy other than ``character`` or ``recursive``."""

    def __init__(self, strategy: object, supported: Iterable[str]) -> None:
        self.strategy = strategy
        self.supported = tuple(supported)
        super().__init__(
            f"Unsupported chunking type: {_token(strategy)}. "
            f"Supported types: {', '.join(self.supported)}"
        )


class MissingLoadingColumnError(VectorizerError):
    def __init__(self) -> None:
        super().__init__("Loading column is required")


class MissingEmbeddingConfigurationError(VectorizerError):
    def __init__(self) -> None:
        super().__init__("Embedding configuration is required")


def _token(value: object) -> str:
    # str-valued enum members render as their value, not "Enum.MEMBER"
    return str(getattr(value, "value", value))

"""
Vectorizer statement builder.

Compiles a sequence of configuration calls into a single
``SELECT ai.create_vectorizer(...)`` statement for the pgai extension::

    sql = (
        VectorizerBuilder("posts")
        .loading_column("content")
        .embedding("ollama", model="nomic-embed-text", dimensions=768)
        .chunking("character", size=512, overlap=50)
        .to_sql()
    )

Each configuration call renders its clause fragment immediately and replaces
any earlier fragment for the same clause. Clauses are emitted in the fixed
order of ``Clause`` regardless of the order they were configured in.

String literals are wrapped in single quotes with embedded quotes doubled.
Table names, column names and templates are otherwise emitted verbatim and
must come from trusted migration code.

Pure module: no I/O. Execution lives in ``db.vectorizer``.
"""

from __future__ import annotations

from enum import Enum

from core.config import CHUNKING_METHODS, DEFAULT_PGAI_CONFIG, PgaiConfig
from core.errors import (
    MissingEmbeddingConfigurationError,
    MissingLoadingColumnError,
    UnsupportedChunkingError,
    UnsupportedProviderError,
    VectorizerError,
)
from core.providers import (
    DirectDispatch,
    IndirectDispatch,
    ProviderDescriptor,
    ProviderRegistry,
    get_registry,
)

CHUNKING_FUNCTIONS: dict[str, str] = {
    "character": "ai.chunking_character_text_splitter",
    "recursive": "ai.chunking_recursive_character_text_splitter",
}


class Clause(str, Enum):
    """Statement clauses, declared in output order."""

    LOADING = "loading"
    EMBEDDING = "embedding"
    CHUNKING = "chunking"
    FORMATTING = "formatting"


def quote_literal(value: object) -> str:
    """Render *value* as a single-quoted SQL string literal."""
    return "'" + str(value).replace("'", "''") + "'"


def _integer(label: str, value: object, *, minimum: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{label} must be an integer, got {value!r}")
    if value < minimum:
        qualifier = "positive" if minimum > 0 else "non-negative"
        raise ValueError(f"{label} must be {qualifier}, got {value}")
    return value


def _call(function: str, args: list[str]) -> str:
    return f"{function}({', '.join(args)})"


def _named(name: str, value: object | None) -> list[str]:
    """``name => 'value'`` if *value* was provided, else nothing."""
    if value is None:
        return []
    return [f"{name} => {quote_literal(value)}"]


def qualify_model(prefix: str | None, model: str) -> str:
    """
    Prefix *model* with the LiteLLM namespace, at most once.

    ``qualify_model("cohere", "embed-english-v3.0")`` and
    ``qualify_model("cohere", "cohere/embed-english-v3.0")`` both return
    ``"cohere/embed-english-v3.0"``.
    """
    if not prefix or model.startswith(f"{prefix}/"):
        return model
    return f"{prefix}/{model}"


def drop_vectorizer_sql(name: str) -> str:
    """Return the statement that drops the vectorizer called *name*."""
    if not name:
        raise ValueError("Vectorizer name is required")
    return f"SELECT ai.drop_vectorizer({quote_literal(name)});"


def default_vectorizer_name(table_name: str) -> str:
    return f"{table_name}_vectorizer"


class VectorizerBuilder:
    """
    Accumulates clause fragments for one ``ai.create_vectorizer`` call.

    Not thread-safe: each statement owns its own builder for the duration of
    construct -> configure -> render. After a successful ``to_sql()`` the
    builder is frozen; rendering again returns the same string.

    Args:
        table_name: Table to vectorize.
        name: Vectorizer name. Defaults to ``"<table_name>_vectorizer"``.
        config: Defaults for the Ollama base URL and the dimension fallback.
        registry: Provider registry (defaults to the process-wide one).
    """

    def __init__(
        self,
        table_name: str,
        name: str | None = None,
        *,
        config: PgaiConfig = DEFAULT_PGAI_CONFIG,
        registry: ProviderRegistry | None = None,
    ) -> None:
        self.table_name = table_name
        self.name = name or default_vectorizer_name(table_name)
        self._config = config
        self._registry = registry if registry is not None else get_registry()
        self._clauses: dict[Clause, str] = {}
        self._rendered: str | None = None

    @property
    def config(self) -> PgaiConfig:
        return self._config

    def fragment(self, clause: Clause | str) -> str | None:
        """Return the rendered fragment for *clause*, or None if unset."""
        return self._clauses.get(Clause(clause))

    def _set(self, clause: Clause, fragment: str) -> VectorizerBuilder:
        if self._rendered is not None:
            raise VectorizerError(f"Vectorizer {self.name!r} has already been rendered")
        self._clauses[clause] = fragment
        return self

    # ------------------------------------------------------------------
    # Configuration calls
    # ------------------------------------------------------------------

    def loading_column(self, column: str) -> VectorizerBuilder:
        """Load the text to embed from *column* of the source table."""
        return self._set(Clause.LOADING, _call("ai.loading_column", [quote_literal(column)]))

    def embedding(
        self,
        provider: object,
        model: str,
        dimensions: int | None = None,
        *,
        base_url: str | None = None,
        api_key_name: str | None = None,
        model_parameters: str | None = None,
        keep_alive: str | None = None,
        input_type: str | None = None,
    ) -> VectorizerBuilder:
        """
        Configure the embedding clause.

        Args:
            provider: Provider token (``ProviderName`` member or string).
            model: Model name. For namespaced LiteLLM providers the prefix is
                added automatically unless already present.
            dimensions: Vector size. Defaults to the registry's size for the
                model, then the provider default.
            base_url: Ollama server URL (self-hosted providers only). Falls
                back to ``config.ollama_base_url``.
            api_key_name: Name of the pgai secret holding the API key.
            model_parameters: Raw Ollama model options string, passed through.
            keep_alive: Raw Ollama keep-alive duration, passed through.
            input_type: LiteLLM provider-specific input type (Cohere).

        Raises:
            UnsupportedProviderError: If *provider* is not in the registry.
            ValueError: If *dimensions* is not a positive integer.
        """
        descriptor = self._registry.lookup(provider)
        if descriptor is None:
            raise UnsupportedProviderError(provider, self._registry.provider_names())

        if dimensions is None:
            dimensions = self._registry.model_dimensions(descriptor.name, model)
        if dimensions is None:
            dimensions = self._config.default_dimensions
        dimensions = _integer("dimensions", dimensions, minimum=1)

        dispatch = descriptor.dispatch
        if isinstance(dispatch, DirectDispatch):
            if descriptor.self_hosted:
                fragment = self._self_hosted_embedding(
                    descriptor, model, dimensions, base_url, model_parameters, keep_alive
                )
            else:
                fragment = _call(
                    dispatch.function,
                    [quote_literal(model), str(dimensions)]
                    + _named("api_key_name", api_key_name),
                )
        elif isinstance(dispatch, IndirectDispatch):
            fragment = _call(
                dispatch.function,
                [quote_literal(qualify_model(dispatch.namespace_prefix, model)), str(dimensions)]
                + _named("api_key_name", api_key_name)
                + _named("input_type", input_type),
            )
        else:
            # Registry invariants make this unreachable.
            raise RuntimeError(
                f"Provider {descriptor.name!r} has unknown dispatch variant {dispatch!r}"
            )
        return self._set(Clause.EMBEDDING, fragment)

    def _self_hosted_embedding(
        self,
        descriptor: ProviderDescriptor,
        model: str,
        dimensions: int,
        base_url: str | None,
        model_parameters: str | None,
        keep_alive: str | None,
    ) -> str:
        return _call(
            descriptor.invocation_function,
            [quote_literal(model), str(dimensions)]
            + _named("base_url", base_url or self._config.ollama_base_url)
            + _named("model_parameters", model_parameters)
            + _named("keep_alive", keep_alive),
        )

    def chunking(self, strategy: object, size: int, overlap: int) -> VectorizerBuilder:
        """
        Configure text chunking.

        Raises:
            UnsupportedChunkingError: If *strategy* is not ``character`` or
                ``recursive``.
            ValueError: If *size* is not positive or *overlap* is negative.
        """
        key = getattr(strategy, "value", strategy)
        function = CHUNKING_FUNCTIONS.get(key) if isinstance(key, str) else None
        if function is None:
            raise UnsupportedChunkingError(strategy, CHUNKING_METHODS)
        size = _integer("size", size, minimum=1)
        overlap = _integer("overlap", overlap, minimum=0)
        return self._set(Clause.CHUNKING, _call(function, [str(size), str(overlap)]))

    def formatting(self, template: str) -> VectorizerBuilder:
        """Format each chunk with a Python ``string.Template`` (``$chunk``, ``$title``...)."""
        return self._set(
            Clause.FORMATTING, _call("ai.formatting_python_template", [quote_literal(template)])
        )

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def to_sql(self) -> str:
        """
        Render the complete ``ai.create_vectorizer`` statement.

        Raises:
            MissingLoadingColumnError: If ``loading_column`` was never called.
            MissingEmbeddingConfigurationError: If ``embedding`` was never called.
        """
        if self._rendered is not None:
            return self._rendered
        if Clause.LOADING not in self._clauses:
            raise MissingLoadingColumnError()
        if Clause.EMBEDDING not in self._clauses:
            raise MissingEmbeddingConfigurationError()

        args = [f"{quote_literal(self.table_name)}::regclass", f"name => {quote_literal(self.name)}"]
        args += [
            f"{clause.value} => {self._clauses[clause]}"
            for clause in Clause
            if clause in self._clauses
        ]
        self._rendered = f"SELECT {_call('ai.create_vectorizer', args)};"
        return self._rendered

"""
Embedding provider registry for pgai vectorizers.

Static, read-only metadata about every embedding backend the pgai extension
can call. The registry answers "which SQL function do I emit for this
provider, and with how many dimensions?". Nothing more.

Two dispatch variants exist:

    DirectDispatch    : the provider has its own pgai function
                        (``ai.embedding_openai``, ``ai.embedding_ollama``, ...).
    IndirectDispatch  : the provider is proxied through LiteLLM via the shared
                        ``ai.embedding_litellm`` function. The model string is
                        qualified with the provider's namespace prefix
                        (``embed-english-v3.0`` -> ``cohere/embed-english-v3.0``).
                        The generic ``litellm`` provider has no prefix: callers
                        pass the full LiteLLM model string themselves.

This module is pure: no I/O and no side effects. Query methods never raise;
unknown providers yield ``None`` or an empty result.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import ClassVar

LITELLM_FUNCTION = "ai.embedding_litellm"


class ProviderName(str, Enum):
    """Canonical provider tokens."""

    OLLAMA = "ollama"
    OPENAI = "openai"
    VOYAGEAI = "voyageai"
    LITELLM = "litellm"
    COHERE = "cohere"
    MISTRAL = "mistral"
    AZURE_OPENAI = "azure_openai"
    HUGGINGFACE = "huggingface"
    AWS_BEDROCK = "aws_bedrock"
    VERTEX_AI = "vertex_ai"
    GEMINI = "gemini"


class DispatchKind(str, Enum):
    DIRECT = "direct"
    INDIRECT = "indirect"


class Capability(str, Enum):
    """Optional parameters or behaviours a provider supports (descriptive only)."""

    CUSTOM_BASE_URL = "custom_base_url"
    BASE_URL = "base_url"
    MODEL_PARAMETERS = "model_parameters"
    KEEP_ALIVE = "keep_alive"
    API_KEY_NAME = "api_key_name"
    AUTO_DIMENSIONS = "auto_dimensions"
    AUTO_PREFIX = "auto_prefix"
    INPUT_TYPE = "input_type"
    PROVIDER_SPECIFIC_PARAMS = "provider_specific_params"
    AWS_CREDENTIALS = "aws_credentials"
    GCP_CREDENTIALS = "gcp_credentials"


@dataclass(frozen=True)
class DirectDispatch:
    """Provider with a dedicated pgai embedding function."""

    kind: ClassVar[DispatchKind] = DispatchKind.DIRECT

    function: str


@dataclass(frozen=True)
class IndirectDispatch:
    """Provider reached through ``ai.embedding_litellm``.

    ``namespace_prefix`` is ``None`` only for the generic LiteLLM provider.
    """

    kind: ClassVar[DispatchKind] = DispatchKind.INDIRECT
    function: ClassVar[str] = LITELLM_FUNCTION

    namespace_prefix: str | None = None


Dispatch = DirectDispatch | IndirectDispatch


@dataclass(frozen=True)
class ModelInfo:
    dimensions: int


@dataclass(frozen=True)
class ProviderDescriptor:
    """
    Immutable metadata for one embedding provider.

    Attributes:
        name: Canonical provider token.
        dispatch: Direct or indirect invocation variant.
        description: One-line human description.
        default_dimensions: Fallback vector size when the model is unknown.
        common_models: Known model names mapped to their ``ModelInfo``.
        capabilities: Optional parameters the provider understands.
        documentation_url: Upstream embedding documentation.
        requires_api_key: Whether an API key secret must be configured.
        self_hosted: True for providers the user runs themselves.
        api_key_env_var: Conventional environment variable for the key.
        credential_env_vars: Cloud credential variables (AWS / GCP).
        unique_features: Free-form highlights shown by ``pgai providers``.
    """

    name: str
    dispatch: Dispatch
    description: str
    default_dimensions: int
    common_models: Mapping[str, ModelInfo]
    capabilities: frozenset[Capability]
    documentation_url: str
    requires_api_key: bool
    self_hosted: bool = False
    api_key_env_var: str | None = None
    credential_env_vars: tuple[str, ...] = ()
    unique_features: tuple[str, ...] = field(default=())

    @property
    def dispatch_kind(self) -> DispatchKind:
        return self.dispatch.kind

    @property
    def invocation_function(self) -> str:
        return self.dispatch.function

    @property
    def namespace_prefix(self) -> str | None:
        if isinstance(self.dispatch, IndirectDispatch):
            return self.dispatch.namespace_prefix
        return None


def _model_table(entries: dict[str, int]) -> Mapping[str, ModelInfo]:
    return MappingProxyType({model: ModelInfo(dimensions=dims) for model, dims in entries.items()})


def _provider(
    name: ProviderName,
    dispatch: Dispatch,
    *,
    models: dict[str, int],
    capabilities: tuple[Capability, ...],
    **attrs: object,
) -> tuple[str, ProviderDescriptor]:
    descriptor = ProviderDescriptor(
        name=name.value,
        dispatch=dispatch,
        common_models=_model_table(models),
        capabilities=frozenset(capabilities),
        **attrs,  # type: ignore[arg-type]
    )
    return name.value, descriptor


_C = Capability

SUPPORTED_PROVIDERS: Mapping[str, ProviderDescriptor] = MappingProxyType(
    dict(
        [
            # Direct providers: native pgai functions
            _provider(
                ProviderName.OLLAMA,
                DirectDispatch("ai.embedding_ollama"),
                description="Local and hosted Ollama models",
                capabilities=(_C.CUSTOM_BASE_URL, _C.MODEL_PARAMETERS, _C.KEEP_ALIVE),
                default_dimensions=768,
                models={
                    "nomic-embed-text": 768,
                    "mxbai-embed-large": 1024,
                    "all-minilm": 384,
                },
                documentation_url="https://github.com/ollama/ollama",
                requires_api_key=False,
                self_hosted=True,
            ),
            _provider(
                ProviderName.OPENAI,
                DirectDispatch("ai.embedding_openai"),
                description="OpenAI embedding models",
                capabilities=(_C.API_KEY_NAME, _C.AUTO_DIMENSIONS),
                default_dimensions=1536,
                models={
                    "text-embedding-3-small": 1536,
                    "text-embedding-3-large": 3072,
                    "text-embedding-ada-002": 1536,
                },
                documentation_url="https://platform.openai.com/docs/guides/embeddings",
                requires_api_key=True,
                api_key_env_var="OPENAI_API_KEY",
            ),
            _provider(
                ProviderName.VOYAGEAI,
                DirectDispatch("ai.embedding_voyageai"),
                description="Voyage AI specialized embedding models",
                capabilities=(_C.API_KEY_NAME, _C.AUTO_DIMENSIONS),
                default_dimensions=1024,
                models={
                    "voyage-2": 1024,
                    "voyage-code-2": 1536,
                    "voyage-large-2": 1536,
                },
                documentation_url="https://docs.voyageai.com/",
                requires_api_key=True,
                api_key_env_var="VOYAGE_API_KEY",
            ),
            # Indirect providers: proxied through LiteLLM
            _provider(
                ProviderName.LITELLM,
                IndirectDispatch(),
                description="Direct LiteLLM integration with full model string",
                capabilities=(_C.API_KEY_NAME, _C.PROVIDER_SPECIFIC_PARAMS),
                default_dimensions=768,
                models={
                    "cohere/embed-english-v3.0": 1024,
                    "mistral/mistral-embed": 1024,
                    "azure/text-embedding-ada-002": 1536,
                },
                documentation_url="https://docs.litellm.ai/docs/embedding/supported_embedding",
                requires_api_key=True,
            ),
            _provider(
                ProviderName.COHERE,
                IndirectDispatch("cohere"),
                description="Cohere embedding models with search optimization",
                capabilities=(_C.API_KEY_NAME, _C.INPUT_TYPE, _C.AUTO_PREFIX),
                default_dimensions=1024,
                models={
                    "embed-english-v3.0": 1024,
                    "embed-multilingual-v3.0": 1024,
                    "embed-english-light-v3.0": 384,
                },
                documentation_url="https://docs.cohere.com/docs/embeddings",
                requires_api_key=True,
                api_key_env_var="COHERE_API_KEY",
                unique_features=(
                    "Input type optimization (search_document, search_query, classification)",
                ),
            ),
            _provider(
                ProviderName.MISTRAL,
                IndirectDispatch("mistral"),
                description="Mistral embedding models",
                capabilities=(_C.API_KEY_NAME, _C.AUTO_PREFIX),
                default_dimensions=1024,
                models={"mistral-embed": 1024},
                documentation_url="https://docs.mistral.ai/capabilities/embeddings/",
                requires_api_key=True,
                api_key_env_var="MISTRAL_API_KEY",
            ),
            _provider(
                ProviderName.AZURE_OPENAI,
                IndirectDispatch("azure"),
                description="Azure-hosted OpenAI embedding models",
                capabilities=(_C.API_KEY_NAME, _C.BASE_URL, _C.AUTO_PREFIX),
                default_dimensions=1536,
                models={
                    "text-embedding-ada-002": 1536,
                    "text-embedding-3-small": 1536,
                    "text-embedding-3-large": 3072,
                },
                documentation_url="https://learn.microsoft.com/en-us/azure/ai-services/openai/",
                requires_api_key=True,
                api_key_env_var="AZURE_OPENAI_API_KEY",
                unique_features=("Enterprise Azure integration", "Custom deployment names"),
            ),
            _provider(
                ProviderName.HUGGINGFACE,
                IndirectDispatch("huggingface"),
                description="Hugging Face embedding models via Inference API",
                capabilities=(_C.API_KEY_NAME, _C.AUTO_PREFIX),
                default_dimensions=768,
                models={
                    "sentence-transformers/all-MiniLM-L6-v2": 384,
                    "sentence-transformers/all-mpnet-base-v2": 768,
                    "microsoft/codebert-base": 768,
                },
                documentation_url=(
                    "https://huggingface.co/docs/api-inference/"
                    "detailed_parameters#feature-extraction-task"
                ),
                requires_api_key=True,
                api_key_env_var="HUGGINGFACE_API_KEY",
                unique_features=("Access to thousands of open-source models",),
            ),
            _provider(
                ProviderName.AWS_BEDROCK,
                IndirectDispatch("bedrock"),
                description="Amazon Bedrock embedding models",
                capabilities=(_C.AWS_CREDENTIALS, _C.AUTO_PREFIX),
                default_dimensions=1536,
                models={
                    "amazon.titan-embed-text-v1": 1536,
                    "cohere.embed-english-v3": 1024,
                    "cohere.embed-multilingual-v3": 1024,
                },
                documentation_url=(
                    "https://docs.aws.amazon.com/bedrock/latest/userguide/what-is-bedrock.html"
                ),
                requires_api_key=False,
                credential_env_vars=("AWS_ACCESS_KEY_ID", "AWS_SECRET_ACCESS_KEY", "AWS_REGION"),
                unique_features=("AWS IAM integration", "Enterprise compliance"),
            ),
            _provider(
                ProviderName.VERTEX_AI,
                IndirectDispatch("vertex_ai"),
                description="Google Vertex AI embedding models",
                capabilities=(_C.GCP_CREDENTIALS, _C.AUTO_PREFIX),
                default_dimensions=768,
                models={
                    "textembedding-gecko@003": 768,
                    "textembedding-gecko@001": 768,
                    "textembedding-gecko-multilingual@001": 768,
                },
                documentation_url=(
                    "https://cloud.google.com/vertex-ai/docs/generative-ai/"
                    "embeddings/get-text-embeddings"
                ),
                requires_api_key=False,
                credential_env_vars=(
                    "GOOGLE_APPLICATION_CREDENTIALS",
                    "GOOGLE_CLOUD_PROJECT",
                    "GOOGLE_CLOUD_REGION",
                ),
                unique_features=("GCP IAM integration", "Multilingual support"),
            ),
            _provider(
                ProviderName.GEMINI,
                IndirectDispatch("gemini"),
                description="Google Gemini API embedding models",
                capabilities=(_C.API_KEY_NAME, _C.AUTO_PREFIX),
                default_dimensions=768,
                models={
                    "text-embedding-004": 768,
                    "gemini-embedding-001": 3072,
                },
                documentation_url="https://ai.google.dev/gemini-api/docs/embeddings",
                requires_api_key=True,
                api_key_env_var="GEMINI_API_KEY",
            ),
        ]
    )
)


def normalize_token(token: object) -> str | None:
    """
    Reduce a provider token to its canonical comparable form.

    Accepts ``ProviderName`` members (or any str-valued enum) and plain
    strings. Matching stays case-sensitive. Returns ``None`` for ``None``,
    empty strings and non-string values.
    """
    if isinstance(token, Enum):
        token = token.value
    if not isinstance(token, str) or not token:
        return None
    return token


class ProviderRegistry:
    """
    Read-only query API over provider descriptors.

    Safe to share across threads: the underlying mapping is a
    ``MappingProxyType`` over frozen dataclasses and no method mutates state.

    Usage:
        registry = get_registry()
        registry.model_dimensions("openai", "text-embedding-3-large")  # 3072
        registry.lookup(ProviderName.COHERE).namespace_prefix          # "cohere"
    """

    def __init__(self, providers: Mapping[str, ProviderDescriptor] = SUPPORTED_PROVIDERS):
        self._providers = MappingProxyType(dict(providers))

    def lookup(self, token: object) -> ProviderDescriptor | None:
        """Return the descriptor for *token*, or None if unknown."""
        key = normalize_token(token)
        if key is None:
            return None
        return self._providers.get(key)

    def is_supported(self, token: object) -> bool:
        return self.lookup(token) is not None

    def provider_names(self) -> tuple[str, ...]:
        """All provider names in declaration order."""
        return tuple(self._providers)

    def all_provider_names(self) -> frozenset[str]:
        return frozenset(self._providers)

    def providers_by_dispatch_kind(self, kind: DispatchKind | str) -> frozenset[str]:
        kind_value = normalize_token(kind)
        return frozenset(
            name for name, desc in self._providers.items() if desc.dispatch_kind.value == kind_value
        )

    def direct_providers(self) -> frozenset[str]:
        return self.providers_by_dispatch_kind(DispatchKind.DIRECT)

    def indirect_providers(self) -> frozenset[str]:
        return self.providers_by_dispatch_kind(DispatchKind.INDIRECT)

    def providers_with_capability(self, capability: Capability | str) -> frozenset[str]:
        """Providers whose capability set contains *capability*."""
        value = normalize_token(capability)
        return frozenset(
            name
            for name, desc in self._providers.items()
            if any(cap.value == value for cap in desc.capabilities)
        )

    def requiring_api_keys(self) -> frozenset[str]:
        return frozenset(name for name, desc in self._providers.items() if desc.requires_api_key)

    def self_hosted_providers(self) -> frozenset[str]:
        return frozenset(name for name, desc in self._providers.items() if desc.self_hosted)

    def dispatch_kind_of(self, token: object) -> DispatchKind | None:
        desc = self.lookup(token)
        return desc.dispatch_kind if desc else None

    def invocation_function_for(self, token: object) -> str | None:
        desc = self.lookup(token)
        return desc.invocation_function if desc else None

    def namespace_prefix_for(self, token: object) -> str | None:
        desc = self.lookup(token)
        return desc.namespace_prefix if desc else None

    def common_models_for(self, token: object) -> Mapping[str, ModelInfo]:
        desc = self.lookup(token)
        return desc.common_models if desc else MappingProxyType({})

    def default_dimensions_for(self, token: object) -> int | None:
        desc = self.lookup(token)
        return desc.default_dimensions if desc else None

    def model_dimensions(self, token: object, model: str | None) -> int | None:
        """
        Resolve the vector size for *model* served by *token*.

        Returns the model-specific dimensions when the model is one of the
        provider's common models, otherwise the provider default. Returns
        None only when the provider itself is unknown.
        """
        desc = self.lookup(token)
        if desc is None:
            return None
        info = desc.common_models.get(model) if model is not None else None
        return info.dimensions if info else desc.default_dimensions

    def __len__(self) -> int:
        return len(self._providers)

    def __contains__(self, token: object) -> bool:
        return self.is_supported(token)

    def __iter__(self):
        return iter(self._providers.values())


_registry = ProviderRegistry()


def get_registry() -> ProviderRegistry:
    """Return the process-wide registry over ``SUPPORTED_PROVIDERS``."""
    return _registry

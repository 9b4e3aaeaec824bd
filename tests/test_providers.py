"""
Tests for the embedding provider registry.
"""

import pytest

from core.providers import (
    LITELLM_FUNCTION,
    SUPPORTED_PROVIDERS,
    Capability,
    DirectDispatch,
    DispatchKind,
    IndirectDispatch,
    ProviderName,
    ProviderRegistry,
    get_registry,
    normalize_token,
)

EXPECTED_ORDER = (
    "ollama",
    "openai",
    "voyageai",
    "litellm",
    "cohere",
    "mistral",
    "azure_openai",
    "huggingface",
    "aws_bedrock",
    "vertex_ai",
    "gemini",
)


class TestRegistryInvariants:
    """Every descriptor must be complete and internally consistent."""

    def test_provider_names_in_declaration_order(self, registry):
        assert registry.provider_names() == EXPECTED_ORDER

    def test_every_enum_member_registered(self, registry):
        assert {p.value for p in ProviderName} == registry.all_provider_names()
        assert len(registry) == len(ProviderName)

    def test_keys_match_descriptor_names(self):
        for key, desc in SUPPORTED_PROVIDERS.items():
            assert desc.name == key

    def test_direct_and_indirect_partition_all_providers(self, registry):
        direct = registry.direct_providers()
        indirect = registry.indirect_providers()
        assert direct.isdisjoint(indirect)
        assert direct | indirect == registry.all_provider_names()

    def test_direct_providers(self, registry):
        assert registry.direct_providers() == {"ollama", "openai", "voyageai"}

    def test_direct_functions_are_ai_embedding_calls(self, registry):
        for name in registry.direct_providers():
            desc = registry.lookup(name)
            assert isinstance(desc.dispatch, DirectDispatch)
            assert desc.invocation_function == f"ai.embedding_{name}"
            assert desc.namespace_prefix is None

    def test_indirect_providers_share_litellm_function(self, registry):
        for name in registry.indirect_providers():
            desc = registry.lookup(name)
            assert isinstance(desc.dispatch, IndirectDispatch)
            assert desc.invocation_function == LITELLM_FUNCTION == "ai.embedding_litellm"

    def test_only_generic_litellm_has_no_prefix(self, registry):
        unprefixed = {
            name for name in registry.indirect_providers() if registry.namespace_prefix_for(name) is None
        }
        assert unprefixed == {"litellm"}

    @pytest.mark.parametrize(
        "provider, prefix",
        [
            ("cohere", "cohere"),
            ("mistral", "mistral"),
            ("azure_openai", "azure"),
            ("huggingface", "huggingface"),
            ("aws_bedrock", "bedrock"),
            ("vertex_ai", "vertex_ai"),
            ("gemini", "gemini"),
        ],
    )
    def test_namespace_prefixes(self, registry, provider, prefix):
        assert registry.namespace_prefix_for(provider) == prefix

    def test_dimensions_positive(self, registry):
        for desc in registry:
            assert desc.default_dimensions > 0
            assert desc.common_models, desc.name
            assert all(info.dimensions > 0 for info in desc.common_models.values())

    def test_documentation_urls_present(self, registry):
        for desc in registry:
            assert desc.documentation_url.startswith("https://")
            assert desc.description

    def test_mapping_is_read_only(self):
        with pytest.raises(TypeError):
            SUPPORTED_PROVIDERS["new"] = SUPPORTED_PROVIDERS["openai"]  # type: ignore[index]

    def test_descriptor_is_frozen(self, registry):
        with pytest.raises(AttributeError):
            registry.lookup("openai").default_dimensions = 1  # type: ignore[misc]

    def test_dispatch_kind_matches_variant(self, registry):
        for desc in registry:
            expected = (
                DispatchKind.DIRECT if isinstance(desc.dispatch, DirectDispatch) else DispatchKind.INDIRECT
            )
            assert desc.dispatch_kind is expected


class TestNormalization:
    """Enum members and plain strings resolve identically."""

    def test_enum_member_and_string_equivalent(self, registry):
        assert registry.lookup(ProviderName.COHERE) is registry.lookup("cohere")

    @pytest.mark.parametrize("token", [None, "", 42, 1.5, ["openai"]])
    def test_invalid_tokens_not_found(self, registry, token):
        assert registry.lookup(token) is None
        assert registry.is_supported(token) is False

    def test_matching_is_case_sensitive(self, registry):
        assert registry.lookup("OpenAI") is None
        assert "OPENAI" not in registry

    def test_normalize_token(self):
        assert normalize_token(ProviderName.GEMINI) == "gemini"
        assert normalize_token("gemini") == "gemini"
        assert normalize_token(None) is None
        assert normalize_token("") is None
        assert normalize_token(3) is None


class TestQueries:
    """Registry query API."""

    def test_unknown_provider_queries_do_not_raise(self, registry):
        assert registry.lookup("unknown") is None
        assert registry.dispatch_kind_of("unknown") is None
        assert registry.invocation_function_for("unknown") is None
        assert registry.namespace_prefix_for("unknown") is None
        assert registry.default_dimensions_for("unknown") is None
        assert registry.model_dimensions("unknown", "any") is None
        assert dict(registry.common_models_for("unknown")) == {}

    @pytest.mark.parametrize(
        "provider, model, expected",
        [
            ("openai", "text-embedding-3-small", 1536),
            ("openai", "text-embedding-3-large", 3072),
            ("openai", "text-embedding-ada-002", 1536),
            ("ollama", "nomic-embed-text", 768),
            ("ollama", "mxbai-embed-large", 1024),
            ("ollama", "all-minilm", 384),
            ("voyageai", "voyage-code-2", 1536),
            ("cohere", "embed-english-light-v3.0", 384),
            ("huggingface", "sentence-transformers/all-MiniLM-L6-v2", 384),
            ("gemini", "gemini-embedding-001", 3072),
        ],
    )
    def test_model_dimensions_known_models(self, registry, provider, model, expected):
        assert registry.model_dimensions(provider, model) == expected

    def test_model_dimensions_falls_back_to_provider_default(self, registry):
        assert registry.model_dimensions("openai", "some-future-model") == 1536
        assert registry.model_dimensions("cohere", None) == 1024

    def test_dispatch_kind_of(self, registry):
        assert registry.dispatch_kind_of("ollama") is DispatchKind.DIRECT
        assert registry.dispatch_kind_of(ProviderName.MISTRAL) is DispatchKind.INDIRECT

    def test_providers_by_dispatch_kind_accepts_string(self, registry):
        assert registry.providers_by_dispatch_kind("direct") == registry.direct_providers()
        assert registry.providers_by_dispatch_kind("bogus") == frozenset()

    def test_providers_with_capability(self, registry):
        assert registry.providers_with_capability(Capability.KEEP_ALIVE) == {"ollama"}
        assert registry.providers_with_capability("input_type") == {"cohere"}
        assert registry.providers_with_capability(Capability.AWS_CREDENTIALS) == {"aws_bedrock"}
        assert registry.providers_with_capability("nonexistent") == frozenset()

    def test_requiring_api_keys(self, registry):
        keyless = registry.all_provider_names() - registry.requiring_api_keys()
        assert keyless == {"ollama", "aws_bedrock", "vertex_ai"}

    def test_self_hosted_providers(self, registry):
        assert registry.self_hosted_providers() == {"ollama"}

    def test_contains_and_iter(self, registry):
        assert "openai" in registry
        assert ProviderName.VERTEX_AI in registry
        assert [d.name for d in registry] == list(EXPECTED_ORDER)

    def test_get_registry_is_shared(self):
        assert get_registry() is get_registry()

    def test_custom_registry_subset(self):
        subset = ProviderRegistry({"openai": SUPPORTED_PROVIDERS["openai"]})
        assert subset.provider_names() == ("openai",)
        assert subset.lookup("ollama") is None

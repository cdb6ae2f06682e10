"""Tests for the provider catalog."""

import pytest
from pydantic import ValidationError

from modelweave.catalog.catalog import ProviderCatalog
from modelweave.catalog.defaults import DEFAULT_PROVIDERS, default_catalog
from modelweave.catalog.models import Model, ModelFilter, Provider, ProviderCapabilities
from modelweave.errors import ProviderNotRegisteredError, UnknownModelError


def _provider(provider_id: str, *model_ids: str, **kwargs) -> Provider:
    return Provider(
        id=provider_id,
        models=tuple(Model(id=m, provider_id=provider_id) for m in model_ids),
        **kwargs,
    )


class TestProviderCatalog:
    """Tests for ProviderCatalog registration and lookup."""

    def test_resolve_returns_provider_and_model(self, catalog: ProviderCatalog) -> None:
        provider, model = catalog.resolve("m3")

        assert provider.id == "beta"
        assert model.id == "m3"
        assert model.provider_id == "beta"

    def test_resolve_unknown_model_raises(self, catalog: ProviderCatalog) -> None:
        with pytest.raises(UnknownModelError) as exc_info:
            catalog.resolve("nonexistent")

        assert exc_info.value.model_id == "nonexistent"
        assert exc_info.value.error_code == "UNKNOWN_MODEL"

    def test_register_is_idempotent_per_provider(self) -> None:
        catalog = ProviderCatalog()
        catalog.register(_provider("p", "a", "b"))
        catalog.register(_provider("p", "c"))

        assert len(catalog) == 1
        assert "c" in catalog
        assert "a" not in catalog
        assert len(catalog.list_providers()) == 1

    def test_register_rejects_model_owned_by_other_provider(self) -> None:
        catalog = ProviderCatalog([_provider("p1", "shared")])

        with pytest.raises(ValueError, match="already registered"):
            catalog.register(_provider("p2", "shared"))

        provider, _ = catalog.resolve("shared")
        assert provider.id == "p1"

    def test_unregister_removes_models(self, catalog: ProviderCatalog) -> None:
        catalog.unregister("gamma")

        assert "m4" not in catalog
        with pytest.raises(ProviderNotRegisteredError):
            catalog.get_provider("gamma")

    def test_unregister_unknown_provider_raises(self, catalog: ProviderCatalog) -> None:
        with pytest.raises(ProviderNotRegisteredError):
            catalog.unregister("missing")

    def test_list_providers_keeps_registration_order(self, catalog: ProviderCatalog) -> None:
        assert [p.id for p in catalog.list_providers()] == ["alpha", "beta", "gamma"]


class TestModelFiltering:
    """Tests for list_models with filters and predicates."""

    def test_no_filter_lists_every_model(self, catalog: ProviderCatalog) -> None:
        assert [m.id for m in catalog.list_models()] == ["m1", "m2", "m3", "m4"]

    def test_capability_tags_must_all_match(self, catalog: ProviderCatalog) -> None:
        models = catalog.list_models(ModelFilter(capabilities=["general", "coding"]))

        assert [m.id for m in models] == ["m3"]

    def test_max_cost_tier(self, catalog: ProviderCatalog) -> None:
        models = catalog.list_models(ModelFilter(max_cost_tier=1))

        assert [m.id for m in models] == ["m2", "m3", "m4"]

    def test_provider_capability_flags(self, catalog: ProviderCatalog) -> None:
        assert [m.id for m in catalog.list_models(ModelFilter(tools=True))] == ["m3"]
        assert [m.id for m in catalog.list_models(ModelFilter(streaming=False))] == ["m4"]

    def test_vision_matches_model_tag(self) -> None:
        provider = Provider(
            id="p",
            capabilities=ProviderCapabilities(vision=False),
            models=(
                Model(id="seer", provider_id="p", capabilities=("vision",)),
                Model(id="blind", provider_id="p"),
            ),
        )
        catalog = ProviderCatalog([provider])

        assert [m.id for m in catalog.list_models(ModelFilter(vision=True))] == ["seer"]

    def test_provider_ids(self, catalog: ProviderCatalog) -> None:
        models = catalog.list_models(ModelFilter(provider_ids=["beta", "gamma"]))

        assert [m.id for m in models] == ["m3", "m4"]

    def test_predicate_selector(self, catalog: ProviderCatalog) -> None:
        models = catalog.list_models(lambda provider, model: provider.reliability > 0.92)

        assert [m.id for m in models] == ["m3"]


class TestProviderModel:
    """Tests for Provider validation."""

    def test_model_must_belong_to_provider(self) -> None:
        with pytest.raises(ValidationError):
            Provider(id="p", models=(Model(id="x", provider_id="other"),))

    def test_duplicate_model_ids_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Provider(
                id="p",
                models=(Model(id="x", provider_id="p"), Model(id="x", provider_id="p")),
            )

    def test_capability_count(self) -> None:
        assert ProviderCapabilities(streaming=True, tools=True).count == 2
        assert ProviderCapabilities().count == 0


class TestDefaultCatalog:
    """Tests for the built-in provider set."""

    def test_builtin_providers_registered(self) -> None:
        catalog = default_catalog()

        assert [p.id for p in catalog.list_providers()] == [p.id for p in DEFAULT_PROVIDERS]
        provider, model = catalog.resolve("gemini-2.5-flash")
        assert provider.id == "google"
        assert provider.api_format == "gemini"

    def test_gateway_models_resolve(self) -> None:
        catalog = default_catalog()

        provider, model = catalog.resolve("google/gemini-2.5-flash")

        assert provider.id == "gateway"
        assert provider.api_format == "openai"
        assert provider.endpoint.endswith("/v1/chat/completions")
        assert "openai/gpt-5-mini" in catalog
        assert "gemini-2.5-flash" in catalog

    def test_catalogs_are_independent(self) -> None:
        first = default_catalog()
        second = default_catalog()

        first.unregister("openai")

        assert "gpt-4o" not in first
        assert "gpt-4o" in second

    def test_extra_provider_replaces_builtin(self) -> None:
        catalog = default_catalog([_provider("openai", "gpt-local", endpoint="http://localhost")])

        assert "gpt-local" in catalog
        assert "gpt-4o" not in catalog

"""Provider catalog for model resolution and discovery.

This module provides the ProviderCatalog class which owns every registered
provider and indexes their models by id. Catalogs are constructed explicitly
and handed to the components that need them.
"""

import threading
from typing import Optional

from modelweave.catalog.models import Model, ModelFilter, ModelSelector, Provider
from modelweave.errors import ProviderNotRegisteredError, UnknownModelError


class ProviderCatalog:
    """Registry of providers and the models they expose.

    Registration is idempotent per provider id: registering a provider again
    replaces the previous definition and re-indexes its models. The catalog
    is read-mostly; a lock guards registration so that lookups never observe
    a half-updated index.

    Example:
        >>> catalog = ProviderCatalog()
        >>> catalog.register(Provider(id="openai", models=(Model(id="gpt-4o", provider_id="openai"),)))
        >>> provider, model = catalog.resolve("gpt-4o")
        >>> provider.id
        'openai'
    """

    def __init__(self, providers: Optional[list[Provider]] = None) -> None:
        """Initialize the catalog.

        Args:
            providers: Optional providers to register immediately
        """
        self._providers: dict[str, Provider] = {}
        self._models: dict[str, Model] = {}
        self._lock = threading.Lock()

        for provider in providers or []:
            self.register(provider)

    def register(self, provider: Provider) -> None:
        """Add or replace a provider and index all of its models.

        Args:
            provider: Provider to register

        Raises:
            ValueError: If one of the provider's model ids is already owned
                by a different provider
        """
        with self._lock:
            for model in provider.models:
                owner = self._models.get(model.id)
                if owner is not None and owner.provider_id != provider.id:
                    raise ValueError(
                        f"Model id '{model.id}' is already registered by provider "
                        f"'{owner.provider_id}'"
                    )

            previous = self._providers.get(provider.id)
            if previous is not None:
                for model in previous.models:
                    self._models.pop(model.id, None)

            self._providers[provider.id] = provider
            for model in provider.models:
                self._models[model.id] = model

    def unregister(self, provider_id: str) -> None:
        """Remove a provider and its models.

        Args:
            provider_id: Provider to remove

        Raises:
            ProviderNotRegisteredError: If the provider is unknown
        """
        with self._lock:
            provider = self._providers.pop(provider_id, None)
            if provider is None:
                raise ProviderNotRegisteredError(provider_id)
            for model in provider.models:
                self._models.pop(model.id, None)

    def resolve(self, model_id: str) -> tuple[Provider, Model]:
        """Resolve a model id to its provider and model.

        Args:
            model_id: Model identifier

        Returns:
            Tuple of (provider, model)

        Raises:
            UnknownModelError: If no registered provider exposes the model
        """
        with self._lock:
            model = self._models.get(model_id)
            if model is None:
                raise UnknownModelError(model_id)
            return self._providers[model.provider_id], model

    def get_provider(self, provider_id: str) -> Provider:
        """Get a provider by id.

        Raises:
            ProviderNotRegisteredError: If the provider is unknown
        """
        with self._lock:
            provider = self._providers.get(provider_id)
        if provider is None:
            raise ProviderNotRegisteredError(provider_id)
        return provider

    def list_providers(self) -> list[Provider]:
        """List registered providers in registration order."""
        with self._lock:
            return list(self._providers.values())

    def list_models(self, selector: ModelSelector = None) -> list[Model]:
        """List models matching a capability predicate.

        Args:
            selector: A ModelFilter, a ``(provider, model) -> bool`` callable,
                or None for every model

        Returns:
            Matching models, in provider registration order

        Example:
            >>> catalog.list_models(ModelFilter(vision=True, max_cost_tier=2))
        """
        with self._lock:
            pairs = [
                (provider, model)
                for provider in self._providers.values()
                for model in provider.models
            ]

        if selector is None:
            return [model for _, model in pairs]
        if isinstance(selector, ModelFilter):
            return [model for provider, model in pairs if selector.matches(provider, model)]
        return [model for provider, model in pairs if selector(provider, model)]

    def __contains__(self, model_id: object) -> bool:
        with self._lock:
            return model_id in self._models

    def __len__(self) -> int:
        """Number of registered models."""
        with self._lock:
            return len(self._models)

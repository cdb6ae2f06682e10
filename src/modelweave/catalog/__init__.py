"""Provider catalog: providers, models, pricing and rate windows."""

from modelweave.catalog.catalog import ProviderCatalog
from modelweave.catalog.defaults import DEFAULT_PROVIDERS, default_catalog
from modelweave.catalog.loader import load_catalog_file, parse_providers, register_catalog_file
from modelweave.catalog.models import (
    Model,
    ModelFilter,
    ModelPredicate,
    ModelSelector,
    Pricing,
    Provider,
    ProviderCapabilities,
    RateLimit,
)

__all__ = [
    "DEFAULT_PROVIDERS",
    "Model",
    "ModelFilter",
    "ModelPredicate",
    "ModelSelector",
    "Pricing",
    "Provider",
    "ProviderCapabilities",
    "ProviderCatalog",
    "RateLimit",
    "default_catalog",
    "load_catalog_file",
    "parse_providers",
    "register_catalog_file",
]

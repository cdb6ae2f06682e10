"""Load provider definitions from YAML or JSON files.

A catalog file is a mapping with a ``providers`` list; each entry follows the
Provider schema, with models nested under ``models``. A model's
``provider_id`` may be omitted and is then filled from its parent provider::

    providers:
      - id: local
        endpoint: http://localhost:11434/v1/chat/completions
        requires_auth: false
        rate_limit: {requests: 10, window_ms: 1000}
        pricing: {input_per_1k: 0, output_per_1k: 0}
        models:
          - {id: llama3.2, context_window: 131072, cost_tier: 0}
"""

import json
import logging
from pathlib import Path
from typing import Any, Union

import yaml
from pydantic import ValidationError

from modelweave.catalog.catalog import ProviderCatalog
from modelweave.catalog.models import Provider

logger = logging.getLogger(__name__)


def parse_providers(data: Any) -> list[Provider]:
    """Parse provider definitions from already-decoded data.

    Args:
        data: Mapping with a "providers" list, or the list itself

    Returns:
        Validated providers

    Raises:
        ValueError: If the structure or any provider is invalid
    """
    entries = data.get("providers") if isinstance(data, dict) else data
    if not isinstance(entries, list):
        raise ValueError("catalog data must contain a 'providers' list")

    providers: list[Provider] = []
    for index, entry in enumerate(entries):
        if not isinstance(entry, dict):
            raise ValueError(f"provider entry {index} must be a mapping")
        entry = dict(entry)
        provider_id = entry.get("id")
        entry["models"] = [
            {"provider_id": provider_id, **model} for model in entry.get("models", [])
        ]
        try:
            providers.append(Provider.model_validate(entry))
        except ValidationError as e:
            raise ValueError(f"invalid provider entry {index} ({provider_id}): {e}") from e
    return providers


def load_catalog_file(path: Union[str, Path]) -> list[Provider]:
    """Load provider definitions from a .yaml/.yml or .json file.

    Args:
        path: Catalog file path

    Returns:
        Validated providers

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the file cannot be parsed
    """
    file_path = Path(path)
    text = file_path.read_text(encoding="utf-8")

    if file_path.suffix.lower() == ".json":
        data = json.loads(text)
    else:
        data = yaml.safe_load(text)

    providers = parse_providers(data)
    logger.info("Loaded %d providers from %s", len(providers), file_path)
    return providers


def register_catalog_file(catalog: ProviderCatalog, path: Union[str, Path]) -> int:
    """Register every provider from a catalog file.

    Returns:
        Number of providers registered
    """
    providers = load_catalog_file(path)
    for provider in providers:
        catalog.register(provider)
    return len(providers)

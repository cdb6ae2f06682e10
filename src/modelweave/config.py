"""Orchestrator configuration models and utilities.

This module provides configuration management for the orchestration core:
default model and sampling settings, call deadlines, strategy defaults,
provider credentials, storage and logging settings.
"""

import os
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, field_validator

# Providers whose credentials are read from the environment
KNOWN_PROVIDERS = ("openai", "anthropic", "google", "cerebras", "gateway")


class ProviderCredentials(BaseModel):
    """Credentials and endpoint override for one provider.

    Attributes:
        api_key: API key for authentication (sensitive - not logged)
        api_base: Base URL override for the provider endpoint
    """

    model_config = ConfigDict(frozen=True)

    api_key: Optional[str] = Field(default=None, repr=False, description="API key (sensitive)")
    api_base: Optional[str] = Field(default=None, description="Endpoint override")


class OrchestratorConfig(BaseModel):
    """Global orchestration configuration.

    Attributes:
        default_model: Model used by llm chain nodes that do not name one
        timeout_ms: Per-call deadline in milliseconds
        default_max_tokens: Completion budget when a request sets none
        default_temperature: Sampling temperature for chain llm nodes
        consensus_threshold: Minimum successful responses for consensus
        consensus_similarity: Similarity ratio for clustering answers
        prune_condition_branches: Skip chain nodes behind a condition's inactive branch
        catalog_path: Optional YAML/JSON file with extra providers
        database_url: Optional SQLAlchemy URL enabling the SQL record store
        log_level: Logging level
        json_logs: Render logs as JSON
        providers: Per-provider credentials

    Example:
        >>> config = OrchestratorConfig(
        ...     default_model="gpt-4o-mini",
        ...     providers={"openai": ProviderCredentials(api_key="sk-...")},
        ... )
    """

    model_config = ConfigDict(frozen=True)

    default_model: str = Field(default="gpt-4o-mini", description="Default model id")
    timeout_ms: int = Field(
        default=60000, ge=1000, le=600000, description="Call deadline (1s-10min)"
    )
    default_max_tokens: int = Field(default=1000, ge=1)
    default_temperature: float = Field(default=0.7, ge=0.0, le=2.0)
    consensus_threshold: int = Field(default=2, ge=1)
    consensus_similarity: float = Field(default=0.8, gt=0.0, le=1.0)
    prune_condition_branches: bool = False
    catalog_path: Optional[str] = None
    database_url: Optional[str] = None
    log_level: str = "INFO"
    json_logs: bool = True
    providers: dict[str, ProviderCredentials] = Field(default_factory=dict)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        """Normalize and validate the log level name.

        Raises:
            ValueError: If the level is not a standard logging level
        """
        level = value.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"invalid log_level '{value}'")
        return level

    @property
    def timeout_seconds(self) -> float:
        return self.timeout_ms / 1000

    def credentials_for(self, provider_id: str) -> ProviderCredentials:
        """Get credentials for a provider (empty credentials if not configured)."""
        return self.providers.get(provider_id, ProviderCredentials())


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ("true", "1", "yes")


def load_config_from_env() -> OrchestratorConfig:
    """Load orchestrator configuration from environment variables.

    Automatically loads variables from a .env file if present.

    Reads:
    - MODELWEAVE_DEFAULT_MODEL: Default model id
    - MODELWEAVE_TIMEOUT_MS: Call deadline in milliseconds
    - MODELWEAVE_DEFAULT_MAX_TOKENS: Default completion budget
    - MODELWEAVE_CONSENSUS_THRESHOLD: Minimum responses for consensus
    - MODELWEAVE_CONSENSUS_SIMILARITY: Similarity ratio for clustering
    - MODELWEAVE_PRUNE_CONDITION_BRANCHES: Enable branch pruning (true/false)
    - MODELWEAVE_CATALOG_PATH: Extra provider catalog file
    - MODELWEAVE_DATABASE_URL: Record store database URL
    - MODELWEAVE_LOG_LEVEL: Logging level
    - MODELWEAVE_JSON_LOGS: JSON log output (true/false)
    - MODELWEAVE_<PROVIDER>_API_KEY / MODELWEAVE_<PROVIDER>_API_BASE for each
      known provider (OPENAI, ANTHROPIC, GOOGLE, CEREBRAS, GATEWAY)

    Returns:
        OrchestratorConfig loaded from environment
    """
    load_dotenv()

    providers: dict[str, ProviderCredentials] = {}
    for provider_id in KNOWN_PROVIDERS:
        prefix = f"MODELWEAVE_{provider_id.upper()}"
        api_key = os.getenv(f"{prefix}_API_KEY")
        api_base = os.getenv(f"{prefix}_API_BASE")
        if api_key or api_base:
            providers[provider_id] = ProviderCredentials(api_key=api_key, api_base=api_base)

    return OrchestratorConfig(
        default_model=os.getenv("MODELWEAVE_DEFAULT_MODEL", "gpt-4o-mini"),
        timeout_ms=int(os.getenv("MODELWEAVE_TIMEOUT_MS", "60000")),
        default_max_tokens=int(os.getenv("MODELWEAVE_DEFAULT_MAX_TOKENS", "1000")),
        consensus_threshold=int(os.getenv("MODELWEAVE_CONSENSUS_THRESHOLD", "2")),
        consensus_similarity=float(os.getenv("MODELWEAVE_CONSENSUS_SIMILARITY", "0.8")),
        prune_condition_branches=_env_bool("MODELWEAVE_PRUNE_CONDITION_BRANCHES", "false"),
        catalog_path=os.getenv("MODELWEAVE_CATALOG_PATH") or None,
        database_url=os.getenv("MODELWEAVE_DATABASE_URL") or None,
        log_level=os.getenv("MODELWEAVE_LOG_LEVEL", "INFO"),
        json_logs=_env_bool("MODELWEAVE_JSON_LOGS", "true"),
        providers=providers,
    )

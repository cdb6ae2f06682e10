"""Composition root wiring the orchestration components together.

The Orchestrator owns exactly one instance of each shared component, so
independent orchestrators (for example one per test) never share state.
"""

import logging
from typing import Any, Optional, Union

from modelweave.catalog.catalog import ProviderCatalog
from modelweave.catalog.defaults import default_catalog
from modelweave.catalog.loader import register_catalog_file
from modelweave.catalog.models import ModelSelector
from modelweave.chains.executor import ChainExecutor
from modelweave.chains.models import ChainExecutionResult, ChainGraph
from modelweave.chains.tools import ChainToolRegistry, SearchBackend, default_tool_registry
from modelweave.config import OrchestratorConfig
from modelweave.limits.cost import CostAccountant
from modelweave.limits.rate_limiter import RateLimiter
from modelweave.limits.usage import UsageTracker
from modelweave.models import CallResult, Request
from modelweave.providers import ProviderAdapter, default_adapters
from modelweave.routing.router import ModelRouter
from modelweave.storage.base import RecordStore
from modelweave.storage.memory import InMemoryRecordStore
from modelweave.storage.repositories import ChainGraphRepository, ConversationLog
from modelweave.storage.sql_store import SqlRecordStore
from modelweave.strategies.engine import StrategyEngine
from modelweave.strategies.models import MultiCallResult, Strategy

logger = logging.getLogger(__name__)


class Orchestrator:
    """Facade over the catalog, limiter, accountant, router, strategies and chains.

    Example:
        >>> orchestrator = await Orchestrator.from_config(load_config_from_env())
        >>> result = await orchestrator.call("Hello", "gpt-4o-mini")
        >>> multi = await orchestrator.call_many("Hello", ["gpt-4o", "claude-haiku-4-5"], "parallel")
        >>> await orchestrator.close()
    """

    def __init__(
        self,
        config: Optional[OrchestratorConfig] = None,
        catalog: Optional[ProviderCatalog] = None,
        adapters: Optional[dict[str, ProviderAdapter]] = None,
        record_store: Optional[RecordStore] = None,
        tools: Optional[ChainToolRegistry] = None,
    ) -> None:
        """Initialize the orchestrator.

        Args:
            config: Configuration (defaults to OrchestratorConfig())
            catalog: Provider catalog (defaults to the built-in providers)
            adapters: Adapters keyed by api_format (defaults to the built-ins)
            record_store: Store for conversations and saved graphs
                (in-memory when omitted)
            tools: Tool registry for chain tool nodes
        """
        self.config = config or OrchestratorConfig()
        self.catalog = catalog if catalog is not None else default_catalog()
        self.limiter = RateLimiter(self.catalog)
        self.accountant = CostAccountant(self.catalog)
        self.usage = UsageTracker()
        self.router = ModelRouter(
            self.catalog,
            self.limiter,
            self.accountant,
            adapters if adapters is not None else default_adapters(
                timeout=self.config.timeout_seconds
            ),
            usage=self.usage,
            config=self.config,
        )
        self.record_store: RecordStore = record_store or InMemoryRecordStore()
        self.conversations = ConversationLog(self.record_store)
        self.graphs = ChainGraphRepository(self.record_store)
        self.strategies = StrategyEngine(
            self.router,
            consensus_threshold=self.config.consensus_threshold,
            consensus_similarity=self.config.consensus_similarity,
            conversations=self.conversations,
        )
        self.executor = ChainExecutor(
            self.router,
            tools=tools or default_tool_registry(),
            default_model=self.config.default_model,
            default_max_tokens=self.config.default_max_tokens,
            default_temperature=self.config.default_temperature,
            prune_condition_branches=self.config.prune_condition_branches,
        )

    @classmethod
    async def from_config(
        cls,
        config: OrchestratorConfig,
        adapters: Optional[dict[str, ProviderAdapter]] = None,
        search_backend: Optional[SearchBackend] = None,
    ) -> "Orchestrator":
        """Build an orchestrator from configuration.

        Registers providers from ``catalog_path`` and opens the SQL record
        store (creating its tables) when ``database_url`` is set.

        Args:
            config: Orchestrator configuration
            adapters: Adapter override (defaults to the built-ins)
            search_backend: Backend enabling the ``search`` chain tool

        Returns:
            Ready-to-use orchestrator
        """
        catalog = default_catalog()
        if config.catalog_path:
            added = register_catalog_file(catalog, config.catalog_path)
            logger.info("Registered %d providers from %s", added, config.catalog_path)

        record_store: Optional[RecordStore] = None
        if config.database_url:
            sql_store = SqlRecordStore.from_url(config.database_url)
            await sql_store.create_tables()
            record_store = sql_store

        return cls(
            config=config,
            catalog=catalog,
            adapters=adapters,
            record_store=record_store,
            tools=default_tool_registry(search_backend),
        )

    def _request(self, prompt: Union[str, Request], **params: Any) -> Request:
        if isinstance(prompt, Request):
            return prompt
        params.setdefault("temperature", self.config.default_temperature)
        return Request(prompt=prompt, **params)

    async def call(
        self, prompt: Union[str, Request], model_id: str, **params: Any
    ) -> CallResult:
        """Route a single call.

        Args:
            prompt: Prompt text or a prepared Request
            model_id: Target model
            **params: Request fields (system_prompt, max_tokens, temperature, ...)
        """
        return await self.router.call(self._request(prompt, **params), model_id)

    async def call_best_fit(
        self, prompt: Union[str, Request], model_filter: ModelSelector = None, **params: Any
    ) -> CallResult:
        return await self.router.call_best_fit(self._request(prompt, **params), model_filter)

    async def call_many(
        self,
        prompt: Union[str, Request],
        model_ids: list[str],
        strategy: Union[Strategy, str] = Strategy.PARALLEL,
        consensus_threshold: Optional[int] = None,
        **params: Any,
    ) -> MultiCallResult:
        """Run a multi-model strategy.

        Raises:
            StrategyError: If the strategy name is unknown
        """
        return await self.strategies.call_many(
            self._request(prompt, **params), model_ids, strategy, consensus_threshold
        )

    async def execute_chain(
        self, graph: Union[ChainGraph, dict[str, Any]]
    ) -> ChainExecutionResult:
        return await self.executor.execute(graph)

    async def close(self) -> None:
        """Release network and database resources."""
        await self.router.close()
        close = getattr(self.record_store, "close", None)
        if close is not None:
            await close()

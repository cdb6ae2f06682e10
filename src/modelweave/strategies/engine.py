"""Multi-model strategy engine.

Fans a single request out over several models through the router:

- parallel: all models concurrently, keep every success
- cascade: models in order, stop at the first success
- consensus: parallel, then cluster the answers and report the majority
- best-of-n: parallel, then rank the answers by score

Individual model failures are partial failures; they are reported in
``failures`` and never abort the run.
"""

import asyncio
import time
from typing import Optional, Union

from modelweave.models import CallResult, Request, Response
from modelweave.observability.logging import ensure_run_id, get_logger
from modelweave.observability.metrics import MetricsCollector, get_metrics_collector
from modelweave.routing.router import ModelRouter
from modelweave.storage.repositories import ConversationLog
from modelweave.strategies.consensus import build_consensus
from modelweave.strategies.models import (
    ConsensusResult,
    ModelFailure,
    MultiCallResult,
    Strategy,
)
from modelweave.strategies.scoring import catalog_capabilities, rank_responses, select_best

logger = get_logger(__name__)


class StrategyEngine:
    """Runs multi-model strategies on top of a ModelRouter.

    Example:
        >>> engine = StrategyEngine(router)
        >>> result = await engine.call_many(
        ...     Request(prompt="Name a prime"), ["gpt-4o-mini", "claude-haiku-4-5"], "cascade"
        ... )
        >>> result.best.model_id
        'gpt-4o-mini'
    """

    def __init__(
        self,
        router: ModelRouter,
        consensus_threshold: int = 2,
        consensus_similarity: float = 0.8,
        conversations: Optional[ConversationLog] = None,
        metrics: Optional[MetricsCollector] = None,
    ) -> None:
        """Initialize the engine.

        Args:
            router: Router used for every individual call
            consensus_threshold: Default minimum responses for consensus
            consensus_similarity: Similarity ratio for clustering answers
            conversations: Optional log persisting every run
            metrics: Metrics collector (defaults to the process-wide one)
        """
        self._router = router
        self._consensus_threshold = consensus_threshold
        self._consensus_similarity = consensus_similarity
        self._conversations = conversations
        self._metrics = metrics or get_metrics_collector()
        self._capabilities = catalog_capabilities(router.catalog)

    async def call_many(
        self,
        request: Request,
        model_ids: list[str],
        strategy: Union[Strategy, str] = Strategy.PARALLEL,
        consensus_threshold: Optional[int] = None,
    ) -> MultiCallResult:
        """Run a strategy over a list of models.

        Args:
            request: Request sent to every model
            model_ids: Models to use, in priority order for cascade
            strategy: Strategy or strategy name
            consensus_threshold: Override of the consensus threshold

        Returns:
            MultiCallResult with responses, failures, best, cost and timing

        Raises:
            StrategyError: If the strategy name is unknown
        """
        strategy = Strategy.parse(strategy)
        run_id = ensure_run_id()
        threshold = consensus_threshold or self._consensus_threshold
        started = time.perf_counter()

        if strategy is Strategy.CASCADE:
            results = await self._cascade(request, model_ids)
        else:
            results = await self._parallel(request, model_ids)

        responses = [r.response for r in results if r.response is not None]
        failures = [ModelFailure.from_result(r) for r in results if not r.success]
        consensus: Optional[ConsensusResult] = None

        if strategy is Strategy.BEST_OF_N:
            responses = rank_responses(responses, self._capabilities)
            success = bool(responses)
        elif strategy is Strategy.CONSENSUS:
            consensus = build_consensus(responses, threshold, self._consensus_similarity)
            success = len(responses) >= threshold
        else:
            success = bool(responses)

        result = MultiCallResult(
            strategy=strategy,
            responses=responses,
            best=select_best(responses, self._capabilities),
            consensus=consensus,
            failures=failures,
            total_cost=sum(response.cost for response in responses),
            total_time_ms=(time.perf_counter() - started) * 1000,
            success=success,
            run_id=run_id,
        )

        self._metrics.record_strategy_run(strategy.value, success)
        logger.info(
            "strategy_completed",
            strategy=strategy.value,
            models=len(model_ids),
            responses=len(responses),
            failures=len(failures),
            success=success,
            total_cost=result.total_cost,
            total_time_ms=round(result.total_time_ms, 1),
        )

        await self._persist(request, result)
        return result

    async def _parallel(self, request: Request, model_ids: list[str]) -> list[CallResult]:
        # Join-all: every call settles before results are reduced
        return list(
            await asyncio.gather(*(self._router.call(request, model_id) for model_id in model_ids))
        )

    async def _cascade(self, request: Request, model_ids: list[str]) -> list[CallResult]:
        results: list[CallResult] = []
        for model_id in model_ids:
            result = await self._router.call(request, model_id)
            results.append(result)
            if result.success:
                break
            logger.info(
                "cascade_fallback",
                model_id=model_id,
                error_code=result.error.error_code if result.error else None,
            )
        return results

    async def _persist(self, request: Request, result: MultiCallResult) -> None:
        if self._conversations is None:
            return
        try:
            await self._conversations.record(request, result)
        except Exception:
            logger.exception("conversation_persist_failed", strategy=result.strategy.value)

    def best_of(self, responses: list[Response]) -> Optional[Response]:
        """Pick the best response using the engine's scoring."""
        return select_best(responses, self._capabilities)

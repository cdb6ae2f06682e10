"""Single-call router.

The router resolves a model id through the provider catalog, asks the rate
limiter for admission, invokes the provider adapter under a deadline and
normalizes the reply into a Response whose cost is recorded by the cost
accountant. It never retries: every outcome, successful or not, comes back
as a CallResult.
"""

import asyncio
import time
from typing import Optional

from modelweave.catalog.catalog import ProviderCatalog
from modelweave.catalog.models import Model, ModelSelector, Provider
from modelweave.config import OrchestratorConfig
from modelweave.errors import (
    OrchestrationError,
    ProviderError,
    RateLimitedError,
    UnknownModelError,
)
from modelweave.limits.cost import CostAccountant, estimate_prompt_tokens
from modelweave.limits.rate_limiter import RateLimiter
from modelweave.limits.usage import UsageTracker
from modelweave.models import CallResult, Request, Response
from modelweave.observability.logging import get_logger
from modelweave.observability.metrics import MetricsCollector, get_metrics_collector
from modelweave.providers.base import ProviderAdapter, ProviderCompletion

logger = get_logger(__name__)


class ModelRouter:
    """Routes one request to one model.

    Side effects of a call: at most one rate-limiter admission, at most one
    external invocation and, on success only, one cost-ledger update.
    Admissions are not rolled back when the call later fails.

    Example:
        >>> router = ModelRouter(catalog, limiter, accountant, default_adapters())
        >>> result = await router.call(Request(prompt="Hello"), "gpt-4o-mini")
        >>> if result.success:
        ...     print(result.response.content)
    """

    def __init__(
        self,
        catalog: ProviderCatalog,
        limiter: RateLimiter,
        accountant: CostAccountant,
        adapters: dict[str, ProviderAdapter],
        usage: Optional[UsageTracker] = None,
        config: Optional[OrchestratorConfig] = None,
        metrics: Optional[MetricsCollector] = None,
    ) -> None:
        """Initialize router.

        Args:
            catalog: Provider catalog used to resolve model ids
            limiter: Per-provider admission control
            accountant: Cost ledger updated on every success
            adapters: Adapters keyed by provider ``api_format``
            usage: Usage tracker (a private one is created when omitted)
            config: Orchestrator configuration (credentials, deadline, defaults)
            metrics: Metrics collector (defaults to the process-wide one)
        """
        self._catalog = catalog
        self._limiter = limiter
        self._accountant = accountant
        self._adapters = dict(adapters)
        self._usage = usage or UsageTracker()
        self._config = config or OrchestratorConfig()
        self._metrics = metrics or get_metrics_collector()

    @property
    def catalog(self) -> ProviderCatalog:
        return self._catalog

    @property
    def usage(self) -> UsageTracker:
        return self._usage

    @property
    def accountant(self) -> CostAccountant:
        return self._accountant

    @property
    def limiter(self) -> RateLimiter:
        return self._limiter

    def register_adapter(self, api_format: str, adapter: ProviderAdapter) -> None:
        """Register or replace the adapter for an api_format."""
        self._adapters[api_format] = adapter

    def adapter_for(self, provider: Provider) -> Optional[ProviderAdapter]:
        return self._adapters.get(provider.api_format)

    async def call(
        self, request: Request, model_id: str, timeout: Optional[float] = None
    ) -> CallResult:
        """Route a request to a model.

        Steps:
        1. Resolve the model (UnknownModelError)
        2. Admit through the rate limiter (RateLimitedError, no network call)
        3. Invoke the adapter under a deadline (ProviderError)
        4. Build the Response and record its cost

        Args:
            request: Normalized request
            model_id: Target model id
            timeout: Deadline in seconds (defaults to the configured timeout)

        Returns:
            CallResult carrying either the Response or the error
        """
        started = time.perf_counter()

        try:
            provider, model = self._catalog.resolve(model_id)
        except UnknownModelError as e:
            logger.warning("model_not_found", model_id=model_id)
            return CallResult.fail(model_id, e, _elapsed_ms(started))

        adapter = self.adapter_for(provider)
        if adapter is None:
            unsupported = ProviderError(
                provider.id, f"No adapter registered for api_format '{provider.api_format}'"
            )
            return CallResult.fail(model_id, unsupported, _elapsed_ms(started))

        request = self._prepare(request, model)
        prompt_tokens = estimate_prompt_tokens(
            "".join(message["content"] for message in request.to_messages())
        )

        admission = await self._limiter.admit(provider.id, tokens=prompt_tokens)
        if not admission.admitted:
            self._usage.record_rate_limited(provider.id)
            self._metrics.record_rate_limited(provider.id, admission.reason)
            logger.info(
                "call_rate_limited",
                provider_id=provider.id,
                model_id=model_id,
                retry_after=round(admission.retry_after, 3),
            )
            limited = RateLimitedError(provider.id, admission.retry_after)
            return CallResult.fail(model_id, limited, _elapsed_ms(started))

        deadline = self._config.timeout_seconds if timeout is None else timeout
        credentials = self._config.credentials_for(provider.id)
        call_started = time.perf_counter()
        error: Optional[OrchestrationError] = None
        completion: Optional[ProviderCompletion] = None

        try:
            completion = await asyncio.wait_for(
                adapter.invoke(provider, model, request, credentials), timeout=deadline
            )
        except asyncio.TimeoutError:
            error = ProviderError(
                provider.id, f"Call to '{model_id}' exceeded {deadline}s", status_code="timeout"
            )
        except ProviderError as e:
            error = e
        except Exception as e:
            logger.exception("adapter_failed", provider_id=provider.id, model_id=model_id)
            error = ProviderError(provider.id, f"Unexpected adapter failure: {e}")

        latency_ms = _elapsed_ms(call_started)

        if error is not None:
            self._usage.record_call(provider.id, latency_ms, success=False)
            outcome = "timeout" if isinstance(error, ProviderError) and error.is_timeout else "error"
            self._metrics.record_provider_call(provider.id, model_id, outcome, latency_ms / 1000)
            logger.warning(
                "provider_call_failed",
                provider_id=provider.id,
                model_id=model_id,
                error_code=error.error_code,
                error=error.message,
                latency_ms=round(latency_ms, 1),
            )
            return CallResult.fail(model_id, error, _elapsed_ms(started))

        assert completion is not None
        cost = self._accountant.record(provider.id, completion.usage, provider.pricing)
        response = Response(
            content=completion.content,
            usage=completion.usage,
            finish_reason=completion.finish_reason,
            latency_ms=latency_ms,
            cost=cost,
            provider_id=provider.id,
            model_id=model.id,
            metadata={k: v for k, v in completion.metadata.items() if v is not None},
        )

        self._usage.record_call(provider.id, latency_ms, success=True)
        self._metrics.record_provider_call(provider.id, model_id, "success", latency_ms / 1000)
        self._metrics.record_cost(provider.id, cost)
        logger.info(
            "provider_call_succeeded",
            provider_id=provider.id,
            model_id=model_id,
            latency_ms=round(latency_ms, 1),
            total_tokens=completion.usage.total_tokens,
            cost=cost,
        )
        return CallResult.ok(response, _elapsed_ms(started))

    def _prepare(self, request: Request, model: Model) -> Request:
        """Resolve the completion budget against the model's output limit."""
        max_tokens = request.max_tokens or self._config.default_max_tokens
        max_tokens = min(max_tokens, model.max_output_tokens)
        if max_tokens == request.max_tokens:
            return request
        return request.model_copy(update={"max_tokens": max_tokens})

    def select_model(self, model_filter: ModelSelector = None) -> Optional[Model]:
        """Pick the best-fit model for a capability filter.

        Candidates whose provider window is currently full, or whose
        api_format has no adapter, are skipped. The rest are ranked by cost
        tier, then by reliability minus observed error rate, then by price.

        Args:
            model_filter: ModelFilter, predicate, or None for every model

        Returns:
            Selected model, or None if nothing qualifies
        """
        ranked: list[tuple[tuple[float, float, float], int, Model]] = []
        for position, model in enumerate(self._catalog.list_models(model_filter)):
            provider = self._catalog.get_provider(model.provider_id)
            if self.adapter_for(provider) is None or self._limiter.is_limited(provider.id):
                continue
            health = provider.reliability - self._usage.error_rate(provider.id)
            price = provider.pricing.input_per_1k + provider.pricing.output_per_1k
            ranked.append(((model.cost_tier, -health, price), position, model))

        if not ranked:
            return None
        ranked.sort(key=lambda item: (item[0], item[1]))
        return ranked[0][2]

    async def call_best_fit(
        self,
        request: Request,
        model_filter: ModelSelector = None,
        timeout: Optional[float] = None,
    ) -> CallResult:
        """Select a model with ``select_model`` and call it.

        Returns:
            CallResult; fails with UnknownModelError when no model qualifies
        """
        model = self.select_model(model_filter)
        if model is None:
            error = UnknownModelError("best-fit", reason="no available model matches the filter")
            return CallResult.fail("best-fit", error)
        logger.debug("best_fit_selected", model_id=model.id, provider_id=model.provider_id)
        return await self.call(request, model.id, timeout=timeout)

    async def close(self) -> None:
        """Close adapters that hold network resources."""
        for adapter in self._adapters.values():
            close = getattr(adapter, "close", None)
            if close is not None:
                await close()


def _elapsed_ms(started: float) -> float:
    return (time.perf_counter() - started) * 1000

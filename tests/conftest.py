"""Pytest configuration and shared fixtures for the test suite."""

import asyncio
import os
from typing import Any, Callable, Union

import pytest

# Use litellm's bundled model cost map so importing it never fetches it over the
# network (an offline fetch races the import in a background thread).
os.environ.setdefault("LITELLM_LOCAL_MODEL_COST_MAP", "True")

from modelweave.catalog.catalog import ProviderCatalog
from modelweave.catalog.models import Model, Pricing, Provider, ProviderCapabilities, RateLimit
from modelweave.config import OrchestratorConfig, ProviderCredentials
from modelweave.limits.cost import CostAccountant
from modelweave.limits.rate_limiter import RateLimiter
from modelweave.limits.usage import UsageTracker
from modelweave.models import Request, Usage
from modelweave.orchestrator import Orchestrator
from modelweave.providers.base import ProviderCompletion
from modelweave.routing.router import ModelRouter

# Configure pytest-asyncio to use auto mode
pytest_plugins = ["pytest_asyncio"]

Reply = Union[str, Exception, Callable[[Request], str]]


class StubAdapter:
    """Adapter returning scripted replies without network access.

    ``replies`` maps a model id to a string, an exception to raise, or a
    callable building the reply from the request. Unscripted models answer
    ``"<model_id>: <prompt>"``.
    """

    def __init__(self) -> None:
        self.replies: dict[str, Reply] = {}
        self.delays: dict[str, float] = {}
        self.usage = Usage.of(100, 50)
        self.calls: list[tuple[str, Request]] = []

    @property
    def called_models(self) -> list[str]:
        return [model_id for model_id, _ in self.calls]

    async def invoke(
        self,
        provider: Provider,
        model: Model,
        request: Request,
        credentials: ProviderCredentials,
    ) -> ProviderCompletion:
        self.calls.append((model.id, request))
        delay = self.delays.get(model.id)
        if delay:
            await asyncio.sleep(delay)

        reply = self.replies.get(model.id, f"{model.id}: {request.prompt}")
        if isinstance(reply, Exception):
            raise reply
        if callable(reply):
            reply = reply(request)
        return ProviderCompletion(content=reply, usage=self.usage, metadata={"stub": True})


def make_test_providers() -> list[Provider]:
    """Three providers speaking the ``stub`` wire format.

    - alpha: m1 (tier 2), m2 (tier 1, 256 output tokens), streaming
    - beta: m3 (tier 1), cheaper, streaming + vision + tools
    - gamma: m4 (tier 0), two requests per minute
    """
    return [
        Provider(
            id="alpha",
            name="Alpha",
            api_format="stub",
            rate_limit=RateLimit(requests=100, window_ms=60_000),
            pricing=Pricing(input_per_1k=0.01, output_per_1k=0.02),
            capabilities=ProviderCapabilities(streaming=True),
            reliability=0.9,
            models=(
                Model(id="m1", provider_id="alpha", capabilities=("coding",), cost_tier=2),
                Model(
                    id="m2",
                    provider_id="alpha",
                    max_output_tokens=256,
                    capabilities=("general",),
                    cost_tier=1,
                ),
            ),
        ),
        Provider(
            id="beta",
            name="Beta",
            api_format="stub",
            rate_limit=RateLimit(requests=100, window_ms=60_000),
            pricing=Pricing(input_per_1k=0.001, output_per_1k=0.002),
            capabilities=ProviderCapabilities(streaming=True, vision=True, tools=True),
            reliability=0.95,
            models=(
                Model(id="m3", provider_id="beta", capabilities=("general", "coding"), cost_tier=1),
            ),
        ),
        Provider(
            id="gamma",
            name="Gamma",
            api_format="stub",
            rate_limit=RateLimit(requests=2, window_ms=60_000),
            pricing=Pricing(input_per_1k=0.0, output_per_1k=0.0),
            models=(Model(id="m4", provider_id="gamma", capabilities=("speed",), cost_tier=0),),
        ),
    ]


@pytest.fixture
def anyio_backend():
    """Configure anyio to use asyncio backend."""
    return "asyncio"


@pytest.fixture
def stub_adapter() -> StubAdapter:
    return StubAdapter()


@pytest.fixture
def catalog() -> ProviderCatalog:
    """Catalog holding the alpha, beta and gamma test providers."""
    return ProviderCatalog(make_test_providers())


@pytest.fixture
def router(catalog: ProviderCatalog, stub_adapter: StubAdapter) -> ModelRouter:
    """Router wired to the stub adapter."""
    return ModelRouter(
        catalog,
        RateLimiter(catalog),
        CostAccountant(catalog),
        {"stub": stub_adapter},
        usage=UsageTracker(),
    )


@pytest.fixture
def orchestrator(catalog: ProviderCatalog, stub_adapter: StubAdapter) -> Orchestrator:
    """Orchestrator over the test catalog with an in-memory record store."""
    config = OrchestratorConfig(default_model="m1", json_logs=False)
    return Orchestrator(config, catalog=catalog, adapters={"stub": stub_adapter})


@pytest.fixture
def request_factory() -> Callable[..., Request]:
    def factory(prompt: str = "What is 2+2?", **params: Any) -> Request:
        return Request(prompt=prompt, **params)

    return factory

"""Tests for the HTTP API."""

import pytest
from fastapi.testclient import TestClient

from modelweave.api.app import create_app
from modelweave.errors import ProviderError
from modelweave.orchestrator import Orchestrator

CHAIN = {
    "nodes": [
        {"id": "p1", "type": "prompt", "data": {"prompt": "X"}},
        {"id": "l1", "type": "llm", "data": {}},
        {"id": "o1", "type": "output", "data": {}},
    ],
    "edges": [{"source": "p1", "target": "l1"}, {"source": "l1", "target": "o1"}],
}

CYCLIC = {
    "nodes": [{"id": "a", "type": "prompt"}, {"id": "b", "type": "prompt"}],
    "edges": [{"source": "a", "target": "b"}, {"source": "b", "target": "a"}],
}


@pytest.fixture
def client(orchestrator: Orchestrator):
    with TestClient(create_app(orchestrator)) as test_client:
        yield test_client


class TestCallEndpoint:
    def test_call_success(self, client: TestClient) -> None:
        response = client.post(
            "/api/v1/llm/call", json={"prompt": "Hello", "model": "m1", "maxTokens": 10}
        )

        assert response.status_code == 200
        data = response.json()
        assert data["model_id"] == "m1"
        assert data["response"]["content"] == "m1: Hello"
        assert data["response"]["provider_id"] == "alpha"
        assert data["response"]["cost"] == pytest.approx(0.002)

    def test_unknown_model_is_404(self, client: TestClient) -> None:
        response = client.post("/api/v1/llm/call", json={"prompt": "Hi", "model": "ghost"})

        assert response.status_code == 404
        assert response.json()["code"] == "UNKNOWN_MODEL"
        assert response.json()["context"]["model_id"] == "ghost"

    def test_rate_limited_is_429_with_retry_after(self, client: TestClient) -> None:
        for _ in range(2):
            assert client.post("/api/v1/llm/call", json={"prompt": "Hi", "model": "m4"}).is_success

        response = client.post("/api/v1/llm/call", json={"prompt": "Hi", "model": "m4"})

        assert response.status_code == 429
        assert response.json()["code"] == "RATE_LIMITED"
        assert 1 <= int(response.headers["Retry-After"]) <= 60

    def test_provider_failure_is_502(self, client: TestClient, stub_adapter) -> None:
        stub_adapter.replies["m1"] = ProviderError("alpha", "upstream down", status_code=503)

        response = client.post("/api/v1/llm/call", json={"prompt": "Hi", "model": "m1"})

        assert response.status_code == 502
        assert response.json()["code"] == "PROVIDER_ERROR"

    def test_body_validation(self, client: TestClient) -> None:
        response = client.post("/api/v1/llm/call", json={"prompt": "", "model": "m1"})

        assert response.status_code == 422


class TestMultiEndpoint:
    def test_parallel_reports_failures(self, client: TestClient, stub_adapter) -> None:
        stub_adapter.replies["m3"] = ProviderError("beta", "nope", status_code=500)

        response = client.post(
            "/api/v1/llm/multi", json={"prompt": "Hi", "models": ["m1", "m3"]}
        )

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["strategy"] == "parallel"
        assert [r["model_id"] for r in data["responses"]] == ["m1"]
        assert data["failures"][0]["model_id"] == "m3"

    def test_run_id_follows_correlation_header(self, client: TestClient) -> None:
        response = client.post(
            "/api/v1/llm/multi",
            json={"prompt": "Hi", "models": ["m1"], "strategy": "cascade"},
            headers={"X-Correlation-ID": "corr-42"},
        )

        assert response.json()["run_id"] == "corr-42"
        assert response.headers["X-Correlation-ID"] == "corr-42"

    def test_consensus_threshold_alias(self, client: TestClient) -> None:
        response = client.post(
            "/api/v1/llm/multi",
            json={
                "prompt": "Hi",
                "models": ["m1", "m3"],
                "strategy": "consensus",
                "consensusThreshold": 3,
            },
        )

        assert response.json()["success"] is False
        assert response.json()["consensus"]["total"] == 2

    def test_unknown_strategy_is_400(self, client: TestClient) -> None:
        response = client.post(
            "/api/v1/llm/multi", json={"prompt": "Hi", "models": ["m1"], "strategy": "vote"}
        )

        assert response.status_code == 400
        assert response.json()["code"] == "UNKNOWN_STRATEGY"


class TestChainEndpoints:
    def test_execute(self, client: TestClient) -> None:
        response = client.post("/api/v1/chains/execute", json=CHAIN)

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["output"] == "m1: X"
        assert data["nodes_executed"] == 3

    def test_execute_wrapped_graph(self, client: TestClient) -> None:
        response = client.post("/api/v1/chains/execute", json={"chain": CHAIN})

        assert response.json()["output"] == "m1: X"

    def test_execute_cyclic_graph(self, client: TestClient, stub_adapter) -> None:
        response = client.post("/api/v1/chains/execute", json=CYCLIC)

        assert response.status_code == 400
        assert response.json()["error_code"] == "CYCLIC_GRAPH"
        assert stub_adapter.calls == []

    def test_execute_node_failure(self, client: TestClient) -> None:
        graph = {"nodes": [{"id": "t", "type": "tool", "data": {"toolName": "nope"}}]}

        response = client.post("/api/v1/chains/execute", json=graph)

        assert response.status_code == 400
        assert response.json()["failed_node_id"] == "t"

    def test_save_list_and_execute(self, client: TestClient) -> None:
        created = client.post(
            "/api/v1/chains",
            json={"name": "summarize", "description": "Summarize X", "graph": CHAIN},
        )

        assert created.status_code == 201
        chain_id = created.json()["id"]
        assert created.json()["graph"]["nodes"][0]["id"] == "p1"

        listed = client.get("/api/v1/chains")
        assert [c["name"] for c in listed.json()] == ["summarize"]

        executed = client.post(f"/api/v1/chains/{chain_id}/execute")
        assert executed.status_code == 200
        assert executed.json()["output"] == "m1: X"

    def test_save_rejects_invalid_graphs(self, client: TestClient) -> None:
        cyclic = client.post("/api/v1/chains", json={"name": "loop", "graph": CYCLIC})
        dangling = client.post(
            "/api/v1/chains",
            json={
                "name": "dangling",
                "graph": {"nodes": [{"id": "a", "type": "prompt"}], "edges": [{"source": "a", "target": "z"}]},
            },
        )

        assert cyclic.status_code == 400
        assert cyclic.json()["code"] == "CYCLIC_GRAPH"
        assert dangling.status_code == 400
        assert dangling.json()["code"] == "INVALID_GRAPH"
        assert client.get("/api/v1/chains").json() == []

    def test_unknown_saved_chain(self, client: TestClient) -> None:
        response = client.post("/api/v1/chains/missing/execute")

        assert response.status_code == 404
        assert response.json()["code"] == "CHAIN_NOT_FOUND"


class TestCatalogEndpoints:
    def test_list_models_with_filter(self, client: TestClient) -> None:
        response = client.get(
            "/api/v1/models", params={"capability": "general", "max_cost_tier": 1}
        )

        assert response.status_code == 200
        assert sorted(m["id"] for m in response.json()) == ["m2", "m3"]

    def test_list_models_by_provider(self, client: TestClient) -> None:
        response = client.get("/api/v1/models", params=[("provider", "gamma"), ("provider", "beta")])

        assert sorted(m["id"] for m in response.json()) == ["m3", "m4"]

    def test_list_providers(self, client: TestClient) -> None:
        client.post("/api/v1/llm/call", json={"prompt": "Hi", "model": "m1"})

        response = client.get("/api/v1/providers")

        providers = {p["id"]: p for p in response.json()}
        assert set(providers) == {"alpha", "beta", "gamma"}
        assert providers["alpha"]["requests"] == 1
        assert providers["alpha"]["window_count"] == 1
        assert providers["alpha"]["total_cost"] == pytest.approx(0.002)
        assert providers["gamma"]["rate_limit"]["requests"] == 2


class TestHealthAndMetrics:
    def test_health(self, client: TestClient) -> None:
        response = client.get("/api/v1/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["components"]["record_store"]["status"] == "healthy"

    def test_health_degraded_when_provider_down(
        self, client: TestClient, orchestrator: Orchestrator
    ) -> None:
        for _ in range(10):
            orchestrator.usage.record_call("beta", 10.0, success=False)

        response = client.get("/api/v1/health")

        assert response.status_code == 200
        assert response.json()["status"] == "degraded"
        assert "beta" in response.json()["components"]["catalog"]["message"]

    def test_metrics(self, client: TestClient) -> None:
        client.post("/api/v1/llm/call", json={"prompt": "Hi", "model": "m1"})

        response = client.get("/metrics")

        assert response.status_code == 200
        assert "modelweave_provider_calls_total" in response.text
        assert "modelweave_http_requests_total" in response.text

    def test_generated_correlation_id(self, client: TestClient) -> None:
        response = client.get("/api/v1/health")

        assert len(response.headers["X-Correlation-ID"]) == 16


def test_requests_before_startup_are_503() -> None:
    client = TestClient(create_app())

    response = client.get("/api/v1/health")

    assert response.status_code == 503
    assert response.json()["code"] == "ORCHESTRATOR_UNAVAILABLE"

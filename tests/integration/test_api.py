"""
API integration tests
"""

import pytest
from fastapi.testclient import TestClient
from unittest.mock import AsyncMock, Mock

from cryptolens.adapters.event_sink_adapter import RecordingEventSink
from cryptolens.api.main import create_app
from cryptolens.api.dependencies import get_orchestrator
from cryptolens.domain.models import (
    QueryCategory,
    QueryIntent,
    QueryMetadata,
    QueryResult,
    RecordKind,
    ResolutionSource,
)
from cryptolens.infrastructure.errors import InternalFailure, InvalidInputError
from cryptolens.orchestrator.orchestrator import create_orchestrator


@pytest.fixture
def price_result(price_factory):
    """A finished SOL price query"""
    return QueryResult(
        query="What's the SOL price?",
        answer="Current prices: SOL: $178.45",
        records=(price_factory(),),
        metadata=QueryMetadata(kind=RecordKind.PRICE, providers=("coingecko",), total_count=1),
        intent=QueryIntent(category=QueryCategory.PRICE, symbols=("SOL",)),
        resolution_source=ResolutionSource.FALLBACK,
        elapsed_ms=34,
    )


@pytest.fixture
def mock_orchestrator(price_result):
    """Orchestrator double returning the SOL price result"""
    orchestrator = Mock()
    orchestrator.handle_query = AsyncMock(return_value=price_result)
    return orchestrator


@pytest.fixture
def test_client(mock_orchestrator):
    """Test client with the orchestrator overridden"""
    app = create_app()
    app.dependency_overrides[get_orchestrator] = lambda: mock_orchestrator
    return TestClient(app, raise_server_exceptions=False)


class TestHealthEndpoints:
    """Health endpoint tests"""

    def test_root(self, test_client):
        response = test_client.get("/")
        assert response.status_code == 200
        assert response.json()["query"] == "/api/v1/query"

    def test_health_check(self, test_client):
        response = test_client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["services"]["defillama"] is True
        assert data["services"]["synthetic_fallback"] is True
        assert "token_launch" in data["capabilities"]
        assert "general_market" in data["capabilities"]

    def test_ready_check(self, test_client):
        response = test_client.get("/ready")
        assert response.status_code == 200
        assert response.json() == {"ready": True}

    def test_live_check(self, test_client):
        response = test_client.get("/live")
        assert response.status_code == 200
        assert response.json() == {"alive": True}


class TestQueryEndpoint:
    """POST /api/v1/query tests"""

    def test_success(self, test_client, mock_orchestrator):
        response = test_client.post("/api/v1/query", json={"query": "  What's the SOL price?  "})

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["answer"] == "Current prices: SOL: $178.45"
        assert data["data"][0]["kind"] == "price"
        assert data["metadata"] == {"kind": "price", "sources": ["coingecko"], "total_results": 1}
        assert data["resolution"] == "fallback"
        assert data["elapsed_ms"] == 34
        mock_orchestrator.handle_query.assert_awaited_once_with("What's the SOL price?")

    def test_request_id_echoed(self, test_client):
        response = test_client.post(
            "/api/v1/query",
            json={"query": "SOL price"},
            headers={"X-Request-ID": "req-123"},
        )
        assert response.headers["X-Request-ID"] == "req-123"
        assert "X-Response-Time" in response.headers
        assert response.json()["request_id"] == "req-123"

    @pytest.mark.parametrize("body", [{}, {"query": ""}, {"query": "   "}, {"query": "x" * 1001}, {"query": 5}])
    def test_invalid_body_is_client_error(self, test_client, mock_orchestrator, body):
        response = test_client.post("/api/v1/query", json=body)

        assert response.status_code == 400
        assert response.json()["error_code"] == "invalid_input"
        mock_orchestrator.handle_query.assert_not_awaited()

    def test_invalid_input_from_orchestrator(self, test_client, mock_orchestrator):
        mock_orchestrator.handle_query.side_effect = InvalidInputError("Query must be a non-empty string", field="query")

        response = test_client.post("/api/v1/query", json={"query": "?"})

        assert response.status_code == 400
        assert response.json()["details"] == {"field": "query"}

    def test_internal_failure(self, test_client, mock_orchestrator):
        mock_orchestrator.handle_query.side_effect = InternalFailure(elapsed_ms=57, cause=RuntimeError("boom"))

        response = test_client.post("/api/v1/query", json={"query": "SOL price"})

        assert response.status_code == 500
        data = response.json()
        assert data["error_code"] == "internal_error"
        assert data["error_message"] == InternalFailure.GENERIC_MESSAGE
        assert data["details"] == {"elapsed_ms": 57}

    def test_unexpected_exception(self, test_client, mock_orchestrator):
        mock_orchestrator.handle_query.side_effect = RuntimeError("boom")

        response = test_client.post("/api/v1/query", json={"query": "SOL price"})

        assert response.status_code == 500
        assert response.json()["error_code"] == "internal_error"
        assert "boom" not in response.text


class TestQueryPipeline:
    """Full pipeline behind the API, with providers replaced by test doubles"""

    @pytest.fixture
    def pipeline_client(self, fake_chains):
        app = create_app()
        orchestrator = create_orchestrator(fake_chains(), RecordingEventSink())
        app.dependency_overrides[get_orchestrator] = lambda: orchestrator
        return TestClient(app)

    def test_pumpfun_query_answers_from_synthetic_data(self, pipeline_client):
        response = pipeline_client.post(
            "/api/v1/query",
            json={"query": "How many pump.fun tokens launched in the last hour are above $19,000 market cap?"},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["intent"]["category"] == "token_launch"
        assert data["intent"]["threshold"] == 19000
        assert data["metadata"]["sources"] == ["synthetic"]
        assert len(data["data"]) == 20
        assert all(record["market_cap"] > 19000 for record in data["data"])
        assert data["answer"].startswith("Found 20 pump.fun tokens above $19,000 market cap")

    def test_defi_query(self, pipeline_client):
        response = pipeline_client.post("/api/v1/query", json={"query": "Top DeFi protocols on Solana by TVL"})

        data = response.json()
        assert data["intent"]["chain"] == "Solana"
        assert data["metadata"]["kind"] == "protocol"
        assert all("Solana" in record["chains"] for record in data["data"])

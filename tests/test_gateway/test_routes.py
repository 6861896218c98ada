"""
Tests for the HTTP gateway routes.

The converter and executor are replaced through FastAPI dependency
overrides, so the lifespan (Neo4j, Ollama) never runs.
Run with: pytest tests/test_gateway/test_routes.py -v
"""

from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient
from neo4j.graph import Graph, Node

from conftest import FakeHandler, FakeResult, FakeSession
from cypher_bridge.gateway.app import create_app
from cypher_bridge.gateway.config import GatewaySettings
from cypher_bridge.gateway.dependencies import get_converter, get_executor
from cypher_bridge.pipeline import QueryExecutor
from cypher_bridge.pipeline.models import ConversionResult, ExecutionResult
from cypher_bridge.shared.exceptions import ExecutionError

CYPHER = "MATCH (d:Document) RETURN d"


def conversion_ok(query: str = CYPHER) -> ConversionResult:
    return ConversionResult(
        success=True, query=query, duration_ms=12, timestamp="2024-01-01T00:00:00+00:00"
    )


def conversion_failed(error: str, stage: str) -> ConversionResult:
    return ConversionResult(
        success=False, error=error, stage=stage, duration_ms=3,
        timestamp="2024-01-01T00:00:00+00:00",
    )


def execution_ok(rows: list[dict]) -> ExecutionResult:
    return ExecutionResult(
        success=True, rows=rows, row_count=len(rows), query=CYPHER,
        execution_time_ms=7, timestamp="2024-01-01T00:00:00+00:00",
    )


@pytest.fixture
def pipeline():
    converter = AsyncMock()
    executor = AsyncMock()
    return converter, executor


@pytest.fixture
def client(pipeline):
    converter, executor = pipeline
    app = create_app(GatewaySettings(service_name="QMS Document Query API"))
    app.dependency_overrides[get_converter] = lambda: converter
    app.dependency_overrides[get_executor] = lambda: executor
    return TestClient(app)


# ──────────────────────────────────────────────────
# GET /health
# ──────────────────────────────────────────────────


class TestHealth:

    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "ok"
        assert body["service"] == "QMS Document Query API"
        assert body["timestamp"]


# ──────────────────────────────────────────────────
# POST /ask
# ──────────────────────────────────────────────────


class TestAsk:

    def test_success(self, client, pipeline):
        converter, executor = pipeline
        converter.convert.return_value = conversion_ok()
        executor.execute.return_value = execution_ok(
            [{"d": {"name": "Safety Manual"}}, {"d": {"name": "Quality Policy"}}]
        )

        response = client.post("/ask", json={"query": "Show me all documents"})

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["query"] == "Show me all documents"
        assert body["cypher"] == CYPHER
        assert body["data"] == [{"d": {"name": "Safety Manual"}}, {"d": {"name": "Quality Policy"}}]
        assert body["count"] == 2
        assert body["executionTime"] == 7
        assert body["timestamp"]
        converter.convert.assert_awaited_once_with("Show me all documents")
        executor.execute.assert_awaited_once_with(CYPHER)

    def test_zero_rows(self, client, pipeline):
        converter, executor = pipeline
        converter.convert.return_value = conversion_ok()
        executor.execute.return_value = execution_ok([])

        response = client.post("/ask", json={"query": "Documents about nothing"})

        assert response.status_code == 200
        assert response.json()["count"] == 0
        assert response.json()["data"] == []

    def test_nested_graph_values_serialise(self, pipeline):
        converter, _ = pipeline
        converter.convert.return_value = conversion_ok(
            "MATCH (d:Document) RETURN {doc: d} AS m, collect(d) AS docs"
        )
        document = Node(Graph(), "4:qms:1", 1, {"Document"}, {"title": "SOP-1"})
        session = FakeSession(FakeResult([{"m": {"doc": document}, "docs": [document]}]))
        app = create_app(GatewaySettings())
        app.dependency_overrides[get_converter] = lambda: converter
        app.dependency_overrides[get_executor] = lambda: QueryExecutor(FakeHandler(session))

        response = TestClient(app).post("/ask", json={"query": "Wrap each document in a map"})

        assert response.status_code == 200
        assert response.json()["data"] == [
            {"m": {"doc": {"title": "SOP-1"}}, "docs": [{"title": "SOP-1"}]}
        ]

    @pytest.mark.parametrize("payload", [
        {},
        {"query": ""},
        {"query": "   "},
        {"query": 42},
        {"query": None},
        {"question": "Show me all documents"},
    ])
    def test_invalid_input_is_400(self, client, pipeline, payload):
        converter, _ = pipeline

        response = client.post("/ask", json=payload)

        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "Invalid request"
        assert "non-empty string" in body["message"]
        converter.convert.assert_not_awaited()

    def test_conversion_failure(self, client, pipeline):
        converter, executor = pipeline
        converter.convert.return_value = conversion_failed(
            "Security violation: Query contains write operation 'DELETE'", "security"
        )

        response = client.post("/ask", json={"query": "Delete every document"})

        assert response.status_code == 500
        body = response.json()
        assert body["error"] == "Query conversion failed"
        assert "DELETE" in body["message"]
        assert body["step"] == "llm_conversion"
        executor.execute.assert_not_awaited()

    def test_execution_failure(self, client, pipeline):
        converter, executor = pipeline
        converter.convert.return_value = conversion_ok()
        executor.execute.side_effect = ExecutionError("Unknown label Documnt", query=CYPHER)

        response = client.post("/ask", json={"query": "Show me all documents"})

        assert response.status_code == 500
        body = response.json()
        assert body["error"] == "Database query failed"
        assert body["message"] == "Unknown label Documnt"
        assert body["cypher"] == CYPHER
        assert body["step"] == "database_execution"

    def test_unexpected_failure(self, client, pipeline):
        converter, _ = pipeline
        converter.convert.side_effect = RuntimeError("event loop closed")

        response = client.post("/ask", json={"query": "Show me all documents"})

        assert response.status_code == 500
        body = response.json()
        assert body["error"] == "Internal server error"
        assert body["message"] == "event loop closed"
        assert body["step"] == "general"

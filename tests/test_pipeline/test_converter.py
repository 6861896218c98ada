"""
Tests for the Conversion Orchestrator with a stubbed language model.

Run with: pytest tests/test_pipeline/test_converter.py -v
"""

from datetime import datetime

import pytest

from conftest import StubGateway
from cypher_bridge.pipeline import CypherConverter
from cypher_bridge.pipeline.guard import KeywordReadOnlyPolicy
from cypher_bridge.shared.exceptions import GatewayError


@pytest.fixture
def make_converter(prompt_context):
    def _make(completion: str = "", error: Exception | None = None, **kwargs):
        gateway = StubGateway(completion=completion, error=error)
        return CypherConverter(gateway, prompt_context, **kwargs), gateway
    return _make


class TestConversionScenarios:
    """End-to-end conversions through every stage."""

    async def test_show_all_documents(self, make_converter, prompt_context):
        converter, gateway = make_converter(
            'Here is your query: {"query": "MATCH (d:Document) RETURN d"}'
        )

        result = await converter.convert("Show me all documents")

        assert result.success is True
        assert result.query == "MATCH (d:Document) RETURN d"
        assert result.error is None
        assert result.duration_ms >= 0
        assert gateway.calls == [(prompt_context, "Show me all documents")]

    async def test_delete_is_rejected(self, make_converter):
        converter, _ = make_converter('{"query": "MATCH (d) DELETE d RETURN d"}')

        result = await converter.convert("Remove every document")

        assert result.success is False
        assert result.query is None
        assert "DELETE" in result.error
        assert result.stage == "security"

    async def test_no_json_at_all(self, make_converter):
        converter, _ = make_converter("I am not sure how to help with that.")

        result = await converter.convert("What is the meaning of life?")

        assert result.success is False
        assert "no json found" in result.error.lower()
        assert result.duration_ms >= 0
        assert result.stage == "extraction"

    async def test_missing_return(self, make_converter):
        converter, _ = make_converter('{"query": "MATCH (d:Document)"}')

        result = await converter.convert("Documents?")

        assert result.success is False
        assert "RETURN" in result.error

    async def test_wrong_field_name(self, make_converter):
        converter, _ = make_converter('{"cypher": "MATCH (d:Document) RETURN d"}')

        result = await converter.convert("Show me all documents")

        assert result.success is False
        assert result.error.startswith("Invalid response format:")
        assert result.stage == "validation"

    async def test_gateway_failure(self, make_converter):
        converter, _ = make_converter(
            error=GatewayError("500 Internal Server Error", status_code=500, body="boom")
        )

        result = await converter.convert("Show me all documents")

        assert result.success is False
        assert result.error.startswith("LLM gateway error:")
        assert result.stage == "llm_gateway"

    async def test_timestamp_is_iso8601(self, make_converter):
        converter, _ = make_converter('{"query": "MATCH (n) RETURN n"}')

        result = await converter.convert("anything")

        assert datetime.fromisoformat(result.timestamp).tzinfo is not None


class TestConverterWiring:
    """Injection points and short-circuiting."""

    async def test_custom_policy_is_used(self, make_converter):
        converter, _ = make_converter(
            '{"query": "MATCH (n) RETURN n LIMIT 5"}',
            policy=KeywordReadOnlyPolicy(forbidden=("LIMIT",)),
        )

        result = await converter.convert("first five")

        assert result.success is False
        assert "'LIMIT'" in result.error

    async def test_later_stages_skipped_after_failure(self, make_converter):
        seen = []

        def validator(parsed):
            seen.append(parsed)
            raise AssertionError("validator must not run")

        converter, _ = make_converter("no json here", validator=validator)

        result = await converter.convert("anything")

        assert result.success is False
        assert seen == []

    async def test_unexpected_errors_propagate(self, make_converter):
        converter, _ = make_converter(error=RuntimeError("bug"))

        with pytest.raises(RuntimeError, match="bug"):
            await converter.convert("anything")

    async def test_result_is_immutable(self, make_converter):
        converter, _ = make_converter('{"query": "MATCH (n) RETURN n"}')
        result = await converter.convert("anything")

        with pytest.raises(Exception):
            result.success = False

"""
Tool implementations behind the MCP ``generate`` and ``query`` tools.

Each function returns a plain dict ready for JSON serialisation; the
server module only wraps them as MCP tools.
"""

import logging
from typing import Any

from langfuse import observe

from cypher_bridge.pipeline import (
    CypherConverter,
    ExecutionResult,
    KeywordReadOnlyPolicy,
    QueryExecutor,
    QueryPolicy,
)
from cypher_bridge.pipeline.models import utc_timestamp
from cypher_bridge.shared.exceptions import ExecutionError, SecurityError

logger = logging.getLogger("cypher_bridge.cypher_tools.tools")


def execution_payload(result: ExecutionResult) -> dict[str, Any]:
    """Wire shape of an execution outcome."""
    if not result.success:
        return {
            "success": False,
            "error": result.error,
            "cypher": result.query,
            "timestamp": result.timestamp,
        }
    return {
        "success": True,
        "data": result.rows,
        "count": result.row_count,
        "cypher": result.query,
        "executionTime": result.execution_time_ms,
        "timestamp": result.timestamp,
    }


@observe(name="cypher_tools_generate", as_type="span")
async def generate_cypher(converter: CypherConverter, query: str) -> dict[str, Any]:
    """Convert a natural-language question into read-only Cypher."""
    logger.info('Converting NL to Cypher via MCP: "%s"', query)
    try:
        result = await converter.convert(query)
    except Exception as exc:
        logger.exception("MCP Cypher generation failed: %s", exc)
        return {
            "success": False,
            "error": str(exc),
            "query": query,
            "timestamp": utc_timestamp(),
        }

    if result.success:
        logger.info("MCP Cypher generation successful: %s", result.query)
        return {
            "success": True,
            "cypher": result.query,
            "query": query,
            "duration": result.duration_ms,
            "timestamp": result.timestamp,
        }

    logger.error("MCP Cypher generation failed: %s", result.error)
    return {
        "success": False,
        "error": result.error,
        "query": query,
        "duration": result.duration_ms,
        "timestamp": result.timestamp,
    }


@observe(name="cypher_tools_query", as_type="span")
async def run_query(
    executor: QueryExecutor,
    cypher: str,
    params: dict[str, Any] | None = None,
    policy: QueryPolicy | None = None,
) -> dict[str, Any]:
    """Check *cypher* against the read-only policy, then execute it."""
    policy = policy or KeywordReadOnlyPolicy()
    try:
        policy.check(cypher)
    except SecurityError as exc:
        return {
            "success": False,
            "error": str(exc),
            "code": exc.code,
            "cypher": cypher,
            "timestamp": utc_timestamp(),
        }

    logger.info("Executing Cypher via MCP: %s", cypher)
    try:
        result = await executor.execute(cypher, params or {})
    except ExecutionError as exc:
        logger.error("MCP Neo4j query failed: %s", exc)
        result = ExecutionResult(
            success=False,
            query=cypher,
            error=exc.message,
            timestamp=utc_timestamp(),
        )

    return execution_payload(result)

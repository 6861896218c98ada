"""NL → Cypher conversion and execution pipeline shared by the HTTP and MCP surfaces."""

from cypher_bridge.pipeline.converter import CypherConverter
from cypher_bridge.pipeline.executor import QueryExecutor
from cypher_bridge.pipeline.guard import KeywordReadOnlyPolicy, QueryPolicy, enforce_read_only
from cypher_bridge.pipeline.models import (
    ConversionResult,
    ExecutionResult,
    ExtractedPayload,
    PromptContext,
)
from cypher_bridge.pipeline.prompt_store import load_prompt_context

__all__ = [
    "ConversionResult",
    "CypherConverter",
    "ExecutionResult",
    "ExtractedPayload",
    "KeywordReadOnlyPolicy",
    "PromptContext",
    "QueryExecutor",
    "QueryPolicy",
    "enforce_read_only",
    "load_prompt_context",
]

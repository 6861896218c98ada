"""
Cypher Tools — MCP Server

Exposes the two pipeline operations as MCP tools so other agents can
call them:

* ``generate`` — natural language → read-only Cypher
* ``query``    — run a read-only Cypher query against Neo4j

Served over the streamable HTTP transport at ``/mcp``, next to
``/health`` and ``/sessions`` (debugging).  Sessions are tracked by
``SessionTrackingMiddleware``; on shutdown the session manager closes
open transports before the Neo4j driver and the Ollama client go away.

Run as:  python -m cypher_bridge.agents.cypher_tools.server
"""

import json
from contextlib import asynccontextmanager
from typing import Any

from mcp.server.fastmcp import FastMCP
from mcp.server.transport_security import TransportSecuritySettings
from mcp.types import CallToolResult, TextContent
from starlette.applications import Starlette
from starlette.middleware import Middleware
from starlette.middleware.cors import CORSMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.routing import Mount, Route

from cypher_bridge.agents.cypher_tools.config import CypherToolsSettings
from cypher_bridge.agents.cypher_tools.sessions import (
    SESSION_HEADER,
    SessionRegistry,
    SessionTrackingMiddleware,
)
from cypher_bridge.agents.cypher_tools.tools import generate_cypher, run_query
from cypher_bridge.pipeline import (
    CypherConverter,
    KeywordReadOnlyPolicy,
    QueryExecutor,
    QueryPolicy,
    load_prompt_context,
)
from cypher_bridge.pipeline.models import utc_timestamp
from cypher_bridge.shared.database import Neo4jHandler
from cypher_bridge.shared.llms import get_ollama_gateway
from cypher_bridge.shared.logging import setup_logging
from cypher_bridge.shared.observability import init_langfuse, shutdown_langfuse

logger = setup_logging("cypher_bridge.cypher_tools.server", level="INFO")

TOOL_NAMES = ["generate", "query"]
MCP_PATH = "/mcp"


def tool_result(payload: dict[str, Any]) -> CallToolResult:
    """Wrap a tool payload as JSON text, flagging failures with isError."""
    return CallToolResult(
        content=[TextContent(type="text", text=json.dumps(payload, default=str))],
        isError=not payload["success"],
    )


def build_mcp(
    converter: CypherConverter,
    executor: QueryExecutor,
    policy: QueryPolicy | None = None,
    transport_security: TransportSecuritySettings | None = None,
) -> FastMCP:
    """Create the FastMCP server with both tools bound to the given pipeline."""
    policy = policy or KeywordReadOnlyPolicy()
    mcp = FastMCP(
        "CypherTools",
        transport_security=transport_security,
        streamable_http_path=MCP_PATH,
    )

    # ─── Tool 1 ──────────────────────────────────────────────

    @mcp.tool(name="generate")
    async def generate(query: str) -> CallToolResult:
        """Convert a natural-language question into a read-only Cypher query.

        The question is translated by the local LLM using the QMS graph
        schema (documents, training plans, sessions and courses), then
        checked against the read-only policy.  Nothing is executed.

        Args:
            query: The question, e.g. "Show me all training plans".

        Returns JSON: {success, cypher | error, query, duration, timestamp}.
        Failed conversions are flagged with isError.
        """
        return tool_result(await generate_cypher(converter, query))

    # ─── Tool 2 ──────────────────────────────────────────────

    @mcp.tool(name="query")
    async def query(cypher: str, params: dict[str, Any] | None = None) -> CallToolResult:
        """Run a read-only Cypher query against the QMS Neo4j database.

        Queries containing CREATE, DELETE, MERGE, SET, REMOVE, DROP or
        DETACH, or lacking RETURN, are rejected with code
        SECURITY_VIOLATION or MISSING_RETURN.

        Args:
            cypher: Cypher query string.  Use $name placeholders for values.
            params: Optional query parameters, e.g. {"title": "Safety"}.

        Returns JSON: {success, data | error, count, cypher, executionTime, timestamp}.
        Rejected or failed queries are flagged with isError.
        """
        return tool_result(await run_query(executor, cypher, params, policy=policy))

    return mcp


def _transport_security(settings: CypherToolsSettings) -> TransportSecuritySettings:
    port = settings.mcp_port
    return TransportSecuritySettings(
        enable_dns_rebinding_protection=False,
        allowed_hosts=[*settings.mcp_allowed_hosts]
        + [f"{host}:{port}" for host in settings.mcp_allowed_hosts],
        allowed_origins=settings.mcp_allowed_origins,
    )


def create_app(
    settings: CypherToolsSettings | None = None,
    converter: CypherConverter | None = None,
    executor: QueryExecutor | None = None,
) -> Starlette:
    """Build the ASGI app serving the MCP endpoint, /health and /sessions.

    Components not passed in are built from *settings*; those are the
    ones the lifespan connects and closes.
    """
    settings = settings or CypherToolsSettings()
    registry = SessionRegistry()

    gateway = None
    handler = None
    if converter is None:
        gateway = get_ollama_gateway(settings)
        converter = CypherConverter(gateway, load_prompt_context(settings.system_prompt_path))
    if executor is None:
        handler = Neo4jHandler.from_settings(settings)
        executor = QueryExecutor(handler)

    mcp = build_mcp(converter, executor, transport_security=_transport_security(settings))
    mcp_app = mcp.streamable_http_app()

    @asynccontextmanager
    async def lifespan(app: Starlette):
        init_langfuse()
        if handler is not None:
            await handler.connect()
            logger.info("Neo4j: %s (db %s)", handler.uri, handler.database)
        logger.info("Cypher Tools MCP server ready at %s", MCP_PATH)
        try:
            async with mcp.session_manager.run():
                yield
        finally:
            logger.info("Shutting down MCP server gracefully...")
            registry.clear()
            if gateway is not None:
                await gateway.close()
            if handler is not None:
                await handler.close()
            shutdown_langfuse()
            logger.info("MCP server shutdown complete")

    async def health(request: Request) -> JSONResponse:
        return JSONResponse({
            "status": "ok",
            "service": settings.service_name,
            "version": settings.version,
            "timestamp": utc_timestamp(),
            "endpoints": {"mcp": MCP_PATH, "health": "/health", "sessions": "/sessions"},
            "tools": TOOL_NAMES,
        })

    async def sessions(request: Request) -> JSONResponse:
        return JSONResponse({
            "activeSessions": registry.active(),
            "count": len(registry),
            "timestamp": utc_timestamp(),
        })

    app = Starlette(
        routes=[
            Route("/health", health, methods=["GET"]),
            Route("/sessions", sessions, methods=["GET"]),
            Mount("/", app=mcp_app),
        ],
        middleware=[
            Middleware(
                CORSMiddleware,
                allow_origins=settings.mcp_allowed_origins,
                allow_credentials=True,
                allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
                allow_headers=["Content-Type", SESSION_HEADER, "mcp-protocol-version"],
                expose_headers=[SESSION_HEADER],
            ),
            Middleware(SessionTrackingMiddleware, registry=registry, path=MCP_PATH),
        ],
        lifespan=lifespan,
    )
    app.state.session_registry = registry
    app.state.settings = settings
    return app


# ─── Entry point ──────────────────────────────────────────

if __name__ == "__main__":
    import uvicorn

    settings = CypherToolsSettings()
    logger.info(
        f"Starting Cypher Tools MCP server (streamable HTTP on "
        f"{settings.mcp_host}:{settings.mcp_port}{MCP_PATH})"
    )

    uvicorn.run(
        "cypher_bridge.agents.cypher_tools.server:create_app",
        factory=True,
        host=settings.mcp_host,
        port=settings.mcp_port,
        log_level="info",
    )

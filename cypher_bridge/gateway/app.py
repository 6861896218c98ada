"""
FastAPI Gateway — HTTP API for the browser UI.

Builds the conversion pipeline once at startup (prompt, Ollama client,
Neo4j driver) and hands it to routes through ``app.state``.  On shutdown
uvicorn stops accepting requests and drains in-flight ones before the
lifespan closes the driver and the HTTP client.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from cypher_bridge.gateway.config import GatewaySettings
from cypher_bridge.gateway.routes import ask, health
from cypher_bridge.pipeline import CypherConverter, QueryExecutor, load_prompt_context
from cypher_bridge.shared.database import Neo4jHandler
from cypher_bridge.shared.llms import get_ollama_gateway
from cypher_bridge.shared.logging import setup_logging
from cypher_bridge.shared.observability import (
    LangfuseMiddleware,
    init_langfuse,
    is_langfuse_enabled,
    shutdown_langfuse,
)

logger = setup_logging("cypher_bridge.gateway.app", level="INFO")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create the shared pipeline components on startup, close them on shutdown."""
    settings: GatewaySettings = app.state.settings
    logger.info("Starting %s", settings.service_name)

    init_langfuse()
    if is_langfuse_enabled():
        logger.info("Langfuse observability enabled")
    else:
        logger.info("Langfuse observability disabled")

    prompt_context = load_prompt_context(settings.system_prompt_path)
    handler = await Neo4jHandler.from_settings(settings).connect()
    gateway = get_ollama_gateway(settings)

    app.state.converter = CypherConverter(gateway, prompt_context)
    app.state.executor = QueryExecutor(handler)
    logger.info("Neo4j: %s (db %s)", handler.uri, handler.database)
    logger.info("Ollama: %s (model %s)", settings.ollama_url, settings.ollama_model)

    try:
        yield
    finally:
        logger.info("Shutting down %s", settings.service_name)
        await gateway.close()
        await handler.close()
        shutdown_langfuse()


async def _invalid_request(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.warning("Rejected request to %s: %s", request.url.path, exc.errors())
    return JSONResponse(
        status_code=400,
        content={
            "error": "Invalid request",
            "message": ask.INVALID_QUERY_MESSAGE,
        },
    )


def create_app(settings: GatewaySettings | None = None) -> FastAPI:
    """Build the FastAPI application."""
    settings = settings or GatewaySettings()

    app = FastAPI(
        title="Cypher Bridge - QMS Document Query API",
        description="Ask questions in plain language, get rows from the QMS Neo4j graph",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(LangfuseMiddleware)

    app.add_exception_handler(RequestValidationError, _invalid_request)

    app.include_router(ask.router, tags=["Ask"])
    app.include_router(health.router, tags=["Health"])
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "cypher_bridge.gateway.app:app",
        host=app.state.settings.host,
        port=app.state.settings.port,
        reload=False,
        log_level="info",
    )

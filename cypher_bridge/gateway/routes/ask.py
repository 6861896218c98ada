"""
Ask route — POST /ask.

Converts the question to Cypher, runs it, and returns the rows.  Failures
carry a ``step`` telling the UI which phase broke: ``llm_conversion``,
``database_execution`` or ``general``.
"""

from typing import Any

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from langfuse import observe
from pydantic import BaseModel, ConfigDict, Field, StrictStr, field_validator

from cypher_bridge.gateway.dependencies import get_converter, get_executor
from cypher_bridge.pipeline import CypherConverter, QueryExecutor
from cypher_bridge.pipeline.models import utc_timestamp
from cypher_bridge.shared.exceptions import ExecutionError
from cypher_bridge.shared.logging import generate_request_id, setup_logging

logger = setup_logging("cypher_bridge.gateway.ask", level="INFO")

router = APIRouter()

INVALID_QUERY_MESSAGE = "Query parameter is required and must be a non-empty string"


# ─── Request/Response Models ────────────────────────────────


class AskRequest(BaseModel):
    """Request model for POST /ask."""

    query: StrictStr = Field(..., description="Natural-language question")

    @field_validator("query")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError(INVALID_QUERY_MESSAGE)
        return value


class AskResponse(BaseModel):
    """Response model for a successful POST /ask."""

    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    query: str = Field(..., description="The question as asked")
    cypher: str = Field(..., description="Generated read-only Cypher")
    data: list[dict[str, Any]] = Field(default_factory=list, description="Result rows")
    count: int = Field(..., description="Number of rows")
    execution_time: float = Field(
        ..., alias="executionTime", description="Driver-reported time in ms"
    )
    timestamp: str


def _error(status_code: int, **content: Any) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=content)


# ─── POST /ask ──────────────────────────────────────────────


@router.post("/ask", response_model=AskResponse, response_model_by_alias=True)
@observe(name="ask", as_type="span", capture_input=False)
async def ask(
    body: AskRequest,
    converter: CypherConverter = Depends(get_converter),
    executor: QueryExecutor = Depends(get_executor),
):
    """Answer a natural-language question with rows from Neo4j."""
    request_id = generate_request_id()
    question = body.query
    logger.info('[%s] Received query: "%s"', request_id, question)

    try:
        conversion = await converter.convert(question)
        if not conversion.success:
            logger.error("[%s] LLM conversion failed: %s", request_id, conversion.error)
            return _error(
                500,
                error="Query conversion failed",
                message=conversion.error,
                step="llm_conversion",
            )

        cypher = conversion.query
        logger.info("[%s] Generated Cypher: %s", request_id, cypher)

        try:
            execution = await executor.execute(cypher)
        except ExecutionError as exc:
            logger.error("[%s] Database execution failed: %s", request_id, exc)
            return _error(
                500,
                error="Database query failed",
                message=exc.message,
                cypher=cypher,
                step="database_execution",
            )

        logger.info("[%s] Query successful: %d records", request_id, execution.row_count)
        return AskResponse(
            query=question,
            cypher=cypher,
            data=execution.rows,
            count=execution.row_count,
            execution_time=execution.execution_time_ms,
            timestamp=utc_timestamp(),
        )

    except Exception as exc:
        logger.exception("[%s] Unexpected error: %s", request_id, exc)
        return _error(
            500,
            error="Internal server error",
            message=str(exc),
            step="general",
        )

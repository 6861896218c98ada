"""
Request-scoped value objects passed between pipeline stages.

Everything here is immutable once built; a new instance is created per
question or per query execution.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, StrictStr, field_validator


def utc_timestamp() -> str:
    """ISO-8601 timestamp in UTC, used on every result."""
    return datetime.now(timezone.utc).isoformat()


@dataclass(frozen=True)
class PromptContext:
    """The schema-describing system prompt, loaded once per process."""

    text: str
    source: str = ""


class ExtractedPayload(BaseModel):
    """The JSON object the model is instructed to emit."""

    model_config = ConfigDict(frozen=True)

    query: StrictStr

    @field_validator("query")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be empty")
        return value


class ConversionResult(BaseModel):
    """Outcome of one natural-language to Cypher conversion."""

    model_config = ConfigDict(frozen=True)

    success: bool
    query: str | None = Field(None, description="Generated Cypher, set iff success")
    error: str | None = Field(None, description="Failure message, set iff not success")
    stage: str | None = Field(None, description="Pipeline stage that failed")
    duration_ms: int = Field(..., ge=0)
    timestamp: str


class ExecutionResult(BaseModel):
    """Outcome of running one Cypher query against Neo4j."""

    model_config = ConfigDict(frozen=True)

    success: bool
    rows: list[dict[str, Any]] = Field(default_factory=list)
    row_count: int = Field(0, ge=0)
    query: str
    execution_time_ms: float = 0
    timestamp: str
    error: str | None = None

"""Response Validator — schema boundary for the extracted JSON object."""

import logging
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from cypher_bridge.pipeline.extractor import QUERY_FIELD
from cypher_bridge.pipeline.models import ExtractedPayload
from cypher_bridge.shared.exceptions import ValidationError

logger = logging.getLogger("cypher_bridge.validator")


def _describe(exc: PydanticValidationError) -> str:
    """Turn the first pydantic error into a message naming the constraint."""
    error = exc.errors()[0]
    kind = error.get("type", "")
    if kind == "missing":
        return f"missing field '{QUERY_FIELD}'"
    if kind == "string_type":
        return f"field '{QUERY_FIELD}' must be a string"
    if kind in ("model_type", "model_attributes_type", "dict_type"):
        return "expected a JSON object"
    return f"field '{QUERY_FIELD}' must not be empty"


def validate(parsed: Any) -> ExtractedPayload:
    """Check that *parsed* carries a non-empty string ``query``.

    Raises:
        ValidationError: Naming the violated constraint.
    """
    try:
        payload = ExtractedPayload.model_validate(parsed)
    except PydanticValidationError as exc:
        message = _describe(exc)
        logger.warning("Response validation failed: %s", message)
        raise ValidationError(message) from exc
    return payload

"""
Conversion Orchestrator — natural language in, policy-compliant Cypher out.

Runs Gateway → Extractor → Validator → Guard strictly in sequence and
stops at the first failure.  Every outcome, success or failure, is
returned as a ``ConversionResult``; pipeline errors never escape
``convert``.  The failing stage is encoded in the error message prefix
and in ``ConversionResult.stage``.
"""

import logging
import time
from typing import Any, Callable, Protocol

from cypher_bridge.pipeline.extractor import extract
from cypher_bridge.pipeline.guard import KeywordReadOnlyPolicy, QueryPolicy
from cypher_bridge.pipeline.models import (
    ConversionResult,
    ExtractedPayload,
    PromptContext,
    utc_timestamp,
)
from cypher_bridge.pipeline.validator import validate
from cypher_bridge.shared.exceptions import CypherBridgeError

logger = logging.getLogger("cypher_bridge.converter")


class LanguageModelGateway(Protocol):
    async def generate(self, prompt_context: PromptContext, question: str) -> str: ...


class CypherConverter:
    """Translates questions into read-only Cypher using an injected gateway."""

    def __init__(
        self,
        gateway: LanguageModelGateway,
        prompt_context: PromptContext,
        policy: QueryPolicy | None = None,
        extractor: Callable[[str], dict[str, Any]] = extract,
        validator: Callable[[Any], ExtractedPayload] = validate,
    ):
        self._gateway = gateway
        self._prompt_context = prompt_context
        self._policy = policy or KeywordReadOnlyPolicy()
        self._extract = extractor
        self._validate = validator

    async def convert(self, natural_language_text: str) -> ConversionResult:
        """Run the full pipeline for one question."""
        start = time.perf_counter()
        logger.info('Starting NL → Cypher conversion for "%s"', natural_language_text)

        try:
            raw = await self._gateway.generate(self._prompt_context, natural_language_text)
            parsed = self._extract(raw)
            payload = self._validate(parsed)
            self._policy.check(payload.query)
        except CypherBridgeError as exc:
            duration_ms = _elapsed_ms(start)
            logger.warning(
                "Conversion failed at %s after %dms: %s", exc.stage, duration_ms, exc
            )
            return ConversionResult(
                success=False,
                error=str(exc),
                stage=exc.stage,
                duration_ms=duration_ms,
                timestamp=utc_timestamp(),
            )

        duration_ms = _elapsed_ms(start)
        logger.info("Conversion succeeded in %dms: %s", duration_ms, payload.query)
        return ConversionResult(
            success=True,
            query=payload.query,
            duration_ms=duration_ms,
            timestamp=utc_timestamp(),
        )


def _elapsed_ms(start: float) -> int:
    return max(0, int((time.perf_counter() - start) * 1000))

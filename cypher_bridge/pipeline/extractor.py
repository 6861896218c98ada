"""
Response Extractor — pulls the JSON object out of a raw model completion.

Local models rarely return bare JSON; they wrap it in prose or markdown
fences.  Extraction is an ordered list of strategies:

1. ``strict``     — a single-line ``{...}`` fragment with no nested braces
                    that mentions the ``"query"`` key.
2. ``permissive`` — everything from the first ``{`` to the last ``}``.

The first candidate that parses as a JSON object wins.  The permissive
strategy can mis-extract when the completion contains several JSON-like
fragments; that is a known limitation.
"""

import json
import logging
import re
from dataclasses import dataclass
from typing import Any

from cypher_bridge.shared.exceptions import ExtractionError

logger = logging.getLogger("cypher_bridge.extractor")

QUERY_FIELD = "query"


@dataclass(frozen=True)
class ExtractionStrategy:
    """A named pattern that proposes one candidate JSON fragment."""

    name: str
    pattern: re.Pattern[str]

    def candidate(self, raw_text: str) -> str | None:
        match = self.pattern.search(raw_text)
        return match.group(0) if match else None


STRICT = ExtractionStrategy(
    "strict", re.compile(r'\{[^{}\n]*"' + QUERY_FIELD + r'"[^{}\n]*\}')
)
PERMISSIVE = ExtractionStrategy("permissive", re.compile(r"\{.*\}", re.DOTALL))

DEFAULT_STRATEGIES: tuple[ExtractionStrategy, ...] = (STRICT, PERMISSIVE)


def extract(
    raw_text: str,
    strategies: tuple[ExtractionStrategy, ...] = DEFAULT_STRATEGIES,
) -> dict[str, Any]:
    """Locate and parse the JSON object embedded in *raw_text*.

    Args:
        raw_text: The model completion, verbatim.
        strategies: Strategies to try, in order.

    Returns:
        The parsed JSON object.

    Raises:
        ExtractionError: If no strategy finds a fragment ("No JSON found"),
            or none of the fragments found parses as a JSON object.
    """
    logger.debug("Raw LLM response: %s", raw_text)

    found_any = False
    last_error = ""
    for strategy in strategies:
        fragment = strategy.candidate(raw_text)
        if fragment is None:
            continue
        found_any = True

        try:
            parsed = json.loads(fragment)
        except json.JSONDecodeError as exc:
            last_error = str(exc)
            logger.debug("Strategy %r produced invalid JSON: %s", strategy.name, exc)
            continue

        if not isinstance(parsed, dict):
            last_error = f"expected a JSON object, got {type(parsed).__name__}"
            continue

        logger.debug("Extracted JSON with strategy %r: %s", strategy.name, fragment)
        return parsed

    if not found_any:
        raise ExtractionError("No JSON found in LLM response", raw_text=raw_text)
    raise ExtractionError(last_error, raw_text=raw_text)

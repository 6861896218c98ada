"""
Query Executor — runs Cypher against Neo4j and flattens the results.

Each call opens its own session from the shared driver and releases it
on every exit path.  Driver-native values are normalised so rows can be
serialised as plain JSON:

* graph entities (nodes, relationships, anything carrying a
  ``properties`` mapping) become their property dict;
* paths become the alternating list of their nodes and relationships;
* 64-bit integer wrappers (anything exposing a numeric ``low`` word)
  become plain numbers;
* everything else passes through unchanged.

Lists and maps are normalised element-wise, so ``collect(n)``,
``{doc: d}`` and map projections serialise too, and driver temporal
values become ISO-8601 strings.
"""

import logging
from collections.abc import Mapping
from typing import Any

from neo4j.graph import Node, Path, Relationship

from cypher_bridge.pipeline.models import ExecutionResult, utc_timestamp
from cypher_bridge.shared.database import Neo4jHandler
from cypher_bridge.shared.exceptions import ExecutionError

logger = logging.getLogger("cypher_bridge.executor")

_PRIMITIVES = (str, bytes, int, float, bool)


def _member(value: Any, name: str) -> Any:
    if isinstance(value, Mapping):
        return value.get(name)
    return getattr(value, name, None)


def _normalize_map(value: Mapping) -> dict[str, Any]:
    return {key: normalize_value(item) for key, item in value.items()}


def _path_elements(path: Path) -> list[Any]:
    elements: list[Any] = [path.start_node]
    for relationship, node in zip(path.relationships, path.nodes[1:]):
        elements.extend((relationship, node))
    return elements


def normalize_value(value: Any) -> Any:
    """Convert one driver value into a JSON-friendly primitive."""
    if value is None or isinstance(value, _PRIMITIVES):
        return value

    if isinstance(value, (list, tuple)):
        return [normalize_value(item) for item in value]

    if isinstance(value, (Node, Relationship)):
        return _normalize_map(value)

    if isinstance(value, Path):
        return [normalize_value(element) for element in _path_elements(value)]

    iso_format = getattr(value, "iso_format", None)
    if callable(iso_format):
        return iso_format()

    properties = _member(value, "properties")
    if isinstance(properties, Mapping):
        return _normalize_map(properties)

    low = _member(value, "low")
    if isinstance(low, (int, float)) and not isinstance(low, bool):
        for converter in ("to_number", "toNumber"):
            to_number = getattr(value, converter, None)
            if callable(to_number):
                return to_number()
        return low

    if isinstance(value, Mapping):
        return _normalize_map(value)

    return value


def normalize_record(record: Any) -> dict[str, Any]:
    """Normalise every named column of a record into a plain dict row."""
    return {key: normalize_value(record[key]) for key in record.keys()}


def _summary_time_ms(summary: Any) -> float:
    available = getattr(summary, "result_available_after", None) or 0
    consumed = getattr(summary, "result_consumed_after", None) or 0
    return float(available + consumed)


class QueryExecutor:
    """Executes already-validated Cypher through an injected Neo4j handler."""

    def __init__(self, handler: Neo4jHandler):
        self._handler = handler

    async def execute(
        self,
        query: str,
        params: dict[str, Any] | None = None,
    ) -> ExecutionResult:
        """Run *query* with *params* and return normalised rows.

        Raises:
            ExecutionError: If the driver rejects the query or the
                database cannot be reached.  Carries the query text.
        """
        logger.info("Executing Cypher: %s", query)
        try:
            async with self._handler.session() as session:
                result = await session.run(query, params or {})
                rows = [normalize_record(record) async for record in result]
                summary = await result.consume()
        except Exception as exc:
            logger.error("Cypher execution failed: %s", exc)
            raise ExecutionError(str(exc), query=query) from exc

        execution_time_ms = _summary_time_ms(summary)
        logger.info("Query returned %d rows in %.0fms", len(rows), execution_time_ms)
        return ExecutionResult(
            success=True,
            rows=rows,
            row_count=len(rows),
            query=query,
            execution_time_ms=execution_time_ms,
            timestamp=utc_timestamp(),
        )

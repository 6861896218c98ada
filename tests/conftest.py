"""
Shared fixtures and test doubles.

Nothing here talks to Ollama or Neo4j; the gateway, the driver session
and its results are replaced by small in-memory fakes.
"""

from types import SimpleNamespace
from typing import Any

import pytest

from cypher_bridge.pipeline.models import PromptContext


# ─── Language-model gateway ─────────────────────────────────


class StubGateway:
    """Returns a canned completion (or raises) and records every call."""

    def __init__(self, completion: str = "", error: Exception | None = None):
        self.completion = completion
        self.error = error
        self.calls: list[tuple[PromptContext, str]] = []

    async def generate(self, prompt_context: PromptContext, question: str) -> str:
        self.calls.append((prompt_context, question))
        if self.error is not None:
            raise self.error
        return self.completion


# ─── Neo4j session / result ─────────────────────────────────


class FakeResult:
    """Async-iterable stand-in for neo4j.AsyncResult."""

    def __init__(self, records: list[dict[str, Any]], available: int | None = 3, consumed: int | None = 2):
        self._records = records
        self._summary = SimpleNamespace(
            result_available_after=available,
            result_consumed_after=consumed,
        )

    def __aiter__(self):
        return self._iterate()

    async def _iterate(self):
        for record in self._records:
            yield record

    async def consume(self):
        return self._summary


class FakeSession:
    """Async context-manager session that records queries and closing."""

    def __init__(self, result: FakeResult | None = None, error: Exception | None = None):
        self.result = result or FakeResult([])
        self.error = error
        self.runs: list[tuple[str, dict]] = []
        self.closed = False

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        self.closed = True
        return False

    async def run(self, query: str, params: dict | None = None):
        self.runs.append((query, params))
        if self.error is not None:
            raise self.error
        return self.result


class FakeHandler:
    """Neo4jHandler replacement handing out one FakeSession."""

    def __init__(self, session: FakeSession):
        self._session = session
        self.sessions_opened = 0

    def session(self) -> FakeSession:
        self.sessions_opened += 1
        return self._session


# ─── Fixtures ───────────────────────────────────────────────


@pytest.fixture
def prompt_context() -> PromptContext:
    return PromptContext(
        text="You translate QMS questions into Cypher. Reply with {\"query\": \"...\"}.",
        source="tests",
    )


@pytest.fixture
def stub_gateway() -> StubGateway:
    return StubGateway()

"""
Tests for Neo4jHandler configuration and the not-connected state.

No database needed: the driver is never created.
"""

import pytest

from cypher_bridge.shared.config import BaseServiceSettings
from cypher_bridge.shared.database import Neo4jHandler


class TestNeo4jHandler:

    def test_built_from_settings(self):
        settings = BaseServiceSettings(
            neo4j_uri="neo4j://qms-db:7687",
            neo4j_username="reader",
            neo4j_password="secret",
            neo4j_database="qms",
        )

        handler = Neo4jHandler.from_settings(settings)

        assert handler.uri == "neo4j://qms-db:7687"
        assert handler.database == "qms"

    @pytest.mark.parametrize("uri, username", [("", "neo4j"), ("bolt://localhost:7687", "")])
    def test_missing_connection_settings(self, uri, username):
        with pytest.raises(ValueError, match="is not set"):
            Neo4jHandler(uri=uri, username=username, password="x")

    def test_session_requires_connect(self):
        handler = Neo4jHandler("bolt://localhost:7687", "neo4j", "password")

        with pytest.raises(RuntimeError, match="not connected"):
            handler.session()

    async def test_verify_and_close_before_connect(self):
        handler = Neo4jHandler("bolt://localhost:7687", "neo4j", "password")

        assert await handler.verify() is False
        await handler.close()

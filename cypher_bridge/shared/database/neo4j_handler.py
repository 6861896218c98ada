"""
Neo4j Connection Handler

Owns the single async Neo4j driver of a process.  The driver keeps its
own connection pool, so one handler is built at startup and injected
into every component that talks to the database.
"""

import logging

from neo4j import AsyncDriver, AsyncGraphDatabase, AsyncSession

from cypher_bridge.shared.config import BaseServiceSettings

logger = logging.getLogger("cypher_bridge.neo4j_handler")


class Neo4jHandler:
    """
    Manages a single async Neo4j driver.

    Usage
    -----
    handler = Neo4jHandler.from_settings(settings)
    await handler.connect()
    async with handler.session() as session:
        result = await session.run("MATCH (n) RETURN n LIMIT 5")
    await handler.close()

    The handler can also be used as an async context-manager:

        async with Neo4jHandler(uri, username, password) as handler:
            ...
    """

    def __init__(
        self,
        uri: str,
        username: str,
        password: str,
        database: str = "neo4j",
    ):
        if not uri:
            raise ValueError("NEO4J_URI is not set")
        if not username:
            raise ValueError("NEO4J_USERNAME is not set")

        self._uri = uri
        self._username = username
        self._password = password
        self._database = database
        self._driver: AsyncDriver | None = None

    @classmethod
    def from_settings(cls, settings: BaseServiceSettings) -> "Neo4jHandler":
        return cls(
            uri=settings.neo4j_uri,
            username=settings.neo4j_username,
            password=settings.neo4j_password,
            database=settings.neo4j_database,
        )

    # ─── Lifecycle ──────────────────────────────────────────

    async def connect(self, verify: bool = True) -> "Neo4jHandler":
        """Create the async driver and optionally verify connectivity.

        An unreachable database is logged but does not prevent startup;
        queries will fail individually until it comes back.

        Returns:
            Self for method chaining.
        """
        if self._driver is not None:
            return self

        self._driver = AsyncGraphDatabase.driver(
            self._uri, auth=(self._username, self._password)
        )
        if verify:
            if await self.verify():
                logger.info("Connected to Neo4j at %s (db=%s)", self._uri, self._database)
            else:
                logger.warning("Neo4j at %s is not reachable yet", self._uri)
        return self

    async def close(self) -> None:
        """Close the underlying driver and its connection pool."""
        if self._driver:
            await self._driver.close()
            self._driver = None
            logger.info("Neo4j connection closed")

    async def __aenter__(self) -> "Neo4jHandler":
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    # ─── Properties ─────────────────────────────────────────

    @property
    def driver(self) -> AsyncDriver:
        """Return the raw async driver.

        Raises:
            RuntimeError: If handler is not connected (call connect() first).
        """
        if self._driver is None:
            raise RuntimeError("Neo4jHandler is not connected, call connect() first")
        return self._driver

    @property
    def database(self) -> str:
        """Return the configured database name."""
        return self._database

    @property
    def uri(self) -> str:
        """Return the configured Neo4j URI."""
        return self._uri

    # ─── Sessions ───────────────────────────────────────────

    def session(self) -> AsyncSession:
        """Open a new session on the configured database.

        Use as ``async with handler.session() as session:`` so the
        session is released on every exit path.
        """
        return self.driver.session(database=self._database)

    async def verify(self) -> bool:
        """Quick health-check: returns True if the database is reachable."""
        if self._driver is None:
            return False
        try:
            await self._driver.verify_connectivity()
            return True
        except Exception as exc:
            logger.debug("Neo4j connectivity check failed: %s", exc)
            return False

"""
Read-Only Policy Guard.

A textual filter, not a parser: any write keyword appearing anywhere in
the query (case-insensitive substring, so ``n.offset`` or a title like
``"CREATE_POLICY"`` also match) rejects it, and a query without
``RETURN`` is rejected too.  Keyword scan runs first, then the RETURN
check.

Callers depend only on the ``QueryPolicy`` protocol so a grammar-aware
policy can replace ``KeywordReadOnlyPolicy`` later.
"""

import logging
from typing import Protocol

from cypher_bridge.shared.exceptions import SecurityError

logger = logging.getLogger("cypher_bridge.guard")

WRITE_KEYWORDS: tuple[str, ...] = (
    "CREATE", "DELETE", "MERGE", "SET", "REMOVE", "DROP", "DETACH",
)
REQUIRED_KEYWORD = "RETURN"

SECURITY_VIOLATION = "SECURITY_VIOLATION"
MISSING_RETURN = "MISSING_RETURN"


class QueryPolicy(Protocol):
    """Anything that can accept or reject a generated query."""

    def check(self, query: str) -> None:
        """Return normally if *query* is allowed, raise SecurityError otherwise."""
        ...


class KeywordReadOnlyPolicy:
    """Keyword-substring read-only policy."""

    def __init__(
        self,
        forbidden: tuple[str, ...] = WRITE_KEYWORDS,
        required: str = REQUIRED_KEYWORD,
    ):
        self._forbidden = tuple(k.upper() for k in forbidden)
        self._required = required.upper()

    def check(self, query: str) -> None:
        upper = query.upper()

        for keyword in self._forbidden:
            if keyword in upper:
                logger.warning("Rejected query containing %s: %s", keyword, query)
                raise SecurityError(
                    f"Query contains write operation '{keyword}'",
                    code=SECURITY_VIOLATION,
                    keyword=keyword,
                )

        if self._required not in upper:
            logger.warning("Rejected query without %s: %s", self._required, query)
            raise SecurityError(
                f"Query must include {self._required} statement",
                code=MISSING_RETURN,
            )


_default_policy = KeywordReadOnlyPolicy()


def enforce_read_only(query: str) -> None:
    """Apply the default read-only policy to *query*."""
    _default_policy.check(query)

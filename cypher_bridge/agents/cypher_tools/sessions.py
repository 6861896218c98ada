"""
MCP session bookkeeping for the streamable HTTP transport.

The transport assigns an ``mcp-session-id`` header on the first response
of a conversation.  ``SessionTrackingMiddleware`` watches responses on
the MCP endpoint and keeps ``SessionRegistry`` in step:

* a response carrying a session id registers (or refreshes) it;
* a successful ``DELETE`` closes it;
* a 404 means the transport no longer knows it, so it is dropped.

Only the transport layer reads or writes the registry.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone

from starlette.types import ASGIApp, Message, Receive, Scope, Send

logger = logging.getLogger("cypher_bridge.cypher_tools.sessions")

SESSION_HEADER = "mcp-session-id"
_SESSION_HEADER_BYTES = SESSION_HEADER.encode("latin-1")


@dataclass
class SessionInfo:
    """One open MCP session."""

    session_id: str
    created_at: str
    last_seen: str
    request_count: int = 1


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class SessionRegistry:
    """Open MCP sessions keyed by session id."""

    def __init__(self):
        self._sessions: dict[str, SessionInfo] = {}

    def touch(self, session_id: str) -> bool:
        """Record activity on *session_id*; return True if it is new."""
        info = self._sessions.get(session_id)
        if info is None:
            self._sessions[session_id] = SessionInfo(session_id, _now(), _now())
            logger.info("New MCP session: %s", session_id)
            return True
        info.last_seen = _now()
        info.request_count += 1
        return False

    def remove(self, session_id: str) -> bool:
        """Forget *session_id*; return True if it was registered."""
        if self._sessions.pop(session_id, None) is None:
            return False
        logger.info("MCP session closed: %s", session_id)
        return True

    def get(self, session_id: str) -> SessionInfo | None:
        return self._sessions.get(session_id)

    def active(self) -> list[str]:
        return list(self._sessions)

    def clear(self) -> None:
        for session_id in list(self._sessions):
            logger.info("Closing MCP session: %s", session_id)
        self._sessions.clear()

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._sessions


def _header(headers: list[tuple[bytes, bytes]], name: bytes) -> str | None:
    for key, value in headers:
        if key.lower() == name:
            return value.decode("latin-1")
    return None


class SessionTrackingMiddleware:
    """ASGI middleware that mirrors transport sessions into a SessionRegistry."""

    def __init__(self, app: ASGIApp, registry: SessionRegistry, path: str = "/mcp"):
        self.app = app
        self.registry = registry
        self.path = path

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http" or not scope["path"].startswith(self.path):
            await self.app(scope, receive, send)
            return

        method = scope["method"]
        request_session = _header(scope.get("headers", []), _SESSION_HEADER_BYTES)

        async def send_wrapper(message: Message) -> None:
            if message["type"] == "http.response.start":
                status = message["status"]
                response_session = _header(
                    message.get("headers", []), _SESSION_HEADER_BYTES
                )
                session_id = response_session or request_session
                if session_id:
                    if status == 404 or (method == "DELETE" and status < 300):
                        self.registry.remove(session_id)
                    elif status < 400:
                        self.registry.touch(session_id)
            await send(message)

        await self.app(scope, receive, send_wrapper)

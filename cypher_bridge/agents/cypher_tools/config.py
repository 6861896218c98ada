"""Cypher Tools MCP server configuration."""

from cypher_bridge.shared.config import BaseServiceSettings


class CypherToolsSettings(BaseServiceSettings):
    """Settings specific to the MCP tool server."""

    service_name: str = "QMS MCP Server"
    version: str = "1.0.0"
    mcp_host: str = "0.0.0.0"
    mcp_port: int = 7400
    mcp_allowed_origins: list[str] = ["http://localhost:5173"]
    mcp_allowed_hosts: list[str] = ["localhost", "127.0.0.1", "0.0.0.0"]

"""Gateway configuration."""

from cypher_bridge.shared.config import BaseServiceSettings


class GatewaySettings(BaseServiceSettings):
    """Settings specific to the HTTP gateway used by the browser UI."""

    service_name: str = "QMS Document Query API"
    host: str = "0.0.0.0"
    port: int = 3001
    cors_origins: list[str] = ["*"]

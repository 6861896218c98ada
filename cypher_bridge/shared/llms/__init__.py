from cypher_bridge.shared.llms.models import get_ollama_gateway
from cypher_bridge.shared.llms.ollama import OllamaGateway

__all__ = [
    "get_ollama_gateway",
    "OllamaGateway",
]

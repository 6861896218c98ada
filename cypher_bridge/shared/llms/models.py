import httpx

from cypher_bridge.shared.config import BaseServiceSettings
from cypher_bridge.shared.llms.ollama import OllamaGateway


# ─── LLM Gateway Factories ───────────────────────────────


def get_ollama_gateway(
    settings: BaseServiceSettings,
    client: httpx.AsyncClient | None = None,
) -> OllamaGateway:
    return OllamaGateway(
        url=settings.ollama_url,
        model=settings.ollama_model,
        temperature=settings.ollama_temperature,
        top_p=settings.ollama_top_p,
        timeout=settings.ollama_timeout_seconds,
        client=client,
    )

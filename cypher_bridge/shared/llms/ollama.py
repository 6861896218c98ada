"""
Language-Model Gateway for a local Ollama ``/api/generate`` endpoint.

One request per call, no streaming, no retries.  Sampling is kept
deterministic-leaning (low temperature, high top_p) so repeated
questions tend to produce the same query.
"""

import logging
from typing import Any

import httpx

from cypher_bridge.pipeline.models import PromptContext
from cypher_bridge.shared.exceptions import GatewayError

logger = logging.getLogger("cypher_bridge.ollama")

_BODY_PREVIEW = 500


class OllamaGateway:
    """Sends composed prompts to Ollama and returns the raw completion text.

    The underlying ``httpx.AsyncClient`` pools connections and is safe to
    share between concurrent requests.  Pass your own client (e.g. one
    built on ``httpx.MockTransport``) to take control of the transport.
    """

    def __init__(
        self,
        url: str,
        model: str,
        temperature: float = 0.1,
        top_p: float = 0.9,
        timeout: float = 120.0,
        client: httpx.AsyncClient | None = None,
    ):
        self._url = url
        self._model = model
        self._temperature = temperature
        self._top_p = top_p
        self._client = client or httpx.AsyncClient(timeout=timeout)

    @property
    def model(self) -> str:
        return self._model

    @property
    def url(self) -> str:
        return self._url

    @staticmethod
    def build_prompt(prompt_context: PromptContext, question: str) -> str:
        return f'{prompt_context.text}\n\nUser: "{question}"'

    def build_payload(self, prompt: str) -> dict[str, Any]:
        return {
            "model": self._model,
            "prompt": prompt,
            "stream": False,
            "options": {
                "temperature": self._temperature,
                "top_p": self._top_p,
            },
        }

    async def generate(self, prompt_context: PromptContext, question: str) -> str:
        """Ask the model to translate *question* and return its raw text.

        Raises:
            GatewayError: Blank question, unreachable endpoint, non-2xx
                status, or a body without a string ``response`` field.
        """
        if not question or not question.strip():
            raise GatewayError("question must be a non-empty string")

        payload = self.build_payload(self.build_prompt(prompt_context, question))
        logger.info("Calling Ollama model %s", self._model)

        try:
            response = await self._client.post(self._url, json=payload)
        except httpx.HTTPError as exc:
            logger.error("Ollama unreachable at %s: %s", self._url, exc)
            raise GatewayError(f"cannot reach {self._url}: {exc}") from exc

        if response.is_error:
            body = response.text
            logger.error("Ollama returned %s: %s", response.status_code, body[:_BODY_PREVIEW])
            raise GatewayError(
                f"{response.status_code} {response.reason_phrase}",
                status_code=response.status_code,
                body=body,
            )

        try:
            data = response.json()
        except ValueError as exc:
            raise GatewayError(
                "response body is not JSON",
                status_code=response.status_code,
                body=response.text,
            ) from exc

        completion = data.get("response") if isinstance(data, dict) else None
        if not isinstance(completion, str):
            raise GatewayError(
                "response body has no 'response' text",
                status_code=response.status_code,
                body=response.text,
            )

        logger.info("Ollama response received (%d chars)", len(completion))
        return completion

    async def close(self) -> None:
        await self._client.aclose()

"""Ollama provider for local remote classification.

Talks to an Ollama server's ``/api/generate`` endpoint over httpx. Useful
when captures must not leave the machine.
"""

import json
import logging
from typing import Optional

import httpx

from ...config import DEFAULT_OLLAMA_MODEL
from .base import BaseProvider

logger = logging.getLogger("quill.classifier.providers.ollama")

__all__ = ["OllamaProvider"]


class OllamaProvider(BaseProvider):
    """Ollama provider."""

    def __init__(
        self,
        base_url: str = "http://localhost:11434",
        model: Optional[str] = None,
        timeout: float = 10.0,
        max_output_tokens: int = 500,
        max_input_chars: int = 4000,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """Initialize Ollama provider.

        Args:
            base_url: Ollama API base URL
            model: Model name (default: DEFAULT_OLLAMA_MODEL)
            timeout: Request timeout in seconds
            max_output_tokens: Token cap for replies
            max_input_chars: Capture text beyond this is truncated in prompts
            client: Pre-built HTTP client (tests pass one with a MockTransport)
        """
        super().__init__(timeout, max_input_chars)
        self.base_url = base_url.rstrip("/")
        self.model = model or DEFAULT_OLLAMA_MODEL
        self.max_output_tokens = max_output_tokens
        self._client = client or httpx.AsyncClient(timeout=timeout)

    @property
    def name(self) -> str:
        return "ollama"

    def is_available(self) -> bool:
        # Reachability is left to the circuit breaker; a health probe here
        # would add a round trip to every low-confidence capture
        return not self._client.is_closed

    async def health_check(self) -> bool:
        """Check if the Ollama server answers."""
        try:
            response = await self._client.get(f"{self.base_url}/api/tags")
            return response.status_code == 200
        except httpx.HTTPError as e:
            logger.debug("ollama_unavailable", extra={"error": str(e)})
            return False

    async def _complete(self, prompt: str) -> str:
        try:
            response = await self._client.post(
                f"{self.base_url}/api/generate",
                json={
                    "model": self.model,
                    "prompt": prompt,
                    "stream": False,
                    "format": "json",
                    "options": {
                        "num_predict": self.max_output_tokens,
                        "temperature": 0.1,
                    },
                },
            )
            response.raise_for_status()
            payload = response.json()
        except httpx.TimeoutException as e:
            logger.error("ollama_timeout", extra={"error": str(e)})
            raise TimeoutError(f"Ollama request timed out: {e}") from e
        except httpx.HTTPError as e:
            logger.error("ollama_http_error", extra={"error": str(e)})
            raise ConnectionError(f"Ollama HTTP error: {e}") from e
        except json.JSONDecodeError as e:
            logger.error("ollama_parse_error", extra={"error": str(e)})
            raise ValueError(f"Invalid Ollama response: {e}") from e

        text = payload.get("response", "") if isinstance(payload, dict) else ""
        if not text.strip():
            raise ValueError("Empty response from Ollama")

        logger.debug(
            "ollama_completion",
            extra={
                "model": self.model,
                "input_tokens": payload.get("prompt_eval_count", 0),
                "output_tokens": payload.get("eval_count", 0),
            },
        )
        return text

    async def aclose(self) -> None:
        await self._client.aclose()

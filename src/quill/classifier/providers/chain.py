"""Provider chain: try remote providers in order until one answers.

The chain is what a NoteClassifier usually receives as its fallback. Each
provider sits behind the chain's circuit breaker, so a provider that keeps
failing is skipped until its reset timeout passes.
"""

import logging
from collections.abc import Awaitable, Callable, Sequence
from typing import Any, Optional, TypeVar

from ...config import ClassifierConfig
from ..circuit_breaker import CircuitBreaker
from ..fallback import FallbackUnavailableError, RemoteClassification, RemoteSectionProposal
from ..metrics import record_provider_failure
from .base import BaseProvider
from .claude import ClaudeProvider
from .ollama import OllamaProvider

logger = logging.getLogger("quill.classifier.providers.chain")

__all__ = ["FallbackChain", "build_default_chain", "build_provider"]

T = TypeVar("T")

_FAILURE_REASONS = {
    TimeoutError: "timeout",
    ConnectionError: "connection",
    ValueError: "parse",
}


def _failure_reason(error: Exception) -> str:
    for error_type, reason in _FAILURE_REASONS.items():
        if isinstance(error, error_type):
            return reason
    return "error"


class FallbackChain:
    """Ordered list of providers sharing one circuit breaker."""

    def __init__(
        self,
        providers: Sequence[BaseProvider],
        breaker: Optional[CircuitBreaker] = None,
    ):
        self.providers = list(providers)
        self.breaker = breaker or CircuitBreaker()

    async def classify_remote(
        self,
        content: str,
        image: Optional[Any] = None,
        known_tag_vocabulary: Sequence[str] = (),
    ) -> RemoteClassification:
        return await self._first_success(
            "classify",
            lambda provider: provider.classify_remote(content, image, known_tag_vocabulary),
        )

    async def propose_sections(self, content: str) -> RemoteSectionProposal:
        return await self._first_success(
            "propose_sections", lambda provider: provider.propose_sections(content)
        )

    async def _first_success(
        self, operation: str, call: Callable[[BaseProvider], Awaitable[T]]
    ) -> T:
        """Run ``call`` against each usable provider in order.

        Raises:
            FallbackUnavailableError: If every provider was skipped or failed
        """
        errors: dict[str, str] = {}

        for provider in self.providers:
            if not provider.is_available():
                errors[provider.name] = "unavailable"
                continue
            if not self.breaker.allow_request(provider.name):
                errors[provider.name] = "circuit_open"
                record_provider_failure(provider.name, "circuit_open")
                continue

            try:
                result = await call(provider)
            except (TimeoutError, ConnectionError, ValueError) as e:
                reason = _failure_reason(e)
                errors[provider.name] = reason
                self.breaker.record_failure(provider.name, reason)
                record_provider_failure(provider.name, reason)
                logger.warning(
                    "provider_failed",
                    extra={"provider": provider.name, "operation": operation, "reason": reason},
                )
                continue

            self.breaker.record_success(provider.name)
            return result

        raise FallbackUnavailableError(
            f"No provider could {operation}: {errors or 'no providers configured'}",
            errors=errors,
        )

    async def aclose(self) -> None:
        for provider in self.providers:
            await provider.aclose()


def build_provider(name: str, config: ClassifierConfig) -> BaseProvider:
    """Create one provider from configuration.

    Raises:
        ValueError: If the provider name is unknown
    """
    if name == "claude":
        return ClaudeProvider(
            api_key=config.anthropic_api_key.get_secret_value() or None,
            model=config.anthropic_model,
            timeout=config.fallback_timeout_seconds,
            max_output_tokens=config.max_output_tokens,
            max_input_chars=config.max_input_chars,
        )
    if name == "ollama":
        return OllamaProvider(
            base_url=config.ollama_base_url,
            model=config.ollama_model,
            timeout=config.fallback_timeout_seconds,
            max_output_tokens=config.max_output_tokens,
            max_input_chars=config.max_input_chars,
        )
    raise ValueError(f"Unknown provider: {name}")


def build_default_chain(config: ClassifierConfig) -> FallbackChain:
    """Chain of the configured providers, primary first."""
    breaker = CircuitBreaker(
        failure_threshold=config.circuit_failure_threshold,
        reset_timeout=config.circuit_reset_timeout,
    )
    providers = [build_provider(name, config) for name in config.provider_order]
    logger.info(
        "fallback_chain_built",
        extra={"providers": [p.name for p in providers]},
    )
    return FallbackChain(providers, breaker)

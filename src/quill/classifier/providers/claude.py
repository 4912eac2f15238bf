"""Claude (Anthropic) provider for remote classification.

Uses the async Anthropic SDK. Rate-limit (429) and overload (529) replies
are retried with exponential backoff before the call counts as failed.
"""

import logging
from typing import Optional

from anthropic import (
    APIConnectionError,
    APIStatusError,
    APITimeoutError,
    AsyncAnthropic,
    RateLimitError,
)
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
    wait_random,
)

from ...config import DEFAULT_ANTHROPIC_MODEL
from .base import BaseProvider

logger = logging.getLogger("quill.classifier.providers.claude")

__all__ = ["ClaudeProvider"]

RETRYABLE_STATUS_CODES = (429, 529)


def _should_retry(exception: BaseException) -> bool:
    """Retry only rate limiting and overload; other API errors fail fast."""
    if isinstance(exception, RateLimitError):
        return True
    if isinstance(exception, APIStatusError):
        return exception.status_code in RETRYABLE_STATUS_CODES
    return False


def _log_retry(retry_state: RetryCallState) -> None:
    exception = retry_state.outcome.exception() if retry_state.outcome else None
    logger.warning(
        "claude_retry",
        extra={
            "attempt": retry_state.attempt_number,
            "error_type": type(exception).__name__ if exception else None,
        },
    )


class ClaudeProvider(BaseProvider):
    """Claude/Anthropic provider."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        timeout: float = 10.0,
        max_output_tokens: int = 500,
        max_input_chars: int = 4000,
        max_attempts: int = 3,
        client: Optional[AsyncAnthropic] = None,
    ):
        """Initialize Claude provider.

        Args:
            api_key: Anthropic API key; the provider is unavailable without it
            model: Model name (default: DEFAULT_ANTHROPIC_MODEL)
            timeout: Request timeout in seconds
            max_output_tokens: Token cap for replies
            max_input_chars: Capture text beyond this is truncated in prompts
            max_attempts: Attempts per request, retries included
            client: Pre-built client (tests inject a mock here)
        """
        super().__init__(timeout, max_input_chars)
        self.model = model or DEFAULT_ANTHROPIC_MODEL
        self.max_output_tokens = max_output_tokens
        self.max_attempts = max_attempts

        if client is not None:
            self._client = client
        elif api_key:
            self._client = AsyncAnthropic(api_key=api_key, timeout=timeout, max_retries=0)
        else:
            logger.warning("claude_no_api_key")
            self._client = None

    @property
    def name(self) -> str:
        return "claude"

    def is_available(self) -> bool:
        return self._client is not None

    async def _complete(self, prompt: str) -> str:
        if self._client is None:
            raise ConnectionError("Claude client not initialized (missing API key)")

        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_exponential(multiplier=0.5, min=0.5, max=4) + wait_random(0, 0.25),
            retry=retry_if_exception(_should_retry),
            before_sleep=_log_retry,
            reraise=True,
        )

        try:
            async for attempt in retrying:
                with attempt:
                    response = await self._client.messages.create(
                        model=self.model,
                        max_tokens=self.max_output_tokens,
                        temperature=0.1,
                        messages=[{"role": "user", "content": prompt}],
                    )
        except APITimeoutError as e:
            logger.error("claude_timeout", extra={"error": str(e)})
            raise TimeoutError(f"Claude request timed out: {e}") from e
        except (APIConnectionError, APIStatusError) as e:
            logger.error("claude_api_error", extra={"error": str(e), "error_type": type(e).__name__})
            raise ConnectionError(f"Claude API error: {e}") from e

        text = "".join(
            getattr(block, "text", "") for block in (response.content or [])
        )
        if not text.strip():
            raise ValueError("Empty response from Claude")

        logger.debug(
            "claude_completion",
            extra={
                "model": self.model,
                "input_tokens": response.usage.input_tokens,
                "output_tokens": response.usage.output_tokens,
            },
        )
        return text

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.close()

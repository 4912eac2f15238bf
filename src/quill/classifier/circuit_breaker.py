"""Circuit breaker for remote classification providers.

A provider that keeps failing is skipped for ``reset_timeout`` seconds so a
dead model endpoint does not add its timeout to every low-confidence
capture. After the timeout a few trial calls are let through; one success
closes the circuit again.
"""

import logging
import threading
import time
from dataclasses import dataclass
from enum import Enum

logger = logging.getLogger("quill.classifier.circuit_breaker")

__all__ = ["CircuitBreaker", "CircuitState", "ProviderState"]


class CircuitState(str, Enum):
    """Circuit breaker states."""

    CLOSED = "closed"  # calls allowed
    OPEN = "open"  # provider skipped
    HALF_OPEN = "half_open"  # trial calls allowed


@dataclass
class ProviderState:
    """Failure bookkeeping for one provider."""

    consecutive_failures: int = 0
    opened_at: float = 0.0
    state: CircuitState = CircuitState.CLOSED
    trial_calls: int = 0
    last_error: str = ""


class CircuitBreaker:
    """Per-provider circuit breaker.

    Example:
        >>> breaker = CircuitBreaker(failure_threshold=3, reset_timeout=30)
        >>> if breaker.allow_request("ollama"):
        ...     try:
        ...         answer = await provider.classify_remote(text)
        ...         breaker.record_success("ollama")
        ...     except Exception as e:
        ...         breaker.record_failure("ollama", type(e).__name__)
    """

    def __init__(
        self,
        failure_threshold: int = 5,
        reset_timeout: float = 60,
        half_open_max_calls: int = 1,
        clock=time.monotonic,
    ):
        """Initialize circuit breaker.

        Args:
            failure_threshold: Consecutive failures before the circuit opens
            reset_timeout: Seconds an open circuit waits before trial calls
            half_open_max_calls: Trial calls allowed while half-open
            clock: Monotonic time source (injectable for tests)
        """
        self.failure_threshold = failure_threshold
        self.reset_timeout = reset_timeout
        self.half_open_max_calls = half_open_max_calls
        self._clock = clock
        self._states: dict[str, ProviderState] = {}
        self._lock = threading.Lock()

    def _state(self, provider: str) -> ProviderState:
        # callers hold self._lock
        state = self._states.get(provider)
        if state is None:
            state = self._states[provider] = ProviderState()
        return state

    def allow_request(self, provider: str) -> bool:
        """Whether a call to ``provider`` should be attempted now."""
        with self._lock:
            state = self._state(provider)

            if state.state == CircuitState.CLOSED:
                return True

            if state.state == CircuitState.OPEN:
                elapsed = self._clock() - state.opened_at
                if elapsed < self.reset_timeout:
                    return False
                state.state = CircuitState.HALF_OPEN
                state.trial_calls = 0
                logger.info(
                    "circuit_half_open",
                    extra={"provider": provider, "elapsed_seconds": elapsed},
                )

            if state.trial_calls < self.half_open_max_calls:
                state.trial_calls += 1
                return True
            return False

    def record_success(self, provider: str) -> None:
        with self._lock:
            state = self._state(provider)
            previous = state.state
            state.consecutive_failures = 0
            state.state = CircuitState.CLOSED
            state.trial_calls = 0
            state.last_error = ""

        if previous != CircuitState.CLOSED:
            logger.info(
                "circuit_closed",
                extra={"provider": provider, "previous_state": previous.value},
            )

    def record_failure(self, provider: str, error_type: str = "unknown") -> None:
        """Count a failure; opens the circuit at the threshold or on a failed trial.

        Args:
            provider: Provider name
            error_type: Short failure reason (timeout, connection, parse, ...)
        """
        with self._lock:
            state = self._state(provider)
            state.consecutive_failures += 1
            state.last_error = error_type
            should_open = state.state == CircuitState.HALF_OPEN or (
                state.state == CircuitState.CLOSED
                and state.consecutive_failures >= self.failure_threshold
            )
            if should_open:
                state.state = CircuitState.OPEN
                state.opened_at = self._clock()
                state.trial_calls = 0
            failures = state.consecutive_failures

        if should_open:
            logger.warning(
                "circuit_opened",
                extra={
                    "provider": provider,
                    "failures": failures,
                    "error_type": error_type,
                    "reset_timeout_seconds": self.reset_timeout,
                },
            )

    def state(self, provider: str) -> CircuitState:
        with self._lock:
            return self._state(provider).state

    def get_status(self, provider: str) -> dict:
        with self._lock:
            state = self._state(provider)
            return {
                "provider": provider,
                "state": state.state.value,
                "consecutive_failures": state.consecutive_failures,
                "last_error": state.last_error,
            }

    def reset(self) -> None:
        with self._lock:
            self._states.clear()

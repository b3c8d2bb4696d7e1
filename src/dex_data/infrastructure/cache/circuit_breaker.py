"""
Circuit breaker guarding calls to the distributed cache.

Prevents connection storms by counting consecutive failures and
suspending calls for a cool-down window once the threshold is reached.
After the window a single trial call is allowed (half-open); its outcome
closes or re-opens the circuit.
"""

import enum
import time
from collections.abc import Callable

from dex_data.config.state import CircuitBreakerConfig
from dex_data.infrastructure.observability import get_cache_logger


class CircuitState(str, enum.Enum):
    CLOSED = "closed"  # normal operation
    OPEN = "open"  # failing, don't try
    HALF_OPEN = "half_open"  # probing for recovery


class CircuitBreaker:
    """Failure-counting circuit breaker.

    Not a singleton: each cache client owns one, so tests and separate
    Redis instances do not share state.
    """

    def __init__(
        self,
        config: CircuitBreakerConfig | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        config = config or CircuitBreakerConfig()
        self.failure_threshold = config.failure_threshold
        self.reset_timeout = config.reset_timeout
        self.half_open_retry_interval = config.half_open_retry_interval
        self._clock = clock

        self.state = CircuitState.CLOSED
        self.failure_count = 0
        self._last_failure_at = 0.0
        self._last_trial_at = 0.0
        self.log = get_cache_logger("circuit-breaker")

    def can_request(self) -> bool:
        """Return True if a call may be attempted now."""
        now = self._clock()

        if self.state == CircuitState.CLOSED:
            return True

        if self.state == CircuitState.OPEN:
            if now - self._last_failure_at >= self.reset_timeout:
                self._change_state(CircuitState.HALF_OPEN, "reset timeout elapsed")
                self._last_trial_at = now
                return True
            return False

        # HALF_OPEN: one trial call per retry interval
        if now - self._last_trial_at >= self.half_open_retry_interval:
            self._last_trial_at = now
            return True
        return False

    def record_success(self) -> None:
        if self.state == CircuitState.HALF_OPEN:
            self._change_state(CircuitState.CLOSED, "trial call succeeded")
        self.failure_count = 0

    def record_failure(self, error: BaseException | None = None) -> None:
        self.failure_count += 1
        self._last_failure_at = self._clock()

        if self.state == CircuitState.HALF_OPEN:
            self._change_state(CircuitState.OPEN, f"trial call failed: {error}")
        elif (
            self.state == CircuitState.CLOSED
            and self.failure_count >= self.failure_threshold
        ):
            self._change_state(
                CircuitState.OPEN, f"{self.failure_count} consecutive failures"
            )

    def reset(self) -> None:
        self._change_state(CircuitState.CLOSED, "manual reset")
        self.failure_count = 0

    def _change_state(self, new_state: CircuitState, reason: str) -> None:
        if self.state == new_state:
            return
        self.log.warning(
            "circuit_state_changed",
            old=self.state.value,
            new=new_state.value,
            reason=reason,
        )
        self.state = new_state

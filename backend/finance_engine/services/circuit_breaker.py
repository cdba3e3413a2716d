# backend/finance_engine/services/circuit_breaker.py
"""
Circuit breaker guarding calls to the exchange rate provider.

After `failure_threshold` consecutive failures the breaker opens and
rejects calls immediately, so a dead provider costs callers nothing while
the rate service falls back to whatever it has cached.

States:
    CLOSED    - Calls pass through
    OPEN      - Calls rejected with CircuitBreakerOpen
    HALF_OPEN - Recovery timeout elapsed, one trial call allowed

Transitions:
    CLOSED -> OPEN:      consecutive failures reach the threshold
    OPEN -> HALF_OPEN:   recovery timeout elapsed
    HALF_OPEN -> CLOSED: trial call succeeded
    HALF_OPEN -> OPEN:   trial call failed

Usage:
    breaker = CircuitBreaker(name="yahoo-fx", failure_threshold=5)

    with breaker:
        quote = fetch()
"""

import logging
import threading
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable

logger = logging.getLogger(__name__)


class CircuitState(Enum):
    """Circuit breaker states."""
    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"


class CircuitBreakerOpen(Exception):
    """
    Raised when a call is rejected because the circuit is open.

    Attributes:
        breaker_name: Name of the circuit breaker
        time_remaining: Seconds until a trial call is allowed
    """

    def __init__(self, breaker_name: str, time_remaining: float) -> None:
        self.breaker_name = breaker_name
        self.time_remaining = time_remaining
        super().__init__(
            f"Circuit breaker '{breaker_name}' is open. "
            f"Retry in {time_remaining:.1f} seconds."
        )


@dataclass
class CircuitBreakerStats:
    """Counters exposed by the health endpoint."""
    total_calls: int = 0
    successful_calls: int = 0
    failed_calls: int = 0
    rejected_calls: int = 0


class CircuitBreaker:
    """
    Thread-safe consecutive-failure circuit breaker.

    Args:
        name: Identifier used in logs and errors
        failure_threshold: Consecutive failures before opening
        recovery_timeout: Seconds to stay open before a trial call
        excluded_exceptions: Exceptions that don't count as failures
            (e.g. "pair not found" is the caller's problem, not an outage)
        clock: Monotonic time source, injectable for tests
    """

    def __init__(
            self,
            name: str,
            failure_threshold: int = 5,
            recovery_timeout: float = 60.0,
            excluded_exceptions: tuple[type[BaseException], ...] = (),
            clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if failure_threshold < 1:
            raise ValueError("failure_threshold must be at least 1")
        if recovery_timeout < 0:
            raise ValueError("recovery_timeout cannot be negative")

        self.name = name
        self.failure_threshold = failure_threshold
        self.recovery_timeout = recovery_timeout
        self.excluded_exceptions = excluded_exceptions
        self._clock = clock

        self._state = CircuitState.CLOSED
        self._consecutive_failures = 0
        self._opened_at = 0.0
        self._trial_in_progress = False
        self._stats = CircuitBreakerStats()
        self._lock = threading.RLock()

        logger.info(
            f"CircuitBreaker '{name}' initialized: "
            f"threshold={failure_threshold}, recovery_timeout={recovery_timeout}s"
        )

    @property
    def state(self) -> CircuitState:
        with self._lock:
            self._refresh_state()
            return self._state

    @property
    def is_open(self) -> bool:
        return self.state == CircuitState.OPEN

    @property
    def stats(self) -> CircuitBreakerStats:
        """Snapshot of the call counters."""
        with self._lock:
            return CircuitBreakerStats(**vars(self._stats))

    def _refresh_state(self) -> None:
        # Caller holds the lock
        if self._state == CircuitState.OPEN and self._seconds_open() >= self.recovery_timeout:
            self._move_to(CircuitState.HALF_OPEN)

    def _seconds_open(self) -> float:
        return self._clock() - self._opened_at

    def _move_to(self, new_state: CircuitState) -> None:
        old_state = self._state
        self._state = new_state
        self._trial_in_progress = False
        if new_state == CircuitState.OPEN:
            self._opened_at = self._clock()
        elif new_state == CircuitState.CLOSED:
            self._consecutive_failures = 0
        logger.info(
            f"CircuitBreaker '{self.name}' state change: "
            f"{old_state.value} -> {new_state.value}"
        )

    def __enter__(self) -> "CircuitBreaker":
        with self._lock:
            self._stats.total_calls += 1
            self._refresh_state()

            rejected = self._state == CircuitState.OPEN or (
                self._state == CircuitState.HALF_OPEN and self._trial_in_progress
            )
            if rejected:
                self._stats.rejected_calls += 1
                remaining = max(0.0, self.recovery_timeout - self._seconds_open())
                raise CircuitBreakerOpen(self.name, remaining)

            if self._state == CircuitState.HALF_OPEN:
                self._trial_in_progress = True

        return self

    def __exit__(self, exc_type: type | None, exc_val: BaseException | None, exc_tb: Any) -> bool:
        with self._lock:
            failed = exc_val is not None and not isinstance(exc_val, self.excluded_exceptions)

            if not failed:
                self._stats.successful_calls += 1
                self._consecutive_failures = 0
                if self._state == CircuitState.HALF_OPEN:
                    self._move_to(CircuitState.CLOSED)
                return False

            self._stats.failed_calls += 1
            self._consecutive_failures += 1
            if self._state == CircuitState.HALF_OPEN:
                self._move_to(CircuitState.OPEN)
            elif self._consecutive_failures >= self.failure_threshold:
                self._move_to(CircuitState.OPEN)

        return False

    def reset(self) -> None:
        """Force the breaker closed (administrative use)."""
        with self._lock:
            self._move_to(CircuitState.CLOSED)
            logger.info(f"CircuitBreaker '{self.name}' manually reset")

"""
Circuit breaker guarding calls from the Booking Service to the Event Service.
"""

import asyncio
import logging
import time
from enum import Enum
from typing import Any, Dict, Optional
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)


class CircuitState(Enum):
    """Circuit breaker states."""
    CLOSED = "closed"      # Normal operation
    OPEN = "open"          # Circuit is open, failing fast
    HALF_OPEN = "half_open"  # Testing if service is back


@dataclass
class CircuitBreakerConfig:
    """Configuration for circuit breaker."""
    failure_threshold: int = 5          # Consecutive failures to open circuit
    recovery_timeout: float = 60        # Seconds to wait before trying again
    success_threshold: int = 3          # Successes needed to close circuit in half-open state


@dataclass
class CircuitBreakerStats:
    """Circuit breaker statistics."""
    state: CircuitState = CircuitState.CLOSED
    failure_count: int = 0
    success_count: int = 0
    last_failure_time: Optional[float] = None
    last_success_time: Optional[float] = None
    total_requests: int = 0
    total_failures: int = 0
    total_successes: int = 0
    rejected_requests: int = 0
    state_changes: Dict[str, int] = field(default_factory=lambda: {
        "closed_to_open": 0,
        "open_to_half_open": 0,
        "half_open_to_closed": 0,
        "half_open_to_open": 0
    })


class CircuitBreaker:
    """Circuit breaker state machine.

    The breaker does not execute calls itself: callers ask
    :meth:`allow_request` before going to the network and report the outcome
    through :meth:`record_success` / :meth:`record_failure`.
    """

    def __init__(self, name: str, config: Optional[CircuitBreakerConfig] = None):
        self.name = name
        self.config = config or CircuitBreakerConfig()
        self.stats = CircuitBreakerStats()
        self._lock = asyncio.Lock()

    @property
    def state(self) -> CircuitState:
        return self.stats.state

    async def allow_request(self) -> bool:
        """Return True when a live call may be attempted."""
        async with self._lock:
            self.stats.total_requests += 1

            if self._should_attempt_reset():
                self._transition(CircuitState.HALF_OPEN)

            if self.stats.state == CircuitState.OPEN:
                self.stats.rejected_requests += 1
                return False
            return True

    async def record_success(self):
        """Record a successful call."""
        async with self._lock:
            self.stats.success_count += 1
            self.stats.total_successes += 1
            self.stats.last_success_time = time.time()

            # Only consecutive failures open the circuit
            if self.stats.state == CircuitState.CLOSED:
                self.stats.failure_count = 0

            if (self.stats.state == CircuitState.HALF_OPEN and
                    self.stats.success_count >= self.config.success_threshold):
                self._transition(CircuitState.CLOSED)

            logger.debug(f"Circuit breaker {self.name}: Success recorded")

    async def record_failure(self):
        """Record a failed call."""
        async with self._lock:
            self.stats.failure_count += 1
            self.stats.total_failures += 1
            self.stats.last_failure_time = time.time()

            if self.stats.state == CircuitState.HALF_OPEN:
                self.stats.success_count = 0
                self._transition(CircuitState.OPEN)
            elif self._should_open_circuit():
                self._transition(CircuitState.OPEN)

            logger.warning(f"Circuit breaker {self.name}: Failure recorded ({self.stats.failure_count})")

    def _should_open_circuit(self) -> bool:
        return (self.stats.state == CircuitState.CLOSED and
                self.stats.failure_count >= self.config.failure_threshold)

    def _should_attempt_reset(self) -> bool:
        """Open long enough since the last failure to let a trial request through."""
        if self.stats.state != CircuitState.OPEN or not self.stats.last_failure_time:
            return False
        return time.time() - self.stats.last_failure_time >= self.config.recovery_timeout

    def _transition(self, new_state: CircuitState):
        old_state = self.stats.state
        self.stats.state = new_state
        self.stats.state_changes[f"{old_state.value}_to_{new_state.value}"] += 1

        if new_state == CircuitState.OPEN:
            logger.warning(f"Circuit breaker {self.name}: OPENED (failures: {self.stats.failure_count})")
        elif new_state == CircuitState.HALF_OPEN:
            self.stats.success_count = 0
            logger.info(f"Circuit breaker {self.name}: HALF-OPEN (attempting recovery)")
        else:
            self.stats.failure_count = 0
            self.stats.success_count = 0
            logger.info(f"Circuit breaker {self.name}: CLOSED (service recovered)")

    def reset(self):
        """Forget all recorded outcomes and close the circuit."""
        self.stats = CircuitBreakerStats()
        logger.info(f"Circuit breaker {self.name} has been reset")

    def get_stats(self) -> Dict[str, Any]:
        """Get circuit breaker statistics."""
        return {
            "name": self.name,
            "state": self.stats.state.value,
            "failure_count": self.stats.failure_count,
            "success_count": self.stats.success_count,
            "total_requests": self.stats.total_requests,
            "total_failures": self.stats.total_failures,
            "total_successes": self.stats.total_successes,
            "rejected_requests": self.stats.rejected_requests,
            "last_failure_time": self.stats.last_failure_time,
            "last_success_time": self.stats.last_success_time,
            "state_changes": self.stats.state_changes.copy(),
            "config": {
                "failure_threshold": self.config.failure_threshold,
                "recovery_timeout": self.config.recovery_timeout,
                "success_threshold": self.config.success_threshold
            }
        }

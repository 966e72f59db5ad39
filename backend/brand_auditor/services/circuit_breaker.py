"""
Circuit Breaker for the analysis service - Stop hammering a quota-limited
service once it keeps failing.

Pattern:
- Track consecutive failures
- Open circuit after N failures
- Let a limited number of trial calls through after the cooldown
"""

import time
from enum import Enum
from dataclasses import dataclass
from threading import Lock
from typing import Optional

from brand_auditor.config import settings
from brand_auditor.logger import logger


class CircuitState(Enum):
    """Circuit breaker states."""
    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"


@dataclass
class CircuitBreakerConfig:
    """Circuit breaker configuration."""
    failure_threshold: int = settings.ANALYSIS_FAILURE_THRESHOLD
    cooldown_seconds: int = settings.ANALYSIS_COOLDOWN_SECONDS
    half_open_max_calls: int = 1


class AnalysisCircuitBreaker:
    """Circuit breaker guarding analysis service calls."""

    def __init__(self, config: Optional[CircuitBreakerConfig] = None, clock=time.monotonic):
        self.config = config or CircuitBreakerConfig()
        self.state = CircuitState.CLOSED
        self.consecutive_failures = 0
        self.last_failure_time = 0.0
        self.half_open_calls = 0
        self._clock = clock
        self._lock = Lock()

    def can_call(self) -> tuple[bool, str]:
        """Check if an analysis call is allowed.

        Returns:
            Tuple of (allowed, reason)
        """
        with self._lock:
            if self.state == CircuitState.CLOSED:
                return True, "circuit_closed"

            if self.state == CircuitState.OPEN:
                elapsed = self._clock() - self.last_failure_time
                if elapsed < self.config.cooldown_seconds:
                    remaining = int(self.config.cooldown_seconds - elapsed)
                    return False, f"circuit_open_cooldown_{remaining}s"
                logger.info("Analysis circuit: transitioning to HALF_OPEN")
                self.state = CircuitState.HALF_OPEN
                self.half_open_calls = 0

            if self.half_open_calls < self.config.half_open_max_calls:
                self.half_open_calls += 1
                return True, "circuit_half_open_testing"
            return False, "circuit_half_open_max_calls"

    def record_success(self):
        with self._lock:
            if self.state == CircuitState.HALF_OPEN:
                logger.info("Analysis circuit: recovered, transitioning to CLOSED")
            self.state = CircuitState.CLOSED
            self.consecutive_failures = 0
            self.half_open_calls = 0

    def record_failure(self):
        with self._lock:
            self.consecutive_failures += 1
            self.last_failure_time = self._clock()

            if self.state == CircuitState.HALF_OPEN:
                logger.warning("Analysis circuit: trial call failed, reopening circuit")
                self.state = CircuitState.OPEN
                self.half_open_calls = 0
            elif self.consecutive_failures >= self.config.failure_threshold:
                if self.state != CircuitState.OPEN:
                    logger.error(
                        f"Analysis circuit: OPENED after {self.consecutive_failures} failures "
                        f"(cooldown: {self.config.cooldown_seconds}s)"
                    )
                self.state = CircuitState.OPEN
            else:
                logger.warning(
                    f"Analysis circuit: failure {self.consecutive_failures}/{self.config.failure_threshold}"
                )

    def get_status(self) -> dict:
        with self._lock:
            return {
                "state": self.state.value,
                "consecutive_failures": self.consecutive_failures,
                "failure_threshold": self.config.failure_threshold,
                "cooldown_seconds": self.config.cooldown_seconds,
                "time_since_last_failure": int(self._clock() - self.last_failure_time) if self.last_failure_time > 0 else None
            }


_circuit_breaker: AnalysisCircuitBreaker | None = None


def get_circuit_breaker() -> AnalysisCircuitBreaker:
    """Get global circuit breaker instance (singleton)."""
    global _circuit_breaker
    if _circuit_breaker is None:
        _circuit_breaker = AnalysisCircuitBreaker()
    return _circuit_breaker

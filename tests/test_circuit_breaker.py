"""
Analysis circuit breaker state transitions.
"""

import unittest

from brand_auditor.services.circuit_breaker import AnalysisCircuitBreaker, CircuitBreakerConfig, CircuitState

from helpers import FakeClock


class TestAnalysisCircuitBreaker(unittest.TestCase):
    def setUp(self):
        self.clock = FakeClock()
        self.breaker = AnalysisCircuitBreaker(
            CircuitBreakerConfig(failure_threshold=3, cooldown_seconds=30, half_open_max_calls=1),
            clock=self.clock,
        )

    def test_opens_after_threshold(self):
        for _ in range(2):
            self.breaker.record_failure()
        self.assertEqual(self.breaker.can_call()[0], True)

        self.breaker.record_failure()
        allowed, reason = self.breaker.can_call()
        self.assertFalse(allowed)
        self.assertTrue(reason.startswith("circuit_open_cooldown"))

    def test_success_resets_failure_count(self):
        self.breaker.record_failure()
        self.breaker.record_failure()
        self.breaker.record_success()
        self.breaker.record_failure()
        self.assertEqual(self.breaker.state, CircuitState.CLOSED)

    def test_half_open_trial_then_recovery(self):
        for _ in range(3):
            self.breaker.record_failure()
        self.clock.now += 31

        self.assertEqual(self.breaker.can_call(), (True, "circuit_half_open_testing"))
        self.assertFalse(self.breaker.can_call()[0])

        self.breaker.record_success()
        self.assertEqual(self.breaker.state, CircuitState.CLOSED)
        self.assertTrue(self.breaker.can_call()[0])

    def test_failed_trial_reopens(self):
        for _ in range(3):
            self.breaker.record_failure()
        self.clock.now += 31
        self.breaker.can_call()
        self.breaker.record_failure()
        self.assertEqual(self.breaker.state, CircuitState.OPEN)

    def test_status(self):
        self.breaker.record_failure()
        self.clock.now += 5
        status = self.breaker.get_status()
        self.assertEqual(status["state"], "closed")
        self.assertEqual(status["consecutive_failures"], 1)
        self.assertEqual(status["time_since_last_failure"], 5)

"""
Tests for the circuit breaker state machine.
"""

import pytest

from event_platform.utils.circuit_breaker import CircuitBreaker, CircuitBreakerConfig, CircuitState


def make_breaker(**config) -> CircuitBreaker:
    return CircuitBreaker("test", CircuitBreakerConfig(**config))


@pytest.mark.asyncio
async def test_starts_closed_and_allows_requests():
    breaker = make_breaker()

    assert breaker.state == CircuitState.CLOSED
    assert await breaker.allow_request() is True


@pytest.mark.asyncio
async def test_opens_after_consecutive_failures():
    breaker = make_breaker(failure_threshold=3)

    for _ in range(2):
        await breaker.record_failure()
    assert breaker.state == CircuitState.CLOSED

    await breaker.record_failure()
    assert breaker.state == CircuitState.OPEN
    assert await breaker.allow_request() is False
    assert breaker.get_stats()["rejected_requests"] == 1
    assert breaker.get_stats()["state_changes"]["closed_to_open"] == 1


@pytest.mark.asyncio
async def test_success_resets_failure_count_while_closed():
    breaker = make_breaker(failure_threshold=3)

    await breaker.record_failure()
    await breaker.record_failure()
    await breaker.record_success()
    await breaker.record_failure()

    assert breaker.state == CircuitState.CLOSED
    assert breaker.get_stats()["failure_count"] == 1


@pytest.mark.asyncio
async def test_half_open_after_recovery_timeout_then_closes():
    breaker = make_breaker(failure_threshold=1, recovery_timeout=0, success_threshold=2)
    await breaker.record_failure()
    assert breaker.state == CircuitState.OPEN

    assert await breaker.allow_request() is True
    assert breaker.state == CircuitState.HALF_OPEN

    await breaker.record_success()
    assert breaker.state == CircuitState.HALF_OPEN
    await breaker.record_success()
    assert breaker.state == CircuitState.CLOSED


@pytest.mark.asyncio
async def test_failure_while_half_open_reopens():
    breaker = make_breaker(failure_threshold=1, recovery_timeout=0)
    await breaker.record_failure()
    await breaker.allow_request()
    assert breaker.state == CircuitState.HALF_OPEN

    await breaker.record_failure()

    assert breaker.state == CircuitState.OPEN
    assert breaker.get_stats()["state_changes"]["half_open_to_open"] == 1


@pytest.mark.asyncio
async def test_stays_open_before_recovery_timeout():
    breaker = make_breaker(failure_threshold=1, recovery_timeout=3600)
    await breaker.record_failure()

    assert await breaker.allow_request() is False
    assert breaker.state == CircuitState.OPEN


@pytest.mark.asyncio
async def test_reset_closes_circuit():
    breaker = make_breaker(failure_threshold=1)
    await breaker.record_failure()

    breaker.reset()

    assert breaker.state == CircuitState.CLOSED
    assert breaker.get_stats()["total_failures"] == 0

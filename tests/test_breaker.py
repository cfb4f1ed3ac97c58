from wordgen.dictionary.breaker import BreakerState, CircuitBreaker


class _Clock:
    def __init__(self) -> None:
        self.now = 100.0

    def __call__(self) -> float:
        return self.now


def test_breaker_opens_after_consecutive_failures() -> None:
    breaker = CircuitBreaker(max_failures=3, cooldown_s=10, clock=_Clock())

    for _ in range(2):
        assert breaker.allow_request()
        breaker.record_failure()
    assert breaker.state is BreakerState.CLOSED

    breaker.record_failure()

    assert breaker.state is BreakerState.OPEN
    assert not breaker.allow_request()


def test_success_resets_failure_count() -> None:
    breaker = CircuitBreaker(max_failures=2, clock=_Clock())

    breaker.record_failure()
    breaker.record_success()
    breaker.record_failure()

    assert breaker.state is BreakerState.CLOSED


def test_half_open_admits_a_single_trial_then_closes_on_success() -> None:
    clock = _Clock()
    breaker = CircuitBreaker(max_failures=1, cooldown_s=10, clock=clock)
    breaker.record_failure()

    clock.now += 10
    assert breaker.state is BreakerState.HALF_OPEN
    assert breaker.allow_request()
    assert not breaker.allow_request()

    breaker.record_success()

    assert breaker.state is BreakerState.CLOSED
    assert breaker.allow_request()


def test_failed_trial_reopens_for_another_cooldown() -> None:
    clock = _Clock()
    breaker = CircuitBreaker(max_failures=1, cooldown_s=10, clock=clock)
    breaker.record_failure()

    clock.now += 11
    assert breaker.allow_request()
    breaker.record_failure()

    assert breaker.state is BreakerState.OPEN
    clock.now += 5
    assert not breaker.allow_request()
    clock.now += 5
    assert breaker.allow_request()

import pytest

from dispatch_admin.backoff import DEFAULT_RETRY_POLICY, RetryPolicy, delay_for


def test_default_schedule_starts_at_one_second_and_doubles():
    assert delay_for(1) == 1000
    assert delay_for(2) == 2000
    assert delay_for(3) == 4000
    assert delay_for(4) == 8000


def test_delay_is_clamped_at_max_delay():
    for attempt in range(1, 200):
        assert delay_for(attempt) <= DEFAULT_RETRY_POLICY.max_delay_ms
    assert delay_for(5) == 8000
    assert delay_for(50) == 8000


def test_custom_policy_uses_its_own_base_and_multiplier():
    policy = RetryPolicy(max_attempts=5, base_delay_ms=100, backoff_multiplier=3, max_delay_ms=1000)
    assert [policy.delay_for(n) for n in range(1, 5)] == [100, 300, 900, 1000]


def test_fractional_multiplier_does_not_overflow_on_huge_attempts():
    policy = RetryPolicy(base_delay_ms=10, backoff_multiplier=1.5, max_delay_ms=500)
    assert policy.delay_for(100_000) == 500


def test_attempt_is_one_indexed():
    with pytest.raises(ValueError):
        delay_for(0)


@pytest.mark.parametrize(
    "kwargs",
    [
        {"max_attempts": 0},
        {"base_delay_ms": -1},
        {"max_delay_ms": -5},
        {"backoff_multiplier": 0.5},
    ],
)
def test_policy_rejects_invalid_settings(kwargs):
    with pytest.raises(ValueError):
        RetryPolicy(**kwargs)

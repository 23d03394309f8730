import copy
from datetime import timedelta

import pytest

from tryhard.backoff_strategies import (
    BackoffStrategy,
    Break,
    Delay,
    ExponentialBackoff,
    FixedBackoff,
    LinearBackoff,
    NoBackoff,
    to_policy,
)

TEN_MS = timedelta(milliseconds=10)


def test_no_backoff_is_zero_for_every_attempt():
    strategy = NoBackoff()
    assert all(strategy.delay(n, "error") == timedelta(0) for n in range(1, 20))


def test_exponential_first_delay_is_initial():
    strategy = ExponentialBackoff(TEN_MS)
    assert strategy.delay(1, "error") == TEN_MS


def test_exponential_doubles_each_time():
    strategy = ExponentialBackoff(TEN_MS)
    delays = [strategy.delay(n, "error") for n in range(1, 8)]
    assert all(later == earlier * 2 for earlier, later in zip(delays, delays[1:]))


def test_exponential_saturates_instead_of_overflowing():
    strategy = ExponentialBackoff(timedelta.max)
    assert strategy.delay(1, None) == timedelta.max
    assert strategy.delay(2, None) == timedelta.max


def test_exponential_copy_has_independent_state():
    original = ExponentialBackoff(TEN_MS)
    original.delay(1, None)
    duplicate = copy.copy(original)
    assert duplicate.delay(2, None) == original.delay(2, None)


def test_fixed_never_changes():
    strategy = FixedBackoff(TEN_MS)
    assert {strategy.delay(n, "error") for n in range(1, 10)} == {TEN_MS}


def test_linear_scales_with_attempt():
    strategy = LinearBackoff(TEN_MS)
    for attempt in range(0, 10):
        assert strategy.delay(attempt, "error") == TEN_MS * attempt


def test_linear_saturates():
    strategy = LinearBackoff(timedelta.max)
    assert strategy.delay(3, None) == timedelta.max


def test_linear_rejects_negative_attempt():
    with pytest.raises(ValueError):
        LinearBackoff(TEN_MS).delay(-1, None)


def test_numbers_are_seconds():
    assert FixedBackoff(2).delay(1, None) == timedelta(seconds=2)


@pytest.mark.parametrize("cls", [ExponentialBackoff, FixedBackoff, LinearBackoff])
def test_negative_duration_rejected(cls):
    with pytest.raises(ValueError):
        cls(timedelta(seconds=-1))


@pytest.mark.parametrize("cls", [ExponentialBackoff, FixedBackoff, LinearBackoff])
def test_non_duration_rejected(cls):
    with pytest.raises(TypeError):
        cls("soon")


def test_to_policy_wraps_duration():
    assert to_policy(TEN_MS) == Delay(TEN_MS)


def test_to_policy_passes_policies_through():
    brk = Break()
    delay = Delay(TEN_MS)
    assert to_policy(brk) is brk
    assert to_policy(delay) is delay


def test_to_policy_rejects_other_values():
    with pytest.raises(TypeError):
        to_policy("later")


def test_break_instances_are_equal():
    assert Break() == Break()
    assert Break() != Delay(TEN_MS)


def test_custom_strategy_wrapping_another():
    class Wrapper(BackoffStrategy):
        def __init__(self):
            self.inner = ExponentialBackoff(TEN_MS)

        def delay(self, attempt, error):
            if isinstance(error, FileNotFoundError):
                return Break()
            return Delay(self.inner.delay(attempt, error))

    strategy = Wrapper()
    assert to_policy(strategy.delay(1, FileNotFoundError())) == Break()
    assert to_policy(strategy.delay(1, OSError())) == Delay(TEN_MS)


def test_abstract_strategy_cannot_be_instantiated():
    with pytest.raises(TypeError):
        BackoffStrategy()
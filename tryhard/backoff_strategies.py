"""Backoff strategies that decide how long to wait between attempts."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Any, Union

__all__ = [
    "BackoffStrategy",
    "Delay",
    "Break",
    "RetryPolicy",
    "to_policy",
    "NoBackoff",
    "ExponentialBackoff",
    "FixedBackoff",
    "LinearBackoff",
]

_ZERO = timedelta(0)


def _as_timedelta(value: Union[timedelta, int, float]) -> timedelta:
    """Normalise a duration given as a timedelta or a number of seconds."""
    if isinstance(value, bool):
        raise TypeError("a duration cannot be a bool")
    if isinstance(value, timedelta):
        result = value
    elif isinstance(value, (int, float)):
        result = timedelta(seconds=value)
    else:
        raise TypeError(
            f"expected a timedelta or a number of seconds, got {type(value).__name__}"
        )
    if result < _ZERO:
        raise ValueError("a duration cannot be negative")
    return result


def _saturating_mul(delay: timedelta, factor: int) -> timedelta:
    """Multiply a duration, clamping to the largest representable one on overflow."""
    if factor < 0:
        raise ValueError("the attempt number cannot be negative")
    try:
        return delay * factor
    except OverflowError:
        return timedelta.max


@dataclass(frozen=True)
class Delay:
    """Try again after ``duration``."""

    duration: timedelta

    def __post_init__(self) -> None:
        object.__setattr__(self, "duration", _as_timedelta(self.duration))


@dataclass(frozen=True)
class Break:
    """Stop retrying and give back the most recent error."""


RetryPolicy = Union[Delay, Break]


def to_policy(value: Any) -> RetryPolicy:
    """Turn what a backoff strategy returned into a :data:`RetryPolicy`."""
    if isinstance(value, (Delay, Break)):
        return value
    return Delay(_as_timedelta(value))


class BackoffStrategy(ABC):
    """Computes the delay before the next attempt."""

    @abstractmethod
    def delay(self, attempt: int, error: Any) -> Union[timedelta, RetryPolicy]:
        """Return the delay given the attempt number and the most recent error."""


@dataclass
class NoBackoff(BackoffStrategy):
    """Retry immediately, with no delay between attempts."""

    def delay(self, attempt: int, error: Any) -> timedelta:
        return _ZERO


@dataclass
class ExponentialBackoff(BackoffStrategy):
    """Start at an initial delay and double it after every attempt."""

    initial_delay: timedelta
    _current: timedelta = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self.initial_delay = _as_timedelta(self.initial_delay)
        self._current = self.initial_delay

    def delay(self, attempt: int, error: Any) -> timedelta:
        previous = self._current
        self._current = _saturating_mul(self._current, 2)
        return previous


@dataclass
class FixedBackoff(BackoffStrategy):
    """Wait the same delay between every attempt."""

    initial_delay: timedelta

    def __post_init__(self) -> None:
        self.initial_delay = _as_timedelta(self.initial_delay)

    def delay(self, attempt: int, error: Any) -> timedelta:
        return self.initial_delay


@dataclass
class LinearBackoff(BackoffStrategy):
    """Wait ``initial_delay * attempt`` between attempts."""

    initial_delay: timedelta

    def __post_init__(self) -> None:
        self.initial_delay = _as_timedelta(self.initial_delay)

    def delay(self, attempt: int, error: Any) -> timedelta:
        return _saturating_mul(self.initial_delay, attempt)
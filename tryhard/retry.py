"""Retrying asynchronous operations with configurable backoff."""

from __future__ import annotations

import asyncio
import copy
import inspect
from dataclasses import dataclass, field, replace
from datetime import timedelta
from typing import Any, Awaitable, Callable, Generator, Optional, Set, Union

from tryhard.backoff_strategies import (
    BackoffStrategy,
    Break,
    ExponentialBackoff,
    FixedBackoff,
    LinearBackoff,
    NoBackoff,
    _as_timedelta,
    to_policy,
)

__all__ = ["RetryFutureConfig", "RetryFn", "RetryFuture", "retry_fn"]

DurationLike = Union[timedelta, int, float]
OnRetryHook = Callable[[int, Optional[timedelta], BaseException], Any]
MakeFuture = Callable[[], Awaitable[Any]]

# Hook tasks run detached; holding references keeps them alive until done.
_background_tasks: Set["asyncio.Future[Any]"] = set()


def _check_strategy(strategy: Any) -> None:
    if callable(getattr(strategy, "delay", None)) or callable(strategy):
        return
    raise TypeError(
        "a backoff strategy must have a delay(attempt, error) method or be callable"
    )


def _compute_delay(strategy: Any, attempt: int, error: BaseException) -> Any:
    method = getattr(strategy, "delay", None)
    if callable(method):
        return method(attempt, error)
    return strategy(attempt, error)


def _spawn_hook(
    hook: Optional[OnRetryHook],
    attempt: int,
    next_delay: Optional[timedelta],
    error: BaseException,
) -> None:
    """Start the on-retry hook without waiting for it to finish."""
    if hook is None:
        return
    result = hook(attempt, next_delay, error)
    if inspect.isawaitable(result):
        task = asyncio.ensure_future(result)
        _background_tasks.add(task)
        task.add_done_callback(_background_tasks.discard)


@dataclass(frozen=True, repr=False)
class RetryFutureConfig:
    """How to retry an operation; reusable across many operations."""

    max_retries: int
    backoff_strategy: Any = field(default_factory=NoBackoff)
    delay_limit: Optional[timedelta] = None
    retry_hook: Optional[OnRetryHook] = None

    def __post_init__(self) -> None:
        if isinstance(self.max_retries, bool) or not isinstance(self.max_retries, int):
            raise TypeError("max_retries must be an integer")
        if self.max_retries < 0:
            raise ValueError("max_retries cannot be negative")
        _check_strategy(self.backoff_strategy)
        if self.delay_limit is not None:
            object.__setattr__(self, "delay_limit", _as_timedelta(self.delay_limit))

    def max_delay(self, delay: DurationLike) -> "RetryFutureConfig":
        """Cap the time slept between attempts."""
        return replace(self, delay_limit=_as_timedelta(delay))

    def no_backoff(self) -> "RetryFutureConfig":
        """Retry immediately without any delay."""
        return self.custom_backoff(NoBackoff())

    def exponential_backoff(self, initial_delay: DurationLike) -> "RetryFutureConfig":
        """Start at ``initial_delay`` and double the delay every attempt."""
        return self.custom_backoff(ExponentialBackoff(initial_delay))

    def fixed_backoff(self, delay: DurationLike) -> "RetryFutureConfig":
        """Wait ``delay`` between every attempt."""
        return self.custom_backoff(FixedBackoff(delay))

    def linear_backoff(self, delay: DurationLike) -> "RetryFutureConfig":
        """Wait ``delay * attempt`` between attempts."""
        return self.custom_backoff(LinearBackoff(delay))

    def custom_backoff(self, backoff_strategy: Any) -> "RetryFutureConfig":
        """Use a strategy object or a ``(attempt, error)`` callable."""
        return replace(self, backoff_strategy=backoff_strategy)

    def on_retry(self, f: OnRetryHook) -> "RetryFutureConfig":
        """Start ``f(attempt, next_delay, error)`` in the background on each failure."""
        if not callable(f):
            raise TypeError("the on_retry hook must be callable")
        return replace(self, retry_hook=f)

    def __repr__(self) -> str:
        hook = self.retry_hook
        hook_name = "None" if hook is None else getattr(
            hook, "__qualname__", type(hook).__qualname__
        )
        return (
            f"RetryFutureConfig(backoff_strategy={self.backoff_strategy!r}, "
            f"max_delay={self.delay_limit!r}, max_retries={self.max_retries!r}, "
            f"on_retry=<{hook_name}>)"
        )


class RetryFuture:
    """An awaitable that runs an operation, retrying it on failure."""

    def __init__(self, make_future: MakeFuture, config: RetryFutureConfig) -> None:
        self._make_future = make_future
        self.config = config

    def _with(self, config: RetryFutureConfig) -> "RetryFuture":
        return RetryFuture(self._make_future, config)

    def max_delay(self, delay: DurationLike) -> "RetryFuture":
        """Cap the time slept between attempts."""
        return self._with(self.config.max_delay(delay))

    def no_backoff(self) -> "RetryFuture":
        """Retry immediately without any delay."""
        return self._with(self.config.no_backoff())

    def exponential_backoff(self, initial_delay: DurationLike) -> "RetryFuture":
        """Start at ``initial_delay`` and double the delay every attempt."""
        return self._with(self.config.exponential_backoff(initial_delay))

    def fixed_backoff(self, delay: DurationLike) -> "RetryFuture":
        """Wait ``delay`` between every attempt."""
        return self._with(self.config.fixed_backoff(delay))

    def linear_backoff(self, delay: DurationLike) -> "RetryFuture":
        """Wait ``delay * attempt`` between attempts."""
        return self._with(self.config.linear_backoff(delay))

    def custom_backoff(self, backoff_strategy: Any) -> "RetryFuture":
        """Use a strategy object or a ``(attempt, error)`` callable."""
        return self._with(self.config.custom_backoff(backoff_strategy))

    def on_retry(self, f: OnRetryHook) -> "RetryFuture":
        """Start ``f(attempt, next_delay, error)`` in the background on each failure."""
        return self._with(self.config.on_retry(f))

    async def run(self) -> Any:
        """Run the operation until it succeeds or retrying stops.

        Returns the operation's result, or re-raises its most recent exception.
        """
        config = self.config
        strategy = copy.copy(config.backoff_strategy)
        attempts_remaining = config.max_retries
        attempt = 0
        while True:
            try:
                return await self._make_future()
            except Exception as error:
                if attempts_remaining == 0:
                    _spawn_hook(config.retry_hook, attempt, None, error)
                    raise
                attempt += 1
                attempts_remaining -= 1
                policy = to_policy(_compute_delay(strategy, attempt, error))
                if isinstance(policy, Break):
                    _spawn_hook(config.retry_hook, attempt, None, error)
                    raise
                delay = policy.duration
                if config.delay_limit is not None:
                    delay = min(delay, config.delay_limit)
                _spawn_hook(config.retry_hook, attempt, delay, error)
            await asyncio.sleep(delay.total_seconds())

    def __await__(self) -> Generator[Any, None, Any]:
        return self.run().__await__()


@dataclass(frozen=True)
class RetryFn:
    """Produces retryable operations from a factory of awaitables."""

    f: MakeFuture

    def retries(self, max_retries: int) -> RetryFuture:
        """Retry at most ``max_retries`` times, with no backoff."""
        return self.with_config(RetryFutureConfig(max_retries))

    def with_config(self, config: RetryFutureConfig) -> RetryFuture:
        """Retry according to ``config``."""
        return RetryFuture(self.f, config)


def retry_fn(f: MakeFuture) -> RetryFn:
    """Wrap a callable that returns a fresh awaitable for every attempt."""
    if not callable(f):
        raise TypeError("retry_fn needs a callable that returns an awaitable")
    return RetryFn(f)
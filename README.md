# tryhard

Easily retry asyncio operations.

`tryhard` takes a function that makes a fresh awaitable and runs it again
whenever it raises. You can choose a backoff between attempts, put a cap on the
delay, and start a hook before each retry.

It has two modules:

- `tryhard.retry` provides `retry_fn`, `RetryFn`, `RetryFuture` and `RetryFutureConfig`.
- `tryhard.backoff_strategies` provides `BackoffStrategy`, `NoBackoff`,
  `FixedBackoff`, `LinearBackoff`, `ExponentialBackoff`, the `Delay` and
  `Break` policies, and `to_policy`.

## Basic use

```python
from tryhard.retry import retry_fn


async def read_file(path: str) -> str:
    ...


async def main() -> None:
    # retry at most 10 times
    contents = await retry_fn(lambda: read_file("pyproject.toml")).retries(10)
```

There are two ways to run a `RetryFuture`. You can await it directly, or you
can await its `run()` coroutine. It returns the operation's result. If every
attempt fails, it re-raises the exception from the last attempt.

Only exceptions derived from `Exception` lead to a retry. Anything else is never
retried, for example `asyncio.CancelledError` or `KeyboardInterrupt`.

## Backoff and maximum delay

You can give a delay as a `datetime.timedelta` or as a number of seconds.
Negative delays raise `ValueError`.

```python
contents = await (
    retry_fn(lambda: read_file("pyproject.toml"))
    .retries(10)
    .exponential_backoff(0.01)
    .max_delay(1.0)
)
```

The built-in strategies are:

- `no_backoff()`: retry immediately. This is the default.
- `fixed_backoff(delay)`: always wait `delay`.
- `linear_backoff(delay)`: wait `delay * attempt`, where the first retry is attempt 1.
- `exponential_backoff(initial_delay)`: start at `initial_delay` and double the delay every time.

When a delay is too large for a `timedelta`, it stops growing at `timedelta.max`.

Each run works on its own copy of the strategy. Because of this, an
`ExponentialBackoff` begins again at its initial delay every time the operation
is run.

## Custom backoff and stopping early

`custom_backoff` accepts either of these:

- a function of the attempt number and the most recent error;
- an object with a `delay(attempt, error)` method, such as a subclass of `BackoffStrategy`.

It may return a delay, meaning a `timedelta` or a number of seconds. It may
instead return a `Delay` or a `Break` from `tryhard.backoff_strategies`.
Returning `Break()` stops retrying and re-raises the most recent error.

```python
from tryhard.backoff_strategies import Break, Delay


def policy(attempt, error):
    if "foobar" in str(error):
        return Break()
    return Delay(0.05)


await retry_fn(lambda: read_file("pyproject.toml")).retries(10).custom_backoff(policy)
```

`to_policy(value)` converts a strategy's return value into a `Delay` or a
`Break`, the same way the retry loop does.

## Running something before each retry

`on_retry` takes a function of `(attempt, next_delay, error)`. It is called
every time an attempt fails, before the sleep. If it returns an awaitable, that
awaitable is scheduled as a background task and is not awaited, so the retrying
is not held up.

When retrying stops, the hook is called one last time with `next_delay` set to
`None`. That happens in two cases:

- the retries are used up;
- the backoff returned `Break`.

```python
errors = []


async def record(attempt, next_delay, error):
    errors.append((attempt, next_delay, str(error)))


await retry_fn(lambda: read_file("pyproject.toml")).retries(10).on_retry(record)
```

## Reusing a configuration

`RetryFutureConfig` is an immutable description of how to retry. Each of its
methods returns a new configuration, so several operations can be retried the
same way:

```python
from tryhard.retry import RetryFutureConfig, retry_fn

config = RetryFutureConfig(10).exponential_backoff(0.01).max_delay(3.0)

await retry_fn(lambda: read_file("pyproject.toml")).with_config(config)
await retry_fn(lambda: read_file("README.md")).with_config(config)
```

`max_retries` must be a non-negative integer. Otherwise it raises `TypeError` or
`ValueError`.

The builder methods on `RetryFuture` also return new objects and leave the
original unchanged. These are `max_delay`, `no_backoff`, `fixed_backoff`,
`linear_backoff`, `exponential_backoff`, `custom_backoff` and `on_retry`.

## How many times will my operation run?

It always runs at least once. With `.retries(0)` it runs once. With
`.retries(10)`, if it always fails, it runs 11 times.

## Why a function and not an awaitable?

A coroutine can only be awaited once. One that failed part way may also be left
in an inconsistent state. Every attempt therefore needs a fresh awaitable,
which is why `retry_fn` takes a function that makes one.

## What it does not do

- It only retries awaitables under asyncio. There is no helper for retrying
  plain synchronous functions.
- Delays are exactly what the strategy returns. No random jitter is added.

## Be careful what you retry

This is meant for simple operations, such as sending a single request to a
service that occasionally fails. Some operations are made of several steps that
can each fail. Retrying the whole of such an operation may repeat steps that
already succeeded.
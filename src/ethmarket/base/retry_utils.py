"""Retry flaky node calls with exponential backoff."""

from __future__ import annotations

import logging
import time
from typing import Callable, NamedTuple, ParamSpec, TypeVar

P = ParamSpec("P")
R = TypeVar("R")


class RetryCallOptions(NamedTuple):
    """Backoff between attempts: the n-th wait is `start_latency * backoff_multiplier**n` seconds."""

    start_latency: float = 0.01
    backoff_multiplier: float = 2


def retry_call(
    retry_count: int,
    retry_exception_check: Callable[[Exception], bool] | None,
    func: Callable[P, R],
    *args: P.args,
    options: RetryCallOptions = RetryCallOptions(),  # type: ignore
    **kwargs: P.kwargs,
) -> R:
    """Call `func` until it succeeds or `retry_count` attempts have failed.

    Arguments
    ---------
    retry_count: int
        The total number of attempts. Must be at least 1.
    retry_exception_check: Callable[[Exception], bool] | None
        Decides whether an exception is worth another attempt. Exceptions it rejects are raised at once.
        If None, every exception is retried.
    func: Callable[P, R]
        The function to call, e.g. `contract_function.call`.
    *args: P.args
        Positional arguments for `func`.
    options: RetryCallOptions, optional
        Backoff between attempts.
    **kwargs: P.kwargs
        Keyword arguments for `func`.

    Returns
    -------
    R
        Whatever `func` returns on the first successful attempt.
    """
    if retry_count < 1:
        raise ValueError(f"{retry_count=} must be at least 1")
    func_name = getattr(func, "__qualname__", repr(func))
    delay = options.start_latency
    for attempt in range(1, retry_count + 1):
        try:
            return func(*args, **kwargs)
        except Exception as exc:  # pylint: disable=broad-exception-caught
            if retry_exception_check is not None and not retry_exception_check(exc):
                raise
            logging.warning("Retry attempt %s of %s for %s failed with %r", attempt, retry_count, func_name, exc)
            if attempt == retry_count:
                raise
            time.sleep(delay)
            delay *= options.backoff_multiplier
    raise AssertionError("unreachable")

"""Run blocking web3 calls concurrently from async code."""

from __future__ import annotations

import asyncio
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, Sequence


async def async_runner(funcs: Sequence[Callable[[], Any]]) -> list[Any]:
    """Run a list of zero-argument functions in worker threads and gather their results in order.

    NOTE: use `functools.partial()` to pass in arguments to the functions.
    The first exception raised by any function is re-raised once all of them have finished.

    Arguments
    ---------
    funcs: Sequence[Callable[[], Any]]
        The functions to run. They must be thread safe.

    Returns
    -------
    list[Any]
        The results, in the same order as `funcs`.
    """
    if not funcs:
        return []
    loop = asyncio.get_running_loop()
    with ThreadPoolExecutor(max_workers=len(funcs)) as pool:
        results = await asyncio.gather(
            *[loop.run_in_executor(pool, func) for func in funcs], return_exceptions=True
        )
    for result in results:
        if isinstance(result, BaseException):
            raise result
    return list(results)

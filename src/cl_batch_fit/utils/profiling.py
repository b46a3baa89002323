"""Performance profiling utilities for cl_batch_fit algorithms."""

import time
from collections.abc import Callable
from functools import wraps
from typing import ParamSpec, TypeVar, overload

from loguru import logger

P = ParamSpec("P")
R = TypeVar("R")


@overload
def timed(func: Callable[P, R], /) -> Callable[P, R]: ...


@overload
def timed(*, level: str = "DEBUG") -> Callable[[Callable[P, R]], Callable[P, R]]: ...


def timed(
    func: Callable[P, R] | None = None,
    /,
    *,
    level: str = "DEBUG",
) -> Callable[P, R] | Callable[[Callable[P, R]], Callable[P, R]]:
    """Decorator to measure and log execution time of algorithm functions.

    Usage:
        @timed
        def fit(...): ...

        @timed(level="INFO")
        def fit(...): ...

    The elapsed time is logged even when the function raises.
    """

    def decorate(fn: Callable[P, R]) -> Callable[P, R]:
        @wraps(fn)
        def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            start_time = time.perf_counter()
            try:
                return fn(*args, **kwargs)
            finally:
                elapsed_time = time.perf_counter() - start_time
                logger.log(level, f"[PROFILE] {fn.__qualname__} took {elapsed_time:.3f}s")

        return wrapper

    if func is not None:
        return decorate(func)
    return decorate

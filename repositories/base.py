"""Shared plumbing for the MongoDB repositories."""

from __future__ import annotations

import functools
from typing import Any, Awaitable, Callable, TypeVar

from pymongo.errors import DuplicateKeyError, PyMongoError

from errors import PersistenceError
from shared.logging import get_logger

log = get_logger(__name__)

T = TypeVar("T")


def translate_errors(
    operation: str,
) -> Callable[[Callable[..., Awaitable[T]]], Callable[..., Awaitable[T]]]:
    """Turn driver errors from a repository coroutine into PersistenceError.

    DuplicateKeyError is re-raised untouched because callers use it as a
    signal (lost insert race, email already registered).
    """

    def decorator(fn: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
        @functools.wraps(fn)
        async def wrapper(*args: Any, **kwargs: Any) -> T:
            try:
                return await fn(*args, **kwargs)
            except DuplicateKeyError:
                raise
            except PyMongoError as e:
                log.error(
                    "repository_operation_failed",
                    operation=operation,
                    error=str(e),
                    error_type=type(e).__name__,
                )
                raise PersistenceError("Storage is temporarily unavailable") from e

        return wrapper

    return decorator

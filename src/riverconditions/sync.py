"""
Blocking access to the async riverconditions API.

Public coroutines are decorated with ``add_sync_version`` and gain a
``.sync`` attribute that runs them to completion on a fresh event loop:

    # Instead of this async code:
    record = await get_river_record("mckenzie_hayden")

    # Use this sync code:
    record = get_river_record.sync("mckenzie_hayden")

Each coroutine opens and closes whatever HTTP clients it needs itself, so
the bridge never creates clients on the caller's behalf.
"""

import asyncio
import functools
from typing import Any, Awaitable, Callable, Optional, TypeVar

R = TypeVar("R")


class AsyncSyncBridge:
    """Runs async functions from blocking code."""

    @staticmethod
    def run_async(
        async_fn: Callable[..., Awaitable[R]],
        args: tuple = (),
        kwargs: Optional[dict] = None,
    ) -> R:
        """Run an async function synchronously.

        Args:
            async_fn: Async function to run
            args: Positional arguments for the function
            kwargs: Keyword arguments for the function

        Returns:
            Result of running the async function

        Raises:
            RuntimeError: If called from within an existing event loop
        """
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            pass
        else:
            raise RuntimeError(
                "Cannot use sync version from within an existing asyncio event loop. "
                "Use the async version instead."
            )

        return asyncio.run(async_fn(*args, **(kwargs or {})))


def add_sync_version(
    async_fn: Callable[..., Awaitable[R]],
) -> Callable[..., Awaitable[R]]:
    """
    Attach a blocking ``.sync`` twin to a coroutine function.

    Example:
        >>> @add_sync_version
        ... async def double(x):
        ...     return x * 2

        >>> double.sync(5)
        10
    """

    @functools.wraps(async_fn)
    def sync_wrapper(*args: Any, **kwargs: Any) -> R:
        return AsyncSyncBridge.run_async(async_fn, args=args, kwargs=kwargs)

    async_fn.sync = sync_wrapper  # type: ignore
    return async_fn

"""A single-threaded asyncio runtime on which spawned coroutines run."""

from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Coroutine, Optional, TypeVar

__all__ = ["Runtime", "default_event_loop", "spawn"]

T = TypeVar("T")


def default_event_loop() -> asyncio.AbstractEventLoop:
    """Create a fresh event loop with default settings."""
    return asyncio.new_event_loop()


class Runtime:
    """Owns an event loop and runs every spawned coroutine on the current thread."""

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None) -> None:
        self._loop = loop if loop is not None else default_event_loop()

    def spawn(self, coro: Coroutine[Any, Any, T]) -> "asyncio.Task[T]":
        """Schedule a coroutine on this runtime and return its task.

        The task only makes progress while ``block_on`` is running.
        """
        return self._loop.create_task(coro)

    def block_on(self, awaitable: Awaitable[T]) -> T:
        """Run the loop until ``awaitable`` completes and return its result.

        Other spawned tasks also progress meanwhile, but are not waited for.
        """
        return self._loop.run_until_complete(awaitable)

    def event_loop(self) -> asyncio.AbstractEventLoop:
        """Return the underlying event loop."""
        return self._loop

    def close(self) -> None:
        """Cancel pending tasks and close the event loop."""
        if self._loop.is_closed():
            return
        pending = [task for task in asyncio.all_tasks(self._loop) if not task.done()]
        for task in pending:
            task.cancel()
        if pending:
            self._loop.run_until_complete(
                asyncio.gather(*pending, return_exceptions=True)
            )
        self._loop.close()

    def __enter__(self) -> "Runtime":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"Runtime(loop={self._loop!r})"


def spawn(coro: Coroutine[Any, Any, T]) -> "asyncio.Task[T]":
    """Spawn a coroutine as a task on the running event loop.

    Raises ``RuntimeError`` if no event loop is running on this thread.
    """
    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:
        coro.close()
        raise RuntimeError("no runtime is running on this thread") from None
    return loop.create_task(coro)
"""Cancellation token for retried operations."""

import asyncio
from typing import Awaitable, Callable, Optional, TypeVar

from .errors import RequestCancelledError

T = TypeVar("T")


class CancellationToken:
    """
    Signal that aborts a retried operation.

    Once cancelled a token stays cancelled. Anything raced against the token,
    in-flight requests and backoff sleeps alike, is abandoned immediately and
    RequestCancelledError is raised in its place.

    The token may be created outside a running event loop; the underlying
    event is bound to the loop that first waits on it.
    """

    def __init__(self) -> None:
        self._cancelled = False
        self._event: Optional[asyncio.Event] = None

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        """Cancel the token, waking every pending wait."""
        self._cancelled = True
        if self._event is not None:
            self._event.set()

    def raise_if_cancelled(self) -> None:
        if self._cancelled:
            raise RequestCancelledError()

    def _waiter(self) -> asyncio.Event:
        if self._event is None:
            self._event = asyncio.Event()
            if self._cancelled:
                self._event.set()
        return self._event

    async def race(self, awaitable: Awaitable[T]) -> T:
        """
        Await `awaitable` unless the token is cancelled first.

        The losing side is cancelled. A result that lands after the token was
        cancelled is discarded.

        Raises:
            RequestCancelledError: If the token is or becomes cancelled
        """
        if self._cancelled:
            if asyncio.iscoroutine(awaitable):
                awaitable.close()
            raise RequestCancelledError()

        task = asyncio.ensure_future(awaitable)
        waiter = asyncio.ensure_future(self._waiter().wait())
        try:
            await asyncio.wait({task, waiter}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            waiter.cancel()
            if not task.done():
                task.cancel()

        if self._cancelled:
            if task.done() and not task.cancelled():
                task.exception()
            raise RequestCancelledError()
        return task.result()

    async def sleep(
        self,
        seconds: float,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        """
        Sleep for `seconds` unless the token is cancelled first.

        Args:
            seconds: Delay in seconds
            sleep: Coroutine function that performs the delay

        Raises:
            RequestCancelledError: If the token is or becomes cancelled
        """
        self.raise_if_cancelled()
        await self.race(sleep(max(seconds, 0)))

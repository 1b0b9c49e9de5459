import asyncio
import logging
from typing import Awaitable, Set, TypeVar

from .models import SessionCancelledError

_log = logging.getLogger(__name__)

T = TypeVar("T")


class CancellationToken:
    """
    Groups the async calls of one editing session so they can be cancelled together.

    Every call is run as its own task through `run()`. `cancel()` cancels the
    tasks still in flight; their awaiting callers get SessionCancelledError.
    Once cancelled, a token refuses new work.
    """

    def __init__(self):
        self._in_flight: Set[asyncio.Task] = set()
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def in_flight(self) -> int:
        return len(self._in_flight)

    async def run(self, awaitable: Awaitable[T]) -> T:
        if self._cancelled:
            # Close the coroutine so it is not reported as never awaited
            if asyncio.iscoroutine(awaitable):
                awaitable.close()
            raise SessionCancelledError("Session is closed")
        task = asyncio.ensure_future(awaitable)
        self._in_flight.add(task)
        try:
            return await task
        except asyncio.CancelledError:
            if self._cancelled:
                raise SessionCancelledError("Operation cancelled because the session was closed") from None
            raise
        finally:
            self._in_flight.discard(task)

    def cancel(self) -> None:
        if self._cancelled:
            return
        self._cancelled = True
        pending = [t for t in self._in_flight if not t.done()]
        for task in pending:
            task.cancel()
        if pending:
            _log.debug(f"Cancelled {len(pending)} in-flight operation(s)")

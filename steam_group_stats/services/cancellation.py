"""Cooperative cancellation shared by every fetch of one analysis run."""

import asyncio
from collections.abc import Awaitable
from typing import TypeVar

import structlog

log = structlog.stdlib.get_logger()

T = TypeVar("T")


class OperationCancelled(Exception):
    """Raised inside a run once its token has been cancelled.

    This is a control-flow signal, not an application error, and must never
    be shown to the user.
    """


class CancellationToken:
    """One-shot cancellation flag that can also abort in-flight awaits."""

    def __init__(self, name: str = "run") -> None:
        self.name = name
        self._event = asyncio.Event()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> None:
        if not self._event.is_set():
            log.info("Cancellation requested", token=self.name)
        self._event.set()

    async def wait(self) -> None:
        await self._event.wait()

    async def guard(self, awaitable: Awaitable[T]) -> T:
        """Await ``awaitable`` unless the token fires first.

        When the token wins the race the pending operation is cancelled and
        ``OperationCancelled`` is raised. An operation that finished in the
        same tick keeps its result.
        """
        if self.cancelled:
            if asyncio.iscoroutine(awaitable):
                awaitable.close()
            raise OperationCancelled(self.name)

        operation = asyncio.ensure_future(awaitable)
        waiter = asyncio.ensure_future(self.wait())
        try:
            done, _ = await asyncio.wait(
                {operation, waiter},
                return_when=asyncio.FIRST_COMPLETED,
            )
        except asyncio.CancelledError:
            operation.cancel()
            raise
        finally:
            waiter.cancel()

        if operation in done:
            return operation.result()

        operation.cancel()
        try:
            await operation
        except asyncio.CancelledError:
            pass
        except Exception as e:
            log.debug("Abandoned operation failed after cancellation", token=self.name, error=str(e))
        raise OperationCancelled(self.name)

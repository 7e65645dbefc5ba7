from __future__ import annotations

import asyncio
import contextlib
from collections.abc import Awaitable
from typing import TypeVar

from bitbucket_provider.errors import ReadCancelledError

T = TypeVar("T")


class CancellationToken:
    """Host-supplied signal that a read should stop at the next I/O boundary.

    Tripping the token is idempotent and may happen from any coroutine on
    the same event loop.

    Example::

        token = CancellationToken()
        task = asyncio.create_task(provider.read_data_source(..., cancel=token))
        token.cancel()
    """

    def __init__(self) -> None:
        self._event = asyncio.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    async def wait(self) -> None:
        await self._event.wait()

    def raise_if_cancelled(self, *, binding: str | None = None, url: str | None = None) -> None:
        if self.cancelled:
            raise ReadCancelledError(binding=binding, url=url)


async def run_cancellable(
    awaitable: Awaitable[T],
    token: CancellationToken | None,
    *,
    binding: str | None = None,
    url: str | None = None,
) -> T:
    """Await *awaitable* unless *token* is tripped first.

    When the token wins the race the underlying task is cancelled and
    awaited before :class:`~bitbucket_provider.errors.ReadCancelledError` is
    raised, so no I/O is left running behind the caller.
    """
    if token is None:
        return await awaitable

    token.raise_if_cancelled(binding=binding, url=url)
    task = asyncio.ensure_future(awaitable)
    waiter = asyncio.ensure_future(token.wait())
    try:
        await asyncio.wait({task, waiter}, return_when=asyncio.FIRST_COMPLETED)
    except BaseException:
        task.cancel()
        raise
    finally:
        waiter.cancel()

    if task.done():
        return task.result()

    task.cancel()
    with contextlib.suppress(asyncio.CancelledError):
        await task
    raise ReadCancelledError(binding=binding, url=url)

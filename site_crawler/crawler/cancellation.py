# site_crawler/crawler/cancellation.py
"""Cancellation handle shared by every fetch of one crawl run."""
from __future__ import annotations

import asyncio
from typing import Awaitable, TypeVar

__all__ = ("CancellationToken", "CrawlCancelledError")

T = TypeVar("T")


class CrawlCancelledError(Exception):
    """The crawl was stopped (explicitly or by timeout) while work was pending."""


class CancellationToken:
    """One-shot flag backed by :class:`asyncio.Event`.

    ``cancel()`` is sticky; :meth:`run` makes an awaitable fail promptly once
    the token fires.
    """

    def __init__(self) -> None:
        self._event = asyncio.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    async def run(self, aw: Awaitable[T]) -> T:
        """Await *aw*, abandoning it with CrawlCancelledError if the token fires first."""
        task = asyncio.ensure_future(aw)
        if self.cancelled:
            task.cancel()
            await asyncio.wait({task})
            raise CrawlCancelledError()

        waiter = asyncio.ensure_future(self._event.wait())
        try:
            await asyncio.wait({task, waiter}, return_when=asyncio.FIRST_COMPLETED)
        except asyncio.CancelledError:
            task.cancel()
            raise
        finally:
            waiter.cancel()

        if task.done():
            return task.result()
        task.cancel()
        await asyncio.wait({task})
        raise CrawlCancelledError()

# site_crawler/crawler/url_state.py
"""
URL lifecycle tracking for one crawl run.

A URL is *in flight* while a job for it is queued or running, and has at most
one terminal state: visited or errored. The two views are independent, so a
claimed URL can already carry a terminal state (e.g. a retry of an errored
URL). All calls happen on the event loop thread, hence no locking.
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Dict, List, Set, Union

from site_crawler.crawler.models import ErroredRecord, VisitedRecord
from site_crawler.logger import get_logger

__all__ = ("URLStateStore",)

logger = get_logger("url_state")

_Record = Union[VisitedRecord, ErroredRecord]


class URLStateStore:
    """In-memory map of normalized URL -> state, plus the in-flight set."""

    def __init__(self) -> None:
        self._records: Dict[str, _Record] = {}
        self._in_flight: Set[str] = set()

    # in-flight ------------------------------------------------------------
    def claim(self, url: str) -> None:
        self._in_flight.add(url)

    def release(self, url: str) -> None:
        self._in_flight.discard(url)

    def is_in_flight(self, url: str) -> bool:
        return url in self._in_flight

    def in_flight_count(self) -> int:
        return len(self._in_flight)

    # terminal states --------------------------------------------------------
    def mark_visited(self, url: str) -> None:
        """Record a successful fetch; replaces an earlier error for the same URL."""
        self._records[url] = VisitedRecord(url=url, visited_at=datetime.now(timezone.utc))

    def is_visited(self, url: str) -> bool:
        return isinstance(self._records.get(url), VisitedRecord)

    def mark_errored(self, url: str, status: int) -> None:
        """Record the last error status. A visited URL is never downgraded."""
        if self.is_visited(url):
            logger.debug("Ignoring status %s for already visited %s", status, url)
            return
        self._records[url] = ErroredRecord(url=url, status=status)

    def is_errored(self, url: str) -> bool:
        return isinstance(self._records.get(url), ErroredRecord)

    def list_visited(self) -> List[VisitedRecord]:
        return [r for r in self._records.values() if isinstance(r, VisitedRecord)]

    def list_errored(self) -> List[ErroredRecord]:
        return [r for r in self._records.values() if isinstance(r, ErroredRecord)]

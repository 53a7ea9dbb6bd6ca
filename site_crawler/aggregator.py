# File: site_crawler/aggregator.py
"""site_crawler.aggregator: summary of a finished crawl run."""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field
from typing import TYPE_CHECKING, List, TypedDict

if TYPE_CHECKING:
    from site_crawler.crawler.crawler import Crawler


class VisitedInfo(TypedDict):
    """A page that was fetched successfully."""

    url: str
    visited_at: str


class ErroredInfo(TypedDict):
    """A page whose last attempt ended with an HTTP error status."""

    url: str
    status: int


@dataclass(slots=True)
class CrawlReport:
    """Results of one crawl: visited pages, error statuses and dead letters."""

    seed_url: str
    visited: List[VisitedInfo] = field(default_factory=list)
    errored: List[ErroredInfo] = field(default_factory=list)
    dead_letters: List[str] = field(default_factory=list)
    timed_out: bool = False
    duration: float = 0.0

    def as_dict(self) -> dict:
        return asdict(self)

    def json(self, *, pretty: bool = False) -> str:
        return json.dumps(self.as_dict(), ensure_ascii=False, indent=2 if pretty else None)


def aggregate_results(crawler: Crawler, seed_url: str, duration: float = 0.0) -> CrawlReport:
    """Collect the crawler's URL state into a CrawlReport."""
    state = crawler.url_state
    return CrawlReport(
        seed_url=seed_url,
        visited=[
            {"url": r.url, "visited_at": r.visited_at.isoformat()}
            for r in sorted(state.list_visited(), key=lambda r: r.visited_at)
        ],
        errored=[{"url": r.url, "status": r.status} for r in state.list_errored()],
        dead_letters=crawler.dead_letters(),
        timed_out=crawler.did_timeout(),
        duration=round(duration, 3),
    )

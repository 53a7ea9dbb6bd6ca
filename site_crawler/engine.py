# File: site_crawler/engine.py
"""site_crawler.engine: entry point that runs one crawl and returns its report."""

from __future__ import annotations

from typing import Optional

from site_crawler.aggregator import CrawlReport
from site_crawler.config import CrawlConfig
from site_crawler.crawler.crawler import Crawler, ErrorCallback, VisitedCallback
from site_crawler.logger import logger

__all__ = ["start_crawl"]


async def start_crawl(
    config: CrawlConfig,
    seed_url: str,
    *,
    on_visited: Optional[VisitedCallback] = None,
    on_error: Optional[ErrorCallback] = None,
) -> CrawlReport:
    """
    Crawl from *seed_url* with a fresh Crawler and aiohttp session.

    Parameters
    ----------
    config : CrawlConfig
        Settings for this run.
    seed_url : str
        First page; only its host is followed.
    on_visited, on_error
        Optional callbacks forwarded to :class:`Crawler`.

    Returns
    -------
    CrawlReport
        Visited/errored URLs, dead letters and the timeout flag.
    """
    async with Crawler(config, on_visited=on_visited, on_error=on_error) as crawler:
        report = await crawler.run(seed_url)

    logger.info(
        "Finished: %d visited, %d errored in %.2f s%s",
        len(report.visited),
        len(report.errored),
        report.duration,
        " (timed out)" if report.timed_out else "",
    )
    if report.dead_letters:
        logger.warning("%d URL(s) failed after all retries", len(report.dead_letters))
    return report

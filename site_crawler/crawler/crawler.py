# === FILE: site_crawler/crawler/crawler.py ===
from __future__ import annotations

import asyncio
import time
from functools import partial
from typing import Callable, List, Optional

from aiohttp import ClientError

from site_crawler.aggregator import CrawlReport, aggregate_results
from site_crawler.config import CrawlConfig
from site_crawler.crawler.cancellation import CancellationToken, CrawlCancelledError
from site_crawler.crawler.fetcher import Fetcher, HttpClient
from site_crawler.crawler.link_extractor import extract_links
from site_crawler.crawler.scheduler import JobRecord, JobScheduler
from site_crawler.crawler.url_state import URLStateStore
from site_crawler.logger import get_logger
from site_crawler.utils import is_html_content_type, is_same_host, normalize_url

__all__ = ("Crawler", "TransientHTTPError", "TRANSIENT_STATUS")

logger = get_logger("crawler")

#: statuses worth another attempt: request timeout, rate limited, any server error
TRANSIENT_STATUS = frozenset((408, 429, *range(500, 600)))
_RETRYABLE = (ClientError, asyncio.TimeoutError)

VisitedCallback = Callable[[str, List[str]], None]
ErrorCallback = Callable[[str, BaseException], None]


class TransientHTTPError(ClientError):
    """Response status that may succeed on a later attempt."""

    def __init__(self, url: str, status: int) -> None:
        super().__init__(f"Failed to fetch {url}: HTTP {status}")
        self.url = url
        self.status = status


class Crawler:
    """Same-host, depth-limited crawler driving a :class:`JobScheduler`.

    Callbacks run synchronously inside the fetch job, so a slow callback slows
    the crawl down rather than losing events.
    """

    def __init__(
        self,
        config: Optional[CrawlConfig] = None,
        *,
        fetcher: Optional[HttpClient] = None,
        scheduler: Optional[JobScheduler] = None,
        on_visited: Optional[VisitedCallback] = None,
        on_error: Optional[ErrorCallback] = None,
    ) -> None:
        self.config = config or CrawlConfig()
        self.url_state = URLStateStore()
        self.scheduler = scheduler or JobScheduler(
            max_concurrent_jobs=self.config.max_concurrent_requests,
            max_requests_per_second=self.config.max_requests_per_second,
            max_retries=self.config.max_retries,
        )
        self._fetcher = fetcher
        self._owned_fetcher: Optional[Fetcher] = None
        self._on_visited = on_visited
        self._on_error = on_error
        self._token = CancellationToken()
        self._timed_out = False
        self._timeout_handle: Optional[asyncio.TimerHandle] = None

    async def __aenter__(self) -> Crawler:
        if self._fetcher is None:
            self._owned_fetcher = Fetcher(self.config)
            self._fetcher = await self._owned_fetcher.__aenter__()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        self.stop()
        await self.scheduler.wait_closed()
        if self._owned_fetcher is not None:
            await self._owned_fetcher.__aexit__(exc_type, exc, tb)
            self._owned_fetcher = None
            self._fetcher = None

    # ------------------------------------------------------------------ control
    def crawl(self, seed_url: str) -> None:
        """Start the scheduler, arm the timeout and admit *seed_url* at depth 0."""
        if self._fetcher is None:
            raise RuntimeError("No HTTP client: pass fetcher= or use 'async with Crawler(...)'")
        logger.info(
            "Crawling %s (depth %d, %d concurrent, %.2f req/s)",
            seed_url,
            self.config.max_depth,
            self.config.max_concurrent_requests,
            self.config.max_requests_per_second,
        )
        self.scheduler.start()
        if self.config.timeout_ms > 0:
            loop = asyncio.get_running_loop()
            self._timeout_handle = loop.call_later(self.config.timeout_ms / 1000, self._on_timeout)
        self.admit(seed_url, 0)

    def stop(self) -> None:
        self._token.cancel()
        if self._timeout_handle is not None:
            self._timeout_handle.cancel()
            self._timeout_handle = None
        self.scheduler.stop()

    def is_crawling(self) -> bool:
        return self.scheduler.is_running() and self.scheduler.has_work()

    def did_timeout(self) -> bool:
        return self._timed_out

    def dead_letters(self) -> List[str]:
        return [job.name for job in self.scheduler.dead_letters()]

    async def wait(self) -> None:
        """Block until the queue drains or the crawl is stopped."""
        await self.scheduler.join()

    async def run(self, seed_url: str) -> CrawlReport:
        """Crawl from *seed_url* to completion (or timeout) and summarise the run."""
        start = time.monotonic()
        self.crawl(seed_url)
        try:
            await self.wait()
        finally:
            self.stop()
            await self.scheduler.wait_closed()
        return aggregate_results(self, seed_url, time.monotonic() - start)

    def _on_timeout(self) -> None:
        logger.info("Timeout limit reached, cancelling in-flight requests")
        self._timeout_handle = None
        self._timed_out = True
        self.stop()

    # ---------------------------------------------------------------- traversal
    def admit(self, url: str, depth: int) -> bool:
        """Queue *url* for fetching unless it is out of depth, malformed or already handled."""
        if self._token.cancelled or depth > self.config.max_depth:
            return False
        normalized = normalize_url(url)
        if normalized is None:
            return False
        if self.url_state.is_visited(normalized) or self.url_state.is_in_flight(normalized):
            return False
        self.url_state.claim(normalized)
        self.scheduler.submit(
            partial(self._visit, normalized, depth), name=normalized, on_done=self._release_job
        )
        return True

    def _release_job(self, job: JobRecord) -> None:
        # the claim spans retries and ends once the scheduler is done with the URL
        self.url_state.release(job.name)

    async def _visit(self, url: str, depth: int) -> None:
        try:
            if self._token.cancelled:
                return
            # admission and execution are not atomic; a duplicate may have won meanwhile
            if self.url_state.is_visited(url):
                return

            response = await self._fetcher.fetch(url, self._token)

            if response.status >= 400:
                self.url_state.mark_errored(url, response.status)
                if response.status in TRANSIENT_STATUS:
                    raise TransientHTTPError(url, response.status)
                logger.info("Not retrying %s: HTTP %d", url, response.status)
                return

            self.url_state.mark_visited(url)

            if not is_same_host(response.final_url, url):
                logger.info("%s redirected off-site to %s", url, response.final_url)
                self._emit_visited(url, [])
                return

            if not is_html_content_type(response.content_type):
                self._emit_visited(url, [])
                return

            links = extract_links(response.body, response.final_url)
            self._emit_visited(url, links)
            for link in links:
                self.admit(link, depth + 1)
        except CrawlCancelledError:
            logger.debug("Cancelled while fetching %s", url)
        except _RETRYABLE as exc:
            self._emit_error(url, exc)
            raise
        except Exception as exc:
            logger.exception("Unexpected failure while visiting %s", url)
            self._emit_error(url, exc)

    def _emit_visited(self, url: str, urls: List[str]) -> None:
        logger.info("Visited %s (%d links)", url, len(urls))
        if self._on_visited is not None:
            self._on_visited(url, urls)

    def _emit_error(self, url: str, error: BaseException) -> None:
        logger.warning("Error while visiting %s: %s", url, error)
        if self._on_error is not None:
            self._on_error(url, error)

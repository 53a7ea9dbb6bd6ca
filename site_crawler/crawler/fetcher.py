# site_crawler/crawler/fetcher.py
"""
Fetcher module: the aiohttp implementation of the crawler's HTTP client contract.

Retries and rate limiting live in the scheduler; this layer only performs a
single request, follows redirects and reports where it ended up.
"""
from __future__ import annotations

from typing import Optional, Protocol

from aiohttp import ClientSession, ClientTimeout

from site_crawler.config import CrawlConfig
from site_crawler.crawler.cancellation import CancellationToken
from site_crawler.crawler.models import FetchResponse
from site_crawler.logger import get_logger
from site_crawler.utils import is_html_content_type

__all__ = ("HttpClient", "Fetcher")

logger = get_logger("fetcher")


class HttpClient(Protocol):
    async def fetch(self, url: str, token: CancellationToken) -> FetchResponse: ...


class Fetcher:
    """Performs GET requests through a shared :class:`aiohttp.ClientSession`."""

    def __init__(self, config: CrawlConfig, session: Optional[ClientSession] = None) -> None:
        self.config = config
        self.session = session
        self._owns_session = session is None

    async def __aenter__(self) -> Fetcher:
        if self.session is None:
            self.session = ClientSession(
                timeout=ClientTimeout(total=self.config.request_timeout),
                headers={"User-Agent": self.config.user_agent},
                raise_for_status=False,
            )
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if self._owns_session and self.session and not self.session.closed:
            await self.session.close()
            self.session = None

    async def fetch(self, url: str, token: CancellationToken) -> FetchResponse:
        """
        GET *url*, abandoning the request as soon as *token* is cancelled.

        The body is only read for HTML responses; everything else is discarded.
        Transport failures propagate as aiohttp/asyncio exceptions.
        """
        return await token.run(self._get(url))

    async def _get(self, url: str) -> FetchResponse:
        if not self.session:
            raise RuntimeError("Session not initialized")
        async with self.session.get(url, allow_redirects=True) as resp:
            content_type = resp.headers.get("Content-Type", "")
            body = ""
            if resp.status < 400 and is_html_content_type(content_type):
                body = await resp.text(errors="replace")
            logger.debug("GET %s -> %s (%s)", url, resp.status, content_type or "no content type")
            return FetchResponse(
                status=resp.status,
                final_url=str(resp.url),
                content_type=content_type,
                body=body,
            )

# File: tests/conftest.py
from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from typing import Callable, Dict, List, Union

import pytest
from aiohttp import web

from site_crawler.config import CrawlConfig
from site_crawler.crawler.cancellation import CancellationToken
from site_crawler.crawler.models import FetchResponse

SITE = "http://site.test"

Route = Union[FetchResponse, BaseException, Callable[[], Union[FetchResponse, BaseException]]]


def html_page(url: str, *hrefs: str) -> FetchResponse:
    """200 text/html response whose body links to *hrefs*."""
    body = "".join(f'<a href="{h}">{h}</a>' for h in hrefs)
    return FetchResponse(
        status=200,
        final_url=url,
        content_type="text/html; charset=utf-8",
        body=f"<html><body>{body}</body></html>",
    )


class FakeFetcher:
    """In-memory HTTP client. Unknown URLs answer 404; calls are recorded."""

    def __init__(self, routes: Dict[str, Route], delays: Dict[str, float] | None = None) -> None:
        self.routes = routes
        self.delays = delays or {}
        self.calls: List[str] = []

    def count(self, url: str) -> int:
        return self.calls.count(url)

    async def fetch(self, url: str, token: CancellationToken) -> FetchResponse:
        self.calls.append(url)
        return await token.run(self._respond(url))

    async def _respond(self, url: str) -> FetchResponse:
        await asyncio.sleep(self.delays.get(url, 0))
        route = self.routes.get(url)
        if route is None:
            return FetchResponse(status=404, final_url=url, content_type="text/plain")
        if callable(route):
            route = route()
        if isinstance(route, BaseException):
            raise route
        return route


@pytest.fixture()
def fast_config() -> CrawlConfig:
    """Config without meaningful rate limiting, for quick tests."""
    return CrawlConfig(
        max_concurrent_requests=4,
        max_requests_per_second=1000,
        max_depth=3,
        max_retries=3,
    )


async def serve_app(app: web.Application, port: int) -> AsyncIterator[str]:
    """Start *app* on *port*, yield base URL, ensure cleanup."""
    runner = web.AppRunner(app)
    await runner.setup()
    site = web.TCPSite(runner, "127.0.0.1", port)
    await site.start()
    try:
        yield f"http://127.0.0.1:{port}"
    finally:
        await runner.cleanup()

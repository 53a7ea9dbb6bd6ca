# site_crawler/crawler/__init__.py
"""site_crawler.crawler: scheduler, URL state and the crawl orchestrator."""

from .cancellation import CancellationToken, CrawlCancelledError
from .crawler import TRANSIENT_STATUS, Crawler, TransientHTTPError
from .fetcher import Fetcher, HttpClient
from .link_extractor import extract_links
from .models import ErroredRecord, FetchResponse, VisitedRecord
from .scheduler import JobRecord, JobScheduler, default_backoff
from .url_state import URLStateStore

__all__ = [
    "CancellationToken",
    "CrawlCancelledError",
    "Crawler",
    "ErroredRecord",
    "FetchResponse",
    "Fetcher",
    "HttpClient",
    "JobRecord",
    "JobScheduler",
    "TRANSIENT_STATUS",
    "TransientHTTPError",
    "URLStateStore",
    "VisitedRecord",
    "default_backoff",
    "extract_links",
]

# site_crawler/crawler/models.py
"""
Data models shared by the crawler components.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(slots=True, frozen=True)
class FetchResponse:
    """What the HTTP client hands back: status, post-redirect URL, type and text body."""

    status: int
    final_url: str
    content_type: str = ""
    body: str = ""


@dataclass(slots=True, frozen=True)
class VisitedRecord:
    url: str
    visited_at: datetime


@dataclass(slots=True, frozen=True)
class ErroredRecord:
    url: str
    status: int

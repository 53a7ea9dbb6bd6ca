# File: site_crawler/utils.py
"""site_crawler.utils: URL normalization and small classification helpers."""

from __future__ import annotations

from typing import Optional, Sequence
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from site_crawler.logger import get_logger

__all__: Sequence[str] = (
    "normalize_url",
    "host_of",
    "is_same_host",
    "is_html_content_type",
)

logger = get_logger("utils")

_DEFAULT_PORTS = {"http": 80, "https": 443}
_HTML_TYPES = frozenset(("text/html", "application/xhtml+xml"))


def normalize_url(url: str) -> Optional[str]:
    """Canonical form used as the dedup key, or None for unusable URLs.

    Strips the fragment, sorts query parameters by name (values of a repeated
    name keep their order), lowercases scheme and host, drops default ports and
    credentials, and turns an empty path into ``/``. Only absolute http(s) URLs
    survive.
    """
    try:
        parts = urlsplit(url.strip())
        port = parts.port
    except ValueError:
        logger.debug("Malformed URL dropped: %r", url)
        return None

    scheme = parts.scheme.lower()
    host = parts.hostname
    if scheme not in _DEFAULT_PORTS or not host:
        return None
    if ":" in host:
        host = f"[{host}]"
    netloc = host if port is None or port == _DEFAULT_PORTS[scheme] else f"{host}:{port}"

    params = parse_qsl(parts.query, keep_blank_values=True)
    query = urlencode(sorted(params, key=lambda kv: kv[0]))
    return urlunsplit((scheme, netloc, parts.path or "/", query, ""))


def host_of(url: str) -> str:
    """Return the normalized ``host[:port]`` of *url* ("" if unusable)."""
    normalized = normalize_url(url)
    return urlsplit(normalized).netloc if normalized else ""


def is_same_host(url: str, other: str) -> bool:
    host = host_of(url)
    return bool(host) and host == host_of(other)


def is_html_content_type(content_type: Optional[str]) -> bool:
    """True for ``text/html`` and XHTML, ignoring parameters such as charset."""
    if not content_type:
        return False
    mime = content_type.split(";", 1)[0].strip().lower()
    return mime in _HTML_TYPES

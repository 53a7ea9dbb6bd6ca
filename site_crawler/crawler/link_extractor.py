# site_crawler/crawler/link_extractor.py
"""
Link extraction for SiteCrawler.
"""
from __future__ import annotations

from typing import List
from urllib.parse import urljoin

from bs4 import BeautifulSoup
from bs4.element import Tag

from site_crawler.utils import host_of


def extract_links(html: str, base_url: str) -> List[str]:
    """
    Return absolute same-host URLs of all ``<a href>`` elements in *html*.

    Hrefs are resolved against *base_url*; results keep first-seen order and
    contain no duplicates. Hrefs that do not resolve to an http(s) URL on the
    base host (mailto:, javascript:, other domains, garbage) are skipped.
    """
    base_host = host_of(base_url)
    if not base_host:
        return []

    soup = BeautifulSoup(html, "html.parser")
    seen: set[str] = set()
    links: List[str] = []
    for tag in soup.find_all("a", href=True):
        if not isinstance(tag, Tag):
            continue
        href_val = tag.get("href")
        if not isinstance(href_val, str) or not href_val.strip():
            continue
        try:
            absolute = urljoin(base_url, href_val.strip())
        except ValueError:
            continue
        if host_of(absolute) != base_host or absolute in seen:
            continue
        seen.add(absolute)
        links.append(absolute)
    return links

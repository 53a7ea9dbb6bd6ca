# File: site_crawler/report/__init__.py
"""site_crawler.report: writers for crawl summaries."""

from .json_report import render_json

__all__ = ["render_json"]

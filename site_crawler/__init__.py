# site_crawler/__init__.py
"""
SiteCrawler package initializer.
Defines package version and exposes the CLI and the Crawler.
"""
__version__ = "0.1.0"

from site_crawler.crawler import Crawler, JobScheduler, URLStateStore
from .cli import cli

__all__ = ["__version__", "Crawler", "JobScheduler", "URLStateStore", "cli"]

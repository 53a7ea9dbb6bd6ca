# === FILE: site_crawler/logger.py ===
"""Logging setup for **SiteCrawler**.

Every module logs through a child of the ``SiteCrawler`` logger
(``SiteCrawler.scheduler``, ``SiteCrawler.crawler``, ``SiteCrawler.fetcher`` ...)
obtained with :func:`get_logger`. :func:`configure` attaches the handlers to
the parent once and can tune single components, e.g. keep the whole crawl at
``INFO`` while the scheduler alone logs at ``DEBUG``::

      from site_crawler.logger import configure
      configure(level="INFO", module_levels={"scheduler": "DEBUG"})

Console output goes to *stderr*; stdout is reserved for crawl results.
"""
from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Final, Mapping, Optional, Set, Union

# --------------------------------------------------------------------------- #
# Constants & basic types                                                     #
# --------------------------------------------------------------------------- #

_DEFAULT_FORMAT: Final[str] = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
_LOGGER_NAME: Final[str] = "SiteCrawler"
_MAX_BYTES: Final[int] = 5 * 1024 * 1024
_BACKUPS: Final[int] = 3

_LevelT = Union[int, str]

# children whose level was set by configure(); reset on the next call
_tuned: Set[str] = set()


# --------------------------------------------------------------------------- #
# Helper builders                                                             #
# --------------------------------------------------------------------------- #


def _formatted(handler: logging.Handler, fmt: str) -> logging.Handler:
    handler.setFormatter(logging.Formatter(fmt))
    return handler


def _level_of(level: _LevelT) -> int:
    """Accept ``"debug"``, ``"DEBUG"`` or ``10``; reject unknown names."""
    if isinstance(level, int):
        return level
    value = logging.getLevelName(level.strip().upper())
    if not isinstance(value, int):
        raise ValueError(f"Unknown log level: {level!r}")
    return value


def parse_module_levels(specs: Optional[Union[str, list, tuple]]) -> dict[str, int]:
    """Turn ``["scheduler=DEBUG", "fetcher=ERROR"]`` into ``{name: level}``."""
    if not specs:
        return {}
    if isinstance(specs, str):
        specs = [specs]
    levels: dict[str, int] = {}
    for spec in specs:
        name, sep, level = spec.partition("=")
        if not sep or not name.strip() or not level.strip():
            raise ValueError(f"Expected NAME=LEVEL, got {spec!r}")
        levels[name.strip()] = _level_of(level)
    return levels


# --------------------------------------------------------------------------- #
# Public API                                                                  #
# --------------------------------------------------------------------------- #


def get_logger(name: str | None = None) -> logging.Logger:
    """Return the project logger or one of its children (``SiteCrawler.<name>``)."""
    return logging.getLogger(_LOGGER_NAME if not name else f"{_LOGGER_NAME}.{name}")


def configure(
    *,
    level: _LevelT = "INFO",
    log_file: str | Path | None = None,
    log_format: str = _DEFAULT_FORMAT,
    replace_handlers: bool = True,
    module_levels: Optional[Mapping[str, _LevelT]] = None,
) -> logging.Logger:
    """(Re)configure the project logger and, optionally, single components.

    Parameters
    ----------
    level
        Level of the ``SiteCrawler`` logger, inherited by every component.
    log_file
        Rotating log file (5 MiB x 3). *None* means stderr only.
    log_format
        Format string for :class:`logging.Formatter`.
    replace_handlers
        Close and drop handlers from an earlier call before adding new ones.
    module_levels
        ``{component: level}`` overrides, e.g. ``{"scheduler": "DEBUG"}``.
        Components tuned by an earlier call fall back to inheriting ``level``.
    """
    lg = get_logger()
    lg.setLevel(_level_of(level))

    if replace_handlers:
        for handler in list(lg.handlers):
            lg.removeHandler(handler)
            handler.close()

    lg.addHandler(_formatted(logging.StreamHandler(sys.stderr), log_format))
    if log_file is not None:
        lg.addHandler(
            _formatted(
                RotatingFileHandler(str(log_file), maxBytes=_MAX_BYTES, backupCount=_BACKUPS, encoding="utf-8"),
                log_format,
            )
        )

    while _tuned:
        get_logger(_tuned.pop()).setLevel(logging.NOTSET)
    for name, child_level in (module_levels or {}).items():
        get_logger(name).setLevel(_level_of(child_level))
        _tuned.add(name)

    lg.propagate = False
    return lg


def init_logging(
    level: _LevelT = "INFO",
    log_file: str | Path | None = None,
    log_format: str = _DEFAULT_FORMAT,
    module_levels: Optional[Mapping[str, _LevelT]] = None,
) -> logging.Logger:
    """Fresh setup used by the CLI and at import time."""
    return configure(
        level=level,
        log_file=log_file,
        log_format=log_format,
        replace_handlers=True,
        module_levels=module_levels,
    )


# --------------------------------------------------------------------------- #
# Ready-to-use instance                                                       #
# --------------------------------------------------------------------------- #

logger: logging.Logger = init_logging(level="WARNING")

__all__ = ["logger", "configure", "init_logging", "get_logger", "parse_module_levels"]

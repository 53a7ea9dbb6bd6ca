# === FILE: site_crawler/config.py ===
"""
Loading and validation of the SiteCrawler run configuration.
Pydantic describes the schema; YAML and JSON files are both accepted.
"""
from __future__ import annotations

import errno
import json
import os
from pathlib import Path
from typing import Any, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

DEFAULT_USER_AGENT = "SiteCrawler/1.0"


class CrawlConfig(BaseModel):
    """Settings for a single crawl run. Immutable once built."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    max_concurrent_requests: int = Field(1, ge=1, description="Concurrent fetches ceiling.")
    max_requests_per_second: float = Field(2.0, gt=0, description="Request starts per second.")
    max_depth: int = Field(3, ge=0, description="Maximum link-following depth (seed is 0).")
    timeout_ms: float = Field(0, ge=0, description="Whole-crawl timeout in ms, 0 disables it.")
    max_retries: int = Field(5, ge=1, description="Attempts per URL before dead-lettering.")
    request_timeout: float = Field(10.0, gt=0, description="Per-request timeout (seconds).")
    user_agent: str = Field(DEFAULT_USER_AGENT, min_length=1, description="User-Agent header.")

    def with_overrides(self, **values: Any) -> CrawlConfig:
        """Return a re-validated copy; ``None`` values leave the field untouched."""
        updates = {k: v for k, v in values.items() if v is not None}
        if not updates:
            return self
        return CrawlConfig(**{**self.model_dump(), **updates})


_DEFAULT_CFG = Path("configs/default.yaml")


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise ValueError(f"Invalid YAML in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"Top level of YAML must be a mapping, got {type(data).__name__}")
    return data


def _read_json(path: Path) -> dict[str, Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8")) or {}
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid JSON in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"Top level of JSON must be a mapping, got {type(data).__name__}")
    return data


def load_config(path: Union[str, Path, None] = None) -> CrawlConfig:
    """
    Read YAML or JSON and return a validated CrawlConfig.

    Without an explicit path ``configs/default.yaml`` is used when it exists,
    otherwise the built-in defaults. An explicit path that does not exist
    raises FileNotFoundError.
    """
    if path is None:
        if not _DEFAULT_CFG.is_file():
            return CrawlConfig()
        path_obj = _DEFAULT_CFG
    else:
        path_obj = Path(path).expanduser().resolve()
        if not path_obj.is_file():
            raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), str(path_obj))

    suffix = path_obj.suffix.lower()
    if suffix in (".yaml", ".yml"):
        data = _read_yaml(path_obj)
    elif suffix == ".json":
        data = _read_json(path_obj)
    else:
        raise ValueError(f"Unsupported config format: {suffix}")

    return CrawlConfig(**data)


__all__ = ["CrawlConfig", "load_config", "DEFAULT_USER_AGENT", "ValidationError"]

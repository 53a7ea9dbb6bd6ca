# File: tests/test_config.py
import json
from pathlib import Path

import pytest
from pydantic import ValidationError

from site_crawler.config import CrawlConfig, load_config


def write_file(tmp_path: Path, content: str, suffix: str) -> Path:
    path = tmp_path / f"config{suffix}"
    path.write_text(content, encoding="utf-8")
    return path


@pytest.mark.parametrize(
    "content,suffix,expect_exc",
    [
        ("max_depth: 5\nmax_concurrent_requests: 4", ".yaml", None),
        (json.dumps({"max_depth": 5, "max_concurrent_requests": 4}), ".json", None),
        ("max_depth: -1", ".yaml", ValidationError),
        ("unknown_option: 1", ".yaml", ValidationError),
        ("not: a: mapping", ".yaml", ValueError),
        ("::invalid yaml", ".yaml", TypeError),
        ("{broken json", ".json", ValueError),
        ("[1, 2]", ".json", TypeError),
        ("max_depth = 5", ".toml", ValueError),
    ],
)
def test_load_config_variants(tmp_path, content, suffix, expect_exc):
    cfg_path = write_file(tmp_path, content, suffix)
    if expect_exc:
        with pytest.raises(expect_exc):
            load_config(cfg_path)
    else:
        cfg = load_config(cfg_path)
        assert isinstance(cfg, CrawlConfig)
        assert cfg.max_depth == 5
        assert cfg.max_concurrent_requests == 4
        assert cfg.max_requests_per_second == 2


def test_defaults_when_no_default_file(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    cfg = load_config(None)
    assert cfg == CrawlConfig()
    assert cfg.max_concurrent_requests == 1
    assert cfg.max_requests_per_second == 2
    assert cfg.max_depth == 3
    assert cfg.timeout_ms == 0
    assert cfg.max_retries == 5


def test_default_file_is_picked_up(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    (tmp_path / "configs").mkdir()
    (tmp_path / "configs" / "default.yaml").write_text("max_depth: 1\n", encoding="utf-8")
    assert load_config(None).max_depth == 1


def test_explicit_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "missing.yaml")


def test_config_is_frozen():
    cfg = CrawlConfig()
    with pytest.raises(ValidationError):
        cfg.max_depth = 10


def test_with_overrides_revalidates_and_ignores_none():
    cfg = CrawlConfig(max_depth=2)
    updated = cfg.with_overrides(max_depth=None, timeout_ms=500)
    assert updated.max_depth == 2
    assert updated.timeout_ms == 500
    assert cfg.timeout_ms == 0
    assert cfg.with_overrides() is cfg

    with pytest.raises(ValidationError):
        cfg.with_overrides(max_concurrent_requests=0)

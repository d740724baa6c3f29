# File: tests/test_config.py
import json
from datetime import datetime, timezone
from pathlib import Path

import pytest
from pydantic import ValidationError

from site_mapper.config import MapperConfig, load_config, override_config
from site_mapper.parser.fields import SitemapField


def write_file(tmp_path: Path, content: str, suffix: str) -> Path:
    path = tmp_path / f"config{suffix}"
    path.write_text(content, encoding="utf-8")
    return path


@pytest.mark.parametrize(
    "content,suffix,expect_exc",
    [
        ("url: http://example.com/sitemap.xml\nretries: 2", ".yaml", None),
        (json.dumps({"url": "http://example.com/sitemap.xml", "retries": 2}), ".json", None),
        ("retries: -1", ".yaml", ValidationError),
        ("unknown_option: 1", ".yaml", ValidationError),
        ("not: a: mapping", ".yaml", ValueError),
        ("- just\n- a list", ".yaml", TypeError),
        ("{broken", ".json", ValueError),
        ("url = 'x'", ".toml", ValueError),
    ],
)
def test_load_config_variants(tmp_path, content, suffix, expect_exc):
    cfg_path = write_file(tmp_path, content, suffix)
    if expect_exc:
        with pytest.raises(expect_exc):
            load_config(cfg_path)
    else:
        cfg = load_config(cfg_path)
        assert isinstance(cfg, MapperConfig)
        assert cfg.url == "http://example.com/sitemap.xml"
        assert cfg.retries == 2


def test_load_config_default_missing(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    with pytest.raises(FileNotFoundError):
        load_config(None)


def test_load_config_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "nope.yaml")


def test_defaults():
    cfg = MapperConfig()

    assert cfg.url is None
    assert cfg.timeout == 15.0
    assert cfg.lastmod == 0
    assert cfg.request_headers == {}
    assert cfg.concurrency == 10
    assert cfg.retries == 0
    assert cfg.verify_ssl is True
    assert cfg.fields is None
    assert cfg.max_depth is None


def test_config_is_frozen():
    cfg = MapperConfig()
    with pytest.raises(ValidationError):
        cfg.retries = 5


@pytest.mark.parametrize(
    "value,expected",
    [
        (1704067200, 1704067200.0),
        ("1704067200", 1704067200.0),
        ("2024-01-01T00:00:00Z", 1704067200.0),
        (datetime(2024, 1, 1, tzinfo=timezone.utc), 1704067200.0),
        (None, 0.0),
    ],
)
def test_lastmod_accepts_timestamp_iso_and_datetime(value, expected):
    assert MapperConfig(lastmod=value).lastmod == expected


def test_invalid_lastmod():
    with pytest.raises(ValidationError):
        MapperConfig(lastmod="last tuesday")


def test_fields_from_mapping():
    cfg = MapperConfig(fields={"loc": True, "lastmod": True, "priority": False})

    assert cfg.fields == (SitemapField.LOC, SitemapField.LASTMOD)


def test_unknown_field_rejected():
    with pytest.raises(ValidationError):
        MapperConfig(fields=["loc", "colour"])


def test_override_config_validates():
    base = MapperConfig(retries=1, request_headers={"A": "1"})
    cfg = override_config(base, retries=3, timeout=None)

    assert cfg.retries == 3
    assert cfg.timeout == base.timeout
    assert cfg.request_headers == {"A": "1"}
    with pytest.raises(ValidationError):
        override_config(base, concurrency=0)

"""Shared test fixtures for Bannerforge."""

from __future__ import annotations

import json
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

from bannerforge.config import BannerSettings
from bannerforge.core.loader import normalize_config
from bannerforge.models.formats import CampaignConfig
from bannerforge.models.run import RunOptions

INDEX_TEMPLATE = (
    "{{ CAMPAIGN }}|{{ WIDTH }}x{{ HEIGHT }}|{{ LANGUAGE }}|{{ MOTIVE }}|"
    "{{ CLICKTAG }}|{{ ADSERVER_TYPE }}|{{ TEMPLATE_TYPE }}|{{ MAX_BYTES }}|"
    "{% for a in ASSETS %}{{ a.id }}={{ a.file }};{% endfor %}\n"
)


def _write_template(root: Path, name: str) -> Path:
    template = root / name
    (template / "js").mkdir(parents=True)
    (template / "assets").mkdir()
    (template / "index.html.j2").write_text(INDEX_TEMPLATE, encoding="utf-8")
    (template / "js" / "main.js").write_text("// static\n", encoding="utf-8")
    (template / "assets" / "default.png").write_bytes(b"template-default")
    return template


@pytest.fixture
def templates_path(tmp_path: Path) -> Path:
    """A templates root with ``standard`` and ``premium`` types."""
    root = tmp_path / "templates"
    _write_template(root, "standard")
    _write_template(root, "premium")
    return root


@pytest.fixture
def out_dir(tmp_path: Path) -> Path:
    return tmp_path / "out"


@pytest.fixture
def zip_dir(tmp_path: Path) -> Path:
    return tmp_path / "zip"


@pytest.fixture
def settings() -> BannerSettings:
    """Settings with library defaults, independent of the environment."""
    return BannerSettings(_env_file=None)


@pytest.fixture
def make_options(
    templates_path: Path, out_dir: Path, zip_dir: Path
) -> Callable[..., RunOptions]:
    """Factory fixture: RunOptions pointing at temp directories."""

    def _factory(**overrides: Any) -> RunOptions:
        defaults: dict[str, Any] = {
            "out_dir": out_dir,
            "zip_dir": zip_dir,
            "templates_path": templates_path,
        }
        defaults.update(overrides)
        return RunOptions(**defaults)

    return _factory


@pytest.fixture
def make_config() -> Callable[..., CampaignConfig]:
    """Factory fixture: normalize a formats document held in memory."""

    def _factory(formats: list[dict[str, Any]], **header: Any) -> CampaignConfig:
        return normalize_config({"formats": formats, **header})

    return _factory


@pytest.fixture
def write_formats(tmp_path: Path) -> Callable[..., Path]:
    """Factory fixture: write a formats.json document and return its path."""

    def _factory(document: Any, name: str = "formats.json") -> Path:
        path = tmp_path / name
        path.write_text(json.dumps(document), encoding="utf-8")
        return path

    return _factory

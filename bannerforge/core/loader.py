"""Load formats.json once and normalize it into a ``CampaignConfig``.

Two document shapes are accepted::

    [ {"width": 300, "height": 250}, ... ]

    {"campaign": "spring", "clicktag": "https://...", "formats": [ ... ]}

Everything downstream sees only the canonical ``CampaignConfig``.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from bannerforge.models.formats import CampaignConfig, FormatSpec

logger = logging.getLogger(__name__)

# canonical key -> accepted spellings, in lookup order
_ALIASES: dict[str, tuple[str, ...]] = {
    "language": ("language", "lang"),
    "motive": ("motive", "motiveName"),
}


class ConfigurationError(ValueError):
    """Raised when the configuration cannot produce a valid run."""


def resolve_formats_path(explicit: Path | str | None, filename: str = "formats.json") -> Path:
    """Return the formats file to load.

    An explicit path wins; otherwise ``filename`` in the current directory.
    """
    if explicit:
        path = Path(explicit).expanduser().resolve()
    else:
        path = (Path.cwd() / filename).resolve()
    if not path.is_file():
        raise ConfigurationError(
            f"Could not find {path}. Put {filename} in the current directory "
            "or pass --formats path/to/formats.json."
        )
    return path


def resolve_alias(entry: dict[str, Any], key: str) -> str | None:
    """Resolve a field that may be spelled more than one way.

    If several spellings are present they must agree.
    """
    values = {
        name: entry[name]
        for name in _ALIASES[key]
        if entry.get(name) not in (None, "")
    }
    distinct = {str(v) for v in values.values()}
    if len(distinct) > 1:
        raise ConfigurationError(
            f"Conflicting values for {key}: "
            + ", ".join(f"{k}={v!r}" for k, v in values.items())
        )
    return distinct.pop() if distinct else None


def _nested_type(obj: Any, key: str) -> str | None:
    """Read ``obj[key]["type"]`` (e.g. ``brand.type``) when present."""
    if isinstance(obj, dict) and isinstance(obj.get(key), dict):
        value = obj[key].get("type")
        return str(value) if value not in (None, "") else None
    return None


def _optional_str(value: Any) -> str | None:
    return str(value) if value not in (None, "") else None


def build_format(entry: Any, index: int) -> FormatSpec:
    """Build a ``FormatSpec`` from one raw JSON entry."""
    if not isinstance(entry, dict):
        raise ConfigurationError(f"Format #{index} is not an object: {entry!r}")
    if any(isinstance(entry.get(k), bool) for k in ("width", "height")):
        raise ConfigurationError(
            f"Invalid width/height in format #{index}: {json.dumps(entry)}"
        )
    try:
        return FormatSpec(
            width=entry.get("width"),
            height=entry.get("height"),
            language=resolve_alias(entry, "language"),
            motive=resolve_alias(entry, "motive"),
            size=_optional_str(entry.get("size")),
            adserver_type=_nested_type(entry, "adserver"),
            clicktag=_optional_str(entry.get("clicktag")),
            template_type=_nested_type(entry, "brand"),
            raw=entry,
        )
    except ValidationError as exc:
        raise ConfigurationError(
            f"Invalid width/height in format #{index}: {json.dumps(entry)}"
        ) from exc


def normalize_config(document: Any, source: str = "<memory>") -> CampaignConfig:
    """Turn either accepted JSON shape into a ``CampaignConfig``.

    Every format is validated here, so a malformed entry aborts the run
    before any artifact is touched.
    """
    if isinstance(document, list):
        header: dict[str, Any] = {}
        entries = document
    elif isinstance(document, dict):
        header = document
        entries = document.get("formats")
        if not isinstance(entries, list):
            entries = []
    else:
        raise ConfigurationError(
            f"{source} must hold a JSON array or an object with a 'formats' array."
        )

    if not entries:
        raise ConfigurationError(
            f'No formats found in {source}. Expected {{ "formats": [ ... ] }} or a JSON array.'
        )

    formats = [build_format(entry, i) for i, entry in enumerate(entries)]
    return CampaignConfig(
        campaign=_optional_str(header.get("campaign")),
        clicktag=_optional_str(header.get("clicktag")),
        template_type=_nested_type(header, "brand"),
        formats=formats,
    )


def load_config(path: Path) -> CampaignConfig:
    """Read and normalize a formats.json file."""
    path = Path(path)
    try:
        document = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as exc:
        raise ConfigurationError(f"Configuration file not found: {path}") from exc
    except json.JSONDecodeError as exc:
        raise ConfigurationError(f"{path} is not valid JSON: {exc}") from exc
    except UnicodeDecodeError as exc:
        raise ConfigurationError(f"{path} is not valid UTF-8: {exc}") from exc

    config = normalize_config(document, source=str(path))
    logger.debug("Loaded %d format(s) from %s", len(config.formats), path)
    return config

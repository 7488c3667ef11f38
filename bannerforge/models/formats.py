"""Campaign configuration models: one canonical shape per formats.json."""

from __future__ import annotations

import re
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

_KB_PATTERN = re.compile(r"^(\d+(?:\.\d+)?)\s*kb$", re.IGNORECASE)


def parse_kb(size: str | None) -> int | None:
    """Convert a ``"150kb"`` budget string to bytes (1 kb = 1024 bytes).

    Returns None when the value is missing or not in ``<number>kb`` form.
    """
    if not size:
        return None
    match = _KB_PATTERN.match(str(size).strip())
    if match is None:
        return None
    return round(float(match.group(1)) * 1024)


class FormatSpec(BaseModel):
    """One configured banner variant.

    ``raw`` keeps the JSON entry exactly as it appeared in formats.json.
    Formats built in code have no ``raw``; their ``document`` is rebuilt
    from the fields instead.
    """

    model_config = ConfigDict(frozen=True)

    width: int = Field(gt=0)
    height: int = Field(gt=0)
    language: str | None = None
    motive: str | None = None
    size: str | None = None  # budget, e.g. "150kb"
    adserver_type: str | None = None
    clicktag: str | None = None
    template_type: str | None = None  # brand.type
    raw: dict[str, Any] = Field(default_factory=dict, repr=False)

    @property
    def document(self) -> dict[str, Any]:
        """The JSON entry this format stands for; what gets fingerprinted."""
        if self.raw:
            return self.raw
        return self.model_dump(mode="json", exclude={"raw"}, exclude_none=True)

    @property
    def size_label(self) -> str:
        return f"{self.width}x{self.height}"

    @property
    def budget_bytes(self) -> int | None:
        return parse_kb(self.size)

    @property
    def label(self) -> str:
        """Human-readable identity, e.g. ``en_summer_300x250``."""
        parts = [self.language, self.motive, self.size_label]
        return "_".join(p for p in parts if p)


class CampaignConfig(BaseModel):
    """Top-level configuration, normalized from either JSON shape."""

    model_config = ConfigDict(frozen=True)

    campaign: str | None = None
    clicktag: str | None = None
    template_type: str | None = None  # campaign-level brand.type
    formats: list[FormatSpec] = Field(min_length=1)

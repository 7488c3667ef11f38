"""Per-artifact generation state and asset models."""

from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field


class AssetDescriptor(BaseModel):
    """A static file in an artifact's ``assets/`` directory."""

    model_config = ConfigDict(frozen=True)

    id: str  # filename without extension
    file: str


class GenerationState(BaseModel):
    """What produced the rendered output currently on disk.

    Persisted as ``.gen-state.json`` inside each artifact. An artifact is
    stale when its current asset list or format fingerprint no longer
    matches this record.
    """

    model_config = ConfigDict(frozen=True)

    asset_files: list[str] = Field(default_factory=list)
    fingerprint: str
    template_type: str
    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )

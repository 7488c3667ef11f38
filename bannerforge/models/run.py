"""Per-run options and result models."""

from __future__ import annotations

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from bannerforge.config import BannerSettings

_DEFAULTS = BannerSettings.model_fields


class RunMode(str, Enum):
    """Reconciliation policy for a run."""

    INCREMENTAL = "incremental"  # create missing, update only when stale
    CREATE_ONLY = "create-only"  # create missing, never touch existing
    UPDATE = "update"  # re-render existing, never create


class FormatFilters(BaseModel):
    """Optional inclusion predicates. ``None`` means no constraint."""

    model_config = ConfigDict(frozen=True)

    indexes: frozenset[int] | None = None
    sizes: frozenset[str] | None = None
    languages: frozenset[str] | None = None
    motives: frozenset[str] | None = None
    templates: frozenset[str] | None = None


class RunOptions(BaseModel):
    """Explicit run context, threaded through every component call."""

    model_config = ConfigDict(frozen=True)

    out_dir: Path = _DEFAULTS["out_dir"].default
    zip_dir: Path = _DEFAULTS["zip_dir"].default
    templates_path: Path = _DEFAULTS["templates_path"].default
    campaign: str | None = None  # overrides formats.json
    clicktag: str | None = None  # overrides formats.json
    template: str | None = None  # overrides brand.type everywhere
    package: bool = False
    mode: RunMode = RunMode.INCREMENTAL
    filters: FormatFilters = FormatFilters()


class SizeCheckStatus(str, Enum):
    PASSED = "passed"
    FAILED = "failed"
    SKIPPED = "skipped"  # no budget declared


class SizeCheckResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    archive_path: Path
    status: SizeCheckStatus
    actual_bytes: int | None = None
    budget_bytes: int | None = None

    @property
    def ok(self) -> bool:
        return self.status == SizeCheckStatus.PASSED


class SizeBudgetWarning(BaseModel):
    """Non-fatal record of an archive that exceeds its declared budget."""

    model_config = ConfigDict(frozen=True)

    label: str
    archive_path: Path
    actual_bytes: int
    budget_bytes: int

    @property
    def message(self) -> str:
        return (
            f"{self.archive_path.name} is {self.actual_bytes / 1024:.1f} kb, "
            f"limit {self.budget_bytes / 1024:.1f} kb ({self.label})"
        )


class FormatOutcome(str, Enum):
    CREATED = "created"
    UPDATED = "updated"
    SKIPPED = "skipped"


class FormatResult(BaseModel):
    """What happened to one format during a run."""

    model_config = ConfigDict(frozen=True)

    index: int
    label: str
    artifact_dir: Path
    outcome: FormatOutcome
    archive_path: Path | None = None
    size_check: SizeCheckResult | None = None


class RunSummary(BaseModel):
    """Counts and results accumulated over one generation run."""

    model_config = ConfigDict(frozen=True)

    mode: RunMode
    campaign: str
    out_root: Path
    zip_root: Path | None = None  # set when packaging was requested
    processed: int = 0
    created: int = 0
    updated: int = 0
    skipped: int = 0
    filtered_out: int = 0
    results: list[FormatResult] = Field(default_factory=list)
    warnings: list[SizeBudgetWarning] = Field(default_factory=list)

    @property
    def archives(self) -> list[Path]:
        return [r.archive_path for r in self.results if r.archive_path is not None]


class PackageSummary(BaseModel):
    """Result of packaging already-generated artifacts."""

    model_config = ConfigDict(frozen=True)

    campaign: str
    out_root: Path
    zip_root: Path
    archives: list[Path] = Field(default_factory=list)
    size_checks: list[SizeCheckResult] = Field(default_factory=list)
    warnings: list[SizeBudgetWarning] = Field(default_factory=list)
    unmatched: list[Path] = Field(default_factory=list)  # no format to validate size

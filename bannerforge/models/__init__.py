"""Bannerforge data models (frozen Pydantic v2)."""

from bannerforge.models.formats import CampaignConfig, FormatSpec, parse_kb
from bannerforge.models.run import (
    FormatFilters,
    FormatOutcome,
    FormatResult,
    PackageSummary,
    RunMode,
    RunOptions,
    RunSummary,
    SizeBudgetWarning,
    SizeCheckResult,
    SizeCheckStatus,
)
from bannerforge.models.state import AssetDescriptor, GenerationState

__all__ = [
    # formats
    "CampaignConfig",
    "FormatSpec",
    "parse_kb",
    # state
    "AssetDescriptor",
    "GenerationState",
    # run
    "FormatFilters",
    "FormatOutcome",
    "FormatResult",
    "RunMode",
    "RunOptions",
    "RunSummary",
    "PackageSummary",
    "SizeBudgetWarning",
    "SizeCheckResult",
    "SizeCheckStatus",
]

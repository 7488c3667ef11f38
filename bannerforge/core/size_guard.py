"""Compare packaged archive sizes against declared budgets.

Oversize archives are reported, never fatal: budgets are advisory at
generation time.
"""

from __future__ import annotations

import logging
from pathlib import Path

from bannerforge.models.formats import parse_kb
from bannerforge.models.run import SizeCheckResult, SizeCheckStatus

logger = logging.getLogger(__name__)

__all__ = ["check", "format_kb", "parse_kb"]


def format_kb(num_bytes: int) -> str:
    return f"{num_bytes / 1024:.1f} kb"


def check(archive_path: Path, budget_bytes: int | None) -> SizeCheckResult:
    """Check ``archive_path`` against ``budget_bytes``.

    Without a budget the result is SKIPPED, which is not the same as
    PASSED.
    """
    archive_path = Path(archive_path)
    if budget_bytes is None:
        return SizeCheckResult(archive_path=archive_path, status=SizeCheckStatus.SKIPPED)

    actual = archive_path.stat().st_size
    ok = actual <= budget_bytes
    if ok:
        logger.info(
            "ZIP size ok: %s %s / limit %s",
            archive_path.name, format_kb(actual), format_kb(budget_bytes),
        )
    else:
        logger.warning(
            "ZIP OVERSIZE: %s %s / limit %s",
            archive_path.name, format_kb(actual), format_kb(budget_bytes),
        )
    return SizeCheckResult(
        archive_path=archive_path,
        status=SizeCheckStatus.PASSED if ok else SizeCheckStatus.FAILED,
        actual_bytes=actual,
        budget_bytes=budget_bytes,
    )

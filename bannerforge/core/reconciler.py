"""Reconciliation engine: decides, per format, whether to create, update or skip.

For every configured format that survives the run's filters, the
Reconciler compares what is on disk (entry file, assets, persisted
generation state) with the current configuration and applies the run
mode:

=============  ===================  ====================
Mode           Create when missing  Touch when existing
=============  ===================  ====================
incremental    yes                  only if stale
create-only    yes                  never
update         no                   always
=============  ===================  ====================

Formats are processed strictly in configuration order and the first
error aborts the run. Templates are copied only when a banner is first
created, so hand-edited output and assets of existing banners survive.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from bannerforge.config import BannerSettings
from bannerforge.core import size_guard
from bannerforge.core.assets import ASSETS_DIRNAME, scan_assets
from bannerforge.core.filters import matches, resolve_template_type
from bannerforge.core.hasher import fingerprint, same_sequence
from bannerforge.core.loader import ConfigurationError
from bannerforge.core.packager import archive_name, package
from bannerforge.core.state_store import read_state, write_state
from bannerforge.core.templates import (
    ENTRY_MARKER,
    instantiate,
    render_dynamic_files,
    resolve_template,
)
from bannerforge.core.tree import find_marked_dirs
from bannerforge.models.formats import CampaignConfig, FormatSpec
from bannerforge.models.run import (
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

logger = logging.getLogger(__name__)


def resolve_mode(create_only: bool, update: bool) -> RunMode:
    """Map the two mode switches to a RunMode; both at once is an error."""
    if create_only and update:
        raise ConfigurationError("Use only one of --create-only or --update (not both).")
    if create_only:
        return RunMode.CREATE_ONLY
    if update:
        return RunMode.UPDATE
    return RunMode.INCREMENTAL


def should_process(mode: RunMode, exists: bool) -> bool:
    """Whether a format is touched at all under ``mode``."""
    if mode == RunMode.CREATE_ONLY and exists:
        return False
    if mode == RunMode.UPDATE and not exists:
        return False
    return True


def is_stale(
    prev_state: GenerationState | None, asset_files: list[str], fmt_fingerprint: str
) -> bool:
    """No prior state, a different asset list, or a different fingerprint."""
    if prev_state is None:
        return True
    if not same_sequence(prev_state.asset_files, asset_files):
        return True
    return prev_state.fingerprint != fmt_fingerprint


def should_render(mode: RunMode, exists: bool, stale: bool) -> bool:
    if mode == RunMode.UPDATE:
        return True
    if mode == RunMode.CREATE_ONLY:
        return not exists
    return not exists or stale


def _size_warning(label: str, check: SizeCheckResult) -> SizeBudgetWarning | None:
    if check.status != SizeCheckStatus.FAILED:
        return None
    return SizeBudgetWarning(
        label=label,
        archive_path=check.archive_path,
        actual_bytes=check.actual_bytes,
        budget_bytes=check.budget_bytes,
    )


class Reconciler:
    """Brings the banner tree for one campaign in line with its configuration.

    Parameters
    ----------
    config:
        The normalized campaign configuration.
    options:
        Run options (output locations, overrides, mode, filters).
    settings:
        Fallback defaults. A fresh ``BannerSettings`` if not provided.
    """

    def __init__(
        self,
        config: CampaignConfig,
        options: RunOptions | None = None,
        *,
        settings: BannerSettings | None = None,
    ) -> None:
        self.config = config
        self.options = options or RunOptions()
        self.settings = settings or BannerSettings()

        self.campaign = self.options.campaign or config.campaign or self.settings.default_campaign
        self.source_root = Path(self.options.out_dir).resolve()
        self.out_root = self.source_root / self.campaign
        self.zip_root = Path(self.options.zip_dir).resolve()

    # ------------------------------------------------------------------
    # Resolution helpers
    # ------------------------------------------------------------------

    def artifact_dir(self, fmt: FormatSpec) -> Path:
        """``<out_root>/[<language>/][<motive>/]<W>x<H>``"""
        parts = [p for p in (fmt.language, fmt.motive) if p]
        return self.out_root.joinpath(*parts, fmt.size_label)

    def template_type(self, fmt: FormatSpec) -> str:
        return resolve_template_type(
            fmt,
            self.config.template_type,
            self.options.template,
            self.settings.default_template_type,
        )

    def clicktag(self, fmt: FormatSpec) -> str:
        # a format's own clicktag beats the campaign-wide one
        return (
            self.options.clicktag
            or fmt.clicktag
            or self.config.clicktag
            or self.settings.default_clicktag
        )

    def render_variables(
        self, fmt: FormatSpec, assets: list[AssetDescriptor], template_type: str
    ) -> dict[str, Any]:
        """The fixed variable set every dynamic template file is rendered with."""
        budget = fmt.budget_bytes
        return {
            "CAMPAIGN": self.campaign,
            "LANGUAGE": fmt.language or "",
            "MOTIVE": fmt.motive or "",
            "WIDTH": fmt.width,
            "HEIGHT": fmt.height,
            "SIZE_KB": fmt.size or "",
            "MAX_BYTES": budget if budget is not None else "",
            "ADSERVER_TYPE": fmt.adserver_type or self.settings.default_adserver_type,
            "CLICKTAG": self.clicktag(fmt),
            "ASSETS": [a.model_dump() for a in assets],
            "FORMAT_JSON": json.dumps(fmt.document, separators=(",", ":")),
            "TEMPLATE_TYPE": template_type,
        }

    # ------------------------------------------------------------------
    # Run
    # ------------------------------------------------------------------

    def run(self) -> RunSummary:
        """Reconcile every configured format, in order."""
        mode = self.options.mode
        results: list[FormatResult] = []
        warnings: list[SizeBudgetWarning] = []
        filtered_out = 0

        logger.info(
            "Reconciling %d format(s) for campaign %r in %s mode",
            len(self.config.formats), self.campaign, mode.value,
        )

        for index, fmt in enumerate(self.config.formats):
            if not matches(
                fmt,
                index,
                self.options.template,
                self.options.filters,
                campaign_template=self.config.template_type,
                default_template=self.settings.default_template_type,
            ):
                filtered_out += 1
                continue

            result = self.reconcile(index, fmt)
            results.append(result)
            if result.size_check is not None:
                warning = _size_warning(result.label, result.size_check)
                if warning is not None:
                    warnings.append(warning)

        created = sum(r.outcome == FormatOutcome.CREATED for r in results)
        updated = sum(r.outcome == FormatOutcome.UPDATED for r in results)
        return RunSummary(
            mode=mode,
            campaign=self.campaign,
            out_root=self.out_root,
            zip_root=self.zip_root if self.options.package else None,
            processed=created + updated,
            created=created,
            updated=updated,
            skipped=len(results) - created - updated,
            filtered_out=filtered_out,
            results=results,
            warnings=warnings,
        )

    def reconcile(self, index: int, fmt: FormatSpec) -> FormatResult:
        """Apply the run mode to a single format."""
        mode = self.options.mode
        banner_dir = self.artifact_dir(fmt)
        exists = (banner_dir / ENTRY_MARKER).is_file()

        def _skipped(reason: str) -> FormatResult:
            logger.debug("Skipping %s (%s)", fmt.label, reason)
            return FormatResult(
                index=index,
                label=fmt.label,
                artifact_dir=banner_dir,
                outcome=FormatOutcome.SKIPPED,
            )

        if not should_process(mode, exists):
            return _skipped("exists" if exists else "missing")

        template_type = self.template_type(fmt)
        template_root = resolve_template(template_type, self.options.templates_path)

        banner_dir.mkdir(parents=True, exist_ok=True)
        if not exists:
            instantiate(template_root, banner_dir)

        (banner_dir / ASSETS_DIRNAME).mkdir(exist_ok=True)
        assets = scan_assets(banner_dir)
        asset_files = [a.file for a in assets]

        fmt_fingerprint = fingerprint(fmt.document)
        stale = is_stale(read_state(banner_dir), asset_files, fmt_fingerprint)
        if not should_render(mode, exists, stale):
            return _skipped("up to date")

        render_dynamic_files(banner_dir, self.render_variables(fmt, assets, template_type))
        write_state(
            banner_dir,
            GenerationState(
                asset_files=asset_files,
                fingerprint=fmt_fingerprint,
                template_type=template_type,
                updated_at=datetime.now(timezone.utc),
            ),
        )
        outcome = FormatOutcome.UPDATED if exists else FormatOutcome.CREATED
        logger.info("%s %s (%s)", outcome.value.capitalize(), fmt.label, template_type)

        archive_path = None
        check = None
        if self.options.package:
            archive_path = package(
                banner_dir,
                self.zip_root / archive_name(
                    self.campaign, fmt.language, fmt.motive, fmt.size_label
                ),
            )
            check = size_guard.check(archive_path, fmt.budget_bytes)

        return FormatResult(
            index=index,
            label=fmt.label,
            artifact_dir=banner_dir,
            outcome=outcome,
            archive_path=archive_path,
            size_check=check,
        )

    # ------------------------------------------------------------------
    # Package-only
    # ------------------------------------------------------------------

    def package_existing(self) -> PackageSummary:
        """Zip every banner already generated under the campaign root.

        Each archive is size-checked against the best-matching configured
        format, when one exists.
        """
        folders = find_marked_dirs(self.out_root, ENTRY_MARKER)
        if not folders:
            raise ConfigurationError(f"No banner folders found under: {self.out_root}")

        archives: list[Path] = []
        checks: list[SizeCheckResult] = []
        warnings: list[SizeBudgetWarning] = []
        unmatched: list[Path] = []

        for folder in folders:
            rel_parts = folder.relative_to(self.out_root).parts
            archive_path = package(
                folder, self.zip_root / archive_name(self.campaign, *rel_parts)
            )
            archives.append(archive_path)

            fmt = find_format_for_folder(self.config.formats, rel_parts)
            if fmt is None:
                logger.info(
                    "ZIP created (no matching format to validate size): %s",
                    archive_path.name,
                )
                unmatched.append(archive_path)
                continue

            check = size_guard.check(archive_path, fmt.budget_bytes)
            checks.append(check)
            warning = _size_warning(fmt.label, check)
            if warning is not None:
                warnings.append(warning)

        logger.info("Zipped %d banner(s) to %s", len(archives), self.zip_root)
        return PackageSummary(
            campaign=self.campaign,
            out_root=self.out_root,
            zip_root=self.zip_root,
            archives=archives,
            size_checks=checks,
            warnings=warnings,
            unmatched=unmatched,
        )


def parse_folder_meta(rel_parts: tuple[str, ...]) -> dict[str, Any] | None:
    """Recover (language, motive, width, height) from a banner's relative path.

    ``("300x250",)``, ``("en", "300x250")`` or ``("en", "summer", "300x250")``.
    """
    if not rel_parts:
        return None
    size = rel_parts[-1]
    w, sep, h = size.lower().partition("x")
    if not sep or not w.isdigit() or not h.isdigit():
        return None
    return {
        "width": int(w),
        "height": int(h),
        "language": rel_parts[0] if len(rel_parts) >= 2 else None,
        "motive": rel_parts[1] if len(rel_parts) >= 3 else None,
    }


def find_format_for_folder(
    formats: list[FormatSpec], rel_parts: tuple[str, ...]
) -> FormatSpec | None:
    """Best configured match for a banner folder.

    Exact on size plus language/motive where both sides define them,
    falling back to the first format of the same size.
    """
    meta = parse_folder_meta(rel_parts)
    if meta is None:
        return None

    same_size = [
        f for f in formats if f.width == meta["width"] and f.height == meta["height"]
    ]
    for fmt in same_size:
        if meta["language"] and fmt.language and fmt.language != meta["language"]:
            continue
        if meta["motive"] and fmt.motive and fmt.motive != meta["motive"]:
            continue
        return fmt
    return same_size[0] if same_size else None

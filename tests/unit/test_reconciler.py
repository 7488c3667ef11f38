"""Unit tests for the reconciliation engine.

Covers the pure mode/staleness decisions, path and variable resolution,
and the per-format create/update/skip behaviour on a real temp tree.
"""

from __future__ import annotations

import itertools
from pathlib import Path

import pytest

from bannerforge.core.loader import ConfigurationError
from bannerforge.core.reconciler import (
    Reconciler,
    find_format_for_folder,
    is_stale,
    parse_folder_meta,
    resolve_mode,
    should_process,
    should_render,
)
from bannerforge.core.state_store import read_state
from bannerforge.core.templates import TemplateResolutionError
from bannerforge.models.formats import CampaignConfig, FormatSpec
from bannerforge.models.run import FormatFilters, FormatOutcome, RunMode, SizeCheckStatus
from bannerforge.models.state import GenerationState


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _state(assets=("a.png",), fp="sha256:1") -> GenerationState:
    return GenerationState(asset_files=list(assets), fingerprint=fp, template_type="standard")


# ---------------------------------------------------------------------------
# Test: pure decisions
# ---------------------------------------------------------------------------


class TestResolveMode:
    def test_default_incremental(self):
        assert resolve_mode(False, False) == RunMode.INCREMENTAL

    def test_single_switches(self):
        assert resolve_mode(True, False) == RunMode.CREATE_ONLY
        assert resolve_mode(False, True) == RunMode.UPDATE

    def test_both_switches_rejected(self):
        with pytest.raises(ConfigurationError, match="only one"):
            resolve_mode(True, True)


class TestIsStale:
    def test_no_state(self):
        assert is_stale(None, [], "sha256:1") is True

    def test_unchanged(self):
        assert is_stale(_state(), ["a.png"], "sha256:1") is False

    def test_assets_changed(self):
        assert is_stale(_state(), ["a.png", "b.png"], "sha256:1") is True

    def test_fingerprint_changed(self):
        assert is_stale(_state(), ["a.png"], "sha256:2") is True


class TestModeTable:
    @pytest.mark.parametrize(
        "mode, exists, expected",
        [
            (RunMode.INCREMENTAL, False, True),
            (RunMode.INCREMENTAL, True, True),
            (RunMode.CREATE_ONLY, False, True),
            (RunMode.CREATE_ONLY, True, False),
            (RunMode.UPDATE, False, False),
            (RunMode.UPDATE, True, True),
        ],
    )
    def test_should_process(self, mode, exists, expected):
        assert should_process(mode, exists) is expected

    def test_should_render_incremental(self):
        for exists, stale in itertools.product((True, False), repeat=2):
            assert should_render(RunMode.INCREMENTAL, exists, stale) is (not exists or stale)

    def test_should_render_create_only(self):
        for exists, stale in itertools.product((True, False), repeat=2):
            assert should_render(RunMode.CREATE_ONLY, exists, stale) is (not exists)

    def test_should_render_update(self):
        for exists, stale in itertools.product((True, False), repeat=2):
            assert should_render(RunMode.UPDATE, exists, stale) is True


# ---------------------------------------------------------------------------
# Test: resolution
# ---------------------------------------------------------------------------


class TestResolution:
    def test_artifact_dir_layout(self, make_config, make_options, settings, out_dir):
        config = make_config(
            [
                {"width": 300, "height": 250},
                {"width": 300, "height": 250, "language": "en"},
                {"width": 300, "height": 250, "lang": "en", "motiveName": "summer"},
            ],
            campaign="c",
        )
        rec = Reconciler(config, make_options(), settings=settings)
        dirs = [rec.artifact_dir(f).relative_to(out_dir.resolve()).as_posix()
                for f in config.formats]
        assert dirs == ["c/300x250", "c/en/300x250", "c/en/summer/300x250"]

    def test_campaign_precedence(self, make_config, make_options, settings):
        config = make_config([{"width": 1, "height": 1}], campaign="from-file")
        assert Reconciler(config, make_options(), settings=settings).campaign == "from-file"
        assert Reconciler(config, make_options(campaign="cli"), settings=settings).campaign == "cli"
        bare = make_config([{"width": 1, "height": 1}])
        assert Reconciler(bare, make_options(), settings=settings).campaign == "my-campaign"

    def test_clicktag_precedence(self, make_config, make_options, settings):
        config = make_config(
            [{"width": 1, "height": 1, "clicktag": "https://format"}, {"width": 2, "height": 2}],
            clicktag="https://campaign",
        )
        rec = Reconciler(config, make_options(), settings=settings)
        assert rec.clicktag(config.formats[0]) == "https://format"
        assert rec.clicktag(config.formats[1]) == "https://campaign"
        rec = Reconciler(config, make_options(clicktag="https://cli"), settings=settings)
        assert rec.clicktag(config.formats[0]) == "https://cli"
        bare = make_config([{"width": 1, "height": 1}])
        rec = Reconciler(bare, make_options(), settings=settings)
        assert rec.clicktag(bare.formats[0]) == "https://example.com"

    def test_render_variables(self, make_config, make_options, settings):
        config = make_config(
            [{"width": 300, "height": 250, "language": "en", "size": "40kb",
              "adserver": {"type": "dcm"}}],
            campaign="c",
        )
        rec = Reconciler(config, make_options(), settings=settings)
        variables = rec.render_variables(config.formats[0], [], "standard")
        assert set(variables) == {
            "CAMPAIGN", "LANGUAGE", "MOTIVE", "WIDTH", "HEIGHT", "SIZE_KB", "MAX_BYTES",
            "ADSERVER_TYPE", "CLICKTAG", "ASSETS", "FORMAT_JSON", "TEMPLATE_TYPE",
        }
        assert variables["MAX_BYTES"] == 40960
        assert variables["MOTIVE"] == ""
        assert variables["ADSERVER_TYPE"] == "dcm"
        assert '"width":300' in variables["FORMAT_JSON"]

    def test_format_json_for_format_built_in_code(self, make_options, settings):
        fmt = FormatSpec(width=300, height=250, clicktag="https://x.example")
        rec = Reconciler(CampaignConfig(formats=[fmt]), make_options(), settings=settings)
        variables = rec.render_variables(fmt, [], "standard")
        assert variables["FORMAT_JSON"] == (
            '{"width":300,"height":250,"clicktag":"https://x.example"}'
        )


# ---------------------------------------------------------------------------
# Test: reconcile on disk
# ---------------------------------------------------------------------------


class TestReconcile:
    def test_create_renders_and_persists_state(self, make_config, make_options, settings):
        config = make_config([{"width": 300, "height": 250, "language": "en"}], campaign="c")
        rec = Reconciler(config, make_options(), settings=settings)

        summary = rec.run()

        banner = rec.artifact_dir(config.formats[0])
        assert summary.created == 1 and summary.updated == 0 and summary.skipped == 0
        assert (banner / "index.html").read_text().startswith("c|300x250|en|")
        assert (banner / "assets").is_dir()
        assert not (banner / "assets" / "default.png").exists()
        state = read_state(banner)
        assert state is not None
        assert state.template_type == "standard"
        assert state.asset_files == []

    def test_assets_listed_in_render(self, make_config, make_options, settings):
        config = make_config([{"width": 300, "height": 250}], campaign="c")
        rec = Reconciler(config, make_options(), settings=settings)
        banner = rec.artifact_dir(config.formats[0])
        (banner / "assets").mkdir(parents=True)
        (banner / "assets" / "hero.png").write_bytes(b"hero")
        (banner / "assets" / "hero@2x.png").write_bytes(b"hero2x")

        rec.run()

        assert (banner / "index.html").read_text().rstrip().endswith("|hero=hero.png;")
        assert (banner / "assets" / "hero.png").read_bytes() == b"hero"
        assert read_state(banner).asset_files == ["hero.png"]

    def test_update_skips_missing(self, make_config, make_options, settings):
        config = make_config([{"width": 300, "height": 250}], campaign="c")
        rec = Reconciler(config, make_options(mode=RunMode.UPDATE), settings=settings)
        summary = rec.run()
        assert summary.skipped == 1 and summary.created == 0
        assert not rec.artifact_dir(config.formats[0]).exists()

    def test_create_only_never_updates(self, make_config, make_options, settings):
        rec = Reconciler(
            make_config([{"width": 300, "height": 250}], campaign="c"),
            make_options(), settings=settings,
        )
        rec.run()
        changed = make_config([{"width": 300, "height": 250, "size": "99kb"}], campaign="c")
        summary = Reconciler(
            changed, make_options(mode=RunMode.CREATE_ONLY), settings=settings
        ).run()
        assert summary.updated == 0 and summary.skipped == 1

    def test_update_always_rerenders(self, make_config, make_options, settings):
        config = make_config([{"width": 300, "height": 250}], campaign="c")
        Reconciler(config, make_options(), settings=settings).run()
        summary = Reconciler(config, make_options(mode=RunMode.UPDATE), settings=settings).run()
        assert summary.updated == 1 and summary.processed == 1

    def test_incremental_detects_fingerprint_change(self, make_config, make_options, settings):
        Reconciler(
            make_config([{"width": 300, "height": 250}], campaign="c"),
            make_options(), settings=settings,
        ).run()
        summary = Reconciler(
            make_config([{"width": 300, "height": 250, "clicktag": "https://new"}], campaign="c"),
            make_options(), settings=settings,
        ).run()
        assert summary.updated == 1

    def test_incremental_ignores_key_order(self, make_config, make_options, settings):
        Reconciler(
            make_config([{"width": 300, "height": 250, "language": "en"}], campaign="c"),
            make_options(), settings=settings,
        ).run()
        summary = Reconciler(
            make_config([{"language": "en", "height": 250, "width": 300}], campaign="c"),
            make_options(), settings=settings,
        ).run()
        assert summary.updated == 0 and summary.skipped == 1

    def test_incremental_detects_change_in_formats_built_in_code(
        self, make_options, settings
    ):
        Reconciler(
            CampaignConfig(campaign="c", formats=[FormatSpec(width=300, height=250)]),
            make_options(), settings=settings,
        ).run()
        changed = CampaignConfig(
            campaign="c",
            formats=[FormatSpec(width=300, height=250, clicktag="https://new", size="40kb")],
        )
        summary = Reconciler(changed, make_options(), settings=settings).run()
        assert (summary.skipped, summary.updated) == (0, 1)

        again = Reconciler(changed, make_options(), settings=settings).run()
        assert (again.skipped, again.updated) == (1, 0)

    def test_incremental_detects_asset_change(self, make_config, make_options, settings):
        config = make_config([{"width": 300, "height": 250}], campaign="c")
        rec = Reconciler(config, make_options(), settings=settings)
        rec.run()
        (rec.artifact_dir(config.formats[0]) / "assets" / "new.png").write_bytes(b"n")
        summary = Reconciler(config, make_options(), settings=settings).run()
        assert summary.updated == 1

    def test_corrupt_state_forces_rerender(self, make_config, make_options, settings):
        config = make_config([{"width": 300, "height": 250}], campaign="c")
        rec = Reconciler(config, make_options(), settings=settings)
        rec.run()
        (rec.artifact_dir(config.formats[0]) / ".gen-state.json").write_text("garbage")
        assert Reconciler(config, make_options(), settings=settings).run().updated == 1

    def test_existing_banner_not_recopied(self, make_config, make_options, settings):
        config = make_config([{"width": 300, "height": 250}], campaign="c")
        rec = Reconciler(config, make_options(), settings=settings)
        rec.run()
        banner = rec.artifact_dir(config.formats[0])
        (banner / "js" / "main.js").write_text("// tuned by hand")
        (banner / "index.html.j2").write_text("custom {{ WIDTH }}")

        Reconciler(config, make_options(mode=RunMode.UPDATE), settings=settings).run()

        assert (banner / "js" / "main.js").read_text() == "// tuned by hand"
        assert (banner / "index.html").read_text() == "custom 300"

    def test_missing_template_is_fatal(self, make_config, make_options, settings):
        config = make_config(
            [{"width": 300, "height": 250}, {"width": 728, "height": 90, "brand": {"type": "ghost"}}],
            campaign="c",
        )
        rec = Reconciler(config, make_options(), settings=settings)
        with pytest.raises(TemplateResolutionError, match="ghost"):
            rec.run()
        # formats before the failing one were fully processed
        assert (rec.artifact_dir(config.formats[0]) / "index.html").is_file()

    def test_template_override(self, make_config, make_options, settings):
        config = make_config([{"width": 300, "height": 250, "brand": {"type": "ghost"}}])
        rec = Reconciler(config, make_options(template="premium"), settings=settings)
        rec.run()
        assert read_state(rec.artifact_dir(config.formats[0])).template_type == "premium"

    def test_filters_counted(self, make_config, make_options, settings):
        config = make_config(
            [{"width": 300, "height": 250, "language": "en"},
             {"width": 300, "height": 250, "language": "de"},
             {"width": 728, "height": 90, "language": "en"}],
            campaign="c",
        )
        options = make_options(filters=FormatFilters(languages={"en"}, sizes={"300x250"}))
        summary = Reconciler(config, options, settings=settings).run()
        assert summary.filtered_out == 2
        assert summary.created == 1
        assert [r.index for r in summary.results] == [0]

    def test_packaging(self, make_config, make_options, settings, zip_dir):
        config = make_config(
            [{"width": 300, "height": 250, "language": "en", "size": "500kb"},
             {"width": 728, "height": 90}],
            campaign="c",
        )
        summary = Reconciler(config, make_options(package=True), settings=settings).run()

        assert summary.zip_root == zip_dir.resolve()
        assert [p.name for p in summary.archives] == ["c_en_300x250.zip", "c_728x90.zip"]
        first, second = summary.results
        assert first.size_check.ok is True
        assert second.size_check.status.value == "skipped"
        assert summary.warnings == []

    def test_results_keep_config_order(self, make_config, make_options, settings):
        config = make_config(
            [{"width": 728, "height": 90}, {"width": 1, "height": 1}, {"width": 300, "height": 250}]
        )
        summary = Reconciler(config, make_options(), settings=settings).run()
        assert [r.label for r in summary.results] == ["728x90", "1x1", "300x250"]
        assert all(r.outcome == FormatOutcome.CREATED for r in summary.results)


# ---------------------------------------------------------------------------
# Test: package-only helpers
# ---------------------------------------------------------------------------


class TestFolderMatching:
    def test_parse_folder_meta(self):
        assert parse_folder_meta(("300x250",)) == {
            "width": 300, "height": 250, "language": None, "motive": None,
        }
        assert parse_folder_meta(("en", "summer", "300X250"))["motive"] == "summer"
        assert parse_folder_meta(("en", "banner")) is None
        assert parse_folder_meta(()) is None

    def test_exact_then_size_fallback(self, make_config):
        config = make_config([
            {"width": 300, "height": 250, "language": "de", "size": "1kb"},
            {"width": 300, "height": 250, "language": "en", "size": "2kb"},
        ])
        assert find_format_for_folder(config.formats, ("en", "300x250")).size == "2kb"
        assert find_format_for_folder(config.formats, ("fr", "300x250")).size == "1kb"
        assert find_format_for_folder(config.formats, ("728x90",)) is None

    def test_package_existing(self, make_config, make_options, settings, out_dir):
        config = make_config(
            [{"width": 300, "height": 250, "language": "en", "size": "1000kb"}], campaign="c"
        )
        Reconciler(config, make_options(), settings=settings).run()
        # a hand-made banner that is not in formats.json
        stray = out_dir / "c" / "stray" / "index.html"
        stray.parent.mkdir(parents=True)
        stray.write_text("<html></html>")

        summary = Reconciler(config, make_options(), settings=settings).package_existing()

        assert sorted(p.name for p in summary.archives) == ["c_en_300x250.zip", "c_stray.zip"]
        assert [c.ok for c in summary.size_checks] == [True]
        assert [p.name for p in summary.unmatched] == ["c_stray.zip"]

    def test_package_existing_without_budget_is_skipped(
        self, make_config, make_options, settings
    ):
        config = make_config([{"width": 300, "height": 250}], campaign="c")
        Reconciler(config, make_options(), settings=settings).run()

        summary = Reconciler(config, make_options(), settings=settings).package_existing()

        assert [c.status for c in summary.size_checks] == [SizeCheckStatus.SKIPPED]
        assert summary.unmatched == []
        assert summary.warnings == []

    def test_package_existing_requires_banners(self, make_config, make_options, settings):
        config = make_config([{"width": 300, "height": 250}], campaign="empty")
        with pytest.raises(ConfigurationError, match="No banner folders"):
            Reconciler(config, make_options(), settings=settings).package_existing()

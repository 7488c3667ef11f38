"""Tool configuration: env-driven defaults for every run.

Centralized settings using pydantic-settings. Reads from a .env file
and BANNERFORGE_* environment variables; CLI options override these
per invocation.
"""

from __future__ import annotations

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

BUNDLED_TEMPLATES = Path(__file__).parent / "templates"


class BannerSettings(BaseSettings):
    """Defaults for generation runs, overridable from the environment.

    Examples
    --------
    Override via environment::

        export BANNERFORGE_LOG_LEVEL=DEBUG
        export BANNERFORGE_TEMPLATES_PATH=/srv/banner-templates
        export BANNERFORGE_DEFAULT_CLICKTAG=https://brand.example

    Or via .env file::

        BANNERFORGE_OUT_DIR=build/banners
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="BANNERFORGE_",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    log_level: str = "INFO"

    # Locations
    templates_path: Path = BUNDLED_TEMPLATES
    out_dir: Path = Path("src")
    zip_dir: Path = Path("output/zip")
    formats_filename: str = "formats.json"

    # Fallbacks applied when neither the CLI nor formats.json says otherwise
    default_campaign: str = "my-campaign"
    default_clicktag: str = "https://example.com"
    default_adserver_type: str = "standard"
    default_template_type: str = "standard"

    # Preview
    preview_port: int = 8080

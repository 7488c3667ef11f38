"""Bannerforge: incremental HTML5 banner generation from a single formats.json.

  - One shared template per banner type, rendered per size/language/motive
  - Incremental reconciliation: banners re-render only when their format
    entry or asset list changed (create-only and update modes as well)
  - Hand-edited output and assets are never overwritten by template copies
  - ZIP packaging with per-format size budgets
  - Aggregate preview page for every generated banner
"""

__version__ = "0.1.0"
__description__ = "Incremental HTML5 banner generation, packaging and preview"

from bannerforge.core.reconciler import Reconciler
from bannerforge.core.loader import load_config

__all__ = ["Reconciler", "load_config", "__version__"]

"""Terminal rendering of run results."""

from bannerforge.monitor.renderer import SummaryRenderer

__all__ = ["SummaryRenderer"]

"""Per-run format filters and the parsers that build them."""

from __future__ import annotations

import re
from collections.abc import Iterable

from bannerforge.models.formats import FormatSpec
from bannerforge.models.run import FormatFilters

_SIZE_TOKEN = re.compile(r"^(\d+)\s*x\s*(\d+)$", re.IGNORECASE)


def parse_csv_set(value: str | None) -> frozenset[str] | None:
    """``"en, de"`` -> ``{"en", "de"}``; empty input means no filter."""
    if not value:
        return None
    parts = {p.strip() for p in str(value).split(",") if p.strip()}
    return frozenset(parts) or None


def parse_index_set(value: str | None) -> frozenset[int] | None:
    """``"0,2"`` -> ``{0, 2}``. Non-numeric and negative entries are dropped."""
    if not value:
        return None
    indexes = set()
    for part in str(value).split(","):
        part = part.strip()
        if part.isdigit():
            indexes.add(int(part))
    return frozenset(indexes) or None


def parse_size_list(value: str | Iterable[str] | None) -> frozenset[str] | None:
    """Accepts ``"300x600, 728x90"`` or ``["300x600", "728x90"]``.

    Tokens that are not ``WxH`` are ignored.
    """
    if not value:
        return None
    raw = value if isinstance(value, str) else ",".join(value)
    sizes = set()
    for token in re.split(r"[,\s]+", raw):
        match = _SIZE_TOKEN.match(token.strip())
        if match:
            sizes.add(f"{int(match.group(1))}x{int(match.group(2))}")
    return frozenset(sizes) or None


def resolve_template_type(
    fmt: FormatSpec,
    campaign_template: str | None,
    template_override: str | None,
    default: str = "standard",
) -> str:
    """CLI override -> format brand.type -> campaign brand.type -> default."""
    return template_override or fmt.template_type or campaign_template or default


def matches(
    fmt: FormatSpec,
    index: int,
    template_override: str | None,
    filters: FormatFilters,
    *,
    campaign_template: str | None = None,
    default_template: str = "standard",
) -> bool:
    """True iff ``fmt`` satisfies every supplied filter. No filters, no constraint."""
    template_type = resolve_template_type(
        fmt, campaign_template, template_override, default_template
    )
    if filters.indexes is not None and index not in filters.indexes:
        return False
    if filters.sizes is not None and fmt.size_label not in filters.sizes:
        return False
    if filters.languages is not None and (fmt.language or "") not in filters.languages:
        return False
    if filters.motives is not None and (fmt.motive or "") not in filters.motives:
        return False
    if filters.templates is not None and template_type not in filters.templates:
        return False
    return True

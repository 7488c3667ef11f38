"""Build ``_preview.html``: one page showing every banner under the output root.

Each banner gets a card with a live iframe sized to the banner; a
text box filters cards by label on the client side.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path

from jinja2 import Environment
from pydantic import BaseModel, ConfigDict

from bannerforge.core.templates import ENTRY_MARKER
from bannerforge.core.tree import find_marked_dirs

logger = logging.getLogger(__name__)

PREVIEW_FILENAME = "_preview.html"
FALLBACK_WIDTH = 300
FALLBACK_HEIGHT = 250

_SIZE_DIR = re.compile(r"^(\d+)x(\d+)$", re.IGNORECASE)

_PAGE = """<!doctype html>
<html>
<head>
  <meta charset="utf-8" />
  <meta name="viewport" content="width=device-width, initial-scale=1" />
  <title>HTML5 Banner Previews</title>
  <style>
    body{font-family:system-ui,-apple-system,Segoe UI,Roboto,Arial,sans-serif;margin:16px;overflow-x:auto}
    .bar{display:flex;gap:10px;align-items:center;margin:0 0 14px 0}
    input{flex:1;max-width:520px;padding:10px 12px;border:1px solid #ddd;border-radius:10px;font-size:14px}
    .count{font-size:13px;color:#666;white-space:nowrap}
    .grid{display:flex;flex-wrap:wrap;gap:14px;align-items:flex-start}
    .card{background:#fff;border:1px solid #000;border-radius:10px;padding:10px;box-shadow:0 1px 4px rgba(0,0,0,.04);width:calc(var(--w) * 1px + 16px);max-width:100%}
    .stage{width:calc(var(--w) * 1px);padding:8px;border:1px solid #fff;border-radius:8px;background:#fff;max-width:100%;overflow:auto}
    .meta{display:flex;justify-content:space-between;align-items:center;gap:10px;margin-bottom:8px}
    .label{font-weight:600;font-size:13px;white-space:nowrap;overflow:hidden;text-overflow:ellipsis}
    .open{font-size:13px;text-decoration:none}
    iframe{display:block;width:calc(var(--w) * 1px);height:calc(var(--h) * 1px);border:0;background:#fff}
    .hidden{display:none}
  </style>
</head>
<body>
  <div class="bar">
    <input id="q" placeholder="Filter..." />
    <div class="count"><span id="shown"></span>/<span id="total"></span></div>
  </div>
  <div class="grid" id="grid">
{%- for item in items %}
    <div class="card" data-label="{{ item.label }}" style="--w:{{ item.frame_width }}; --h:{{ item.frame_height }}">
      <div class="meta">
        <div class="label" title="{{ item.label }}">{{ item.label }}</div>
        <a class="open" href="{{ item.href }}" target="_blank" rel="noopener">open</a>
      </div>
      <div class="stage">
        <iframe src="{{ item.href }}" width="{{ item.frame_width }}" height="{{ item.frame_height }}" loading="lazy"></iframe>
      </div>
    </div>
{%- endfor %}
  </div>
  <script>
    const q = document.getElementById('q');
    const cards = Array.from(document.querySelectorAll('.card'));
    const shown = document.getElementById('shown');
    const total = document.getElementById('total');
    total.textContent = cards.length;
    function update(){
      const v = (q.value || '').trim().toLowerCase();
      let visible = 0;
      for(const c of cards){
        const label = (c.getAttribute('data-label') || '').toLowerCase();
        const ok = !v || label.includes(v);
        c.classList.toggle('hidden', !ok);
        if(ok) visible++;
      }
      shown.textContent = visible;
    }
    q.addEventListener('input', update);
    update();
  </script>
</body>
</html>
"""

_env = Environment(autoescape=True, keep_trailing_newline=True)


class PreviewItem(BaseModel):
    """One banner card on the preview page."""

    model_config = ConfigDict(frozen=True)

    href: str  # relative to the output root, "/"-separated
    label: str
    width: int | None = None
    height: int | None = None

    @property
    def frame_width(self) -> int:
        return self.width if self.width is not None else FALLBACK_WIDTH

    @property
    def frame_height(self) -> int:
        return self.height if self.height is not None else FALLBACK_HEIGHT


def preview_item(source_root: Path, index_file: Path) -> PreviewItem:
    href = index_file.relative_to(source_root).as_posix()
    size = index_file.parent.name
    match = _SIZE_DIR.match(size)
    if match is None:
        return PreviewItem(href=href, label=size)
    width, height = int(match.group(1)), int(match.group(2))
    return PreviewItem(href=href, label=f"{width}x{height}", width=width, height=height)


def collect_items(source_root: Path) -> list[PreviewItem]:
    """Every banner below ``source_root``, smallest first."""
    source_root = Path(source_root)
    items = [
        preview_item(source_root, folder / ENTRY_MARKER)
        for folder in find_marked_dirs(source_root, ENTRY_MARKER)
    ]
    # Unsized folders sort last.
    big = float("inf")
    items.sort(key=lambda i: (
        i.width if i.width is not None else big,
        i.height if i.height is not None else big,
        i.label,
    ))
    return items


def build_preview_html(items: list[PreviewItem]) -> str:
    return _env.from_string(_PAGE).render(items=items)


def generate_preview(source_root: Path, port: int = 8080) -> tuple[Path, str]:
    """Write ``_preview.html`` at ``source_root``.

    Returns the written path and the local URL it is served under.
    """
    source_root = Path(source_root)
    source_root.mkdir(parents=True, exist_ok=True)
    items = collect_items(source_root)

    out_path = source_root / PREVIEW_FILENAME
    out_path.write_text(build_preview_html(items), encoding="utf-8")
    url = f"http://127.0.0.1:{port}/{PREVIEW_FILENAME}"
    logger.info("Preview page updated: %s (%d banner(s))", out_path, len(items))
    return out_path, url

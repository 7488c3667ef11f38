"""Read and write the ``.gen-state.json`` record kept in each artifact."""

from __future__ import annotations

import logging
from pathlib import Path

from pydantic import ValidationError

from bannerforge.models.state import GenerationState

logger = logging.getLogger(__name__)

STATE_FILENAME = ".gen-state.json"


def state_path(artifact_dir: Path) -> Path:
    return Path(artifact_dir) / STATE_FILENAME


def read_state(artifact_dir: Path) -> GenerationState | None:
    """Load the persisted state, or None if there is none.

    A corrupt record is reported and treated as absent, which makes the
    artifact stale so the next render rewrites it.
    """
    path = state_path(artifact_dir)
    if not path.exists():
        return None
    try:
        return GenerationState.model_validate_json(path.read_bytes())
    except ValidationError as exc:
        logger.warning(
            "Ignoring unreadable generation state at %s (%d error(s))",
            path,
            exc.error_count(),
        )
        return None


def write_state(artifact_dir: Path, state: GenerationState) -> Path:
    path = state_path(artifact_dir)
    path.write_text(state.model_dump_json(indent=2), encoding="utf-8")
    return path

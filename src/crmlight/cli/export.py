"""Export command: write the packaged seed data to a file."""

import logging
from pathlib import Path

from ..repositories import default_seed_text
from .output import error, success

logger = logging.getLogger(__name__)


def run_export_seed(path: Path) -> int:
    """
    Write the packaged seed YAML to path, as a starting point for --seed-file.

    Returns:
        Exit code (0 = success, 1 = file exists or cannot be written)
    """
    if path.exists():
        error(f"File exists: {path}")
        return 1
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(default_seed_text(), encoding="utf-8")
    except OSError as e:
        logger.error("Seed export failed: %s", e)
        error(f"Cannot write {path}: {e}")
        return 1
    success(f"Seed data written to {path}")
    return 0

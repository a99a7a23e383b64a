"""Loading seed data from YAML."""

from __future__ import annotations

import importlib.resources
import logging
from datetime import date
from pathlib import Path

import yaml
from pydantic import ValidationError

from ..models import SeedData

logger = logging.getLogger(__name__)

SEED_PACKAGE = "crmlight.data"
SEED_RESOURCE = "seed.yaml"


class SeedError(Exception):
    """Seed file could not be read or is invalid."""

    pass


def default_seed_text() -> str:
    """Return the packaged demo seed as YAML text."""
    return importlib.resources.files(SEED_PACKAGE).joinpath(SEED_RESOURCE).read_text(
        encoding="utf-8"
    )


def parse_seed(text: str, today: date | None = None) -> SeedData:
    """
    Parse YAML seed text.

    Args:
        text: YAML document with one list per table
        today: Reference date for relative day offsets (default: today)

    Raises:
        SeedError: If the YAML is malformed or does not match the models
    """
    try:
        data = yaml.safe_load(text) or {}
    except yaml.YAMLError as e:
        raise SeedError(f"Invalid seed YAML: {e}") from e

    if not isinstance(data, dict):
        raise SeedError("Seed YAML must be a mapping of table name to rows")

    try:
        return SeedData.model_validate(data, context={"today": today or date.today()})
    except ValidationError as e:
        raise SeedError(f"Invalid seed data: {e}") from e


def load_seed(path: Path | None = None, today: date | None = None) -> SeedData:
    """Load seed data from a file, or the packaged demo data when path is None."""
    if path is None:
        logger.debug("Loading packaged seed data")
        return parse_seed(default_seed_text(), today)

    logger.debug("Loading seed data from %s", path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise SeedError(f"Cannot read seed file {path}: {e}") from e
    return parse_seed(text, today)

"""Repository layer for data access."""

from .memory import MemoryRepository, Table
from .seed import SeedError, default_seed_text, load_seed, parse_seed

__all__ = [
    "MemoryRepository",
    "SeedError",
    "Table",
    "default_seed_text",
    "load_seed",
    "parse_seed",
]

"""Utilities for date handling."""

from datetime import date


def today() -> date:
    """Get the current local date."""
    return date.today()

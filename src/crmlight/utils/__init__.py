"""Utility functions."""

from .datetime import today
from .formatting import format_amount, format_metric, metric_title

__all__ = [
    "format_amount",
    "format_metric",
    "metric_title",
    "today",
]

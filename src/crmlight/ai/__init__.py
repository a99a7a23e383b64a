"""AI report generation."""

from .client import (
    ReportClient,
    ReportClientAuthError,
    ReportClientError,
    ReportRequest,
    build_prompt,
)

__all__ = [
    "ReportClient",
    "ReportClientAuthError",
    "ReportClientError",
    "ReportRequest",
    "build_prompt",
]

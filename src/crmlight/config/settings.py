"""Application settings."""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings

from ..ai.client import DEFAULT_BASE_URL, DEFAULT_MODEL


class Settings(BaseSettings):
    """Application settings, read from CRMLIGHT_* environment variables."""

    seed_file: Path | None = Field(
        default=None,
        description="YAML seed file (default: packaged demo data)",
    )

    verbose: int = Field(
        default=0,
        description="Verbosity level (0=off, 1=INFO, 2+=DEBUG)",
    )

    log_file: Path | None = Field(
        default=None,
        description="Optional path to write logs to file",
    )

    ai_api_key: str | None = Field(
        default=None,
        description="API key for the report generation service",
    )

    ai_model: str = Field(default=DEFAULT_MODEL, description="Report model name")

    ai_base_url: str = Field(default=DEFAULT_BASE_URL, description="Report API base URL")

    ai_timeout: float = Field(default=30.0, gt=0, description="Report request timeout (s)")

    report_agent_name: str = Field(
        default="Private Detective",
        description="AI agent whose prompt drives contact reports",
    )

    report_max_chars: int = Field(default=2000, gt=0)

    report_max_tokens: int = Field(default=500, gt=0)

    model_config = {
        "env_prefix": "CRMLIGHT_",
    }

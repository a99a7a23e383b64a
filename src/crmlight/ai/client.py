"""HTTP client for AI-generated contact reports."""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING, Any

import httpx
from pydantic import BaseModel, Field

if TYPE_CHECKING:
    from ..config import Settings

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"
DEFAULT_MODEL = "gemini-1.5-flash"


class ReportClientError(Exception):
    """Base exception for report client errors."""

    pass


class ReportClientAuthError(ReportClientError):
    """No API key, or the key was rejected."""

    pass


class ReportRequest(BaseModel):
    """Subject data sent to the model."""

    contact_name: str = Field(..., description="Full name of the contact")
    contact_role: str = Field(..., description="Job title of the contact")
    company_name: str = Field(..., description="Company the contact works for")
    agent_prompt: str = Field(..., description="System prompt defining the AI agent")


def build_prompt(request: ReportRequest) -> str:
    """Combine the agent prompt with the subject data."""
    return (
        "You are this AI agent:\n"
        "---\n"
        f"{request.agent_prompt.strip()}\n"
        "---\n\n"
        "Now write the report for the following subject:\n"
        f"- **Contact name:** {request.contact_name}\n"
        f"- **Job title:** {request.contact_role}\n"
        f"- **Company:** {request.company_name}\n"
    )


class ReportClient:
    """Thin wrapper around a generative-language REST API.

    Sends one ``generateContent`` request per report and returns the text
    of the first candidate.
    """

    def __init__(
        self,
        api_key: str | None,
        model: str = DEFAULT_MODEL,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 30.0,
        max_output_tokens: int = 500,
    ) -> None:
        """Initialize the client.

        Args:
            api_key: API key; requests fail with ReportClientAuthError when unset
            model: Model name
            base_url: API base URL including the version segment
            timeout: Request timeout in seconds
            max_output_tokens: Output token cap sent with each request
        """
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.max_output_tokens = max_output_tokens
        self._client = httpx.Client(
            headers={"Content-Type": "application/json"},
            timeout=timeout,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> ReportClient:
        return cls(
            api_key=settings.ai_api_key,
            model=settings.ai_model,
            base_url=settings.ai_base_url,
            timeout=settings.ai_timeout,
            max_output_tokens=settings.report_max_tokens,
        )

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/models/{self.model}:generateContent"

    def close(self) -> None:
        """Close the HTTP client."""
        self._client.close()

    def __enter__(self) -> ReportClient:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def generate(self, request: ReportRequest) -> str:
        """Generate a report.

        Raises:
            ReportClientAuthError: No API key, or the key was rejected
            ReportClientError: Transport failure, HTTP error, bad or empty response
        """
        if not self.api_key:
            raise ReportClientAuthError(
                "No AI API key configured. Set CRMLIGHT_AI_API_KEY to enable reports."
            )

        payload = {
            "contents": [{"role": "user", "parts": [{"text": build_prompt(request)}]}],
            "generationConfig": {"maxOutputTokens": self.max_output_tokens},
        }
        logger.debug("Report request for %s (model=%s)", request.contact_name, self.model)

        start_time = time.monotonic()
        try:
            response = self._client.post(self.endpoint, params={"key": self.api_key}, json=payload)
        except httpx.RequestError as e:
            elapsed_ms = (time.monotonic() - start_time) * 1000
            logger.error("Report request failed after %.0fms: %s", elapsed_ms, e)
            raise ReportClientError(f"Request failed: {e}") from e

        elapsed_ms = (time.monotonic() - start_time) * 1000

        if response.status_code in (401, 403):
            logger.error("Report request: HTTP %d (%.0fms)", response.status_code, elapsed_ms)
            raise ReportClientAuthError("The AI service rejected the API key.")
        if response.status_code == 429:
            logger.error("Report request: 429 Rate Limited (%.0fms)", elapsed_ms)
            raise ReportClientError("AI service rate limit exceeded. Try again later.")
        if response.status_code >= 400:
            logger.error("Report request: HTTP %d (%.0fms)", response.status_code, elapsed_ms)
            raise ReportClientError(f"HTTP {response.status_code}: {response.text}")

        try:
            result = response.json()
        except ValueError as e:
            logger.error("Report request: Invalid JSON response (%.0fms)", elapsed_ms)
            raise ReportClientError(f"Invalid JSON response: {e}") from e

        text = _extract_text(result)
        if not text:
            raise ReportClientError("The AI response did not contain any text.")

        logger.info("Report generated for %s (%.0fms)", request.contact_name, elapsed_ms)
        return text


def _extract_text(result: dict[str, Any]) -> str:
    """Join the text parts of the first candidate."""
    candidates = result.get("candidates") or []
    if not candidates:
        return ""
    parts = (candidates[0].get("content") or {}).get("parts") or []
    return "".join(part.get("text", "") for part in parts).strip()

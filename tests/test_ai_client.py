"""Tests for the AI report client."""

from unittest.mock import MagicMock, patch

import httpx
import pytest

from crmlight.ai import (
    ReportClient,
    ReportClientAuthError,
    ReportClientError,
    ReportRequest,
    build_prompt,
)
from crmlight.config import Settings


@pytest.fixture
def request_data() -> ReportRequest:
    return ReportRequest(
        contact_name="Lucía Martín",
        contact_role="Purchasing Director",
        company_name="Example Company 1",
        agent_prompt="You are a detective.\n",
    )


@pytest.fixture
def client():
    """Create a test client."""
    client = ReportClient("test-key", model="test-model", base_url="https://ai.test/v1/")
    yield client
    client.close()


def make_response(status_code: int = 200, json_data=None, text: str = "") -> MagicMock:
    response = MagicMock()
    response.status_code = status_code
    response.text = text
    response.json.return_value = json_data
    return response


def candidate(text: str) -> dict:
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


class TestBuildPrompt:
    def test_contains_agent_and_subject(self, request_data: ReportRequest):
        prompt = build_prompt(request_data)

        assert "You are a detective." in prompt
        assert "- **Contact name:** Lucía Martín" in prompt
        assert "- **Job title:** Purchasing Director" in prompt
        assert "- **Company:** Example Company 1" in prompt


class TestReportClientInit:
    """Tests for ReportClient initialization."""

    def test_endpoint(self, client: ReportClient):
        assert client.endpoint == "https://ai.test/v1/models/test-model:generateContent"

    def test_from_settings(self):
        settings = Settings(
            ai_api_key="k", ai_model="m", ai_base_url="https://x.test", report_max_tokens=42
        )
        client = ReportClient.from_settings(settings)
        assert client.api_key == "k"
        assert client.model == "m"
        assert client.max_output_tokens == 42
        client.close()

    def test_context_manager(self):
        """Client works as context manager."""
        with ReportClient("key") as client:
            assert client.api_key == "key"


class TestReportClientGenerate:
    """Tests for ReportClient.generate."""

    def test_success(self, client: ReportClient, request_data: ReportRequest):
        response = make_response(json_data=candidate("  ## Report\nAll good.  "))

        with patch.object(client._client, "post", return_value=response) as mock_post:
            text = client.generate(request_data)

        assert text == "## Report\nAll good."
        call = mock_post.call_args
        assert call.args[0] == client.endpoint
        assert call.kwargs["params"] == {"key": "test-key"}
        payload = call.kwargs["json"]
        assert payload["generationConfig"] == {"maxOutputTokens": 500}
        assert "Lucía Martín" in payload["contents"][0]["parts"][0]["text"]

    def test_joins_text_parts(self, client: ReportClient, request_data: ReportRequest):
        data = {"candidates": [{"content": {"parts": [{"text": "A"}, {"text": "B"}]}}]}
        with patch.object(client._client, "post", return_value=make_response(json_data=data)):
            assert client.generate(request_data) == "AB"

    def test_no_api_key(self, request_data: ReportRequest):
        with ReportClient(None) as client, patch.object(client._client, "post") as mock_post:
            with pytest.raises(ReportClientAuthError, match="CRMLIGHT_AI_API_KEY"):
                client.generate(request_data)
            mock_post.assert_not_called()

    @pytest.mark.parametrize("status_code", [401, 403])
    def test_rejected_key(self, client, request_data, status_code):
        with patch.object(client._client, "post", return_value=make_response(status_code)):
            with pytest.raises(ReportClientAuthError):
                client.generate(request_data)

    def test_rate_limited(self, client: ReportClient, request_data: ReportRequest):
        with patch.object(client._client, "post", return_value=make_response(429)):
            with pytest.raises(ReportClientError, match="rate limit"):
                client.generate(request_data)

    def test_server_error(self, client: ReportClient, request_data: ReportRequest):
        response = make_response(500, text="Internal error")
        with patch.object(client._client, "post", return_value=response):
            with pytest.raises(ReportClientError, match="HTTP 500: Internal error"):
                client.generate(request_data)

    def test_transport_error(self, client: ReportClient, request_data: ReportRequest):
        error = httpx.ConnectError("connection refused")
        with patch.object(client._client, "post", side_effect=error):
            with pytest.raises(ReportClientError, match="Request failed"):
                client.generate(request_data)

    def test_invalid_json(self, client: ReportClient, request_data: ReportRequest):
        response = make_response()
        response.json.side_effect = ValueError("Expecting value")
        with patch.object(client._client, "post", return_value=response):
            with pytest.raises(ReportClientError, match="Invalid JSON"):
                client.generate(request_data)

    @pytest.mark.parametrize(
        "data",
        [{}, {"candidates": []}, {"candidates": [{"content": {"parts": []}}]}, candidate("  ")],
    )
    def test_empty_text(self, client, request_data, data):
        with patch.object(client._client, "post", return_value=make_response(json_data=data)):
            with pytest.raises(ReportClientError, match="did not contain any text"):
                client.generate(request_data)

"""Tests for settings, logging setup and display formatting."""

import logging
from pathlib import Path

import pytest
from pydantic import ValidationError

from crmlight import __version__
from crmlight.config import Settings
from crmlight.logging import setup_logging
from crmlight.utils import format_amount, format_metric, metric_title


@pytest.fixture
def clean_env(monkeypatch):
    for name in (
        "CRMLIGHT_AI_API_KEY",
        "CRMLIGHT_AI_MODEL",
        "CRMLIGHT_SEED_FILE",
        "CRMLIGHT_REPORT_MAX_CHARS",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def crmlight_logger():
    logger = logging.getLogger("crmlight")
    handlers, level = list(logger.handlers), logger.level
    yield logger
    for handler in logger.handlers[len(handlers):]:
        handler.close()
    logger.handlers = handlers
    logger.setLevel(level)


@pytest.fixture
def httpx_logger():
    logger = logging.getLogger("httpx")
    handlers, level = list(logger.handlers), logger.level
    yield logger
    for handler in logger.handlers[len(handlers):]:
        handler.close()
    logger.handlers = handlers
    logger.setLevel(level)

class TestSettings:
    def test_defaults(self, clean_env):
        settings = Settings()
        assert settings.seed_file is None
        assert settings.ai_api_key is None
        assert settings.report_agent_name == "Private Detective"
        assert settings.report_max_chars == 2000
        assert settings.report_max_tokens == 500

    def test_environment(self, clean_env, monkeypatch):
        monkeypatch.setenv("CRMLIGHT_AI_API_KEY", "secret")
        monkeypatch.setenv("CRMLIGHT_SEED_FILE", "/tmp/seed.yaml")
        monkeypatch.setenv("CRMLIGHT_REPORT_MAX_CHARS", "500")

        settings = Settings()

        assert settings.ai_api_key == "secret"
        assert settings.seed_file == Path("/tmp/seed.yaml")
        assert settings.report_max_chars == 500

    def test_invalid_timeout(self, clean_env):
        with pytest.raises(ValidationError):
            Settings(ai_timeout=0)


class TestSetupLogging:
    def test_quiet_by_default(self, crmlight_logger):
        before = len(crmlight_logger.handlers)
        setup_logging(0, None)
        assert len(crmlight_logger.handlers) == before

    def test_log_file(self, crmlight_logger, httpx_logger, tmp_path: Path):
        log_file = tmp_path / "logs" / "crmlight.log"

        setup_logging(2, log_file)
        logging.getLogger("crmlight.services").debug("hello from a service")
        for handler in crmlight_logger.handlers:
            handler.flush()

        assert crmlight_logger.level == logging.DEBUG
        content = log_file.read_text()
        assert f"crmlight {__version__} starting" in content
        assert "hello from a service" in content

    def test_debug_traces_http_client(self, crmlight_logger, httpx_logger, tmp_path: Path):
        log_file = tmp_path / "crmlight.log"

        setup_logging(2, log_file)
        httpx_logger.info("HTTP Request: POST https://ai.example.com/v1/chat")
        for handler in httpx_logger.handlers:
            handler.flush()

        assert "HTTP Request: POST" in log_file.read_text()

    def test_info_leaves_http_client_alone(self, crmlight_logger, httpx_logger, tmp_path: Path):
        before = list(httpx_logger.handlers)

        setup_logging(1, tmp_path / "crmlight.log")

        assert httpx_logger.handlers == before


class TestFormatting:
    def test_amount(self):
        assert format_amount(39000) == "39,000.00 €"

    @pytest.mark.parametrize(
        "name, value, text",
        [
            ("conversion_rate", 2 / 3, "66.7%"),
            ("portfolio_value", 1500.0, "1,500.00 €"),
            ("activities_per_opportunity", 14 / 11, "1.27"),
            ("total_users", 4, "4"),
        ],
    )
    def test_metric(self, name, value, text):
        assert format_metric(name, value) == text

    def test_title(self):
        assert metric_title("new_customer_revenue_rate") == "New customer revenue rate"

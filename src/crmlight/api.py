"""Data API facade wiring one repository to every service."""

from __future__ import annotations

import logging

from .ai import ReportClient
from .config import Settings
from .repositories import MemoryRepository, load_seed
from .services import (
    AccountService,
    ActivityService,
    AIAgentService,
    ContactService,
    DashboardService,
    OpportunityService,
    UserService,
    VisibilityService,
)
from .services.contact_service import DEFAULT_REPORT_AGENT, DEFAULT_REPORT_MAX_CHARS

logger = logging.getLogger(__name__)


class DataAPI:
    """
    Single entry point to the CRM data.

    All services share one MemoryRepository, so a change made through one
    service is immediately visible to the others.
    """

    def __init__(
        self,
        repository: MemoryRepository | None = None,
        report_client: ReportClient | None = None,
        report_agent_name: str = DEFAULT_REPORT_AGENT,
        report_max_chars: int = DEFAULT_REPORT_MAX_CHARS,
    ) -> None:
        self.repository = repository or MemoryRepository(load_seed())
        self.report_client = report_client

        self.visibility = VisibilityService(self.repository)
        self.users = UserService(self.repository)
        self.accounts = AccountService(self.repository)
        self.contacts = ContactService(
            self.repository,
            report_client=report_client,
            report_agent_name=report_agent_name,
            report_max_chars=report_max_chars,
        )
        self.opportunities = OpportunityService(self.repository, self.visibility)
        self.activities = ActivityService(self.repository, self.visibility, self.opportunities)
        self.ai_agents = AIAgentService(self.repository)
        self.dashboard = DashboardService(self.repository, self.visibility, self.activities)

    @classmethod
    def from_settings(cls, settings: Settings) -> DataAPI:
        """Build the API from the configured seed file and report settings."""
        repository = MemoryRepository(load_seed(settings.seed_file))
        logger.info(
            "Data loaded from %s", settings.seed_file or "packaged seed"
        )
        return cls(
            repository,
            report_client=ReportClient.from_settings(settings),
            report_agent_name=settings.report_agent_name,
            report_max_chars=settings.report_max_chars,
        )

    def reset(self) -> None:
        """Discard every change and restore the seed data."""
        self.repository.reset()
        logger.info("Data reset to seed")

    def close(self) -> None:
        if self.report_client is not None:
            self.report_client.close()

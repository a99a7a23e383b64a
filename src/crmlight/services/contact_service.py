"""Service for contacts and their AI reports."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from ..ai import ReportClientError, ReportRequest
from ..models import Contact, ContactView
from ..repositories import MemoryRepository
from .errors import (
    DuplicateError,
    IntegrityError,
    NotFoundError,
    ReportGenerationError,
    validation_errors,
)

if TYPE_CHECKING:
    from ..ai import ReportClient

logger = logging.getLogger(__name__)

DEFAULT_REPORT_AGENT = "Private Detective"
DEFAULT_REPORT_MAX_CHARS = 2000


class ContactService:
    """Service for contact CRUD and report generation."""

    def __init__(
        self,
        repository: MemoryRepository,
        report_client: ReportClient | None = None,
        report_agent_name: str = DEFAULT_REPORT_AGENT,
        report_max_chars: int = DEFAULT_REPORT_MAX_CHARS,
    ) -> None:
        self.repository = repository
        self._report_client = report_client
        self._report_agent_name = report_agent_name
        self._report_max_chars = report_max_chars

    def list_contacts(self) -> list[ContactView]:
        """All contacts with the name of their account."""
        views = []
        for contact in self.repository.contacts:
            account = self.repository.accounts.get(contact.account_id)
            views.append(
                ContactView(
                    **contact.model_dump(),
                    account_name=account.name if account else None,
                )
            )
        return views

    def get_contact(self, contact_id: str) -> Contact | None:
        return self.repository.contacts.get(contact_id)

    def create_contact(
        self,
        first_name: str,
        email: str,
        account_id: str | None = None,
        **fields: Any,
    ) -> Contact:
        """Create a contact. Email must be unique, ignoring case."""
        self._check_unique_email(email)
        self._check_account(account_id)
        with validation_errors():
            contact = self.repository.contacts.insert(
                first_name=first_name, email=email, account_id=account_id, **fields
            )
        logger.info("Contact created: %s (%s)", contact.full_name, contact.id)
        return contact

    def update_contact(self, contact_id: str, **changes: Any) -> Contact:
        """Update a contact. An empty account_id detaches it from its account."""
        if not self.repository.contacts.exists(contact_id):
            raise NotFoundError(f'Contact "{contact_id}" not found.')
        if changes.get("email"):
            self._check_unique_email(changes["email"], exclude_id=contact_id)
        if "account_id" in changes:
            changes["account_id"] = changes["account_id"] or None
            self._check_account(changes["account_id"])
        with validation_errors():
            contact = self.repository.contacts.update(contact_id, **changes)
        logger.info("Contact updated: %s", contact_id)
        return contact

    def delete_contact(self, contact_id: str) -> None:
        """Delete a contact and unlink it from opportunities."""
        if not self.repository.delete_contact(contact_id):
            raise NotFoundError(f'Contact "{contact_id}" not found.')
        logger.info("Contact deleted: %s", contact_id)

    def generate_report(self, contact_id: str) -> str:
        """
        Generate and store an AI background report for a contact.

        The prompt comes from the configured AI agent; the report is cut to
        the configured maximum length before it is saved.

        Raises:
            NotFoundError: Contact or AI agent missing
            ReportGenerationError: The AI service failed or is not configured
        """
        contact = self.repository.contacts.get(contact_id)
        if contact is None:
            raise NotFoundError(f'Contact "{contact_id}" not found.')

        agent = self.repository.ai_agents.find(lambda a: a.name == self._report_agent_name)
        if agent is None:
            raise NotFoundError(
                f'AI agent "{self._report_agent_name}" not found. '
                "Create it in the AI agents settings."
            )
        if self._report_client is None:
            raise ReportGenerationError("AI reports are not configured.")

        account = self.repository.accounts.get(contact.account_id)
        request = ReportRequest(
            contact_name=contact.full_name,
            contact_role=contact.job_title or "Not specified",
            company_name=account.name if account else "No company",
            agent_prompt=agent.prompt,
        )

        try:
            text = self._report_client.generate(request)
        except ReportClientError as e:
            logger.error("Report generation failed for contact %s: %s", contact_id, e)
            raise ReportGenerationError(f"AI service error: {e}") from e

        report = text[: self._report_max_chars]
        self.repository.contacts.update(contact_id, report=report)
        logger.info("Report stored for contact %s (%d chars)", contact_id, len(report))
        return report

    # --- Private Methods ---

    def _check_unique_email(self, email: str, exclude_id: str | None = None) -> None:
        key = email.lower()
        if self.repository.contacts.any(lambda c: c.email.lower() == key and c.id != exclude_id):
            raise DuplicateError(f'A contact with email "{email}" already exists.')

    def _check_account(self, account_id: str | None) -> None:
        if account_id and not self.repository.accounts.exists(account_id):
            raise IntegrityError(f'Account "{account_id}" does not exist.')

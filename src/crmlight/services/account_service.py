"""Service for accounts and agent portfolios."""

from __future__ import annotations

import logging
from typing import Any

from ..models import Account, Opportunity
from ..repositories import MemoryRepository
from .errors import DuplicateError, IntegrityError, NotFoundError, validation_errors

logger = logging.getLogger(__name__)


class AccountService:
    """Service for account CRUD and the agent ↔ account portfolio."""

    def __init__(self, repository: MemoryRepository) -> None:
        self.repository = repository

    def list_accounts(self) -> list[Account]:
        return self.repository.accounts.all()

    def get_account(self, account_id: str) -> Account | None:
        return self.repository.accounts.get(account_id)

    def create_account(self, name: str, tax_id: str, email: str, **fields: Any) -> Account:
        """
        Create an account.

        Tax id (CIF/NIF) and email must be unique, ignoring case.
        """
        self._check_unique(tax_id=tax_id, email=email)
        with validation_errors():
            account = self.repository.accounts.insert(
                name=name, tax_id=tax_id, email=email, **fields
            )
        logger.info("Account created: %s (%s)", account.name, account.id)
        return account

    def update_account(self, account_id: str, **changes: Any) -> Account:
        """Update an account, re-checking uniqueness against the others."""
        if not self.repository.accounts.exists(account_id):
            raise NotFoundError(f'Account "{account_id}" not found.')
        self._check_unique(
            tax_id=changes.get("tax_id"),
            email=changes.get("email"),
            exclude_id=account_id,
        )
        with validation_errors():
            account = self.repository.accounts.update(account_id, **changes)
        logger.info("Account updated: %s", account_id)
        return account

    def delete_account(self, account_id: str) -> None:
        """Delete an account along with its portfolio links and opportunities.

        Contacts of the account are kept but detached.
        """
        if not self.repository.delete_account(account_id):
            raise NotFoundError(f'Account "{account_id}" not found.')
        logger.info("Account deleted: %s", account_id)

    # --- Portfolio ---

    def get_portfolio(self, agent_id: str) -> list[Account]:
        """Accounts in an agent's portfolio."""
        links = self.repository.portfolios.filter(lambda p: p.agent_id == agent_id)
        account_ids = {p.account_id for p in links}
        return self.repository.accounts.filter(lambda a: a.id in account_ids)

    def assign_account(self, agent_id: str, account_id: str) -> None:
        """Add an account to an agent's portfolio. Idempotent."""
        if not self.repository.agents.exists(agent_id):
            raise IntegrityError(f'Agent "{agent_id}" does not exist.')
        if not self.repository.accounts.exists(account_id):
            raise IntegrityError(f'Account "{account_id}" does not exist.')
        if self.repository.portfolios.any(
            lambda p: p.agent_id == agent_id and p.account_id == account_id
        ):
            return
        self.repository.portfolios.insert(agent_id=agent_id, account_id=account_id)
        logger.info("Account %s assigned to agent %s", account_id, agent_id)

    def unassign_account(self, agent_id: str, account_id: str) -> bool:
        """Remove an account from an agent's portfolio.

        Returns:
            False if the account was not in the portfolio.
        """
        removed = self.repository.portfolios.delete_where(
            lambda p: p.agent_id == agent_id and p.account_id == account_id
        )
        if removed:
            logger.info("Account %s removed from agent %s", account_id, agent_id)
        return bool(removed)

    def list_opportunities_for_agent(self, agent_id: str, account_id: str) -> list[Opportunity]:
        """Opportunities an agent owns with a given account."""
        return self.repository.opportunities.filter(
            lambda o: o.agent_id == agent_id and o.account_id == account_id
        )

    # --- Private Methods ---

    def _check_unique(
        self,
        tax_id: str | None = None,
        email: str | None = None,
        exclude_id: str | None = None,
    ) -> None:
        accounts = self.repository.accounts
        if tax_id and accounts.any(
            lambda a: a.tax_id.lower() == tax_id.lower() and a.id != exclude_id
        ):
            raise DuplicateError(f'An account with tax id "{tax_id}" already exists.')
        if email and accounts.any(
            lambda a: a.email.lower() == email.lower() and a.id != exclude_id
        ):
            raise DuplicateError(f'An account with email "{email}" already exists.')

"""In-memory repository simulating a small relational database."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from typing import Any, Generic, TypeVar

from pydantic import BaseModel

from ..models import (
    Account,
    Activity,
    Agent,
    AIAgent,
    Contact,
    Coordinator,
    Opportunity,
    Portfolio,
    SeedData,
    User,
)

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)


class Table(Generic[T]):
    """
    An ordered collection of rows of one model type.

    Ids are strings holding auto-incremented integers. The counter starts at
    the highest numeric id loaded and ids are never reused after deletion.
    """

    def __init__(self, name: str, model: type[T], rows: list[T] | None = None) -> None:
        self.name = name
        self.model = model
        self._rows: list[T] = []
        self._last_id = 0
        for row in rows or []:
            self._append(row)

    def __len__(self) -> int:
        return len(self._rows)

    def __iter__(self) -> Iterator[T]:
        return iter(list(self._rows))

    def all(self) -> list[T]:
        """Return all rows in insertion order."""
        return list(self._rows)

    def get(self, row_id: str | None) -> T | None:
        """Return the row with this id, or None."""
        if row_id is None:
            return None
        return next((row for row in self._rows if row.id == row_id), None)  # type: ignore[attr-defined]

    def exists(self, row_id: str | None) -> bool:
        return self.get(row_id) is not None

    def find(self, predicate: Callable[[T], bool]) -> T | None:
        """Return the first row matching predicate."""
        return next((row for row in self._rows if predicate(row)), None)

    def filter(self, predicate: Callable[[T], bool]) -> list[T]:
        """Return all rows matching predicate."""
        return [row for row in self._rows if predicate(row)]

    def any(self, predicate: Callable[[T], bool]) -> bool:
        return any(predicate(row) for row in self._rows)

    def insert(self, **fields: Any) -> T:
        """Validate fields into a new row with the next id and store it."""
        row = self.model.model_validate({**fields, "id": str(self._last_id + 1)})
        self._append(row)
        logger.debug("%s: inserted id=%s", self.name, row.id)  # type: ignore[attr-defined]
        return row

    def update(self, row_id: str, **changes: Any) -> T:
        """Replace a row with a validated copy carrying the changes.

        Raises:
            KeyError: If the row does not exist.
        """
        index = self._index(row_id)
        current = self._rows[index]
        updated = self.model.model_validate({**current.model_dump(), **changes, "id": row_id})
        self._rows[index] = updated
        return updated

    def delete(self, row_id: str) -> bool:
        """Remove a row. Returns False if it did not exist."""
        try:
            index = self._index(row_id)
        except KeyError:
            return False
        del self._rows[index]
        logger.debug("%s: deleted id=%s", self.name, row_id)
        return True

    def delete_where(self, predicate: Callable[[T], bool]) -> list[T]:
        """Remove all rows matching predicate and return them."""
        removed = [row for row in self._rows if predicate(row)]
        if removed:
            self._rows = [row for row in self._rows if not predicate(row)]
            logger.debug("%s: deleted %d rows", self.name, len(removed))
        return removed

    def _index(self, row_id: str) -> int:
        for index, row in enumerate(self._rows):
            if row.id == row_id:  # type: ignore[attr-defined]
                return index
        raise KeyError(f"{self.name}: no row with id {row_id!r}")

    def _append(self, row: T) -> None:
        self._rows.append(row)
        row_id = row.id  # type: ignore[attr-defined]
        if row_id.isdigit():
            self._last_id = max(self._last_id, int(row_id))


class MemoryRepository:
    """
    Repository holding every CRM table in memory.

    Besides plain storage it applies the referential actions a relational
    schema would declare on its foreign keys:

    - account deleted: portfolios and opportunities cascade, contacts are
      detached (SET NULL)
    - agent deleted: portfolios and opportunities cascade
    - coordinator deleted: agents are detached (SET NULL)
    - opportunity deleted: activities cascade
    - contact deleted: removed from opportunity contact lists
    - user deleted: agent and coordinator rows cascade

    Business rules (uniqueness, roles, visibility) live in the services.
    """

    def __init__(self, seed: SeedData | None = None) -> None:
        self._seed = seed or SeedData()
        self.reset()

    @classmethod
    def from_seed(cls, seed: SeedData) -> MemoryRepository:
        return cls(seed)

    def reset(self) -> None:
        """Discard all changes and reload the seed data."""
        # Deep copy so mutations never leak back into the seed
        seed = self._seed.model_copy(deep=True)
        self.users: Table[User] = Table("users", User, seed.users)
        self.coordinators: Table[Coordinator] = Table(
            "coordinators", Coordinator, seed.coordinators
        )
        self.agents: Table[Agent] = Table("agents", Agent, seed.agents)
        self.accounts: Table[Account] = Table("accounts", Account, seed.accounts)
        self.contacts: Table[Contact] = Table("contacts", Contact, seed.contacts)
        self.portfolios: Table[Portfolio] = Table("portfolios", Portfolio, seed.portfolios)
        self.opportunities: Table[Opportunity] = Table(
            "opportunities", Opportunity, seed.opportunities
        )
        self.activities: Table[Activity] = Table("activities", Activity, seed.activities)
        self.ai_agents: Table[AIAgent] = Table("ai_agents", AIAgent, seed.ai_agents)
        logger.debug(
            "Repository loaded: %d users, %d accounts, %d opportunities, %d activities",
            len(self.users),
            len(self.accounts),
            len(self.opportunities),
            len(self.activities),
        )

    def snapshot(self) -> SeedData:
        """Return the current state as seed data."""
        return SeedData(
            users=self.users.all(),
            coordinators=self.coordinators.all(),
            agents=self.agents.all(),
            accounts=self.accounts.all(),
            contacts=self.contacts.all(),
            portfolios=self.portfolios.all(),
            opportunities=self.opportunities.all(),
            activities=self.activities.all(),
            ai_agents=self.ai_agents.all(),
        ).model_copy(deep=True)

    # --- Referential actions ---

    def delete_user(self, user_id: str) -> bool:
        """Delete a user and its role rows."""
        for agent in self.agents.filter(lambda a: a.user_id == user_id):
            self.delete_agent(agent.id)
        for coordinator in self.coordinators.filter(lambda c: c.user_id == user_id):
            self.delete_coordinator(coordinator.id)
        return self.users.delete(user_id)

    def delete_agent(self, agent_id: str) -> bool:
        """Delete an agent with its portfolio links and opportunities."""
        if not self.agents.exists(agent_id):
            return False
        self.portfolios.delete_where(lambda p: p.agent_id == agent_id)
        self._delete_opportunities_where(lambda o: o.agent_id == agent_id)
        return self.agents.delete(agent_id)

    def delete_coordinator(self, coordinator_id: str) -> bool:
        """Delete a coordinator, detaching its agents."""
        if not self.coordinators.exists(coordinator_id):
            return False
        for agent in self.agents.filter(lambda a: a.coordinator_id == coordinator_id):
            self.agents.update(agent.id, coordinator_id=None)
        return self.coordinators.delete(coordinator_id)

    def delete_account(self, account_id: str) -> bool:
        """Delete an account with its portfolio links and opportunities."""
        if not self.accounts.exists(account_id):
            return False
        self.portfolios.delete_where(lambda p: p.account_id == account_id)
        self._delete_opportunities_where(lambda o: o.account_id == account_id)
        for contact in self.contacts.filter(lambda c: c.account_id == account_id):
            self.contacts.update(contact.id, account_id=None)
        return self.accounts.delete(account_id)

    def delete_opportunity(self, opportunity_id: str) -> bool:
        """Delete an opportunity and its activities."""
        if not self.opportunities.exists(opportunity_id):
            return False
        self.activities.delete_where(lambda a: a.opportunity_id == opportunity_id)
        return self.opportunities.delete(opportunity_id)

    def delete_contact(self, contact_id: str) -> bool:
        """Delete a contact and unlink it from opportunities."""
        if not self.contacts.exists(contact_id):
            return False
        for opportunity in self.opportunities.filter(lambda o: contact_id in o.contact_ids):
            remaining = [cid for cid in opportunity.contact_ids if cid != contact_id]
            self.opportunities.update(opportunity.id, contact_ids=remaining)
        return self.contacts.delete(contact_id)

    def _delete_opportunities_where(self, predicate: Callable[[Opportunity], bool]) -> None:
        removed = self.opportunities.delete_where(predicate)
        removed_ids = {o.id for o in removed}
        if removed_ids:
            self.activities.delete_where(lambda a: a.opportunity_id in removed_ids)
            logger.debug("Cascade removed opportunities %s", sorted(removed_ids))

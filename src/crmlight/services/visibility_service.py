"""Service deriving what each user is allowed to see."""

from __future__ import annotations

import logging

from ..models import Opportunity, User
from ..repositories import MemoryRepository

logger = logging.getLogger(__name__)


class VisibilityService:
    """
    Role-based visibility of opportunities (and, through them, activities).

    - Administrators see everything.
    - Coordinators see the opportunities of the agents in their team.
    - Agents see their own opportunities.
    - A user holding both coordinator and agent roles sees the union.
    - Users without any role see nothing.

    Roles are always read from the role tables, never from flags carried by
    the user object passed in.
    """

    def __init__(self, repository: MemoryRepository) -> None:
        self.repository = repository

    def is_administrator(self, user: User) -> bool:
        stored = self.repository.users.get(user.id)
        return bool(stored and stored.is_administrator)

    def agent_id_for(self, user: User) -> str | None:
        agent = self.repository.agents.find(lambda a: a.user_id == user.id)
        return agent.id if agent else None

    def coordinator_id_for(self, user: User) -> str | None:
        coordinator = self.repository.coordinators.find(lambda c: c.user_id == user.id)
        return coordinator.id if coordinator else None

    def visible_agent_ids(self, user: User) -> set[str] | None:
        """
        Agent ids whose opportunities the user can see.

        Returns:
            None when the user can see everything, otherwise a (possibly
            empty) set of agent ids.
        """
        if self.is_administrator(user):
            return None

        agent_ids: set[str] = set()
        coordinator_id = self.coordinator_id_for(user)
        if coordinator_id is not None:
            agent_ids.update(
                a.id for a in self.repository.agents.filter(
                    lambda a: a.coordinator_id == coordinator_id
                )
            )
        agent_id = self.agent_id_for(user)
        if agent_id is not None:
            agent_ids.add(agent_id)
        return agent_ids

    def visible_opportunities(self, user: User) -> list[Opportunity]:
        """All opportunities the user is allowed to see."""
        agent_ids = self.visible_agent_ids(user)
        if agent_ids is None:
            return self.repository.opportunities.all()
        visible = self.repository.opportunities.filter(lambda o: o.agent_id in agent_ids)
        logger.debug("User %s sees %d opportunities", user.id, len(visible))
        return visible

    def can_see_opportunity(self, user: User, opportunity_id: str) -> bool:
        opportunity = self.repository.opportunities.get(opportunity_id)
        if opportunity is None:
            return False
        agent_ids = self.visible_agent_ids(user)
        return agent_ids is None or opportunity.agent_id in agent_ids

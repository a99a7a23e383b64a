"""Service for opportunities."""

from __future__ import annotations

import logging
from datetime import date
from typing import Any

from ..models import (
    ALLOWED_STATES,
    UNKNOWN,
    Opportunity,
    OpportunityPhase,
    OpportunityState,
    OpportunityView,
    User,
)
from ..repositories import MemoryRepository
from ..utils import today
from .errors import IntegrityError, NotFoundError, ValidationError, validation_errors
from .visibility_service import VisibilityService

logger = logging.getLogger(__name__)


class OpportunityService:
    """
    Service for opportunity CRUD.

    Phase and state must always form a combination allowed by
    ``ALLOWED_STATES``. Entering a closed state (won, lost, cancelled) stamps
    the closing date; reopening clears it.
    """

    def __init__(self, repository: MemoryRepository, visibility: VisibilityService) -> None:
        self.repository = repository
        self.visibility = visibility

    def list_for_user(self, user: User) -> list[OpportunityView]:
        """Opportunities visible to the user, with names resolved."""
        return [self.to_view(o) for o in self.visibility.visible_opportunities(user)]

    def get_opportunity(self, opportunity_id: str) -> Opportunity | None:
        return self.repository.opportunities.get(opportunity_id)

    def to_view(self, opportunity: Opportunity) -> OpportunityView:
        account = self.repository.accounts.get(opportunity.account_id)
        return OpportunityView(
            **opportunity.model_dump(),
            account_name=account.name if account else UNKNOWN,
            agent_name=self._agent_name(opportunity.agent_id),
        )

    @staticmethod
    def allowed_states(phase: OpportunityPhase | str) -> tuple[OpportunityState, ...]:
        """States an opportunity may hold in the given phase."""
        return ALLOWED_STATES[OpportunityPhase(phase)]

    def create_opportunity(
        self,
        account_id: str,
        agent_id: str,
        concept: str,
        due_on: date | str,
        amount: float = 0.0,
        phase: OpportunityPhase | str = OpportunityPhase.DETECTION,
        state: OpportunityState | str = OpportunityState.AWAITING_CLIENT,
        contact_ids: list[str] | None = None,
        description: str | None = None,
    ) -> Opportunity:
        """Create an opportunity dated today."""
        phase, state = self.check_phase_state(phase, state)
        self._check_references(account_id, agent_id, contact_ids or [])

        created_on = today()
        with validation_errors():
            opportunity = self.repository.opportunities.insert(
                account_id=account_id,
                agent_id=agent_id,
                contact_ids=contact_ids or [],
                concept=concept,
                description=description,
                amount=amount,
                phase=phase,
                state=state,
                created_on=created_on,
                due_on=due_on,
                closed_on=created_on if state.is_closed else None,
            )
        logger.info("Opportunity created: %s (%s)", opportunity.concept, opportunity.id)
        return opportunity

    def update_opportunity(self, opportunity_id: str, **changes: Any) -> Opportunity:
        """Update an opportunity, keeping phase/state and closing date consistent."""
        current = self.repository.opportunities.get(opportunity_id)
        if current is None:
            raise NotFoundError(f'Opportunity "{opportunity_id}" not found.')

        changes = {k: v for k, v in changes.items() if k not in ("id", "created_on")}
        if "phase" in changes or "state" in changes:
            phase, state = self.check_phase_state(
                changes.get("phase", current.phase),
                changes.get("state", current.state),
            )
            changes["phase"], changes["state"] = phase, state
            if state.is_closed and not (changes.get("closed_on") or current.closed_on):
                changes["closed_on"] = today()
            elif not state.is_closed:
                changes["closed_on"] = None

        self._check_references(
            changes.get("account_id"),
            changes.get("agent_id"),
            changes.get("contact_ids") or [],
        )

        with validation_errors():
            opportunity = self.repository.opportunities.update(opportunity_id, **changes)
        logger.info("Opportunity updated: %s", opportunity_id)
        return opportunity

    def delete_opportunity(self, opportunity_id: str) -> None:
        """Delete an opportunity and its activities."""
        if not self.repository.delete_opportunity(opportunity_id):
            raise NotFoundError(f'Opportunity "{opportunity_id}" not found.')
        logger.info("Opportunity deleted: %s", opportunity_id)

    def check_phase_state(
        self, phase: OpportunityPhase | str, state: OpportunityState | str
    ) -> tuple[OpportunityPhase, OpportunityState]:
        """Coerce phase and state, rejecting combinations outside ALLOWED_STATES."""
        try:
            phase = OpportunityPhase(phase)
            state = OpportunityState(state)
        except ValueError as e:
            raise ValidationError(str(e)) from e
        if state not in ALLOWED_STATES[phase]:
            allowed = ", ".join(s.value for s in ALLOWED_STATES[phase])
            raise ValidationError(
                f'State "{state.value}" is not allowed in phase "{phase.value}" '
                f"(allowed: {allowed})."
            )
        return phase, state

    # --- Private Methods ---

    def _check_references(
        self,
        account_id: str | None,
        agent_id: str | None,
        contact_ids: list[str],
    ) -> None:
        if account_id is not None and not self.repository.accounts.exists(account_id):
            raise IntegrityError(f'Account "{account_id}" does not exist.')
        if agent_id is not None and not self.repository.agents.exists(agent_id):
            raise IntegrityError(f'Agent "{agent_id}" does not exist.')
        missing = [cid for cid in contact_ids if not self.repository.contacts.exists(cid)]
        if missing:
            raise IntegrityError(f"Contacts do not exist: {', '.join(missing)}")

    def _agent_name(self, agent_id: str) -> str:
        agent = self.repository.agents.get(agent_id)
        user = self.repository.users.get(agent.user_id) if agent else None
        return user.full_name if user else UNKNOWN

"""Service for activities."""

from __future__ import annotations

import logging
from datetime import date
from typing import Any

from ..models import (
    UNKNOWN,
    Activity,
    ActivityState,
    ActivityType,
    ActivityView,
    OpportunityChanges,
    User,
)
from ..repositories import MemoryRepository
from ..utils import today
from .errors import IntegrityError, NotFoundError, ValidationError, validation_errors
from .opportunity_service import OpportunityService
from .visibility_service import VisibilityService

logger = logging.getLogger(__name__)


class ActivityService:
    """
    Service for activity CRUD.

    An activity leaving the pending state gets a finish date; returning to
    pending clears it. Phase/state changes for the parent opportunity can be
    passed along and are applied only when the activity ends up completed.
    """

    def __init__(
        self,
        repository: MemoryRepository,
        visibility: VisibilityService,
        opportunities: OpportunityService,
    ) -> None:
        self.repository = repository
        self.visibility = visibility
        self.opportunities = opportunities

    def list_for_user(self, user: User) -> list[ActivityView]:
        """Activities of the opportunities visible to the user."""
        opportunity_ids = {o.id for o in self.visibility.visible_opportunities(user)}
        return [
            self.to_view(a)
            for a in self.repository.activities.filter(lambda a: a.opportunity_id in opportunity_ids)
        ]

    def list_for_opportunity(self, user: User, opportunity_id: str) -> list[ActivityView]:
        """Activities of one opportunity, empty if the user cannot see it."""
        if not self.visibility.can_see_opportunity(user, opportunity_id):
            return []
        return [
            self.to_view(a)
            for a in self.repository.activities.filter(lambda a: a.opportunity_id == opportunity_id)
        ]

    def get_activity(self, activity_id: str) -> Activity | None:
        return self.repository.activities.get(activity_id)

    def to_view(self, activity: Activity) -> ActivityView:
        opportunity = self.repository.opportunities.get(activity.opportunity_id)
        account = self.repository.accounts.get(opportunity.account_id) if opportunity else None
        agent = self.repository.agents.get(activity.agent_id)
        user = self.repository.users.get(agent.user_id) if agent else None
        return ActivityView(
            **activity.model_dump(),
            opportunity_concept=opportunity.concept if opportunity else UNKNOWN,
            account_name=account.name if account else UNKNOWN,
            agent_name=user.full_name if user else UNKNOWN,
        )

    def create_activity(
        self,
        opportunity_id: str,
        agent_id: str,
        concept: str,
        due_on: date | str,
        type: ActivityType | str = ActivityType.COMMUNICATION,
        state: ActivityState | str = ActivityState.PENDING,
        notes: str | None = None,
        expectation: str | None = None,
        opportunity_changes: OpportunityChanges | dict | None = None,
    ) -> Activity:
        """Create an activity dated today.

        Raises:
            IntegrityError: Opportunity or agent does not exist
            ValidationError: Invalid field values or opportunity changes
        """
        self._check_references(opportunity_id, agent_id)
        state = self._coerce_state(state)
        changes = self._coerce_changes(opportunity_changes)
        self._check_changes(opportunity_id, state, changes)

        created_on = today()
        with validation_errors():
            activity = self.repository.activities.insert(
                opportunity_id=opportunity_id,
                agent_id=agent_id,
                concept=concept,
                type=type,
                state=state,
                created_on=created_on,
                due_on=due_on,
                finished_on=None if state == ActivityState.PENDING else created_on,
                notes=notes,
                expectation=expectation,
            )
        logger.info("Activity created: %s (%s)", activity.concept, activity.id)

        self._apply_changes(activity, changes)
        return activity

    def update_activity(
        self,
        activity_id: str,
        opportunity_changes: OpportunityChanges | dict | None = None,
        **changes: Any,
    ) -> Activity:
        """Update an activity and optionally its opportunity.

        Raises:
            NotFoundError: Activity does not exist
            IntegrityError: New opportunity or agent does not exist
        """
        current = self.repository.activities.get(activity_id)
        if current is None:
            raise NotFoundError(f'Activity "{activity_id}" not found.')

        changes = {k: v for k, v in changes.items() if k not in ("id", "created_on")}
        self._check_references(changes.get("opportunity_id"), changes.get("agent_id"))
        opportunity_updates = self._coerce_changes(opportunity_changes)

        if "state" in changes:
            state = self._coerce_state(changes["state"])
            changes["state"] = state
            if state == ActivityState.PENDING:
                changes["finished_on"] = None
            elif not (changes.get("finished_on") or current.finished_on):
                changes["finished_on"] = today()
        self._check_changes(
            changes.get("opportunity_id", current.opportunity_id),
            changes.get("state", current.state),
            opportunity_updates,
        )

        with validation_errors():
            activity = self.repository.activities.update(activity_id, **changes)
        logger.info("Activity updated: %s", activity_id)

        self._apply_changes(activity, opportunity_updates)
        return activity

    def delete_activity(self, activity_id: str) -> None:
        if not self.repository.activities.delete(activity_id):
            raise NotFoundError(f'Activity "{activity_id}" not found.')
        logger.info("Activity deleted: %s", activity_id)

    # --- Private Methods ---

    def _check_references(self, opportunity_id: str | None, agent_id: str | None) -> None:
        if opportunity_id is not None and not self.repository.opportunities.exists(opportunity_id):
            raise IntegrityError(f'Opportunity "{opportunity_id}" does not exist.')
        if agent_id is not None and not self.repository.agents.exists(agent_id):
            raise IntegrityError(f'Agent "{agent_id}" does not exist.')

    @staticmethod
    def _coerce_state(state: ActivityState | str) -> ActivityState:
        try:
            return ActivityState(state)
        except ValueError as e:
            raise ValidationError(str(e)) from e

    @staticmethod
    def _coerce_changes(changes: OpportunityChanges | dict | None) -> OpportunityChanges | None:
        if changes is None or isinstance(changes, OpportunityChanges):
            return changes
        with validation_errors():
            return OpportunityChanges.model_validate(changes)

    def _check_changes(
        self,
        opportunity_id: str,
        state: ActivityState,
        changes: OpportunityChanges | None,
    ) -> None:
        """Validate opportunity changes before anything is written."""
        if changes is None or changes.is_empty or state != ActivityState.COMPLETED:
            return
        opportunity = self.repository.opportunities.get(opportunity_id)
        if opportunity is None:
            raise IntegrityError(f'Opportunity "{opportunity_id}" does not exist.')
        self.opportunities.check_phase_state(
            changes.phase or opportunity.phase,
            changes.state or opportunity.state,
        )

    def _apply_changes(self, activity: Activity, changes: OpportunityChanges | None) -> None:
        if changes is None or changes.is_empty:
            return
        if activity.state != ActivityState.COMPLETED:
            logger.debug("Activity %s not completed; opportunity changes ignored", activity.id)
            return
        self.opportunities.update_opportunity(activity.opportunity_id, **changes.as_updates())
        logger.debug(
            "Opportunity %s updated from activity %s", activity.opportunity_id, activity.id
        )

"""Activity domain model."""

from datetime import date

from pydantic import BaseModel, Field

from .enums import ActivityState, ActivityType, OpportunityPhase, OpportunityState
from .opportunity import UNKNOWN


class OpportunityChanges(BaseModel):
    """Phase/state changes to apply to an opportunity when an activity completes.

    Never stored on the activity itself.
    """

    model_config = {"extra": "forbid"}

    phase: OpportunityPhase | None = None
    state: OpportunityState | None = None

    def as_updates(self) -> dict:
        """Return only the fields that were set."""
        return self.model_dump(exclude_none=True)

    @property
    def is_empty(self) -> bool:
        return self.phase is None and self.state is None


class Activity(BaseModel):
    """Something an agent did or has to do for an opportunity."""

    model_config = {"extra": "forbid"}

    id: str
    opportunity_id: str
    agent_id: str
    type: ActivityType = ActivityType.COMMUNICATION
    state: ActivityState = ActivityState.PENDING
    created_on: date
    due_on: date
    finished_on: date | None = None  # set once completed or cancelled
    concept: str = Field(..., min_length=1)
    notes: str | None = None
    expectation: str | None = None  # meetings: what we expect to get out of it

    def is_overdue(self, today: date) -> bool:
        """Pending and past its due date."""
        return self.state == ActivityState.PENDING and self.due_on < today


class ActivityView(Activity):
    """Activity denormalized for display."""

    opportunity_concept: str = UNKNOWN
    account_name: str = UNKNOWN
    agent_name: str = UNKNOWN

"""Opportunity domain model."""

from datetime import date

from pydantic import BaseModel, Field

from .enums import ALLOWED_STATES, OpportunityPhase, OpportunityState

UNKNOWN = "Unknown"


class Opportunity(BaseModel):
    """A potential sale to an account, owned by an agent."""

    model_config = {"extra": "forbid"}

    id: str
    account_id: str
    agent_id: str
    contact_ids: list[str] = Field(default_factory=list)
    concept: str = Field(..., min_length=1)
    description: str | None = None
    amount: float = Field(default=0.0, ge=0)
    phase: OpportunityPhase = OpportunityPhase.DETECTION
    state: OpportunityState = OpportunityState.AWAITING_CLIENT
    created_on: date
    due_on: date
    closed_on: date | None = None

    @property
    def is_open(self) -> bool:
        """True while the opportunity is not won, lost or cancelled."""
        return not self.state.is_closed

    @property
    def state_allowed(self) -> bool:
        """Whether the state is valid for the current phase."""
        return self.state in ALLOWED_STATES[self.phase]


class OpportunityView(Opportunity):
    """Opportunity with account and agent names resolved."""

    account_name: str = UNKNOWN
    agent_name: str = UNKNOWN

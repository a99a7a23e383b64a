"""Enums for opportunity and activity lifecycles."""

from enum import Enum


class OpportunityPhase(str, Enum):
    """Sales phases an opportunity moves through, in order."""

    DETECTION = "detection"
    COMMUNICATION = "communication"
    FORMALIZATION = "formalization"
    OFFER = "offer"
    REQUEST = "request"

    @property
    def label(self) -> str:
        return self.value.replace("_", " ").capitalize()


class OpportunityState(str, Enum):
    """Current state of an opportunity."""

    WON = "won"
    LOST = "lost"
    CANCELLED = "cancelled"
    AWAITING_CLIENT = "awaiting_client"
    AWAITING_INTERNAL = "awaiting_internal"

    @property
    def label(self) -> str:
        return self.value.replace("_", " ").capitalize()

    @property
    def is_closed(self) -> bool:
        return self in CLOSED_STATES


class ActivityType(str, Enum):
    """Kinds of activity an agent can log."""

    ADMINISTRATIVE = "administrative"
    COMMUNICATION = "communication"
    MEETING = "meeting"

    @property
    def label(self) -> str:
        return self.value.capitalize()


class ActivityState(str, Enum):
    """Lifecycle of an activity."""

    PENDING = "pending"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    @property
    def label(self) -> str:
        return self.value.capitalize()


CLOSED_STATES = frozenset(
    {OpportunityState.WON, OpportunityState.LOST, OpportunityState.CANCELLED}
)

# States an opportunity may hold while in each phase
ALLOWED_STATES: dict[OpportunityPhase, tuple[OpportunityState, ...]] = {
    OpportunityPhase.DETECTION: (
        OpportunityState.AWAITING_CLIENT,
        OpportunityState.CANCELLED,
    ),
    OpportunityPhase.COMMUNICATION: (
        OpportunityState.AWAITING_CLIENT,
        OpportunityState.AWAITING_INTERNAL,
        OpportunityState.CANCELLED,
    ),
    OpportunityPhase.FORMALIZATION: (
        OpportunityState.AWAITING_CLIENT,
        OpportunityState.AWAITING_INTERNAL,
        OpportunityState.CANCELLED,
    ),
    OpportunityPhase.OFFER: (
        OpportunityState.AWAITING_CLIENT,
        OpportunityState.AWAITING_INTERNAL,
        OpportunityState.CANCELLED,
    ),
    OpportunityPhase.REQUEST: (
        OpportunityState.WON,
        OpportunityState.LOST,
        OpportunityState.CANCELLED,
    ),
}

"""Data models."""

from .account import Account, Portfolio
from .activity import Activity, ActivityView, OpportunityChanges
from .ai_agent import AIAgent
from .contact import Contact, ContactView
from .dashboard import DashboardMetrics, WeeklyPoint
from .enums import (
    ALLOWED_STATES,
    CLOSED_STATES,
    ActivityState,
    ActivityType,
    OpportunityPhase,
    OpportunityState,
)
from .opportunity import UNKNOWN, Opportunity, OpportunityView
from .seed import SeedData
from .user import Agent, AgentView, Coordinator, CoordinatorView, User, UserView

__all__ = [
    "ALLOWED_STATES",
    "CLOSED_STATES",
    "UNKNOWN",
    "AIAgent",
    "Account",
    "Activity",
    "ActivityState",
    "ActivityType",
    "ActivityView",
    "Agent",
    "AgentView",
    "Contact",
    "ContactView",
    "Coordinator",
    "CoordinatorView",
    "DashboardMetrics",
    "Opportunity",
    "OpportunityChanges",
    "OpportunityPhase",
    "OpportunityState",
    "OpportunityView",
    "Portfolio",
    "SeedData",
    "User",
    "UserView",
    "WeeklyPoint",
]

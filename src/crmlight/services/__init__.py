"""Services layer."""

from .account_service import AccountService
from .activity_service import ActivityService
from .ai_agent_service import AIAgentService
from .contact_service import ContactService
from .dashboard_service import DashboardService, week_label
from .errors import (
    AuthenticationError,
    CRMError,
    DuplicateError,
    IntegrityError,
    NotFoundError,
    ReportGenerationError,
    RoleError,
    ValidationError,
)
from .opportunity_service import OpportunityService
from .user_service import UserService
from .visibility_service import VisibilityService

__all__ = [
    "AIAgentService",
    "AccountService",
    "ActivityService",
    "AuthenticationError",
    "CRMError",
    "ContactService",
    "DashboardService",
    "DuplicateError",
    "IntegrityError",
    "NotFoundError",
    "OpportunityService",
    "ReportGenerationError",
    "RoleError",
    "UserService",
    "ValidationError",
    "VisibilityService",
    "week_label",
]

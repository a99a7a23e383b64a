"""Screen components."""

from .dashboard import DashboardScreen
from .entities import (
    AccountsScreen,
    ActivitiesScreen,
    AgentsScreen,
    AIAgentsScreen,
    ContactsScreen,
    CoordinatorsScreen,
    EntityScreen,
    OpportunitiesScreen,
    UsersScreen,
)
from .help import HelpScreen
from .login import LoginScreen

__all__ = [
    "AIAgentsScreen",
    "AccountsScreen",
    "ActivitiesScreen",
    "AgentsScreen",
    "ContactsScreen",
    "CoordinatorsScreen",
    "DashboardScreen",
    "EntityScreen",
    "HelpScreen",
    "LoginScreen",
    "OpportunitiesScreen",
    "UsersScreen",
]

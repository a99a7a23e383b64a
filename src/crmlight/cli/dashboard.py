"""Dashboard command: print a user's metrics without starting the TUI."""

import logging

from ..api import DataAPI
from ..models import DashboardMetrics, WeeklyPoint
from ..utils import format_metric, metric_title
from .output import detail, error, header, info

logger = logging.getLogger(__name__)


def _print_series(title: str, points: list[WeeklyPoint]) -> None:
    header(title)
    for point in points:
        values = ", ".join(f"{k}={v}" for k, v in point.values.items())
        detail(point.week, values, width=10)


def print_metrics(metrics: DashboardMetrics) -> None:
    for name, value in metrics.populated().items():
        detail(metric_title(name), format_metric(name, value))

    if metrics.recent_activities:
        header("Recent activities")
        for activity in metrics.recent_activities:
            detail(
                activity.created_on.isoformat(),
                f"{activity.concept} ({activity.state.label}, {activity.account_name})",
                width=10,
            )
    if metrics.opportunities_evolution:
        _print_series("Opportunities per week", metrics.opportunities_evolution)
    if metrics.activities_evolution:
        _print_series("Activities per week", metrics.activities_evolution)


def run_dashboard(api: DataAPI, email: str) -> int:
    """
    Print the dashboard of the user with this email.

    Returns:
        Exit code (0 = success, 1 = unknown user)
    """
    user = api.users.get_user_by_email(email)
    if user is None:
        error(f"No user with email {email}")
        return 1

    logger.info("Printing dashboard for %s", user.username)
    header(f"Dashboard for {user.full_name} <{user.email}>")
    metrics = api.dashboard.metrics_for(user)
    if not metrics.populated() and not metrics.recent_activities:
        info("This user has no role; nothing to show.")
        return 0
    print_metrics(metrics)
    return 0

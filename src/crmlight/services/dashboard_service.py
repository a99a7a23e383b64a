"""Service computing role-dependent dashboard metrics."""

from __future__ import annotations

import calendar
import logging
import math
from datetime import date, timedelta

from ..models import (
    ActivityState,
    DashboardMetrics,
    OpportunityState,
    User,
    WeeklyPoint,
)
from ..repositories import MemoryRepository
from ..utils import today as current_date
from .activity_service import ActivityService
from .visibility_service import VisibilityService

logger = logging.getLogger(__name__)

EVOLUTION_MONTHS = 3
RECENT_ACTIVITIES = 5

OPPORTUNITY_SERIES = ("opened", "closed")
ACTIVITY_SERIES = ("completed", "pending", "overdue")


def week_label(day: date) -> str:
    """
    Label the week a date falls in, e.g. ``2026-S07``.

    Weeks start on Sunday; week 1 is the (possibly partial) week holding
    January 1st.
    """
    first_day = date(day.year, 1, 1)
    past_days = (day - first_day).days
    # Sunday = 0 ... Saturday = 6
    first_weekday = (first_day.weekday() + 1) % 7
    week = math.ceil((past_days + first_weekday + 1) / 7)
    return f"{day.year}-S{week:02d}"


def months_before(day: date, months: int) -> date:
    """Same day of month, months earlier, clamped to the month's length."""
    month_index = day.year * 12 + day.month - 1 - months
    year, month = divmod(month_index, 12)
    month += 1
    return date(year, month, min(day.day, calendar.monthrange(year, month)[1]))


class DashboardService:
    """
    Dashboard figures for the logged-in user.

    Administrators get global conversion figures; coordinators get totals
    and weekly evolution series; agents get figures about their own
    portfolio. Roles are checked in that order and users without any role
    get empty metrics.
    """

    def __init__(
        self,
        repository: MemoryRepository,
        visibility: VisibilityService,
        activities: ActivityService,
    ) -> None:
        self.repository = repository
        self.visibility = visibility
        self.activities = activities

    def metrics_for(self, user: User, today: date | None = None) -> DashboardMetrics:
        today = today or current_date()
        if self.visibility.is_administrator(user):
            metrics = self._admin_metrics()
        elif self.visibility.coordinator_id_for(user) is not None:
            metrics = self._coordinator_metrics(user, today)
        elif self.visibility.agent_id_for(user) is not None:
            metrics = self._agent_metrics(user)
        else:
            metrics = DashboardMetrics()
        logger.debug("Dashboard for user %s: %s", user.id, metrics.populated())
        return metrics

    # --- Private Methods ---

    def _admin_metrics(self) -> DashboardMetrics:
        opportunities = self.repository.opportunities.all()
        won = [o for o in opportunities if o.state == OpportunityState.WON]
        lost = [o for o in opportunities if o.state == OpportunityState.LOST]
        total_revenue = sum(o.amount for o in won)

        # Revenue of the first won opportunity of every account
        first_won_accounts: set[str] = set()
        new_customer_revenue = 0.0
        for opportunity in sorted(won, key=lambda o: o.closed_on or date.max):
            if opportunity.account_id not in first_won_accounts:
                first_won_accounts.add(opportunity.account_id)
                new_customer_revenue += opportunity.amount

        count = len(opportunities)
        return DashboardMetrics(
            total_users=len(self.repository.users),
            total_accounts=len(self.repository.accounts),
            total_opportunities=count,
            conversion_rate=len(won) / (len(won) + len(lost)) if won or lost else 0.0,
            avg_opportunity_value=sum(o.amount for o in opportunities) / count if count else 0.0,
            activities_per_opportunity=len(self.repository.activities) / count if count else 0.0,
            new_customer_revenue_rate=(
                new_customer_revenue / total_revenue if total_revenue > 0 else 0.0
            ),
        )

    def _coordinator_metrics(self, user: User, today: date) -> DashboardMetrics:
        opportunities = self.repository.opportunities.all()
        since = months_before(today, EVOLUTION_MONTHS)

        # Every week touched by the window, including the current partial one
        weeks: list[str] = []
        day = since
        while day <= today:
            label = week_label(day)
            if label not in weeks:
                weeks.append(label)
            day += timedelta(days=1)
        opportunity_weeks = {w: dict.fromkeys(OPPORTUNITY_SERIES, 0) for w in weeks}
        activity_weeks = {w: dict.fromkeys(ACTIVITY_SERIES, 0) for w in weeks}

        for opportunity in opportunities:
            if opportunity.created_on >= since:
                counters = opportunity_weeks.get(week_label(opportunity.created_on))
                if counters is not None:
                    counters["opened"] += 1
            if opportunity.closed_on and opportunity.closed_on >= since:
                counters = opportunity_weeks.get(week_label(opportunity.closed_on))
                if counters is not None:
                    counters["closed"] += 1

        for activity in self.repository.activities:
            if activity.created_on < since:
                continue
            counters = activity_weeks.get(week_label(activity.created_on))
            if counters is None:
                continue
            if activity.state == ActivityState.PENDING:
                counters["overdue" if activity.is_overdue(today) else "pending"] += 1
            else:
                counters["completed"] += 1

        recent = sorted(
            self.activities.list_for_user(user), key=lambda a: a.created_on, reverse=True
        )[:RECENT_ACTIVITIES]

        return DashboardMetrics(
            total_users=len(self.repository.users),
            total_accounts=len(self.repository.accounts),
            total_opportunities=len(opportunities),
            total_revenue=sum(o.amount for o in opportunities if o.state == OpportunityState.WON),
            recent_activities=recent,
            opportunities_evolution=_series(opportunity_weeks),
            activities_evolution=_series(activity_weeks),
        )

    def _agent_metrics(self, user: User) -> DashboardMetrics:
        agent_id = self.visibility.agent_id_for(user)
        assigned = self.repository.portfolios.filter(lambda p: p.agent_id == agent_id)
        open_opportunities = [o for o in self.visibility.visible_opportunities(user) if o.is_open]
        pending = [
            a for a in self.activities.list_for_user(user) if a.state == ActivityState.PENDING
        ]
        return DashboardMetrics(
            assigned_accounts=len(assigned),
            open_opportunities=len(open_opportunities),
            portfolio_value=sum(o.amount for o in open_opportunities),
            pending_activities=len(pending),
        )


def _series(weeks: dict[str, dict[str, int]]) -> list[WeeklyPoint]:
    return [WeeklyPoint(week=week, values=values) for week, values in sorted(weeks.items())]

"""Dashboard metric models."""

from pydantic import BaseModel, Field

from .activity import ActivityView


class WeeklyPoint(BaseModel):
    """Counters for one week of an evolution chart."""

    week: str  # e.g. "2026-S07"
    values: dict[str, int] = Field(default_factory=dict)


class DashboardMetrics(BaseModel):
    """Role-dependent dashboard figures.

    Only the fields relevant to the user's role are populated.
    """

    # Agent
    assigned_accounts: int | None = None
    open_opportunities: int | None = None
    portfolio_value: float | None = None
    pending_activities: int | None = None

    # Administrator / coordinator
    total_users: int | None = None
    total_accounts: int | None = None
    total_opportunities: int | None = None
    total_revenue: float | None = None
    recent_activities: list[ActivityView] | None = None
    opportunities_evolution: list[WeeklyPoint] | None = None
    activities_evolution: list[WeeklyPoint] | None = None

    # Administrator only
    conversion_rate: float | None = None
    avg_opportunity_value: float | None = None
    activities_per_opportunity: float | None = None
    new_customer_revenue_rate: float | None = None

    def populated(self) -> dict:
        """Scalar metrics that are set, in declaration order."""
        return {
            name: value
            for name, value in self.model_dump(exclude_none=True).items()
            if not isinstance(value, list)
        }

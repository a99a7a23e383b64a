"""Dashboard screen."""

from textual.app import ComposeResult
from textual.containers import VerticalScroll
from textual.screen import Screen
from textual.widgets import DataTable, Footer, Header, Static

from ...models import DashboardMetrics, UserView, WeeklyPoint
from ...utils import format_metric, metric_title


class DashboardScreen(Screen):
    """Role-dependent metrics of the logged-in user."""

    DEFAULT_CSS = """
    DashboardScreen .section-title {
        text-style: bold;
        color: $primary;
        padding: 1 1 0 1;
    }

    DashboardScreen DataTable {
        height: auto;
        margin: 0 1;
    }
    """

    def __init__(self, user: UserView, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.user = user

    def compose(self) -> ComposeResult:
        yield Header()
        with VerticalScroll(id="dashboard"):
            yield Static("", id="dashboard-title", classes="section-title")
            yield DataTable(id="metrics", show_cursor=False)
            yield Static("Recent activities", id="recent-title", classes="section-title")
            yield DataTable(id="recent", show_cursor=False)
            yield Static("Opportunities per week", id="opp-title", classes="section-title")
            yield DataTable(id="opportunities-evolution", show_cursor=False)
            yield Static("Activities per week", id="act-title", classes="section-title")
            yield DataTable(id="activities-evolution", show_cursor=False)
        yield Footer()

    def on_mount(self) -> None:
        self.refresh_data()

    def refresh_data(self) -> None:
        """Recompute the metrics and redraw every table."""
        metrics = self.app.api.dashboard.metrics_for(self.user)  # pyrefly: ignore[missing-attribute]
        self.show_metrics(metrics)

    def show_metrics(self, metrics: DashboardMetrics) -> None:
        title = self.query_one("#dashboard-title", Static)
        scalars = metrics.populated()
        if scalars:
            title.update(f"Dashboard of {self.user.full_name}")
        else:
            title.update("No dashboard is available for users without a role.")

        table = self.query_one("#metrics", DataTable)
        table.clear(columns=True)
        table.add_columns("Metric", "Value")
        for name, value in scalars.items():
            table.add_row(metric_title(name), format_metric(name, value))

        recent = self.query_one("#recent", DataTable)
        recent.clear(columns=True)
        recent.add_columns("Created", "Concept", "Account", "Agent", "State")
        for activity in metrics.recent_activities or []:
            recent.add_row(
                activity.created_on.isoformat(),
                activity.concept,
                activity.account_name,
                activity.agent_name,
                activity.state.label,
            )

        self._show_series("opportunities-evolution", metrics.opportunities_evolution)
        self._show_series("activities-evolution", metrics.activities_evolution)

        has_recent = metrics.recent_activities is not None
        for widget_id in ("#recent-title", "#recent"):
            self.query_one(widget_id).display = has_recent
        self.query_one("#opp-title").display = metrics.opportunities_evolution is not None
        self.query_one("#act-title").display = metrics.activities_evolution is not None

    def _show_series(self, table_id: str, points: list[WeeklyPoint] | None) -> None:
        table = self.query_one(f"#{table_id}", DataTable)
        table.clear(columns=True)
        table.display = points is not None
        if not points:
            return
        series = list(points[0].values)
        table.add_columns("Week", *(s.capitalize() for s in series))
        for point in points:
            table.add_row(point.week, *(str(point.values.get(s, 0)) for s in series))

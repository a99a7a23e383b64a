"""Read-only list of the activities of one opportunity."""

from textual.app import ComposeResult
from textual.containers import Vertical
from textual.screen import ModalScreen
from textual.widgets import DataTable, Static

from ...models import ActivityView, OpportunityView

COLUMNS = ("Concept", "Type", "State", "Due", "Finished", "Agent")


def activity_cells(activity: ActivityView) -> tuple[str, ...]:
    return (
        activity.concept,
        activity.type.label,
        activity.state.label,
        activity.due_on.isoformat(),
        activity.finished_on.isoformat() if activity.finished_on else "",
        activity.agent_name,
    )


class OpportunityActivitiesModal(ModalScreen[None]):
    """Modal listing the activities recorded for an opportunity."""

    DEFAULT_CSS = """
    OpportunityActivitiesModal {
        align: center middle;
    }

    OpportunityActivitiesModal > Vertical {
        width: 90%;
        height: 80%;
        border: solid $primary;
        background: $surface;
    }

    OpportunityActivitiesModal #title-bar {
        height: 1;
        width: 100%;
        background: $primary-darken-2;
        color: $text;
        text-align: center;
    }

    OpportunityActivitiesModal DataTable {
        height: 1fr;
    }

    OpportunityActivitiesModal #empty {
        padding: 1 2;
        color: $text-muted;
    }

    OpportunityActivitiesModal #footer-bar {
        height: 1;
        width: 100%;
        background: $surface-lighten-1;
        color: $text-muted;
        text-align: center;
    }
    """

    # Keys that move through the table, not dismiss
    SCROLL_KEYS = {"up", "down", "pageup", "pagedown", "home", "end"}

    def __init__(self, opportunity: OpportunityView, activities: list[ActivityView]) -> None:
        super().__init__()
        self._opportunity = opportunity
        self._activities = activities

    @property
    def title_text(self) -> str:
        return (
            f"Activities: {self._opportunity.concept} ({self._opportunity.account_name})"
            f" - {len(self._activities)}"
        )

    def compose(self) -> ComposeResult:
        with Vertical():
            yield Static(self.title_text, id="title-bar")
            if self._activities:
                yield DataTable(id="activities", cursor_type="row", zebra_stripes=True)
            else:
                yield Static("No activities for this opportunity.", id="empty")
            yield Static("[any key] Close", id="footer-bar")

    def on_mount(self) -> None:
        if not self._activities:
            return
        table = self.query_one("#activities", DataTable)
        table.add_columns(*COLUMNS)
        for activity in self._activities:
            table.add_row(*activity_cells(activity), key=activity.id)
        table.focus()

    def on_key(self, event) -> None:
        """Scroll keys move the cursor, any other key dismisses."""
        if event.key in self.SCROLL_KEYS:
            return
        event.stop()
        self.dismiss(None)

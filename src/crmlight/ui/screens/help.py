"""Help screen showing keyboard shortcuts."""

from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.screen import ModalScreen
from textual.widgets import Static


class HelpScreen(ModalScreen):
    """Modal help screen showing keyboard shortcuts."""

    DEFAULT_CSS = """
    HelpScreen {
        align: center middle;
    }

    HelpScreen > Vertical {
        width: 70;
        height: auto;
        max-height: 90%;
        padding: 1 2;
        background: $surface;
        border: solid $primary;
    }

    HelpScreen .help-title {
        text-align: center;
        text-style: bold;
        padding-bottom: 1;
        border-bottom: solid $primary-darken-2;
    }

    HelpScreen .help-section {
        height: auto;
        padding: 1 0 0 0;
    }

    HelpScreen .section-title {
        text-style: bold;
        color: $primary;
    }

    HelpScreen .help-row {
        height: 1;
    }

    HelpScreen .help-key {
        width: 15;
        text-style: bold;
    }

    HelpScreen .help-desc {
        width: 1fr;
        color: $text-muted;
    }

    HelpScreen .help-footer {
        text-align: center;
        color: $text-muted;
        padding-top: 1;
        border-top: solid $primary-darken-2;
    }
    """

    BINDINGS = [
        Binding("escape", "dismiss", "Close", show=False),
        Binding("?", "dismiss", "Close", show=False),
        Binding("q", "dismiss", "Close", show=False),
    ]

    def compose(self) -> ComposeResult:
        with Vertical():
            yield Static("Keyboard Shortcuts", classes="help-title")

            with Vertical(classes="help-section"):
                yield Static("Views", classes="section-title")
                yield self._help_row("1", "Dashboard")
                yield self._help_row("2", "Accounts")
                yield self._help_row("3", "Contacts")
                yield self._help_row("4", "Opportunities")
                yield self._help_row("5", "Activities")
                yield self._help_row("6", "Users (administrators)")
                yield self._help_row("7", "AI agents (administrators)")
                yield self._help_row("8", "Agents (administrators)")
                yield self._help_row("9", "Coordinators (administrators)")

            with Vertical(classes="help-section"):
                yield Static("Records", classes="section-title")
                yield self._help_row("Up / Down", "Move between rows")
                yield self._help_row("n", "Create a record")
                yield self._help_row("e", "Edit the selected record")
                yield self._help_row("d", "Delete the selected record")
                yield self._help_row("p / Enter", "Show the contact report")
                yield self._help_row("g", "Generate the contact report")
                yield self._help_row("a", "Show the opportunity activities")

            with Vertical(classes="help-section"):
                yield Static("General", classes="section-title")
                yield self._help_row("r", "Refresh")
                yield self._help_row("R", "Reset all data to the seed")
                yield self._help_row("o", "Log out")
                yield self._help_row("?", "Show this help")
                yield self._help_row("q", "Quit")

            yield Static("Press any key to close", classes="help-footer")

    def _help_row(self, key: str, description: str) -> Horizontal:
        row = Horizontal(classes="help-row")
        row.compose_add_child(Static(key, classes="help-key"))
        row.compose_add_child(Static(description, classes="help-desc"))
        return row

    def on_key(self, event) -> None:
        """Dismiss on any key press and prevent propagation."""
        event.stop()
        self.dismiss()

"""Contact report preview modal rendering the report as markdown."""

from rich.markdown import Markdown
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import VerticalScroll
from textual.screen import ModalScreen
from textual.widgets import Static

from ...models import Contact

NO_REPORT = "_No report yet. Press **g** to generate one._"


class ReportPreviewModal(ModalScreen[bool]):
    """Modal showing a contact's AI report.

    Returns True if the user asked to (re)generate the report.
    """

    DEFAULT_CSS = """
    ReportPreviewModal {
        align: center middle;
    }

    ReportPreviewModal > VerticalScroll {
        width: 100%;
        height: 100%;
        border: solid $primary;
        background: $surface;
        margin: 1 2;
    }

    ReportPreviewModal > VerticalScroll > #title-bar {
        height: 1;
        width: 100%;
        background: $primary-darken-2;
        color: $text;
        text-align: center;
    }

    ReportPreviewModal > VerticalScroll > #content {
        width: 100%;
        height: auto;
        padding: 0 1;
    }

    ReportPreviewModal > VerticalScroll > #footer-bar {
        height: 1;
        width: 100%;
        background: $surface-lighten-1;
        color: $text-muted;
        text-align: center;
        dock: bottom;
    }
    """

    BINDINGS = [
        Binding("g", "generate", "Generate", show=False),
    ]

    # Keys that should scroll content, not dismiss
    SCROLL_KEYS = {"up", "down", "pageup", "pagedown", "home", "end"}

    def __init__(self, contact: Contact, account_name: str | None = None) -> None:
        super().__init__()
        self._contact = contact
        self._account_name = account_name

    @property
    def title_text(self) -> str:
        title = f"Report: {self._contact.full_name}"
        if self._account_name:
            title += f" ({self._account_name})"
        return title

    def compose(self) -> ComposeResult:
        with VerticalScroll():
            yield Static(self.title_text, id="title-bar")
            yield Static(Markdown(self._contact.report or NO_REPORT), id="content")
            yield Static("[g] Generate  [any key] Close", id="footer-bar")

    def on_key(self, event) -> None:
        """Scroll keys scroll, g regenerates, any other key dismisses."""
        if event.key in self.SCROLL_KEYS or event.key == "g":
            return
        event.stop()
        self.dismiss(False)

    def action_generate(self) -> None:
        self.dismiss(True)

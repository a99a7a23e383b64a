"""Login screen."""

from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Center, Vertical
from textual.screen import Screen
from textual.widgets import Button, Footer, Header, Input, Label, Static

from ...models import UserView
from ...services import AuthenticationError

DEMO_EMAIL = "admin@crmlight.com"
DEMO_PASSWORD = "password123"


class LoginScreen(Screen[UserView]):
    """Email/password login. Dismisses with the authenticated user."""

    DEFAULT_CSS = """
    LoginScreen {
        align: center middle;
    }

    LoginScreen > Vertical {
        width: 60;
        height: auto;
        padding: 1 2;
        background: $surface;
        border: solid $primary;
    }

    LoginScreen .login-title {
        width: 100%;
        text-align: center;
        text-style: bold;
        margin-bottom: 1;
    }

    LoginScreen #login-error {
        color: $error;
        height: auto;
    }
    """

    BINDINGS = [
        Binding("escape", "app.quit", "Quit"),
    ]

    def compose(self) -> ComposeResult:
        yield Header()
        with Vertical():
            yield Static("crmlight", classes="login-title")
            yield Label("Email")
            yield Input(value=DEMO_EMAIL, id="email")
            yield Label("Password")
            yield Input(value=DEMO_PASSWORD, password=True, id="password")
            yield Static("", id="login-error")
            with Center():
                yield Button("Log in", id="login", variant="primary")
        yield Footer()

    def on_mount(self) -> None:
        self.query_one("#email", Input).focus()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "login":
            self.attempt_login()

    def on_input_submitted(self, event: Input.Submitted) -> None:
        event.stop()
        self.attempt_login()

    def attempt_login(self) -> None:
        email = self.query_one("#email", Input).value
        password = self.query_one("#password", Input).value
        try:
            user = self.app.api.users.authenticate(email, password)  # pyrefly: ignore[missing-attribute]
        except AuthenticationError as e:
            self.query_one("#login-error", Static).update(str(e))
            return
        self.dismiss(user)

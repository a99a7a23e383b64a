"""crmlight TUI Application."""

import logging

from textual.app import App
from textual.binding import Binding

from .api import DataAPI
from .config import Settings
from .models import UserView
from .services import CRMError
from .ui.screens import (
    AccountsScreen,
    ActivitiesScreen,
    AgentsScreen,
    AIAgentsScreen,
    ContactsScreen,
    CoordinatorsScreen,
    DashboardScreen,
    EntityScreen,
    HelpScreen,
    LoginScreen,
    OpportunitiesScreen,
    UsersScreen,
)
from .ui.widgets import ConfirmModal, FormModal, OpportunityActivitiesModal, ReportPreviewModal

logger = logging.getLogger(__name__)

ENTITY_SCREENS: dict[str, type[EntityScreen]] = {
    "accounts": AccountsScreen,
    "contacts": ContactsScreen,
    "opportunities": OpportunitiesScreen,
    "activities": ActivitiesScreen,
    "users": UsersScreen,
    "ai_agents": AIAgentsScreen,
    "agents": AgentsScreen,
    "coordinators": CoordinatorsScreen,
}


class CrmApp(App):
    """crmlight - Terminal CRM."""

    TITLE = "crmlight"

    BINDINGS = [
        # Core bindings
        Binding("q", "quit", "Quit", show=True),
        Binding("?", "help", "Help", show=True),
        Binding("r", "refresh", "Refresh", show=True),
        Binding("R", "reset_data", "Reset data", show=False),
        Binding("o", "logout", "Log out", show=False),
        # Views
        Binding("1", "view('dashboard')", "Dashboard", show=True),
        Binding("2", "view('accounts')", "Accounts", show=True),
        Binding("3", "view('contacts')", "Contacts", show=True),
        Binding("4", "view('opportunities')", "Opportunities", show=True),
        Binding("5", "view('activities')", "Activities", show=True),
        Binding("6", "view('users')", "Users", show=False),
        Binding("7", "view('ai_agents')", "AI agents", show=False),
        Binding("8", "view('agents')", "Agents", show=False),
        Binding("9", "view('coordinators')", "Coordinators", show=False),
        # Record actions
        Binding("n", "new_record", "New", show=True),
        Binding("e", "edit_record", "Edit", show=True),
        Binding("d", "delete_record", "Delete", show=True),
        Binding("p", "preview_report", "Report", show=False),
        Binding("g", "generate_report", "Generate report", show=False),
        Binding("a", "show_activities", "Activities", show=False),
    ]

    def __init__(self, api: DataAPI | None = None, settings: Settings | None = None) -> None:
        super().__init__()
        self.settings = settings or Settings()
        self.api = api or DataAPI.from_settings(self.settings)
        self.user: UserView | None = None

    def on_mount(self) -> None:
        """Called when app is mounted."""
        self.push_screen(LoginScreen(), callback=self._handle_login)

    def _handle_login(self, user: UserView | None) -> None:
        if user is None:
            return
        self.user = user
        self.sub_title = f"{user.full_name} ({self._role_label(user)})"
        self.push_screen(DashboardScreen(user))
        self.notify(f"Welcome, {user.first_name}", timeout=2)

    @staticmethod
    def _role_label(user: UserView) -> str:
        if user.is_administrator:
            return "administrator"
        roles = []
        if user.is_coordinator:
            roles.append("coordinator")
        if user.is_agent:
            roles.append("agent")
        return " + ".join(roles) or "no role"

    def action_help(self) -> None:
        """Show help screen."""
        self.push_screen(HelpScreen())

    def action_refresh(self) -> None:
        """Reload the current view."""
        screen = self.screen
        if isinstance(screen, EntityScreen):
            screen.refresh_rows()
        elif isinstance(screen, DashboardScreen):
            screen.refresh_data()

    def action_view(self, name: str) -> None:
        """Switch to another view."""
        if self.user is None:
            return
        screen = self.screen
        if not isinstance(screen, (EntityScreen, DashboardScreen)):
            return

        if name == "dashboard":
            self.switch_screen(DashboardScreen(self.user))
            return
        screen_cls = ENTITY_SCREENS[name]
        if screen_cls.ADMIN_ONLY and not self.user.is_administrator:
            self.notify(f"{screen_cls.TITLE} are managed by administrators", severity="warning")
            return
        self.switch_screen(screen_cls(self.user))

    def action_logout(self) -> None:
        """Return to the login screen."""
        screen = self.screen
        if not isinstance(screen, (EntityScreen, DashboardScreen)):
            return
        logger.info("User logged out: %s", self.user.username if self.user else "-")
        self.user = None
        self.sub_title = ""
        self.pop_screen()
        self.push_screen(LoginScreen(), callback=self._handle_login)

    def action_reset_data(self) -> None:
        """Restore the seed data (with confirmation)."""
        self.push_screen(  # pyrefly: ignore[no-matching-overload]
            ConfirmModal("Reset all data?", "Every change made in this session is lost."),
            callback=self._handle_reset_confirm,
        )

    def _handle_reset_confirm(self, confirmed: bool) -> None:
        if not confirmed:
            return
        self.api.reset()
        self.action_refresh()
        self.notify("Data reset", timeout=2)

    # Record actions
    def action_new_record(self) -> None:
        """Open an empty form for the current table."""
        screen = self.screen
        if not isinstance(screen, EntityScreen):
            return
        self.push_screen(  # pyrefly: ignore[no-matching-overload]
            FormModal(f"New {screen.ENTITY}", screen.form_fields(None)),
            callback=self._handle_new_result,
        )

    def _handle_new_result(self, values: dict | None) -> None:
        if values is None:
            return
        screen = self.screen
        if not isinstance(screen, EntityScreen):
            return
        try:
            record = screen.save(values, None)
        except CRMError as e:
            self.notify(str(e), title=f"Cannot create {screen.ENTITY}", severity="error")
            return
        screen.refresh_rows(focus_id=record.id)
        self.notify(f"{screen.ENTITY.capitalize()} created", timeout=2)

    def action_edit_record(self) -> None:
        """Open the form for the selected record."""
        screen = self.screen
        if not isinstance(screen, EntityScreen):
            return
        row = screen.get_current_row()
        if row is None:
            return
        self.push_screen(  # pyrefly: ignore[no-matching-overload]
            FormModal(f"Edit {screen.ENTITY}: {screen.describe(row)}", screen.form_fields(row)),
            callback=self._handle_edit_result,
        )

    def _handle_edit_result(self, values: dict | None) -> None:
        if values is None:
            return
        screen = self.screen
        if not isinstance(screen, EntityScreen):
            return
        row = screen.get_current_row()
        if row is None:
            return
        try:
            screen.save(values, row)
        except CRMError as e:
            self.notify(str(e), title=f"Cannot update {screen.ENTITY}", severity="error")
            return
        screen.refresh_rows(focus_id=row.id)
        self.notify(f"{screen.ENTITY.capitalize()} updated", timeout=2)

    def action_delete_record(self) -> None:
        """Delete the selected record (with confirmation)."""
        screen = self.screen
        if not isinstance(screen, EntityScreen):
            return
        row = screen.get_current_row()
        if row is None:
            return
        self.push_screen(  # pyrefly: ignore[no-matching-overload]
            ConfirmModal(
                f"Delete {screen.ENTITY} '{screen.describe(row)}'?",
                screen.delete_detail(row),
            ),
            callback=self._handle_delete_confirm,
        )

    def _handle_delete_confirm(self, confirmed: bool) -> None:
        if not confirmed:
            return
        screen = self.screen
        if not isinstance(screen, EntityScreen):
            return
        row = screen.get_current_row()
        if row is None:
            return
        fields = screen.delete_fields(row)
        if fields:
            self.push_screen(  # pyrefly: ignore[no-matching-overload]
                FormModal(f"Delete {screen.ENTITY}: {screen.describe(row)}", fields),
                callback=self._handle_delete_options,
            )
            return
        self._delete_row(screen, row, {})

    def _handle_delete_options(self, values: dict | None) -> None:
        if values is None:
            return
        screen = self.screen
        if not isinstance(screen, EntityScreen):
            return
        row = screen.get_current_row()
        if row is None:
            return
        self._delete_row(screen, row, values)

    def _delete_row(self, screen: EntityScreen, row, options: dict) -> None:
        try:
            screen.delete(row, **options)
        except CRMError as e:
            self.notify(str(e), title=f"Cannot delete {screen.ENTITY}", severity="error")
            return
        screen.refresh_rows()
        self.notify(f"{screen.ENTITY.capitalize()} deleted", timeout=2)

    def action_show_activities(self) -> None:
        """List the activities of the selected opportunity."""
        screen = self.screen
        if not isinstance(screen, OpportunitiesScreen) or self.user is None:
            return
        opportunity = screen.get_current_row()
        if opportunity is None:
            return
        activities = self.api.activities.list_for_opportunity(self.user, opportunity.id)
        self.push_screen(OpportunityActivitiesModal(opportunity, activities))

    # Contact reports
    def action_preview_report(self) -> None:
        """Show the report of the selected contact."""
        screen = self.screen
        if not isinstance(screen, ContactsScreen):
            return
        contact = screen.get_current_row()
        if contact is None:
            return
        self.push_screen(  # pyrefly: ignore[no-matching-overload]
            ReportPreviewModal(contact, contact.account_name),
            callback=self._handle_preview_result,
        )

    def on_data_table_row_selected(self, event) -> None:
        """Enter on a contact row opens its report."""
        if isinstance(self.screen, ContactsScreen):
            self.action_preview_report()

    def _handle_preview_result(self, generate_requested: bool) -> None:
        if generate_requested:
            self.action_generate_report()

    def action_generate_report(self) -> None:
        """Generate the AI report of the selected contact."""
        screen = self.screen
        if not isinstance(screen, ContactsScreen):
            return
        contact = screen.get_current_row()
        if contact is None:
            return
        try:
            self.api.contacts.generate_report(contact.id)
        except CRMError as e:
            self.notify(str(e), title="Report not generated", severity="error")
            return
        screen.refresh_rows(focus_id=contact.id)
        self.notify(f"Report generated for {contact.full_name}", timeout=2)
        self.action_preview_report()


def run(api: DataAPI | None = None, settings: Settings | None = None) -> None:
    """Run the crmlight application."""
    app = CrmApp(api, settings)
    try:
        app.run()
    finally:
        app.api.close()

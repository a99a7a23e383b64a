"""Tests for app action handlers.

These tests verify that record actions reach the services and that the
user gets a notification for every outcome, including failures.
"""

from unittest.mock import MagicMock, PropertyMock, patch

import pytest

from crmlight.app import ENTITY_SCREENS, CrmApp
from crmlight.models import UserView
from crmlight.services import DuplicateError, ReportGenerationError, RoleError
from crmlight.ui.screens import (
    AgentsScreen,
    ContactsScreen,
    CoordinatorsScreen,
    DashboardScreen,
    EntityScreen,
    OpportunitiesScreen,
    UsersScreen,
)
from crmlight.ui.widgets import FormField
from crmlight.ui.widgets.opportunity_activities_modal import activity_cells


def make_app() -> CrmApp:
    app = CrmApp.__new__(CrmApp)
    app.notify = MagicMock()
    app.push_screen = MagicMock()
    app.switch_screen = MagicMock()
    app.api = MagicMock()
    app.user = None
    return app


def make_user(**roles) -> UserView:
    return UserView(id="2", first_name="Juan", email="j@example.com", username="j", **roles)


def entity_screen(spec=EntityScreen, entity: str = "account") -> MagicMock:
    screen = MagicMock(spec=spec)
    screen.ENTITY = entity
    screen.delete_fields.return_value = []
    return screen


def on_screen(screen):
    return patch.object(CrmApp, "screen", new_callable=PropertyMock, return_value=screen)


class TestCreateRecord:
    """Tests for the create form callback."""

    def test_cancelled_form_does_nothing(self):
        app = make_app()
        screen = entity_screen()

        with on_screen(screen):
            app._handle_new_result(None)

        screen.save.assert_not_called()
        app.notify.assert_not_called()

    def test_success_focuses_new_row(self):
        app = make_app()
        screen = entity_screen()
        screen.save.return_value = MagicMock(id="36")

        with on_screen(screen):
            app._handle_new_result({"name": "Acme"})

        screen.save.assert_called_once_with({"name": "Acme"}, None)
        screen.refresh_rows.assert_called_once_with(focus_id="36")
        app.notify.assert_called_once_with("Account created", timeout=2)

    def test_service_error_is_notified(self):
        app = make_app()
        screen = entity_screen()
        screen.save.side_effect = DuplicateError('An account with tax id "X" already exists.')

        with on_screen(screen):
            app._handle_new_result({"tax_id": "X"})

        screen.refresh_rows.assert_not_called()
        app.notify.assert_called_once_with(
            'An account with tax id "X" already exists.',
            title="Cannot create account",
            severity="error",
        )

    def test_new_record_opens_form(self):
        app = make_app()
        screen = entity_screen()
        screen.form_fields.return_value = []

        with on_screen(screen), patch("crmlight.app.FormModal") as modal:
            app.action_new_record()

        modal.assert_called_once_with("New account", [])

        screen.form_fields.assert_called_once_with(None)
        app.push_screen.assert_called_once()

    def test_ignored_outside_tables(self):
        app = make_app()

        with on_screen(MagicMock(spec=DashboardScreen)):
            app.action_new_record()

        app.push_screen.assert_not_called()


class TestEditRecord:
    def test_success(self):
        app = make_app()
        screen = entity_screen(entity="opportunity")
        row = MagicMock(id="3")
        screen.get_current_row.return_value = row

        with on_screen(screen):
            app._handle_edit_result({"amount": "10"})

        screen.save.assert_called_once_with({"amount": "10"}, row)
        screen.refresh_rows.assert_called_once_with(focus_id="3")
        app.notify.assert_called_once_with("Opportunity updated", timeout=2)

    def test_no_row_selected(self):
        app = make_app()
        screen = entity_screen()
        screen.get_current_row.return_value = None

        with on_screen(screen):
            app.action_edit_record()

        app.push_screen.assert_not_called()


class TestDeleteRecord:
    def test_not_confirmed(self):
        app = make_app()
        screen = entity_screen()

        with on_screen(screen):
            app._handle_delete_confirm(False)

        screen.delete.assert_not_called()

    def test_confirmed(self):
        app = make_app()
        screen = entity_screen(entity="contact")
        row = MagicMock(id="1")
        screen.get_current_row.return_value = row

        with on_screen(screen):
            app._handle_delete_confirm(True)

        screen.delete.assert_called_once_with(row)
        app.notify.assert_called_once_with("Contact deleted", timeout=2)

    def test_last_admin_error(self):
        app = make_app()
        screen = entity_screen(spec=UsersScreen, entity="user")
        screen.delete.side_effect = RoleError("The last administrator cannot be deleted.")

        with on_screen(screen):
            app._handle_delete_confirm(True)

        screen.refresh_rows.assert_not_called()
        assert app.notify.call_args.kwargs["severity"] == "error"

    def test_confirmed_with_options_asks_first(self):
        app = make_app()
        screen = entity_screen(spec=CoordinatorsScreen, entity="coordinator")
        screen.get_current_row.return_value = MagicMock(id="1")
        fields = [FormField("reassign_to", "Move the team to", kind="select")]
        screen.delete_fields.return_value = fields
        screen.describe.return_value = "Carlos Sánchez (csanchez)"

        with on_screen(screen), patch("crmlight.app.FormModal") as modal:
            app._handle_delete_confirm(True)

        modal.assert_called_once_with("Delete coordinator: Carlos Sánchez (csanchez)", fields)
        app.push_screen.assert_called_once()
        screen.delete.assert_not_called()

    def test_options_passed_to_delete(self):
        app = make_app()
        screen = entity_screen(spec=CoordinatorsScreen, entity="coordinator")
        row = MagicMock(id="1")
        screen.get_current_row.return_value = row

        with on_screen(screen):
            app._handle_delete_options({"reassign_to": "2"})

        screen.delete.assert_called_once_with(row, reassign_to="2")
        screen.refresh_rows.assert_called_once_with()
        app.notify.assert_called_once_with("Coordinator deleted", timeout=2)

    def test_cancelled_options_keep_record(self):
        app = make_app()
        screen = entity_screen(spec=CoordinatorsScreen, entity="coordinator")

        with on_screen(screen):
            app._handle_delete_options(None)

        screen.delete.assert_not_called()
        app.notify.assert_not_called()

class TestViews:
    def test_admin_only_view_for_agent(self):
        app = make_app()
        app.user = make_user(is_agent=True)

        with on_screen(MagicMock(spec=DashboardScreen)):
            app.action_view("users")

        app.switch_screen.assert_not_called()
        assert app.notify.call_args.kwargs["severity"] == "warning"

    @pytest.mark.parametrize("name", ["agents", "coordinators"])
    def test_role_views_are_admin_only(self, name):
        app = make_app()
        app.user = make_user(is_coordinator=True)

        with on_screen(MagicMock(spec=DashboardScreen)):
            app.action_view(name)

        app.switch_screen.assert_not_called()
        assert ENTITY_SCREENS["agents"] is AgentsScreen
        assert ENTITY_SCREENS["coordinators"] is CoordinatorsScreen

    def test_view_requires_login(self):
        app = make_app()

        with on_screen(MagicMock(spec=DashboardScreen)):
            app.action_view("accounts")

        app.switch_screen.assert_not_called()

    @pytest.mark.parametrize(
        "roles, label",
        [
            ({"is_administrator": True}, "administrator"),
            ({"is_agent": True}, "agent"),
            ({"is_agent": True, "is_coordinator": True}, "coordinator + agent"),
            ({}, "no role"),
        ],
    )
    def test_role_label(self, roles, label):
        assert CrmApp._role_label(make_user(**roles)) == label


class TestOpportunityActivities:
    def test_shows_activities_of_selected_opportunity(self):
        app = make_app()
        app.user = make_user(is_agent=True)
        screen = MagicMock(spec=OpportunitiesScreen)
        opportunity = MagicMock(id="6")
        screen.get_current_row.return_value = opportunity
        activities = [MagicMock(id="14")]
        app.api.activities.list_for_opportunity.return_value = activities

        with on_screen(screen), patch("crmlight.app.OpportunityActivitiesModal") as modal:
            app.action_show_activities()

        app.api.activities.list_for_opportunity.assert_called_once_with(app.user, "6")
        modal.assert_called_once_with(opportunity, activities)
        app.push_screen.assert_called_once_with(modal.return_value)

    def test_only_on_opportunities(self):
        app = make_app()
        app.user = make_user(is_agent=True)

        with on_screen(entity_screen()):
            app.action_show_activities()

        app.push_screen.assert_not_called()

    def test_activity_cells(self, api, admin):
        views = api.activities.list_for_opportunity(admin, "6")
        activity = next(a for a in views if a.id == "14")

        cells = activity_cells(activity)

        assert cells[0] == activity.concept
        assert cells[2] == "Pending"
        assert cells[3] == activity.due_on.isoformat()
        assert cells[4] == ""


class TestReports:
    def test_generate_success_shows_preview(self):
        app = make_app()
        screen = MagicMock(spec=ContactsScreen)
        contact = MagicMock(id="1", full_name="Lucía Martín", account_name="Example Company 1")
        screen.get_current_row.return_value = contact

        with on_screen(screen), patch("crmlight.app.ReportPreviewModal") as modal:
            app.action_generate_report()

        modal.assert_called_once_with(contact, "Example Company 1")
        app.api.contacts.generate_report.assert_called_once_with("1")
        screen.refresh_rows.assert_called_once_with(focus_id="1")
        app.notify.assert_called_once_with("Report generated for Lucía Martín", timeout=2)
        app.push_screen.assert_called_once()

    def test_generate_failure(self):
        app = make_app()
        screen = MagicMock(spec=ContactsScreen)
        screen.get_current_row.return_value = MagicMock(id="1")
        app.api.contacts.generate_report.side_effect = ReportGenerationError(
            "AI reports are not configured."
        )

        with on_screen(screen):
            app.action_generate_report()

        app.notify.assert_called_once_with(
            "AI reports are not configured.", title="Report not generated", severity="error"
        )
        app.push_screen.assert_not_called()

    def test_preview_only_on_contacts(self):
        app = make_app()

        with on_screen(entity_screen()):
            app.action_preview_report()

        app.push_screen.assert_not_called()


class TestResetData:
    def test_confirmed_reset(self):
        app = make_app()

        with on_screen(MagicMock(spec=DashboardScreen)) as screen:
            app._handle_reset_confirm(True)

        app.api.reset.assert_called_once()
        screen.return_value.refresh_data.assert_called_once()
        app.notify.assert_called_once_with("Data reset", timeout=2)

    def test_declined_reset(self):
        app = make_app()
        app._handle_reset_confirm(False)
        app.api.reset.assert_not_called()

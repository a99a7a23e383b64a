"""Table screens listing and editing each kind of CRM record."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, ClassVar

from textual.app import ComposeResult
from textual.screen import Screen
from textual.widgets import DataTable, Footer, Header, Static

from ...models import (
    UNKNOWN,
    ActivityState,
    ActivityType,
    OpportunityChanges,
    OpportunityPhase,
    OpportunityState,
    UserView,
)
from ...services import NotFoundError
from ...utils import format_amount
from ..widgets.form_modal import FormField

if TYPE_CHECKING:
    from ...api import DataAPI

PROMPT_PREVIEW_CHARS = 60


def _enum_options(enum_cls) -> list[tuple[str, str]]:
    return [(member.label, member.value) for member in enum_cls]


class EntityScreen(Screen):
    """
    Base screen showing one kind of record in a DataTable.

    Subclasses describe the columns, the form and how to save or delete a
    row; the app drives create/edit/delete through the modals.
    """

    TITLE: ClassVar[str] = ""
    ENTITY: ClassVar[str] = "record"
    COLUMNS: ClassVar[tuple[str, ...]] = ()
    ADMIN_ONLY: ClassVar[bool] = False

    DEFAULT_CSS = """
    EntityScreen .entity-title {
        text-style: bold;
        color: $primary;
        padding: 0 1;
    }

    EntityScreen DataTable {
        height: 1fr;
    }
    """

    def __init__(self, user: UserView, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.user = user
        self.rows: list[Any] = []

    @property
    def api(self) -> DataAPI:
        return self.app.api  # pyrefly: ignore[missing-attribute]

    def compose(self) -> ComposeResult:
        yield Header()
        yield Static(self.TITLE, id="entity-title", classes="entity-title")
        yield DataTable(id="entity-table", cursor_type="row", zebra_stripes=True)
        yield Footer()

    def on_mount(self) -> None:
        table = self.query_one("#entity-table", DataTable)
        table.add_columns(*self.COLUMNS)
        self.refresh_rows()
        table.focus()

    def refresh_rows(self, focus_id: str | None = None) -> None:
        """Reload rows from the services, keeping or moving the cursor."""
        table = self.query_one("#entity-table", DataTable)
        previous = table.cursor_row
        self.rows = self.load_rows()
        table.clear()
        for row in self.rows:
            table.add_row(*(str(cell) for cell in self.row_cells(row)), key=row.id)
        self.query_one("#entity-title", Static).update(f"{self.TITLE} ({len(self.rows)})")

        if not self.rows:
            return
        target = previous
        if focus_id is not None:
            target = next((i for i, r in enumerate(self.rows) if r.id == focus_id), previous)
        table.move_cursor(row=max(0, min(target, len(self.rows) - 1)))

    def get_current_row(self) -> Any | None:
        """The record under the cursor, if any."""
        if not self.rows:
            return None
        index = self.query_one("#entity-table", DataTable).cursor_row
        if 0 <= index < len(self.rows):
            return self.rows[index]
        return None

    # --- Hooks ---

    def load_rows(self) -> list[Any]:
        raise NotImplementedError

    def row_cells(self, row: Any) -> tuple:
        raise NotImplementedError

    def form_fields(self, row: Any | None) -> list[FormField]:
        raise NotImplementedError

    def save(self, values: dict[str, Any], row: Any | None) -> Any:
        """Create (row is None) or update a record from form values."""
        raise NotImplementedError

    def delete(self, row: Any, **options: Any) -> None:
        """Delete a record; options come from delete_fields."""
        raise NotImplementedError

    def describe(self, row: Any) -> str:
        return str(row.id)

    def delete_detail(self, row: Any) -> str | None:
        """Consequences of deleting the row, shown in the confirmation."""
        return None

    def delete_fields(self, row: Any) -> list[FormField]:
        """Choices asked for once a delete is confirmed; empty means none."""
        return []


class AccountsScreen(EntityScreen):
    TITLE = "Accounts"
    ENTITY = "account"
    COLUMNS = ("Name", "Tax id", "City", "Email", "Phone")

    def load_rows(self) -> list[Any]:
        return self.api.accounts.list_accounts()

    def row_cells(self, row: Any) -> tuple:
        return (row.name, row.tax_id, row.city, row.email, row.phone)

    def form_fields(self, row: Any | None) -> list[FormField]:
        def value(name: str) -> Any:
            return getattr(row, name) if row else None

        return [
            FormField("name", "Name", value("name"), required=True),
            FormField("tax_id", "Tax id", value("tax_id"), required=True),
            FormField("email", "Email", value("email"), required=True),
            FormField("phone", "Phone", value("phone"), empty=""),
            FormField("address", "Address", value("address"), empty=""),
            FormField("city", "City", value("city"), empty=""),
            FormField("province", "Province", value("province"), empty=""),
            FormField("postal_code", "Postal code", value("postal_code"), empty=""),
            FormField("country", "Country", value("country"), empty=""),
            FormField("website", "Website", value("website")),
        ]

    def save(self, values: dict[str, Any], row: Any | None) -> Any:
        if row is None:
            return self.api.accounts.create_account(**values)
        return self.api.accounts.update_account(row.id, **values)

    def delete(self, row: Any) -> None:
        self.api.accounts.delete_account(row.id)

    def describe(self, row: Any) -> str:
        return row.name

    def delete_detail(self, row: Any) -> str | None:
        return "Its opportunities and activities are deleted; contacts are kept."


class ContactsScreen(EntityScreen):
    TITLE = "Contacts"
    ENTITY = "contact"
    COLUMNS = ("Name", "Account", "Email", "Phone", "Job title", "Report")

    def load_rows(self) -> list[Any]:
        return self.api.contacts.list_contacts()

    def row_cells(self, row: Any) -> tuple:
        return (
            row.full_name,
            row.account_name or "-",
            row.email,
            row.phone,
            row.job_title or "",
            "✓" if row.report else "",
        )

    def form_fields(self, row: Any | None) -> list[FormField]:
        def value(name: str) -> Any:
            return getattr(row, name) if row else None

        accounts = [(a.name, a.id) for a in self.api.accounts.list_accounts()]
        return [
            FormField("first_name", "First name", value("first_name"), required=True),
            FormField("last_name", "Last name", value("last_name"), empty=""),
            FormField("email", "Email", value("email"), required=True),
            FormField("phone", "Phone", value("phone"), empty=""),
            FormField("job_title", "Job title", value("job_title")),
            FormField("account_id", "Account", value("account_id"), kind="select", options=accounts),
        ]

    def save(self, values: dict[str, Any], row: Any | None) -> Any:
        if row is None:
            return self.api.contacts.create_contact(**values)
        return self.api.contacts.update_contact(row.id, **values)

    def delete(self, row: Any) -> None:
        self.api.contacts.delete_contact(row.id)

    def describe(self, row: Any) -> str:
        return row.full_name


class OpportunitiesScreen(EntityScreen):
    TITLE = "Opportunities"
    ENTITY = "opportunity"
    COLUMNS = ("Concept", "Account", "Agent", "Phase", "State", "Amount", "Due", "Closed")

    def load_rows(self) -> list[Any]:
        return self.api.opportunities.list_for_user(self.user)

    def row_cells(self, row: Any) -> tuple:
        return (
            row.concept,
            row.account_name,
            row.agent_name,
            row.phase.label,
            row.state.label,
            format_amount(row.amount),
            row.due_on.isoformat(),
            row.closed_on.isoformat() if row.closed_on else "",
        )

    def form_fields(self, row: Any | None) -> list[FormField]:
        def value(name: str, default: Any = None) -> Any:
            return getattr(row, name) if row else default

        accounts = [(a.name, a.id) for a in self.api.accounts.list_accounts()]
        agents = [(a.full_name, a.agent_id) for a in self.api.users.list_agents()]
        own_agent = self.api.visibility.agent_id_for(self.user)
        return [
            FormField("concept", "Concept", value("concept"), required=True),
            FormField("account_id", "Account", value("account_id"), "select", accounts, True),
            FormField("agent_id", "Agent", value("agent_id", own_agent), "select", agents, True),
            FormField("amount", "Amount", value("amount", 0), kind="number", required=True),
            FormField(
                "phase",
                "Phase",
                value("phase", OpportunityPhase.DETECTION),
                "select",
                _enum_options(OpportunityPhase),
                True,
            ),
            FormField(
                "state",
                "State",
                value("state", OpportunityState.AWAITING_CLIENT),
                "select",
                _enum_options(OpportunityState),
                True,
            ),
            FormField("due_on", "Due date", value("due_on"), kind="date", required=True),
            FormField("contact_ids", "Contact ids", value("contact_ids", []), kind="list"),
            FormField("description", "Description", value("description")),
        ]

    def save(self, values: dict[str, Any], row: Any | None) -> Any:
        if row is None:
            return self.api.opportunities.create_opportunity(**values)
        return self.api.opportunities.update_opportunity(row.id, **values)

    def delete(self, row: Any) -> None:
        self.api.opportunities.delete_opportunity(row.id)

    def describe(self, row: Any) -> str:
        return row.concept

    def delete_detail(self, row: Any) -> str | None:
        return "Its activities are deleted too."


class ActivitiesScreen(EntityScreen):
    TITLE = "Activities"
    ENTITY = "activity"
    COLUMNS = ("Concept", "Opportunity", "Account", "Agent", "Type", "State", "Due", "Finished")

    def load_rows(self) -> list[Any]:
        return self.api.activities.list_for_user(self.user)

    def row_cells(self, row: Any) -> tuple:
        return (
            row.concept,
            row.opportunity_concept,
            row.account_name,
            row.agent_name,
            row.type.label,
            row.state.label,
            row.due_on.isoformat(),
            row.finished_on.isoformat() if row.finished_on else "",
        )

    def form_fields(self, row: Any | None) -> list[FormField]:
        def value(name: str, default: Any = None) -> Any:
            return getattr(row, name) if row else default

        opportunities = [
            (f"{o.concept} ({o.account_name})", o.id)
            for o in self.api.opportunities.list_for_user(self.user)
        ]
        agents = [(a.full_name, a.agent_id) for a in self.api.users.list_agents()]
        own_agent = self.api.visibility.agent_id_for(self.user)
        return [
            FormField("concept", "Concept", value("concept"), required=True),
            FormField(
                "opportunity_id",
                "Opportunity",
                value("opportunity_id"),
                "select",
                opportunities,
                True,
            ),
            FormField("agent_id", "Agent", value("agent_id", own_agent), "select", agents, True),
            FormField(
                "type",
                "Type",
                value("type", ActivityType.COMMUNICATION),
                "select",
                _enum_options(ActivityType),
                True,
            ),
            FormField(
                "state",
                "State",
                value("state", ActivityState.PENDING),
                "select",
                _enum_options(ActivityState),
                True,
            ),
            FormField("due_on", "Due date", value("due_on"), kind="date", required=True),
            FormField("notes", "Notes", value("notes")),
            FormField("expectation", "Expectation", value("expectation")),
            FormField(
                "new_phase",
                "Move opportunity to phase",
                kind="select",
                options=_enum_options(OpportunityPhase),
            ),
            FormField(
                "new_state",
                "Set opportunity state",
                kind="select",
                options=_enum_options(OpportunityState),
            ),
        ]

    def save(self, values: dict[str, Any], row: Any | None) -> Any:
        changes = OpportunityChanges(
            phase=values.pop("new_phase", None),
            state=values.pop("new_state", None),
        )
        opportunity_changes = None if changes.is_empty else changes
        if row is None:
            return self.api.activities.create_activity(
                **values, opportunity_changes=opportunity_changes
            )
        return self.api.activities.update_activity(
            row.id, opportunity_changes=opportunity_changes, **values
        )

    def delete(self, row: Any) -> None:
        self.api.activities.delete_activity(row.id)

    def describe(self, row: Any) -> str:
        return row.concept


class UsersScreen(EntityScreen):
    TITLE = "Users"
    ENTITY = "user"
    COLUMNS = ("Name", "Username", "Email", "Mobile", "Admin", "Agent", "Coordinator")
    ADMIN_ONLY = True

    def load_rows(self) -> list[Any]:
        return self.api.users.list_users()

    def row_cells(self, row: Any) -> tuple:
        def mark(flag: bool) -> str:
            return "✓" if flag else ""

        return (
            row.full_name,
            row.username,
            row.email,
            row.mobile,
            mark(row.is_administrator),
            mark(row.is_agent),
            mark(row.is_coordinator),
        )

    def form_fields(self, row: Any | None) -> list[FormField]:
        def value(name: str, default: Any = None) -> Any:
            return getattr(row, name) if row else default

        coordinators = [(c.full_name, c.coordinator_id) for c in self.api.users.list_coordinators()]
        agent = self.api.users.get_agent_for_user(row.id) if row else None
        return [
            FormField("first_name", "First name", value("first_name"), required=True),
            FormField("last_name", "Last name", value("last_name"), empty=""),
            FormField("email", "Email", value("email"), required=True),
            FormField("username", "Username", value("username"), required=True),
            FormField("mobile", "Mobile", value("mobile"), empty=""),
            FormField("password", "Password", kind="password", required=row is None),
            FormField("is_administrator", "Administrator", value("is_administrator", False), "bool"),
            FormField("is_agent", "Agent", value("is_agent", False), "bool"),
            FormField("is_coordinator", "Coordinator", value("is_coordinator", False), "bool"),
            FormField(
                "coordinator_id",
                "Agent's coordinator",
                agent.coordinator_id if agent else None,
                "select",
                coordinators,
            ),
        ]

    def save(self, values: dict[str, Any], row: Any | None) -> Any:
        coordinator_id = values.pop("coordinator_id", None)
        if row is None:
            if not values.get("is_agent"):
                coordinator_id = None
            return self.api.users.create_user(**values, coordinator_id=coordinator_id)

        # The form opens with the current link; only an edited value is applied
        before = self.api.users.get_agent_for_user(row.id)
        opened_with = before.coordinator_id if before else None
        promoted = values.get("is_coordinator") and not row.is_coordinator

        user = self.api.users.update_user(row.id, **values)
        agent = self.api.users.get_agent_for_user(row.id)
        if agent is not None and not promoted and coordinator_id != opened_with:
            self.api.users.update_agent(agent.id, coordinator_id)
        return user

    def delete(self, row: Any) -> None:
        self.api.users.delete_user(row.id)

    def describe(self, row: Any) -> str:
        return f"{row.full_name} ({row.username})"

    def delete_detail(self, row: Any) -> str | None:
        if row.is_agent:
            return "The agent's portfolio, opportunities and activities are deleted too."
        return None


def _profile_fields(row: Any) -> list[FormField]:
    """Profile inputs of the user behind an agent or coordinator row."""
    return [
        FormField("first_name", "First name", row.first_name, required=True),
        FormField("last_name", "Last name", row.last_name, empty=""),
        FormField("email", "Email", row.email, required=True),
        FormField("username", "Username", row.username, required=True),
        FormField("mobile", "Mobile", row.mobile, empty=""),
        FormField("password", "New password", kind="password"),
    ]


class AgentsScreen(EntityScreen):
    TITLE = "Agents"
    ENTITY = "agent"
    COLUMNS = ("Name", "Username", "Email", "Mobile", "Coordinator")
    ADMIN_ONLY = True

    def __init__(self, user: UserView, *args, **kwargs) -> None:
        super().__init__(user, *args, **kwargs)
        self._coordinator_names: dict[str, str] = {}

    def load_rows(self) -> list[Any]:
        self._coordinator_names = {
            c.coordinator_id: c.full_name for c in self.api.users.list_coordinators()
        }
        return self.api.users.list_agents()

    def row_cells(self, row: Any) -> tuple:
        if row.coordinator_id is None:
            coordinator = "-"
        else:
            coordinator = self._coordinator_names.get(row.coordinator_id, UNKNOWN)
        return (row.full_name, row.username, row.email, row.mobile, coordinator)

    def form_fields(self, row: Any | None) -> list[FormField]:
        coordinators = [(c.full_name, c.coordinator_id) for c in self.api.users.list_coordinators()]
        coordinator = FormField(
            "coordinator_id",
            "Coordinator",
            row.coordinator_id if row else None,
            "select",
            coordinators,
        )
        if row is not None:
            return [*_profile_fields(row), coordinator]

        candidates = [
            (f"{u.full_name} ({u.username})", u.id)
            for u in self.api.users.list_users()
            if not u.is_agent and not u.is_administrator
        ]
        return [FormField("user_id", "User", None, "select", candidates, True), coordinator]

    def save(self, values: dict[str, Any], row: Any | None) -> Any:
        coordinator_id = values.pop("coordinator_id", None)
        if row is None:
            return self.api.users.create_agent(values["user_id"], coordinator_id)

        self.api.users.update_user(row.user_id, **values)
        if coordinator_id != row.coordinator_id:
            self.api.users.update_agent(row.agent_id, coordinator_id)
        return row

    def delete(self, row: Any) -> None:
        if not self.api.users.delete_agent_role(row.agent_id):
            raise NotFoundError(f'Agent "{row.agent_id}" not found.')

    def describe(self, row: Any) -> str:
        return f"{row.full_name} ({row.username})"

    def delete_detail(self, row: Any) -> str | None:
        return (
            "The agent's portfolio, opportunities and activities are deleted. "
            "A user left without roles is removed."
        )


class CoordinatorsScreen(EntityScreen):
    TITLE = "Coordinators"
    ENTITY = "coordinator"
    COLUMNS = ("Name", "Username", "Email", "Mobile", "Team")
    ADMIN_ONLY = True

    def load_rows(self) -> list[Any]:
        return self.api.users.list_coordinators()

    def row_cells(self, row: Any) -> tuple:
        team = self.api.users.list_team(row.coordinator_id)
        return (row.full_name, row.username, row.email, row.mobile, len(team))

    def form_fields(self, row: Any | None) -> list[FormField]:
        if row is not None:
            return _profile_fields(row)
        candidates = [
            (f"{u.full_name} ({u.username})", u.id)
            for u in self.api.users.list_users()
            if not u.is_coordinator and not u.is_administrator
        ]
        return [FormField("user_id", "User", None, "select", candidates, True)]

    def save(self, values: dict[str, Any], row: Any | None) -> Any:
        if row is None:
            return self.api.users.create_coordinator(values["user_id"])
        self.api.users.update_user(row.user_id, **values)
        return row

    def delete(self, row: Any, reassign_to: str | None = None) -> None:
        if not self.api.users.delete_coordinator_role(row.coordinator_id, reassign_to=reassign_to):
            raise NotFoundError(f'Coordinator "{row.coordinator_id}" not found.')

    def describe(self, row: Any) -> str:
        return f"{row.full_name} ({row.username})"

    def delete_detail(self, row: Any) -> str | None:
        return (
            "The team is left without a coordinator unless it is moved. "
            "A user left without roles is removed."
        )

    def delete_fields(self, row: Any) -> list[FormField]:
        team = self.api.users.list_team(row.coordinator_id)
        others = [
            (c.full_name, c.coordinator_id)
            for c in self.api.users.list_coordinators()
            if c.coordinator_id != row.coordinator_id
        ]
        if not team or not others:
            return []
        return [
            FormField(
                "reassign_to",
                f"Move the team ({len(team)} agents) to",
                kind="select",
                options=others,
            )
        ]


class AIAgentsScreen(EntityScreen):
    TITLE = "AI agents"
    ENTITY = "AI agent"
    COLUMNS = ("Name", "Prompt")
    ADMIN_ONLY = True

    def load_rows(self) -> list[Any]:
        return self.api.ai_agents.list_agents()

    def row_cells(self, row: Any) -> tuple:
        prompt = " ".join(row.prompt.split())
        if len(prompt) > PROMPT_PREVIEW_CHARS:
            prompt = prompt[: PROMPT_PREVIEW_CHARS - 1] + "…"
        return (row.name, prompt)

    def form_fields(self, row: Any | None) -> list[FormField]:
        return [
            FormField("name", "Name", row.name if row else None, required=True),
            FormField("prompt", "Prompt", row.prompt if row else None, required=True),
        ]

    def save(self, values: dict[str, Any], row: Any | None) -> Any:
        if row is None:
            return self.api.ai_agents.create_agent(**values)
        return self.api.ai_agents.update_agent(row.id, **values)

    def delete(self, row: Any) -> None:
        self.api.ai_agents.delete_agent(row.id)

    def describe(self, row: Any) -> str:
        return row.name

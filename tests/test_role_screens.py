"""Tests for the agent and coordinator tables against the demo data."""

from unittest.mock import MagicMock

import pytest

from crmlight.api import DataAPI
from crmlight.services import NotFoundError
from crmlight.ui.screens import AgentsScreen, CoordinatorsScreen


@pytest.fixture
def screen(api: DataAPI) -> MagicMock:
    """Stand-in for a mounted screen; hooks run unbound against it."""
    mock = MagicMock()
    mock.api = api
    return mock


def agent_row(api: DataAPI, agent_id: str):
    return next(a for a in api.users.list_agents() if a.agent_id == agent_id)


def coordinator_row(api: DataAPI, coordinator_id: str):
    return next(c for c in api.users.list_coordinators() if c.coordinator_id == coordinator_id)


def form_values(screen_cls, screen, row) -> dict:
    return {f.name: f.value for f in screen_cls.form_fields(screen, row)}


class TestAgentsScreen:
    def test_rows_show_coordinator_name(self, screen, api: DataAPI):
        rows = AgentsScreen.load_rows(screen)

        cells = AgentsScreen.row_cells(screen, rows[0])

        assert rows[0].id == rows[0].agent_id
        assert cells[0] == "Juan Pérez"
        assert cells[-1] == "Carlos Sánchez"

    def test_unassigned_agent(self, screen, api: DataAPI):
        api.users.update_agent("2", None)
        rows = AgentsScreen.load_rows(screen)

        assert AgentsScreen.row_cells(screen, rows[1])[-1] == "-"

    def test_new_form_offers_users_without_agent_role(self, screen, api: DataAPI):
        eva = api.users.create_user("Eva", "eva@example.com", "eva")

        user_field = AgentsScreen.form_fields(screen, None)[0]

        assert user_field.name == "user_id"
        assert [value for _, value in user_field.options] == ["4", eva.id]

    def test_create_with_coordinator(self, screen, api: DataAPI):
        eva = api.users.create_user("Eva", "eva@example.com", "eva")

        agent = AgentsScreen.save(screen, {"user_id": eva.id, "coordinator_id": "1"}, None)

        assert agent.user_id == eva.id
        assert agent.coordinator_id == "1"
        assert api.users.get_user_view(eva.id).is_agent

    def test_edit_unassigns_coordinator(self, screen, api: DataAPI):
        row = agent_row(api, "1")
        values = form_values(AgentsScreen, screen, row)
        values["coordinator_id"] = None

        AgentsScreen.save(screen, values, row)

        assert api.users.get_agent("1").coordinator_id is None

    def test_edit_profile_keeps_coordinator(self, screen, api: DataAPI):
        row = agent_row(api, "1")
        values = form_values(AgentsScreen, screen, row)
        values["mobile"] = "611111111"

        AgentsScreen.save(screen, values, row)

        assert api.users.get_user("2").mobile == "611111111"
        assert api.users.get_agent("1").coordinator_id == "1"

    def test_delete_removes_role_and_roleless_user(self, screen, api: DataAPI):
        row = agent_row(api, "1")

        AgentsScreen.delete(screen, row)

        assert api.users.get_agent("1") is None
        assert api.users.get_user("2") is None

    def test_delete_missing(self, screen, api: DataAPI):
        row = agent_row(api, "1")
        AgentsScreen.delete(screen, row)

        with pytest.raises(NotFoundError):
            AgentsScreen.delete(screen, row)


class TestCoordinatorsScreen:
    def test_team_size(self, screen, api: DataAPI):
        row = coordinator_row(api, "1")
        assert CoordinatorsScreen.row_cells(screen, row)[-1] == 2

    def test_create(self, screen, api: DataAPI):
        coordinator = CoordinatorsScreen.save(screen, {"user_id": "2"}, None)

        assert coordinator.user_id == "2"
        assert api.users.get_user_view("2").is_coordinator

    def test_edit_updates_profile(self, screen, api: DataAPI):
        row = coordinator_row(api, "1")
        values = form_values(CoordinatorsScreen, screen, row)
        values["last_name"] = "Sanz"

        CoordinatorsScreen.save(screen, values, row)

        assert api.users.get_user("4").last_name == "Sanz"

    def test_no_reassignment_choice_without_other_coordinators(self, screen, api: DataAPI):
        row = coordinator_row(api, "1")
        assert CoordinatorsScreen.delete_fields(screen, row) == []

    def test_reassignment_choice_lists_other_coordinators(self, screen, api: DataAPI):
        other = api.users.create_user("Eva", "eva@example.com", "eva", is_coordinator=True)
        other_id = api.users.get_coordinator_for_user(other.id).id
        row = coordinator_row(api, "1")

        fields = CoordinatorsScreen.delete_fields(screen, row)

        assert [f.name for f in fields] == ["reassign_to"]
        assert fields[0].options == [("Eva", other_id)]

    def test_delete_moves_team(self, screen, api: DataAPI):
        other = api.users.create_user("Eva", "eva@example.com", "eva", is_coordinator=True)
        other_id = api.users.get_coordinator_for_user(other.id).id

        CoordinatorsScreen.delete(screen, coordinator_row(api, "1"), reassign_to=other_id)

        assert [a.agent_id for a in api.users.list_team(other_id)] == ["1", "2"]
        assert api.users.get_user("4") is None

    def test_delete_without_reassignment_unassigns_team(self, screen, api: DataAPI):
        CoordinatorsScreen.delete(screen, coordinator_row(api, "1"))

        assert all(a.coordinator_id is None for a in api.users.list_agents())

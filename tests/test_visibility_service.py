"""Tests for role-based visibility."""

from crmlight.api import DataAPI
from crmlight.models import User
from crmlight.services import VisibilityService


def visible_ids(visibility: VisibilityService, user: User) -> set[str]:
    return {o.id for o in visibility.visible_opportunities(user)}


class TestVisibleOpportunities:
    """Who sees which opportunities."""

    def test_admin_sees_everything(self, api: DataAPI, admin: User):
        assert api.visibility.visible_agent_ids(admin) is None
        assert len(visible_ids(api.visibility, admin)) == 11

    def test_agent_sees_own(self, api: DataAPI, other_agent_user: User):
        assert visible_ids(api.visibility, other_agent_user) == {"4", "5", "7", "9", "11"}

    def test_coordinator_sees_team(self, api: DataAPI, coordinator_user: User):
        assert api.visibility.visible_agent_ids(coordinator_user) == {"1", "2"}

    def test_coordinator_loses_agent_leaving_team(
        self, api: DataAPI, coordinator_user: User
    ):
        api.users.update_agent("2", None)
        assert visible_ids(api.visibility, coordinator_user) == {"1", "2", "3", "6", "8", "10"}

    def test_agent_and_coordinator_sees_union(self, api: DataAPI, agent_user: User):
        coordinator = api.users.create_coordinator(agent_user.id)
        api.users.update_agent("2", coordinator.id)

        assert api.visibility.visible_agent_ids(agent_user) == {"1", "2"}

    def test_user_without_role_sees_nothing(self, api: DataAPI):
        user = api.users.create_user("Eva", "eva@example.com", "eva")
        assert api.visibility.visible_opportunities(user) == []

    def test_roles_read_from_tables(self, api: DataAPI, agent_user: User):
        forged = agent_user.model_copy(update={"is_administrator": True})
        assert not api.visibility.is_administrator(forged)
        assert api.visibility.visible_agent_ids(forged) == {"1"}


class TestCanSeeOpportunity:
    def test_own_and_foreign(self, api: DataAPI, agent_user: User):
        assert api.visibility.can_see_opportunity(agent_user, "1")
        assert not api.visibility.can_see_opportunity(agent_user, "7")

    def test_missing_opportunity(self, api: DataAPI, admin: User):
        assert not api.visibility.can_see_opportunity(admin, "99")

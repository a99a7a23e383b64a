"""Tests for ActivityService and opportunity changes carried by activities."""

from datetime import date

import pytest

from crmlight.api import DataAPI
from crmlight.models import ActivityState, OpportunityChanges, OpportunityState, User
from crmlight.services import (
    ActivityService,
    IntegrityError,
    NotFoundError,
    ValidationError,
)


@pytest.fixture
def activities(api: DataAPI) -> ActivityService:
    return api.activities


class TestListing:
    def test_agent_sees_activities_of_own_opportunities(
        self, activities: ActivityService, agent_user: User
    ):
        ids = {a.id for a in activities.list_for_user(agent_user)}
        assert ids == {"1", "2", "3", "4", "9", "11", "13", "14"}

    def test_coordinator_sees_all_team_activities(
        self, activities: ActivityService, coordinator_user: User
    ):
        assert len(activities.list_for_user(coordinator_user)) == 14

    def test_view_names(self, activities: ActivityService, admin: User):
        view = next(a for a in activities.list_for_user(admin) if a.id == "8")
        assert view.opportunity_concept == "Mobile app development"
        assert view.account_name == "Example Company 6"
        assert view.agent_name == "Ana García"

    def test_for_opportunity(self, activities: ActivityService, agent_user: User):
        assert [a.id for a in activities.list_for_opportunity(agent_user, "6")] == ["13", "14"]

    def test_for_hidden_opportunity(self, activities: ActivityService, agent_user: User):
        assert activities.list_for_opportunity(agent_user, "7") == []


class TestCreateActivity:
    def test_pending(self, activities: ActivityService):
        activity = activities.create_activity("1", "1", "Call back", "2030-01-01")

        assert activity.id == "15"
        assert activity.created_on == date.today()
        assert activity.state == ActivityState.PENDING
        assert activity.finished_on is None

    def test_completed_gets_finish_date(self, activities: ActivityService):
        activity = activities.create_activity(
            "1", "1", "Done already", date.today(), state="completed"
        )
        assert activity.finished_on == date.today()

    def test_missing_references(self, activities: ActivityService):
        with pytest.raises(IntegrityError):
            activities.create_activity("99", "1", "X", "2030-01-01")
        with pytest.raises(IntegrityError):
            activities.create_activity("1", "9", "X", "2030-01-01")

    def test_unknown_state(self, activities: ActivityService):
        with pytest.raises(ValidationError):
            activities.create_activity("1", "1", "X", "2030-01-01", state="paused")

    def test_completed_applies_opportunity_changes(
        self, activities: ActivityService, api: DataAPI
    ):
        activities.create_activity(
            "1",
            "1",
            "Order received",
            date.today(),
            state="completed",
            opportunity_changes={"phase": "request", "state": "won"},
        )

        opportunity = api.opportunities.get_opportunity("1")
        assert opportunity.state == OpportunityState.WON
        assert opportunity.closed_on == date.today()

    def test_pending_ignores_opportunity_changes(
        self, activities: ActivityService, api: DataAPI
    ):
        activities.create_activity(
            "1",
            "1",
            "Later",
            "2030-01-01",
            opportunity_changes=OpportunityChanges(state="cancelled"),
        )
        assert api.opportunities.get_opportunity("1").state == OpportunityState.AWAITING_CLIENT

    def test_invalid_changes_write_nothing(self, activities: ActivityService, api: DataAPI):
        count = len(api.repository.activities)

        with pytest.raises(ValidationError):
            activities.create_activity(
                "1",
                "1",
                "Won?",
                date.today(),
                state="completed",
                opportunity_changes={"state": "won"},
            )

        assert len(api.repository.activities) == count
        assert api.opportunities.get_opportunity("1").state == OpportunityState.AWAITING_CLIENT

    def test_changes_are_not_stored(self, activities: ActivityService):
        activity = activities.create_activity(
            "1",
            "1",
            "Cancel",
            date.today(),
            state="completed",
            opportunity_changes={"state": "cancelled"},
        )
        assert not hasattr(activity, "opportunity_changes")


class TestUpdateActivity:
    def test_complete_stamps_finish_date(self, activities: ActivityService):
        activity = activities.update_activity("2", state="completed")
        assert activity.finished_on == date.today()

    def test_back_to_pending_clears_finish_date(self, activities: ActivityService):
        activity = activities.update_activity("1", state="pending")
        assert activity.finished_on is None

    def test_cancel_keeps_existing_finish_date(self, activities: ActivityService):
        finished_on = activities.get_activity("1").finished_on
        activity = activities.update_activity("1", state="cancelled")
        assert activity.finished_on == finished_on

    def test_completion_moves_opportunity(self, activities: ActivityService, api: DataAPI):
        activities.update_activity(
            "14", state="completed", opportunity_changes={"phase": "communication"}
        )
        opportunity = api.opportunities.get_opportunity("6")
        assert opportunity.phase.value == "communication"
        assert opportunity.state == OpportunityState.AWAITING_CLIENT

    def test_invalid_changes_leave_activity_pending(
        self, activities: ActivityService, api: DataAPI
    ):
        with pytest.raises(ValidationError):
            activities.update_activity(
                "14", state="completed", opportunity_changes={"state": "lost"}
            )
        assert activities.get_activity("14").state == ActivityState.PENDING

    def test_bad_changes_payload(self, activities: ActivityService):
        with pytest.raises(ValidationError):
            activities.update_activity("2", opportunity_changes={"phase": "nowhere"})

    def test_missing(self, activities: ActivityService):
        with pytest.raises(NotFoundError):
            activities.update_activity("99", concept="X")

    def test_unknown_agent(self, activities: ActivityService):
        with pytest.raises(IntegrityError):
            activities.update_activity("2", agent_id="9")

    def test_unknown_field_rejected(self, activities: ActivityService):
        with pytest.raises(ValidationError, match="concpet"):
            activities.update_activity("2", concpet="Call back")

    def test_unknown_opportunity_change_rejected(self, activities: ActivityService):
        with pytest.raises(ValidationError, match="stage"):
            activities.update_activity("2", opportunity_changes={"stage": "won"})


class TestDeleteActivity:
    def test_delete(self, activities: ActivityService):
        activities.delete_activity("1")
        assert activities.get_activity("1") is None

    def test_delete_missing(self, activities: ActivityService):
        with pytest.raises(NotFoundError):
            activities.delete_activity("99")

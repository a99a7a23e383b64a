"""Seed data model for populating the in-memory store."""

from datetime import date, timedelta
from typing import Any

from pydantic import BaseModel, Field, ValidationInfo, model_validator

from .account import Account, Portfolio
from .activity import Activity
from .ai_agent import AIAgent
from .contact import Contact
from .opportunity import Opportunity
from .user import Agent, Coordinator, User

# Date fields that accept a day offset relative to the load date
_DATED_SECTIONS: dict[str, tuple[str, ...]] = {
    "opportunities": ("created_on", "due_on", "closed_on"),
    "activities": ("created_on", "due_on", "finished_on"),
}


def resolve_offset(value: Any, today: date) -> Any:
    """Turn an integer day offset into a date; pass anything else through."""
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return today + timedelta(days=value)
    return value


class SeedData(BaseModel):
    """Complete initial data set.

    Dates in opportunities and activities may be given either as ISO dates or
    as integer offsets in days from the load date (e.g. ``-30``). Pass
    ``context={"today": date}`` when validating to pin the reference date.
    """

    users: list[User] = Field(default_factory=list)
    coordinators: list[Coordinator] = Field(default_factory=list)
    agents: list[Agent] = Field(default_factory=list)
    accounts: list[Account] = Field(default_factory=list)
    contacts: list[Contact] = Field(default_factory=list)
    portfolios: list[Portfolio] = Field(default_factory=list)
    opportunities: list[Opportunity] = Field(default_factory=list)
    activities: list[Activity] = Field(default_factory=list)
    ai_agents: list[AIAgent] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def resolve_relative_dates(cls, data: Any, info: ValidationInfo) -> Any:
        """Convert day offsets to dates before field validation."""
        if not isinstance(data, dict):
            return data
        today = (info.context or {}).get("today") or date.today()

        resolved = dict(data)
        for section, fields in _DATED_SECTIONS.items():
            rows = resolved.get(section)
            if not rows:
                continue
            new_rows = []
            for row in rows:
                if isinstance(row, dict):
                    row = dict(row)
                    for name in fields:
                        if name in row:
                            row[name] = resolve_offset(row[name], today)
                new_rows.append(row)
            resolved[section] = new_rows
        return resolved

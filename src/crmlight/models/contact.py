"""Contact domain model."""

from pydantic import BaseModel, EmailStr, Field, field_validator


class Contact(BaseModel):
    """A person at (optionally) one of the accounts."""

    model_config = {"extra": "forbid"}

    id: str
    account_id: str | None = None
    first_name: str = Field(..., min_length=1)
    last_name: str = ""
    email: EmailStr
    phone: str = ""
    job_title: str | None = None
    report: str = ""  # AI-generated background report

    @field_validator("account_id", mode="before")
    @classmethod
    def empty_account_is_none(cls, v: str | None) -> str | None:
        """An empty selection means the contact has no account."""
        return v or None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


class ContactView(Contact):
    """Contact with the name of its account."""

    account_name: str | None = None

"""Account (customer company) and portfolio models."""

from pydantic import BaseModel, EmailStr, Field


class Account(BaseModel):
    """A customer company."""

    model_config = {"extra": "forbid"}

    id: str
    name: str = Field(..., min_length=1)
    tax_id: str = Field(..., min_length=1)  # CIF/NIF
    address: str = ""
    city: str = ""
    province: str = ""
    postal_code: str = ""
    country: str = ""
    phone: str = ""
    email: EmailStr
    website: str | None = None


class Portfolio(BaseModel):
    """Link between an agent and an account they look after."""

    model_config = {"extra": "forbid"}

    id: str
    agent_id: str
    account_id: str

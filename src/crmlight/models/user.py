"""User and role domain models."""

from pydantic import BaseModel, EmailStr, Field


class User(BaseModel):
    """A person who can log into the CRM."""

    model_config = {"extra": "forbid"}

    id: str
    first_name: str = Field(..., min_length=1)
    last_name: str = ""
    email: EmailStr
    mobile: str = ""
    username: str = Field(..., min_length=1)
    password: str | None = Field(default=None, repr=False)
    is_administrator: bool = False

    @property
    def full_name(self) -> str:
        """First and last name joined for display."""
        return f"{self.first_name} {self.last_name}".strip()


class UserView(User):
    """User with role columns derived from the role tables."""

    is_agent: bool = False
    is_coordinator: bool = False
    is_deletable: bool = True

    @property
    def has_role(self) -> bool:
        return self.is_administrator or self.is_agent or self.is_coordinator


class Agent(BaseModel):
    """Agent role record; an agent may report to one coordinator."""

    model_config = {"extra": "forbid"}

    id: str
    user_id: str
    coordinator_id: str | None = None


class Coordinator(BaseModel):
    """Coordinator role record."""

    model_config = {"extra": "forbid"}

    id: str
    user_id: str


class AgentView(BaseModel):
    """An agent joined with its user row."""

    agent_id: str
    user_id: str
    coordinator_id: str | None = None
    first_name: str
    last_name: str = ""
    email: str
    mobile: str = ""
    username: str

    @property
    def id(self) -> str:
        """Rows are keyed by the agent record."""
        return self.agent_id

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @classmethod
    def join(cls, agent: Agent, user: User) -> "AgentView":
        """Build the view from an agent record and its user."""
        return cls(
            agent_id=agent.id,
            user_id=user.id,
            coordinator_id=agent.coordinator_id,
            first_name=user.first_name,
            last_name=user.last_name,
            email=user.email,
            mobile=user.mobile,
            username=user.username,
        )


class CoordinatorView(BaseModel):
    """A coordinator joined with its user row."""

    coordinator_id: str
    user_id: str
    first_name: str
    last_name: str = ""
    email: str
    mobile: str = ""
    username: str

    @property
    def id(self) -> str:
        return self.coordinator_id

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @classmethod
    def join(cls, coordinator: Coordinator, user: User) -> "CoordinatorView":
        """Build the view from a coordinator record and its user."""
        return cls(
            coordinator_id=coordinator.id,
            user_id=user.id,
            first_name=user.first_name,
            last_name=user.last_name,
            email=user.email,
            mobile=user.mobile,
            username=user.username,
        )

"""Service for users and their agent/coordinator roles."""

from __future__ import annotations

import logging
from typing import Any

from ..models import Agent, AgentView, Coordinator, CoordinatorView, User, UserView
from ..repositories import MemoryRepository
from .errors import (
    AuthenticationError,
    DuplicateError,
    IntegrityError,
    NotFoundError,
    RoleError,
    ValidationError,
    validation_errors,
)

logger = logging.getLogger(__name__)

PROFILE_FIELDS = {"first_name", "last_name", "email", "mobile", "username", "password"}
ROLE_FIELDS = {"is_administrator", "is_agent", "is_coordinator"}


class UserService:
    """
    Service for user CRUD and role management.

    A user can be an administrator, or hold an agent role, a coordinator
    role, or both. Administrators cannot hold the other roles. When deleting
    a role leaves a non-admin user without any role, the user is removed too.
    """

    def __init__(self, repository: MemoryRepository) -> None:
        self.repository = repository

    # --- Users ---

    def list_users(self) -> list[UserView]:
        """All users with their derived role columns."""
        admin_count = self._admin_count()
        return [self._to_view(user, admin_count) for user in self.repository.users]

    def get_user(self, user_id: str) -> User | None:
        return self.repository.users.get(user_id)

    def get_user_view(self, user_id: str) -> UserView | None:
        user = self.repository.users.get(user_id)
        if user is None:
            return None
        return self._to_view(user, self._admin_count())

    def get_user_by_email(self, email: str) -> User | None:
        key = email.strip().lower()
        return self.repository.users.find(lambda u: u.email.lower() == key)

    def get_user_by_username(self, username: str) -> User | None:
        key = username.strip().lower()
        return self.repository.users.find(lambda u: u.username.lower() == key)

    def authenticate(self, email: str, password: str) -> UserView:
        """Check credentials and return the logged-in user.

        Raises:
            AuthenticationError: If the email is unknown or the password is wrong
        """
        user = self.get_user_by_email(email)
        if user is None or user.password is None or user.password != password:
            logger.info("Failed login for %s", email)
            raise AuthenticationError("Invalid email or password.")
        logger.info("User logged in: %s", user.username)
        return self._to_view(user, self._admin_count())

    def create_user(
        self,
        first_name: str,
        email: str,
        username: str,
        last_name: str = "",
        mobile: str = "",
        password: str | None = None,
        is_administrator: bool = False,
        is_agent: bool = False,
        is_coordinator: bool = False,
        coordinator_id: str | None = None,
    ) -> UserView:
        """
        Create a user and the requested roles.

        All checks run before anything is written, so a rejected request
        leaves no partial user behind.
        """
        self._check_unique(username=username, email=email)
        if is_administrator and (is_agent or is_coordinator):
            raise RoleError("An administrator cannot also be an agent or a coordinator.")
        if coordinator_id is not None:
            if not is_agent:
                raise ValidationError("Only agents can be assigned to a coordinator.")
            if not self.repository.coordinators.exists(coordinator_id):
                raise IntegrityError(f'Coordinator "{coordinator_id}" does not exist.')

        with validation_errors():
            user = self.repository.users.insert(
                first_name=first_name,
                last_name=last_name,
                email=email.strip(),
                mobile=mobile,
                username=username.strip(),
                password=password,
                is_administrator=is_administrator,
            )
        if is_coordinator:
            self.create_coordinator(user.id)
        if is_agent:
            self.create_agent(user.id, coordinator_id)

        logger.info(
            "User created: %s (admin=%s, agent=%s, coordinator=%s)",
            user.username,
            is_administrator,
            is_agent,
            is_coordinator,
        )
        return self._to_view(user, self._admin_count())

    def update_user(self, user_id: str, **changes: Any) -> UserView:
        """
        Update profile fields and roles.

        Role flags (is_administrator, is_agent, is_coordinator) are applied as
        desired states. Becoming an administrator strips the other roles.
        Promoting an agent to coordinator unassigns the agent from its own
        coordinator. Roles removed here never delete the user itself.
        An empty password keeps the current one.
        """
        user = self._require_user(user_id)

        unknown = set(changes) - PROFILE_FIELDS - ROLE_FIELDS
        if unknown:
            raise ValidationError(f"Unknown user fields: {', '.join(sorted(unknown))}")

        profile = {k: v for k, v in changes.items() if k in PROFILE_FIELDS}
        if not profile.get("password"):
            profile.pop("password", None)
        self._check_unique(
            username=profile.get("username"),
            email=profile.get("email"),
            exclude_id=user_id,
        )

        agent = self.get_agent_for_user(user_id)
        coordinator = self.get_coordinator_for_user(user_id)
        want_admin = bool(changes.get("is_administrator", user.is_administrator))
        want_coordinator = bool(changes.get("is_coordinator", coordinator is not None))
        want_agent = bool(changes.get("is_agent", agent is not None))

        if user.is_administrator and not want_admin and self._admin_count() == 1:
            raise RoleError("The last administrator cannot lose the administrator role.")

        with validation_errors():
            updated = self.repository.users.update(
                user_id, **profile, is_administrator=want_admin
            )

        if want_admin:
            if agent is not None:
                self.repository.delete_agent(agent.id)
            if coordinator is not None:
                self.repository.delete_coordinator(coordinator.id)
        else:
            if want_coordinator and coordinator is None:
                if agent is not None:
                    self.repository.agents.update(agent.id, coordinator_id=None)
                self.create_coordinator(user_id)
            elif not want_coordinator and coordinator is not None:
                self.repository.delete_coordinator(coordinator.id)

            if want_agent and agent is None:
                self.create_agent(user_id)
            elif not want_agent and agent is not None:
                self.repository.delete_agent(agent.id)

        logger.info("User updated: %s", updated.username)
        return self._to_view(updated, self._admin_count())

    def delete_user(self, user_id: str) -> None:
        """Delete a user and its roles.

        Raises:
            NotFoundError: If the user does not exist
            RoleError: If the user is the last administrator
        """
        user = self._require_user(user_id)
        if not self._to_view(user, self._admin_count()).is_deletable:
            raise RoleError("This user cannot be deleted.")
        self.repository.delete_user(user_id)
        logger.info("User deleted: %s", user.username)

    # --- Agents ---

    def list_agents(self) -> list[AgentView]:
        """Agents joined with their user rows."""
        views = []
        for agent in self.repository.agents:
            user = self.repository.users.get(agent.user_id)
            if user is not None:
                views.append(AgentView.join(agent, user))
        return views

    def get_agent(self, agent_id: str) -> Agent | None:
        return self.repository.agents.get(agent_id)

    def get_agent_for_user(self, user_id: str) -> Agent | None:
        return self.repository.agents.find(lambda a: a.user_id == user_id)

    def create_agent(self, user_id: str, coordinator_id: str | None = None) -> Agent:
        """Give a user the agent role."""
        user = self.repository.users.get(user_id)
        if user is None:
            raise IntegrityError(f'User "{user_id}" does not exist.')
        if user.is_administrator:
            raise RoleError("An administrator cannot have the agent role.")
        if self.get_agent_for_user(user_id) is not None:
            raise RoleError(f'User "{user_id}" is already an agent.')
        if coordinator_id is not None and not self.repository.coordinators.exists(coordinator_id):
            raise IntegrityError(f'Coordinator "{coordinator_id}" does not exist.')

        agent = self.repository.agents.insert(user_id=user_id, coordinator_id=coordinator_id)
        logger.info("Agent role %s granted to user %s", agent.id, user_id)
        return agent

    def update_agent(self, agent_id: str, coordinator_id: str | None) -> Agent:
        """Assign an agent to a coordinator (None unassigns)."""
        if not self.repository.agents.exists(agent_id):
            raise NotFoundError(f'Agent "{agent_id}" not found.')
        if coordinator_id is not None and not self.repository.coordinators.exists(coordinator_id):
            raise IntegrityError(f'Coordinator "{coordinator_id}" does not exist.')
        return self.repository.agents.update(agent_id, coordinator_id=coordinator_id)

    def delete_agent_role(self, agent_id: str) -> bool:
        """
        Remove an agent role with its portfolio and opportunities.

        Returns:
            False if the agent did not exist.
        """
        agent = self.repository.agents.get(agent_id)
        if agent is None:
            return False
        self.repository.delete_agent(agent_id)
        logger.info("Agent role %s removed from user %s", agent_id, agent.user_id)
        self._remove_if_roleless(agent.user_id)
        return True

    # --- Coordinators ---

    def list_coordinators(self) -> list[CoordinatorView]:
        """Coordinators joined with their user rows."""
        views = []
        for coordinator in self.repository.coordinators:
            user = self.repository.users.get(coordinator.user_id)
            if user is not None:
                views.append(CoordinatorView.join(coordinator, user))
        return views

    def get_coordinator(self, coordinator_id: str) -> Coordinator | None:
        return self.repository.coordinators.get(coordinator_id)

    def get_coordinator_for_user(self, user_id: str) -> Coordinator | None:
        return self.repository.coordinators.find(lambda c: c.user_id == user_id)

    def list_team(self, coordinator_id: str) -> list[AgentView]:
        """Agents reporting to a coordinator."""
        return [a for a in self.list_agents() if a.coordinator_id == coordinator_id]

    def create_coordinator(self, user_id: str) -> Coordinator:
        """Give a user the coordinator role."""
        user = self.repository.users.get(user_id)
        if user is None:
            raise IntegrityError(f'User "{user_id}" does not exist.')
        if user.is_administrator:
            raise RoleError("An administrator cannot have the coordinator role.")
        if self.get_coordinator_for_user(user_id) is not None:
            raise RoleError(f'User "{user_id}" is already a coordinator.')

        coordinator = self.repository.coordinators.insert(user_id=user_id)
        logger.info("Coordinator role %s granted to user %s", coordinator.id, user_id)
        return coordinator

    def delete_coordinator_role(
        self, coordinator_id: str, reassign_to: str | None = None
    ) -> bool:
        """
        Remove a coordinator role.

        The team's agents move to reassign_to when given, otherwise they are
        left without a coordinator.

        Returns:
            False if the coordinator did not exist.
        """
        coordinator = self.repository.coordinators.get(coordinator_id)
        if coordinator is None:
            return False
        if reassign_to is not None:
            if reassign_to == coordinator_id:
                raise ValidationError("Agents must be reassigned to a different coordinator.")
            if not self.repository.coordinators.exists(reassign_to):
                raise IntegrityError(f'Coordinator "{reassign_to}" does not exist.')
            for agent in self.repository.agents.filter(
                lambda a: a.coordinator_id == coordinator_id
            ):
                self.repository.agents.update(agent.id, coordinator_id=reassign_to)
            logger.debug("Team of coordinator %s moved to %s", coordinator_id, reassign_to)

        self.repository.delete_coordinator(coordinator_id)
        logger.info("Coordinator role %s removed from user %s", coordinator_id, coordinator.user_id)
        self._remove_if_roleless(coordinator.user_id)
        return True

    # --- Private Methods ---

    def _require_user(self, user_id: str) -> User:
        user = self.repository.users.get(user_id)
        if user is None:
            raise NotFoundError(f'User "{user_id}" not found.')
        return user

    def _admin_count(self) -> int:
        return len(self.repository.users.filter(lambda u: u.is_administrator))

    def _to_view(self, user: User, admin_count: int) -> UserView:
        is_last_admin = user.is_administrator and admin_count == 1
        return UserView(
            **user.model_dump(),
            is_agent=self.repository.agents.any(lambda a: a.user_id == user.id),
            is_coordinator=self.repository.coordinators.any(lambda c: c.user_id == user.id),
            is_deletable=not is_last_admin,
        )

    def _check_unique(
        self,
        username: str | None = None,
        email: str | None = None,
        exclude_id: str | None = None,
    ) -> None:
        if username:
            other = self.get_user_by_username(username)
            if other is not None and other.id != exclude_id:
                raise DuplicateError(f'Username "{username}" is already in use.')
        if email:
            other = self.get_user_by_email(email)
            if other is not None and other.id != exclude_id:
                raise DuplicateError(f'Email "{email}" is already in use.')

    def _remove_if_roleless(self, user_id: str) -> None:
        """Delete a non-admin user left without agent or coordinator role."""
        user = self.repository.users.get(user_id)
        if user is None or user.is_administrator:
            return
        if self.get_agent_for_user(user_id) or self.get_coordinator_for_user(user_id):
            return
        self.repository.users.delete(user_id)
        logger.info("User %s removed after losing its last role", user.username)

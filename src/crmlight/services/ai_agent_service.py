"""Service for AI agent definitions."""

from __future__ import annotations

import logging
from typing import Any

from ..models import AIAgent
from ..repositories import MemoryRepository
from .errors import DuplicateError, NotFoundError, validation_errors

logger = logging.getLogger(__name__)


class AIAgentService:
    """CRUD for the prompts used to generate contact reports. Names are unique."""

    def __init__(self, repository: MemoryRepository) -> None:
        self.repository = repository

    def list_agents(self) -> list[AIAgent]:
        return self.repository.ai_agents.all()

    def get_agent(self, agent_id: str) -> AIAgent | None:
        return self.repository.ai_agents.get(agent_id)

    def get_by_name(self, name: str) -> AIAgent | None:
        return self.repository.ai_agents.find(lambda a: a.name == name)

    def create_agent(self, name: str, prompt: str) -> AIAgent:
        self._check_unique_name(name)
        with validation_errors():
            agent = self.repository.ai_agents.insert(name=name, prompt=prompt)
        logger.info("AI agent created: %s (%s)", agent.name, agent.id)
        return agent

    def update_agent(self, agent_id: str, **changes: Any) -> AIAgent:
        if not self.repository.ai_agents.exists(agent_id):
            raise NotFoundError(f'AI agent "{agent_id}" not found.')
        if changes.get("name"):
            self._check_unique_name(changes["name"], exclude_id=agent_id)
        with validation_errors():
            agent = self.repository.ai_agents.update(agent_id, **changes)
        logger.info("AI agent updated: %s", agent_id)
        return agent

    def delete_agent(self, agent_id: str) -> None:
        if not self.repository.ai_agents.delete(agent_id):
            raise NotFoundError(f'AI agent "{agent_id}" not found.')
        logger.info("AI agent deleted: %s", agent_id)

    def _check_unique_name(self, name: str, exclude_id: str | None = None) -> None:
        if self.repository.ai_agents.any(lambda a: a.name == name and a.id != exclude_id):
            raise DuplicateError(f'An AI agent named "{name}" already exists.')

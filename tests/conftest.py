"""Shared fixtures: a fresh DataAPI over the packaged demo data."""

import pytest

from crmlight.api import DataAPI
from crmlight.models import User
from crmlight.repositories import MemoryRepository, load_seed


@pytest.fixture
def repository() -> MemoryRepository:
    """Repository loaded with the packaged seed, relative to today."""
    return MemoryRepository(load_seed())


@pytest.fixture
def api(repository: MemoryRepository) -> DataAPI:
    """DataAPI without a report client."""
    return DataAPI(repository)


@pytest.fixture
def admin(api: DataAPI) -> User:
    return api.users.get_user("1")


@pytest.fixture
def agent_user(api: DataAPI) -> User:
    """Juan Pérez, agent 1 in coordinator 1's team."""
    return api.users.get_user("2")


@pytest.fixture
def other_agent_user(api: DataAPI) -> User:
    """Ana García, agent 2 in coordinator 1's team."""
    return api.users.get_user("3")


@pytest.fixture
def coordinator_user(api: DataAPI) -> User:
    """Carlos Sánchez, coordinator 1."""
    return api.users.get_user("4")

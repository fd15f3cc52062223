"""Pytest configuration and fixtures for unit tests."""

from datetime import timedelta

import pytest

from tests.unit.mocks import FakeClock, InMemoryCredentialStore, InMemoryTaskStore
from todo_backend.core.security import BcryptPasswordHasher
from todo_backend.services.authorization import AuthorizationGate
from todo_backend.services.session_registry import SessionRegistry
from todo_backend.services.task_service import TaskService
from todo_backend.services.user_service import UserService


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def registry(clock: FakeClock) -> SessionRegistry:
    """A registry with a 30 minute TTL driven by the fake clock."""
    return SessionRegistry(ttl=timedelta(minutes=30), clock=clock)


@pytest.fixture
def gate(registry: SessionRegistry) -> AuthorizationGate:
    return AuthorizationGate(registry)


@pytest.fixture
def task_store() -> InMemoryTaskStore:
    return InMemoryTaskStore()


@pytest.fixture
def credential_store() -> InMemoryCredentialStore:
    return InMemoryCredentialStore()


@pytest.fixture
def hasher() -> BcryptPasswordHasher:
    """Low-cost bcrypt keeps the suite fast."""
    return BcryptPasswordHasher(rounds=4)


@pytest.fixture
def task_service(task_store: InMemoryTaskStore, clock: FakeClock) -> TaskService:
    return TaskService(task_store, clock=clock)


@pytest.fixture
def user_service(credential_store: InMemoryCredentialStore, hasher: BcryptPasswordHasher) -> UserService:
    return UserService(credential_store, hasher)

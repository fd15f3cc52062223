"""Pytest configuration and shared fixtures."""

import pytest

from todo_backend.domain.user import UserIdentity, UserRole


@pytest.fixture
def admin_identity() -> UserIdentity:
    return UserIdentity(id="u1", username="admin.user", email="admin@example.com", password_hash="x", role=UserRole.ADMIN)


@pytest.fixture
def user_identity() -> UserIdentity:
    return UserIdentity(id="u2", username="plain.user", email="plain@example.com", password_hash="x", role=UserRole.USER)

"""User service for account creation, updates and login."""

import logging
import re
import uuid
from typing import TYPE_CHECKING

from todo_backend.core.config import constants
from todo_backend.core.errors import AppError, ErrorKind, invalid_input, not_found
from todo_backend.core.logging import span
from todo_backend.core.ports import CredentialStore, DuplicateRecordError, PasswordHasher
from todo_backend.domain.create_models import UserCreate
from todo_backend.domain.update_models import UserUpdate
from todo_backend.domain.user import UserIdentity, UserRole


if TYPE_CHECKING:
    from todo_backend.services.session_registry import SessionRegistry
    from todo_backend.services.task_service import TaskService


logger = logging.getLogger(__name__)

_USERNAME_PATTERN = re.compile(r"^[a-zA-Z0-9._-]+$")
_EMAIL_PATTERN = re.compile(r"^[\w.-]+@[\w-]+(\.[\w-]+)+$")
_PASSWORD_PATTERN = re.compile(r"^[a-zA-Z0-9!@#$%^&*()\-_=+]+$")


def validate_username(username: str) -> None:
    if not constants.USERNAME_MIN_LENGTH <= len(username) <= constants.USERNAME_MAX_LENGTH:
        raise invalid_input(
            f"Username must be between {constants.USERNAME_MIN_LENGTH} "
            f"and {constants.USERNAME_MAX_LENGTH} characters"
        )
    if not _USERNAME_PATTERN.match(username):
        raise invalid_input("Username can only contain alphanumeric characters, dots, hyphens, and underscores")


def validate_email(email: str) -> None:
    if not _EMAIL_PATTERN.match(email):
        raise invalid_input("Email format is invalid")


def validate_password(password: str) -> None:
    if not constants.PASSWORD_MIN_LENGTH <= len(password) <= constants.PASSWORD_MAX_LENGTH:
        raise invalid_input(
            f"Password must be between {constants.PASSWORD_MIN_LENGTH} "
            f"and {constants.PASSWORD_MAX_LENGTH} characters"
        )
    if not _PASSWORD_PATTERN.match(password):
        raise invalid_input("Illegal password, try another")


def parse_role(role: str | None) -> UserRole:
    """Map a requested role onto the enumeration.

    Raises:
        AppError(INVALID_INPUT): If the role is missing or unknown
    """
    if role is None or not role.strip():
        raise invalid_input("All users must have a role")
    parsed = UserRole.parse(role)
    if parsed is None:
        raise invalid_input(f"Invalid role: {role}")
    return parsed


def _conflict(error: DuplicateRecordError) -> AppError:
    return AppError(ErrorKind.CONFLICT, f"User with {error.field} {error.value} already exists")


class UserService:
    """Creates, updates, authenticates and removes user accounts."""

    def __init__(self, store: CredentialStore, hasher: PasswordHasher) -> None:
        self._store = store
        self._hasher = hasher

    async def validate_user(self, *, draft: UserCreate) -> None:
        """Check shape and uniqueness of a new account.

        Raises:
            AppError(INVALID_INPUT): If a field is missing or malformed
            AppError(CONFLICT): If the username or email is already taken
        """
        if draft is None:
            raise invalid_input("User cannot be null")
        if draft.username is None or draft.password is None or draft.email is None:
            raise invalid_input("Username or password or email cannot be null")

        validate_username(draft.username)
        validate_email(draft.email)
        validate_password(draft.password)
        parse_role(draft.role)

        if await self._store.find_by_username(draft.username) is not None:
            raise AppError(ErrorKind.CONFLICT, f"User with username {draft.username} already exists")
        if await self._store.find_by_email(draft.email) is not None:
            raise AppError(ErrorKind.CONFLICT, f"User with email {draft.email} already exists")

    async def _create_user(self, draft: UserCreate) -> UserIdentity:
        await self.validate_user(draft=draft)

        user = UserIdentity(
            id=str(uuid.uuid4()),
            username=draft.username,
            email=draft.email,
            password_hash=self._hasher.hash(draft.password),
            role=parse_role(draft.role),
        )
        try:
            stored = await self._store.insert(user)
        except DuplicateRecordError as e:
            # Lost a race with a concurrent registration for the same name/email
            raise _conflict(e) from e

        logger.info("Created user", extra={"user_id": stored.id, "role": stored.role.value})
        return stored

    async def create_as_user(self, *, draft: UserCreate) -> UserIdentity:
        """Register a self-service account; the role is always USER."""
        with span("user_service.create_as_user"):
            return await self._create_user(draft.model_copy(update={"role": UserRole.USER.value}))

    async def create_as_admin(self, *, draft: UserCreate, role: str | None) -> UserIdentity:
        """Create an account with a caller-chosen role (the caller must be an admin).

        Args:
            draft: Username, email and plaintext password for the new account
            role: Role name, matched case-insensitively (``ROLE_`` prefix allowed)

        Returns:
            The stored account

        Raises:
            AppError(INVALID_INPUT): If the role is not in the enumeration
        """
        with span("user_service.create_as_admin"):
            requested = parse_role(role)
            return await self._create_user(draft.model_copy(update={"role": requested.value}))

    async def get_user(self, *, user_id: str) -> UserIdentity:
        with span("user_service.get_user"):
            user = await self._store.find_by_id(user_id)
            if user is None:
                raise not_found(f"User {user_id} not found")
            return user

    async def list_users(self) -> list[UserIdentity]:
        with span("user_service.list_users"):
            return await self._store.find_all()

    async def update_user(self, *, user_id: str, patch: UserUpdate) -> UserIdentity:
        """Merge the supplied fields of ``patch`` into an account.

        Uniqueness of a changed username/email is not pre-checked against other
        accounts; only the store's own constraint can reject it.

        Args:
            user_id: Account to update
            patch: Fields to change; an empty password keeps the current hash

        Returns:
            The saved account

        Raises:
            AppError(NOT_FOUND): If the account does not exist, or was deleted
                before the update was saved
            AppError(INVALID_INPUT): If a supplied field is malformed
            AppError(CONFLICT): If the store rejects a duplicate username/email
        """
        with span("user_service.update_user"):
            existing = await self.get_user(user_id=user_id)
            fields = patch.present_fields()
            changes: dict[str, object] = {}

            if "username" in fields:
                validate_username(fields["username"])
                changes["username"] = fields["username"]
            if "email" in fields:
                validate_email(fields["email"])
                changes["email"] = fields["email"]
            if fields.get("password"):
                validate_password(fields["password"])
                changes["password_hash"] = self._hasher.hash(fields["password"])
            if fields.get("role", "").strip():
                changes["role"] = parse_role(fields["role"])

            updated = existing.model_copy(update=changes)
            try:
                saved = await self._store.save(updated)
            except DuplicateRecordError as e:
                raise _conflict(e) from e
            if saved is None:
                raise not_found(f"User {user_id} not found")

            logger.info("Updated user", extra={"user_id": user_id, "fields": sorted(changes)})
            return saved

    async def login(self, *, username: str, password: str) -> UserIdentity:
        """Check a username/password pair.

        Raises:
            AppError(NOT_FOUND): If no account has that username
            AppError(INVALID_CREDENTIAL): If the password does not match
        """
        with span("user_service.login"):
            user = await self._store.find_by_username(username)
            if user is None:
                raise not_found(f"User {username} not found")

            if not self._hasher.verify(password, user.password_hash):
                logger.warning("Failed login", extra={"user_id": user.id})
                raise AppError(ErrorKind.INVALID_CREDENTIAL, "Invalid credentials")

            logger.info("User logged in", extra={"user_id": user.id})
            return user

    async def delete_user(
        self,
        *,
        user_id: str,
        task_service: "TaskService",
        registry: "SessionRegistry",
    ) -> UserIdentity:
        """Remove an account, its tasks and its live sessions.

        Args:
            user_id: Account to remove
            task_service: Used to delete the account's tasks
            registry: Used to revoke the account's sessions

        Returns:
            The removed account

        Raises:
            AppError(NOT_FOUND): If the account does not exist
        """
        with span("user_service.delete_user"):
            user = await self.get_user(user_id=user_id)

            deleted_tasks = await task_service.delete_all_tasks(owner_id=user_id)
            if not await self._store.delete(user_id):
                raise not_found(f"User {user_id} not found")
            revoked = registry.revoke_user(user_id)

            logger.info(
                "Deleted user",
                extra={"user_id": user_id, "deleted_tasks": len(deleted_tasks), "revoked_sessions": revoked},
            )
            return user

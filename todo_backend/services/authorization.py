"""Access checks derived from a session token."""

import logging

from todo_backend.core.errors import AppError, ErrorKind
from todo_backend.core.logging import token_hint
from todo_backend.domain.user import UserIdentity, UserRole
from todo_backend.services.session_registry import SessionRegistry


logger = logging.getLogger(__name__)


class AuthorizationGate:
    """Guards that resolve a token and optionally demand the ADMIN role."""

    def __init__(self, registry: SessionRegistry) -> None:
        self._registry = registry

    def require_user(self, token: str) -> UserIdentity:
        """Resolve the caller; NOT_FOUND / EXPIRED propagate unchanged."""
        return self._registry.resolve(token)

    def require_admin(self, token: str) -> None:
        """Fail unless the token belongs to a live ADMIN session.

        Raises:
            AppError(NOT_FOUND): If the token is unknown
            AppError(EXPIRED): If the session has expired
            AppError(FORBIDDEN): If the user is not an admin
        """
        identity = self._registry.resolve(token)
        if identity.role != UserRole.ADMIN:
            logger.warning(
                "admin_access_denied",
                extra={"user_id": identity.id, "role": identity.role.value, "token": token_hint(token)},
            )
            raise AppError(ErrorKind.FORBIDDEN, "No access")

"""Password hashing and session token generation."""

import logging
import secrets

import bcrypt

from todo_backend.core.config import constants, settings


logger = logging.getLogger(__name__)


class BcryptPasswordHasher:
    """PasswordHasher backed by bcrypt."""

    def __init__(self, rounds: int | None = None) -> None:
        self._rounds = rounds or settings.bcrypt_rounds

    def hash(self, plaintext: str) -> str:
        salt = bcrypt.gensalt(rounds=self._rounds)
        return bcrypt.hashpw(plaintext.encode("utf-8"), salt).decode("utf-8")

    def verify(self, plaintext: str, hashed: str) -> bool:
        """Check a password against a stored hash; a malformed hash never verifies."""
        try:
            return bcrypt.checkpw(plaintext.encode("utf-8"), hashed.encode("utf-8"))
        except ValueError:
            logger.warning("password_verify_malformed_hash")
            return False


def generate_session_token() -> str:
    """Generate an unguessable, URL-safe session token."""
    return secrets.token_urlsafe(constants.SESSION_TOKEN_BYTES)

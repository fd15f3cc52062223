"""In-memory registry of login sessions.

Each session maps an opaque token to a snapshot of the user it was created for
and an absolute expiry time. A session is either active or absent: it leaves
the table on explicit invalidation, on lazy eviction when ``resolve`` finds it
expired, or on a sweep.

The table is lock-striped. A token always hashes to the same bucket and every
read-modify-write on a token runs under that bucket's lock, so concurrent
callers racing on one token see a single linear history.
"""

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

from todo_backend.core.config import constants, settings
from todo_backend.core.errors import AppError, ErrorKind
from todo_backend.core.logging import span, token_hint
from todo_backend.core.security import generate_session_token
from todo_backend.domain.user import UserIdentity


logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(UTC)


@dataclass
class _Session:
    owner: UserIdentity
    expires_at: datetime


class _Bucket:
    __slots__ = ("entries", "lock")

    def __init__(self) -> None:
        self.entries: dict[str, _Session] = {}
        self.lock = threading.Lock()


class SessionRegistry:
    """Owns the token -> session table."""

    def __init__(
        self,
        *,
        ttl: timedelta | None = None,
        clock: Clock = utc_now,
        bucket_count: int = constants.SESSION_BUCKET_COUNT,
        token_factory: Callable[[], str] = generate_session_token,
    ) -> None:
        self._ttl = ttl if ttl is not None else timedelta(minutes=settings.session_ttl_minutes)
        self._clock = clock
        self._token_factory = token_factory
        self._buckets = [_Bucket() for _ in range(max(1, bucket_count))]

    @property
    def ttl(self) -> timedelta:
        return self._ttl

    def _bucket(self, token: str) -> _Bucket:
        return self._buckets[hash(token) % len(self._buckets)]

    def create_session(self, identity: UserIdentity) -> str:
        """Store a snapshot of ``identity`` and return a fresh token.

        Args:
            identity: Authenticated user; later account changes do not affect the session

        Returns:
            An unguessable URL-safe token, unique among active sessions

        Raises:
            AppError(INVALID_INPUT): If the identity is missing or has no id
        """
        with span("session_registry.create_session"):
            if identity is None or not getattr(identity, "id", None):
                raise AppError(ErrorKind.INVALID_INPUT, "Cannot create a session without a valid user")

            snapshot = identity.model_copy(deep=True)
            while True:
                token = self._token_factory()
                bucket = self._bucket(token)
                with bucket.lock:
                    if token in bucket.entries:
                        logger.warning("session_token_collision")
                        continue
                    expires_at = self._clock() + self._ttl
                    bucket.entries[token] = _Session(owner=snapshot, expires_at=expires_at)
                    break

            logger.info(
                "Created session",
                extra={"user_id": snapshot.id, "token": token_hint(token), "expires_at": expires_at.isoformat()},
            )
            return token

    def resolve(self, token: str) -> UserIdentity:
        """Return the user a live session belongs to.

        Raises:
            AppError(NOT_FOUND): If the token is unknown
            AppError(EXPIRED): If the session has expired (it is evicted)
        """
        bucket = self._bucket(token)
        with bucket.lock:
            session = bucket.entries.get(token)
            if session is None:
                raise AppError(ErrorKind.NOT_FOUND, f"Session {token_hint(token)} not found")
            if self._clock() > session.expires_at:
                del bucket.entries[token]
                logger.info("Evicted expired session", extra={"token": token_hint(token)})
                raise AppError(ErrorKind.EXPIRED, f"Session {token_hint(token)} has expired")
            return session.owner.model_copy(deep=True)

    def is_session_active(self, token: str) -> bool:
        """True for a live session; failures propagate exactly as from ``resolve``."""
        self.resolve(token)
        return True

    def get_user(self, token: str) -> UserIdentity:
        return self.resolve(token)

    def renew(self, token: str) -> bool:
        """Push a live session's expiry to now + TTL.

        Raises:
            AppError(EXPIRED): If the token is unknown or already expired
        """
        bucket = self._bucket(token)
        with bucket.lock:
            session = bucket.entries.get(token)
            now = self._clock()
            if session is None or now > session.expires_at:
                raise AppError(ErrorKind.EXPIRED, f"Session {token_hint(token)} has expired")
            session.expires_at = now + self._ttl
            logger.info("Renewed session", extra={"token": token_hint(token)})
            return True

    def invalidate(self, token: str) -> None:
        """Remove a session.

        Raises:
            AppError(NOT_FOUND): If the token is unknown
        """
        bucket = self._bucket(token)
        with bucket.lock:
            if bucket.entries.pop(token, None) is None:
                raise AppError(ErrorKind.NOT_FOUND, f"Session {token_hint(token)} not found")
        logger.info("Invalidated session", extra={"token": token_hint(token)})

    def sweep_expired(self) -> int:
        """Drop every expired session, one bucket at a time. Returns how many were removed."""
        removed = 0
        for bucket in self._buckets:
            with bucket.lock:
                now = self._clock()
                expired = [token for token, session in bucket.entries.items() if session.expires_at < now]
                for token in expired:
                    del bucket.entries[token]
                removed += len(expired)

        if removed:
            logger.info("Swept expired sessions", extra={"removed": removed})
        return removed

    def revoke_user(self, user_id: str) -> int:
        """Drop every session belonging to ``user_id``. Returns how many were removed."""
        removed = 0
        for bucket in self._buckets:
            with bucket.lock:
                tokens = [token for token, session in bucket.entries.items() if session.owner.id == user_id]
                for token in tokens:
                    del bucket.entries[token]
                removed += len(tokens)

        logger.info("Revoked user sessions", extra={"user_id": user_id, "removed": removed})
        return removed

    def active_count(self) -> int:
        count = 0
        for bucket in self._buckets:
            with bucket.lock:
                count += len(bucket.entries)
        return count

    def clear(self) -> None:
        for bucket in self._buckets:
            with bucket.lock:
                bucket.entries.clear()

"""User domain models and enums."""

from enum import StrEnum

from pydantic import BaseModel, Field


# Legacy role names were stored with this prefix (e.g. "ROLE_ADMIN")
_LEGACY_ROLE_PREFIX = "ROLE_"


class UserRole(StrEnum):
    """Account role. ADMIN is the only privileged role."""

    USER = "USER"
    ADMIN = "ADMIN"
    GUEST = "GUEST"

    @classmethod
    def parse(cls, value: str | None) -> "UserRole | None":
        """Case-insensitive lookup, returning None for unknown roles."""
        if value is None:
            return None
        normalized = value.strip().upper()
        if normalized.startswith(_LEGACY_ROLE_PREFIX):
            normalized = normalized[len(_LEGACY_ROLE_PREFIX) :]
        try:
            return cls(normalized)
        except ValueError:
            return None


class UserIdentity(BaseModel):
    """A stored user account."""

    id: str = Field(..., description="Unique user ID")
    username: str = Field(..., description="Unique login name")
    email: str = Field(..., description="Unique email address")
    password_hash: str = Field(..., description="Opaque password hash, never returned to callers")
    role: UserRole = Field(default=UserRole.USER, description="Account role")


class PublicUser(BaseModel):
    """User data safe to return to callers."""

    id: str
    username: str
    email: str
    role: UserRole

    @classmethod
    def from_identity(cls, identity: UserIdentity) -> "PublicUser":
        return cls(id=identity.id, username=identity.username, email=identity.email, role=identity.role)

"""User and session models."""

from datetime import datetime
import logging
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .base import BaseRecordModel, utc_now
from .enums import UserRole


logger = logging.getLogger(__name__)


class UserModel(BaseRecordModel):
    """Represents a registered PayLite account."""

    email: str = Field(..., min_length=3)
    name: str = Field(..., min_length=1)
    role: UserRole = Field(default=UserRole.USER)
    created_at: datetime = Field(default_factory=utc_now)
    password_hash: Optional[str] = Field(default=None, repr=False)

    @field_validator("email")
    @classmethod
    def _normalize_email(cls, value: str) -> str:
        """Store emails lower-cased so uniqueness is case-insensitive."""
        normalized = value.strip().lower()
        if "@" not in normalized:
            raise ValueError("email must contain '@'")
        return normalized

    @property
    def is_admin(self) -> bool:
        """Return whether the user holds the admin role."""
        return self.role == UserRole.ADMIN

    def public_view(self) -> dict:
        """Return a JSON-safe payload without credential material."""
        return self.model_dump(mode="json", exclude={"password_hash"})


class AuthStateModel(BaseModel):
    """Current session for the single signed-in device."""

    user: Optional[UserModel] = Field(default=None)
    is_authenticated: bool = Field(default=False)
    token: Optional[str] = Field(default=None)
    expires_at: Optional[datetime] = Field(default=None)

    model_config = ConfigDict(validate_assignment=True)

    @classmethod
    def signed_out(cls) -> "AuthStateModel":
        """Return the unauthenticated state."""
        return cls(user=None, is_authenticated=False, token=None, expires_at=None)

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        """Return whether the session token is past its lifetime."""
        if self.expires_at is None:
            return False
        return (now or utc_now()) >= self.expires_at

    def public_view(self) -> dict:
        """Return a JSON-safe payload without credential material."""
        return {
            "user": self.user.public_view() if self.user is not None else None,
            "is_authenticated": self.is_authenticated,
            "token": self.token,
            "expires_at": self.expires_at.isoformat() if self.expires_at is not None else None,
        }

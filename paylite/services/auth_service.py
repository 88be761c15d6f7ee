"""Registration, login, and the single device session."""

from __future__ import annotations

from datetime import datetime, timedelta
import hashlib
import hmac
import logging
import secrets
from typing import Callable, List, Optional

from pydantic import ValidationError

from paylite.core.config import AppSettings
from paylite.models.base import new_record_id, utc_now
from paylite.models.enums import UserRole
from paylite.models.exceptions import (
    AuthenticationError,
    AuthorizationError,
    DuplicateEmailError,
    ModelValidationError,
)
from paylite.models.repositories import RecordStore
from paylite.models.users import AuthStateModel, UserModel


logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]

_HASH_SCHEME = "pbkdf2_sha256"


def hash_password(password: str, iterations: int, salt: Optional[str] = None) -> str:
    """Return `pbkdf2_sha256$<iterations>$<salt>$<hex digest>` for `password`."""
    salt = salt or secrets.token_hex(16)
    digest = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt.encode("utf-8"), int(iterations))
    return "{0}${1}${2}${3}".format(_HASH_SCHEME, int(iterations), salt, digest.hex())


def verify_password(password: str, encoded: Optional[str]) -> bool:
    """Check `password` against an encoded hash in constant time."""
    if not encoded:
        return False
    try:
        scheme, iterations, salt, expected = encoded.split("$", 3)
        if scheme != _HASH_SCHEME:
            return False
        candidate = hash_password(password, int(iterations), salt=salt)
    except ValueError:
        logger.warning("Malformed password hash encountered.")
        return False
    return hmac.compare_digest(candidate.rsplit("$", 1)[1], expected)


class AuthService:
    """Creates users, verifies credentials, and owns the persisted session."""

    def __init__(
        self,
        settings: AppSettings,
        store: RecordStore,
        clock: Optional[Clock] = None,
    ) -> None:
        self._settings = settings
        self._store = store
        self._clock = clock or utc_now

    def _validate_credentials(self, email: str, password: str) -> str:
        normalized_email = (email or "").strip().lower()
        if not normalized_email or not password:
            raise ModelValidationError("Please fill in all required fields")
        if "@" not in normalized_email:
            raise ModelValidationError("Please enter a valid email address")
        if len(password) < self._settings.auth_min_password_length:
            raise ModelValidationError(
                "Password must be at least {0} characters long".format(self._settings.auth_min_password_length)
            )
        return normalized_email

    def _start_session(self, user: UserModel) -> AuthStateModel:
        now = self._clock()
        auth_state = AuthStateModel(
            user=user,
            is_authenticated=True,
            token=secrets.token_urlsafe(32),
            expires_at=now + timedelta(hours=self._settings.auth_token_ttl_hours),
        )
        self._store.save_auth_state(auth_state)
        return auth_state

    def register(self, email: str, password: str, name: str) -> AuthStateModel:
        """Create a user and sign them in.

        The first user ever registered becomes the admin; the decision is made
        once, here, from the current user count.

        Raises:
            ModelValidationError: If a field is missing or malformed.
            DuplicateEmailError: If the email is already registered.
        """
        normalized_email = self._validate_credentials(email, password)
        if not (name or "").strip():
            raise ModelValidationError("Please fill in all required fields")
        if self._store.get_user_by_email(normalized_email) is not None:
            logger.info("Registration rejected, user already exists email=%s", normalized_email)
            raise DuplicateEmailError("User already exists with this email")

        role = UserRole.ADMIN if len(self._store.get_users()) == 0 else UserRole.USER
        try:
            user = UserModel(
                id=new_record_id("user"),
                email=normalized_email,
                name=name.strip(),
                role=role,
                created_at=self._clock(),
                password_hash=hash_password(password, self._settings.auth_pbkdf2_iterations),
            )
        except ValidationError as exc:
            raise ModelValidationError(str(exc))

        self._store.save_user(user)
        auth_state = self._start_session(user)
        logger.info("Registration successful user_id=%s role=%s", user.id, role.value)
        return auth_state

    def login(self, email: str, password: str) -> AuthStateModel:
        """Verify credentials and start a session.

        Raises:
            AuthenticationError: If the email is unknown or the password does not match.
        """
        normalized_email = (email or "").strip().lower()
        user = self._store.get_user_by_email(normalized_email)
        if user is None or not verify_password(password or "", user.password_hash):
            logger.info("Login failed email=%s", normalized_email)
            raise AuthenticationError("Invalid email or password")
        auth_state = self._start_session(user)
        logger.info("Login successful user_id=%s", user.id)
        return auth_state

    def logout(self) -> None:
        """Clear the persisted session."""
        self._store.clear_auth_state()
        logger.info("User logged out")

    def demo_login(self) -> AuthStateModel:
        """Sign in the demo account, creating it on first use."""
        settings = self._settings
        try:
            return self.register(settings.auth_demo_email, settings.auth_demo_password, settings.auth_demo_name)
        except DuplicateEmailError:
            return self.login(settings.auth_demo_email, settings.auth_demo_password)

    def get_current_session(self) -> AuthStateModel:
        """Return the stored session, or a signed-out state if none is valid."""
        auth_state = self._store.get_auth_state()
        if auth_state is None or not auth_state.is_authenticated or not auth_state.token:
            return AuthStateModel.signed_out()
        if auth_state.is_expired(self._clock()):
            logger.info("Session expired user_id=%s", auth_state.user.id if auth_state.user else None)
            self._store.clear_auth_state()
            return AuthStateModel.signed_out()
        return auth_state

    def require_session(self, token: Optional[str]) -> UserModel:
        """Return the signed-in user for `token`.

        Raises:
            AuthenticationError: If there is no valid session for the token.
        """
        auth_state = self.get_current_session()
        if (
            not token
            or auth_state.user is None
            or auth_state.token is None
            or not hmac.compare_digest(auth_state.token, token)
        ):
            raise AuthenticationError("Not signed in or session expired")
        return auth_state.user

    def require_admin(self, token: Optional[str]) -> UserModel:
        """Return the signed-in admin for `token`.

        Raises:
            AuthenticationError: If there is no valid session.
            AuthorizationError: If the user is not an admin.
        """
        user = self.require_session(token)
        if not user.is_admin:
            raise AuthorizationError("Admin role required")
        return user

    def list_users(self) -> List[UserModel]:
        """Return every registered user. Privileged view."""
        return self._store.get_users()

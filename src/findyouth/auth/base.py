"""Base auth provider interface.

The signed-in session is an explicit AuthSession value handed to every
handler that needs it. There is no process-wide "current user".
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field

from findyouth.models.metadata import NonprofitMetadata

PASSWORD_MIN_LENGTH = 8


class AuthError(Exception):
    """Sign-up, sign-in or token verification failed."""


@dataclass
class AuthSession:
    """An authenticated session."""

    user_id: str
    email: str
    access_token: str
    session_id: str
    metadata: NonprofitMetadata = field(default_factory=NonprofitMetadata)
    is_admin: bool = False


def password_problems(password: str) -> list[str]:
    """List the password policy rules a password breaks.

    Policy: at least 8 characters, one capital letter, one number, one symbol.
    """
    problems = []
    if len(password) < PASSWORD_MIN_LENGTH:
        problems.append(f"Password must be at least {PASSWORD_MIN_LENGTH} characters.")
    if not re.search(r"[A-Z]", password):
        problems.append("Password must include at least one capital letter.")
    if not re.search(r"[0-9]", password):
        problems.append("Password must include at least one number.")
    if not re.search(r"[^A-Za-z0-9]", password):
        problems.append("Password must include at least one symbol.")
    return problems


def is_admin(auth_session: AuthSession | None) -> bool:
    """True when the session belongs to an administrator."""
    return auth_session is not None and auth_session.is_admin


def can_manage_event(user_id: str | None, creator_id: str | None, is_admin: bool) -> bool:
    """A user can manage an event they own, or any event if admin."""
    if not user_id or not creator_id:
        return False
    return user_id == creator_id or is_admin


class AuthProvider(ABC):
    """Abstract base class for identity providers."""

    @abstractmethod
    def sign_up(
        self, email: str, password: str, metadata: NonprofitMetadata | None = None
    ) -> AuthSession:
        """Create an identity and sign it in.

        Raises:
            AuthError: If the email is taken or the password is too weak.
        """

    @abstractmethod
    def sign_in(self, email: str, password: str) -> AuthSession:
        """Sign in with email and password.

        Raises:
            AuthError: If the credentials are invalid.
        """

    @abstractmethod
    def sign_out(self, auth_session: AuthSession) -> None:
        """Invalidate a session's access token."""

    @abstractmethod
    def get_session(self, access_token: str) -> AuthSession | None:
        """Resolve an access token to its session, or None if invalid."""

    @abstractmethod
    def update_metadata(
        self, auth_session: AuthSession, metadata: NonprofitMetadata
    ) -> AuthSession:
        """Replace the identity's metadata and return the updated session."""

    @abstractmethod
    def delete_user(self, auth_session: AuthSession) -> None:
        """Delete the identity behind a session."""

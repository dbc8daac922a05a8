"""Authentication.

Structure:
- auth/base.py      - AuthSession, AuthProvider interface, password policy
- auth/local.py     - argon2 + JWT provider backed by the users table
- auth/nonprofit.py - nonprofit rows derived from identity metadata
"""

from findyouth.auth.base import (
    AuthError,
    AuthProvider,
    AuthSession,
    can_manage_event,
    is_admin,
    password_problems,
)
from findyouth.auth.local import LocalAuthProvider
from findyouth.auth.nonprofit import ensure_nonprofit_profile, nonprofit_from_metadata

__all__ = [
    "AuthError",
    "AuthProvider",
    "AuthSession",
    "LocalAuthProvider",
    "can_manage_event",
    "ensure_nonprofit_profile",
    "is_admin",
    "nonprofit_from_metadata",
    "password_problems",
]

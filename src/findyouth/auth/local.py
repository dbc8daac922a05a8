"""Database-backed auth provider.

Passwords are hashed with argon2. Access tokens are HS256 JWTs carrying
the user id and a sign-in session id; signing out revokes the session row
so the token stops resolving before it expires.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import replace
from datetime import datetime, timedelta, timezone

import jwt
from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError

from findyouth.auth.base import AuthError, AuthProvider, AuthSession, password_problems
from findyouth.db import repo
from findyouth.db.repo import DbSession
from findyouth.models.domain import UserEntity
from findyouth.models.metadata import NonprofitMetadata, dump_user_metadata, parse_user_metadata

logger = logging.getLogger(__name__)

JWT_ALGORITHM = "HS256"

_password_hasher = PasswordHasher()


class LocalAuthProvider(AuthProvider):
    """Auth provider storing identities in the application database."""

    def __init__(self, session: DbSession, secret: str, token_expiration_minutes: int = 1440):
        """Initialize provider.

        Args:
            session: Database session.
            secret: HMAC secret for access tokens.
            token_expiration_minutes: Access token lifetime.
        """
        self.session = session
        self.secret = secret
        self.token_expiration_minutes = token_expiration_minutes

    def _issue_token(self, user_id: str, session_id: str) -> str:
        now = datetime.now(timezone.utc)
        payload = {
            "sub": user_id,
            "sid": session_id,
            "iat": now,
            "exp": now + timedelta(minutes=self.token_expiration_minutes),
        }
        return jwt.encode(payload, self.secret, algorithm=JWT_ALGORITHM)

    def _start_session(self, user: UserEntity) -> AuthSession:
        session_id = repo.create_auth_session(self.session, user.user_id)
        repo.commit(self.session)
        return AuthSession(
            user_id=user.user_id,
            email=user.email,
            access_token=self._issue_token(user.user_id, session_id),
            session_id=session_id,
            metadata=parse_user_metadata(user.metadata_json),
            is_admin=user.is_admin,
        )

    def sign_up(
        self, email: str, password: str, metadata: NonprofitMetadata | None = None
    ) -> AuthSession:
        problems = password_problems(password)
        if problems:
            raise AuthError(problems[0])

        if repo.get_user_by_email(self.session, email) is not None:
            raise AuthError("User already registered")

        user = UserEntity(
            user_id=str(uuid.uuid4()),
            email=email.lower(),
            password_hash=_password_hasher.hash(password),
            metadata_json=dump_user_metadata(metadata or NonprofitMetadata()),
        )
        repo.create_user(self.session, user)
        repo.commit(self.session)
        logger.info(f"Created user {user.user_id}")

        return self._start_session(user)

    def sign_in(self, email: str, password: str) -> AuthSession:
        user = repo.get_user_by_email(self.session, email)
        if user is None:
            raise AuthError("Invalid login credentials")

        try:
            _password_hasher.verify(user.password_hash, password)
        except (VerificationError, InvalidHashError) as e:
            raise AuthError("Invalid login credentials") from e

        logger.info(f"User {user.user_id} signed in")
        return self._start_session(user)

    def sign_out(self, auth_session: AuthSession) -> None:
        repo.revoke_auth_session(self.session, auth_session.session_id)
        repo.commit(self.session)
        logger.info(f"User {auth_session.user_id} signed out")

    def get_session(self, access_token: str) -> AuthSession | None:
        try:
            payload = jwt.decode(access_token, self.secret, algorithms=[JWT_ALGORITHM])
        except jwt.ExpiredSignatureError:
            logger.debug("Access token expired")
            return None
        except jwt.InvalidTokenError:
            logger.debug("Access token invalid")
            return None

        user_id = payload.get("sub")
        session_id = payload.get("sid")
        if not user_id or not session_id:
            return None
        if not repo.is_auth_session_active(self.session, session_id, user_id):
            return None

        user = repo.get_user(self.session, user_id)
        if user is None:
            return None

        return AuthSession(
            user_id=user.user_id,
            email=user.email,
            access_token=access_token,
            session_id=session_id,
            metadata=parse_user_metadata(user.metadata_json),
            is_admin=user.is_admin,
        )

    def update_metadata(
        self, auth_session: AuthSession, metadata: NonprofitMetadata
    ) -> AuthSession:
        if repo.get_user(self.session, auth_session.user_id) is None:
            raise AuthError("User not found")
        repo.update_user_metadata(self.session, auth_session.user_id, dump_user_metadata(metadata))
        repo.commit(self.session)
        return replace(auth_session, metadata=metadata)

    def delete_user(self, auth_session: AuthSession) -> None:
        repo.delete_user(self.session, auth_session.user_id)
        repo.commit(self.session)
        logger.info(f"Deleted user {auth_session.user_id}")

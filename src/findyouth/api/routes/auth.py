"""Auth API endpoints.

POST /api/auth/signup - Create account
POST /api/auth/signin - Sign in
POST /api/auth/signout - Revoke the current token
GET /api/auth/session - Current session
DELETE /api/auth/account - Delete the signed-in account
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Response

from findyouth.api.app import get_auth_provider, get_db_session, require_session
from findyouth.auth.base import AuthError, AuthProvider, AuthSession
from findyouth.auth.nonprofit import ensure_nonprofit_profile
from findyouth.db.repo import DbSession
from findyouth.models.metadata import NonprofitMetadata
from findyouth.models.types import SessionResponse, SignInRequest, SignUpRequest

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth")


def _session_response(auth_session: AuthSession) -> SessionResponse:
    return SessionResponse(
        user_id=auth_session.user_id,
        email=auth_session.email,
        access_token=auth_session.access_token,
        is_admin=auth_session.is_admin,
        metadata=auth_session.metadata,
    )


@router.post("/signup", response_model=SessionResponse, status_code=201)
def sign_up(
    request: SignUpRequest,
    auth: AuthProvider = Depends(get_auth_provider),
) -> SessionResponse:
    """Create an account and sign it in.

    Raises:
        HTTPException: 409 if the email is already registered.
    """
    metadata = NonprofitMetadata(organization_name=request.organization_name)
    try:
        auth_session = auth.sign_up(request.email, request.password, metadata)
    except AuthError as e:
        raise HTTPException(status_code=409, detail=str(e)) from e

    return _session_response(auth_session)


@router.post("/signin", response_model=SessionResponse)
def sign_in(
    request: SignInRequest,
    session: DbSession = Depends(get_db_session),
    auth: AuthProvider = Depends(get_auth_provider),
) -> SessionResponse:
    """Sign in and make sure the nonprofit row exists.

    Raises:
        HTTPException: 401 if the credentials are invalid.
    """
    try:
        auth_session = auth.sign_in(request.email, request.password)
    except AuthError as e:
        raise HTTPException(status_code=401, detail=str(e)) from e

    ensure_nonprofit_profile(session, auth_session)
    return _session_response(auth_session)


@router.post("/signout", status_code=204)
def sign_out(
    auth_session: AuthSession = Depends(require_session),
    auth: AuthProvider = Depends(get_auth_provider),
) -> Response:
    """Revoke the caller's access token."""
    auth.sign_out(auth_session)
    return Response(status_code=204)


@router.get("/session", response_model=SessionResponse)
def get_current(auth_session: AuthSession = Depends(require_session)) -> SessionResponse:
    """Get the caller's session."""
    return _session_response(auth_session)


@router.delete("/account", status_code=204)
def delete_account(
    auth_session: AuthSession = Depends(require_session),
    auth: AuthProvider = Depends(get_auth_provider),
) -> Response:
    """Delete the caller's identity.

    The nonprofit row, its events and reviews are kept.
    """
    auth.delete_user(auth_session)
    logger.info(f"Account {auth_session.user_id} deleted by its owner")
    return Response(status_code=204)

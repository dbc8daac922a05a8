"""FastAPI application factory and shared dependencies.

Dependencies:
- get_db_session: one database session per request
- get_storage / get_auth_provider: backends built from settings
- get_current_session: the caller's AuthSession from a Bearer token, or None
- require_session: same, but 401 when not signed in
- get_resolver: organization resolver bound to the caller's session
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Generator

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from fastapi.staticfiles import StaticFiles

from findyouth.aggregation.organizations import OrganizationResolver
from findyouth.auth.base import AuthProvider, AuthSession
from findyouth.auth.local import LocalAuthProvider
from findyouth.core.config import Settings, get_settings
from findyouth.db.repo import DbSession
from findyouth.db.session import get_session, init_db
from findyouth.storage.base import ObjectStorage
from findyouth.storage.local import LocalObjectStorage

logger = logging.getLogger(__name__)

_bearer = HTTPBearer(auto_error=False)


def get_app_settings(request: Request) -> Settings:
    """Dependency to get the settings the app was created with."""
    return request.app.state.settings


def get_db_session(
    settings: Settings = Depends(get_app_settings),
) -> Generator[DbSession, None, None]:
    """Dependency to get database session.

    Yields:
        Database session that is automatically closed after request.
    """
    session = get_session(settings.db_path)
    try:
        yield session
    finally:
        session.close()


def get_storage(settings: Settings = Depends(get_app_settings)) -> ObjectStorage:
    """Dependency to get object storage."""
    return LocalObjectStorage(
        settings.storage_dir,
        settings.storage_public_url,
        probe_timeout=settings.probe_timeout,
    )


def get_auth_provider(
    session: DbSession = Depends(get_db_session),
    settings: Settings = Depends(get_app_settings),
) -> AuthProvider:
    """Dependency to get the auth provider."""
    return LocalAuthProvider(
        session,
        settings.jwt_secret,
        token_expiration_minutes=settings.token_expiration_minutes,
    )


def get_current_session(
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer),
    auth: AuthProvider = Depends(get_auth_provider),
) -> AuthSession | None:
    """Dependency to get the caller's session, or None when anonymous.

    An invalid or revoked token is treated as anonymous.
    """
    if credentials is None:
        return None
    return auth.get_session(credentials.credentials)


def require_session(
    auth_session: AuthSession | None = Depends(get_current_session),
) -> AuthSession:
    """Dependency to require a signed-in caller.

    Raises:
        HTTPException: 401 if not signed in.
    """
    if auth_session is None:
        raise HTTPException(
            status_code=401,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return auth_session


def get_resolver(
    session: DbSession = Depends(get_db_session),
    storage: ObjectStorage = Depends(get_storage),
    auth_session: AuthSession | None = Depends(get_current_session),
) -> OrganizationResolver:
    """Dependency to get an organization resolver for this request."""
    return OrganizationResolver(session, storage, auth_session)


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create FastAPI application.

    Args:
        settings: Optional settings. Defaults to the environment.

    Returns:
        Configured FastAPI application.
    """
    if settings is None:
        settings = get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        init_db(settings.db_path)
        logger.info(f"Database ready at {settings.db_path}")
        yield

    app = FastAPI(
        title="FindYouth API",
        description="Youth volunteer opportunities from local nonprofits",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.settings = settings

    # Add CORS middleware for UI access
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include routes
    from findyouth.api.routes import auth, events, nonprofits, profile, registration

    app.include_router(events.router, prefix="/api")
    app.include_router(nonprofits.router, prefix="/api")
    app.include_router(auth.router, prefix="/api")
    app.include_router(registration.router, prefix="/api")
    app.include_router(profile.router, prefix="/api")

    # Mount uploaded objects
    app.mount(
        "/storage",
        StaticFiles(directory=str(settings.storage_dir), check_dir=False),
        name="storage",
    )

    # Health check endpoint
    @app.get("/health")
    def health_check():
        """Health check endpoint."""
        return {"status": "ok"}

    return app


# Default app instance
app = create_app()

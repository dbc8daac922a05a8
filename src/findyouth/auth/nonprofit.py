"""Nonprofit rows derived from auth metadata.

A nonprofit that registered while its row could not be written still has
its profile in the identity metadata. After sign-in the row is created from
that metadata.
"""

from __future__ import annotations

import logging

from findyouth.auth.base import AuthSession, is_admin
from findyouth.db import repo
from findyouth.db.repo import DbSession, PermissionDeniedError
from findyouth.models.domain import NonprofitEntity
from findyouth.models.metadata import NonprofitMetadata

logger = logging.getLogger(__name__)


def nonprofit_from_metadata(
    user_id: str, email: str, metadata: NonprofitMetadata
) -> NonprofitEntity:
    """Build a nonprofit row from identity metadata."""
    return NonprofitEntity(
        id=user_id,
        organization_name=metadata.organization_name or "",
        email=email,
        phone=metadata.phone,
        website=metadata.website,
        social_media=metadata.social_media,
        location=metadata.location,
        description=metadata.description,
        mission=metadata.mission,
        profile_image_url=metadata.profile_image_url,
        banner_image_url=metadata.banner_image_url,
    )


def ensure_nonprofit_profile(session: DbSession, auth_session: AuthSession) -> bool:
    """Create the signed-in user's nonprofit row from metadata if missing.

    A rejected write (row owned by someone else) is expected for some
    accounts and reported as success.

    Args:
        session: Database session.
        auth_session: The signed-in session.

    Returns:
        True if a row exists afterwards (or the write was rejected as
        expected), False if metadata was insufficient.
    """
    if repo.get_nonprofit(session, auth_session.user_id) is not None:
        return True

    metadata = auth_session.metadata
    if not metadata.organization_name:
        logger.info(f"No organization metadata for user {auth_session.user_id}")
        return False

    entity = nonprofit_from_metadata(auth_session.user_id, auth_session.email, metadata)
    try:
        repo.save_nonprofit(
            session, entity, auth_session.user_id, acting_is_admin=is_admin(auth_session)
        )
        repo.replace_nonprofit_causes(session, auth_session.user_id, metadata.causes)
        repo.commit(session)
    except PermissionDeniedError as e:
        session.rollback()
        logger.info(f"Nonprofit row write rejected, treating as success: {e}")
        return True

    logger.info(f"Created nonprofit profile for user {auth_session.user_id} from metadata")
    return True

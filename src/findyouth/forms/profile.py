"""Nonprofit profile editing.

The profile lives in two places: the identity metadata and the nonprofits
row (plus its cause links). Updates write metadata first, then the row,
then the causes. A failing step raises SubmissionError and later steps are
skipped.
"""

from __future__ import annotations

import logging

from sqlalchemy.exc import SQLAlchemyError

from findyouth.auth.base import AuthError, AuthProvider, AuthSession, is_admin
from findyouth.auth.nonprofit import nonprofit_from_metadata
from findyouth.db import repo
from findyouth.db.repo import DbSession, PermissionDeniedError
from findyouth.forms.causes import CauseSelection
from findyouth.forms.errors import SubmissionError
from findyouth.forms.images import (
    ImageUpload,
    ImageValidationError,
    upload_banner_image,
    upload_profile_image,
    validate_banner_image,
    validate_profile_image,
)
from findyouth.models.types import ProfileForm, ProfileImages, ProfileUpdate
from findyouth.storage.base import ObjectStorage, StorageError

logger = logging.getLogger(__name__)


def load_profile_form(session: DbSession, auth_session: AuthSession) -> ProfileForm:
    """Current profile values for the signed-in organization.

    Prefers the nonprofits row and its cause links; falls back to the
    identity metadata when no row exists.
    """
    nonprofit = repo.get_nonprofit(session, auth_session.user_id)
    if nonprofit is not None:
        return ProfileForm(
            organization_name=nonprofit.organization_name or "",
            email=nonprofit.email or auth_session.email,
            description=nonprofit.description or "",
            mission=nonprofit.mission or "",
            location=nonprofit.location or "",
            website=nonprofit.website or "",
            phone=nonprofit.phone or "",
            social_media=nonprofit.social_media or "",
            causes=repo.get_nonprofit_cause_names(session, auth_session.user_id),
            source="nonprofit",
        )

    metadata = auth_session.metadata
    return ProfileForm(
        organization_name=metadata.organization_name or "",
        email=auth_session.email,
        description=metadata.description or "",
        mission=metadata.mission or "",
        location=metadata.location or "",
        website=metadata.website or "",
        phone=metadata.phone or "",
        social_media=metadata.social_media or "",
        causes=list(metadata.causes),
        source="empty" if metadata.is_empty() else "metadata",
    )


def update_profile(
    session: DbSession,
    auth: AuthProvider,
    auth_session: AuthSession,
    update: ProfileUpdate,
) -> AuthSession:
    """Save profile edits.

    Args:
        session: Database session.
        auth: Auth provider holding the identity metadata.
        auth_session: The signed-in organization.
        update: Validated profile form.

    Returns:
        The session with updated metadata.

    Raises:
        SubmissionError: If a step fails.
    """
    user_id = auth_session.user_id
    causes = CauseSelection(update.causes).selected

    metadata = auth_session.metadata.model_copy(
        update={
            "organization_name": update.organization_name,
            "description": update.description,
            "mission": update.mission,
            "location": update.location,
            "website": update.website or None,
            "phone": update.phone or None,
            "social_media": update.social_media or None,
            "causes": causes,
        }
    )

    try:
        auth_session = auth.update_metadata(auth_session, metadata)
    except AuthError as e:
        raise SubmissionError("metadata", str(e)) from e

    existing = repo.get_nonprofit(session, user_id)
    entity = nonprofit_from_metadata(
        user_id, existing.email if existing else auth_session.email, metadata
    )
    if existing is not None:
        entity.approved = existing.approved
        entity.profile_image_url = entity.profile_image_url or existing.profile_image_url
        entity.banner_image_url = entity.banner_image_url or existing.banner_image_url

    try:
        repo.save_nonprofit(session, entity, user_id, acting_is_admin=is_admin(auth_session))
        repo.commit(session)
    except (PermissionDeniedError, SQLAlchemyError) as e:
        session.rollback()
        raise SubmissionError("nonprofit", f"Failed to update nonprofit profile: {e}") from e

    try:
        repo.replace_nonprofit_causes(session, user_id, causes)
        repo.commit(session)
    except SQLAlchemyError as e:
        session.rollback()
        raise SubmissionError("causes", f"Failed to save causes: {e}") from e

    logger.info(f"Updated profile for nonprofit {user_id}")
    return auth_session


def update_profile_images(
    session: DbSession,
    auth: AuthProvider,
    storage: ObjectStorage,
    auth_session: AuthSession,
    profile_image: ImageUpload | None = None,
    banner_image: ImageUpload | None = None,
) -> tuple[AuthSession, ProfileImages]:
    """Upload replacement images and record their URLs.

    URLs are written to the identity metadata and, when it exists, the
    nonprofits row.

    Returns:
        Tuple of (updated session, current image URLs).

    Raises:
        ImageValidationError: If no image is given or an image is invalid.
        SubmissionError: If an upload or write fails.
    """
    if profile_image is None and banner_image is None:
        raise ImageValidationError("profile_image", "No image provided")
    if profile_image is not None:
        validate_profile_image(profile_image)
    if banner_image is not None:
        validate_banner_image(banner_image)

    user_id = auth_session.user_id
    profile_image_url = None
    banner_image_url = None

    try:
        if profile_image is not None:
            profile_image_url = upload_profile_image(storage, user_id, profile_image)
        if banner_image is not None:
            banner_image_url = upload_banner_image(storage, user_id, banner_image)
    except StorageError as e:
        raise SubmissionError("upload", f"Failed to upload image: {e}") from e

    changes = {}
    if profile_image_url:
        changes["profile_image_url"] = profile_image_url
    if banner_image_url:
        changes["banner_image_url"] = banner_image_url
    metadata = auth_session.metadata.model_copy(update=changes)

    try:
        auth_session = auth.update_metadata(auth_session, metadata)
    except AuthError as e:
        raise SubmissionError("metadata", str(e)) from e

    try:
        repo.update_nonprofit_images(
            session,
            user_id,
            profile_image_url=profile_image_url,
            banner_image_url=banner_image_url,
        )
        repo.commit(session)
    except SQLAlchemyError as e:
        session.rollback()
        raise SubmissionError("nonprofit", f"Failed to update nonprofit images: {e}") from e

    nonprofit = repo.get_nonprofit(session, user_id)
    return auth_session, ProfileImages(
        profile_image_url=(nonprofit.profile_image_url if nonprofit else None)
        or metadata.profile_image_url,
        banner_image_url=(nonprofit.banner_image_url if nonprofit else None)
        or metadata.banner_image_url,
    )

"""Nonprofit registration.

Validates the form and images, then performs the dependent writes in order:

    sign up -> upload profile image -> upload banner -> record image URLs
    -> create/update nonprofit row -> replace cause links

Each step commits before the next starts. A failing step raises
SubmissionError naming the step; nothing already written is undone (an
identity created in step 1 survives a failure in step 5).
"""

from __future__ import annotations

import logging

from sqlalchemy.exc import SQLAlchemyError

from findyouth.auth.base import AuthError, AuthProvider
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
from findyouth.models.metadata import NonprofitMetadata
from findyouth.models.types import RegistrationResult, RegistrationSubmission
from findyouth.storage.base import ObjectStorage, StorageError

logger = logging.getLogger(__name__)


def _metadata_from_submission(submission: RegistrationSubmission) -> NonprofitMetadata:
    return NonprofitMetadata(
        organization_name=submission.organization_name,
        phone=submission.phone,
        website=submission.website or None,
        social_media=submission.social_media,
        location=submission.location,
        description=submission.description,
        mission=submission.mission,
        causes=list(submission.causes),
    )


def register_nonprofit(
    session: DbSession,
    auth: AuthProvider,
    storage: ObjectStorage,
    submission: RegistrationSubmission,
    profile_image: ImageUpload | None,
    banner_image: ImageUpload | None = None,
) -> RegistrationResult:
    """Register a nonprofit.

    Args:
        session: Database session.
        auth: Auth provider used to create the identity.
        storage: Object storage for the images.
        submission: Validated registration form.
        profile_image: Required profile image.
        banner_image: Optional banner image.

    Returns:
        RegistrationResult for the new organization.

    Raises:
        ImageValidationError: If an image is missing or invalid (nothing written).
        SubmissionError: If a write step fails.
    """
    if profile_image is None:
        raise ImageValidationError("profile_image", "Profile picture is required")
    validate_profile_image(profile_image)
    if banner_image is not None:
        validate_banner_image(banner_image)

    causes = CauseSelection(submission.causes).selected
    metadata = _metadata_from_submission(submission)

    # Step 1: identity
    try:
        auth_session = auth.sign_up(submission.email, submission.password, metadata)
    except AuthError as e:
        raise SubmissionError("sign_up", str(e)) from e
    user_id = auth_session.user_id
    logger.info(f"Registration: created identity {user_id} for {submission.organization_name}")

    # Step 2: images
    try:
        profile_image_url = upload_profile_image(storage, user_id, profile_image)
    except StorageError as e:
        raise SubmissionError("profile_image", f"Failed to upload profile image: {e}") from e

    banner_image_url = None
    if banner_image is not None:
        try:
            banner_image_url = upload_banner_image(storage, user_id, banner_image)
        except StorageError as e:
            raise SubmissionError("banner_image", f"Failed to upload banner image: {e}") from e

    # Step 3: record image URLs on the identity
    metadata = metadata.model_copy(
        update={"profile_image_url": profile_image_url, "banner_image_url": banner_image_url}
    )
    try:
        auth_session = auth.update_metadata(auth_session, metadata)
    except AuthError as e:
        raise SubmissionError("metadata", str(e)) from e

    # Step 4: nonprofit row
    entity = nonprofit_from_metadata(user_id, auth_session.email, metadata)
    try:
        repo.save_nonprofit(session, entity, user_id)
        repo.commit(session)
    except (PermissionDeniedError, SQLAlchemyError) as e:
        session.rollback()
        raise SubmissionError("nonprofit", f"Failed to create nonprofit profile: {e}") from e

    # Step 5: causes
    try:
        linked = repo.replace_nonprofit_causes(session, user_id, causes)
        repo.commit(session)
    except SQLAlchemyError as e:
        session.rollback()
        raise SubmissionError("causes", f"Failed to save causes: {e}") from e

    logger.info(f"Registration complete for nonprofit {user_id}")

    return RegistrationResult(
        user_id=user_id,
        access_token=auth_session.access_token,
        profile_image_url=profile_image_url,
        banner_image_url=banner_image_url,
        causes=linked,
    )

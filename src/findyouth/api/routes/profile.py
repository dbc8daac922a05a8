"""Profile API endpoints.

GET /api/profile - Current profile form values
PUT /api/profile - Save profile edits
PUT /api/profile/images - Replace profile and/or banner image (multipart)
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile

from findyouth.api.app import get_auth_provider, get_db_session, get_storage, require_session
from findyouth.api.routes.registration import image_error, read_image_upload, submission_error
from findyouth.auth.base import AuthProvider, AuthSession
from findyouth.db.repo import DbSession
from findyouth.forms.errors import SubmissionError
from findyouth.forms.images import ImageValidationError
from findyouth.forms.profile import load_profile_form, update_profile, update_profile_images
from findyouth.models.types import ProfileForm, ProfileImages, ProfileUpdate
from findyouth.storage.base import ObjectStorage

router = APIRouter(prefix="/profile")


@router.get("", response_model=ProfileForm)
def get_profile(
    session: DbSession = Depends(get_db_session),
    auth_session: AuthSession = Depends(require_session),
) -> ProfileForm:
    """Get the caller's profile for editing."""
    return load_profile_form(session, auth_session)


@router.put("", response_model=ProfileForm)
def put_profile(
    update: ProfileUpdate,
    session: DbSession = Depends(get_db_session),
    auth: AuthProvider = Depends(get_auth_provider),
    auth_session: AuthSession = Depends(require_session),
) -> ProfileForm:
    """Save profile edits.

    Raises:
        HTTPException: 502 if a write step fails.
    """
    try:
        auth_session = update_profile(session, auth, auth_session, update)
    except SubmissionError as e:
        raise submission_error(e) from e

    return load_profile_form(session, auth_session)


@router.put("/images", response_model=ProfileImages)
def put_profile_images(
    profile_image: UploadFile | None = File(default=None),
    banner_image: UploadFile | None = File(default=None),
    session: DbSession = Depends(get_db_session),
    auth: AuthProvider = Depends(get_auth_provider),
    storage: ObjectStorage = Depends(get_storage),
    auth_session: AuthSession = Depends(require_session),
) -> ProfileImages:
    """Replace the caller's profile and/or banner image.

    Raises:
        HTTPException: 422 if an image is invalid, 502 if a write step fails.
    """
    try:
        _, images = update_profile_images(
            session,
            auth,
            storage,
            auth_session,
            profile_image=read_image_upload(profile_image),
            banner_image=read_image_upload(banner_image),
        )
    except ImageValidationError as e:
        raise image_error(e) from e
    except SubmissionError as e:
        raise submission_error(e) from e

    return images

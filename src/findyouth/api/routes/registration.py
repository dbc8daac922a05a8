"""Registration API endpoint.

POST /api/register - Register a nonprofit (multipart form)

Form fields:
- payload: JSON RegistrationSubmission
- profile_image: required image file
- banner_image: optional image file
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
from fastapi.encoders import jsonable_encoder
from pydantic import ValidationError

from findyouth.api.app import get_auth_provider, get_db_session, get_storage
from findyouth.auth.base import AuthProvider
from findyouth.db.repo import DbSession
from findyouth.forms.errors import SubmissionError
from findyouth.forms.images import ImageUpload, ImageValidationError
from findyouth.forms.registration import register_nonprofit
from findyouth.models.types import RegistrationResult, RegistrationSubmission
from findyouth.storage.base import ObjectStorage

router = APIRouter()


def read_image_upload(file: UploadFile | None) -> ImageUpload | None:
    """Read an uploaded file into an ImageUpload. Empty parts count as missing."""
    if file is None:
        return None
    data = file.file.read()
    if not data and not file.filename:
        return None
    return ImageUpload(
        filename=file.filename or "",
        content_type=file.content_type or "application/octet-stream",
        data=data,
    )


def image_error(e: ImageValidationError) -> HTTPException:
    """422 response for an image field, shaped like FastAPI's own errors."""
    return HTTPException(
        status_code=422,
        detail=[{"loc": ["body", e.field], "msg": e.message, "type": "value_error"}],
    )


def submission_error(e: SubmissionError) -> HTTPException:
    """Map a failed submission step to a response; the message is kept verbatim."""
    status_code = 409 if e.step == "sign_up" else 502
    return HTTPException(status_code=status_code, detail={"step": e.step, "message": e.message})


@router.post("/register", response_model=RegistrationResult, status_code=201)
def register(
    payload: str = Form(...),
    profile_image: UploadFile | None = File(default=None),
    banner_image: UploadFile | None = File(default=None),
    session: DbSession = Depends(get_db_session),
    auth: AuthProvider = Depends(get_auth_provider),
    storage: ObjectStorage = Depends(get_storage),
) -> RegistrationResult:
    """Register a nonprofit organization.

    Args:
        payload: Registration form as JSON.
        profile_image: Profile image file.
        banner_image: Optional banner image file.
        session: Database session (injected).
        auth: Auth provider (injected).
        storage: Object storage (injected).

    Returns:
        RegistrationResult with the new organization's id and token.

    Raises:
        HTTPException: 422 on validation errors, 409 if the email is taken,
            502 if a later step fails.
    """
    try:
        submission = RegistrationSubmission.model_validate_json(payload)
    except ValidationError as e:
        raise HTTPException(
            status_code=422,
            detail=jsonable_encoder(e.errors(include_url=False, include_context=False)),
        ) from e

    try:
        return register_nonprofit(
            session,
            auth,
            storage,
            submission,
            read_image_upload(profile_image),
            read_image_upload(banner_image),
        )
    except ImageValidationError as e:
        raise image_error(e) from e
    except SubmissionError as e:
        raise submission_error(e) from e

"""Tests for nonprofit registration.

The write sequence is sign up -> images -> metadata -> nonprofit row ->
causes. A failure aborts the remaining steps without undoing earlier ones.
"""

from unittest.mock import patch

import pytest
from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError

from findyouth.db import repo
from findyouth.forms.errors import SubmissionError
from findyouth.forms.images import ImageUpload, ImageValidationError
from findyouth.forms.registration import register_nonprofit
from findyouth.models.types import RegistrationSubmission
from findyouth.storage.base import ObjectStorage, StorageError


def registration_data(**overrides) -> dict:
    data = {
        "organization_name": "Vancouver Youth Coalition",
        "password": "Str0ng!Pass",
        "email": "info@vyc.org",
        "phone": "6045551234",
        "website": "https://vyc.org",
        "social_media": "https://instagram.com/vyc",
        "location": "Vancouver",
        "description": "We connect youth with local volunteer work.",
        "mission": "Empower every young person to serve their community.",
        "causes": ["Youth", "Education"],
    }
    data.update(overrides)
    return data


class BrokenStorage(ObjectStorage):
    """Storage that refuses every upload."""

    def upload(self, bucket, name, data, content_type):
        raise StorageError("bucket not found")

    def public_url(self, bucket, name):
        return f"http://storage.invalid/{bucket}/{name}"


class TestRegistrationSubmission:
    """Tests for registration form validation."""

    def test_valid(self):
        submission = RegistrationSubmission(**registration_data())
        assert submission.causes == ["Youth", "Education"]

    def test_empty_website_allowed(self):
        assert RegistrationSubmission(**registration_data(website="")).website == ""

    @pytest.mark.parametrize(
        "field,value",
        [
            ("organization_name", "V"),
            ("email", "not-an-email"),
            ("password", "password"),
            ("phone", "604555"),
            ("website", "not a url"),
            ("social_media", ""),
            ("location", "V"),
            ("description", "Too short"),
            ("mission", "Too short"),
            ("causes", []),
            ("causes", ["Youth", "Health", "Sports", "Animals"]),
            ("causes", ["Knitting"]),
        ],
    )
    def test_field_rules(self, field, value):
        with pytest.raises(ValidationError) as exc_info:
            RegistrationSubmission(**registration_data(**{field: value}))
        assert exc_info.value.errors()[0]["loc"][0] == field


class TestRegisterNonprofit:
    """Tests for register_nonprofit."""

    def test_full_registration(self, session, auth, storage, make_image):
        submission = RegistrationSubmission(**registration_data())
        profile = ImageUpload("logo.png", "image/png", make_image(300, 300))
        banner = ImageUpload("banner.jpg", "image/jpeg", make_image(1200, 300, "JPEG"))

        result = register_nonprofit(session, auth, storage, submission, profile, banner)

        assert result.profile_image_url.endswith(f"/profile-images/{result.user_id}.png")
        assert result.banner_image_url.endswith(f"/profile-images/banner-{result.user_id}.jpg")
        assert sorted(result.causes) == ["Education", "Youth"]

        nonprofit = repo.get_nonprofit(session, result.user_id)
        assert nonprofit.organization_name == "Vancouver Youth Coalition"
        assert nonprofit.email == "info@vyc.org"
        assert nonprofit.profile_image_url == result.profile_image_url
        assert nonprofit.banner_image_url == result.banner_image_url
        assert nonprofit.approved is False

        auth_session = auth.get_session(result.access_token)
        assert auth_session.metadata.profile_image_url == result.profile_image_url
        assert auth_session.metadata.causes == ["Youth", "Education"]

    def test_banner_optional(self, session, auth, storage, make_image):
        submission = RegistrationSubmission(**registration_data())
        profile = ImageUpload("logo.png", "image/png", make_image(300, 300))

        result = register_nonprofit(session, auth, storage, submission, profile)

        assert result.banner_image_url is None

    def test_profile_image_required(self, session, auth, storage):
        """Nothing is written when the profile image is missing."""
        submission = RegistrationSubmission(**registration_data())

        with pytest.raises(ImageValidationError) as exc_info:
            register_nonprofit(session, auth, storage, submission, None)

        assert exc_info.value.field == "profile_image"
        assert repo.get_user_by_email(session, "info@vyc.org") is None

    def test_invalid_banner_writes_nothing(self, session, auth, storage, make_image):
        submission = RegistrationSubmission(**registration_data())
        profile = ImageUpload("logo.png", "image/png", make_image(300, 300))
        banner = ImageUpload("banner.png", "image/png", make_image(600, 600))

        with pytest.raises(ImageValidationError):
            register_nonprofit(session, auth, storage, submission, profile, banner)

        assert repo.get_user_by_email(session, "info@vyc.org") is None

    def test_duplicate_email(self, session, auth, storage, make_image):
        auth.sign_up("info@vyc.org", "Str0ng!Pass")
        submission = RegistrationSubmission(**registration_data())
        profile = ImageUpload("logo.png", "image/png", make_image(300, 300))

        with pytest.raises(SubmissionError) as exc_info:
            register_nonprofit(session, auth, storage, submission, profile)

        assert exc_info.value.step == "sign_up"
        assert exc_info.value.message == "User already registered"

    def test_upload_failure_keeps_identity(self, session, auth, make_image):
        """A failed upload aborts without removing the created identity."""
        submission = RegistrationSubmission(**registration_data())
        profile = ImageUpload("logo.png", "image/png", make_image(300, 300))

        with pytest.raises(SubmissionError) as exc_info:
            register_nonprofit(session, auth, BrokenStorage(), submission, profile)

        assert exc_info.value.step == "profile_image"
        user = repo.get_user_by_email(session, "info@vyc.org")
        assert user is not None
        assert repo.get_nonprofit(session, user.user_id) is None

    def test_nonprofit_failure_keeps_identity(self, session, auth, storage, make_image):
        submission = RegistrationSubmission(**registration_data())
        profile = ImageUpload("logo.png", "image/png", make_image(300, 300))

        with patch("findyouth.db.repo.save_nonprofit", side_effect=SQLAlchemyError("boom")):
            with pytest.raises(SubmissionError) as exc_info:
                register_nonprofit(session, auth, storage, submission, profile)

        assert exc_info.value.step == "nonprofit"
        user = repo.get_user_by_email(session, "info@vyc.org")
        assert user is not None
        assert repo.get_nonprofit(session, user.user_id) is None

    def test_causes_failure_keeps_row(self, session, auth, storage, make_image):
        submission = RegistrationSubmission(**registration_data())
        profile = ImageUpload("logo.png", "image/png", make_image(300, 300))

        with patch(
            "findyouth.db.repo.replace_nonprofit_causes", side_effect=SQLAlchemyError("boom")
        ):
            with pytest.raises(SubmissionError) as exc_info:
                register_nonprofit(session, auth, storage, submission, profile)

        assert exc_info.value.step == "causes"
        user = repo.get_user_by_email(session, "info@vyc.org")
        assert repo.get_nonprofit(session, user.user_id) is not None
        assert repo.get_nonprofit_cause_names(session, user.user_id) == []

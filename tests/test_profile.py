"""Tests for nonprofit profile editing."""

from unittest.mock import patch

import pytest
from sqlalchemy.exc import SQLAlchemyError

from findyouth.db import repo
from findyouth.forms.errors import SubmissionError
from findyouth.forms.images import ImageUpload, ImageValidationError
from findyouth.forms.profile import load_profile_form, update_profile, update_profile_images
from findyouth.forms.registration import register_nonprofit
from findyouth.models.metadata import NonprofitMetadata
from findyouth.models.types import ProfileUpdate, RegistrationSubmission

PASSWORD = "Str0ng!Pass"


def profile_update(**overrides) -> ProfileUpdate:
    data = {
        "organization_name": "Vancouver Youth Collective",
        "description": "A new description of what we do for youth.",
        "mission": "A new mission statement for the organization.",
        "location": "Burnaby",
        "website": "https://vyc.org/about",
        "phone": "",
        "social_media": None,
        "causes": ["Sports"],
    }
    data.update(overrides)
    return ProfileUpdate(**data)


@pytest.fixture
def registered(session, auth, storage, make_image):
    """A registered nonprofit and its signed-in session."""
    submission = RegistrationSubmission(
        organization_name="Vancouver Youth Coalition",
        password=PASSWORD,
        email="info@vyc.org",
        phone="6045551234",
        website="https://vyc.org",
        social_media="https://instagram.com/vyc",
        location="Vancouver",
        description="We connect youth with local volunteer work.",
        mission="Empower every young person to serve their community.",
        causes=["Youth", "Education"],
    )
    profile = ImageUpload("logo.png", "image/png", make_image(300, 300))
    result = register_nonprofit(session, auth, storage, submission, profile)
    return auth.get_session(result.access_token)


class TestLoadProfileForm:
    """Tests for load_profile_form."""

    def test_from_nonprofit_row(self, session, registered):
        form = load_profile_form(session, registered)

        assert form.source == "nonprofit"
        assert form.organization_name == "Vancouver Youth Coalition"
        assert form.email == "info@vyc.org"
        assert form.causes == ["Education", "Youth"]

    def test_from_metadata(self, session, auth):
        auth_session = auth.sign_up(
            "info@vyc.org",
            PASSWORD,
            NonprofitMetadata(organization_name="Metadata Org", causes=["Health"]),
        )

        form = load_profile_form(session, auth_session)

        assert form.source == "metadata"
        assert form.organization_name == "Metadata Org"
        assert form.causes == ["Health"]
        assert form.website == ""

    def test_empty(self, session, auth):
        auth_session = auth.sign_up("info@vyc.org", PASSWORD)

        form = load_profile_form(session, auth_session)

        assert form.source == "empty"
        assert form.email == "info@vyc.org"


class TestUpdateProfile:
    """Tests for update_profile."""

    def test_updates_metadata_row_and_causes(self, session, auth, registered):
        original_image = repo.get_nonprofit(session, registered.user_id).profile_image_url

        updated = update_profile(session, auth, registered, profile_update())

        assert updated.metadata.organization_name == "Vancouver Youth Collective"
        assert updated.metadata.causes == ["Sports"]
        nonprofit = repo.get_nonprofit(session, registered.user_id)
        assert nonprofit.organization_name == "Vancouver Youth Collective"
        assert nonprofit.location == "Burnaby"
        assert nonprofit.phone is None
        assert nonprofit.profile_image_url == original_image
        assert repo.get_nonprofit_cause_names(session, registered.user_id) == ["Sports"]

    def test_creates_missing_row(self, session, auth):
        auth_session = auth.sign_up("info@vyc.org", PASSWORD)

        update_profile(session, auth, auth_session, profile_update())

        nonprofit = repo.get_nonprofit(session, auth_session.user_id)
        assert nonprofit.organization_name == "Vancouver Youth Collective"
        assert nonprofit.email == "info@vyc.org"

    def test_row_failure_skips_causes(self, session, auth, registered):
        """Metadata is saved, the row write fails, causes are untouched."""
        with patch("findyouth.db.repo.save_nonprofit", side_effect=SQLAlchemyError("boom")):
            with pytest.raises(SubmissionError) as exc_info:
                update_profile(session, auth, registered, profile_update())

        assert exc_info.value.step == "nonprofit"
        assert repo.get_nonprofit_cause_names(session, registered.user_id) == [
            "Education",
            "Youth",
        ]
        resolved = auth.get_session(registered.access_token)
        assert resolved.metadata.organization_name == "Vancouver Youth Collective"


class TestUpdateProfileImages:
    """Tests for update_profile_images."""

    def test_replace_banner(self, session, auth, storage, registered, make_image):
        banner = ImageUpload("banner.png", "image/png", make_image(1200, 300))

        updated, images = update_profile_images(
            session, auth, storage, registered, banner_image=banner
        )

        expected = f"http://testserver/storage/profile-images/banner-{registered.user_id}.png"
        assert images.banner_image_url == expected
        assert images.profile_image_url.endswith(f"{registered.user_id}.png")
        assert updated.metadata.banner_image_url == expected
        assert repo.get_nonprofit(session, registered.user_id).banner_image_url == expected

    def test_without_row_updates_metadata(self, session, auth, storage, make_image):
        auth_session = auth.sign_up("info@vyc.org", PASSWORD)
        profile = ImageUpload("logo.gif", "image/gif", make_image(100, 100, "GIF"))

        updated, images = update_profile_images(
            session, auth, storage, auth_session, profile_image=profile
        )

        assert images.profile_image_url.endswith(f"{auth_session.user_id}.gif")
        assert updated.metadata.profile_image_url == images.profile_image_url

    def test_no_images(self, session, auth, storage, registered):
        with pytest.raises(ImageValidationError):
            update_profile_images(session, auth, storage, registered)

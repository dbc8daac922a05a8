"""Pydantic models for FindYouth API.

Request schemas carry the form validation rules; response models are the
view models the presentation layer renders.
"""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import (
    BaseModel,
    EmailStr,
    Field,
    HttpUrl,
    TypeAdapter,
    ValidationError,
    field_validator,
    model_validator,
)

from findyouth.auth.base import password_problems
from findyouth.models.domain import CAUSE_AREAS, MAX_CAUSES
from findyouth.models.metadata import NonprofitMetadata

_http_url = TypeAdapter(HttpUrl)


def _check_url(value: str | None, message: str) -> str | None:
    """Validate an optional URL, keeping the caller's spelling.

    Empty strings are treated as "not provided".
    """
    if value is None or value == "":
        return value
    try:
        _http_url.validate_python(value)
    except ValidationError as e:
        raise ValueError(message) from e
    return value


def _check_causes(causes: list[str]) -> list[str]:
    """Validate causes against the vocabulary and drop duplicates."""
    unknown = [c for c in causes if c not in CAUSE_AREAS]
    if unknown:
        raise ValueError(f"Unknown cause: {unknown[0]}")
    return list(dict.fromkeys(causes))


# ============================================================================
# Events
# ============================================================================


class EventView(BaseModel):
    """Event merged with its organization's display data and rating."""

    id: str
    title: str
    description: str
    date: datetime
    end_date: datetime | None
    location: str
    cause_area: str | None
    image_url: str | None
    signup_form_url: str | None
    created_at: datetime | None
    organization_id: str
    organization_name: str
    organization_image_url: str
    rating: float
    rating_count: int


class EventFilters(BaseModel):
    """Event list filters. Empty values mean "no filter"."""

    keyword: str | None = None
    cause: str | None = None
    location: str | None = None
    organization: str | None = None


class FilterOptions(BaseModel):
    """Values the event filter controls can offer."""

    causes: list[str]
    locations: list[str]
    organizations: list[str]


class EventSubmission(BaseModel):
    """Event create/edit form."""

    title: str = Field(min_length=5)
    description: str = Field(min_length=20)
    date: datetime
    end_date: datetime | None = None
    location: str = Field(min_length=1)
    cause_area: str = Field(min_length=1)
    image_url: str | None = None
    signup_form_url: str | None = None

    @field_validator("image_url")
    @classmethod
    def _image_url(cls, v: str | None) -> str | None:
        return _check_url(v, "Please enter a valid image URL") or None

    @field_validator("signup_form_url")
    @classmethod
    def _signup_form_url(cls, v: str | None) -> str | None:
        return _check_url(v, "Please enter a valid URL") or None

    @model_validator(mode="after")
    def _end_after_start(self) -> EventSubmission:
        if self.end_date is not None and self.end_date < self.date:
            raise ValueError("End date must not be before the start date")
        return self


# ============================================================================
# Organizations and Reviews
# ============================================================================


class RatingView(BaseModel):
    """Aggregate rating for an organization."""

    average: float
    count: int


class OrganizationDetail(BaseModel):
    """Organization profile page."""

    id: str
    name: str
    slug: str
    description: str
    mission: str | None
    location: str
    email: str | None
    phone: str | None
    website: str | None
    social_media: str | None
    profile_image_url: str
    banner_image_url: str | None
    approved: bool
    causes: list[str]
    rating: RatingView
    events: list[EventView]


class ReviewSubmission(BaseModel):
    """Rating submission. Anonymous reviewers send their device id."""

    rating: int = Field(ge=1, le=5)
    comment: str | None = Field(default=None, max_length=2000)
    anonymous_id: str | None = Field(default=None, min_length=1, max_length=64)


class ReviewResult(BaseModel):
    """Outcome of a rating submission."""

    review_id: str
    nonprofit_id: str
    rating: int
    status: Literal["created", "updated"]
    summary: RatingView


class ReviewerRating(BaseModel):
    """The caller's own rating for an organization."""

    nonprofit_id: str
    rating: int | None


# ============================================================================
# Auth
# ============================================================================


class SignUpRequest(BaseModel):
    """Plain account sign-up."""

    email: EmailStr
    password: str
    organization_name: str | None = None

    @field_validator("password")
    @classmethod
    def _password_policy(cls, v: str) -> str:
        problems = password_problems(v)
        if problems:
            raise ValueError(problems[0])
        return v


class SignInRequest(BaseModel):
    """Email/password sign-in."""

    email: EmailStr
    password: str


class SessionResponse(BaseModel):
    """Signed-in session as returned to clients."""

    user_id: str
    email: str
    access_token: str
    token_type: Literal["bearer"] = "bearer"
    is_admin: bool
    metadata: NonprofitMetadata


# ============================================================================
# Registration and Profile
# ============================================================================


class RegistrationSubmission(BaseModel):
    """Nonprofit registration form."""

    organization_name: str = Field(min_length=2)
    password: str
    email: EmailStr
    phone: str = Field(min_length=10)
    website: str | None = None
    social_media: str
    location: str = Field(min_length=2)
    description: str = Field(min_length=20)
    mission: str = Field(min_length=20)
    causes: list[str] = Field(min_length=1, max_length=MAX_CAUSES)

    @field_validator("password")
    @classmethod
    def _password_policy(cls, v: str) -> str:
        problems = password_problems(v)
        if problems:
            raise ValueError(problems[0])
        return v

    @field_validator("website")
    @classmethod
    def _website(cls, v: str | None) -> str | None:
        return _check_url(v, "Please enter a valid URL.")

    @field_validator("social_media")
    @classmethod
    def _social_media(cls, v: str) -> str:
        if not v:
            raise ValueError("Please enter a valid social media URL.")
        return _check_url(v, "Please enter a valid social media URL.")

    @field_validator("causes")
    @classmethod
    def _causes(cls, v: list[str]) -> list[str]:
        return _check_causes(v)


class RegistrationResult(BaseModel):
    """Outcome of a completed registration."""

    user_id: str
    access_token: str
    profile_image_url: str
    banner_image_url: str | None
    causes: list[str]


class ProfileUpdate(BaseModel):
    """Nonprofit profile edit form."""

    organization_name: str = Field(min_length=2)
    description: str = Field(min_length=20)
    mission: str = Field(min_length=20)
    location: str = Field(min_length=2)
    website: str | None = None
    phone: str | None = None
    social_media: str | None = None
    causes: list[str] = Field(min_length=1, max_length=MAX_CAUSES)

    @field_validator("website")
    @classmethod
    def _website(cls, v: str | None) -> str | None:
        return _check_url(v, "Please enter a valid URL.")

    @field_validator("social_media")
    @classmethod
    def _social_media(cls, v: str | None) -> str | None:
        return _check_url(v, "Please enter a valid social media URL.")

    @field_validator("phone")
    @classmethod
    def _phone(cls, v: str | None) -> str | None:
        if v and len(v) < 10:
            raise ValueError("Please enter a valid phone number.")
        return v

    @field_validator("causes")
    @classmethod
    def _causes(cls, v: list[str]) -> list[str]:
        return _check_causes(v)


class ProfileForm(BaseModel):
    """Current values for the profile edit form."""

    organization_name: str
    email: str
    description: str
    mission: str
    location: str
    website: str
    phone: str
    social_media: str
    causes: list[str]
    source: Literal["nonprofit", "metadata", "empty"]


class ProfileImages(BaseModel):
    """Image URLs after a profile image update."""

    profile_image_url: str | None
    banner_image_url: str | None

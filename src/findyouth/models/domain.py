"""Domain models for FindYouth.

Pure Python dataclasses representing domain entities.
These models are independent of SQLAlchemy and used throughout
the application for clean separation from the database layer.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

# ============================================================================
# Vocabularies
# ============================================================================

CAUSE_AREAS: list[str] = [
    "Advocacy & Human Rights",
    "Education",
    "Sports",
    "Health",
    "Arts & Culture",
    "Environment",
    "Homeless",
    "Animals",
    "Youth",
    "Seniors",
    "Religion",
]

LOCATIONS: list[str] = [
    "Vancouver",
    "Burnaby",
    "Richmond",
    "Surrey",
    "North Vancouver",
    "West Vancouver",
]

MAX_CAUSES = 3

# Development organizations known by id before they have rows
NONPROFIT_NAME_MAP: dict[str, str] = {
    "550e8400-e29b-41d4-a716-446655440000": "Vancouver Youth Coalition",
    "550e8400-e29b-41d4-a716-446655440001": "Burnaby Environmental Network",
    "550e8400-e29b-41d4-a716-446655440002": "Richmond Youth Arts Collective",
    "550e8400-e29b-41d4-a716-446655440003": "Surrey Community Food Bank",
    "550e8400-e29b-41d4-a716-446655440004": "North Shore Animal Rescue",
}

FALLBACK_ORGANIZATION_NAME = "Organization"


# ============================================================================
# Auth Domain
# ============================================================================


@dataclass
class UserEntity:
    """Domain model for an auth identity."""

    user_id: str
    email: str
    password_hash: str
    metadata_json: str | None = None
    is_admin: bool = False


# ============================================================================
# Organization Domain
# ============================================================================


@dataclass
class NonprofitEntity:
    """Domain model for a nonprofit organization row."""

    id: str
    organization_name: str
    email: str
    phone: str | None = None
    website: str | None = None
    social_media: str | None = None
    location: str | None = None
    description: str | None = None
    mission: str | None = None
    profile_image_url: str | None = None
    banner_image_url: str | None = None
    approved: bool = False


@dataclass
class ProfileEntity:
    """Domain model for a generic user profile."""

    id: str
    full_name: str | None = None
    avatar_url: str | None = None


@dataclass
class OrganizationInfo:
    """Resolved display data for an organization.

    Always populated: resolution degrades, it never fails.
    """

    organization_id: str
    name: str
    profile_image_url: str
    description: str
    location: str
    banner_image_url: str | None = None
    source: str = "fallback"


# ============================================================================
# Event Domain
# ============================================================================


@dataclass
class EventEntity:
    """Domain model for an event row."""

    id: str
    title: str
    description: str
    location: str
    date: datetime
    nonprofit_id: str
    end_date: datetime | None = None
    image_url: str | None = None
    cause_area: str | None = None
    signup_form_url: str | None = None
    created_at: datetime | None = None


# ============================================================================
# Review Domain
# ============================================================================


@dataclass
class ReviewEntity:
    """Domain model for an organization review."""

    id: str
    nonprofit_id: str
    rating: int
    comment: str | None = None
    user_id: str | None = None
    anonymous_id: str | None = None


@dataclass
class RatingSummary:
    """Aggregate rating for one organization."""

    average: float
    count: int

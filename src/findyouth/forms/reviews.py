"""Rating submission for organizations.

One review per reviewer per organization: a repeat submission updates the
existing review. Reviewers are either signed-in users or anonymous devices
identified by a client-held id.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Literal

from findyouth.aggregation.ratings import MAX_RATING, MIN_RATING, summarize_ratings
from findyouth.db import repo
from findyouth.db.repo import DbSession
from findyouth.models.domain import NONPROFIT_NAME_MAP, RatingSummary

logger = logging.getLogger(__name__)


class UnknownOrganizationError(ValueError):
    """The organization id matches no nonprofit, event owner or known id."""


@dataclass
class ReviewOutcome:
    """Result of a review submission."""

    review_id: str
    nonprofit_id: str
    rating: int
    status: Literal["created", "updated"]
    summary: RatingSummary


def organization_exists(session: DbSession, nonprofit_id: str) -> bool:
    """Check that an organization id refers to something reviewable.

    Events may reference organizations without a nonprofit row, so an id
    that owns events counts as well.
    """
    if nonprofit_id in NONPROFIT_NAME_MAP:
        return True
    if repo.get_nonprofit(session, nonprofit_id) is not None:
        return True
    return bool(
        repo.query_events(
            session, include_cause_area=False, organization_id=nonprofit_id, limit=1
        )
    )


def submit_review(
    session: DbSession,
    nonprofit_id: str,
    rating: int,
    *,
    anonymous_id: str | None = None,
    user_id: str | None = None,
    comment: str | None = None,
) -> ReviewOutcome:
    """Create or update a reviewer's rating for an organization.

    Args:
        session: Database session.
        nonprofit_id: Organization being rated.
        rating: Star rating, 1 to 5.
        anonymous_id: Device id of an anonymous reviewer.
        user_id: Id of a signed-in reviewer.
        comment: Optional review text.

    Returns:
        ReviewOutcome with the new rating summary.

    Raises:
        ValueError: If the rating is out of range or the reviewer identity
            is missing or ambiguous.
        UnknownOrganizationError: If the organization is unknown.
    """
    if not MIN_RATING <= rating <= MAX_RATING:
        raise ValueError(f"Rating must be between {MIN_RATING} and {MAX_RATING}, got {rating}")
    if (anonymous_id is None) == (user_id is None):
        raise ValueError("Exactly one of anonymous_id or user_id is required")
    if not organization_exists(session, nonprofit_id):
        raise UnknownOrganizationError(f"Nonprofit not found: {nonprofit_id}")

    review, created = repo.upsert_review(
        session,
        nonprofit_id,
        rating,
        comment=comment,
        anonymous_id=anonymous_id,
        user_id=user_id,
    )
    repo.commit(session)

    status = "created" if created else "updated"
    logger.info(f"Review {review.id} {status} for nonprofit {nonprofit_id}")

    return ReviewOutcome(
        review_id=review.id,
        nonprofit_id=nonprofit_id,
        rating=review.rating,
        status=status,
        summary=summarize_ratings(repo.get_ratings_for_nonprofit(session, nonprofit_id)),
    )


def get_reviewer_rating(
    session: DbSession,
    nonprofit_id: str,
    *,
    anonymous_id: str | None = None,
    user_id: str | None = None,
) -> int | None:
    """The rating this reviewer already gave the organization, if any."""
    review = repo.get_review_for_reviewer(
        session, nonprofit_id, anonymous_id=anonymous_id, user_id=user_id
    )
    return review.rating if review else None

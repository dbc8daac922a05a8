"""Nonprofits API endpoints.

GET /api/nonprofits/{nonprofit_id} - Organization detail
GET /api/nonprofits/by-name/{slug} - Organization detail by name slug
GET /api/nonprofits/{nonprofit_id}/rating - Rating summary
POST /api/nonprofits/{nonprofit_id}/reviews - Rate an organization
GET /api/nonprofits/{nonprofit_id}/reviews/mine - Caller's own rating
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, Response

from findyouth.aggregation.events import assemble_event_views, fetch_events
from findyouth.aggregation.organizations import OrganizationResolver
from findyouth.aggregation.ratings import summarize_ratings
from findyouth.api.app import get_current_session, get_db_session, get_resolver
from findyouth.auth.base import AuthSession
from findyouth.core.identity import organization_slug, slug_to_organization_name
from findyouth.db import repo
from findyouth.db.repo import DbSession
from findyouth.forms.reviews import (
    UnknownOrganizationError,
    get_reviewer_rating,
    organization_exists,
    submit_review,
)
from findyouth.models.domain import NONPROFIT_NAME_MAP, OrganizationInfo
from findyouth.models.types import (
    OrganizationDetail,
    RatingView,
    ReviewerRating,
    ReviewResult,
    ReviewSubmission,
)

router = APIRouter()


def _build_organization_detail(
    session: DbSession,
    resolver: OrganizationResolver,
    nonprofit_id: str,
    info: OrganizationInfo | None = None,
) -> OrganizationDetail:
    """Build OrganizationDetail from every available source.

    Args:
        session: Database session.
        resolver: Organization resolver for this request.
        nonprofit_id: Organization to describe.
        info: Already resolved display data, if any.

    Returns:
        OrganizationDetail model.
    """
    if info is None:
        info = resolver.resolve(nonprofit_id)
    nonprofit = repo.get_nonprofit(session, nonprofit_id)

    if nonprofit is not None:
        causes = repo.get_nonprofit_cause_names(session, nonprofit_id)
    elif info.source == "session":
        causes = list(resolver.auth_session.metadata.causes)
    else:
        causes = []

    metadata = resolver.auth_session.metadata if info.source == "session" else None

    events = fetch_events(session, organization_id=nonprofit_id)
    summary = summarize_ratings(repo.get_ratings_for_nonprofit(session, nonprofit_id))

    return OrganizationDetail(
        id=nonprofit_id,
        name=info.name,
        slug=organization_slug(info.name),
        description=info.description,
        mission=nonprofit.mission if nonprofit else (metadata.mission if metadata else None),
        location=info.location,
        email=nonprofit.email if nonprofit else None,
        phone=nonprofit.phone if nonprofit else (metadata.phone if metadata else None),
        website=nonprofit.website if nonprofit else (metadata.website if metadata else None),
        social_media=(
            nonprofit.social_media if nonprofit else (metadata.social_media if metadata else None)
        ),
        profile_image_url=info.profile_image_url,
        banner_image_url=info.banner_image_url,
        approved=nonprofit.approved if nonprofit else False,
        causes=causes,
        rating=RatingView(average=summary.average, count=summary.count),
        events=assemble_event_views(session, events, resolver),
    )


@router.get("/nonprofits/by-name/{slug}", response_model=OrganizationDetail)
def get_nonprofit_by_name(
    slug: str,
    session: DbSession = Depends(get_db_session),
    resolver: OrganizationResolver = Depends(get_resolver),
) -> OrganizationDetail:
    """Get organization detail from a name slug.

    Raises:
        HTTPException: 404 if no organization has that name.
    """
    slug = organization_slug(slug_to_organization_name(slug))

    for nonprofit in repo.list_nonprofits(session):
        if organization_slug(nonprofit.organization_name) == slug:
            return _build_organization_detail(session, resolver, nonprofit.id)

    for nonprofit_id, name in NONPROFIT_NAME_MAP.items():
        if organization_slug(name) == slug:
            return _build_organization_detail(session, resolver, nonprofit_id)

    raise HTTPException(status_code=404, detail="Nonprofit not found")


@router.get("/nonprofits/{nonprofit_id}", response_model=OrganizationDetail)
def get_nonprofit(
    nonprofit_id: str,
    session: DbSession = Depends(get_db_session),
    resolver: OrganizationResolver = Depends(get_resolver),
) -> OrganizationDetail:
    """Get organization detail.

    Args:
        nonprofit_id: Organization ID to fetch.
        session: Database session (injected).
        resolver: Organization resolver (injected).

    Returns:
        OrganizationDetail with profile, causes, rating and events.

    Raises:
        HTTPException: 404 if the organization is unknown.
    """
    # Any resolver stage short of the fallback counts as an existing organization
    info = resolver.resolve(nonprofit_id)
    if info.source == "fallback" and not organization_exists(session, nonprofit_id):
        raise HTTPException(status_code=404, detail="Nonprofit not found")

    return _build_organization_detail(session, resolver, nonprofit_id, info)


@router.get("/nonprofits/{nonprofit_id}/rating", response_model=RatingView)
def get_nonprofit_rating(
    nonprofit_id: str,
    session: DbSession = Depends(get_db_session),
) -> RatingView:
    """Get an organization's rating summary (default when unrated)."""
    summary = summarize_ratings(repo.get_ratings_for_nonprofit(session, nonprofit_id))
    return RatingView(average=summary.average, count=summary.count)


@router.post("/nonprofits/{nonprofit_id}/reviews", response_model=ReviewResult, status_code=201)
def create_review(
    nonprofit_id: str,
    review: ReviewSubmission,
    response: Response,
    session: DbSession = Depends(get_db_session),
    auth_session: AuthSession | None = Depends(get_current_session),
) -> ReviewResult:
    """Rate an organization.

    Signed-in callers review as themselves; anonymous callers must send
    their device anonymous_id. A repeat submission updates the existing
    review and returns 200.

    Raises:
        HTTPException: 404 if the organization is unknown, 422 if an
            anonymous caller sends no anonymous_id.
    """
    if auth_session is None and not review.anonymous_id:
        raise HTTPException(status_code=422, detail="anonymous_id is required when not signed in")

    try:
        outcome = submit_review(
            session,
            nonprofit_id,
            review.rating,
            anonymous_id=None if auth_session else review.anonymous_id,
            user_id=auth_session.user_id if auth_session else None,
            comment=review.comment,
        )
    except UnknownOrganizationError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e)) from e

    if outcome.status == "updated":
        response.status_code = 200

    return ReviewResult(
        review_id=outcome.review_id,
        nonprofit_id=outcome.nonprofit_id,
        rating=outcome.rating,
        status=outcome.status,
        summary=RatingView(average=outcome.summary.average, count=outcome.summary.count),
    )


@router.get("/nonprofits/{nonprofit_id}/reviews/mine", response_model=ReviewerRating)
def get_my_rating(
    nonprofit_id: str,
    anonymous_id: str | None = Query(default=None),
    session: DbSession = Depends(get_db_session),
    auth_session: AuthSession | None = Depends(get_current_session),
) -> ReviewerRating:
    """Get the caller's existing rating for an organization, if any."""
    if auth_session is not None:
        rating = get_reviewer_rating(session, nonprofit_id, user_id=auth_session.user_id)
    elif anonymous_id:
        rating = get_reviewer_rating(session, nonprofit_id, anonymous_id=anonymous_id)
    else:
        rating = None

    return ReviewerRating(nonprofit_id=nonprofit_id, rating=rating)

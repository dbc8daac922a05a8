"""Repository pattern for database operations.

Encapsulates all SQLAlchemy queries, keeping domain logic pure.
Returns domain models (not SQLAlchemy entities) to external callers.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import TYPE_CHECKING

from sqlalchemy import inspect, select
from sqlalchemy.orm import Session

from findyouth.db.schema import (
    AuthSessionRecord,
    Cause,
    Event,
    Nonprofit,
    NonprofitCause,
    Profile,
    Review,
    User,
)
from findyouth.models.domain import (
    EventEntity,
    NonprofitEntity,
    ProfileEntity,
    ReviewEntity,
    UserEntity,
)

if TYPE_CHECKING:
    from sqlalchemy.orm import Session as DbSession
else:
    DbSession = Session

# Re-export for external use
__all__ = ["DbSession", "PermissionDeniedError"]


class PermissionDeniedError(Exception):
    """Write rejected because the row belongs to another user."""


# ============================================================================
# Converters: SQLAlchemy -> Domain
# ============================================================================


def _user_to_entity(user: User) -> UserEntity:
    """Convert SQLAlchemy User to domain entity."""
    return UserEntity(
        user_id=user.user_id,
        email=user.email,
        password_hash=user.password_hash,
        metadata_json=user.metadata_json,
        is_admin=user.is_admin,
    )


def _nonprofit_to_entity(nonprofit: Nonprofit) -> NonprofitEntity:
    """Convert SQLAlchemy Nonprofit to domain entity."""
    return NonprofitEntity(
        id=nonprofit.id,
        organization_name=nonprofit.organization_name,
        email=nonprofit.email,
        phone=nonprofit.phone,
        website=nonprofit.website,
        social_media=nonprofit.social_media,
        location=nonprofit.location,
        description=nonprofit.description,
        mission=nonprofit.mission,
        profile_image_url=nonprofit.profile_image_url,
        banner_image_url=nonprofit.banner_image_url,
        approved=nonprofit.approved,
    )


def _profile_to_entity(profile: Profile) -> ProfileEntity:
    """Convert SQLAlchemy Profile to domain entity."""
    return ProfileEntity(
        id=profile.id,
        full_name=profile.full_name,
        avatar_url=profile.avatar_url,
    )


def _event_to_entity(event: Event) -> EventEntity:
    """Convert SQLAlchemy Event to domain entity."""
    return EventEntity(
        id=event.id,
        title=event.title,
        description=event.description,
        location=event.location,
        date=event.date,
        nonprofit_id=event.nonprofit_id,
        end_date=event.end_date,
        image_url=event.image_url,
        cause_area=event.cause_area,
        signup_form_url=event.signup_form_url,
        created_at=event.created_at,
    )


def _review_to_entity(review: Review) -> ReviewEntity:
    """Convert SQLAlchemy Review to domain entity."""
    return ReviewEntity(
        id=review.id,
        nonprofit_id=review.nonprofit_id,
        rating=review.rating,
        comment=review.comment,
        user_id=review.user_id,
        anonymous_id=review.anonymous_id,
    )


# ============================================================================
# User Repository
# ============================================================================


def get_user(session: DbSession, user_id: str) -> UserEntity | None:
    """Get user by ID."""
    user = session.query(User).filter(User.user_id == user_id).first()
    return _user_to_entity(user) if user else None


def get_user_by_email(session: DbSession, email: str) -> UserEntity | None:
    """Get user by email (case-insensitive)."""
    user = session.query(User).filter(User.email == email.lower()).first()
    return _user_to_entity(user) if user else None


def create_user(session: DbSession, entity: UserEntity) -> UserEntity:
    """Create a new user."""
    user = User(
        user_id=entity.user_id,
        email=entity.email.lower(),
        password_hash=entity.password_hash,
        metadata_json=entity.metadata_json,
        is_admin=entity.is_admin,
    )
    session.add(user)
    session.flush()
    return entity


def update_user_metadata(session: DbSession, user_id: str, metadata_json: str) -> None:
    """Replace a user's metadata blob."""
    user = session.query(User).filter(User.user_id == user_id).first()
    if user:
        user.metadata_json = metadata_json


def delete_user(session: DbSession, user_id: str) -> None:
    """Delete a user and their sign-in sessions."""
    session.query(AuthSessionRecord).filter(AuthSessionRecord.user_id == user_id).delete()
    session.query(User).filter(User.user_id == user_id).delete()


# ============================================================================
# Auth Session Repository
# ============================================================================


def create_auth_session(session: DbSession, user_id: str) -> str:
    """Record a new sign-in session and return its ID."""
    session_id = str(uuid.uuid4())
    session.add(AuthSessionRecord(session_id=session_id, user_id=user_id, revoked=False))
    return session_id


def is_auth_session_active(session: DbSession, session_id: str, user_id: str) -> bool:
    """Check that a sign-in session exists, belongs to user, and is not revoked."""
    record = (
        session.query(AuthSessionRecord)
        .filter(
            AuthSessionRecord.session_id == session_id,
            AuthSessionRecord.user_id == user_id,
        )
        .first()
    )
    return record is not None and not record.revoked


def revoke_auth_session(session: DbSession, session_id: str) -> None:
    """Revoke a sign-in session."""
    record = (
        session.query(AuthSessionRecord).filter(AuthSessionRecord.session_id == session_id).first()
    )
    if record:
        record.revoked = True


# ============================================================================
# Nonprofit Repository
# ============================================================================


def get_nonprofit(session: DbSession, nonprofit_id: str) -> NonprofitEntity | None:
    """Get nonprofit by ID."""
    nonprofit = session.query(Nonprofit).filter(Nonprofit.id == nonprofit_id).first()
    return _nonprofit_to_entity(nonprofit) if nonprofit else None


def list_nonprofits(session: DbSession, *, approved_only: bool = False) -> list[NonprofitEntity]:
    """List nonprofits ordered by name."""
    query = session.query(Nonprofit)
    if approved_only:
        query = query.filter(Nonprofit.approved.is_(True))
    return [_nonprofit_to_entity(n) for n in query.order_by(Nonprofit.organization_name).all()]


def save_nonprofit(
    session: DbSession,
    entity: NonprofitEntity,
    acting_user_id: str,
    *,
    acting_is_admin: bool = False,
) -> bool:
    """Insert or update a nonprofit row.

    Only the owning user (row id == user id) or an admin may write.

    Returns:
        True if the row was created, False if it was updated.

    Raises:
        PermissionDeniedError: If acting_user_id does not own the row.
    """
    if entity.id != acting_user_id and not acting_is_admin:
        raise PermissionDeniedError(
            f"User {acting_user_id} may not write nonprofit {entity.id}"
        )

    nonprofit = session.query(Nonprofit).filter(Nonprofit.id == entity.id).first()
    created = nonprofit is None
    if created:
        nonprofit = Nonprofit(id=entity.id, approved=entity.approved)
        session.add(nonprofit)
    else:
        nonprofit.updated_at = datetime.now(timezone.utc)

    nonprofit.organization_name = entity.organization_name
    nonprofit.email = entity.email
    nonprofit.phone = entity.phone
    nonprofit.website = entity.website
    nonprofit.social_media = entity.social_media
    nonprofit.location = entity.location
    nonprofit.description = entity.description
    nonprofit.mission = entity.mission
    nonprofit.profile_image_url = entity.profile_image_url
    nonprofit.banner_image_url = entity.banner_image_url
    session.flush()
    return created


def update_nonprofit_images(
    session: DbSession,
    nonprofit_id: str,
    *,
    profile_image_url: str | None = None,
    banner_image_url: str | None = None,
) -> None:
    """Update image URLs on an existing nonprofit row."""
    nonprofit = session.query(Nonprofit).filter(Nonprofit.id == nonprofit_id).first()
    if nonprofit:
        if profile_image_url is not None:
            nonprofit.profile_image_url = profile_image_url
        if banner_image_url is not None:
            nonprofit.banner_image_url = banner_image_url
        nonprofit.updated_at = datetime.now(timezone.utc)


# ============================================================================
# Profile Repository
# ============================================================================


def get_profile(session: DbSession, profile_id: str) -> ProfileEntity | None:
    """Get generic profile by ID."""
    profile = session.query(Profile).filter(Profile.id == profile_id).first()
    return _profile_to_entity(profile) if profile else None


# ============================================================================
# Event Repository
# ============================================================================


def events_table_has_column(session: DbSession, column: str) -> bool:
    """Check whether the live events table has a column.

    Older databases were created before cause_area existed.
    """
    columns = inspect(session.get_bind()).get_columns(Event.__tablename__)
    return any(c["name"] == column for c in columns)


def query_events(
    session: DbSession,
    *,
    include_cause_area: bool = True,
    organization_id: str | None = None,
    cause_area: str | None = None,
    limit: int | None = None,
) -> list[EventEntity]:
    """Query event rows ordered by date.

    Args:
        session: Database session.
        include_cause_area: Select the cause_area column. Must be False when
            the live table lacks it.
        organization_id: Only events owned by this organization.
        cause_area: Only events tagged with this cause.
        limit: Maximum rows to return.

    Returns:
        List of EventEntity (cause_area None when not selected).
    """
    columns = [
        Event.id,
        Event.title,
        Event.description,
        Event.location,
        Event.date,
        Event.nonprofit_id,
        Event.end_date,
        Event.image_url,
        Event.signup_form_url,
        Event.created_at,
    ]
    if include_cause_area:
        columns.append(Event.cause_area)

    stmt = select(*columns).order_by(Event.date)
    if organization_id is not None:
        stmt = stmt.where(Event.nonprofit_id == organization_id)
    if cause_area is not None:
        if not include_cause_area:
            return []
        stmt = stmt.where(Event.cause_area == cause_area)
    if limit is not None:
        stmt = stmt.limit(limit)

    return [
        EventEntity(
            id=row.id,
            title=row.title,
            description=row.description,
            location=row.location,
            date=row.date,
            nonprofit_id=row.nonprofit_id,
            end_date=row.end_date,
            image_url=row.image_url,
            cause_area=row.cause_area if include_cause_area else None,
            signup_form_url=row.signup_form_url,
            created_at=row.created_at,
        )
        for row in session.execute(stmt)
    ]


def get_event(session: DbSession, event_id: str) -> EventEntity | None:
    """Get event by ID."""
    event = session.query(Event).filter(Event.id == event_id).first()
    return _event_to_entity(event) if event else None


def create_event(session: DbSession, entity: EventEntity) -> EventEntity:
    """Create a new event."""
    event = Event(
        id=entity.id,
        title=entity.title,
        description=entity.description,
        location=entity.location,
        date=entity.date,
        end_date=entity.end_date,
        nonprofit_id=entity.nonprofit_id,
        image_url=entity.image_url,
        cause_area=entity.cause_area,
        signup_form_url=entity.signup_form_url,
    )
    session.add(event)
    session.flush()
    return _event_to_entity(event)


def update_event(session: DbSession, entity: EventEntity) -> None:
    """Update an event's editable fields."""
    event = session.query(Event).filter(Event.id == entity.id).first()
    if event:
        event.title = entity.title
        event.description = entity.description
        event.location = entity.location
        event.date = entity.date
        event.end_date = entity.end_date
        event.image_url = entity.image_url
        event.cause_area = entity.cause_area
        event.signup_form_url = entity.signup_form_url


def delete_event(session: DbSession, event_id: str) -> None:
    """Delete an event."""
    session.query(Event).filter(Event.id == event_id).delete()


# ============================================================================
# Cause Repository
# ============================================================================


def ensure_causes(session: DbSession, names: list[str]) -> None:
    """Insert any vocabulary causes that are missing."""
    existing = {name for (name,) in session.query(Cause.name).all()}
    for name in names:
        if name not in existing:
            session.add(Cause(name=name))


def get_nonprofit_cause_names(session: DbSession, nonprofit_id: str) -> list[str]:
    """Get cause names linked to a nonprofit."""
    rows = (
        session.query(Cause.name)
        .join(NonprofitCause, NonprofitCause.cause_id == Cause.id)
        .filter(NonprofitCause.nonprofit_id == nonprofit_id)
        .order_by(Cause.name)
        .all()
    )
    return [name for (name,) in rows]


def replace_nonprofit_causes(session: DbSession, nonprofit_id: str, names: list[str]) -> list[str]:
    """Replace a nonprofit's causes: delete all links, then insert selected.

    Unknown cause names are ignored.

    Returns:
        Names that were linked.
    """
    session.query(NonprofitCause).filter(NonprofitCause.nonprofit_id == nonprofit_id).delete()

    if not names:
        return []

    causes = session.query(Cause).filter(Cause.name.in_(names)).all()
    for cause in causes:
        session.add(NonprofitCause(nonprofit_id=nonprofit_id, cause_id=cause.id))
    session.flush()
    return [c.name for c in causes]


# ============================================================================
# Review Repository
# ============================================================================


def get_ratings_for_nonprofit(session: DbSession, nonprofit_id: str) -> list[int]:
    """Get all rating values for a nonprofit."""
    rows = session.query(Review.rating).filter(Review.nonprofit_id == nonprofit_id).all()
    return [r[0] for r in rows]


def get_ratings_for_nonprofits(
    session: DbSession, nonprofit_ids: list[str]
) -> dict[str, list[int]]:
    """Get rating values for many nonprofits in one query."""
    if not nonprofit_ids:
        return {}
    rows = (
        session.query(Review.nonprofit_id, Review.rating)
        .filter(Review.nonprofit_id.in_(nonprofit_ids))
        .all()
    )
    ratings: dict[str, list[int]] = {nonprofit_id: [] for nonprofit_id in nonprofit_ids}
    for nonprofit_id, rating in rows:
        ratings[nonprofit_id].append(rating)
    return ratings


def get_review_for_reviewer(
    session: DbSession,
    nonprofit_id: str,
    *,
    anonymous_id: str | None = None,
    user_id: str | None = None,
) -> ReviewEntity | None:
    """Get the review a reviewer left for a nonprofit, if any."""
    query = session.query(Review).filter(Review.nonprofit_id == nonprofit_id)
    if user_id is not None:
        query = query.filter(Review.user_id == user_id)
    elif anonymous_id is not None:
        query = query.filter(Review.anonymous_id == anonymous_id)
    else:
        return None
    review = query.first()
    return _review_to_entity(review) if review else None


def upsert_review(
    session: DbSession,
    nonprofit_id: str,
    rating: int,
    *,
    comment: str | None = None,
    anonymous_id: str | None = None,
    user_id: str | None = None,
) -> tuple[ReviewEntity, bool]:
    """Create or update the reviewer's review for a nonprofit.

    Keyed on (nonprofit_id, user_id) when user_id is given, otherwise on
    (nonprofit_id, anonymous_id).

    Returns:
        Tuple of (review, created).
    """
    query = session.query(Review).filter(Review.nonprofit_id == nonprofit_id)
    if user_id is not None:
        query = query.filter(Review.user_id == user_id)
    else:
        query = query.filter(Review.anonymous_id == anonymous_id)
    review = query.first()

    created = review is None
    if created:
        review = Review(
            id=str(uuid.uuid4()),
            nonprofit_id=nonprofit_id,
            user_id=user_id,
            anonymous_id=None if user_id is not None else anonymous_id,
        )
        session.add(review)
    else:
        review.updated_at = datetime.now(timezone.utc)

    review.rating = rating
    review.comment = comment
    session.flush()
    return _review_to_entity(review), created


# ============================================================================
# Batch Operations
# ============================================================================


def commit(session: DbSession) -> None:
    """Commit current transaction."""
    session.commit()

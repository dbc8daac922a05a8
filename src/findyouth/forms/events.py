"""Event create, edit and delete.

Events belong to the organization that created them. Only that
organization or an admin may change or remove an event.
"""

from __future__ import annotations

import logging
import uuid

from findyouth.auth.base import AuthSession, can_manage_event, is_admin
from findyouth.db import repo
from findyouth.db.repo import DbSession, PermissionDeniedError
from findyouth.models.domain import EventEntity
from findyouth.models.types import EventSubmission

logger = logging.getLogger(__name__)


class EventNotFoundError(ValueError):
    """No event with the given id."""


def _entity_from_submission(
    event_id: str, nonprofit_id: str, submission: EventSubmission
) -> EventEntity:
    return EventEntity(
        id=event_id,
        title=submission.title,
        description=submission.description,
        location=submission.location,
        date=submission.date,
        nonprofit_id=nonprofit_id,
        end_date=submission.end_date,
        image_url=submission.image_url,
        cause_area=submission.cause_area,
        signup_form_url=submission.signup_form_url,
    )


def _get_managed_event(
    session: DbSession, auth_session: AuthSession, event_id: str
) -> EventEntity:
    event = repo.get_event(session, event_id)
    if event is None:
        raise EventNotFoundError(f"Event not found: {event_id}")
    if not can_manage_event(auth_session.user_id, event.nonprofit_id, is_admin(auth_session)):
        raise PermissionDeniedError(
            f"User {auth_session.user_id} may not manage event {event_id}"
        )
    return event


def create_event(
    session: DbSession, auth_session: AuthSession, submission: EventSubmission
) -> EventEntity:
    """Create an event owned by the signed-in organization.

    Args:
        session: Database session.
        auth_session: The signed-in organization.
        submission: Validated event form.

    Returns:
        The created EventEntity.
    """
    entity = _entity_from_submission(str(uuid.uuid4()), auth_session.user_id, submission)
    created = repo.create_event(session, entity)
    repo.commit(session)
    logger.info(f"Created event {created.id} for nonprofit {auth_session.user_id}")
    return created


def update_event(
    session: DbSession,
    auth_session: AuthSession,
    event_id: str,
    submission: EventSubmission,
) -> EventEntity:
    """Replace an event's editable fields.

    Raises:
        EventNotFoundError: If the event does not exist.
        PermissionDeniedError: If the caller may not manage the event.
    """
    event = _get_managed_event(session, auth_session, event_id)
    entity = _entity_from_submission(event.id, event.nonprofit_id, submission)
    entity.created_at = event.created_at
    repo.update_event(session, entity)
    repo.commit(session)
    logger.info(f"Updated event {event_id}")
    return entity


def delete_event(session: DbSession, auth_session: AuthSession, event_id: str) -> None:
    """Delete an event.

    Raises:
        EventNotFoundError: If the event does not exist.
        PermissionDeniedError: If the caller may not manage the event.
    """
    _get_managed_event(session, auth_session, event_id)
    repo.delete_event(session, event_id)
    repo.commit(session)
    logger.info(f"Deleted event {event_id}")

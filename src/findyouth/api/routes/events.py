"""Events API endpoints.

GET /api/events - List events with organization data and ratings
GET /api/events/filters - Filter choices
GET /api/events/{event_id} - Get one event
POST /api/events - Create event (signed in)
PUT /api/events/{event_id} - Edit event (owner or admin)
DELETE /api/events/{event_id} - Delete event (owner or admin)
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, Response

from findyouth.aggregation.events import (
    assemble_event_views,
    fetch_events,
    filter_events,
    filter_options,
)
from findyouth.aggregation.organizations import OrganizationResolver
from findyouth.api.app import get_db_session, get_resolver, require_session
from findyouth.auth.base import AuthSession
from findyouth.db import repo
from findyouth.db.repo import DbSession, PermissionDeniedError
from findyouth.forms import events as event_forms
from findyouth.forms.events import EventNotFoundError
from findyouth.models.types import EventFilters, EventSubmission, EventView, FilterOptions

router = APIRouter()


@router.get("/events", response_model=list[EventView])
def list_events(
    keyword: str | None = None,
    cause: str | None = None,
    location: str | None = None,
    organization: str | None = None,
    limit: int | None = Query(default=None, ge=1),
    session: DbSession = Depends(get_db_session),
    resolver: OrganizationResolver = Depends(get_resolver),
) -> list[EventView]:
    """List events merged with organization data.

    Args:
        keyword: Matches title, organization name or cause area.
        cause: Exact cause area.
        location: Exact location.
        organization: Organization name or id.
        limit: Maximum number of events after filtering.
        session: Database session (injected).
        resolver: Organization resolver (injected).

    Returns:
        Matching events ordered by date.
    """
    filters = EventFilters(
        keyword=keyword or None,
        cause=cause or None,
        location=location or None,
        organization=organization or None,
    )
    events = fetch_events(session, cause_area=filters.cause)
    views = filter_events(assemble_event_views(session, events, resolver), filters)
    if limit is not None:
        views = views[:limit]
    return views


@router.get("/events/filters", response_model=FilterOptions)
def get_filter_options(
    session: DbSession = Depends(get_db_session),
    resolver: OrganizationResolver = Depends(get_resolver),
) -> FilterOptions:
    """Get cause, location and organization filter choices."""
    views = assemble_event_views(session, fetch_events(session), resolver)
    return filter_options(views)


def _event_view(
    session: DbSession, resolver: OrganizationResolver, event_id: str
) -> EventView:
    event = repo.get_event(session, event_id)
    if event is None:
        raise HTTPException(status_code=404, detail="Event not found")
    return assemble_event_views(session, [event], resolver)[0]


@router.get("/events/{event_id}", response_model=EventView)
def get_event(
    event_id: str,
    session: DbSession = Depends(get_db_session),
    resolver: OrganizationResolver = Depends(get_resolver),
) -> EventView:
    """Get event detail.

    Raises:
        HTTPException: 404 if event not found.
    """
    return _event_view(session, resolver, event_id)


@router.post("/events", response_model=EventView, status_code=201)
def create_event(
    submission: EventSubmission,
    session: DbSession = Depends(get_db_session),
    auth_session: AuthSession = Depends(require_session),
    resolver: OrganizationResolver = Depends(get_resolver),
) -> EventView:
    """Create an event owned by the caller's organization."""
    event = event_forms.create_event(session, auth_session, submission)
    return _event_view(session, resolver, event.id)


@router.put("/events/{event_id}", response_model=EventView)
def update_event(
    event_id: str,
    submission: EventSubmission,
    session: DbSession = Depends(get_db_session),
    auth_session: AuthSession = Depends(require_session),
    resolver: OrganizationResolver = Depends(get_resolver),
) -> EventView:
    """Edit an event.

    Raises:
        HTTPException: 404 if event not found, 403 if not owner or admin.
    """
    try:
        event_forms.update_event(session, auth_session, event_id, submission)
    except EventNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    except PermissionDeniedError as e:
        raise HTTPException(status_code=403, detail=str(e)) from e

    return _event_view(session, resolver, event_id)


@router.delete("/events/{event_id}", status_code=204)
def delete_event(
    event_id: str,
    session: DbSession = Depends(get_db_session),
    auth_session: AuthSession = Depends(require_session),
) -> Response:
    """Delete an event.

    Raises:
        HTTPException: 404 if event not found, 403 if not owner or admin.
    """
    try:
        event_forms.delete_event(session, auth_session, event_id)
    except EventNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    except PermissionDeniedError as e:
        raise HTTPException(status_code=403, detail=str(e)) from e

    return Response(status_code=204)

"""Event fetching and view-model assembly.

Every event listing goes through fetch_events -> assemble_event_views ->
filter_events. Organization data is resolved once per distinct
organization in a batch, and ratings for the batch are loaded in one query.
"""

from __future__ import annotations

import logging

from findyouth.aggregation.organizations import OrganizationResolver
from findyouth.aggregation.ratings import summarize_ratings
from findyouth.db import repo
from findyouth.db.repo import DbSession
from findyouth.models.domain import CAUSE_AREAS, LOCATIONS, EventEntity, OrganizationInfo
from findyouth.models.types import EventFilters, EventView, FilterOptions

logger = logging.getLogger(__name__)

__all__ = [
    "CAUSE_AREAS",
    "LOCATIONS",
    "assemble_event_views",
    "fetch_events",
    "filter_events",
    "filter_options",
    "resolve_organizations",
]


def fetch_events(
    session: DbSession,
    *,
    organization_id: str | None = None,
    cause_area: str | None = None,
    limit: int | None = None,
) -> list[EventEntity]:
    """Fetch event rows.

    Checks whether the live events table has a cause_area column first.
    Without it, events carry no cause and a cause filter matches nothing.

    Args:
        session: Database session.
        organization_id: Only events owned by this organization.
        cause_area: Only events tagged with this cause.
        limit: Maximum rows to return.

    Returns:
        Event entities ordered by date.
    """
    has_cause_area = repo.events_table_has_column(session, "cause_area")
    if not has_cause_area:
        logger.info("events table has no cause_area column, fetching without it")

    return repo.query_events(
        session,
        include_cause_area=has_cause_area,
        organization_id=organization_id,
        cause_area=cause_area,
        limit=limit,
    )


def resolve_organizations(
    resolver: OrganizationResolver, org_ids: list[str]
) -> dict[str, OrganizationInfo]:
    """Resolve each distinct organization id exactly once."""
    return {org_id: resolver.resolve(org_id) for org_id in dict.fromkeys(org_ids)}


def assemble_event_views(
    session: DbSession,
    events: list[EventEntity],
    resolver: OrganizationResolver,
) -> list[EventView]:
    """Merge events with organization display data and ratings.

    Args:
        session: Database session.
        events: Event rows to render.
        resolver: Organization resolver for this request.

    Returns:
        One EventView per event, in input order.
    """
    if not events:
        return []

    organizations = resolve_organizations(resolver, [e.nonprofit_id for e in events])
    ratings = repo.get_ratings_for_nonprofits(session, list(organizations))
    summaries = {org_id: summarize_ratings(values) for org_id, values in ratings.items()}

    views = []
    for event in events:
        org = organizations[event.nonprofit_id]
        summary = summaries[event.nonprofit_id]
        views.append(
            EventView(
                id=event.id,
                title=event.title,
                description=event.description,
                date=event.date,
                end_date=event.end_date,
                location=event.location,
                cause_area=event.cause_area,
                image_url=event.image_url,
                signup_form_url=event.signup_form_url,
                created_at=event.created_at,
                organization_id=event.nonprofit_id,
                organization_name=org.name,
                organization_image_url=org.profile_image_url,
                rating=summary.average,
                rating_count=summary.count,
            )
        )
    return views


def filter_events(views: list[EventView], filters: EventFilters) -> list[EventView]:
    """Apply keyword and category filters.

    The keyword matches title, organization name or cause area,
    case-insensitively. Cause and location match exactly; organization
    matches the organization's name or id.
    """
    results = list(views)

    if filters.keyword:
        keyword = filters.keyword.lower()
        results = [
            v
            for v in results
            if keyword in v.title.lower()
            or keyword in v.organization_name.lower()
            or keyword in (v.cause_area or "").lower()
        ]

    if filters.cause:
        results = [v for v in results if v.cause_area == filters.cause]

    if filters.location:
        results = [v for v in results if v.location == filters.location]

    if filters.organization:
        results = [
            v
            for v in results
            if filters.organization in (v.organization_name, v.organization_id)
        ]

    return results


def filter_options(views: list[EventView]) -> FilterOptions:
    """Build filter choices, including organizations that have events."""
    organizations = sorted({v.organization_name for v in views})
    return FilterOptions(causes=list(CAUSE_AREAS), locations=list(LOCATIONS), organizations=organizations)

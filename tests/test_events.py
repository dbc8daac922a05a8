"""Tests for event fetching, assembly and filtering.

Invariants:
1. Each distinct organization in a batch is resolved exactly once
2. Ratings for a batch are loaded in one query
3. A missing cause_area column degrades to "no cause" rather than failing
"""

from datetime import datetime
from unittest.mock import patch

from sqlalchemy import create_engine, text
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from findyouth.aggregation.events import (
    assemble_event_views,
    fetch_events,
    filter_events,
    filter_options,
)
from findyouth.aggregation.organizations import OrganizationResolver
from findyouth.db import repo
from findyouth.db.schema import Base, Event, Nonprofit, Review
from findyouth.models.domain import CAUSE_AREAS, LOCATIONS
from findyouth.models.types import EventFilters, EventView


def add_event(session, event_id, nonprofit_id, *, title="Beach cleanup", day=1, **fields):
    values = {
        "description": "Help us clean up the shoreline this weekend.",
        "location": "Vancouver",
        "cause_area": "Environment",
    }
    values.update(fields)
    session.add(
        Event(
            id=event_id,
            title=title,
            date=datetime(2026, 5, day, 10, 0),
            nonprofit_id=nonprofit_id,
            **values,
        )
    )
    session.commit()


def make_view(**fields) -> EventView:
    values = {
        "id": "ev-1",
        "title": "Beach cleanup",
        "description": "Help us clean up the shoreline this weekend.",
        "date": datetime(2026, 5, 1, 10, 0),
        "end_date": None,
        "location": "Vancouver",
        "cause_area": "Environment",
        "image_url": None,
        "signup_form_url": None,
        "created_at": None,
        "organization_id": "np-1",
        "organization_name": "Burnaby Green",
        "organization_image_url": "https://cdn.green.org/logo.png",
        "rating": 4.0,
        "rating_count": 0,
    }
    values.update(fields)
    return EventView(**values)


class TestFetchEvents:
    """Tests for fetch_events."""

    def test_ordered_by_date(self, session):
        add_event(session, "ev-2", "np-1", day=9)
        add_event(session, "ev-1", "np-1", day=2)

        assert [e.id for e in fetch_events(session)] == ["ev-1", "ev-2"]

    def test_filter_by_organization_and_cause(self, session):
        add_event(session, "ev-1", "np-1", cause_area="Animals")
        add_event(session, "ev-2", "np-2", cause_area="Animals")
        add_event(session, "ev-3", "np-1", cause_area="Sports")

        assert [e.id for e in fetch_events(session, organization_id="np-1")] == ["ev-1", "ev-3"]
        assert [e.id for e in fetch_events(session, cause_area="Animals")] == ["ev-1", "ev-2"]

    def test_limit(self, session):
        for i in range(1, 4):
            add_event(session, f"ev-{i}", "np-1", day=i)

        assert len(fetch_events(session, limit=2)) == 2


class TestMissingCauseAreaColumn:
    """Databases created before cause_area existed still serve events."""

    def _legacy_session(self):
        engine = create_engine(
            "sqlite:///:memory:",
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
        tables = [t for name, t in Base.metadata.tables.items() if name != "events"]
        Base.metadata.create_all(engine, tables=tables)
        with engine.begin() as conn:
            conn.execute(
                text(
                    "CREATE TABLE events ("
                    "id VARCHAR(64) PRIMARY KEY, title VARCHAR(255) NOT NULL, "
                    "description TEXT NOT NULL, location VARCHAR(255) NOT NULL, "
                    "date DATETIME NOT NULL, end_date DATETIME, "
                    "nonprofit_id VARCHAR(64) NOT NULL, image_url VARCHAR(1024), "
                    "signup_form_url VARCHAR(1024), created_at DATETIME NOT NULL)"
                )
            )
            conn.execute(
                text(
                    "INSERT INTO events (id, title, description, location, date, "
                    "nonprofit_id, created_at) VALUES ('ev-1', 'Old event', "
                    "'An event from before causes existed.', 'Surrey', "
                    "'2026-05-01 10:00:00.000000', 'np-1', '2026-04-01 09:00:00.000000')"
                )
            )
        return sessionmaker(bind=engine)()

    def test_column_check(self, session):
        assert repo.events_table_has_column(session, "cause_area")
        assert not repo.events_table_has_column(session, "no_such_column")

    def test_events_without_cause(self):
        legacy = self._legacy_session()

        assert not repo.events_table_has_column(legacy, "cause_area")
        events = fetch_events(legacy)
        assert [e.id for e in events] == ["ev-1"]
        assert events[0].cause_area is None
        assert events[0].date == datetime(2026, 5, 1, 10, 0)

    def test_cause_filter_matches_nothing(self):
        legacy = self._legacy_session()
        assert fetch_events(legacy, cause_area="Environment") == []


class TestAssembleEventViews:
    """Tests for assemble_event_views."""

    def test_resolves_each_organization_once(self, session, storage):
        """Three events across two organizations resolve two organizations."""
        add_event(session, "ev-1", "np-1", day=1)
        add_event(session, "ev-2", "np-2", day=2)
        add_event(session, "ev-3", "np-1", day=3)
        resolver = OrganizationResolver(session, storage)

        views = assemble_event_views(session, fetch_events(session), resolver)

        assert len(views) == 3
        assert resolver.calls == 2

    def test_ratings_loaded_in_one_query(self, session, storage):
        add_event(session, "ev-1", "np-1")
        add_event(session, "ev-2", "np-2")
        resolver = OrganizationResolver(session, storage)

        with patch.object(
            repo, "get_ratings_for_nonprofits", wraps=repo.get_ratings_for_nonprofits
        ) as mock_ratings:
            assemble_event_views(session, fetch_events(session), resolver)

        assert mock_ratings.call_count == 1

    def test_merges_organization_and_rating(self, session, storage):
        session.add(Nonprofit(id="np-1", organization_name="Burnaby Green", email="g@green.org"))
        session.add(Review(id="r1", nonprofit_id="np-1", rating=5, anonymous_id="a"))
        session.add(Review(id="r2", nonprofit_id="np-1", rating=4, anonymous_id="b"))
        session.commit()
        add_event(session, "ev-1", "np-1")
        add_event(session, "ev-2", "dangling", day=2)

        views = assemble_event_views(
            session, fetch_events(session), OrganizationResolver(session, storage)
        )

        assert views[0].organization_name == "Burnaby Green"
        assert views[0].rating == 4.5
        assert views[0].rating_count == 2
        assert views[1].organization_name == "Organization"
        assert views[1].rating == 4.0
        assert views[1].rating_count == 0

    def test_empty(self, session, storage):
        resolver = OrganizationResolver(session, storage)
        assert assemble_event_views(session, [], resolver) == []
        assert resolver.calls == 0


class TestFilterEvents:
    """Tests for filter_events."""

    def test_no_filters(self):
        views = [make_view(id="a"), make_view(id="b")]
        assert filter_events(views, EventFilters()) == views

    def test_keyword_matches_title_org_or_cause(self):
        views = [
            make_view(id="title", title="Park Planting"),
            make_view(id="org", organization_name="Planting Society"),
            make_view(id="cause", cause_area="Plants"),
            make_view(id="none", title="Soup kitchen", cause_area="Homeless"),
        ]

        result = filter_events(views, EventFilters(keyword="plant"))

        assert [v.id for v in result] == ["title", "org", "cause"]

    def test_cause_and_location(self):
        views = [
            make_view(id="a", cause_area="Sports", location="Surrey"),
            make_view(id="b", cause_area="Sports", location="Richmond"),
            make_view(id="c", cause_area="Health", location="Surrey"),
        ]

        result = filter_events(views, EventFilters(cause="Sports", location="Surrey"))

        assert [v.id for v in result] == ["a"]

    def test_organization_by_name_or_id(self):
        views = [
            make_view(id="a", organization_id="np-1", organization_name="Burnaby Green"),
            make_view(id="b", organization_id="np-2", organization_name="Other"),
        ]

        assert [v.id for v in filter_events(views, EventFilters(organization="np-1"))] == ["a"]
        assert [
            v.id for v in filter_events(views, EventFilters(organization="Burnaby Green"))
        ] == ["a"]

    def test_missing_cause_never_matches_cause_filter(self):
        views = [make_view(id="a", cause_area=None)]
        assert filter_events(views, EventFilters(cause="Environment")) == []


class TestFilterOptions:
    """Tests for filter_options."""

    def test_options(self):
        views = [
            make_view(organization_name="Zeta"),
            make_view(organization_name="Alpha"),
            make_view(organization_name="Zeta"),
        ]

        options = filter_options(views)

        assert options.causes == CAUSE_AREAS
        assert options.locations == LOCATIONS
        assert options.organizations == ["Alpha", "Zeta"]

"""Tests for review submission.

Invariant: one review per reviewer per organization; resubmitting updates.
"""

from datetime import datetime

import pytest

from findyouth.db.schema import Event, Nonprofit, Review
from findyouth.forms.reviews import (
    UnknownOrganizationError,
    get_reviewer_rating,
    organization_exists,
    submit_review,
)

KNOWN_ID = "550e8400-e29b-41d4-a716-446655440000"


@pytest.fixture
def nonprofit(session):
    session.add(Nonprofit(id="np-1", organization_name="Burnaby Green", email="g@green.org"))
    session.commit()
    return "np-1"


class TestOrganizationExists:
    """Tests for organization_exists."""

    def test_row(self, session, nonprofit):
        assert organization_exists(session, nonprofit)

    def test_name_map(self, session):
        assert organization_exists(session, KNOWN_ID)

    def test_event_owner(self, session):
        session.add(
            Event(
                id="ev-1",
                title="Beach cleanup",
                description="Help us clean up the shoreline.",
                location="Vancouver",
                date=datetime(2026, 5, 1, 10, 0),
                nonprofit_id="np-events-only",
            )
        )
        session.commit()
        assert organization_exists(session, "np-events-only")

    def test_unknown(self, session):
        assert not organization_exists(session, "nobody")


class TestSubmitReview:
    """Tests for submit_review."""

    def test_creates_review(self, session, nonprofit):
        outcome = submit_review(session, nonprofit, 5, anonymous_id="device-1", comment="Great")

        assert outcome.status == "created"
        assert outcome.rating == 5
        assert outcome.summary.average == 5.0
        assert outcome.summary.count == 1

    def test_resubmit_updates(self, session, nonprofit):
        """Same device rating again updates its review instead of adding one."""
        first = submit_review(session, nonprofit, 5, anonymous_id="device-1")
        second = submit_review(session, nonprofit, 3, anonymous_id="device-1")

        assert second.status == "updated"
        assert second.review_id == first.review_id
        assert second.summary.count == 1
        assert second.summary.average == 3.0
        assert session.query(Review).count() == 1

    def test_different_reviewers(self, session, nonprofit):
        submit_review(session, nonprofit, 5, anonymous_id="device-1")
        outcome = submit_review(session, nonprofit, 4, user_id="user-1")

        assert outcome.status == "created"
        assert outcome.summary.average == 4.5
        assert outcome.summary.count == 2

    def test_signed_in_resubmit_updates(self, session, nonprofit):
        submit_review(session, nonprofit, 2, user_id="user-1")
        outcome = submit_review(session, nonprofit, 4, user_id="user-1")

        assert outcome.status == "updated"
        assert outcome.summary.count == 1

    def test_name_map_organization(self, session):
        outcome = submit_review(session, KNOWN_ID, 4, anonymous_id="device-1")
        assert outcome.status == "created"

    @pytest.mark.parametrize("rating", [0, 6])
    def test_rating_range(self, session, nonprofit, rating):
        with pytest.raises(ValueError):
            submit_review(session, nonprofit, rating, anonymous_id="device-1")

    def test_requires_one_identity(self, session, nonprofit):
        with pytest.raises(ValueError):
            submit_review(session, nonprofit, 4)
        with pytest.raises(ValueError):
            submit_review(session, nonprofit, 4, anonymous_id="device-1", user_id="user-1")

    def test_unknown_organization(self, session):
        with pytest.raises(UnknownOrganizationError):
            submit_review(session, "nobody", 4, anonymous_id="device-1")


class TestGetReviewerRating:
    """Tests for get_reviewer_rating."""

    def test_existing(self, session, nonprofit):
        submit_review(session, nonprofit, 3, anonymous_id="device-1")
        assert get_reviewer_rating(session, nonprofit, anonymous_id="device-1") == 3

    def test_none(self, session, nonprofit):
        assert get_reviewer_rating(session, nonprofit, anonymous_id="device-2") is None
        assert get_reviewer_rating(session, nonprofit) is None

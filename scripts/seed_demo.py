#!/usr/bin/env python3
"""Seed a demo database with organizations, events and reviews.

Usage:
    python scripts/seed_demo.py

This script:
1. Initializes the database (tables + cause vocabulary)
2. Creates nonprofit rows for some of the known demo organizations
3. Creates events, including events for organizations without a row
4. Adds anonymous reviews

Organizations left without a row render from the static name map with a
placeholder image, which shows the resolver's fallback path.
"""

from __future__ import annotations

import sys
import uuid
from datetime import datetime, timedelta
from pathlib import Path

# Add src to path for imports
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT / "src"))

from findyouth.core.config import get_settings  # noqa: E402
from findyouth.db import repo  # noqa: E402
from findyouth.db.session import get_session, init_db  # noqa: E402
from findyouth.models.domain import (  # noqa: E402
    NONPROFIT_NAME_MAP,
    EventEntity,
    NonprofitEntity,
)

ORG_IDS = list(NONPROFIT_NAME_MAP)

# (org index, location, causes, description) for organizations that get a row
DEMO_NONPROFITS = [
    (0, "Vancouver", ["Youth", "Education"], "Connecting Vancouver youth with mentors."),
    (1, "Burnaby", ["Environment"], "Restoring urban creeks and parks in Burnaby."),
    (2, "Richmond", ["Arts & Culture", "Youth"], "Community murals and youth theatre."),
]

# (org index, title, location, cause, days from now)
DEMO_EVENTS = [
    (0, "Homework Club Volunteers", "Vancouver", "Education", 3),
    (0, "Youth Leadership Summit", "Vancouver", "Youth", 10),
    (1, "Still Creek Cleanup", "Burnaby", "Environment", 5),
    (2, "Mural Painting Day", "Richmond", "Arts & Culture", 7),
    (3, "Food Sorting Shift", "Surrey", "Homeless", 2),
    (4, "Dog Walking Morning", "North Vancouver", "Animals", 4),
]

# (org index, ratings)
DEMO_REVIEWS = [
    (0, [5, 4, 5]),
    (1, [4, 3]),
    (3, [5]),
]


def seed_database(db_path: Path) -> None:
    """Seed the demo database.

    Args:
        db_path: Path to the database file.
    """
    session = get_session(db_path)

    try:
        if repo.get_nonprofit(session, ORG_IDS[0]) is not None:
            print("Demo data already exists")
            return

        print("Creating nonprofits...")
        for index, location, causes, description in DEMO_NONPROFITS:
            org_id = ORG_IDS[index]
            name = NONPROFIT_NAME_MAP[org_id]
            repo.save_nonprofit(
                session,
                NonprofitEntity(
                    id=org_id,
                    organization_name=name,
                    email=f"hello@{name.lower().replace(' ', '')}.org",
                    location=location,
                    description=description,
                    mission=f"{name} helps young people volunteer close to home.",
                    approved=True,
                ),
                acting_user_id="seed",
                acting_is_admin=True,
            )
            repo.replace_nonprofit_causes(session, org_id, causes)
            print(f"  Created nonprofit: {name}")

        print("Creating events...")
        now = datetime.now().replace(minute=0, second=0, microsecond=0)
        for index, title, location, cause, days in DEMO_EVENTS:
            start = now + timedelta(days=days)
            repo.create_event(
                session,
                EventEntity(
                    id=str(uuid.uuid4()),
                    title=title,
                    description=f"{title}: join other young volunteers for an afternoon.",
                    location=location,
                    date=start,
                    end_date=start + timedelta(hours=3),
                    nonprofit_id=ORG_IDS[index],
                    cause_area=cause,
                ),
            )
            print(f"  Created event: {title}")

        print("Creating reviews...")
        for index, ratings in DEMO_REVIEWS:
            for rating in ratings:
                repo.upsert_review(
                    session, ORG_IDS[index], rating, anonymous_id=str(uuid.uuid4())
                )

        repo.commit(session)
        print("Database seeded successfully!")

    finally:
        session.close()


def main() -> int:
    """Main entry point."""
    settings = get_settings()

    print("=" * 60)
    print("FindYouth Demo Seeding Script")
    print("=" * 60)

    print("\n[1/2] Initializing database...")
    init_db(settings.db_path)

    print("\n[2/2] Seeding database...")
    seed_database(settings.db_path)

    print("\n" + "=" * 60)
    print("Demo seeding complete!")
    print(f"Database: {settings.db_path}")
    print("=" * 60)

    return 0


if __name__ == "__main__":
    sys.exit(main())

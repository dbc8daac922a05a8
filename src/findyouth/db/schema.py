"""Database schema for FindYouth.

Tables for auth identities, nonprofits, events, causes and reviews, with
unique constraints that enforce the data model invariants.
"""

from datetime import datetime, timezone

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    """Base class for all models."""

    pass


class User(Base):
    """Auth identity. Metadata holds the denormalized nonprofit blob."""

    __tablename__ = "users"

    user_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    metadata_json: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_admin: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=_utcnow)


class AuthSessionRecord(Base):
    """Issued sign-in session. Sign-out revokes it."""

    __tablename__ = "auth_sessions"

    session_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    user_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False
    )
    revoked: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=_utcnow)


class Nonprofit(Base):
    """Organization profile. Keyed by the owning user's id."""

    __tablename__ = "nonprofits"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    organization_name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    phone: Mapped[str | None] = mapped_column(String(32), nullable=True)
    website: Mapped[str | None] = mapped_column(String(512), nullable=True)
    social_media: Mapped[str | None] = mapped_column(String(512), nullable=True)
    location: Mapped[str | None] = mapped_column(String(255), nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    mission: Mapped[str | None] = mapped_column(Text, nullable=True)
    profile_image_url: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    banner_image_url: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    approved: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=_utcnow)
    updated_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)


class Profile(Base):
    """Generic user profile (name and avatar only)."""

    __tablename__ = "profiles"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    full_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    avatar_url: Mapped[str | None] = mapped_column(String(1024), nullable=True)


class Event(Base):
    """Volunteer event.

    nonprofit_id has no foreign key: events may outlive or predate their
    organization row and are rendered with placeholder data.
    """

    __tablename__ = "events"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    location: Mapped[str] = mapped_column(String(255), nullable=False)
    date: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    end_date: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    nonprofit_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    image_url: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    cause_area: Mapped[str | None] = mapped_column(String(64), nullable=True)
    signup_form_url: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=_utcnow)


class Cause(Base):
    """Cause from the fixed vocabulary."""

    __tablename__ = "causes"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)


class NonprofitCause(Base):
    """Nonprofit <-> cause join.

    Invariant: UNIQUE(nonprofit_id, cause_id)
    """

    __tablename__ = "nonprofit_causes"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    nonprofit_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("nonprofits.id", ondelete="CASCADE"), nullable=False
    )
    cause_id: Mapped[int] = mapped_column(Integer, ForeignKey("causes.id"), nullable=False)

    __table_args__ = (
        UniqueConstraint("nonprofit_id", "cause_id", name="uq_nonprofit_cause"),
    )


class Review(Base):
    """Organization review.

    Invariants:
    - UNIQUE(nonprofit_id, anonymous_id): one review per anonymous device
    - UNIQUE(nonprofit_id, user_id): one review per signed-in user
    """

    __tablename__ = "reviews"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    nonprofit_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    rating: Mapped[int] = mapped_column(Integer, nullable=False)
    comment: Mapped[str | None] = mapped_column(Text, nullable=True)
    user_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    anonymous_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=_utcnow)
    updated_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    __table_args__ = (
        UniqueConstraint("nonprofit_id", "anonymous_id", name="uq_review_anonymous"),
        UniqueConstraint("nonprofit_id", "user_id", name="uq_review_user"),
    )

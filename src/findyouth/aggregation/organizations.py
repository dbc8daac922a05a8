"""Organization display data resolution.

Resolution never fails, it only degrades. Sources are tried in order:

1. nonprofits row (missing images are probed in object storage)
2. the signed-in session's metadata, when the session is that organization
3. generic profiles row
4. static name map, else "Organization", with a deterministic placeholder image

Any error in a stage is logged and the next stage is tried.
"""

from __future__ import annotations

import logging
from typing import Callable

from findyouth.auth.base import AuthSession
from findyouth.core.identity import placeholder_image_url
from findyouth.db import repo
from findyouth.db.repo import DbSession
from findyouth.models.domain import (
    FALLBACK_ORGANIZATION_NAME,
    NONPROFIT_NAME_MAP,
    OrganizationInfo,
)
from findyouth.storage.base import PROFILE_IMAGES_BUCKET, ObjectStorage

logger = logging.getLogger(__name__)

NO_DESCRIPTION = "No description available"
NO_LOCATION = "Location not specified"


def fallback_name(org_id: str) -> str:
    """Static name for an organization without any stored data."""
    return NONPROFIT_NAME_MAP.get(org_id, FALLBACK_ORGANIZATION_NAME)


class OrganizationResolver:
    """Resolves organization ids to display data.

    Holds an explicit session context instead of reading a global one.
    `calls` counts resolve() invocations.
    """

    def __init__(
        self,
        session: DbSession,
        storage: ObjectStorage,
        auth_session: AuthSession | None = None,
    ):
        """Initialize resolver.

        Args:
            session: Database session.
            storage: Object storage probed for missing images.
            auth_session: Signed-in session, if any.
        """
        self.session = session
        self.storage = storage
        self.auth_session = auth_session
        self.calls = 0

    def resolve(self, org_id: str) -> OrganizationInfo:
        """Resolve one organization.

        Args:
            org_id: Organization identifier (may be dangling).

        Returns:
            OrganizationInfo, always populated.
        """
        self.calls += 1

        stages: list[Callable[[str], OrganizationInfo | None]] = [
            self._from_nonprofit,
            self._from_session_metadata,
            self._from_profile,
        ]
        for stage in stages:
            try:
                info = stage(org_id)
            except Exception as e:
                logger.warning(f"Organization lookup {stage.__name__} failed for {org_id}: {e}")
                continue
            if info is not None:
                return info

        return OrganizationInfo(
            organization_id=org_id,
            name=fallback_name(org_id),
            profile_image_url=placeholder_image_url(org_id),
            description=NO_DESCRIPTION,
            location=NO_LOCATION,
            banner_image_url=None,
            source="fallback",
        )

    def _probe(self, stem: str) -> str | None:
        """Look for a stored image, treating storage errors as not found."""
        try:
            return self.storage.find_image(PROFILE_IMAGES_BUCKET, stem)
        except Exception as e:
            logger.warning(f"Storage probe for {stem} failed: {e}")
            return None

    def _from_nonprofit(self, org_id: str) -> OrganizationInfo | None:
        nonprofit = repo.get_nonprofit(self.session, org_id)
        if nonprofit is None:
            return None

        profile_image = nonprofit.profile_image_url or self._probe(org_id)
        banner_image = nonprofit.banner_image_url or self._probe(f"banner-{org_id}")

        return OrganizationInfo(
            organization_id=org_id,
            name=nonprofit.organization_name or fallback_name(org_id),
            profile_image_url=profile_image or placeholder_image_url(org_id),
            description=nonprofit.description or NO_DESCRIPTION,
            location=nonprofit.location or NO_LOCATION,
            banner_image_url=banner_image,
            source="nonprofit",
        )

    def _from_session_metadata(self, org_id: str) -> OrganizationInfo | None:
        if self.auth_session is None or self.auth_session.user_id != org_id:
            return None

        metadata = self.auth_session.metadata
        if metadata.is_empty():
            return None

        profile_image = metadata.profile_image_url or self._probe(org_id)

        return OrganizationInfo(
            organization_id=org_id,
            name=metadata.organization_name or fallback_name(org_id),
            profile_image_url=profile_image or placeholder_image_url(org_id),
            description=metadata.description or NO_DESCRIPTION,
            location=metadata.location or NO_LOCATION,
            banner_image_url=metadata.banner_image_url,
            source="session",
        )

    def _from_profile(self, org_id: str) -> OrganizationInfo | None:
        profile = repo.get_profile(self.session, org_id)
        if profile is None:
            return None

        return OrganizationInfo(
            organization_id=org_id,
            name=profile.full_name or fallback_name(org_id),
            profile_image_url=profile.avatar_url or placeholder_image_url(org_id),
            description=NO_DESCRIPTION,
            location=NO_LOCATION,
            banner_image_url=None,
            source="profile",
        )

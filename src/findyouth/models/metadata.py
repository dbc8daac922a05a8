"""Typed nonprofit metadata stored on the auth identity.

The metadata blob is versioned. Version 1 is the legacy shape written by
earlier clients:

    {
        "organization_name": "...",
        "nonprofit_data": {"phone": ..., "socialMedia": ..., "profileImageUrl": ...}
    }

Version 2 is the flat NonprofitMetadata model below. parse_user_metadata
migrates anything it is given to the current version.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from pydantic import BaseModel, Field, ValidationError

logger = logging.getLogger(__name__)

METADATA_VERSION = 2

# v1 camelCase keys inside nonprofit_data -> v2 field names
_V1_FIELD_MAP = {
    "phone": "phone",
    "website": "website",
    "socialMedia": "social_media",
    "location": "location",
    "description": "description",
    "mission": "mission",
    "profileImageUrl": "profile_image_url",
    "bannerImageUrl": "banner_image_url",
    "causes": "causes",
}


class NonprofitMetadata(BaseModel):
    """Denormalized nonprofit profile kept on the auth identity (v2)."""

    version: int = METADATA_VERSION
    organization_name: str | None = None
    phone: str | None = None
    website: str | None = None
    social_media: str | None = None
    location: str | None = None
    description: str | None = None
    mission: str | None = None
    profile_image_url: str | None = None
    banner_image_url: str | None = None
    causes: list[str] = Field(default_factory=list)

    def is_empty(self) -> bool:
        """True when no organization data has been recorded."""
        return not self.organization_name and not any(
            [self.description, self.mission, self.location, self.profile_image_url]
        )


def _migrate_v1(raw: dict[str, Any]) -> dict[str, Any]:
    """Flatten the v1 blob into v2 field names."""
    migrated: dict[str, Any] = {
        "version": METADATA_VERSION,
        "organization_name": raw.get("organization_name"),
    }
    nonprofit_data = raw.get("nonprofit_data") or {}
    if isinstance(nonprofit_data, dict):
        for old_key, new_key in _V1_FIELD_MAP.items():
            value = nonprofit_data.get(old_key)
            if value not in (None, ""):
                migrated[new_key] = value
    return migrated


def parse_user_metadata(raw: dict[str, Any] | str | None) -> NonprofitMetadata:
    """Parse stored metadata into the current version.

    Accepts a dict, a JSON string, or None. Invalid input yields an empty
    record rather than an error.

    Args:
        raw: Stored metadata in any known version.

    Returns:
        NonprofitMetadata at METADATA_VERSION.
    """
    if raw is None or raw == "":
        return NonprofitMetadata()

    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Discarding unparseable user metadata")
            return NonprofitMetadata()

    if not isinstance(raw, dict):
        return NonprofitMetadata()

    version = raw.get("version", 1)
    if version == 1 or "nonprofit_data" in raw:
        raw = _migrate_v1(raw)

    try:
        return NonprofitMetadata.model_validate(raw)
    except ValidationError as e:
        logger.warning(f"Discarding invalid user metadata: {e.error_count()} errors")
        return NonprofitMetadata()


def dump_user_metadata(metadata: NonprofitMetadata) -> str:
    """Serialize metadata for storage (always the current version)."""
    return metadata.model_copy(update={"version": METADATA_VERSION}).model_dump_json()

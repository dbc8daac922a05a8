"""Identity utilities for deterministic names and URLs.

- placeholder_image_url: deterministic fallback image for an organization
- organization_slug / slug_to_organization_name: URL-friendly names
- profile/banner object names: where uploaded images live in storage
- new_anonymous_id: device-scoped reviewer identifier
"""

import hashlib
import re
import uuid

PLACEHOLDER_IMAGE_TEMPLATE = "https://source.unsplash.com/random/300x300?profile={seed}"

# Number of distinct placeholder images
PLACEHOLDER_SEEDS = 100


def placeholder_image_url(org_id: str) -> str:
    """Compute a deterministic placeholder image URL for an organization.

    seed = int(sha256(org_id)[:4 bytes]) % PLACEHOLDER_SEEDS

    Args:
        org_id: Organization identifier.

    Returns:
        Placeholder image URL. Same id always yields the same URL.
    """
    digest = hashlib.sha256(org_id.encode("utf-8")).digest()
    seed = int.from_bytes(digest[:4], byteorder="big") % PLACEHOLDER_SEEDS
    return PLACEHOLDER_IMAGE_TEMPLATE.format(seed=seed)


def organization_slug(name: str) -> str:
    """Convert an organization name to a URL-friendly slug.

    Examples:
        >>> organization_slug("Vancouver Youth Coalition")
        'vancouver-youth-coalition'
    """
    if not name:
        return ""
    return re.sub(r"\s+", "-", name.strip().lower())


def slug_to_organization_name(slug: str) -> str:
    """Convert a slug back to a readable organization name.

    Examples:
        >>> slug_to_organization_name("north-shore-animal-rescue")
        'North Shore Animal Rescue'
    """
    if not slug:
        return ""
    return " ".join(word.capitalize() for word in slug.split("-") if word)


def profile_image_object_name(owner_id: str, ext: str) -> str:
    """Storage object name for an organization's profile image."""
    return f"{owner_id}.{ext.lower().lstrip('.')}"


def banner_image_object_name(owner_id: str, ext: str) -> str:
    """Storage object name for an organization's banner image."""
    return f"banner-{owner_id}.{ext.lower().lstrip('.')}"


def new_anonymous_id() -> str:
    """Generate a new anonymous reviewer identifier.

    Clients persist this per device and send it with every review.
    """
    return str(uuid.uuid4())

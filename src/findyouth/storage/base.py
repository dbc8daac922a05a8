"""Base object storage interface.

Object storage holds uploaded organization images in named buckets and
hands out public URLs for them.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from findyouth.storage.probe import DEFAULT_TIMEOUT, url_exists

PROFILE_IMAGES_BUCKET = "profile-images"

# Extensions probed, in order, when looking for an image by stem
IMAGE_EXTENSIONS = ("jpg", "jpeg", "png", "gif")


class StorageError(Exception):
    """Upload or storage access failed."""


class ObjectStorage(ABC):
    """Abstract base class for object storage backends.

    Implementations provide upload and public URL generation; existence
    checks default to an HTTP HEAD probe of the public URL.
    """

    probe_timeout: float = DEFAULT_TIMEOUT

    @abstractmethod
    def upload(self, bucket: str, name: str, data: bytes, content_type: str) -> None:
        """Store an object, replacing any existing object with the same name.

        Raises:
            StorageError: If the object cannot be stored.
        """

    @abstractmethod
    def public_url(self, bucket: str, name: str) -> str:
        """Public URL for an object (whether or not it exists)."""

    def exists(self, url: str) -> bool:
        """Check that a public URL resolves to an object."""
        return url_exists(url, timeout=self.probe_timeout)

    def find_image(self, bucket: str, stem: str) -> str | None:
        """Find an image stored as {stem}.{ext} for any known extension.

        Args:
            bucket: Bucket to look in.
            stem: Object name without extension.

        Returns:
            Public URL of the first existing object, or None.
        """
        for ext in IMAGE_EXTENSIONS:
            url = self.public_url(bucket, f"{stem}.{ext}")
            if self.exists(url):
                return url
        return None

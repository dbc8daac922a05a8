"""Filesystem-backed object storage.

Objects are written to {root_dir}/{bucket}/{name} and served by the API
under {public_base_url}/{bucket}/{name}.

URLs under the public base are checked on disk; any other URL falls back
to the HEAD probe.
"""

from __future__ import annotations

import logging
from pathlib import Path
from urllib.parse import unquote, urlsplit

from findyouth.storage.base import IMAGE_EXTENSIONS, ObjectStorage, StorageError

logger = logging.getLogger(__name__)


class LocalObjectStorage(ObjectStorage):
    """Object storage on the local filesystem."""

    def __init__(self, root_dir: Path, public_base_url: str, probe_timeout: float | None = None):
        """Initialize local storage.

        Args:
            root_dir: Directory holding one sub-directory per bucket.
            public_base_url: URL prefix the API serves root_dir under.
            probe_timeout: Timeout for HEAD probes of foreign URLs.
        """
        self.root_dir = Path(root_dir)
        self.public_base_url = public_base_url.rstrip("/")
        if probe_timeout is not None:
            self.probe_timeout = probe_timeout
        self.root_dir.mkdir(parents=True, exist_ok=True)

    def _object_path(self, bucket: str, name: str) -> Path:
        """Resolve an object path, refusing names that escape the bucket."""
        bucket_dir = (self.root_dir / bucket).resolve()
        path = (bucket_dir / name).resolve()
        if bucket_dir not in path.parents:
            raise StorageError(f"Invalid object name: {name}")
        return path

    def upload(self, bucket: str, name: str, data: bytes, content_type: str) -> None:
        """Write an object to disk (upsert).

        Images stored under the same stem with another extension are
        removed, so find_image only sees the latest upload.
        """
        path = self._object_path(bucket, name)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)
            self._remove_siblings(path)
        except OSError as e:
            raise StorageError(f"Failed to store {bucket}/{name}: {e}") from e
        logger.info(f"Stored {bucket}/{name} ({len(data)} bytes, {content_type})")

    def _remove_siblings(self, path: Path) -> None:
        """Delete {stem}.{ext} images next to path for other known extensions."""
        if path.suffix.lstrip(".").lower() not in IMAGE_EXTENSIONS:
            return
        for ext in IMAGE_EXTENSIONS:
            sibling = path.with_name(f"{path.stem}.{ext}")
            if sibling != path and sibling.is_file():
                sibling.unlink()
                logger.info(f"Removed stale object {sibling.name}")

    def public_url(self, bucket: str, name: str) -> str:
        return f"{self.public_base_url}/{bucket}/{name}"

    def exists(self, url: str) -> bool:
        """Check on disk for our own URLs, HEAD probe for anything else."""
        prefix = f"{self.public_base_url}/"
        if not url.startswith(prefix):
            return super().exists(url)

        relative = unquote(urlsplit(url[len(prefix):]).path)
        bucket, _, name = relative.partition("/")
        if not bucket or not name:
            return False
        try:
            return self._object_path(bucket, name).is_file()
        except StorageError:
            return False

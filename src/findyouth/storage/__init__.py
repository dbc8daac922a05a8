"""Object storage for uploaded images.

Structure:
- storage/base.py  - ObjectStorage interface and bucket constants
- storage/local.py - filesystem implementation served by the API
- storage/probe.py - HEAD existence checks for public URLs
"""

from findyouth.storage.base import (
    IMAGE_EXTENSIONS,
    PROFILE_IMAGES_BUCKET,
    ObjectStorage,
    StorageError,
)
from findyouth.storage.local import LocalObjectStorage
from findyouth.storage.probe import url_exists

__all__ = [
    "IMAGE_EXTENSIONS",
    "PROFILE_IMAGES_BUCKET",
    "LocalObjectStorage",
    "ObjectStorage",
    "StorageError",
    "url_exists",
]

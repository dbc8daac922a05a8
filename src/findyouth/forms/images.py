"""Image validation and upload for organization images.

Rules:
- profile image: JPEG, PNG or GIF, at most 2MB
- banner image: JPEG or PNG, at most 3MB, width:height within 10% of 1200:300
"""

from __future__ import annotations

import io
import logging
from dataclasses import dataclass

from PIL import Image, UnidentifiedImageError

from findyouth.core.identity import banner_image_object_name, profile_image_object_name
from findyouth.storage.base import PROFILE_IMAGES_BUCKET, ObjectStorage

logger = logging.getLogger(__name__)

MB = 1024 * 1024

PROFILE_IMAGE_MAX_BYTES = 2 * MB
BANNER_IMAGE_MAX_BYTES = 3 * MB

PROFILE_IMAGE_TYPES = {"image/jpeg", "image/jpg", "image/png", "image/gif"}
BANNER_IMAGE_TYPES = {"image/jpeg", "image/jpg", "image/png"}

BANNER_WIDTH = 1200
BANNER_HEIGHT = 300
BANNER_ASPECT_RATIO = BANNER_WIDTH / BANNER_HEIGHT
BANNER_ASPECT_TOLERANCE = 0.1

_EXTENSION_BY_TYPE = {
    "image/jpeg": "jpg",
    "image/jpg": "jpg",
    "image/png": "png",
    "image/gif": "gif",
}

# Pillow format names accepted for each declared content type
_FORMAT_BY_TYPE = {
    "image/jpeg": "JPEG",
    "image/jpg": "JPEG",
    "image/png": "PNG",
    "image/gif": "GIF",
}


class ImageValidationError(ValueError):
    """An uploaded image breaks a validation rule."""

    def __init__(self, field: str, message: str):
        super().__init__(message)
        self.field = field
        self.message = message


@dataclass
class ImageUpload:
    """An uploaded image file."""

    filename: str
    content_type: str
    data: bytes

    @property
    def extension(self) -> str:
        """Stored file extension, derived from the declared content type.

        The client's filename is ignored.
        """
        return _EXTENSION_BY_TYPE.get(self.content_type, "jpg")


def _read_image_size(upload: ImageUpload, field: str) -> tuple[int, int]:
    """Decode the image header and check it matches the declared type.

    Returns:
        (width, height) of the image.

    Raises:
        ImageValidationError: If the bytes are not an image of the declared type.
    """
    try:
        with Image.open(io.BytesIO(upload.data)) as img:
            image_format = img.format
            size = img.size
    except (UnidentifiedImageError, OSError) as e:
        raise ImageValidationError(field, "Unable to read image file") from e

    if image_format != _FORMAT_BY_TYPE.get(upload.content_type):
        raise ImageValidationError(field, "File contents do not match the declared image type")
    return size


def validate_profile_image(upload: ImageUpload, field: str = "profile_image") -> None:
    """Validate a profile image.

    Raises:
        ImageValidationError: If the type or size is not allowed, or the
            bytes are not an image of the declared type.
    """
    if upload.content_type not in PROFILE_IMAGE_TYPES:
        raise ImageValidationError(field, "File format not supported. Please use JPEG, PNG or GIF.")
    if not upload.data:
        raise ImageValidationError(field, "Profile picture is required")
    if len(upload.data) > PROFILE_IMAGE_MAX_BYTES:
        raise ImageValidationError(field, "File size must be less than 2MB")
    _read_image_size(upload, field)


def validate_banner_image(upload: ImageUpload, field: str = "banner_image") -> None:
    """Validate a banner image, including its aspect ratio.

    Raises:
        ImageValidationError: If the type, size or aspect ratio is not allowed.
    """
    if upload.content_type not in BANNER_IMAGE_TYPES:
        raise ImageValidationError(field, "Invalid file type. Please use JPEG or PNG images.")
    if len(upload.data) > BANNER_IMAGE_MAX_BYTES:
        raise ImageValidationError(field, "File size must be less than 3MB")

    width, height = _read_image_size(upload, field)
    if height == 0:
        raise ImageValidationError(field, "Unable to read image file")

    ratio = width / height
    if abs(ratio - BANNER_ASPECT_RATIO) / BANNER_ASPECT_RATIO > BANNER_ASPECT_TOLERANCE:
        raise ImageValidationError(
            field,
            f"Please upload an image with a width:height ratio close to "
            f"{BANNER_WIDTH}:{BANNER_HEIGHT} (current: {width}:{height})",
        )


def upload_profile_image(storage: ObjectStorage, owner_id: str, upload: ImageUpload) -> str:
    """Validate and store a profile image.

    Returns:
        Public URL of the stored image.

    Raises:
        ImageValidationError: If the image is rejected.
        StorageError: If the upload fails.
    """
    validate_profile_image(upload)
    name = profile_image_object_name(owner_id, upload.extension)
    storage.upload(PROFILE_IMAGES_BUCKET, name, upload.data, upload.content_type)
    url = storage.public_url(PROFILE_IMAGES_BUCKET, name)
    logger.info(f"Uploaded profile image for {owner_id}: {url}")
    return url


def upload_banner_image(storage: ObjectStorage, owner_id: str, upload: ImageUpload) -> str:
    """Validate and store a banner image.

    Returns:
        Public URL of the stored image.

    Raises:
        ImageValidationError: If the image is rejected.
        StorageError: If the upload fails.
    """
    validate_banner_image(upload)
    name = banner_image_object_name(owner_id, upload.extension)
    storage.upload(PROFILE_IMAGES_BUCKET, name, upload.data, upload.content_type)
    url = storage.public_url(PROFILE_IMAGES_BUCKET, name)
    logger.info(f"Uploaded banner image for {owner_id}: {url}")
    return url

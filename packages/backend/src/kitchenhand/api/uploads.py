"""Caller-side upload handling: read, validate, then hand off to storage.

Learn: The storage adapter never judges a file. Extension and size checks
happen here, BEFORE store() is called, so a rejected file (payload.exe,
a 50 MB photo) never reaches disk or S3. Storage errors are wrapped into
StorageFailure (→ 500) with the details logged, not shown.
"""

from dataclasses import dataclass
from typing import Any, Optional

from fastapi import Request
from starlette.datastructures import UploadFile

from kitchenhand.errors import StorageFailure, ValidationFailed
from kitchenhand.storage import StorageError, UploadStorage, is_valid_image_extension

INVALID_TYPE_MESSAGE = "Invalid file type. Only JPG, PNG, and WEBP are allowed."


@dataclass
class ImageUpload:
    data: bytes
    filename: str


def get_upload_storage(request: Request) -> UploadStorage:
    """The storage backend chosen once at startup by create_app()."""
    return request.app.state.storage


def get_max_upload_bytes(request: Request) -> int:
    return request.app.state.settings.max_upload_bytes


async def read_image(field: Any, max_bytes: int) -> Optional[ImageUpload]:
    """Read an optional image form field.

    Returns None when no file was chosen (browsers send an empty part with
    an empty filename). Raises ValidationFailed for a disallowed extension
    or a file larger than max_bytes.
    """
    if not isinstance(field, UploadFile) or not field.filename:
        return None

    if not is_valid_image_extension(field.filename):
        raise ValidationFailed(INVALID_TYPE_MESSAGE)

    data = await field.read(max_bytes + 1)
    if len(data) > max_bytes:
        raise ValidationFailed(
            f"File size exceeds maximum allowed size ({max_bytes} bytes)"
        )
    if not data:
        return None
    return ImageUpload(data=data, filename=field.filename)


async def store_image(storage: UploadStorage, image: Optional[ImageUpload]) -> str:
    """Store image and return its URL, or "" when there is no image."""
    if image is None:
        return ""
    try:
        return await storage.store(image.data, image.filename)
    except StorageError as e:
        raise StorageFailure(f"Failed to store {image.filename}: {e}") from e

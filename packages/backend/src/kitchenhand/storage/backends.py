"""Upload storage backends.

Learn: Blobs are immutable. Every store() call writes a brand new
<uuid4>.<ext> object, so storing the same bytes twice yields two URLs and
an update never overwrites the previous image (the old one is simply no
longer referenced).

boto3 is synchronous, so S3 calls run in a worker thread via
asyncio.to_thread() to keep the event loop free. Local writes do the same.
"""

import asyncio
import os
import uuid
from abc import ABC, abstractmethod
from pathlib import Path, PurePath
from typing import Any

import structlog
from botocore.exceptions import BotoCoreError, ClientError

logger = structlog.get_logger()

VALID_IMAGE_EXTENSIONS = frozenset({"jpg", "jpeg", "png", "webp"})
DEFAULT_EXTENSION = "jpg"
LOCAL_URL_PREFIX = "/static/uploads"
S3_KEY_PREFIX = "uploads/"

_CONTENT_TYPES = {
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "png": "image/png",
    "webp": "image/webp",
}


class StorageError(Exception):
    """Raised when an upload cannot be stored."""


class StorageUnavailable(StorageError):
    """The backend could not be reached (directory creation, network call)."""


class WriteFailed(StorageError):
    """The blob was only partially written, or not at all."""


# ─── Filename helpers ────────────────────────────────────


def file_extension(filename: str, default: str = DEFAULT_EXTENSION) -> str:
    """Extension of filename without the dot, as given ("photo.PNG" → "PNG")."""
    suffix = PurePath(os.path.basename(filename or "")).suffix
    return suffix[1:] if len(suffix) > 1 else default


def is_valid_image_extension(filename: str) -> bool:
    """Only jpg, jpeg, png and webp are accepted (case-insensitive)."""
    ext = file_extension(filename, default="")
    return ext.lower() in VALID_IMAGE_EXTENSIONS


def content_type_for(filename: str) -> str:
    return _CONTENT_TYPES.get(
        file_extension(filename, default="").lower(), "application/octet-stream"
    )


def _unique_name(filename: str) -> str:
    return f"{uuid.uuid4()}.{file_extension(filename)}"


# ─── Backends ────────────────────────────────────────────


class UploadStorage(ABC):
    """Stores an opaque blob and returns the URL it can be fetched from."""

    name: str = "base"
    # Origin the returned URLs live on; None when this app serves them.
    origin: str | None = None

    @abstractmethod
    async def store(self, data: bytes, filename: str) -> str:
        """Persist data under a fresh name derived from filename's extension.

        The extension is only used for naming and content type; callers
        are responsible for rejecting disallowed file types first.
        """
        ...


class LocalUploadStorage(UploadStorage):
    """Writes uploads to a directory served as static files."""

    name = "local"

    def __init__(self, upload_dir: str | Path, url_prefix: str = LOCAL_URL_PREFIX):
        self.upload_dir = Path(upload_dir)
        self.url_prefix = url_prefix.rstrip("/")

    async def store(self, data: bytes, filename: str) -> str:
        unique_name = _unique_name(filename)
        await asyncio.to_thread(self._write, unique_name, data)
        logger.info("upload.stored", backend=self.name, name=unique_name, size=len(data))
        return f"{self.url_prefix}/{unique_name}"

    def _write(self, unique_name: str, data: bytes) -> None:
        try:
            self.upload_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageUnavailable(
                f"Cannot create upload directory {self.upload_dir}: {e}"
            ) from e

        path = self.upload_dir / unique_name
        try:
            with open(path, "wb") as f:
                written = f.write(data)
        except OSError as e:
            raise WriteFailed(f"Failed to write {path}: {e}") from e

        if written != len(data):
            raise WriteFailed(f"Short write to {path}: {written}/{len(data)} bytes")


class S3UploadStorage(UploadStorage):
    """Uploads to an S3 bucket and returns the public object URL."""

    name = "s3"

    def __init__(
        self,
        client: Any,
        bucket: str,
        region: str,
        key_prefix: str = S3_KEY_PREFIX,
    ):
        self.client = client
        self.bucket = bucket
        self.region = region
        self.key_prefix = key_prefix

    @property
    def origin(self) -> str:
        return f"https://{self.bucket}.s3.{self.region}.amazonaws.com"

    async def store(self, data: bytes, filename: str) -> str:
        key = f"{self.key_prefix}{_unique_name(filename)}"
        try:
            await asyncio.to_thread(
                self.client.put_object,
                Bucket=self.bucket,
                Key=key,
                Body=data,
                ContentType=content_type_for(filename),
            )
        except (BotoCoreError, ClientError) as e:
            raise StorageUnavailable(f"S3 upload to {self.bucket}/{key} failed: {e}") from e

        logger.info("upload.stored", backend=self.name, key=key, size=len(data))
        return f"{self.origin}/{key}"


def build_upload_storage(settings, s3_client: Any = None) -> UploadStorage:
    """Pick the backend once, from settings.s3_enabled."""
    if settings.s3_enabled:
        if s3_client is None:
            import boto3

            s3_client = boto3.client("s3", region_name=settings.aws_region)
        return S3UploadStorage(
            s3_client,
            bucket=settings.s3_bucket_name,
            region=settings.aws_region,
        )
    return LocalUploadStorage(settings.upload_dir)

"""Upload storage tests — local directory and S3 backends.

Learn: The S3 backend takes any object with a put_object() method, so a
small recording stub stands in for the boto3 client here.
"""

import pytest
from botocore.exceptions import ClientError, EndpointConnectionError

from kitchenhand.config import Settings
from kitchenhand.storage import (
    LocalUploadStorage,
    S3UploadStorage,
    StorageUnavailable,
    WriteFailed,
    build_upload_storage,
    content_type_for,
    file_extension,
    is_valid_image_extension,
)
from kitchenhand.storage import backends


class StubS3Client:
    def __init__(self, error: Exception | None = None):
        self.calls = []
        self.error = error

    def put_object(self, **kwargs):
        if self.error is not None:
            raise self.error
        self.calls.append(kwargs)
        return {"ETag": '"stub"'}


# ═══════════════════════════════════════════════════════════
# Filename helpers
# ═══════════════════════════════════════════════════════════


@pytest.mark.parametrize(
    "filename,valid",
    [
        ("photo.jpg", True),
        ("photo.JPEG", True),
        ("photo.PNG", True),
        ("photo.webp", True),
        ("payload.exe", False),
        ("photo.gif", False),
        ("no-extension", False),
        ("archive.png.exe", False),
    ],
)
def test_is_valid_image_extension(filename, valid):
    assert is_valid_image_extension(filename) is valid


def test_content_type_table():
    assert content_type_for("a.jpg") == "image/jpeg"
    assert content_type_for("a.JPEG") == "image/jpeg"
    assert content_type_for("a.png") == "image/png"
    assert content_type_for("a.webp") == "image/webp"
    assert content_type_for("a.bin") == "application/octet-stream"
    assert content_type_for("noext") == "application/octet-stream"


def test_file_extension_defaults_to_jpg():
    assert file_extension("photo.PNG") == "PNG"
    assert file_extension("photo") == "jpg"
    assert file_extension("") == "jpg"


# ═══════════════════════════════════════════════════════════
# Local backend
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_local_store_writes_file(tmp_path):
    storage = LocalUploadStorage(tmp_path / "uploads")
    url = await storage.store(b"\x89PNG fake", "photo.PNG")

    assert url.startswith("/static/uploads/")
    assert url.endswith(".PNG")
    name = url.rsplit("/", 1)[1]
    assert (tmp_path / "uploads" / name).read_bytes() == b"\x89PNG fake"


@pytest.mark.asyncio
async def test_same_bytes_twice_gives_two_urls(tmp_path):
    storage = LocalUploadStorage(tmp_path)
    a = await storage.store(b"same", "a.jpg")
    b = await storage.store(b"same", "a.jpg")
    assert a != b
    assert len(list(tmp_path.iterdir())) == 2


@pytest.mark.asyncio
async def test_missing_extension_stored_as_jpg(tmp_path):
    url = await LocalUploadStorage(tmp_path).store(b"x", "blob")
    assert url.endswith(".jpg")


@pytest.mark.asyncio
async def test_directory_failure_is_unavailable(tmp_path):
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("file in the way")
    storage = LocalUploadStorage(blocker / "uploads")
    with pytest.raises(StorageUnavailable):
        await storage.store(b"x", "a.jpg")


@pytest.mark.asyncio
async def test_short_write_fails(tmp_path, monkeypatch):
    class ShortFile:
        def __enter__(self):
            return self

        def __exit__(self, *exc):
            return False

        def write(self, data):
            return len(data) - 1

    monkeypatch.setattr(backends, "open", lambda *a, **k: ShortFile(), raising=False)
    with pytest.raises(WriteFailed):
        await LocalUploadStorage(tmp_path).store(b"abc", "a.jpg")


# ═══════════════════════════════════════════════════════════
# S3 backend
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_s3_store_puts_object():
    client = StubS3Client()
    storage = S3UploadStorage(client, bucket="kitchen-bucket", region="ap-southeast-2")

    url = await storage.store(b"img", "photo.webp")

    assert len(client.calls) == 1
    call = client.calls[0]
    assert call["Bucket"] == "kitchen-bucket"
    assert call["Key"].startswith("uploads/")
    assert call["Key"].endswith(".webp")
    assert call["Body"] == b"img"
    assert call["ContentType"] == "image/webp"
    assert url == f"https://kitchen-bucket.s3.ap-southeast-2.amazonaws.com/{call['Key']}"


@pytest.mark.asyncio
async def test_s3_client_error_is_unavailable():
    error = ClientError({"Error": {"Code": "AccessDenied", "Message": "no"}}, "PutObject")
    storage = S3UploadStorage(StubS3Client(error), bucket="b", region="r")
    with pytest.raises(StorageUnavailable):
        await storage.store(b"img", "a.jpg")


@pytest.mark.asyncio
async def test_s3_network_error_is_unavailable():
    error = EndpointConnectionError(endpoint_url="https://b.s3.r.amazonaws.com")
    storage = S3UploadStorage(StubS3Client(error), bucket="b", region="r")
    with pytest.raises(StorageUnavailable):
        await storage.store(b"img", "a.jpg")


# ═══════════════════════════════════════════════════════════
# Backend selection
# ═══════════════════════════════════════════════════════════


def test_build_local_by_default(tmp_path):
    settings = Settings(_env_file=None, jwt_secret="x" * 32, upload_dir=str(tmp_path))
    storage = build_upload_storage(settings)
    assert isinstance(storage, LocalUploadStorage)


def test_build_s3_when_enabled():
    settings = Settings(
        _env_file=None,
        jwt_secret="x" * 32,
        s3_enabled=True,
        s3_bucket_name="kitchen-bucket",
        aws_region="eu-west-1",
    )
    storage = build_upload_storage(settings, s3_client=StubS3Client())
    assert isinstance(storage, S3UploadStorage)
    assert storage.bucket == "kitchen-bucket"
    assert storage.region == "eu-west-1"

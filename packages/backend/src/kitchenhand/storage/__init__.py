"""Upload storage — where product and preparation images end up.

Learn: Two interchangeable backends behind one interface:
1. LocalUploadStorage → files under UPLOAD_DIR, served from /static/uploads
2. S3UploadStorage    → objects under uploads/ in an S3 bucket

create_app() picks one (S3_ENABLED) and every handler just calls
storage.store(data, filename) and gets back a URL.
"""

from kitchenhand.storage.backends import (
    LocalUploadStorage,
    S3UploadStorage,
    StorageError,
    StorageUnavailable,
    UploadStorage,
    WriteFailed,
    build_upload_storage,
    content_type_for,
    file_extension,
    is_valid_image_extension,
)

__all__ = [
    "LocalUploadStorage",
    "S3UploadStorage",
    "StorageError",
    "StorageUnavailable",
    "UploadStorage",
    "WriteFailed",
    "build_upload_storage",
    "content_type_for",
    "file_extension",
    "is_valid_image_extension",
]

# backend/storage.py
"""
Image storage on Supabase Storage buckets.

Uploads are validated (image content type, at most 5 MB) before any bytes are
sent. Public URLs embed the bucket name, which is how a URL is mapped back to
its object path for deletion.
"""
from __future__ import annotations

import secrets
import time
from dataclasses import dataclass
from typing import Optional

import structlog
from supabase import Client

from backend.config import DEFAULT_IMAGE_BUCKET, DEFAULT_RECEIPT_BUCKET
from backend.errors import StorageError
from backend.logic.validation import validate_image

log = structlog.get_logger(__name__)


@dataclass(frozen=True)
class Upload:
    data: bytes
    filename: str
    content_type: Optional[str]


def _object_name(filename: str) -> str:
    ext = filename.rsplit(".", 1)[-1].lower() if "." in filename else "bin"
    return f"{secrets.token_hex(6)}_{int(time.time() * 1000)}.{ext}"


def path_from_url(url: str, bucket: str) -> str:
    marker = f"/{bucket}/"
    if marker not in (url or ""):
        raise StorageError("Invalid image URL", bucket=bucket, url=url)
    path = url.split(marker, 1)[1].split("?", 1)[0]
    if not path:
        raise StorageError("Invalid image URL", bucket=bucket, url=url)
    return path


class ImageStorage:
    def __init__(
        self,
        client: Client,
        image_bucket: str = DEFAULT_IMAGE_BUCKET,
        receipt_bucket: str = DEFAULT_RECEIPT_BUCKET,
    ):
        self.client = client
        self.image_bucket = image_bucket
        self.receipt_bucket = receipt_bucket

    def upload_image(
        self,
        data: bytes,
        filename: str,
        content_type: Optional[str],
        bucket: Optional[str] = None,
    ) -> str:
        validate_image(content_type, len(data))
        bucket = bucket or self.image_bucket
        path = _object_name(filename)

        try:
            store = self.client.storage.from_(bucket)
            store.upload(
                path,
                data,
                {"content-type": content_type, "cache-control": "3600", "upsert": "false"},
            )
            url = store.get_public_url(path)
        except Exception as e:
            log.error("upload_failed", bucket=bucket, path=path, error=f"{type(e).__name__}: {e}")
            raise StorageError(f"Failed to upload image: {e}", bucket=bucket) from e

        log.info("uploaded", bucket=bucket, path=path, size=len(data))
        return url

    def upload_receipt(self, data: bytes, filename: str, content_type: Optional[str]) -> str:
        return self.upload_image(data, filename, content_type, bucket=self.receipt_bucket)

    def delete_image(self, url: str, bucket: Optional[str] = None) -> None:
        bucket = bucket or self.image_bucket
        path = path_from_url(url, bucket)
        try:
            self.client.storage.from_(bucket).remove([path])
        except Exception as e:
            log.error("delete_failed", bucket=bucket, path=path, error=f"{type(e).__name__}: {e}")
            raise StorageError(f"Failed to delete image: {e}", bucket=bucket) from e
        log.info("deleted", bucket=bucket, path=path)

"""MinIO / S3 object storage for product-request images.

The ``minio`` SDK is synchronous, so each call runs in a worker thread to
keep the event loop free. SDK errors (``minio.error.S3Error``) propagate
unchanged to the caller.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from dataclasses import dataclass
from datetime import timedelta
from functools import lru_cache
from typing import BinaryIO

from minio import Minio

from app.core.config import Settings, settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UploadInfo:
    """Location of an uploaded object."""

    bucket: str
    key: str
    etag: str | None = None
    size: int = 0

    @property
    def uri(self) -> str:
        return f"{self.bucket}/{self.key}"


def _object_name(folder: str, filename: str) -> str:
    safe_name = filename.replace("/", "_").strip() or "upload"
    return f"{folder.strip('/')}/{uuid.uuid4().hex}-{safe_name}"


class MinioObjectStore:
    def __init__(self, client: Minio, bucket: str):
        self._client = client
        self._bucket = bucket

    async def upload_file(
        self,
        filename: str,
        reader: BinaryIO,
        size: int,
        content_type: str,
        folder: str,
    ) -> UploadInfo:
        object_name = _object_name(folder, filename)
        result = await asyncio.to_thread(
            self._client.put_object,
            bucket_name=self._bucket,
            object_name=object_name,
            data=reader,
            length=size,
            content_type=content_type or "application/octet-stream",
        )
        logger.debug("Uploaded %s (%d bytes) to %s", object_name, size, self._bucket)
        return UploadInfo(
            bucket=result.bucket_name,
            key=result.object_name,
            etag=result.etag,
            size=size,
        )

    async def get_signed_url(self, bucket: str, object_name: str, expires: timedelta) -> str:
        return await asyncio.to_thread(
            self._client.presigned_get_object,
            bucket_name=bucket,
            object_name=object_name,
            expires=expires,
        )


def build_object_store(cfg: Settings) -> MinioObjectStore:
    client = Minio(
        endpoint=cfg.s3_endpoint,
        access_key=cfg.s3_access_key,
        secret_key=cfg.s3_secret_key,
        secure=cfg.s3_secure,
        region=cfg.s3_region,
    )
    return MinioObjectStore(client, cfg.s3_bucket_name)


@lru_cache(maxsize=1)
def get_object_store() -> MinioObjectStore:
    """Process-wide object store built from the application settings."""
    return build_object_store(settings)

from __future__ import annotations

from typing import TYPE_CHECKING

from .base import BlobStore
from .s3_blob import S3BlobStore
from .vercel_blob import VercelBlobStore

if TYPE_CHECKING:
    from ..config import Settings


def create_blob_store(settings: "Settings") -> BlobStore:
    if settings.blob_backend == "s3":
        return S3BlobStore(
            settings.s3_bucket,
            region=settings.s3_region,
            endpoint_url=settings.s3_endpoint_url,
            public_base_url=settings.s3_public_base_url,
        )
    return VercelBlobStore(
        settings.blob_read_write_token,
        api_url=settings.blob_api_url,
        timeout=settings.http_timeout_seconds,
    )

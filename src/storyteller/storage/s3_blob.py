"""S3-compatible backend (AWS S3, MinIO, R2, ...)."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, Optional

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from ..errors import BlobStoreError
from .base import BlobStore

logger = logging.getLogger(__name__)


class S3BlobStore(BlobStore):
    def __init__(
        self,
        bucket: str,
        *,
        region: str = "us-east-1",
        endpoint_url: str = "",
        public_base_url: str = "",
        client: Optional[Any] = None,
    ) -> None:
        self.bucket = bucket
        self.region = region
        self.endpoint_url = endpoint_url
        self.public_base_url = public_base_url.rstrip("/")
        if client is None:
            client_kwargs: Dict[str, Any] = {
                "service_name": "s3",
                "region_name": region,
                "config": Config(signature_version="s3v4"),
            }
            if endpoint_url:
                client_kwargs["endpoint_url"] = endpoint_url
            client = boto3.client(**client_kwargs)
        self.client = client

    def public_url(self, key: str) -> str:
        if self.public_base_url:
            return f"{self.public_base_url}/{key}"
        if self.endpoint_url:
            return f"{self.endpoint_url.rstrip('/')}/{self.bucket}/{key}"
        return f"https://{self.bucket}.s3.{self.region}.amazonaws.com/{key}"

    def _put_sync(self, key: str, body: bytes, content_type: str) -> None:
        self.client.put_object(
            Bucket=self.bucket,
            Key=key,
            Body=body,
            ContentType=content_type,
        )

    async def put(self, key: str, body: bytes, content_type: str) -> str:
        try:
            await asyncio.to_thread(self._put_sync, key, body, content_type)
        except (BotoCoreError, ClientError) as exc:
            raise BlobStoreError(f"S3 put failed for s3://{self.bucket}/{key}: {exc}") from exc
        logger.debug("s3 object written bucket=%s key=%s size=%d", self.bucket, key, len(body))
        return self.public_url(key)

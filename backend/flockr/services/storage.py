"""
Media Storage - S3-compatible object storage for product videos

Supports AWS S3, Cloudflare R2, MinIO, and other S3-compatible services.
The object key doubles as the media handle used for deletion.
"""
import asyncio
import hashlib
import logging
from dataclasses import dataclass
from typing import Optional, Protocol

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from flockr.core.config import Settings
from flockr.core.exceptions import MediaStoreError, UploadError
from flockr.core.utils import utcnow

logger = logging.getLogger(__name__)

RESOURCE_TYPE_VIDEO = "video"


@dataclass
class MediaAsset:
    """A stored media object."""
    url: str
    handle: str
    content_type: Optional[str] = None
    size_bytes: Optional[int] = None


class MediaStore(Protocol):
    async def upload(
        self,
        content: bytes,
        filename: str,
        content_type: str,
        resource_type: str = RESOURCE_TYPE_VIDEO,
    ) -> MediaAsset:
        """Store content. Raises UploadError on failure."""
        ...

    async def delete(self, handle: str, resource_type: str = RESOURCE_TYPE_VIDEO) -> None:
        """Remove a stored object. Raises MediaStoreError on failure."""
        ...


def safe_filename(filename: str) -> str:
    cleaned = "".join(c for c in (filename or "") if c.isalnum() or c in ".-_").lower()
    return cleaned or "upload"


class S3MediaStore:
    """
    S3-compatible media store.

    boto3 is synchronous, so calls run in a worker thread to keep the event
    loop free while large videos upload.
    """

    def __init__(
        self,
        bucket: str,
        region: str,
        folder: str,
        access_key: str = "",
        secret_key: str = "",
        endpoint: str = "",
        public_url: str = "",
        client=None,
    ):
        self._bucket = bucket
        self._region = region
        self._folder = folder.strip("/")
        self._access_key = access_key
        self._secret_key = secret_key
        self._endpoint = endpoint
        self._public_url = public_url
        self._client = client

    @classmethod
    def from_settings(cls, settings: Settings) -> "S3MediaStore":
        return cls(
            bucket=settings.S3_BUCKET,
            region=settings.S3_REGION,
            folder=settings.MEDIA_FOLDER,
            access_key=settings.S3_ACCESS_KEY,
            secret_key=settings.S3_SECRET_KEY,
            endpoint=settings.S3_ENDPOINT,
            public_url=settings.S3_PUBLIC_URL,
        )

    @property
    def client(self):
        """Lazy-load S3 client."""
        if self._client is None:
            config = Config(
                signature_version="s3v4",
                retries={"max_attempts": 3, "mode": "standard"},
            )

            client_kwargs = {
                "service_name": "s3",
                "region_name": self._region,
                "config": config,
            }
            # Missing keys fall back to boto3's default credential chain
            if self._access_key and self._secret_key:
                client_kwargs["aws_access_key_id"] = self._access_key
                client_kwargs["aws_secret_access_key"] = self._secret_key

            if self._endpoint:
                client_kwargs["endpoint_url"] = self._endpoint

            self._client = boto3.client(**client_kwargs)

        return self._client

    def get_public_url(self, key: str) -> str:
        if self._public_url:
            return f"{self._public_url.rstrip('/')}/{key}"
        if self._endpoint:
            return f"{self._endpoint.rstrip('/')}/{self._bucket}/{key}"
        return f"https://{self._bucket}.s3.{self._region}.amazonaws.com/{key}"

    def generate_key(self, resource_type: str, filename: str, content: bytes) -> str:
        """Unique key: folder/<type>s/<date>_<hash8>_<filename>."""
        content_hash = hashlib.md5(content).hexdigest()[:8]
        timestamp = utcnow().strftime("%Y%m%d%H%M%S")
        return f"{self._folder}/{resource_type}s/{timestamp}_{content_hash}_{safe_filename(filename)}"

    async def upload(
        self,
        content: bytes,
        filename: str,
        content_type: str,
        resource_type: str = RESOURCE_TYPE_VIDEO,
    ) -> MediaAsset:
        key = self.generate_key(resource_type, filename, content)

        try:
            await asyncio.to_thread(
                self.client.put_object,
                Bucket=self._bucket,
                Key=key,
                Body=content,
                ContentType=content_type,
                CacheControl="public, max-age=31536000",
                Metadata={"resource-type": resource_type},
            )
        except (BotoCoreError, ClientError) as e:
            logger.error(f"Media upload failed for {key}: {e}")
            raise UploadError(details={"key": key, "error": str(e)}) from e

        url = self.get_public_url(key)
        logger.info(f"Uploaded {resource_type}: {key} ({len(content)} bytes)")

        return MediaAsset(
            url=url,
            handle=key,
            content_type=content_type,
            size_bytes=len(content),
        )

    async def delete(self, handle: str, resource_type: str = RESOURCE_TYPE_VIDEO) -> None:
        try:
            await asyncio.to_thread(self.client.delete_object, Bucket=self._bucket, Key=handle)
        except (BotoCoreError, ClientError) as e:
            logger.error(f"Media delete failed for {handle}: {e}")
            raise MediaStoreError(
                "Failed to delete media",
                details={"key": handle, "resource_type": resource_type, "error": str(e)},
            ) from e
        logger.info(f"Deleted {resource_type}: {handle}")

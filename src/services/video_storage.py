"""Cloudflare R2 storage for finished videos.

Uses boto3 against R2's S3-compatible endpoint. Objects are written to
``videos/{project_id}.mp4`` and served from ``R2_PUBLIC_URL``.
"""

import logging
from io import BytesIO
from typing import Optional

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

logger = logging.getLogger(__name__)

VIDEO_PREFIX = "videos/"
VIDEO_CONTENT_TYPE = "video/mp4"


class VideoStorageError(Exception):
    """Raised when a video cannot be stored or removed."""

    pass


def video_key(project_id: str) -> str:
    return f"{VIDEO_PREFIX}{project_id}.mp4"


class VideoStorage:
    """Public object storage for rendered videos."""

    def __init__(
        self,
        account_id: str,
        access_key_id: str,
        secret_access_key: str,
        bucket_name: str = "demodrop-videos",
        public_url: Optional[str] = None,
        client=None,
    ):
        """Initialize R2 storage.

        Args:
            account_id: Cloudflare account ID
            access_key_id: R2 API access key ID
            secret_access_key: R2 API secret access key
            bucket_name: R2 bucket name
            public_url: Public URL base for objects (CDN or r2.dev URL)
            client: Pre-built S3 client, mainly for tests
        """
        self.account_id = account_id
        self.bucket_name = bucket_name
        self.public_url = (public_url or "").rstrip("/")

        self._client = client or boto3.client(
            "s3",
            endpoint_url=f"https://{account_id}.r2.cloudflarestorage.com",
            aws_access_key_id=access_key_id,
            aws_secret_access_key=secret_access_key,
            config=Config(
                signature_version="s3v4",
                retries={"max_attempts": 3, "mode": "adaptive"},
            ),
        )

        logger.info(f"R2 video storage initialized for bucket: {bucket_name}")

    def public_url_for(self, key: str) -> str:
        if self.public_url:
            return f"{self.public_url}/{key}"
        return f"https://{self.bucket_name}.{self.account_id}.r2.cloudflarestorage.com/{key}"

    def key_from_url(self, url: str) -> Optional[str]:
        """Object key for a URL this storage produced, else None."""
        marker = f"/{VIDEO_PREFIX}"
        index = url.find(marker)
        if index == -1:
            return None
        return url[index + 1:].split("?", 1)[0]

    def upload_video(self, project_id: str, data: bytes) -> str:
        """Store ``data`` and return its public URL.

        Raises:
            VideoStorageError: If the upload is rejected
        """
        if not data:
            raise VideoStorageError("Refusing to upload an empty video")

        key = video_key(project_id)
        try:
            self._client.upload_fileobj(
                BytesIO(data),
                self.bucket_name,
                key,
                ExtraArgs={"ContentType": VIDEO_CONTENT_TYPE},
            )
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Failed to upload {key}: {e}")
            raise VideoStorageError(f"Failed to upload video: {e}") from e

        url = self.public_url_for(key)
        logger.info(f"Uploaded {key} to R2 ({len(data) / 1024 / 1024:.1f} MB)")
        return url

    def delete_video(self, url_or_key: str) -> bool:
        """Delete a stored video by public URL or object key.

        Returns:
            True if a delete was issued, False if the URL is not ours
        """
        key = url_or_key if url_or_key.startswith(VIDEO_PREFIX) else self.key_from_url(url_or_key)
        if not key:
            logger.debug(f"Not an R2 video URL, skipping delete: {url_or_key}")
            return False

        try:
            self._client.delete_object(Bucket=self.bucket_name, Key=key)
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") == "NoSuchKey":
                return False
            logger.error(f"Failed to delete {key}: {e}")
            raise VideoStorageError(f"Failed to delete video: {e}") from e

        logger.info(f"Deleted {key} from R2")
        return True


_storage_instance: Optional[VideoStorage] = None


def get_video_storage(config: dict) -> Optional[VideoStorage]:
    """Get or create the VideoStorage instance, None when R2 is not configured."""
    global _storage_instance

    if _storage_instance is not None:
        return _storage_instance

    account_id = config.get("r2_account_id")
    access_key_id = config.get("r2_access_key_id")
    secret_access_key = config.get("r2_secret_access_key")

    if not all([account_id, access_key_id, secret_access_key]):
        logger.debug("R2 storage not configured - missing credentials")
        return None

    _storage_instance = VideoStorage(
        account_id=account_id,
        access_key_id=access_key_id,
        secret_access_key=secret_access_key,
        bucket_name=config.get("r2_bucket_name") or "demodrop-videos",
        public_url=config.get("r2_public_url"),
    )
    return _storage_instance

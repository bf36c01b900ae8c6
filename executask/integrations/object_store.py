"""Object storage for todo attachments.

Supports AWS S3 (or any S3-compatible endpoint) for production and the local
filesystem for development, selected by STORAGE_BACKEND.
"""

import logging
import os
import re
import uuid
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError
from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)

PRESIGNED_URL_EXPIRY_SEC = int(os.getenv("PRESIGNED_URL_EXPIRY_SEC", "3600"))

_UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


class ObjectStoreError(Exception):
    """Object store operation failed."""
    pass


def build_object_key(user_id: str, todo_id: str, filename: str) -> str:
    """Return a unique, URL-safe key for an uploaded file."""
    safe_name = _UNSAFE_FILENAME_CHARS.sub("_", filename).strip("._") or "file"
    return f"todos/{user_id}/{todo_id}/{uuid.uuid4().hex}_{safe_name}"


class ObjectStore(ABC):
    """Minimal object store contract used by the attachment workflow."""

    @abstractmethod
    def put(self, key: str, data: bytes, content_type: str) -> str:
        """Store bytes under `key` and return the key."""
        pass

    @abstractmethod
    def presigned_url(self, key: str, expires_in: int = PRESIGNED_URL_EXPIRY_SEC) -> str:
        """Return a time-limited download URL for `key`."""
        pass

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove `key`. Raises ObjectStoreError on failure."""
        pass


class S3ObjectStore(ObjectStore):
    """Attachments in an S3 bucket, downloaded through presigned URLs."""

    def __init__(
        self,
        bucket: Optional[str] = None,
        region: Optional[str] = None,
        endpoint_url: Optional[str] = None,
    ):
        self.bucket = bucket or os.getenv("S3_BUCKET", "executask-attachments")
        self.region = region or os.getenv("AWS_REGION", "us-east-1")
        self.endpoint_url = endpoint_url or os.getenv("S3_ENDPOINT_URL") or None
        self._client = None

    @property
    def client(self):
        """Lazy initialization of the S3 client."""
        if self._client is None:
            self._client = boto3.client(
                "s3",
                region_name=self.region,
                endpoint_url=self.endpoint_url,
            )
        return self._client

    def put(self, key: str, data: bytes, content_type: str) -> str:
        try:
            self.client.put_object(Bucket=self.bucket, Key=key, Body=data, ContentType=content_type)
            logger.info(f"[S3] Stored object {key} ({len(data)} bytes)")
            return key
        except (BotoCoreError, ClientError) as e:
            raise ObjectStoreError(f"Failed to upload {key} to S3: {e}") from e

    def presigned_url(self, key: str, expires_in: int = PRESIGNED_URL_EXPIRY_SEC) -> str:
        try:
            return self.client.generate_presigned_url(
                "get_object",
                Params={"Bucket": self.bucket, "Key": key},
                ExpiresIn=expires_in,
            )
        except (BotoCoreError, ClientError) as e:
            raise ObjectStoreError(f"Failed to presign {key}: {e}") from e

    def delete(self, key: str) -> None:
        try:
            self.client.delete_object(Bucket=self.bucket, Key=key)
            logger.info(f"[S3] Deleted object {key}")
        except (BotoCoreError, ClientError) as e:
            raise ObjectStoreError(f"Failed to delete {key} from S3: {e}") from e


class LocalObjectStore(ObjectStore):
    """Files under a local directory (development only)."""

    def __init__(self, root: Optional[str] = None):
        self.root = Path(root or os.getenv("LOCAL_STORAGE_DIR", "./media")).resolve()

    def _path(self, key: str) -> Path:
        path = (self.root / key).resolve()
        if self.root not in path.parents:
            raise ObjectStoreError(f"Key escapes storage root: {key}")
        return path

    def put(self, key: str, data: bytes, content_type: str) -> str:
        path = self._path(key)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)
        except OSError as e:
            raise ObjectStoreError(f"Failed to write {key}: {e}") from e
        logger.warning(f"[LOCAL] Stored {key} on local disk. Use S3 in production.")
        return key

    def presigned_url(self, key: str, expires_in: int = PRESIGNED_URL_EXPIRY_SEC) -> str:
        return self._path(key).as_uri()

    def delete(self, key: str) -> None:
        try:
            self._path(key).unlink(missing_ok=True)
        except OSError as e:
            raise ObjectStoreError(f"Failed to delete {key}: {e}") from e


def build_object_store() -> ObjectStore:
    """Object store selected by the STORAGE_BACKEND env var."""
    backend = os.getenv("STORAGE_BACKEND", "local")
    if backend == "s3":
        return S3ObjectStore()
    if backend == "local":
        return LocalObjectStore()
    raise ValueError(f"Unknown STORAGE_BACKEND: {backend}")

"""MinIO S3-compatible file storage for uploaded documents."""

import asyncio
import logging
from typing import Optional

import boto3
from botocore.client import Config
from botocore.exceptions import ClientError

from study_assistant.core.config import settings
from study_assistant.core.exceptions import NotFoundError
from .base import FileStorage

logger = logging.getLogger(__name__)


def parse_minio_path(minio_path: str) -> tuple[str, str]:
    """Parse a MinIO path (minio://bucket/key) into bucket and key.

    Args:
        minio_path: Path in format minio://bucket/object_key

    Returns:
        Tuple of (bucket, object_key)
    """
    if not minio_path.startswith("minio://"):
        raise ValueError(f"Invalid MinIO path: {minio_path}")

    path = minio_path[len("minio://"):]
    parts = path.split("/", 1)
    if len(parts) != 2 or not parts[0] or not parts[1]:
        raise ValueError(f"Invalid MinIO path format: {minio_path}")

    return parts[0], parts[1]


class MinioFileStorage(FileStorage):
    """MinIO-backed file storage.

    Handles are either ``minio://bucket/key`` or a bare key in the default
    documents bucket. boto3 calls are blocking and run in the default executor.
    """

    def __init__(self, client=None, default_bucket: Optional[str] = None) -> None:
        self._client = client or boto3.client(
            "s3",
            endpoint_url=settings.S3_ENDPOINT,
            aws_access_key_id=settings.S3_ACCESS_KEY,
            aws_secret_access_key=settings.S3_SECRET_KEY,
            config=Config(signature_version="s3v4"),
            use_ssl=settings.S3_ENDPOINT.startswith("https"),
        )
        self.bucket_documents = default_bucket or settings.S3_BUCKET

    def _locate(self, path: str) -> tuple[str, str]:
        if path.startswith("minio://"):
            return parse_minio_path(path)
        return self.bucket_documents, path

    def _object_exists(self, bucket: str, object_key: str) -> bool:
        try:
            self._client.head_object(Bucket=bucket, Key=object_key)
            return True
        except ClientError as e:
            if e.response["Error"]["Code"] in ("404", "NoSuchKey", "NotFound"):
                return False
            raise

    def _get_object(self, bucket: str, object_key: str) -> bytes:
        try:
            response = self._client.get_object(Bucket=bucket, Key=object_key)
            return response["Body"].read()
        except ClientError as e:
            if e.response["Error"]["Code"] in ("404", "NoSuchKey", "NotFound"):
                raise NotFoundError("File", f"{bucket}/{object_key}") from e
            logger.error(f"Failed to get {bucket}/{object_key}: {e}")
            raise

    async def exists(self, path: str) -> bool:
        bucket, key = self._locate(path)
        return await asyncio.get_event_loop().run_in_executor(
            None, self._object_exists, bucket, key
        )

    async def read(self, path: str) -> bytes:
        bucket, key = self._locate(path)
        data = await asyncio.get_event_loop().run_in_executor(
            None, self._get_object, bucket, key
        )
        logger.info(f"Downloaded {bucket}/{key} ({len(data)} bytes)")
        return data

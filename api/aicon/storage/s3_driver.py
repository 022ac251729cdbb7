"""S3-compatible storage driver (AWS S3, DigitalOcean Spaces, Cloudflare R2, MinIO)."""

from typing import Any, Dict

import aioboto3
from botocore.exceptions import BotoCoreError, ClientError

from aicon.exceptions import NotFoundError
from aicon.storage.base import (
    BaseStorageDriver,
    StorageConnectionError,
    StorageError,
)


class S3StorageDriver(BaseStorageDriver):
    """S3-compatible storage driver.

    Configuration:
        aws_access_key_id: Access key
        aws_secret_access_key: Secret key
        bucket_name: Bucket name
        region: Region (default: us-east-1)
        endpoint_url: Custom endpoint URL (Spaces, R2, MinIO, etc)
        base_path: Prefix path within bucket (optional)

    Example:
        >>> config = {
        ...     "aws_access_key_id": "DO00...",
        ...     "aws_secret_access_key": "...",
        ...     "bucket_name": "a-icon",
        ...     "region": "nyc3",
        ...     "endpoint_url": "https://nyc3.digitaloceanspaces.com",
        ... }
        >>> driver = S3StorageDriver(config)
        >>> data = await driver.get_object("favicons/abc/favicon-a-icon.com.ico")
    """

    def __init__(self, config: Dict[str, Any]):
        super().__init__(config)
        self.bucket_name = config["bucket_name"]
        self.base_path = config.get("base_path", "").strip("/")

        # S3 client configuration
        self.s3_config = {
            "aws_access_key_id": config["aws_access_key_id"],
            "aws_secret_access_key": config["aws_secret_access_key"],
            "region_name": config.get("region", "us-east-1"),
        }

        # Support custom endpoint (Spaces, R2, MinIO, etc)
        if config.get("endpoint_url"):
            self.s3_config["endpoint_url"] = config["endpoint_url"]

        self.session = aioboto3.Session()

    def _get_full_key(self, key: str) -> str:
        """Get full S3 key with base_path prefix."""
        if self.base_path:
            return f"{self.base_path}/{key}".strip("/")
        return key.strip("/")

    async def put_object(self, key: str, content: bytes, content_type: str) -> str:
        full_key = self._get_full_key(key)

        try:
            async with self.session.client("s3", **self.s3_config) as s3:
                await s3.put_object(
                    Bucket=self.bucket_name,
                    Key=full_key,
                    Body=content,
                    ContentType=content_type,
                )
        except (ClientError, BotoCoreError) as e:
            raise StorageError(f"Failed to upload object {key}: {e}")

        return key

    async def get_object(self, key: str) -> bytes:
        full_key = self._get_full_key(key)

        try:
            async with self.session.client("s3", **self.s3_config) as s3:
                response = await s3.get_object(Bucket=self.bucket_name, Key=full_key)
                async with response["Body"] as stream:
                    return await stream.read()

        except ClientError as e:
            if e.response["Error"]["Code"] in ("NoSuchKey", "404"):
                raise NotFoundError("Object", key)
            raise StorageError(f"Failed to get object {key}: {e}")
        except BotoCoreError as e:
            raise StorageError(f"Failed to get object {key}: {e}")

    async def delete_object(self, key: str) -> None:
        full_key = self._get_full_key(key)

        try:
            async with self.session.client("s3", **self.s3_config) as s3:
                await s3.delete_object(Bucket=self.bucket_name, Key=full_key)
        except ClientError as e:
            if e.response["Error"]["Code"] in ("NoSuchKey", "404"):
                return
            raise StorageError(f"Failed to delete object {key}: {e}")
        except BotoCoreError as e:
            raise StorageError(f"Failed to delete object {key}: {e}")

    async def test_connection(self) -> bool:
        """Test S3 connection by checking if bucket exists."""
        try:
            async with self.session.client("s3", **self.s3_config) as s3:
                await s3.head_bucket(Bucket=self.bucket_name)
            return True

        except ClientError as e:
            error_code = e.response["Error"]["Code"]
            if error_code in ("404", "NoSuchBucket"):
                raise StorageConnectionError(f"Bucket not found: {self.bucket_name}")
            elif error_code == "403":
                raise StorageConnectionError(f"Access denied to bucket: {self.bucket_name}")
            return False

        except BotoCoreError:
            return False

"""Storage driver factory."""

from typing import Optional

from aicon.config import Settings, settings as default_settings
from aicon.storage.base import BaseStorageDriver, StorageError
from aicon.storage.local_driver import LocalStorageDriver
from aicon.storage.s3_driver import S3StorageDriver


def get_storage_driver(settings: Optional[Settings] = None) -> BaseStorageDriver:
    """Get the storage driver configured for this deployment.

    Args:
        settings: Settings to read from (defaults to the process settings)

    Returns:
        Configured storage driver instance

    Raises:
        StorageError: If the provider is unknown or misconfigured

    Example:
        >>> driver = get_storage_driver()
        >>> await driver.put_object("sources/abc/original", data, "image/png")
    """
    settings = settings or default_settings
    provider = settings.storage_provider.lower()

    if provider == "local":
        return LocalStorageDriver({"base_path": settings.storage_root})

    elif provider == "s3":
        driver_config = {
            "aws_access_key_id": settings.s3_access_key_id,
            "aws_secret_access_key": settings.s3_secret_access_key,
            "bucket_name": settings.s3_bucket,
            "region": settings.s3_region,
            "endpoint_url": settings.s3_endpoint_url,
            "base_path": settings.s3_base_path,
        }
        # Validate required S3 fields
        required_fields = ["aws_access_key_id", "aws_secret_access_key", "bucket_name"]
        missing = [f for f in required_fields if not driver_config[f]]
        if missing:
            raise StorageError(f"Missing required S3 configuration: {missing}")
        return S3StorageDriver(driver_config)

    else:
        raise StorageError(f"Unsupported storage provider: {provider}")

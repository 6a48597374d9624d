"""Storage configuration for S3-compatible object storage.

Builds the blob store configuration from application settings and validates
it. Supports both MinIO (development) and AWS S3 (production) with the same
interface.
"""

from dataclasses import dataclass
from typing import Optional

from config import Settings, get_settings


@dataclass
class StorageConfig:
    """Configuration for S3-compatible object storage.

    Attributes:
        endpoint_url: S3 endpoint URL (e.g., 'http://localhost:9000' for MinIO,
                      None for AWS S3 which uses default regional endpoints)
        access_key: S3 access key ID
        secret_key: S3 secret access key
        bucket_name: Bucket holding studio media
        region: AWS region (default: 'us-east-1')
        public_base_url: Base URL media links are published under, used to map
                         stored URLs back to keys (optional)
        page_size: Entries requested per listing page
        size_lookup_concurrency: Max concurrent per-file size lookups
    """
    endpoint_url: Optional[str]
    access_key: str
    secret_key: str
    bucket_name: str
    region: str = "us-east-1"
    public_base_url: Optional[str] = None
    page_size: int = 1000
    size_lookup_concurrency: int = 8


def load_storage_config(settings: Optional[Settings] = None) -> StorageConfig:
    """Load storage configuration from application settings.

    Environment Variables (through Settings):
        S3_ENDPOINT_URL: MinIO endpoint URL; empty for AWS S3
        S3_ACCESS_KEY_ID / S3_SECRET_ACCESS_KEY: credentials
        S3_BUCKET_NAME: bucket name
        S3_REGION: AWS region
        S3_PUBLIC_BASE_URL: public URL prefix of stored media
        STORAGE_LIST_PAGE_SIZE / STORAGE_SIZE_LOOKUP_CONCURRENCY: crawl tuning

    Returns:
        StorageConfig: Validated storage configuration

    Raises:
        ValueError: If the configuration is invalid
    """
    settings = settings or get_settings()
    config = StorageConfig(
        endpoint_url=settings.S3_ENDPOINT_URL or None,
        access_key=settings.S3_ACCESS_KEY_ID,
        secret_key=settings.S3_SECRET_ACCESS_KEY,
        bucket_name=settings.S3_BUCKET_NAME,
        region=settings.S3_REGION,
        public_base_url=settings.S3_PUBLIC_BASE_URL,
        page_size=settings.STORAGE_LIST_PAGE_SIZE,
        size_lookup_concurrency=settings.STORAGE_SIZE_LOOKUP_CONCURRENCY,
    )
    validate_storage_config(config)
    return config


def validate_storage_config(config: StorageConfig) -> None:
    """Validate storage configuration.

    Args:
        config: Storage configuration to validate

    Raises:
        ValueError: If configuration is invalid
    """
    if not config.access_key:
        raise ValueError("Storage access_key is required")

    if not config.secret_key:
        raise ValueError("Storage secret_key is required")

    if not config.bucket_name:
        raise ValueError("Storage bucket_name is required")

    if config.endpoint_url:
        # MinIO configuration
        if not config.endpoint_url.startswith(("http://", "https://")):
            raise ValueError(
                f"Invalid endpoint_url: {config.endpoint_url}. "
                "Must start with http:// or https://"
            )
    else:
        # AWS S3 configuration
        if not config.region:
            raise ValueError("AWS region is required when using S3 (S3_ENDPOINT_URL not set)")

    # S3 caps list_objects_v2 pages at 1000 keys
    if not 1 <= config.page_size <= 1000:
        raise ValueError("page_size must be between 1 and 1000")

    if config.size_lookup_concurrency < 1:
        raise ValueError("size_lookup_concurrency must be at least 1")

"""S3-compatible blob store adapter and its configuration"""

from .storage_config import StorageConfig, load_storage_config, validate_storage_config
from .s3_blob_store import S3BlobStore

__all__ = [
    "StorageConfig",
    "load_storage_config",
    "validate_storage_config",
    "S3BlobStore",
]

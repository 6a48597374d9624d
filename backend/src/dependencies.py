"""Global FastAPI dependencies.

This module provides:
- get_blob_store: the process-wide blob store client
- verify_internal_token: guard for internal service endpoints
- get_storage_usage_service: orchestrator bound to the request session

User sessions and tenant resolution live outside this service; callers are
trusted internal services (scheduler, dashboard backend) that present the
shared INTERNAL_API_TOKEN.
"""

import secrets
from functools import lru_cache
from typing import Optional

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.orm import Session

from config import get_settings
from database import get_db
from domain.storage_usage.ports.blob_store_port import BlobStorePort
from infrastructure.storage import S3BlobStore, load_storage_config
from storage_usage.service import StorageUsageService


@lru_cache()
def get_blob_store() -> BlobStorePort:
    """Create the blob store client once per process.

    The same instance is injected into every service; call
    get_blob_store.cache_clear() to rebuild it after a settings change.
    """
    return S3BlobStore.from_config(load_storage_config())


def verify_internal_token(
    x_internal_token: Optional[str] = Header(default=None, alias="X-Internal-Token"),
) -> None:
    """Reject requests without the shared internal token.

    Raises:
        HTTPException 401: If the header is missing or wrong
    """
    expected = get_settings().INTERNAL_API_TOKEN
    if not x_internal_token or not secrets.compare_digest(x_internal_token, expected):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or missing internal token",
        )


def get_storage_usage_service(
    db: Session = Depends(get_db),
    blob_store: BlobStorePort = Depends(get_blob_store),
) -> StorageUsageService:
    return StorageUsageService(db=db, blob_store=blob_store)

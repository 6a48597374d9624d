"""FastAPI router for storage usage endpoints.

Provides internal APIs for:
- Reading the persisted storage snapshot of a studio
- Recomputing it synchronously
- Enqueueing a background recomputation

All endpoints require the X-Internal-Token header.
"""

import asyncio
import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from database import get_db
from dependencies import get_storage_usage_service, verify_internal_token
from models.storage_usage import StudioStorageUsage
from .catalog_reader import CatalogReader
from .exceptions import StudioNotFoundError
from .schemas import StorageSnapshotResponse, StorageUsageReport
from .service import StorageUsageService
from .tasks import recalculate_studio_storage_task

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/storage",
    tags=["storage"],
    dependencies=[Depends(verify_internal_token)],
)


@router.get("/{studio_slug}", response_model=StorageSnapshotResponse)
def get_storage_snapshot(
    studio_slug: str,
    db: Session = Depends(get_db),
) -> StorageSnapshotResponse:
    """Return the persisted snapshot, correct as of last_calculated_at.

    Raises:
        HTTPException 404: Unknown studio, or no snapshot computed yet
    """
    try:
        studio = CatalogReader(db).get_studio(studio_slug)
    except StudioNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))

    snapshot = (
        db.query(StudioStorageUsage)
        .filter(StudioStorageUsage.studio_id == studio.id)
        .first()
    )
    if not snapshot:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"No storage snapshot for studio '{studio_slug}' yet",
        )

    return StorageSnapshotResponse(**snapshot.to_dict())


@router.post("/{studio_slug}/recalculate", response_model=StorageUsageReport)
def recalculate_storage(
    studio_slug: str,
    service: StorageUsageService = Depends(get_storage_usage_service),
) -> StorageUsageReport:
    """Recompute the studio's usage now and return the report.

    Runs in the threadpool on its own event loop: collectors issue blocking
    database queries, which must not stall the server loop.

    Fatal errors are mapped by the application's exception handlers
    (404 unknown studio, 504 deadline exceeded, 500 persistence failure).
    """
    return asyncio.run(service.recompute(studio_slug))


@router.post("/{studio_slug}/recalculate/async", status_code=status.HTTP_202_ACCEPTED)
def enqueue_storage_recalculation(studio_slug: str) -> dict:
    """Enqueue a background recomputation through Celery."""
    result = recalculate_studio_storage_task.delay(studio_slug=studio_slug)
    logger.info(
        "Storage recalculation enqueued",
        extra={"studio_slug": studio_slug}
    )
    return {"status": "enqueued", "task_id": result.id}

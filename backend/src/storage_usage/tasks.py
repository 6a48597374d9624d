"""Celery tasks for storage recalculation.

Tasks:
- recalculate_studio_storage_task: one studio, triggered after uploads/deletes
- recalculate_all_storage_task: nightly sweep over every studio

Both tasks always complete and report failures in the returned dict. The
nightly schedule is configured in celery_app.
"""

import asyncio
import logging
from typing import Any, Dict, Optional

from celery import shared_task

from database import SessionLocal
from .exceptions import StorageAccountingError
from .service import StorageUsageService, recalculate_all_studios

logger = logging.getLogger(__name__)


@shared_task(name="storage.recalculate_studio", bind=True)
def recalculate_studio_storage_task(
    self,
    studio_slug: str,
    timeout_seconds: Optional[float] = None,
) -> Dict[str, Any]:
    """Recompute and persist storage usage for a single studio.

    Safe to retry or run concurrently for the same studio: each run
    overwrites the snapshot with a full recomputation.

    Args:
        studio_slug: Slug of the studio
        timeout_seconds: Deadline override for this run

    Returns:
        Dict with 'status' ('completed' or 'failed') and the report or error
    """
    from dependencies import get_blob_store

    logger.info(
        "Storage recalculation task started",
        extra={"studio_slug": studio_slug}
    )

    db = SessionLocal()
    try:
        service = StorageUsageService(db=db, blob_store=get_blob_store())
        report = asyncio.run(service.recompute(studio_slug, timeout_seconds=timeout_seconds))

        return {
            'status': 'completed',
            **report.model_dump(mode="json"),
        }

    except StorageAccountingError as e:
        return {
            'status': 'failed',
            'studio_slug': studio_slug,
            'error': str(e),
            'error_type': type(e).__name__,
        }

    except Exception as e:
        logger.error(
            "Storage recalculation task crashed",
            exc_info=True,
            extra={"studio_slug": studio_slug, "error": str(e)}
        )
        return {
            'status': 'failed',
            'studio_slug': studio_slug,
            'error': str(e),
            'error_type': type(e).__name__,
        }

    finally:
        db.close()


@shared_task(name="storage.recalculate_all", bind=True)
def recalculate_all_storage_task(self) -> Dict[str, Any]:
    """Recompute storage usage for every studio, one after another."""
    from dependencies import get_blob_store

    db = SessionLocal()
    try:
        stats = asyncio.run(recalculate_all_studios(db, get_blob_store()))
        return {'status': 'completed', **stats}

    except Exception as e:
        logger.error(
            "Storage sweep failed",
            exc_info=True,
            extra={"error": str(e)}
        )
        return {'status': 'failed', 'error': str(e)}

    finally:
        db.close()

#!/usr/bin/env python
"""Recalculate storage usage for one studio or for every studio.

Runs the same recalculation as the internal API, synchronously, and prints
the resulting breakdown. Useful after bulk imports or manual bucket cleanup.

Usage:
    python backend/scripts/recalculate_storage.py foto-lumen
    python backend/scripts/recalculate_storage.py foto-lumen --timeout 60
    python backend/scripts/recalculate_storage.py --all

Environment Variables:
    DATABASE_URL: PostgreSQL connection string
    S3_ENDPOINT_URL, S3_ACCESS_KEY_ID, S3_SECRET_ACCESS_KEY, S3_BUCKET_NAME
"""

import argparse
import asyncio
import sys
from pathlib import Path

# Add backend/src to Python path
backend_src = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(backend_src))

from config import get_settings
from database import SessionLocal
from dependencies import get_blob_store
from observability.logging_config import configure_logging
from storage_usage.exceptions import StorageAccountingError
from storage_usage.service import StorageUsageService, recalculate_all_studios


def format_bytes(size: int) -> str:
    value = float(size)
    for unit in ("B", "KB", "MB"):
        if value < 1024:
            return f"{int(value)} B" if unit == "B" else f"{value:.1f} {unit}"
        value /= 1024
    return f"{value:.1f} GB"


def print_report(report) -> None:
    print(f"SUCCESS: Storage recalculated for {report.studio_slug}")
    print(f"  Total:  {format_bytes(report.total_bytes)} of {format_bytes(report.quota_limit_bytes)}")
    for kind, size in report.per_kind_bytes.items():
        print(f"  {kind:<16} {format_bytes(size):>12}  ({report.per_kind_counts.get(kind, 0)} files)")
    for section in report.sections:
        print(
            f"  section {section.section_name}: {format_bytes(section.subtotal)} "
            f"(categories {format_bytes(section.category_bytes)}, items {format_bytes(section.item_bytes)})"
        )
    for warning in report.warnings:
        print(f"  WARNING: {warning}")


def main():
    parser = argparse.ArgumentParser(description="Recalculate studio storage usage")
    parser.add_argument("studio_slug", nargs="?", help="Slug of the studio to recalculate")
    parser.add_argument("--all", action="store_true", help="Recalculate every studio")
    parser.add_argument("--timeout", type=float, default=None, help="Deadline in seconds")
    parser.add_argument("--verbose", action="store_true", help="Log collector progress")
    args = parser.parse_args()

    if not args.all and not args.studio_slug:
        parser.error("either a studio slug or --all is required")

    settings = get_settings()
    configure_logging(level="DEBUG" if args.verbose else "WARNING", json_format=False)

    session = SessionLocal()
    try:
        if args.all:
            stats = asyncio.run(recalculate_all_studios(session, get_blob_store(), settings=settings))
            print(f"Processed {stats['studios_processed']} studio(s), {stats['studios_failed']} failed")
            for slug, error in stats["failures"].items():
                print(f"  ERROR {slug}: {error}")
            sys.exit(1 if stats["studios_failed"] else 0)

        service = StorageUsageService(session, get_blob_store(), settings=settings)
        report = asyncio.run(service.recompute(args.studio_slug, timeout_seconds=args.timeout))
        print_report(report)

    except StorageAccountingError as e:
        print(f"ERROR: {e}")
        sys.exit(1)

    finally:
        session.close()


if __name__ == "__main__":
    main()

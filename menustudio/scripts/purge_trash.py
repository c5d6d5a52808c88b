"""
Purge Trash Script
Permanently deletes menu photos (rows and stored images) that have been in
the trash longer than the retention period. Intended for a nightly job.

Usage: python -m menustudio.scripts.purge_trash [--days N]
"""

import argparse
import sys

from fastapi import HTTPException
from menustudio.config import settings
from menustudio.database.supabase_client import get_service_supabase
from menustudio.modules.menu_photos.service import MenuPhotoService
import logging

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def main(argv=None):
    parser = argparse.ArgumentParser(description="Purge expired menu photos from the trash")
    parser.add_argument(
        "--days",
        type=int,
        default=settings.trash_retention_days,
        help=f"Retention period in days (default: {settings.trash_retention_days})",
    )
    args = parser.parse_args(argv)

    try:
        service = MenuPhotoService(get_service_supabase())
        logger.info(f"Purging trash older than {args.days} days...")
        purged = service.purge_expired_trash(retention_days=args.days)
        logger.info(f"Purge completed: {purged} photo(s) removed")
        return purged
    except HTTPException as e:
        logger.error(f"Error during purge: {e.detail}")
        sys.exit(1)


if __name__ == "__main__":
    main()

"""
Hard-delete community chat messages older than the retention window.
The API process runs the same purge on a timer; use this from cron when that is disabled
or to purge with a different window.

Run from project root: python -m scripts.purge_expired_messages
Window: MESSAGE_RETENTION_DAYS env var (default 7), or RETENTION_DAYS to override for one run.
"""
import logging
import os
import sys

# Add project root so app imports work
sys.path.insert(0, ".")

from sqlalchemy.exc import SQLAlchemyError

from app.chat.retention import purge_expired_messages
from app.core.config import settings

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

RETENTION_DAYS = os.environ.get("RETENTION_DAYS") or settings.MESSAGE_RETENTION_DAYS


def run_purge() -> None:
    try:
        days = int(RETENTION_DAYS)
    except ValueError:
        logger.error("RETENTION_DAYS must be an integer.")
        sys.exit(1)
    if days < 1:
        logger.error("RETENTION_DAYS must be at least 1.")
        sys.exit(1)

    try:
        count = purge_expired_messages(days)
    except SQLAlchemyError as e:
        logger.error("Purge failed: %s", e)
        sys.exit(1)
    if count == 0:
        logger.info("No messages older than %s days.", days)


if __name__ == "__main__":
    run_purge()

"""
Message retention: community messages are hard-deleted once older than the retention window.
"""
import asyncio
import logging
from sqlalchemy.exc import SQLAlchemyError

from app.core.database import SessionLocal
from app.crud import chat_message_crud

logger = logging.getLogger(__name__)


def purge_expired_messages(retention_days: int) -> int:
    db = SessionLocal()
    try:
        count = chat_message_crud.purge_expired(db, retention_days=retention_days)
    except SQLAlchemyError:
        db.rollback()
        raise
    finally:
        db.close()
    if count:
        logger.info("Purged %s chat messages older than %s days", count, retention_days)
    return count


async def retention_sweeper(interval_seconds: int, retention_days: int) -> None:
    """Run forever (until cancelled), purging on every interval. A failed sweep waits for the next one."""
    while True:
        await asyncio.sleep(interval_seconds)
        try:
            purge_expired_messages(retention_days)
        except SQLAlchemyError as e:
            logger.exception("Retention sweep failed: %s", e)

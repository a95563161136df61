"""
SyncStatusDb: the durable home of the single SyncServiceStatus row.

The row is keyed by a fixed id, so upsert_status() is create-or-replace:
the first run inserts it, every later run overwrites it in place.
"""
import logging

from sqlmodel import Session

from p2g.models.sync import STATUS_ROW_ID, SyncServiceStatus

logger = logging.getLogger(__name__)


class SyncStatusDb:
    def __init__(self, engine):
        """
        Args:
            engine: SQLAlchemy engine (SQLModel create_engine result).
        """
        self.engine = engine

    async def get_status(self) -> SyncServiceStatus:
        """Return the stored status, or a fresh default if none exists yet."""
        with Session(self.engine) as s:
            status = s.get(SyncServiceStatus, STATUS_ROW_ID)
            if status is None:
                return SyncServiceStatus()
            s.expunge(status)
            return status

    async def upsert_status(self, status: SyncServiceStatus) -> SyncServiceStatus:
        """Create the status row if absent, otherwise replace it."""
        status.id = STATUS_ROW_ID
        with Session(self.engine) as s:
            merged = s.merge(status)
            s.commit()
            s.refresh(merged)
            s.expunge(merged)
        logger.debug("Sync status stored: %s", merged.sync_status)
        return merged

"""Sync status (persisted) and per-run sync response models."""
from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field as PydanticField
from sqlmodel import Field, SQLModel

STATUS_ROW_ID = 1


class SyncState(str, Enum):
    NOT_RUN = "not_run"
    SUCCESS = "success"
    FAILED = "failed"


class SyncServiceStatus(SQLModel, table=True):
    """The durable record of the most recent sync run. Always a single row."""

    id: int = Field(default=STATUS_ROW_ID, primary_key=True)
    sync_status: SyncState = SyncState.NOT_RUN
    last_sync_time: Optional[datetime] = None
    last_successful_sync_time: Optional[datetime] = None
    last_cursor: Optional[int] = None  # the `since` value of the last run
    workouts_synced: int = 0
    last_error: Optional[str] = None


class SyncResponse(BaseModel):
    """What one sync run reports back to its caller."""

    source_download_success: bool = False
    conversion_success: bool = False
    destination_upload_success: bool = False
    sync_success: bool = False
    errors: List[str] = PydanticField(default_factory=list)

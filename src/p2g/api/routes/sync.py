"""Sync trigger and status routes."""
from datetime import datetime
from typing import AsyncIterator, List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlmodel import Session

from p2g.config import get_settings
from p2g.db.engine import get_engine, get_session
from p2g.models.sync import STATUS_ROW_ID, SyncResponse, SyncServiceStatus, SyncState
from p2g.sync.factory import open_sync_service
from p2g.sync.service import SyncService

router = APIRouter()


class SyncRequest(BaseModel):
    since: Optional[int] = None  # If None, uses PELOTON_NUM_WORKOUTS


class SyncStatusResponse(BaseModel):
    status: SyncState
    last_sync_time: Optional[datetime]
    last_successful_sync_time: Optional[datetime]
    last_cursor: Optional[int]
    workouts_synced: int
    last_error: Optional[str]


async def get_sync_service() -> AsyncIterator[SyncService]:
    """FastAPI dependency that yields a fully wired SyncService."""
    async with open_sync_service(engine=get_engine()) as service:
        yield service


@router.post("", response_model=SyncResponse)
async def trigger_sync(
    request: SyncRequest,
    service: SyncService = Depends(get_sync_service),
) -> SyncResponse:
    """Run a sync now and return its outcome. Stage failures still return 200."""
    since = request.since if request.since is not None else get_settings().peloton_num_workouts
    return await service.sync(since)


@router.get("/status", response_model=SyncStatusResponse)
def sync_status(session: Session = Depends(get_session)):
    """Return the status recorded by the most recent sync run."""
    status = session.get(SyncServiceStatus, STATUS_ROW_ID) or SyncServiceStatus()
    return SyncStatusResponse(
        status=status.sync_status,
        last_sync_time=status.last_sync_time,
        last_successful_sync_time=status.last_successful_sync_time,
        last_cursor=status.last_cursor,
        workouts_synced=status.workouts_synced,
        last_error=status.last_error,
    )

"""
SyncService: orchestrates one Peloton → Garmin sync run.

Flow:
  1. Load Settings and the previous SyncServiceStatus (errors here propagate)
  2. Check GitHub for a newer release, only if check_for_updates is on
  3. List recent Peloton workouts, keep only COMPLETE ones
  4. Fetch details for the eligible workouts
  5. Convert each workout (first failure aborts the batch)
  6. Upload the staged files to Garmin
  7. Clean up the download, working and upload directories (best-effort)
  8. Upsert SyncServiceStatus

Any stage failure stops the run: the matching flag stays False, one error
is recorded and the status is upserted before returning. Stage errors never
escape sync(); the caller always gets a SyncResponse back.

The status row is written exactly once per run, at the end, so a crash
mid-run leaves the previous run's status untouched.
"""
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Awaitable, Callable, List, Optional

from p2g.config import Settings
from p2g.models.sync import SyncResponse, SyncServiceStatus, SyncState
from p2g.models.workout import ConversionResult, Workout
from p2g.sync.protocols import (
    ActivityUploader,
    FileCleaner,
    ReleaseChecker,
    SettingsProvider,
    StatusStore,
    WorkoutConverter,
    WorkoutSource,
)

logger = logging.getLogger(__name__)


@dataclass
class StageResult:
    """Outcome of one collaborator call: a value, or the error that stopped it."""

    value: Any = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


async def run_stage(stage: str, call: Callable[[], Awaitable[Any]]) -> StageResult:
    """Await `call` and fold any exception into a failed StageResult."""
    try:
        return StageResult(value=await call())
    except Exception as exc:
        logger.error("%s failed: %s", stage, exc, exc_info=True)
        return StageResult(error=f"{stage} failed: {exc}")


def eligible_workouts(workouts: List[Workout]) -> List[Workout]:
    """Only completed workouts are synced; in-progress ones are left for a later run."""
    eligible = [w for w in workouts if w.is_complete]
    skipped = len(workouts) - len(eligible)
    if skipped:
        logger.info("Skipping %d workout(s) that are not complete", skipped)
    return eligible


class SyncService:
    """Runs the download → convert → upload pipeline and records its outcome."""

    def __init__(
        self,
        settings_service: SettingsProvider,
        status_db: StatusStore,
        peloton: WorkoutSource,
        converter: WorkoutConverter,
        garmin: ActivityUploader,
        file_handler: FileCleaner,
        release_checker: ReleaseChecker,
    ):
        self.settings_service = settings_service
        self.status_db = status_db
        self.peloton = peloton
        self.converter = converter
        self.garmin = garmin
        self.file_handler = file_handler
        self.release_checker = release_checker

    async def sync(self, since: int) -> SyncResponse:
        """
        Run one sync.

        Args:
            since: Cursor handed verbatim to the Peloton listing call
                (the number of recent workouts to look at).

        Returns:
            SyncResponse with one flag per stage. sync_success is True only if
            every stage succeeded; otherwise errors holds exactly one message.

        Raises:
            Whatever loading Settings or the previous status raises.
        """
        settings = await self.settings_service.get_settings()
        status = await self.status_db.get_status()
        response = SyncResponse()

        if settings.check_for_updates:
            await self._check_for_updates()

        logger.info("Sync starting (since=%s)", since)

        # ── Download ──────────────────────────────────────────────────────────
        listed = await run_stage("Peloton download", lambda: self.peloton.list_recent(since))
        if not listed.ok:
            return await self._fail(response, status, listed.error)

        workouts = eligible_workouts(listed.value or [])
        details = []
        if workouts:
            fetched = await run_stage(
                "Peloton workout detail download",
                lambda: self.peloton.fetch_details(workouts),
            )
            if not fetched.ok:
                return await self._fail(response, status, fetched.error)
            details = fetched.value or []
        response.source_download_success = True

        # ── Convert ───────────────────────────────────────────────────────────
        for detail in details:
            converted = await run_stage(
                "Conversion",
                lambda: self.converter.convert(detail, settings.format),
            )
            if converted.ok and converted.value is not None \
                    and converted.value.result == ConversionResult.FAILED:
                converted = StageResult(
                    error=f"Conversion failed: {converted.value.error_message or 'unknown error'}"
                )
            if not converted.ok:
                return await self._fail(response, status, converted.error)
        response.conversion_success = True

        # ── Upload ────────────────────────────────────────────────────────────
        if workouts:
            uploaded = await run_stage("Garmin upload", self.garmin.upload)
            if not uploaded.ok:
                return await self._fail(response, status, uploaded.error)
        response.destination_upload_success = True

        # ── Cleanup ───────────────────────────────────────────────────────────
        self._cleanup(settings)

        response.sync_success = True
        status.sync_status = SyncState.SUCCESS
        status.last_sync_time = datetime.utcnow()
        status.last_successful_sync_time = status.last_sync_time
        status.last_cursor = since
        status.workouts_synced = len(details)
        status.last_error = None
        await self.status_db.upsert_status(status)

        logger.info("Sync finished: %d workout(s) synced", len(details))
        return response

    async def _fail(
        self, response: SyncResponse, status: SyncServiceStatus, error: str
    ) -> SyncResponse:
        response.sync_success = False
        response.errors.append(error)

        status.sync_status = SyncState.FAILED
        status.last_sync_time = datetime.utcnow()
        status.workouts_synced = 0
        status.last_error = error
        await self.status_db.upsert_status(status)
        return response

    async def _check_for_updates(self) -> None:
        try:
            release = await self.release_checker.get_latest_release()
        except Exception as exc:
            logger.warning("Update check failed: %s", exc)
            return
        logger.debug("Latest release: %s", release)

    def _cleanup(self, settings: Settings) -> None:
        for path in (
            settings.download_directory,
            settings.working_directory,
            settings.upload_directory,
        ):
            try:
                self.file_handler.cleanup(path)
            except Exception as exc:
                logger.warning("Cleanup of %s failed: %s", path, exc)

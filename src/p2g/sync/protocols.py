"""Capabilities SyncService depends on. Anything matching these can be injected."""
from pathlib import Path
from typing import Any, List, Protocol

from p2g.config import FormatSettings, Settings
from p2g.models.sync import SyncServiceStatus
from p2g.models.workout import ConvertStatus, P2GWorkout, Workout


class SettingsProvider(Protocol):
    async def get_settings(self) -> Settings: ...


class StatusStore(Protocol):
    async def get_status(self) -> SyncServiceStatus: ...

    async def upsert_status(self, status: SyncServiceStatus) -> Any: ...


class WorkoutSource(Protocol):
    async def list_recent(self, since: int) -> List[Workout]: ...

    async def fetch_details(self, workouts: List[Workout]) -> List[P2GWorkout]: ...


class WorkoutConverter(Protocol):
    async def convert(self, workout: P2GWorkout, formats: FormatSettings) -> ConvertStatus: ...


class ActivityUploader(Protocol):
    async def upload(self) -> Any: ...


class FileCleaner(Protocol):
    def cleanup(self, path: Path) -> None: ...


class ReleaseChecker(Protocol):
    async def get_latest_release(self) -> Any: ...

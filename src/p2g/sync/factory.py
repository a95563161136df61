"""Wires the real collaborators into a SyncService."""
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from p2g.config import Settings, SettingsService
from p2g.conversion.converter import Converter
from p2g.db.engine import get_engine
from p2g.db.status_store import SyncStatusDb
from p2g.files import FileHandler
from p2g.garmin.auth import GarminAuth
from p2g.garmin.uploader import GarminUploader
from p2g.github.release import GitHubReleaseChecker
from p2g.peloton.client import PelotonClient
from p2g.sync.service import SyncService


@asynccontextmanager
async def open_sync_service(
    engine=None, settings: Optional[Settings] = None
) -> AsyncIterator[SyncService]:
    """
    Yield a SyncService backed by Peloton, Garmin, GitHub and the DB.

    The service reads the same Settings snapshot the collaborators were
    built from. The Peloton HTTP client is closed when the context exits.
    """
    settings = settings or Settings()
    engine = engine or get_engine()

    peloton = PelotonClient(
        settings.peloton_email,
        settings.peloton_password,
        download_dir=settings.download_directory,
    )
    try:
        yield SyncService(
            settings_service=SettingsService(settings),
            status_db=SyncStatusDb(engine),
            peloton=peloton,
            converter=Converter(settings.working_directory, settings.upload_directory),
            garmin=GarminUploader(
                settings.upload_directory,
                enabled=settings.garmin_upload,
                auth=GarminAuth(settings.garmin_tokens_dir),
            ),
            file_handler=FileHandler(),
            release_checker=GitHubReleaseChecker(settings.github_repo),
        )
    finally:
        await peloton.aclose()

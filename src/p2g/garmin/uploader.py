"""
Uploads every staged activity file to Garmin Connect.

garminconnect is synchronous; calls run in the default thread pool executor
so they don't block the asyncio event loop.
"""
import asyncio
import logging
from pathlib import Path
from typing import List, Optional

from p2g.errors import GarminUploadError
from p2g.garmin.auth import GarminAuth

logger = logging.getLogger(__name__)

UPLOADABLE_SUFFIXES = {".fit", ".tcx", ".gpx"}


class GarminUploader:
    def __init__(self, upload_dir: Path, enabled: bool = True, auth: Optional[GarminAuth] = None):
        """
        Args:
            upload_dir: Directory the converter stages files into.
            enabled: When False, upload() does nothing (GARMIN_UPLOAD=false).
            auth: GarminAuth instance. Defaults to GarminAuth().
        """
        self.upload_dir = Path(upload_dir)
        self.enabled = enabled
        self._auth = auth or GarminAuth()

    def pending_files(self) -> List[Path]:
        if not self.upload_dir.is_dir():
            return []
        return sorted(
            p for p in self.upload_dir.iterdir()
            if p.is_file() and p.suffix.lower() in UPLOADABLE_SUFFIXES
        )

    async def upload(self) -> List[Path]:
        """
        Upload all staged files. Returns the files that were uploaded.

        Raises:
            GarminUploadError: if authentication or any single upload fails.
        """
        if not self.enabled:
            logger.info("Garmin upload disabled; leaving files in %s", self.upload_dir)
            return []

        files = self.pending_files()
        if not files:
            logger.info("Nothing to upload to Garmin")
            return []

        loop = asyncio.get_event_loop()
        try:
            api = await loop.run_in_executor(None, self._auth.build_client)
        except Exception as exc:
            raise GarminUploadError(f"Garmin authentication failed: {exc}") from exc

        for path in files:
            try:
                await loop.run_in_executor(None, api.upload_activity, str(path))
            except Exception as exc:
                raise GarminUploadError(f"Failed to upload {path.name}: {exc}") from exc
            logger.info("Uploaded %s to Garmin", path.name)

        return files

"""Best-effort removal of the pipeline's staging directories."""
import logging
import shutil
from pathlib import Path

logger = logging.getLogger(__name__)


class FileHandler:
    def cleanup(self, path: Path) -> None:
        """Remove `path` and everything under it. Failures are logged, not raised."""
        path = Path(path)
        try:
            if not path.exists():
                return
            if path.is_dir():
                shutil.rmtree(path)
            else:
                path.unlink()
        except OSError as exc:
            logger.warning("Could not clean up %s: %s", path, exc)
            return
        logger.debug("Cleaned up %s", path)

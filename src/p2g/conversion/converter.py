"""
Converter: turns one P2GWorkout into output files.

Flow for a single workout:
  1. For each enabled, supported format, write a file into the working dir
  2. Move every written file into the upload dir, where the uploader finds it

FIT output is a binary codec this project does not implement; enabling it
only logs a warning. A workout with nothing to write comes back SKIPPED.
"""
import json
import logging
import re
import shutil
from pathlib import Path
from typing import List

from p2g.config import FormatSettings
from p2g.conversion.tcx import write_tcx
from p2g.errors import ConversionError
from p2g.models.workout import ConversionResult, ConvertStatus, P2GWorkout

logger = logging.getLogger(__name__)


class Converter:
    def __init__(self, working_dir: Path, upload_dir: Path):
        self.working_dir = Path(working_dir)
        self.upload_dir = Path(upload_dir)

    async def convert(self, workout: P2GWorkout, formats: FormatSettings) -> ConvertStatus:
        """
        Write the enabled formats for one workout and stage them for upload.

        Raises:
            ConversionError: if the workout has no id or a file cannot be written.
        """
        if not workout.workout_id:
            raise ConversionError("Workout has no id; cannot name output files")

        if formats.fit:
            logger.warning("FIT output is not supported; skipping FIT for %s", workout.workout_id)

        self.working_dir.mkdir(parents=True, exist_ok=True)
        stem = _file_stem(workout)
        written: List[Path] = []

        try:
            if formats.raw_json:
                path = self.working_dir / f"{stem}.json"
                path.write_text(json.dumps(workout.model_dump(), indent=2))
                written.append(path)
            if formats.tcx:
                written.append(write_tcx(workout, self.working_dir / f"{stem}.tcx"))
        except (OSError, TypeError, ValueError) as exc:
            raise ConversionError(f"Failed to convert workout {workout.workout_id}: {exc}") from exc

        if not written:
            logger.info("No supported output formats enabled for %s", workout.workout_id)
            return ConvertStatus(result=ConversionResult.SKIPPED)

        staged = self._stage_for_upload(written)
        logger.info("Converted workout %s into %d file(s)", workout.workout_id, len(staged))
        return ConvertStatus(result=ConversionResult.SUCCESS, files=staged)

    def _stage_for_upload(self, paths: List[Path]) -> List[Path]:
        self.upload_dir.mkdir(parents=True, exist_ok=True)
        staged = []
        for path in paths:
            target = self.upload_dir / path.name
            try:
                shutil.move(str(path), str(target))
            except OSError as exc:
                raise ConversionError(f"Failed to stage {path.name} for upload: {exc}") from exc
            staged.append(target)
        return staged


def _file_stem(workout: P2GWorkout) -> str:
    """'<date>_<title>-<id>' with anything unsafe in a file name replaced."""
    title = re.sub(r"[^A-Za-z0-9]+", "_", workout.title).strip("_")
    return f"{workout.start_time:%Y-%m-%d}_{title}-{workout.workout_id}"

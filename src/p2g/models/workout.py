"""Workout models: Peloton listing rows, detailed workouts, conversion results."""
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

COMPLETE = "COMPLETE"


class Workout(BaseModel):
    """One row from the Peloton recent-workouts listing."""

    id: str
    status: str  # "COMPLETE", "IN PROGRESS", ...
    name: Optional[str] = None
    fitness_discipline: Optional[str] = None
    created_at: Optional[int] = None  # epoch seconds

    class Config:
        frozen = True

    @property
    def is_complete(self) -> bool:
        return self.status == COMPLETE


class P2GWorkout(BaseModel):
    """
    Everything the converter needs for one workout.

    Holds the raw Peloton payloads untouched; the properties below pull out
    the handful of values the output formats care about.
    """

    workout: Dict[str, Any] = Field(default_factory=dict)
    samples: Dict[str, Any] = Field(default_factory=dict)
    user_data: Dict[str, Any] = Field(default_factory=dict)

    @property
    def workout_id(self) -> str:
        return str(self.workout.get("id", ""))

    @property
    def title(self) -> str:
        ride = self.workout.get("ride") or {}
        return ride.get("title") or self.workout.get("name") or "Peloton Workout"

    @property
    def fitness_discipline(self) -> str:
        return self.workout.get("fitness_discipline") or "cycling"

    @property
    def start_time(self) -> datetime:
        ts = self.workout.get("start_time") or self.workout.get("created_at") or 0
        return datetime.fromtimestamp(int(ts), tz=timezone.utc)

    @property
    def duration_seconds(self) -> float:
        start = self.workout.get("start_time")
        end = self.workout.get("end_time")
        if start and end:
            return float(end - start)
        seconds = self.samples.get("seconds_since_pedaling_start") or []
        return float(seconds[-1]) if seconds else 0.0

    @property
    def distance_meters(self) -> float:
        summary = self._summary("distance")
        if not summary or summary.get("value") is None:
            return 0.0
        value = float(summary["value"])
        unit = (summary.get("display_unit") or "").lower()
        if unit == "mi":
            return value * 1609.344
        if unit == "km":
            return value * 1000.0
        return value

    @property
    def calories(self) -> int:
        summary = self._summary("calories")
        if summary and summary.get("value") is not None:
            return int(round(float(summary["value"])))
        return 0

    @property
    def elapsed_seconds_series(self) -> List[int]:
        return list(self.samples.get("seconds_since_pedaling_start") or [])

    @property
    def heart_rate_series(self) -> List[Optional[float]]:
        return self._metric_values("heart_rate")

    @property
    def cadence_series(self) -> List[Optional[float]]:
        return self._metric_values("cadence")

    def _summary(self, slug: str) -> Optional[Dict[str, Any]]:
        for summary in self.samples.get("summaries") or []:
            if summary.get("slug") == slug:
                return summary
        return None

    def _metric_values(self, slug: str) -> List[Optional[float]]:
        for metric in self.samples.get("metrics") or []:
            if metric.get("slug") == slug:
                return list(metric.get("values") or [])
        return []


class ConversionResult(str, Enum):
    SUCCESS = "success"
    FAILED = "failed"
    SKIPPED = "skipped"


class ConvertStatus(BaseModel):
    """Outcome of converting one P2GWorkout."""

    result: ConversionResult = ConversionResult.SUCCESS
    files: List[Path] = Field(default_factory=list)
    error_message: Optional[str] = None

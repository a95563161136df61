"""
Build a Garmin Training Center (TCX) document from a P2GWorkout.

Peloton workouts carry no GPS, so the output is a single lap with a
per-second track of heart rate and cadence.
"""
import xml.etree.ElementTree as ET
from datetime import timedelta
from pathlib import Path
from typing import Optional

from p2g.models.workout import P2GWorkout

TCX_NS = "http://www.garmin.com/xmlschemas/TrainingCenterDatabase/v2"
TIME_FORMAT = "%Y-%m-%dT%H:%M:%SZ"

# Peloton fitness_discipline → TCX Sport attribute (Running / Biking / Other)
SPORT_BY_DISCIPLINE = {
    "cycling": "Biking",
    "bike_bootcamp": "Biking",
    "running": "Running",
    "walking": "Running",
}


def build_tcx(workout: P2GWorkout) -> ET.ElementTree:
    ET.register_namespace("", TCX_NS)
    root = ET.Element(_tag("TrainingCenterDatabase"))
    activities = ET.SubElement(root, _tag("Activities"))
    activity = ET.SubElement(
        activities,
        _tag("Activity"),
        Sport=SPORT_BY_DISCIPLINE.get(workout.fitness_discipline, "Other"),
    )

    start = workout.start_time
    ET.SubElement(activity, _tag("Id")).text = start.strftime(TIME_FORMAT)

    lap = ET.SubElement(activity, _tag("Lap"), StartTime=start.strftime(TIME_FORMAT))
    ET.SubElement(lap, _tag("TotalTimeSeconds")).text = f"{workout.duration_seconds:.1f}"
    ET.SubElement(lap, _tag("DistanceMeters")).text = f"{workout.distance_meters:.1f}"
    ET.SubElement(lap, _tag("Calories")).text = str(workout.calories)

    hr = [v for v in workout.heart_rate_series if v]
    if hr:
        _value(lap, "AverageHeartRateBpm", round(sum(hr) / len(hr)))
        _value(lap, "MaximumHeartRateBpm", round(max(hr)))

    ET.SubElement(lap, _tag("Intensity")).text = "Active"
    ET.SubElement(lap, _tag("TriggerMethod")).text = "Manual"

    track = ET.SubElement(lap, _tag("Track"))
    hr_series = workout.heart_rate_series
    cadence_series = workout.cadence_series
    for i, elapsed in enumerate(workout.elapsed_seconds_series):
        point = ET.SubElement(track, _tag("Trackpoint"))
        ts = start + timedelta(seconds=int(elapsed))
        ET.SubElement(point, _tag("Time")).text = ts.strftime(TIME_FORMAT)
        heart_rate = _at(hr_series, i)
        if heart_rate:
            _value(point, "HeartRateBpm", round(heart_rate))
        cadence = _at(cadence_series, i)
        if cadence is not None:
            ET.SubElement(point, _tag("Cadence")).text = str(round(cadence))

    ET.SubElement(activity, _tag("Notes")).text = workout.title
    return ET.ElementTree(root)


def write_tcx(workout: P2GWorkout, path: Path) -> Path:
    """Serialize the workout as TCX to `path` and return it."""
    tree = build_tcx(workout)
    ET.indent(tree)
    tree.write(path, encoding="UTF-8", xml_declaration=True)
    return path


def _tag(name: str) -> str:
    return f"{{{TCX_NS}}}{name}"


def _value(parent: ET.Element, name: str, value: int) -> None:
    wrapper = ET.SubElement(parent, _tag(name))
    ET.SubElement(wrapper, _tag("Value")).text = str(value)


def _at(series, i: int) -> Optional[float]:
    return series[i] if i < len(series) else None

"""Shared test fixtures."""
from typing import Generator

import pytest
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

# Import all models so SQLModel.metadata knows about them
from p2g.models.sync import SyncServiceStatus  # noqa: F401
from p2g.models.workout import P2GWorkout


@pytest.fixture(name="engine")
def engine_fixture():
    """In-memory SQLite engine. Tables recreated fresh for each test."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)


@pytest.fixture(name="test_session")
def test_session_fixture(engine) -> Generator[Session, None, None]:
    """Provides a DB session connected to in-memory SQLite."""
    with Session(engine) as session:
        yield session


@pytest.fixture(name="cycling_workout")
def cycling_workout_fixture() -> P2GWorkout:
    """A 5-second Peloton ride with heart rate and cadence samples."""
    return P2GWorkout(
        workout={
            "id": "abc123",
            "status": "COMPLETE",
            "fitness_discipline": "cycling",
            "start_time": 1736926200,  # 2025-01-15 07:30:00 UTC
            "end_time": 1736928000,
            "ride": {"title": "30 min Pop Ride"},
        },
        samples={
            "seconds_since_pedaling_start": [0, 1, 2, 3, 4],
            "metrics": [
                {"slug": "heart_rate", "values": [120, 125, 130, 135, 140]},
                {"slug": "cadence", "values": [80, 82, 85, 88, 90]},
            ],
            "summaries": [
                {"slug": "distance", "value": 9.5, "display_unit": "mi"},
                {"slug": "calories", "value": 412.4, "display_unit": "kcal"},
            ],
        },
        user_data={"id": "user-1", "weight": 160},
    )

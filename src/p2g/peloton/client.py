"""
Async Peloton API client built on httpx.

Authentication happens lazily on the first data call: the email/password
from Settings are exchanged for a session cookie, which httpx keeps for the
lifetime of the client.

Every transport, HTTP-status or payload problem is re-raised as
PelotonDownloadError so the sync pipeline only has one error type to map.
"""
import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

import httpx

from p2g.errors import PelotonDownloadError
from p2g.models.workout import P2GWorkout, Workout

logger = logging.getLogger(__name__)

BASE_URL = "https://api.onepeloton.com"
PAGE_SIZE = 25
DEFAULT_TIMEOUT = 30.0


class PelotonClient:
    """
    Lists recent workouts and fetches their details.

    Call aclose() (or use `async with`) when done to release the connection pool.
    """

    def __init__(
        self,
        email: str,
        password: str,
        download_dir: Optional[Path] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Args:
            email: Peloton account email or username.
            password: Peloton account password.
            download_dir: If given, raw JSON for each fetched workout is staged here.
            transport: Optional httpx transport (tests pass httpx.MockTransport).
        """
        self._email = email
        self._password = password
        self._download_dir = Path(download_dir) if download_dir else None
        self._http = httpx.AsyncClient(
            base_url=BASE_URL,
            timeout=DEFAULT_TIMEOUT,
            transport=transport,
            headers={"Peloton-Platform": "web"},
        )
        self._user_id: Optional[str] = None

    async def __aenter__(self) -> "PelotonClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    # ── Public API ────────────────────────────────────────────────────────────

    async def list_recent(self, since: int) -> List[Workout]:
        """
        Return the `since` most recent workouts, newest first.

        Args:
            since: Number of workouts to look back over.

        Raises:
            PelotonDownloadError: on any transport or payload problem.
        """
        user_id = await self._ensure_logged_in()
        workouts: List[Workout] = []
        page = 0

        while len(workouts) < since:
            body = await self._get_json(
                f"/api/user/{user_id}/workouts",
                params={
                    "sort_by": "-created",
                    "page": page,
                    "limit": PAGE_SIZE,
                },
            )
            rows = body.get("data") or []
            if not rows:
                break
            for row in rows:
                workouts.append(_parse_workout(row))

            page += 1
            if page >= int(body.get("page_count") or 0):
                break

        logger.info("Listed %d recent Peloton workouts", len(workouts))
        return workouts[:since]

    async def fetch_details(self, workouts: List[Workout]) -> List[P2GWorkout]:
        """
        Fetch the detail and performance-graph payloads for each workout.

        Raises:
            PelotonDownloadError: on any transport or payload problem.
        """
        await self._ensure_logged_in()
        user_data = await self._get_json("/api/me")

        details: List[P2GWorkout] = []
        for workout in workouts:
            detail = await self._get_json(
                f"/api/workout/{workout.id}", params={"joins": "ride,ride.instructor"}
            )
            samples = await self._get_json(
                f"/api/workout/{workout.id}/performance_graph", params={"every_n": 1}
            )
            p2g_workout = P2GWorkout(workout=detail, samples=samples, user_data=user_data)
            self._stage_raw(p2g_workout)
            details.append(p2g_workout)

        logger.info("Fetched details for %d Peloton workouts", len(details))
        return details

    # ── Internal helpers ──────────────────────────────────────────────────────

    async def _ensure_logged_in(self) -> str:
        if self._user_id is not None:
            return self._user_id
        if not self._email or not self._password:
            raise PelotonDownloadError(
                "Peloton credentials are not configured. "
                "Set PELOTON_EMAIL and PELOTON_PASSWORD."
            )

        try:
            resp = await self._http.post(
                "/auth/login",
                json={"username_or_email": self._email, "password": self._password},
            )
            resp.raise_for_status()
            body = resp.json()
        except (httpx.HTTPError, ValueError) as exc:
            raise PelotonDownloadError(f"Peloton login failed: {exc}") from exc

        if not isinstance(body, dict):
            raise PelotonDownloadError("Peloton login returned an unexpected payload")
        user_id = body.get("user_id")
        if not user_id:
            raise PelotonDownloadError("Peloton login response had no user_id")

        session_id = body.get("session_id")
        if session_id:
            self._http.cookies.set("peloton_session_id", session_id)
        self._user_id = str(user_id)
        return self._user_id

    async def _get_json(self, path: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        try:
            resp = await self._http.get(path, params=params)
            resp.raise_for_status()
            body = resp.json()
        except (httpx.HTTPError, ValueError) as exc:
            raise PelotonDownloadError(f"GET {path} failed: {exc}") from exc

        if not isinstance(body, dict):
            raise PelotonDownloadError(f"GET {path} returned an unexpected payload")
        return body

    def _stage_raw(self, workout: P2GWorkout) -> None:
        """Write the raw payloads to the download directory."""
        if self._download_dir is None:
            return
        self._download_dir.mkdir(parents=True, exist_ok=True)
        path = self._download_dir / f"{workout.workout_id}_workout.json"
        path.write_text(json.dumps(workout.model_dump(), indent=2))


def _parse_workout(row: Dict[str, Any]) -> Workout:
    if not isinstance(row, dict):
        raise PelotonDownloadError(f"Workout row is not an object: {row!r}")
    try:
        return Workout(
            id=str(row["id"]),
            status=str(row.get("status", "")),
            name=row.get("name"),
            fitness_discipline=row.get("fitness_discipline"),
            created_at=row.get("created_at"),
        )
    except KeyError as exc:
        raise PelotonDownloadError(f"Workout row is missing {exc}") from exc

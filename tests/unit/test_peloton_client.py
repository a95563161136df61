"""
Tests for PelotonClient.

A fake Peloton API is served through httpx.MockTransport; no real network
calls are made.
"""
import json

import httpx
import pytest

from p2g.errors import PelotonDownloadError
from p2g.models.workout import Workout
from p2g.peloton.client import PelotonClient


# ─── Fake Peloton API ─────────────────────────────────────────────────────────

def make_rows(count: int, status: str = "COMPLETE"):
    return [{"id": f"w{i}", "status": status, "name": f"Ride {i}"} for i in range(count)]


class FakePeloton:
    """Routes requests the way api.onepeloton.com would, and records them."""

    def __init__(self, rows=None, login_status=200, detail_status=200, login_body=None):
        self.rows = rows if rows is not None else make_rows(3)
        self.login_status = login_status
        self.detail_status = detail_status
        self.login_body = login_body
        self.requests = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path

        if path == "/auth/login":
            if self.login_status != 200:
                return httpx.Response(self.login_status, json={"message": "bad credentials"})
            if self.login_body is not None:
                return httpx.Response(200, json=self.login_body)
            return httpx.Response(200, json={"user_id": "user-1", "session_id": "sess-1"})

        if path == "/api/user/user-1/workouts":
            page = int(request.url.params["page"])
            limit = int(request.url.params["limit"])
            chunk = self.rows[page * limit:(page + 1) * limit]
            page_count = max(1, -(-len(self.rows) // limit))
            return httpx.Response(200, json={"data": chunk, "page_count": page_count})

        if path == "/api/me":
            return httpx.Response(200, json={"id": "user-1", "weight": 160})

        if path.startswith("/api/workout/"):
            if self.detail_status != 200:
                return httpx.Response(self.detail_status)
            workout_id = path.split("/")[3]
            if path.endswith("/performance_graph"):
                return httpx.Response(200, json={"seconds_since_pedaling_start": [0, 1]})
            return httpx.Response(200, json={"id": workout_id, "status": "COMPLETE"})

        return httpx.Response(404)

    def paths(self):
        return [r.url.path for r in self.requests]


def make_client(fake: FakePeloton, download_dir=None, email="rider@example.com"):
    return PelotonClient(
        email,
        "hunter2",
        download_dir=download_dir,
        transport=httpx.MockTransport(fake.handler),
    )


# ─── list_recent ──────────────────────────────────────────────────────────────

class TestListRecent:
    @pytest.mark.asyncio
    async def test_returns_workouts(self):
        fake = FakePeloton()
        async with make_client(fake) as client:
            workouts = await client.list_recent(3)

        assert [w.id for w in workouts] == ["w0", "w1", "w2"]
        assert all(isinstance(w, Workout) for w in workouts)

    @pytest.mark.asyncio
    async def test_logs_in_once(self):
        fake = FakePeloton()
        async with make_client(fake) as client:
            await client.list_recent(1)
            await client.list_recent(1)

        assert fake.paths().count("/auth/login") == 1

    @pytest.mark.asyncio
    async def test_pages_until_enough_workouts(self):
        fake = FakePeloton(rows=make_rows(60))
        async with make_client(fake) as client:
            workouts = await client.list_recent(40)

        assert len(workouts) == 40
        assert fake.paths().count("/api/user/user-1/workouts") == 2

    @pytest.mark.asyncio
    async def test_stops_when_history_runs_out(self):
        fake = FakePeloton(rows=make_rows(2))
        async with make_client(fake) as client:
            workouts = await client.list_recent(10)

        assert len(workouts) == 2

    @pytest.mark.asyncio
    async def test_keeps_status_verbatim(self):
        fake = FakePeloton(rows=make_rows(1, status="IN PROGRESS"))
        async with make_client(fake) as client:
            workouts = await client.list_recent(1)

        assert workouts[0].status == "IN PROGRESS"

    @pytest.mark.asyncio
    async def test_login_failure_raises_download_error(self):
        fake = FakePeloton(login_status=401)
        async with make_client(fake) as client:
            with pytest.raises(PelotonDownloadError):
                await client.list_recent(3)

    @pytest.mark.asyncio
    async def test_missing_credentials_raise_without_request(self):
        fake = FakePeloton()
        async with make_client(fake, email="") as client:
            with pytest.raises(PelotonDownloadError):
                await client.list_recent(3)

        assert fake.requests == []

    @pytest.mark.asyncio
    async def test_row_without_id_raises(self):
        fake = FakePeloton(rows=[{"status": "COMPLETE"}])
        async with make_client(fake) as client:
            with pytest.raises(PelotonDownloadError):
                await client.list_recent(1)

    @pytest.mark.asyncio
    async def test_non_object_row_raises(self):
        fake = FakePeloton(rows=["w0"])
        async with make_client(fake) as client:
            with pytest.raises(PelotonDownloadError):
                await client.list_recent(1)

    @pytest.mark.asyncio
    async def test_non_object_login_body_raises_download_error(self):
        fake = FakePeloton(login_body=["user-1"])
        async with make_client(fake) as client:
            with pytest.raises(PelotonDownloadError):
                await client.list_recent(1)


# ─── fetch_details ────────────────────────────────────────────────────────────

class TestFetchDetails:
    @pytest.mark.asyncio
    async def test_returns_one_detail_per_workout(self):
        fake = FakePeloton()
        workouts = [Workout(id="w0", status="COMPLETE"), Workout(id="w1", status="COMPLETE")]
        async with make_client(fake) as client:
            details = await client.fetch_details(workouts)

        assert [d.workout_id for d in details] == ["w0", "w1"]
        assert details[0].samples["seconds_since_pedaling_start"] == [0, 1]
        assert details[0].user_data["weight"] == 160

    @pytest.mark.asyncio
    async def test_fetches_user_profile_once(self):
        fake = FakePeloton()
        workouts = [Workout(id="w0", status="COMPLETE"), Workout(id="w1", status="COMPLETE")]
        async with make_client(fake) as client:
            await client.fetch_details(workouts)

        assert fake.paths().count("/api/me") == 1

    @pytest.mark.asyncio
    async def test_stages_raw_json(self, tmp_path):
        fake = FakePeloton()
        async with make_client(fake, download_dir=tmp_path / "downloaded") as client:
            await client.fetch_details([Workout(id="w0", status="COMPLETE")])

        staged = tmp_path / "downloaded" / "w0_workout.json"
        assert staged.exists()
        assert json.loads(staged.read_text())["workout"]["id"] == "w0"

    @pytest.mark.asyncio
    async def test_http_error_raises_download_error(self):
        fake = FakePeloton(detail_status=500)
        async with make_client(fake) as client:
            with pytest.raises(PelotonDownloadError):
                await client.fetch_details([Workout(id="w0", status="COMPLETE")])

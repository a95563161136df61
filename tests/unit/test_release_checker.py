"""Tests for GitHubReleaseChecker using httpx.MockTransport."""
import httpx
import pytest

from p2g.errors import ReleaseCheckError
from p2g.github.release import GitHubReleaseChecker, _parse_version


def make_transport(status_code=200, payload=None, calls=None):
    def handler(request: httpx.Request) -> httpx.Response:
        if calls is not None:
            calls.append(request)
        return httpx.Response(status_code, json=payload if payload is not None else {})

    return httpx.MockTransport(handler)


class TestGetLatestRelease:
    @pytest.mark.asyncio
    async def test_newer_release_detected(self):
        payload = {
            "tag_name": "v0.2.0",
            "html_url": "https://github.com/owner/repo/releases/tag/v0.2.0",
            "published_at": "2025-01-15T07:30:00Z",
        }
        checker = GitHubReleaseChecker(
            "owner/repo", current_version="0.1.0", transport=make_transport(payload=payload)
        )

        release = await checker.get_latest_release()

        assert release.tag_name == "v0.2.0"
        assert release.is_release_newer is True
        assert release.published_at.year == 2025

    @pytest.mark.asyncio
    async def test_same_version_is_not_newer(self):
        checker = GitHubReleaseChecker(
            "owner/repo", current_version="0.1.0",
            transport=make_transport(payload={"tag_name": "v0.1.0"}),
        )
        release = await checker.get_latest_release()
        assert release.is_release_newer is False

    @pytest.mark.asyncio
    async def test_requests_latest_release_endpoint(self):
        calls = []
        checker = GitHubReleaseChecker(
            "owner/repo", transport=make_transport(payload={"tag_name": "v1.0.0"}, calls=calls)
        )
        await checker.get_latest_release()
        assert len(calls) == 1
        assert calls[0].url.path == "/repos/owner/repo/releases/latest"

    @pytest.mark.asyncio
    async def test_http_error_raises(self):
        checker = GitHubReleaseChecker("owner/repo", transport=make_transport(status_code=404))
        with pytest.raises(ReleaseCheckError):
            await checker.get_latest_release()

    @pytest.mark.asyncio
    async def test_missing_tag_raises(self):
        checker = GitHubReleaseChecker("owner/repo", transport=make_transport(payload={}))
        with pytest.raises(ReleaseCheckError):
            await checker.get_latest_release()


class TestParseVersion:
    def test_strips_v_prefix(self):
        assert _parse_version("v2.3.10") == (2, 3, 10)

    def test_ignores_prerelease_suffix(self):
        assert _parse_version("v2.3.10-rc1") == (2, 3, 10)

    def test_numeric_ordering(self):
        assert _parse_version("v0.10.0") > _parse_version("0.9.9")

"""Checks GitHub for a newer published release of this app."""
import logging
import re
from datetime import datetime
from typing import Optional, Tuple

import httpx
from pydantic import BaseModel

from p2g.errors import ReleaseCheckError
from p2g.version import __version__

logger = logging.getLogger(__name__)

GITHUB_API = "https://api.github.com"


class LatestRelease(BaseModel):
    tag_name: str
    html_url: Optional[str] = None
    published_at: Optional[datetime] = None
    is_release_newer: bool = False


class GitHubReleaseChecker:
    def __init__(
        self,
        repo: str,
        current_version: str = __version__,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Args:
            repo: "owner/name" of the GitHub repository to check.
            current_version: Version string of the running app.
            transport: Optional httpx transport (tests pass httpx.MockTransport).
        """
        self.repo = repo
        self.current_version = current_version
        self._transport = transport

    async def get_latest_release(self) -> LatestRelease:
        """
        Fetch the latest release and compare it to the running version.

        Raises:
            ReleaseCheckError: on transport errors or an unexpected payload.
        """
        url = f"{GITHUB_API}/repos/{self.repo}/releases/latest"
        try:
            async with httpx.AsyncClient(timeout=10.0, transport=self._transport) as client:
                resp = await client.get(url, headers={"Accept": "application/vnd.github+json"})
                resp.raise_for_status()
                body = resp.json()
        except (httpx.HTTPError, ValueError) as exc:
            raise ReleaseCheckError(f"Could not fetch latest release: {exc}") from exc

        tag = body.get("tag_name")
        if not tag:
            raise ReleaseCheckError("Latest release payload has no tag_name")

        release = LatestRelease(
            tag_name=tag,
            html_url=body.get("html_url"),
            published_at=body.get("published_at"),
            is_release_newer=_parse_version(tag) > _parse_version(self.current_version),
        )
        if release.is_release_newer:
            logger.info("A new release is available: %s (%s)", release.tag_name, release.html_url)
        return release


def _parse_version(version: str) -> Tuple[int, ...]:
    """'v2.3.10-rc1' → (2, 3, 10). Non-numeric parts are ignored."""
    core = version.lstrip("vV").split("-")[0]
    return tuple(int(part) for part in re.findall(r"\d+", core))

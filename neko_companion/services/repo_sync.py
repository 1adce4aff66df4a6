"""Repository sync for the two database files.

The data files are published by the desktop companion into a ``NekoGame/``
folder of a GitHub or Gitee repository. A sync compares the time of the
latest commit touching each file with the local file's modification time
and downloads the file when the repository copy is newer.
"""

import base64
import binascii
import re
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any

import httpx
import structlog

from ..models import RepoLocation, RepoPlatform, SyncAction, SyncResult
from .errors import ConfigurationError, NetworkError, SyncError
from .filesystem import FileSystemService
from .http_client import HttpClientService

log = structlog.stdlib.get_logger()

GAME_DATABASE = "neko_game.db"
GACHA_DATABASE = "gacha_data.db"
DATA_FILES: tuple[str, ...] = (GAME_DATABASE, GACHA_DATABASE)

REMOTE_FOLDER = "NekoGame"
DEFAULT_TOLERANCE_SECONDS = 60.0

_API_BASES = {
    RepoPlatform.GITHUB: "https://api.github.com/repos/{owner}/{repo}",
    RepoPlatform.GITEE: "https://gitee.com/api/v5/repos/{owner}/{repo}",
}

_REPO_URL_PATTERN = re.compile(
    r"^https://(?P<host>github\.com|gitee\.com)/(?P<owner>[^/\s]+)/(?P<repo>[^/\s]+?)(?:\.git)?/*$"
)


def parse_repo_url(url: str) -> RepoLocation:
    """Split a repository web URL into owner, name and platform.

    Raises:
        ConfigurationError: If the URL is not a GitHub or Gitee repository
    """
    match = _REPO_URL_PATTERN.match(url.strip())
    if match is None:
        raise ConfigurationError(
            f"Unsupported repository URL: {url!r}",
            setting="repo_url",
            current_value=url,
            expected="https://github.com/<owner>/<repo> or https://gitee.com/<owner>/<repo>",
        )

    platform = RepoPlatform.GITHUB if match["host"] == "github.com" else RepoPlatform.GITEE
    return RepoLocation(owner=match["owner"], repo=match["repo"], platform=platform)


def decide_sync_action(
    local_time: datetime | None,
    remote_time: datetime | None,
    tolerance_seconds: float = DEFAULT_TOLERANCE_SECONDS,
) -> SyncAction:
    """Choose what to do with one file given both timestamps.

    Both datetimes must be timezone-aware. Returns DOWNLOADED when the file
    should be fetched.
    """
    if remote_time is None:
        return SyncAction.MISSING_REMOTE
    if local_time is None:
        return SyncAction.DOWNLOADED

    difference = (local_time - remote_time).total_seconds()
    if abs(difference) <= tolerance_seconds:
        return SyncAction.UP_TO_DATE
    if difference < 0:
        return SyncAction.DOWNLOADED
    return SyncAction.LOCAL_NEWER


def format_update_time(value: datetime, utc_offset_hours: int = 8) -> str:
    """Render a commit time as local wall time."""
    local = value.astimezone(timezone(timedelta(hours=utc_offset_hours)))
    return local.strftime("%Y-%m-%d %H:%M:%S")


class RepoSyncService:
    """Download the database files from the configured repository."""

    def __init__(
        self,
        http_client: HttpClientService,
        filesystem: FileSystemService,
        repo_url: str,
        token: str,
        data_directory: Path,
        tolerance_seconds: float = DEFAULT_TOLERANCE_SECONDS,
    ) -> None:
        self.http_client = http_client
        self.filesystem = filesystem
        self.location = parse_repo_url(repo_url)
        self.token = token
        self.data_directory = data_directory
        self.tolerance_seconds = tolerance_seconds
        self._api_base = _API_BASES[self.location.platform].format(
            owner=self.location.owner, repo=self.location.repo
        )

        log.info(
            "Repository sync service initialized",
            owner=self.location.owner,
            repo=self.location.repo,
            platform=self.location.platform.value,
        )

    def _auth(self, scheme: str) -> tuple[dict[str, str], dict[str, str]]:
        """Headers and query parameters carrying the token."""
        if not self.token:
            return {}, {}
        if self.location.platform is RepoPlatform.GITHUB:
            return {"Authorization": f"{scheme} {self.token}"}, {}
        return {}, {"access_token": self.token}

    async def _fetch(
        self,
        url: str,
        file_name: str,
        scheme: str,
        params: dict[str, str] | None = None,
        as_json: bool = True,
    ) -> Any:
        """GET a repository URL, turning transport failures into app errors."""
        headers, auth_params = self._auth(scheme)
        query = {**auth_params, **(params or {})}
        try:
            if as_json:
                return await self.http_client.get_json(url, headers=headers, params=query)
            return await self.http_client.get_bytes(url, headers=headers, params=query)
        except httpx.HTTPStatusError as e:
            raise NetworkError(
                f"Repository request for {file_name} failed with status {e.response.status_code}",
                original_error=e,
                url=url,
                status_code=e.response.status_code,
            ) from e
        except httpx.RequestError as e:
            raise NetworkError("Could not reach the repository", original_error=e, url=url) from e
        except ValueError as e:
            raise SyncError("Repository returned an invalid response", file_name=file_name, url=url, original_error=e) from e

    async def get_remote_timestamp(self, file_name: str) -> datetime | None:
        """Time of the latest commit touching a data file, or None if it has none.

        Raises:
            NetworkError: If the commits API cannot be reached
            SyncError: If the response cannot be understood
        """
        url = f"{self._api_base}/commits"
        commits = await self._fetch(url, file_name, "token", params={"path": f"{REMOTE_FOLDER}/{file_name}"})

        if not isinstance(commits, list):
            raise SyncError("Unexpected commits response", file_name=file_name, url=url)
        if not commits:
            log.info("No commits found for data file", file_name=file_name)
            return None

        try:
            committed = datetime.fromisoformat(commits[0]["commit"]["committer"]["date"])
        except (KeyError, TypeError, ValueError) as e:
            raise SyncError("Commit has no usable date", file_name=file_name, url=url, original_error=e) from e

        if committed.tzinfo is None:
            committed = committed.replace(tzinfo=timezone.utc)
        log.debug("Remote timestamp fetched", file_name=file_name, committed=committed.isoformat())
        return committed

    async def download_file(self, file_name: str, local_path: Path) -> int:
        """Fetch a data file through the contents API and write it atomically.

        Returns:
            Number of bytes written

        Raises:
            NetworkError: If a request fails
            SyncError: If the response carries no usable file content
        """
        url = f"{self._api_base}/contents/{REMOTE_FOLDER}/{file_name}"
        payload = await self._fetch(url, file_name, "Bearer")

        if not isinstance(payload, dict):
            raise SyncError("Remote path is not a file", file_name=file_name, url=url)

        content = payload.get("content")
        if isinstance(content, str) and content.strip():
            try:
                data = base64.b64decode("".join(content.split()), validate=True)
            except (binascii.Error, ValueError) as e:
                raise SyncError("File content is not valid base64", file_name=file_name, url=url, original_error=e) from e
        elif payload.get("download_url"):
            # Large files come back without inline content
            log.info("Fetching file through download URL", file_name=file_name)
            data = await self._fetch(payload["download_url"], file_name, "Bearer", as_json=False)
        else:
            raise SyncError("Repository returned no file content", file_name=file_name, url=url)

        await self.filesystem.write_bytes(data, local_path)
        log.info("Data file downloaded", file_name=file_name, size=len(data))
        return len(data)

    async def sync_file(self, file_name: str) -> SyncResult:
        """Bring one data file up to date with the repository."""
        local_path = self.data_directory / file_name
        remote_time = await self.get_remote_timestamp(file_name)
        local_time = self.filesystem.get_modified_time(local_path)

        action = decide_sync_action(local_time, remote_time, self.tolerance_seconds)
        if action is SyncAction.DOWNLOADED:
            await self.download_file(file_name, local_path)

        log.info(
            "Data file synced",
            file_name=file_name,
            action=action.value,
            local_time=local_time.isoformat() if local_time else None,
            remote_time=remote_time.isoformat() if remote_time else None,
        )
        return SyncResult(file_name=file_name, action=action, remote_updated=remote_time)

    async def sync_all(self) -> list[SyncResult]:
        """Sync the game database, then the gacha database."""
        return [await self.sync_file(file_name) for file_name in DATA_FILES]

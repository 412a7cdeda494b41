"""GitHub REST API adapter — implements the RepoFetcher port."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any
from urllib.parse import quote

import httpx

from loc_viewer.domain.entities import (
    BlobPayload,
    EntryKind,
    RepoMetadata,
    TreeEntry,
    TreeListing,
)
from loc_viewer.domain.exceptions import (
    EmptyRepositoryError,
    FetchError,
    GitHubRateLimitError,
    RemoteApiError,
    RepositoryAccessDeniedError,
    RepositoryNotFoundError,
)
from loc_viewer.domain.value_objects import RepositoryRef

logger = logging.getLogger(__name__)

_GITHUB_API = "https://api.github.com"
_RAW_BASE = "https://raw.githubusercontent.com"
_USER_AGENT = "loc-viewer/1.0"


class GitHubRestAdapter:
    """Concrete RepoFetcher backed by the GitHub v3 REST API."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        token: str | None = None,
        api_url: str = _GITHUB_API,
        raw_url: str = _RAW_BASE,
    ) -> None:
        self._client = client
        self._api_url = api_url.rstrip("/")
        self._raw_url = raw_url.rstrip("/")
        self._api_headers: dict[str, str] = {
            "Accept": "application/vnd.github.v3+json",
            "User-Agent": _USER_AGENT,
        }
        self._raw_headers: dict[str, str] = {"User-Agent": _USER_AGENT}
        if token:
            self._api_headers["Authorization"] = f"Bearer {token}"
            self._raw_headers["Authorization"] = f"Bearer {token}"

    async def fetch_metadata(self, repo: RepositoryRef) -> RepoMetadata:
        """GET /repos/{owner}/{repo} → RepoMetadata."""
        resp = await self._api_get(f"/repos/{_seg(repo.owner)}/{_seg(repo.name)}")
        data = _json_object(resp)
        return RepoMetadata(
            owner=repo.owner,
            name=repo.name,
            default_branch=data.get("default_branch") or None,
        )

    async def fetch_tree(
        self, repo: RepositoryRef, tree_ish: str, *, recursive: bool = True
    ) -> TreeListing:
        """GET /repos/{owner}/{repo}/git/trees/{tree_ish}[?recursive=1] → TreeListing.

        An empty repository (HTTP 409) lists as an empty, complete tree.
        """
        try:
            resp = await self._api_get(
                f"/repos/{_seg(repo.owner)}/{_seg(repo.name)}/git/trees/{quote(tree_ish, safe='/')}",
                params={"recursive": "1"} if recursive else None,
            )
        except EmptyRepositoryError:
            logger.info("Repository %s is empty", repo.full_name)
            return TreeListing(entries=(), truncated=False)
        data = _json_object(resp)
        try:
            entries = tuple(
                TreeEntry(
                    path=item["path"],
                    kind=EntryKind(item["type"]),
                    sha=item["sha"],
                    size=item.get("size"),
                )
                for item in data.get("tree", [])
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise RemoteApiError(
                f"Malformed tree listing for {repo.full_name}@{tree_ish}: {exc}"
            ) from exc

        truncated = bool(data.get("truncated", False))
        if truncated:
            logger.info(
                "Tree listing for %s@%s is truncated (%d entries received)",
                repo.full_name,
                tree_ish,
                len(entries),
            )
        return TreeListing(entries=entries, truncated=truncated)

    async def fetch_raw_content(self, repo: RepositoryRef, ref: str, path: str) -> bytes:
        """Fetch raw file bytes via the raw content host."""
        raw_url = (
            f"{self._raw_url}/{_seg(repo.owner)}/{_seg(repo.name)}/"
            f"{quote(ref, safe='/')}/{quote(path, safe='/')}"
        )
        try:
            resp = await self._client.get(raw_url, headers=self._raw_headers)
        except httpx.HTTPError as exc:
            raise FetchError(path, f"network error fetching {raw_url}: {exc}") from exc

        if resp.status_code == 200:
            return resp.content

        if resp.status_code == 404:
            raise FetchError(path, "file not found")

        raise FetchError(path, f"raw content host returned HTTP {resp.status_code}")

    async def fetch_blob(self, repo: RepositoryRef, sha: str, path: str = "") -> BlobPayload:
        """GET /repos/{owner}/{repo}/git/blobs/{sha} → BlobPayload."""
        try:
            resp = await self._api_get(
                f"/repos/{_seg(repo.owner)}/{_seg(repo.name)}/git/blobs/{_seg(sha)}"
            )
        except RemoteApiError as exc:
            raise FetchError(path or sha, str(exc)) from exc

        data = _json_object(resp)
        content = data.get("content")
        if not isinstance(content, str):
            raise FetchError(path or sha, "blob response has no content")
        return BlobPayload(
            sha=data.get("sha", sha),
            content=content,
            encoding=data.get("encoding", "base64"),
            size=data.get("size"),
        )

    async def _api_get(
        self,
        endpoint: str,
        params: dict[str, str] | None = None,
    ) -> httpx.Response:
        """Perform a GitHub API GET request with error translation."""
        url = f"{self._api_url}{endpoint}"
        try:
            resp = await self._client.get(
                url, headers=self._api_headers, params=params
            )
        except httpx.HTTPError as exc:
            raise RemoteApiError(f"Network error fetching {url}: {exc}") from exc

        if resp.status_code == 200:
            return resp

        if resp.status_code == 404:
            raise RepositoryNotFoundError(
                f"Not found: {url}. Make sure the repository is public and the ref exists."
            )

        if resp.status_code == 403:
            remaining = resp.headers.get("x-ratelimit-remaining", "")
            if remaining == "0":
                reset_raw = resp.headers.get("x-ratelimit-reset", "")
                try:
                    reset_str = datetime.fromtimestamp(int(reset_raw), tz=timezone.utc).strftime(
                        "%Y-%m-%d %H:%M:%S UTC"
                    )
                except (ValueError, OSError):
                    reset_str = reset_raw or "unknown"
                raise GitHubRateLimitError(
                    f"GitHub API rate limit exceeded. Resets at {reset_str}. "
                    "Set the GITHUB_TOKEN environment variable to increase the limit."
                )
            raise RepositoryAccessDeniedError(
                "Access denied. The repository may be private."
            )

        if resp.status_code == 409:
            raise EmptyRepositoryError(f"Repository is empty: {url}")

        if resp.status_code == 429:
            raise GitHubRateLimitError("GitHub API rate limit exceeded (HTTP 429).")

        raise RemoteApiError(f"GitHub API returned HTTP {resp.status_code} for {url}")


def _seg(value: str) -> str:
    return quote(value, safe="")


def _json_object(resp: httpx.Response) -> dict[str, Any]:
    try:
        data = resp.json()
    except ValueError as exc:
        raise RemoteApiError(f"Invalid JSON from {resp.request.url}: {exc}") from exc
    if not isinstance(data, dict):
        raise RemoteApiError(f"Unexpected JSON payload from {resp.request.url}")
    return data

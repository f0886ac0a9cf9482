"""GitHub REST API adapter — implements the RemoteSearch and FileFetcher ports."""

from __future__ import annotations

import asyncio
import logging
import os
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Any
from urllib.parse import quote

import httpx

from locale_sync.domain.exceptions import (
    DownloadError,
    GitHubRateLimitError,
    RemoteQueryError,
    RepositoryAccessDeniedError,
    RepositoryNotFoundError,
)
from locale_sync.domain.ports.remote_search import ChunkCallback
from locale_sync.domain.value_objects import RepositoryIdentity

logger = logging.getLogger(__name__)

_GITHUB_API = "https://api.github.com"
_RAW_BASE = "https://raw.githubusercontent.com"
_USER_AGENT = "locale-sync/1.0"

_PER_PAGE = 100
# The code-search API never returns more than 1000 results.
_MAX_RESULTS = 1000


def raw_file_url(identity: RepositoryIdentity, path: str, branch: str = "HEAD") -> str:
    """Return the raw.githubusercontent.com URL of *path* in the repository."""
    return f"{_RAW_BASE}/{identity.owner}/{identity.repo}/{branch}/{quote(path.lstrip('/'))}"


class GitHubRestAdapter:
    """Concrete RemoteSearch / FileFetcher backed by the GitHub v3 REST API."""

    def __init__(self, client: httpx.AsyncClient, token: str | None = None) -> None:
        self._client = client
        self._api_headers: dict[str, str] = {
            "Accept": "application/vnd.github.v3+json",
            "User-Agent": _USER_AGENT,
        }
        if token:
            self._api_headers["Authorization"] = f"Bearer {token}"

    async def find_files(
        self, owner: str, repo: str, content_marker: str, filename: str
    ) -> dict[str, Any]:
        """GET /search/code → ``{"total_count": n, "items": [...]}`` across all pages."""
        query = f"{content_marker} in:file filename:{filename} repo:{owner}/{repo}"
        items: list[Any] = []
        total = 0
        page = 1
        while True:
            data = await self._api_get_json(
                "/search/code",
                params={"q": query, "per_page": str(_PER_PAGE), "page": str(page)},
            )
            page_items = data.get("items")
            if not isinstance(page_items, list):
                raise RemoteQueryError("Error parsing the repository search response.")

            items.extend(page_items)
            total = data.get("total_count", len(items))
            if (
                len(page_items) < _PER_PAGE
                or len(items) >= min(total, _MAX_RESULTS)
            ):
                break
            page += 1

        logger.debug("Search in %s/%s returned %d item(s)", owner, repo, len(items))
        return {"total_count": total, "items": items}

    async def fetch(
        self, url: str, destination: Path, on_chunk: ChunkCallback | None = None
    ) -> None:
        """Stream *url* into *destination* (write to a sibling temp file, then replace).

        Nothing is created on disk until the server has answered 200.
        """
        tmp_name: str | None = None
        try:
            async with self._client.stream(
                "GET", url, headers={"User-Agent": _USER_AGENT}
            ) as resp:
                if resp.status_code != 200:
                    raise DownloadError(
                        f"raw.githubusercontent.com returned HTTP {resp.status_code} for {url}"
                    )
                destination.parent.mkdir(parents=True, exist_ok=True)
                fd, tmp_name = tempfile.mkstemp(
                    dir=destination.parent, prefix=".download-", suffix=".tmp"
                )
                with os.fdopen(fd, "wb") as out:
                    total = int(resp.headers.get("content-length", 0) or 0)
                    done = 0
                    async for chunk in resp.aiter_bytes():
                        await asyncio.to_thread(out.write, chunk)
                        done += len(chunk)
                        if on_chunk is not None:
                            on_chunk(done, total)
            os.replace(tmp_name, destination)
        except httpx.HTTPError as exc:
            raise DownloadError(f"Network error fetching {url}: {exc}") from exc
        except OSError as exc:
            raise DownloadError(f"Could not write {destination}: {exc}") from exc
        finally:
            if tmp_name is not None and os.path.exists(tmp_name):
                os.unlink(tmp_name)

    async def _api_get_json(
        self,
        endpoint: str,
        params: dict[str, str] | None = None,
    ) -> dict[str, Any]:
        """GET an API endpoint and decode its JSON object body."""
        resp = await self._api_get(endpoint, params=params)
        try:
            data = resp.json()
        except ValueError as exc:
            raise RemoteQueryError(
                "Error parsing the repository search response."
            ) from exc
        if not isinstance(data, dict):
            raise RemoteQueryError("Error parsing the repository search response.")
        return data

    async def _api_get(
        self,
        endpoint: str,
        params: dict[str, str] | None = None,
    ) -> httpx.Response:
        """Perform a GitHub API GET request with error translation."""
        url = f"{_GITHUB_API}{endpoint}"
        try:
            resp = await self._client.get(
                url, headers=self._api_headers, params=params
            )
        except httpx.HTTPError as exc:
            raise RemoteQueryError(
                f"Network error fetching {url}: {exc}"
            ) from exc

        if resp.status_code == 200:
            return resp

        logger.warning("GitHub API returned HTTP %d for %s", resp.status_code, url)

        if resp.status_code == 404:
            raise RepositoryNotFoundError(
                "Repository not found. Make sure the URL points to a public repository."
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

        if resp.status_code == 429:
            raise GitHubRateLimitError("GitHub API rate limit exceeded (HTTP 429).")

        raise RemoteQueryError(
            f"GitHub API returned HTTP {resp.status_code} for {url}"
        )

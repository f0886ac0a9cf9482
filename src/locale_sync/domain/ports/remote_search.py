"""Ports: remote search and file fetch — defined by the domain, implemented by infrastructure."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable, Protocol

ChunkCallback = Callable[[int, int], None]
"""Receives ``(bytes_done, bytes_total)``; ``bytes_total`` is 0 when unknown."""


class RemoteSearch(Protocol):
    """Abstract contract for searching files inside a GitHub repository."""

    async def find_files(
        self, owner: str, repo: str, content_marker: str, filename: str
    ) -> dict[str, Any]:
        """Return the parsed search response, shaped ``{"items": [{"path": ...}]}``."""
        ...


class FileFetcher(Protocol):
    """Abstract contract for downloading a single file to disk."""

    async def fetch(
        self, url: str, destination: Path, on_chunk: ChunkCallback | None = None
    ) -> None:
        """Download *url* into *destination*, overwriting it unconditionally."""
        ...

"""Port: resource files — defined by the domain, implemented by infrastructure."""

from __future__ import annotations

from pathlib import Path
from typing import Protocol


class ResourceFile(Protocol):
    """A single ``strings.xml`` document bound to a path on disk."""

    def save(self) -> bool:
        """Write the document to its path; ``False`` if the write failed."""
        ...

    def delete(self) -> None:
        """Remove the file from disk."""
        ...

    def was_modified(self) -> bool:
        """Whether the content carries local edits."""
        ...


class ResourceFileFactory(Protocol):
    """Opens resource files; a missing path yields an empty document."""

    def open(self, path: Path) -> ResourceFile | None:
        """Return a handle for *path*, or ``None`` if it cannot be read."""
        ...

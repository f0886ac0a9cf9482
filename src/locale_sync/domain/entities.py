"""Domain entities — pure data structures with no external dependencies."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class SyncState(str, Enum):
    """Lifecycle of a single synchronization run."""

    SCANNING = "scanning"
    DOWNLOADING = "downloading"
    DONE = "done"
    EMPTY = "empty"
    PARTIAL = "partial"
    CANCELLED = "cancelled"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class RemoteResource:
    """A remote ``strings.xml`` path and the locale it belongs to."""

    remote_path: str
    locale: str


@dataclass(frozen=True, slots=True)
class DownloadOutcome:
    """Result of downloading one :class:`RemoteResource`."""

    resource: RemoteResource
    ok: bool
    error: str | None = None


@dataclass(slots=True)
class SyncReport:
    """What a synchronization run did, returned alongside the callbacks."""

    state: SyncState
    resources: list[RemoteResource] = field(default_factory=list)
    outcomes: list[DownloadOutcome] = field(default_factory=list)
    message: str | None = None

    @property
    def success(self) -> bool:
        return self.state is SyncState.DONE

    @property
    def downloaded(self) -> list[str]:
        return [o.resource.locale for o in self.outcomes if o.ok]

    @property
    def failed(self) -> list[str]:
        return [o.resource.locale for o in self.outcomes if not o.ok]

"""Facade over one locally cached repository."""

from __future__ import annotations

import asyncio
from pathlib import Path

from locale_sync.domain.entities import SyncReport
from locale_sync.domain.ports.remote_search import FileFetcher, RemoteSearch
from locale_sync.domain.ports.resource_files import ResourceFile, ResourceFileFactory
from locale_sync.domain.value_objects import RepositoryIdentity
from locale_sync.services.locale_registry import LocaleRegistry
from locale_sync.services.locale_store import LocaleFileStore
from locale_sync.services.progress import (
    DEFAULT_INTERVAL_MS,
    CancellationToken,
    Dispatch,
    ProgressCallback,
    call_inline,
)
from locale_sync.services.remote_scanner import RemoteScanner
from locale_sync.services.sync_repo import RawUrlBuilder, SyncOrchestrator


class LocalRepository:
    """Everything a caller can do with ``<cache_root>/<owner>/<repo>``.

    Running two syncs of the same repository at once is the caller's
    responsibility to prevent.
    """

    def __init__(
        self,
        identity: RepositoryIdentity,
        cache_root: Path,
        resources: ResourceFileFactory,
        search: RemoteSearch,
        fetcher: FileFetcher,
        raw_url: RawUrlBuilder,
        dispatch: Dispatch = call_inline,
        progress_interval_ms: int = DEFAULT_INTERVAL_MS,
    ) -> None:
        self.identity = identity
        self._store = LocaleFileStore(cache_root, resources)
        self._registry = LocaleRegistry(self._store, identity)
        self._orchestrator = SyncOrchestrator(
            identity=identity,
            store=self._store,
            registry=self._registry,
            scanner=RemoteScanner(search, self._store),
            fetcher=fetcher,
            raw_url=raw_url,
            dispatch=dispatch,
            progress_interval_ms=progress_interval_ms,
        )

    # ── Sync ────────────────────────────────────────────────────────────

    async def sync(
        self,
        callback: ProgressCallback,
        overwrite: bool = False,
        cancel_token: CancellationToken | None = None,
    ) -> SyncReport:
        return await self._orchestrator.run(
            callback, overwrite=overwrite, cancel_token=cancel_token
        )

    def start_sync(
        self,
        callback: ProgressCallback,
        overwrite: bool = False,
        cancel_token: CancellationToken | None = None,
    ) -> asyncio.Task[SyncReport]:
        return self._orchestrator.start(
            callback, overwrite=overwrite, cancel_token=cancel_token
        )

    # ── Locales ─────────────────────────────────────────────────────────

    def list_locales(self) -> list[str]:
        return self._registry.list()

    def has_locale(self, locale: str) -> bool:
        return self._store.exists(self.identity, locale)

    def has_modified_locale(self, locale: str) -> bool:
        return self._store.is_modified(self.identity, locale, self._registry.list())

    def any_modified(self) -> bool:
        return self._store.any_modified(self.identity, self._registry.list())

    def create_locale(self, locale: str) -> bool:
        return self._registry.create(locale)

    def delete_locale(self, locale: str) -> None:
        self._registry.remove(locale)

    def load_resources(self, locale: str) -> ResourceFile | None:
        return self._store.open_resources(self.identity, locale)

    def is_empty(self) -> bool:
        return self._registry.is_empty()

    def delete(self) -> None:
        """Remove every cached file of this repository."""
        self._store.delete_all(self.identity)
        self._registry.reload()

    def __str__(self) -> str:
        return self.identity.full_name

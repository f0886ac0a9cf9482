"""Synchronize-repository use case — scan the remote, then download sequentially.

The orchestrator depends only on the ports and the local-cache services.
Every callback goes through an injected ``dispatch`` so callers decide on
which context progress is delivered.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Callable

from locale_sync.domain.entities import (
    DownloadOutcome,
    RemoteResource,
    SyncReport,
    SyncState,
)
from locale_sync.domain.exceptions import (
    DownloadError,
    LocaleSyncError,
    SyncCancelledError,
)
from locale_sync.domain.ports.remote_search import FileFetcher
from locale_sync.domain.value_objects import RepositoryIdentity
from locale_sync.services.locale_registry import LocaleRegistry
from locale_sync.services.locale_store import LocaleFileStore
from locale_sync.services.progress import (
    DEFAULT_INTERVAL_MS,
    CancellationToken,
    Dispatch,
    ProgressCallback,
    ProgressThrottle,
    call_inline,
)
from locale_sync.services.remote_scanner import RemoteScanner

logger = logging.getLogger(__name__)

RawUrlBuilder = Callable[[RepositoryIdentity, str], str]

# ── Progress messages ───────────────────────────────────────────────────────

SCANNING_TITLE = "Scanning repository…"
SCANNING_DETAIL = "Looking for strings.xml files in the repository"
DOWNLOADING_TITLE = "Downloading strings.xml ({index}/{total})"
DOWNLOADING_DETAIL = "Downloading locale {locale}"
TRANSFER_DETAIL = "Downloading locale {locale} ({done})"

NO_STRINGS_FOUND = "No strings.xml files were found in the repository."
SYNC_CANCELLED = "Synchronization cancelled."
UNEXPECTED_ERROR = "An unexpected error occurred while synchronizing."
PARTIAL_FAILURE = "Downloaded {ok} of {total} locales; failed: {failed}."


def _format_transfer(done: int, total: int) -> str:
    if total > 0:
        return f"{done * 100 // total}%"
    return f"{done / 1024:.1f} KiB"


# ── Use case ────────────────────────────────────────────────────────────────


class SyncOrchestrator:
    """Drives one repository through scanning → downloading → done.

    Parameters
    ----------
    identity:
        The repository being synchronized.
    store, registry:
        Local cache of that repository.
    scanner:
        Produces the filtered ``(remote_path, locale)`` list.
    fetcher:
        Downloads one file to its cache path.
    raw_url:
        Builds the download URL of a remote path.
    dispatch:
        ``dispatch(fn, *args)`` delivers callbacks to the caller's context.
    progress_interval_ms:
        Minimum spacing of byte-level transfer updates within one download.
    """

    def __init__(
        self,
        identity: RepositoryIdentity,
        store: LocaleFileStore,
        registry: LocaleRegistry,
        scanner: RemoteScanner,
        fetcher: FileFetcher,
        raw_url: RawUrlBuilder,
        dispatch: Dispatch = call_inline,
        progress_interval_ms: int = DEFAULT_INTERVAL_MS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._identity = identity
        self._store = store
        self._registry = registry
        self._scanner = scanner
        self._fetcher = fetcher
        self._raw_url = raw_url
        self._dispatch = dispatch
        self._interval_ms = progress_interval_ms
        self._clock = clock

    # ── Public entry points ─────────────────────────────────────────────

    def start(
        self,
        callback: ProgressCallback,
        *,
        overwrite: bool = False,
        cancel_token: CancellationToken | None = None,
    ) -> asyncio.Task[SyncReport]:
        """Schedule :meth:`run` as a background task on the running loop."""
        return asyncio.create_task(
            self.run(callback, overwrite=overwrite, cancel_token=cancel_token),
            name=f"sync {self._identity}",
        )

    async def run(
        self,
        callback: ProgressCallback,
        *,
        overwrite: bool = False,
        cancel_token: CancellationToken | None = None,
    ) -> SyncReport:
        """Run the whole sync.  Never raises; always finishes the callback once."""
        token = cancel_token or CancellationToken()
        report = SyncReport(state=SyncState.SCANNING)
        logger.info("Synchronizing %s (overwrite=%s)", self._identity, overwrite)

        try:
            await self._sync(report, callback, overwrite, token)
        except asyncio.CancelledError:
            self._reload_after_downloads(report)
            report.state = SyncState.CANCELLED
            report.message = SYNC_CANCELLED
            self._emit(callback.on_progress_finished, report.message, False)
            raise
        except SyncCancelledError:
            self._reload_after_downloads(report)
            report.state = SyncState.CANCELLED
            report.message = SYNC_CANCELLED
        except LocaleSyncError as exc:
            logger.warning("Synchronizing %s failed: %s", self._identity, exc)
            self._reload_after_downloads(report)
            report.state = SyncState.FAILED
            report.message = str(exc)
        except Exception:
            logger.exception("Unexpected error while synchronizing %s", self._identity)
            self._reload_after_downloads(report)
            report.state = SyncState.FAILED
            report.message = UNEXPECTED_ERROR

        logger.info("Synchronizing %s finished: %s", self._identity, report.state.value)
        self._emit(callback.on_progress_finished, report.message, report.success)
        return report

    # ── Phases ──────────────────────────────────────────────────────────

    async def _sync(
        self,
        report: SyncReport,
        callback: ProgressCallback,
        overwrite: bool,
        token: CancellationToken,
    ) -> None:
        # Phase 1 — scan
        self._emit(callback.on_progress_update, SCANNING_TITLE, SCANNING_DETAIL)
        report.resources = await self._scanner.scan(
            self._identity,
            self._registry.list(),
            overwrite=overwrite,
            cancel_token=token,
        )
        if not report.resources:
            report.state = SyncState.EMPTY
            report.message = NO_STRINGS_FOUND
            return

        # Phase 2 — sequential downloads
        report.state = SyncState.DOWNLOADING
        total = len(report.resources)
        for index, resource in enumerate(report.resources):
            token.raise_if_cancelled()
            self._emit(
                callback.on_progress_update,
                DOWNLOADING_TITLE.format(index=index + 1, total=total),
                DOWNLOADING_DETAIL.format(locale=resource.locale),
            )
            report.outcomes.append(
                await self._download(resource, callback, index, total)
            )

        await asyncio.to_thread(self._refresh_cache)
        failed = report.failed
        if failed:
            report.state = SyncState.PARTIAL
            report.message = PARTIAL_FAILURE.format(
                ok=total - len(failed), total=total, failed=", ".join(failed)
            )
        else:
            report.state = SyncState.DONE
            report.message = None

    async def _download(
        self,
        resource: RemoteResource,
        callback: ProgressCallback,
        index: int,
        total: int,
    ) -> DownloadOutcome:
        destination = self._store.resolve_path(self._identity, resource.locale)
        url = self._raw_url(self._identity, resource.remote_path)
        throttle = ProgressThrottle(self._interval_ms, self._clock)
        title = DOWNLOADING_TITLE.format(index=index + 1, total=total)
        # The per-item update was just sent; byte progress waits one interval.
        throttle.ready()

        def on_chunk(done: int, size: int) -> None:
            if throttle.ready():
                self._emit(
                    callback.on_progress_update,
                    title,
                    TRANSFER_DETAIL.format(
                        locale=resource.locale, done=_format_transfer(done, size)
                    ),
                )

        try:
            await self._fetcher.fetch(url, destination, on_chunk)
        except DownloadError as exc:
            logger.warning("Skipping locale %s of %s: %s", resource.locale, self._identity, exc)
            return DownloadOutcome(resource=resource, ok=False, error=str(exc))

        logger.info("Downloaded %s → %s", resource.remote_path, destination.name)
        return DownloadOutcome(resource=resource, ok=True)

    # ── Helpers ─────────────────────────────────────────────────────────

    def _refresh_cache(self) -> None:
        """Re-read the cached locales and drop directories a failed batch left empty."""
        self._registry.reload()
        self._store.prune_empty(self._identity)

    def _reload_after_downloads(self, report: SyncReport) -> None:
        if report.state is not SyncState.DOWNLOADING:
            return
        try:
            self._refresh_cache()
        except OSError:
            logger.warning("Could not reload locales of %s", self._identity, exc_info=True)

    def _emit(self, fn: Callable[..., None], *args: object) -> None:
        self._dispatch(fn, *args)

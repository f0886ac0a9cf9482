"""Background sync jobs started over HTTP — one per repository at a time."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field

from locale_sync.domain.entities import SyncReport
from locale_sync.domain.exceptions import SyncInProgressError
from locale_sync.domain.value_objects import RepositoryIdentity
from locale_sync.services.progress import CancellationToken
from locale_sync.services.repository import LocalRepository

logger = logging.getLogger(__name__)


@dataclass
class SyncJob:
    """Progress sink for one sync; also the handle used to cancel it."""

    identity: RepositoryIdentity
    overwrite: bool = False
    token: CancellationToken = field(default_factory=CancellationToken)
    updates: list[tuple[str, str]] = field(default_factory=list)
    finished: bool = False
    success: bool | None = None
    message: str | None = None
    report: SyncReport | None = None
    task: asyncio.Task[SyncReport] | None = None

    def on_progress_update(self, title: str, detail: str) -> None:
        self.updates.append((title, detail))

    def on_progress_finished(self, message: str | None, success: bool) -> None:
        self.finished = True
        self.message = message
        self.success = success

    @property
    def running(self) -> bool:
        if self.report is not None:
            return False
        return self.task is not None and not self.task.done()


class SyncJobs:
    """Tracks the latest job per repository and refuses overlapping syncs."""

    def __init__(self) -> None:
        self._jobs: dict[RepositoryIdentity, SyncJob] = {}

    def get(self, identity: RepositoryIdentity) -> SyncJob | None:
        return self._jobs.get(identity)

    def start(self, repository: LocalRepository, overwrite: bool) -> SyncJob:
        current = self._jobs.get(repository.identity)
        if current is not None and current.running:
            raise SyncInProgressError(
                f"A synchronization of {repository.identity} is already running."
            )

        job = SyncJob(identity=repository.identity, overwrite=overwrite)
        job.task = asyncio.create_task(
            self._run(job, repository), name=f"sync {repository.identity}"
        )
        self._jobs[repository.identity] = job
        return job

    def cancel(self, identity: RepositoryIdentity) -> SyncJob | None:
        job = self._jobs.get(identity)
        if job is not None and job.running:
            logger.info("Cancelling synchronization of %s", identity)
            job.token.cancel()
        return job

    async def shutdown(self) -> None:
        tasks = [job.task for job in self._jobs.values() if job.task and job.running]
        for job in self._jobs.values():
            job.token.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

    @staticmethod
    async def _run(job: SyncJob, repository: LocalRepository) -> SyncReport:
        job.report = await repository.sync(
            job, overwrite=job.overwrite, cancel_token=job.token
        )
        return job.report

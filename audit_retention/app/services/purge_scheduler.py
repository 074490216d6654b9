"""
Purge Scheduler

Background task that runs the purge sweep once a day, decoupled from
request handling. Each run opens a fresh unit of work; the only state shared
with request handlers is the store itself.
"""

import asyncio
import logging
from datetime import datetime
from typing import AsyncContextManager, Callable, Optional

from audit_retention.app.services.blob_store import IBlobStore
from audit_retention.app.services.retention_policy import RetentionPolicy
from audit_retention.app.services.store_errors import StoreUnavailable
from audit_retention.app.services.unit_of_work import UnitOfWork
from audit_retention.app.use_cases.documents import PurgeDueDocumentsUseCase, PurgeReport
from audit_retention.app.use_cases.documents.purge_due_documents_use_case import (
    DEFAULT_SYSTEM_USER_EMAIL,
)
from audit_retention.domain.base import utcnow

logger = logging.getLogger(__name__)

UnitOfWorkScope = Callable[[], AsyncContextManager[UnitOfWork]]


class PurgeScheduler:
    """
    Daily purge sweep at policy.purge_run_hour (UTC).

    stop() asks a running sweep to finish its current document and return,
    then cancels the task if it is still waiting for the next run.
    """

    def __init__(
        self,
        uow_scope: UnitOfWorkScope,
        blob_store: IBlobStore,
        policy: RetentionPolicy,
        system_user_email: str = DEFAULT_SYSTEM_USER_EMAIL,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.uow_scope = uow_scope
        self.blob_store = blob_store
        self.policy = policy
        self.system_user_email = system_user_email
        self.clock = clock
        self._task: Optional[asyncio.Task] = None
        self._stopping = asyncio.Event()
        self._sweep_lock = asyncio.Lock()

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def next_run_at(self) -> datetime:
        return self.policy.next_run_at(self.clock())

    def start(self) -> None:
        if self.running:
            return
        self._stopping.clear()
        self._task = asyncio.create_task(self._loop(), name="purge-scheduler")
        logger.info(f"Purge scheduler started, next run at {self.next_run_at().isoformat()}")

    async def stop(self, timeout: float = 30.0) -> None:
        if self._task is None:
            return
        self._stopping.set()
        try:
            await asyncio.wait_for(self._task, timeout=timeout)
        except asyncio.TimeoutError:
            logger.warning("Purge sweep did not stop in time, cancelling")
        except asyncio.CancelledError:
            pass
        finally:
            self._task = None
        logger.info("Purge scheduler stopped")

    async def run_once(self, now: Optional[datetime] = None) -> PurgeReport:
        """
        Run a single sweep. Sweeps never overlap within this process.

        Raises:
            StoreUnavailable: the store could not be reached to select items
        """
        async with self._sweep_lock:
            async with self.uow_scope() as uow:
                use_case = PurgeDueDocumentsUseCase(
                    uow,
                    self.blob_store,
                    self.policy,
                    system_user_email=self.system_user_email,
                )
                result = await use_case.execute(
                    now=now, should_stop=self._stopping.is_set
                )
        if result.is_err():
            raise StoreUnavailable(result.error.reason or result.error.message)
        return result.value

    async def _loop(self) -> None:
        while not self._stopping.is_set():
            delay = (self.next_run_at() - self.clock()).total_seconds()
            try:
                await asyncio.wait_for(self._stopping.wait(), timeout=max(delay, 0))
                break
            except asyncio.TimeoutError:
                pass

            try:
                report = await self.run_once()
            except Exception:
                logger.exception("Scheduled document purge failed")
                continue

            if report.failed:
                logger.error(
                    f"Scheduled purge left {report.failed} documents for the next run"
                )

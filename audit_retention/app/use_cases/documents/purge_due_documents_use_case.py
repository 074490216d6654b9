"""
Use Case: Purge Due Documents

Scheduled sweep that permanently erases soft-deleted documents whose
retention window has elapsed. Each document is purged in its own unit of
work, so an interrupted sweep never leaves an item half-purged and a failed
item does not hold up the rest.
"""

import logging
from datetime import datetime
from typing import Callable, Optional, Tuple
from uuid import UUID

from audit_retention.libs.result import Result, Return
from audit_retention.app.services.audit_recorder import AuditRecorder
from audit_retention.app.services.blob_store import IBlobStore
from audit_retention.app.services.document_eraser import DocumentEraser
from audit_retention.app.services.retention_policy import RetentionPolicy
from audit_retention.app.services.store_errors import (
    StoreUnavailable,
    bounded,
    store_unavailable_error,
)
from audit_retention.app.services.unit_of_work import UnitOfWork
from audit_retention.domain.base import as_naive_utc, utcnow
from audit_retention.domain.entities import User, UserRole
from audit_retention.domain.principal import Principal

from .dtos import PurgeFailure, PurgeReport

logger = logging.getLogger(__name__)

DEFAULT_SYSTEM_USER_EMAIL = "system@contracts.internal"

PURGED = "purged"
SKIPPED = "skipped"
FAILED = "failed"


class PurgeDueDocumentsUseCase:
    """
    Permanently delete soft-deleted documents past their purge deadline.

    Business Logic:
    1. Resolve (or create) the inactive system user the sweep acts as
    2. Select documents with deleted_at <= now - window
    3. Per document, in its own transaction:
       - re-read under row lock; skip if gone, restored or no longer due
       - delete blob (missing blob tolerated), detach audit references,
         delete row, record terminal DELETE event, commit
    4. Failures are collected into the report and the sweep continues

    Idempotent: a second run finds nothing left to purge.
    """

    def __init__(
        self,
        uow: UnitOfWork,
        blob_store: IBlobStore,
        policy: Optional[RetentionPolicy] = None,
        system_user_email: str = DEFAULT_SYSTEM_USER_EMAIL,
    ):
        self.uow = uow
        self.blob_store = blob_store
        self.policy = policy or RetentionPolicy()
        self.system_user_email = system_user_email
        self.recorder = AuditRecorder(uow, self.policy.store_timeout_seconds)
        self.eraser = DocumentEraser(
            uow, blob_store, self.recorder, self.policy.store_timeout_seconds
        )

    async def execute(
        self,
        now: Optional[datetime] = None,
        should_stop: Optional[Callable[[], bool]] = None,
    ) -> Result[PurgeReport]:
        now = as_naive_utc(now) if now else utcnow()
        cutoff = self.policy.purge_cutoff(now)

        timeout = self.policy.store_timeout_seconds
        try:
            async with self.uow:
                due_ids = await bounded(self.uow.documents.list_due_ids(cutoff), timeout)
                if not due_ids:
                    logger.info("No documents to purge")
                    return Return.ok(PurgeReport())

                system_user = await self._get_system_user()
                system_user_id = system_user.id
                await bounded(self.uow.commit(), timeout)
        except StoreUnavailable as exc:
            logger.error(f"Purge sweep could not start: {exc}")
            return Return.err(store_unavailable_error(exc))

        logger.info(f"Found {len(due_ids)} documents to permanently delete")

        principal = Principal(
            user_id=system_user_id,
            role=UserRole.ADMIN,
            user_agent="retention-scheduler",
        )

        report = PurgeReport()
        for document_id in due_ids:
            if should_stop is not None and should_stop():
                logger.info("Purge sweep stopped before completion")
                break

            try:
                outcome, failure = await self._purge_one(document_id, principal, now)
            except Exception as exc:
                logger.exception(f"Failed to purge document {document_id}")
                outcome = FAILED
                failure = PurgeFailure(
                    document_id=str(document_id), stage="row", message=str(exc)
                )

            if outcome == PURGED:
                report.purged += 1
                logger.info(f"Permanently deleted document {document_id}")
            elif outcome == SKIPPED:
                report.skipped += 1
            else:
                report.add_failure(failure)
                logger.warning(
                    f"Partial purge failure for document {document_id} "
                    f"at {failure.stage}: {failure.message}"
                )

        logger.info(
            f"Document purge completed: {report.purged} purged, "
            f"{report.skipped} skipped, {report.failed} failed"
        )

        return Return.ok(report)

    async def _purge_one(
        self, document_id: UUID, principal: Principal, now: datetime
    ) -> Tuple[str, Optional[PurgeFailure]]:
        timeout = self.policy.store_timeout_seconds
        async with self.uow:
            document = await bounded(
                self.uow.documents.get_by_id_for_update(document_id), timeout
            )

            # Purged by a concurrent run, restored, or reprieved by a wider window
            if (
                document is None
                or document.deleted_at is None
                or not self.policy.is_due(document.deleted_at, now)
            ):
                return SKIPPED, None

            result = await self.eraser.erase(
                document, principal, reason="retention_expired"
            )
            if result.is_err():
                error = result.error
                return FAILED, PurgeFailure(
                    document_id=str(document_id),
                    stage=error.details.get("stage", "audit"),
                    message=error.reason or error.message,
                )

            await bounded(self.uow.commit(), timeout)

        return PURGED, None

    async def _get_system_user(self) -> User:
        """Get or create the system user for automated tasks"""
        timeout = self.policy.store_timeout_seconds
        system_user = await bounded(
            self.uow.users.get_by_email(self.system_user_email), timeout
        )
        if system_user is not None:
            return system_user

        return await bounded(
            self.uow.users.create(
                User(
                    email=self.system_user_email,
                    first_name="System",
                    last_name="Automatisierung",
                    role=UserRole.ADMIN,
                    is_active=False,
                )
            ),
            timeout,
        )

"""
Use Case: Permanent Delete Document

Manual override of the retention timer for a document already in the trash.
"""

import logging
from typing import Optional
from uuid import UUID

from audit_retention.libs.result import Error, Result, Return
from audit_retention.app.services.audit_recorder import AuditRecorder
from audit_retention.app.services.blob_store import IBlobStore
from audit_retention.app.services.document_eraser import (
    DocumentEraser,
    partial_purge_failure,
)
from audit_retention.app.services.retention_policy import RetentionPolicy
from audit_retention.app.services.store_errors import (
    StoreUnavailable,
    bounded,
    store_unavailable_error,
)
from audit_retention.app.services.unit_of_work import UnitOfWork
from audit_retention.domain.entities import UserRole
from audit_retention.domain.principal import Principal

from .dtos import PermanentDeleteResponse

logger = logging.getLogger(__name__)


class PermanentDeleteDocumentUseCase:
    """
    Erase a soft-deleted document now, bypassing the retention window.

    Business Logic:
    1. Caller must have role ADMIN
    2. Lock the document row; a purged document is DOCUMENT_NOT_FOUND
    3. An active document is INVALID_STATE (soft delete it first)
    4. Same terminal effect as a scheduled purge, recorded under the caller
    """

    def __init__(
        self,
        uow: UnitOfWork,
        blob_store: IBlobStore,
        policy: Optional[RetentionPolicy] = None,
    ):
        self.uow = uow
        self.policy = policy or RetentionPolicy()
        self.recorder = AuditRecorder(uow, self.policy.store_timeout_seconds)
        self.eraser = DocumentEraser(
            uow, blob_store, self.recorder, self.policy.store_timeout_seconds
        )

    async def execute(
        self, document_id: UUID, principal: Principal
    ) -> Result[PermanentDeleteResponse]:
        if not principal.has_role(UserRole.ADMIN):
            return Return.err(
                Error(
                    "INSUFFICIENT_ROLE",
                    "Only administrators can permanently delete documents",
                )
            )

        timeout = self.policy.store_timeout_seconds
        async with self.uow:
            try:
                document = await bounded(
                    self.uow.documents.get_by_id_for_update(document_id), timeout
                )
            except StoreUnavailable as exc:
                logger.error(f"Permanent delete of document {document_id} failed: {exc}")
                return Return.err(store_unavailable_error(exc))

            if document is None:
                return Return.err(
                    Error("DOCUMENT_NOT_FOUND", "Document is no longer available")
                )

            if document.deleted_at is None:
                return Return.err(
                    Error(
                        "INVALID_STATE",
                        "Document must be deleted before it can be permanently removed",
                    )
                )

            result = await self.eraser.erase(document, principal, reason="manual")
            if result.is_err():
                return result

            try:
                await bounded(self.uow.commit(), timeout)
            except StoreUnavailable as exc:
                return Return.err(partial_purge_failure(document, "row", str(exc)))

        logger.info(f"Document {document_id} permanently deleted by {principal.user_id}")

        return Return.ok(
            PermanentDeleteResponse(status="purged", document_id=str(document_id))
        )

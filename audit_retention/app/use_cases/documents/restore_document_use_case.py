"""
Use Case: Restore Document

Brings a soft-deleted document back before it is purged.
"""

import logging
from typing import Optional
from uuid import UUID

from audit_retention.libs.result import Error, Result, Return
from audit_retention.app.services.audit_recorder import AuditEventInput, AuditRecorder
from audit_retention.app.services.retention_policy import RetentionPolicy
from audit_retention.app.services.store_errors import (
    StoreUnavailable,
    bounded,
    store_unavailable_error,
)
from audit_retention.app.services.unit_of_work import UnitOfWork
from audit_retention.domain.entities import AuditAction, EntityType, UserRole
from audit_retention.domain.principal import Principal

from .dtos import DocumentResponse

logger = logging.getLogger(__name__)


class RestoreDocumentUseCase:
    """
    Restore a soft-deleted document (SOFT_DELETED -> ACTIVE).

    Business Logic:
    1. Caller must have role ADMIN or MANAGER
    2. Lock the document row; a purged document is DOCUMENT_NOT_FOUND
    3. An active document is INVALID_STATE
    4. Clear deleted_at / deleted_by_id, which puts the document back into
       its contract's active document list
    5. Record a RESTORE audit event (never CREATE)
    6. Commit

    The row lock serializes this against a concurrent purge: either the
    restore wins and the sweep skips the now active row, or the purge wins
    and this finds no row.
    """

    def __init__(self, uow: UnitOfWork, policy: Optional[RetentionPolicy] = None):
        self.uow = uow
        self.policy = policy or RetentionPolicy()
        self.recorder = AuditRecorder(uow, self.policy.store_timeout_seconds)

    async def execute(
        self, document_id: UUID, principal: Principal
    ) -> Result[DocumentResponse]:
        # 1. Role check
        if not principal.has_role(UserRole.ADMIN, UserRole.MANAGER):
            return Return.err(
                Error(
                    "INSUFFICIENT_ROLE",
                    "You do not have permission to restore documents",
                )
            )

        timeout = self.policy.store_timeout_seconds
        try:
            async with self.uow:
                # 2. Get document under lock
                document = await bounded(
                    self.uow.documents.get_by_id_for_update(document_id), timeout
                )
                if document is None:
                    return Return.err(
                        Error("DOCUMENT_NOT_FOUND", "Document is no longer available")
                    )

                # 3. Only deleted documents can be restored
                if document.deleted_at is None:
                    return Return.err(Error("INVALID_STATE", "Document is not deleted"))

                # 4. Restore
                old_value = document.model_dump(mode="json")
                document.deleted_at = None
                document.deleted_by_id = None
                await bounded(self.uow.documents.update(document), timeout)

                # 5. Audit
                audit = await self.recorder.record(
                    AuditEventInput.from_principal(
                        principal,
                        action=AuditAction.RESTORE,
                        entity_type=EntityType.DOCUMENT,
                        entity_id=str(document.id),
                        old_value=old_value,
                        new_value=document,
                        contract_id=document.contract_id,
                        document_id=document.id,
                    )
                )
                if audit.is_err():
                    return audit

                # 6. Commit transaction
                await bounded(self.uow.commit(), timeout)
                response = DocumentResponse.from_document(document)
        except StoreUnavailable as exc:
            logger.error(f"Restore of document {document_id} failed: {exc}")
            return Return.err(store_unavailable_error(exc))

        logger.info(f"Document {document_id} restored by {principal.user_id}")

        return Return.ok(response)

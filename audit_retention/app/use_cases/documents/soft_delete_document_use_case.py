"""
Use Case: Soft Delete Document

Moves a document to the trash. Row and blob stay in place until restored or
purged after the retention window.
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
from audit_retention.domain.base import utcnow
from audit_retention.domain.entities import AuditAction, EntityType, UserRole
from audit_retention.domain.principal import Principal

from .dtos import DocumentResponse

logger = logging.getLogger(__name__)


class SoftDeleteDocumentUseCase:
    """
    Soft delete a document (ACTIVE -> SOFT_DELETED).

    Business Logic:
    1. Lock the document row
    2. Reject missing or already deleted documents (DOCUMENT_NOT_FOUND)
    3. Verify contract access (ADMIN, contract owner or creator)
    4. Stamp deleted_at / deleted_by_id
    5. Record DELETE audit event with before/after snapshots
    6. Commit
    """

    def __init__(self, uow: UnitOfWork, policy: Optional[RetentionPolicy] = None):
        self.uow = uow
        self.policy = policy or RetentionPolicy()
        self.recorder = AuditRecorder(uow, self.policy.store_timeout_seconds)

    async def execute(
        self, document_id: UUID, principal: Principal
    ) -> Result[DocumentResponse]:
        timeout = self.policy.store_timeout_seconds
        try:
            async with self.uow:
                # 1. Get document under lock
                document = await bounded(
                    self.uow.documents.get_by_id_for_update(document_id), timeout
                )

                # 2. Deleted documents are no longer available
                if document is None or document.deleted_at is not None:
                    return Return.err(
                        Error("DOCUMENT_NOT_FOUND", "Document is no longer available")
                    )

                # 3. Contract access
                contract = await bounded(
                    self.uow.contracts.get_by_id(document.contract_id), timeout
                )
                if contract is None:
                    return Return.err(Error("CONTRACT_NOT_FOUND", "Contract not found"))

                if not principal.has_role(UserRole.ADMIN) and principal.user_id not in (
                    contract.owner_id,
                    contract.created_by_id,
                ):
                    return Return.err(
                        Error("ACCESS_DENIED", "You do not have access to this contract")
                    )

                # 4. Mark as deleted
                old_value = document.model_dump(mode="json")
                document.deleted_at = utcnow()
                document.deleted_by_id = principal.user_id
                await bounded(self.uow.documents.update(document), timeout)

                # 5. Audit
                audit = await self.recorder.record(
                    AuditEventInput.from_principal(
                        principal,
                        action=AuditAction.DELETE,
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
            logger.error(f"Soft delete of document {document_id} failed: {exc}")
            return Return.err(store_unavailable_error(exc))

        logger.info(f"Document {document_id} soft-deleted by {principal.user_id}")

        return Return.ok(response)

"""
Document Eraser

Terminal step shared by the scheduled purge and the manual permanent delete.
The blob goes first; the row is deleted only after the blob is gone, and a
missing blob is tolerated, so a retry after any partial failure converges.
"""

import logging

from audit_retention.libs.result import Error, Result, Return
from audit_retention.app.services.audit_recorder import AuditEventInput, AuditRecorder
from audit_retention.app.services.blob_store import IBlobStore
from audit_retention.app.services.store_errors import StoreUnavailable, bounded
from audit_retention.app.services.unit_of_work import UnitOfWork
from audit_retention.domain.base import utcnow
from audit_retention.domain.entities import AuditAction, Document, EntityType
from audit_retention.domain.principal import Principal

logger = logging.getLogger(__name__)


def partial_purge_failure(document: Document, stage: str, reason: str) -> Error:
    return Error(
        "PARTIAL_PURGE_FAILURE",
        "Document could not be permanently deleted",
        reason=reason,
        details={"document_id": str(document.id), "stage": stage},
    )


class DocumentEraser:
    """
    Erases one soft-deleted document inside the caller's unit of work.

    The caller holds the row lock and commits; nothing here commits.
    """

    def __init__(
        self,
        uow: UnitOfWork,
        blob_store: IBlobStore,
        recorder: AuditRecorder,
        store_timeout: float = 10.0,
    ):
        self.uow = uow
        self.blob_store = blob_store
        self.recorder = recorder
        self.store_timeout = store_timeout

    async def erase(
        self, document: Document, principal: Principal, reason: str
    ) -> Result[Document]:
        old_value = document.model_dump(mode="json")

        # 1. Blob first; a missing blob means an earlier attempt got this far
        try:
            removed = await bounded(
                self.blob_store.delete(document.storage_key),
                self.store_timeout,
                store="blob",
            )
        except StoreUnavailable as exc:
            logger.warning(f"Blob delete failed for document {document.id}: {exc}")
            return Return.err(partial_purge_failure(document, "blob", str(exc)))

        if not removed:
            logger.info(
                f"Blob {document.storage_key} of document {document.id} already gone"
            )

        try:
            # 2. Purge cascade: the trail keeps its rows, only the link is cleared
            await bounded(
                self.uow.audit_events.detach_document(document.id), self.store_timeout
            )

            # 3. Metadata row
            await bounded(self.uow.documents.delete(document), self.store_timeout)
        except StoreUnavailable as exc:
            logger.warning(f"Row delete failed for document {document.id}: {exc}")
            return Return.err(partial_purge_failure(document, "row", str(exc)))

        # 4. Terminal audit event
        audit = await self.recorder.record(
            AuditEventInput.from_principal(
                principal,
                action=AuditAction.DELETE,
                entity_type=EntityType.DOCUMENT,
                entity_id=str(document.id),
                old_value=old_value,
                new_value={
                    "permanent": True,
                    "reason": reason,
                    "purged_at": utcnow().isoformat(),
                    "blob_removed": removed,
                },
                contract_id=document.contract_id,
            )
        )
        if audit.is_err():
            return audit

        return Return.ok(document)

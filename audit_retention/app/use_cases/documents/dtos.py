from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from audit_retention.domain.entities import Document


class DocumentResponse(BaseModel):
    id: str
    original_name: str
    mime_type: str
    size: int
    contract_id: str
    state: str
    deleted_at: Optional[str]
    deleted_by_id: Optional[str]

    @classmethod
    def from_document(cls, document: Document) -> "DocumentResponse":
        return cls(
            id=str(document.id),
            original_name=document.original_name,
            mime_type=document.mime_type,
            size=document.size,
            contract_id=str(document.contract_id),
            state=document.state.value,
            deleted_at=document.deleted_at.isoformat() + "Z"
            if document.deleted_at
            else None,
            deleted_by_id=str(document.deleted_by_id) if document.deleted_by_id else None,
        )


class DeletedDocumentView(BaseModel):
    """Row of the trash listing"""

    id: str
    original_name: str
    mime_type: str
    size: int
    contract_id: str
    contract_number: Optional[str]
    contract_title: Optional[str]
    deleted_at: str
    deleted_by_id: Optional[str]
    deleted_by_name: Optional[str]
    purge_at: str
    days_remaining: int


class PurgeFailure(BaseModel):
    document_id: str
    stage: str
    message: str


class PurgeReport(BaseModel):
    purged: int = 0
    skipped: int = 0
    failed: int = 0
    failures: List[PurgeFailure] = Field(default_factory=list)

    def add_failure(self, failure: PurgeFailure) -> None:
        self.failed += 1
        self.failures.append(failure)


class PermanentDeleteResponse(BaseModel):
    status: str
    document_id: str


class CleanupStats(BaseModel):
    pending_cleanup: int
    soft_deleted: int
    next_cleanup_at: datetime
    retention_days: int

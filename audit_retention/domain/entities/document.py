"""
Document Entity

File-bearing entity subject to two-phase deletion.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, Index, SQLModel

from audit_retention.domain.base import utcnow

from .enums import DocumentState


class Document(SQLModel, table=True):
    """
    Document entity - metadata row paired with a blob in the blob store.

    Business Rules:
    - Soft delete: deleted_at/deleted_by_id mark deletion, row and blob stay
    - Restore clears both stamps
    - Purge removes blob and row together; PURGED means the row is gone
    - The purge deadline (deleted_at + retention window) is never stored
    """

    __tablename__ = "documents"

    id: UUID = Field(default_factory=uuid4, primary_key=True)

    filename: str = Field(max_length=255)
    original_name: str = Field(max_length=255)
    mime_type: str = Field(max_length=255)
    size: int = Field(default=0)
    storage_key: str = Field(max_length=1024)  # Opaque blob store handle
    version: int = Field(default=1)
    is_main_document: bool = Field(default=False)
    checksum: str = Field(default="", max_length=64)

    contract_id: UUID = Field(foreign_key="contracts.id", index=True)

    # Soft delete support
    deleted_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))
    deleted_by_id: Optional[UUID] = Field(default=None, foreign_key="users.id")

    created_at: datetime = Field(
        default_factory=utcnow, sa_column=Column(DateTime, nullable=False)
    )

    __table_args__ = (Index("idx_document_deleted_at", "deleted_at"),)

    @property
    def state(self) -> DocumentState:
        if self.deleted_at is None:
            return DocumentState.ACTIVE
        return DocumentState.SOFT_DELETED

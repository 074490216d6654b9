"""
AuditEvent Entity

Immutable, append-only trail of every tracked operation.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, Index, JSON, SQLModel

from audit_retention.domain.base import utcnow

from .enums import AuditAction, EntityType


class AuditEvent(SQLModel, table=True):
    """
    AuditEvent entity - one row per recorded operation.

    Business Rules:
    - Never updated or deleted once inserted
    - The only permitted mutation is the purge cascade, which detaches
      document_id when the referenced document is permanently erased
    - entity_id / contract_id / document_id carry no foreign keys so the
      trail stays valid after the referenced entity is gone
    - old_value / new_value are deep copies taken at capture time
    """

    __tablename__ = "audit_events"

    id: UUID = Field(default_factory=uuid4, primary_key=True)

    action: AuditAction
    entity_type: EntityType
    entity_id: str = Field(max_length=255)

    old_value: Optional[dict] = Field(default=None, sa_column=Column(JSON))
    new_value: Optional[dict] = Field(default=None, sa_column=Column(JSON))

    # Provenance
    user_id: UUID
    ip_address: Optional[str] = Field(default=None, max_length=64)
    user_agent: Optional[str] = Field(default=None, max_length=512)

    # Scoped retrieval
    contract_id: Optional[UUID] = None
    document_id: Optional[UUID] = None

    created_at: datetime = Field(
        default_factory=utcnow, sa_column=Column(DateTime, nullable=False)
    )

    __table_args__ = (
        Index("idx_audit_created_at", "created_at"),
        Index("idx_audit_entity", "entity_type", "entity_id"),
        Index("idx_audit_user_id", "user_id"),
        Index("idx_audit_contract_id", "contract_id"),
        Index("idx_audit_document_id", "document_id"),
    )

"""
Contract Entity

Owning aggregate of documents; only the fields the audit trail shows.
"""

from datetime import datetime
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, SQLModel

from audit_retention.domain.base import utcnow


class Contract(SQLModel, table=True):
    """Contract entity - read-only to the audit & retention engine"""

    __tablename__ = "contracts"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    contract_number: str = Field(unique=True, index=True, max_length=50)
    title: str = Field(max_length=255)

    owner_id: UUID = Field(foreign_key="users.id")
    created_by_id: UUID = Field(foreign_key="users.id")

    created_at: datetime = Field(
        default_factory=utcnow, sa_column=Column(DateTime, nullable=False)
    )

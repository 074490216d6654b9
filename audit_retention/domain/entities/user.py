"""
User Entity

Person who acts on contracts; referenced by audit events and deletions.
"""

from datetime import datetime
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, SQLModel

from audit_retention.domain.base import utcnow

from .enums import UserRole


class User(SQLModel, table=True):
    """
    User entity - read-only to the audit & retention engine.

    Business Rules:
    - Email must be unique across all users
    - The system user (automated purges) is inactive and cannot log in
    """

    __tablename__ = "users"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    email: str = Field(unique=True, index=True, max_length=255)
    first_name: str = Field(max_length=100)
    last_name: str = Field(max_length=100)

    role: UserRole = Field(default=UserRole.USER)
    is_active: bool = Field(default=True)

    created_at: datetime = Field(
        default_factory=utcnow, sa_column=Column(DateTime, nullable=False)
    )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

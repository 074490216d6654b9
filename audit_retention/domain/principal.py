"""
Principal

Authenticated actor of an operation, supplied by the request pipeline.
The engine trusts it and performs no authentication of its own.
"""

from typing import Optional
from uuid import UUID

from pydantic import BaseModel

from .entities.enums import UserRole


class Principal(BaseModel):
    user_id: UUID
    role: UserRole
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None

    def has_role(self, *roles: UserRole) -> bool:
        return self.role in roles

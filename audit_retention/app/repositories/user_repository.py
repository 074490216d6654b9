from abc import ABC, abstractmethod
from typing import Dict, Iterable, Optional
from uuid import UUID

from audit_retention.domain.entities import User


class IUserRepository(ABC):
    """User repository interface - application layer"""

    @abstractmethod
    async def get_by_id(self, user_id: UUID) -> Optional[User]:
        """Get user by ID"""
        pass

    @abstractmethod
    async def get_by_ids(self, user_ids: Iterable[UUID]) -> Dict[UUID, User]:
        """Get users keyed by ID; unknown IDs are absent"""
        pass

    @abstractmethod
    async def get_by_email(self, email: str) -> Optional[User]:
        """Get user by email"""
        pass

    @abstractmethod
    async def create(self, user: User) -> User:
        """Create a new user"""
        pass

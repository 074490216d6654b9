from typing import Dict, Iterable, Optional
from uuid import UUID

from sqlmodel import col, select
from sqlmodel.ext.asyncio.session import AsyncSession

from audit_retention.app.repositories.user_repository import IUserRepository
from audit_retention.domain.entities import User


class UserRepository(IUserRepository):
    """User repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, user_id: UUID) -> Optional[User]:
        """Get user by ID"""
        stmt = select(User).where(User.id == user_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_ids(self, user_ids: Iterable[UUID]) -> Dict[UUID, User]:
        """Get users keyed by ID"""
        ids = [user_id for user_id in set(user_ids) if user_id is not None]
        if not ids:
            return {}
        stmt = select(User).where(col(User.id).in_(ids))
        result = await self.session.execute(stmt)
        return {user.id: user for user in result.scalars().all()}

    async def get_by_email(self, email: str) -> Optional[User]:
        """Get user by email"""
        stmt = select(User).where(User.email == email)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def create(self, user: User) -> User:
        """Create a new user"""
        self.session.add(user)
        await self.session.flush()
        await self.session.refresh(user)
        return user

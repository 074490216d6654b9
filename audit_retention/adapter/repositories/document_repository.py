from datetime import datetime
from typing import List, Optional
from uuid import UUID

from sqlalchemy import func
from sqlmodel import col, select
from sqlmodel.ext.asyncio.session import AsyncSession

from audit_retention.app.repositories.document_repository import IDocumentRepository
from audit_retention.domain.entities import Document


class DocumentRepository(IDocumentRepository):
    """Document repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, document_id: UUID) -> Optional[Document]:
        """Get document by ID"""
        stmt = select(Document).where(Document.id == document_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_id_for_update(self, document_id: UUID) -> Optional[Document]:
        """Get document by ID with a row lock (no-op on SQLite)"""
        stmt = (
            select(Document)
            .where(Document.id == document_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def update(self, document: Document) -> Document:
        """Update existing document"""
        self.session.add(document)
        await self.session.flush()
        await self.session.refresh(document)
        return document

    async def delete(self, document: Document) -> None:
        """Delete the metadata row"""
        await self.session.delete(document)
        await self.session.flush()

    async def get_active_by_contract(self, contract_id: UUID) -> List[Document]:
        stmt = (
            select(Document)
            .where(Document.contract_id == contract_id, Document.deleted_at.is_(None))
            .order_by(Document.created_at.desc())
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_deleted(self) -> List[Document]:
        stmt = (
            select(Document)
            .where(Document.deleted_at.is_not(None))
            .order_by(Document.deleted_at.desc(), col(Document.id).desc())
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_due_ids(self, cutoff: datetime) -> List[UUID]:
        stmt = (
            select(Document.id)
            .where(Document.deleted_at.is_not(None), Document.deleted_at <= cutoff)
            .order_by(Document.deleted_at, col(Document.id))
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def count_due(self, cutoff: datetime) -> int:
        stmt = select(func.count(col(Document.id))).where(
            Document.deleted_at.is_not(None), Document.deleted_at <= cutoff
        )
        result = await self.session.execute(stmt)
        return result.scalar_one()

    async def count_deleted(self) -> int:
        stmt = select(func.count(col(Document.id))).where(
            Document.deleted_at.is_not(None)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one()

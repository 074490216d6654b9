from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from audit_retention.domain.entities import Document


class IDocumentRepository(ABC):
    """Document repository interface - application layer"""

    @abstractmethod
    async def get_by_id(self, document_id: UUID) -> Optional[Document]:
        """Get document by ID, soft-deleted included"""
        pass

    @abstractmethod
    async def get_by_id_for_update(self, document_id: UUID) -> Optional[Document]:
        """Get document by ID holding a row lock until commit/rollback"""
        pass

    @abstractmethod
    async def update(self, document: Document) -> Document:
        pass

    @abstractmethod
    async def delete(self, document: Document) -> None:
        """Physically delete the metadata row"""
        pass

    @abstractmethod
    async def get_active_by_contract(self, contract_id: UUID) -> List[Document]:
        """Documents of a contract, soft-deleted excluded"""
        pass

    @abstractmethod
    async def list_deleted(self) -> List[Document]:
        """Soft-deleted documents, deleted_at DESC, id DESC"""
        pass

    @abstractmethod
    async def list_due_ids(self, cutoff: datetime) -> List[UUID]:
        """IDs of soft-deleted documents with deleted_at <= cutoff"""
        pass

    @abstractmethod
    async def count_due(self, cutoff: datetime) -> int:
        pass

    @abstractmethod
    async def count_deleted(self) -> int:
        pass

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Dict, List, Optional, Tuple
from uuid import UUID

from audit_retention.domain.audit_filter import AuditEventFilter
from audit_retention.domain.entities import AuditAction, AuditEvent, EntityType


class IAuditEventRepository(ABC):
    """AuditEvent repository interface - application layer"""

    @abstractmethod
    async def create(self, audit_event: AuditEvent) -> AuditEvent:
        """
        Insert a new audit event (immutable).

        Raises:
            StoreUnavailable: the store failed the insert
        """
        pass

    @abstractmethod
    async def find(
        self,
        event_filter: AuditEventFilter,
        limit: int,
        offset: int = 0,
        after: Optional[Tuple[datetime, UUID]] = None,
    ) -> List[AuditEvent]:
        """
        Find events matching the filter.

        Ordered by created_at DESC, id DESC. When ``after`` is given only
        rows strictly after that (created_at, id) position are returned.
        """
        pass

    @abstractmethod
    async def count(self, event_filter: AuditEventFilter) -> int:
        """Count events matching the filter"""
        pass

    @abstractmethod
    async def find_by_contract(self, contract_id: UUID) -> List[AuditEvent]:
        """All events for a contract, newest first"""
        pass

    @abstractmethod
    async def count_since(self, since: datetime) -> int:
        pass

    @abstractmethod
    async def count_by_action_since(self, since: datetime) -> Dict[AuditAction, int]:
        pass

    @abstractmethod
    async def count_by_entity_type_since(
        self, since: datetime
    ) -> Dict[EntityType, int]:
        pass

    @abstractmethod
    async def top_users_since(
        self, since: datetime, limit: int
    ) -> List[Tuple[UUID, int]]:
        """(user_id, event count) pairs, count DESC"""
        pass

    @abstractmethod
    async def detach_document(self, document_id: UUID) -> int:
        """
        Purge cascade: clear document_id on events referencing a purged
        document. Returns the number of events touched.
        """
        pass

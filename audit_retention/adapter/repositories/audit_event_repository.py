from datetime import datetime
from typing import Dict, List, Optional, Tuple
from uuid import UUID

from sqlalchemy import and_, func, or_, update
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import col, select
from sqlmodel.ext.asyncio.session import AsyncSession

from audit_retention.app.repositories.audit_event_repository import IAuditEventRepository
from audit_retention.app.services.store_errors import StoreUnavailable
from audit_retention.domain.audit_filter import AuditEventFilter
from audit_retention.domain.entities import AuditAction, AuditEvent, EntityType


def _apply_filter(stmt, event_filter: AuditEventFilter):
    if event_filter.user_id is not None:
        stmt = stmt.where(AuditEvent.user_id == event_filter.user_id)
    if event_filter.entity_type is not None:
        stmt = stmt.where(AuditEvent.entity_type == event_filter.entity_type)
    if event_filter.actions:
        stmt = stmt.where(col(AuditEvent.action).in_(event_filter.actions))
    if event_filter.contract_id is not None:
        stmt = stmt.where(AuditEvent.contract_id == event_filter.contract_id)
    if event_filter.date_from is not None:
        stmt = stmt.where(AuditEvent.created_at >= event_filter.date_from)
    if event_filter.date_to is not None:
        stmt = stmt.where(AuditEvent.created_at <= event_filter.date_to)
    return stmt


def _newest_first(stmt):
    return stmt.order_by(AuditEvent.created_at.desc(), col(AuditEvent.id).desc())


class AuditEventRepository(IAuditEventRepository):
    """AuditEvent repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, audit_event: AuditEvent) -> AuditEvent:
        """Create a new audit event (immutable)"""
        self.session.add(audit_event)
        try:
            await self.session.flush()
            await self.session.refresh(audit_event)
        except SQLAlchemyError as exc:
            raise StoreUnavailable(f"Audit insert failed: {exc}") from exc
        return audit_event

    async def find(
        self,
        event_filter: AuditEventFilter,
        limit: int,
        offset: int = 0,
        after: Optional[Tuple[datetime, UUID]] = None,
    ) -> List[AuditEvent]:
        stmt = _apply_filter(select(AuditEvent), event_filter)

        # Keyset continuation in (created_at DESC, id DESC) order
        if after is not None:
            created_at, event_id = after
            stmt = stmt.where(
                or_(
                    AuditEvent.created_at < created_at,
                    and_(
                        AuditEvent.created_at == created_at,
                        col(AuditEvent.id) < event_id,
                    ),
                )
            )

        stmt = _newest_first(stmt).offset(offset).limit(limit)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def count(self, event_filter: AuditEventFilter) -> int:
        stmt = _apply_filter(select(func.count(col(AuditEvent.id))), event_filter)
        result = await self.session.execute(stmt)
        return result.scalar_one()

    async def find_by_contract(self, contract_id: UUID) -> List[AuditEvent]:
        stmt = _newest_first(
            select(AuditEvent).where(AuditEvent.contract_id == contract_id)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def count_since(self, since: datetime) -> int:
        stmt = select(func.count(col(AuditEvent.id))).where(
            AuditEvent.created_at >= since
        )
        result = await self.session.execute(stmt)
        return result.scalar_one()

    async def count_by_action_since(self, since: datetime) -> Dict[AuditAction, int]:
        stmt = (
            select(AuditEvent.action, func.count(col(AuditEvent.id)))
            .where(AuditEvent.created_at >= since)
            .group_by(AuditEvent.action)
        )
        result = await self.session.execute(stmt)
        return {AuditAction(action): count for action, count in result.all()}

    async def count_by_entity_type_since(
        self, since: datetime
    ) -> Dict[EntityType, int]:
        stmt = (
            select(AuditEvent.entity_type, func.count(col(AuditEvent.id)))
            .where(AuditEvent.created_at >= since)
            .group_by(AuditEvent.entity_type)
        )
        result = await self.session.execute(stmt)
        return {EntityType(entity_type): count for entity_type, count in result.all()}

    async def top_users_since(
        self, since: datetime, limit: int
    ) -> List[Tuple[UUID, int]]:
        event_count = func.count(col(AuditEvent.id))
        stmt = (
            select(AuditEvent.user_id, event_count)
            .where(AuditEvent.created_at >= since)
            .group_by(AuditEvent.user_id)
            .order_by(event_count.desc(), col(AuditEvent.user_id))
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return [(user_id, count) for user_id, count in result.all()]

    async def detach_document(self, document_id: UUID) -> int:
        stmt = (
            update(AuditEvent)
            .where(col(AuditEvent.document_id) == document_id)
            .values(document_id=None)
        )
        result = await self.session.execute(stmt)
        return result.rowcount

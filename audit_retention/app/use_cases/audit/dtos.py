from typing import Any, Dict, List, Optional

from pydantic import BaseModel

from audit_retention.domain.audit_filter import AuditEventFilter
from audit_retention.domain.entities import AuditAction, EntityType

__all__ = [
    "AuditEventFilter",
    "AuditEventView",
    "PageMeta",
    "PaginatedAuditEvents",
    "TopUser",
    "AuditStats",
    "AuditExport",
    "to_event_view",
]


class AuditEventView(BaseModel):
    """Audit event as returned to callers, with the acting user resolved"""

    id: str
    action: AuditAction
    entity_type: EntityType
    entity_id: str
    old_value: Optional[Dict[str, Any]]
    new_value: Optional[Dict[str, Any]]
    user_id: str
    user_name: Optional[str]
    user_email: Optional[str]
    ip_address: Optional[str]
    user_agent: Optional[str]
    contract_id: Optional[str]
    document_id: Optional[str]
    created_at: str


class PageMeta(BaseModel):
    total: int
    page: int
    limit: int
    total_pages: int
    next_cursor: Optional[str]


class PaginatedAuditEvents(BaseModel):
    data: List[AuditEventView]
    meta: PageMeta


class TopUser(BaseModel):
    user_id: str
    name: str
    email: Optional[str]
    count: int


class AuditStats(BaseModel):
    window_days: int
    total_actions: int
    by_action: Dict[str, int]
    by_entity_type: Dict[str, int]
    top_users: List[TopUser]


class AuditExport(BaseModel):
    content: str
    row_count: int
    truncated: bool


def to_event_view(event, user=None) -> AuditEventView:
    return AuditEventView(
        id=str(event.id),
        action=event.action,
        entity_type=event.entity_type,
        entity_id=event.entity_id,
        old_value=event.old_value,
        new_value=event.new_value,
        user_id=str(event.user_id),
        user_name=user.full_name if user else None,
        user_email=user.email if user else None,
        ip_address=event.ip_address,
        user_agent=event.user_agent,
        contract_id=str(event.contract_id) if event.contract_id else None,
        document_id=str(event.document_id) if event.document_id else None,
        created_at=event.created_at.isoformat() + "Z",
    )

"""
Get Audit Events Use Case

Filtered, paginated retrieval of the audit trail.
"""

import base64
import logging
import math
from datetime import datetime
from typing import Optional, Tuple
from uuid import UUID

from audit_retention.libs.result import Error, Result, Return
from audit_retention.app.services.retention_policy import RetentionPolicy
from audit_retention.app.services.store_errors import (
    StoreUnavailable,
    bounded,
    store_unavailable_error,
)
from audit_retention.app.services.unit_of_work import UnitOfWork
from audit_retention.domain.entities import UserRole
from audit_retention.domain.principal import Principal

from .dtos import AuditEventFilter, PageMeta, PaginatedAuditEvents, to_event_view

logger = logging.getLogger(__name__)


def encode_cursor(created_at: datetime, event_id: UUID) -> str:
    raw = f"{created_at.isoformat()}|{event_id}"
    return base64.urlsafe_b64encode(raw.encode("utf-8")).decode("utf-8")


def decode_cursor(cursor: str) -> Tuple[datetime, UUID]:
    """
    Raises:
        ValueError: cursor was not produced by encode_cursor
    """
    try:
        raw = base64.urlsafe_b64decode(cursor.encode("utf-8")).decode("utf-8")
        created_at, event_id = raw.split("|", 1)
        return datetime.fromisoformat(created_at), UUID(event_id)
    except (ValueError, TypeError, UnicodeDecodeError) as exc:
        raise ValueError(f"Invalid cursor: {cursor}") from exc


class GetAuditEventsUseCase:
    """
    Use case for listing audit events.

    Business Rules:
    - Caller must have role ADMIN or MANAGER
    - Filters are ANDed; actions match by set membership
    - Ordered by created_at DESC, id DESC
    - limit is clamped to [1, max_page_size]
    - With a cursor, rows strictly after it are returned and page is ignored;
      this keyset mode is stable under concurrent inserts
    """

    def __init__(self, uow: UnitOfWork, policy: Optional[RetentionPolicy] = None):
        self.uow = uow
        self.policy = policy or RetentionPolicy()

    async def execute(
        self,
        principal: Principal,
        event_filter: AuditEventFilter,
        page: int = 1,
        limit: Optional[int] = None,
        cursor: Optional[str] = None,
    ) -> Result[PaginatedAuditEvents]:
        """
        Execute get audit events use case.

        Args:
            principal: Calling principal
            event_filter: Validated filter
            page: 1-indexed page number (offset mode)
            limit: Page size, clamped
            cursor: Keyset cursor from a previous response (optional)

        Returns:
            Result with data and pagination meta, or Error
        """
        if not principal.has_role(UserRole.ADMIN, UserRole.MANAGER):
            return Return.err(
                Error(
                    "INSUFFICIENT_ROLE",
                    "You do not have permission to view audit events",
                )
            )

        if page < 1:
            return Return.err(
                Error("VALIDATION_ERROR", "page must be greater than or equal to 1")
            )

        after = None
        if cursor:
            try:
                after = decode_cursor(cursor)
            except ValueError as exc:
                return Return.err(
                    Error("VALIDATION_ERROR", "Invalid pagination cursor", reason=str(exc))
                )

        limit = self.policy.clamp_limit(limit)
        offset = 0 if after else (page - 1) * limit

        timeout = self.policy.store_timeout_seconds
        try:
            async with self.uow:
                events = await bounded(
                    self.uow.audit_events.find(
                        event_filter, limit=limit + 1, offset=offset, after=after
                    ),
                    timeout,
                )
                total = await bounded(self.uow.audit_events.count(event_filter), timeout)

                has_more = len(events) > limit
                events = events[:limit]

                users = await bounded(
                    self.uow.users.get_by_ids({e.user_id for e in events}), timeout
                )
                data = [to_event_view(e, users.get(e.user_id)) for e in events]

                next_cursor = None
                if has_more and events:
                    last_event = events[-1]
                    next_cursor = encode_cursor(last_event.created_at, last_event.id)
        except StoreUnavailable as exc:
            logger.error(f"Audit events could not be read: {exc}")
            return Return.err(store_unavailable_error(exc))

        return Return.ok(
            PaginatedAuditEvents(
                data=data,
                meta=PageMeta(
                    total=total,
                    page=page,
                    limit=limit,
                    total_pages=math.ceil(total / limit) if total else 0,
                    next_cursor=next_cursor,
                ),
            )
        )

"""
Get Audit Stats Use Case

Activity summary over a trailing window of days.
"""

import logging
from datetime import datetime, timedelta
from typing import Optional

from audit_retention.libs.result import Error, Result, Return
from audit_retention.app.services.retention_policy import RetentionPolicy
from audit_retention.app.services.store_errors import (
    StoreUnavailable,
    bounded,
    store_unavailable_error,
)
from audit_retention.app.services.unit_of_work import UnitOfWork
from audit_retention.domain.base import as_naive_utc, utcnow
from audit_retention.domain.entities import AuditAction, EntityType, UserRole
from audit_retention.domain.principal import Principal

from .dtos import AuditStats, TopUser

logger = logging.getLogger(__name__)

MAX_WINDOW_DAYS = 3650
TOP_USERS_LIMIT = 5
UNKNOWN_USER_NAME = "Unknown user"


class GetAuditStatsUseCase:
    """
    Use case for audit statistics.

    Business Rules:
    - Caller must have role ADMIN
    - Window covers events with created_at >= now - window_days
    - by_action and by_entity_type list every member, zero when absent
    - top_users: at most 5, most active first; names resolved best-effort
    """

    def __init__(self, uow: UnitOfWork, policy: Optional[RetentionPolicy] = None):
        self.uow = uow
        self.policy = policy or RetentionPolicy()

    async def execute(
        self,
        principal: Principal,
        window_days: int = 30,
        now: Optional[datetime] = None,
    ) -> Result[AuditStats]:
        if not principal.has_role(UserRole.ADMIN):
            return Return.err(
                Error(
                    "INSUFFICIENT_ROLE",
                    "Only administrators can view audit statistics",
                )
            )

        if not 1 <= window_days <= MAX_WINDOW_DAYS:
            return Return.err(
                Error(
                    "VALIDATION_ERROR",
                    f"days must be between 1 and {MAX_WINDOW_DAYS}",
                )
            )

        now = as_naive_utc(now) if now else utcnow()
        since = now - timedelta(days=window_days)

        timeout = self.policy.store_timeout_seconds
        try:
            async with self.uow:
                events = self.uow.audit_events
                total = await bounded(events.count_since(since), timeout)
                action_counts = await bounded(events.count_by_action_since(since), timeout)
                entity_counts = await bounded(
                    events.count_by_entity_type_since(since), timeout
                )
                top = await bounded(events.top_users_since(since, TOP_USERS_LIMIT), timeout)
                users = await bounded(
                    self.uow.users.get_by_ids([user_id for user_id, _ in top]), timeout
                )

                top_users = []
                for user_id, count in top:
                    user = users.get(user_id)
                    top_users.append(
                        TopUser(
                            user_id=str(user_id),
                            name=user.full_name if user else UNKNOWN_USER_NAME,
                            email=user.email if user else None,
                            count=count,
                        )
                    )
        except StoreUnavailable as exc:
            logger.error(f"Audit statistics could not be computed: {exc}")
            return Return.err(store_unavailable_error(exc))

        return Return.ok(
            AuditStats(
                window_days=window_days,
                total_actions=total,
                by_action={a.value: action_counts.get(a, 0) for a in AuditAction},
                by_entity_type={t.value: entity_counts.get(t, 0) for t in EntityType},
                top_users=top_users,
            )
        )

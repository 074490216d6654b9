"""
Use Case: Get Cleanup Stats

Trash overview for operators: what the next sweep will erase and when.
"""

import logging
from datetime import datetime
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
from audit_retention.domain.entities import UserRole
from audit_retention.domain.principal import Principal

from .dtos import CleanupStats

logger = logging.getLogger(__name__)


class GetCleanupStatsUseCase:
    def __init__(self, uow: UnitOfWork, policy: Optional[RetentionPolicy] = None):
        self.uow = uow
        self.policy = policy or RetentionPolicy()

    async def execute(
        self, principal: Principal, now: Optional[datetime] = None
    ) -> Result[CleanupStats]:
        if not principal.has_role(UserRole.ADMIN):
            return Return.err(
                Error(
                    "INSUFFICIENT_ROLE",
                    "Only administrators can view cleanup statistics",
                )
            )

        now = as_naive_utc(now) if now else utcnow()

        timeout = self.policy.store_timeout_seconds
        try:
            async with self.uow:
                pending = await bounded(
                    self.uow.documents.count_due(self.policy.purge_cutoff(now)), timeout
                )
                deleted = await bounded(self.uow.documents.count_deleted(), timeout)
        except StoreUnavailable as exc:
            logger.error(f"Cleanup statistics could not be computed: {exc}")
            return Return.err(store_unavailable_error(exc))

        return Return.ok(
            CleanupStats(
                pending_cleanup=pending,
                soft_deleted=deleted,
                next_cleanup_at=self.policy.next_run_at(now),
                retention_days=self.policy.retention_days,
            )
        )

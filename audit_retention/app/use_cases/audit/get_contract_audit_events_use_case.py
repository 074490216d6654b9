"""
Get Contract Audit Events Use Case

Unpaginated audit history of a single contract.
"""

import logging
from typing import List, Optional
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

from .dtos import AuditEventView, to_event_view

logger = logging.getLogger(__name__)


class GetContractAuditEventsUseCase:
    """Caller must have role ADMIN or MANAGER; newest first"""

    def __init__(self, uow: UnitOfWork, policy: Optional[RetentionPolicy] = None):
        self.uow = uow
        self.policy = policy or RetentionPolicy()

    async def execute(
        self, principal: Principal, contract_id: UUID
    ) -> Result[List[AuditEventView]]:
        if not principal.has_role(UserRole.ADMIN, UserRole.MANAGER):
            return Return.err(
                Error(
                    "INSUFFICIENT_ROLE",
                    "You do not have permission to view audit events",
                )
            )

        timeout = self.policy.store_timeout_seconds
        try:
            async with self.uow:
                events = await bounded(
                    self.uow.audit_events.find_by_contract(contract_id), timeout
                )
                users = await bounded(
                    self.uow.users.get_by_ids({e.user_id for e in events}), timeout
                )
                views = [to_event_view(e, users.get(e.user_id)) for e in events]
        except StoreUnavailable as exc:
            logger.error(f"Audit history of contract {contract_id} could not be read: {exc}")
            return Return.err(store_unavailable_error(exc))

        return Return.ok(views)

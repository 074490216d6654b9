"""
Export Audit Events Use Case

CSV materialization of the filtered audit trail, bounded by the export cap.
"""

import logging
from typing import Optional

from audit_retention.libs.result import Error, Result, Return
from audit_retention.app.services.audit_csv import render_audit_csv
from audit_retention.app.services.audit_recorder import AuditEventInput, AuditRecorder
from audit_retention.app.services.retention_policy import RetentionPolicy
from audit_retention.app.services.store_errors import (
    StoreUnavailable,
    bounded,
    store_unavailable_error,
)
from audit_retention.app.services.unit_of_work import UnitOfWork
from audit_retention.domain.entities import AuditAction, EntityType, UserRole
from audit_retention.domain.principal import Principal

from .dtos import AuditEventFilter, AuditExport

logger = logging.getLogger(__name__)


class ExportAuditEventsUseCase:
    """
    Use case for exporting audit events as CSV.

    Business Rules:
    - Caller must have role ADMIN
    - Same filter semantics as the paginated listing, newest first
    - At most export_row_cap rows; beyond that the export is truncated, not
      failed, and the truncation is reported in the result
    - The export itself is recorded as an EXPORT event
    """

    def __init__(self, uow: UnitOfWork, policy: Optional[RetentionPolicy] = None):
        self.uow = uow
        self.policy = policy or RetentionPolicy()
        self.recorder = AuditRecorder(uow, self.policy.store_timeout_seconds)

    async def execute(
        self, principal: Principal, event_filter: AuditEventFilter
    ) -> Result[AuditExport]:
        if not principal.has_role(UserRole.ADMIN):
            return Return.err(
                Error(
                    "INSUFFICIENT_ROLE",
                    "Only administrators can export audit events",
                )
            )

        cap = self.policy.export_row_cap

        timeout = self.policy.store_timeout_seconds
        try:
            async with self.uow:
                events = await bounded(
                    self.uow.audit_events.find(event_filter, limit=cap + 1), timeout
                )
                truncated = len(events) > cap
                events = events[:cap]

                users = await bounded(
                    self.uow.users.get_by_ids({e.user_id for e in events}), timeout
                )
                contracts = await bounded(
                    self.uow.contracts.get_by_ids(
                        {e.contract_id for e in events if e.contract_id}
                    ),
                    timeout,
                )
                content = render_audit_csv(events, users, contracts)

                audit = await self.recorder.record(
                    AuditEventInput.from_principal(
                        principal,
                        action=AuditAction.EXPORT,
                        entity_type=EntityType.USER,
                        entity_id=str(principal.user_id),
                    )
                )
                if audit.is_err():
                    return audit

                await bounded(self.uow.commit(), timeout)
        except StoreUnavailable as exc:
            logger.error(f"Audit export failed for user {principal.user_id}: {exc}")
            return Return.err(store_unavailable_error(exc))

        if truncated:
            logger.warning(
                f"Audit export truncated at {cap} rows for user {principal.user_id}"
            )

        return Return.ok(
            AuditExport(content=content, row_count=len(events), truncated=truncated)
        )

"""
Use Case: List Deleted Documents

Trash view: soft-deleted documents with their remaining retention time.
"""

import logging
from datetime import datetime
from typing import List, Optional

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

from .dtos import DeletedDocumentView

logger = logging.getLogger(__name__)


class ListDeletedDocumentsUseCase:
    """
    Caller must have role ADMIN. Most recently deleted first.

    days_remaining = max(0, ceil((deleted_at + window - now) / 1 day)),
    computed at read time from the current window.
    """

    def __init__(self, uow: UnitOfWork, policy: Optional[RetentionPolicy] = None):
        self.uow = uow
        self.policy = policy or RetentionPolicy()

    async def execute(
        self, principal: Principal, now: Optional[datetime] = None
    ) -> Result[List[DeletedDocumentView]]:
        if not principal.has_role(UserRole.ADMIN):
            return Return.err(
                Error(
                    "INSUFFICIENT_ROLE",
                    "Only administrators can view deleted documents",
                )
            )

        now = as_naive_utc(now) if now else utcnow()

        timeout = self.policy.store_timeout_seconds
        try:
            async with self.uow:
                documents = await bounded(self.uow.documents.list_deleted(), timeout)
                contracts = await bounded(
                    self.uow.contracts.get_by_ids({d.contract_id for d in documents}),
                    timeout,
                )
                users = await bounded(
                    self.uow.users.get_by_ids(
                        {d.deleted_by_id for d in documents if d.deleted_by_id}
                    ),
                    timeout,
                )
                views = [
                    self._to_view(document, contracts, users, now)
                    for document in documents
                ]
        except StoreUnavailable as exc:
            logger.error(f"Deleted documents could not be listed: {exc}")
            return Return.err(store_unavailable_error(exc))

        return Return.ok(views)

    def _to_view(self, document, contracts, users, now: datetime) -> DeletedDocumentView:
        contract = contracts.get(document.contract_id)
        deleted_by = users.get(document.deleted_by_id)
        return DeletedDocumentView(
            id=str(document.id),
            original_name=document.original_name,
            mime_type=document.mime_type,
            size=document.size,
            contract_id=str(document.contract_id),
            contract_number=contract.contract_number if contract else None,
            contract_title=contract.title if contract else None,
            deleted_at=document.deleted_at.isoformat() + "Z",
            deleted_by_id=str(document.deleted_by_id) if document.deleted_by_id else None,
            deleted_by_name=deleted_by.full_name if deleted_by else None,
            purge_at=self.policy.purge_deadline(document.deleted_at).isoformat() + "Z",
            days_remaining=self.policy.days_remaining(document.deleted_at, now),
        )

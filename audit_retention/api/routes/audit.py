"""
Audit API Routes

Handles audit trail retrieval, statistics and CSV export.
"""

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status
from pydantic import ValidationError

from audit_retention.libs.result import Error
from audit_retention.api.error import ClientError, raise_for_error
from audit_retention.app.services.retention_policy import RetentionPolicy
from audit_retention.app.services.unit_of_work import UnitOfWork
from audit_retention.app.use_cases.audit import (
    ExportAuditEventsUseCase,
    GetAuditEventsUseCase,
    GetAuditStatsUseCase,
    GetContractAuditEventsUseCase,
)
from audit_retention.app.use_cases.audit.dtos import (
    AuditEventFilter,
    AuditEventView,
    AuditStats,
    PaginatedAuditEvents,
)
from audit_retention.depends import get_principal, get_retention_policy, get_unit_of_work
from audit_retention.domain.base import utcnow
from audit_retention.domain.principal import Principal

router = APIRouter(prefix="/audit-log", tags=["Audit"])


def get_event_filter(
    user_id: Optional[str] = Query(None, alias="userId"),
    entity_type: Optional[str] = Query(None, alias="entityType"),
    action: Optional[List[str]] = Query(None),
    contract_id: Optional[str] = Query(None, alias="contractId"),
    date_from: Optional[str] = Query(None, alias="dateFrom"),
    date_to: Optional[str] = Query(None, alias="dateTo"),
) -> AuditEventFilter:
    """Build the filter from query parameters; repeated or comma-separated actions"""
    actions = None
    if action:
        actions = [item.strip() for value in action for item in value.split(",") if item.strip()]

    try:
        return AuditEventFilter(
            user_id=user_id,
            entity_type=entity_type,
            actions=actions,
            contract_id=contract_id,
            date_from=date_from,
            date_to=date_to,
        )
    except ValidationError as exc:
        raise ClientError(
            Error("VALIDATION_ERROR", "Invalid audit filter", reason=str(exc)),
            status_code=status.HTTP_400_BAD_REQUEST,
        )


@router.get(
    "",
    status_code=status.HTTP_200_OK,
    response_model=PaginatedAuditEvents,
)
async def get_audit_events(
    event_filter: AuditEventFilter = Depends(get_event_filter),
    page: int = Query(1, description="1-indexed page number"),
    limit: Optional[int] = Query(None, description="Page size, clamped to 1-100"),
    cursor: Optional[str] = Query(None, description="Keyset pagination cursor"),
    principal: Principal = Depends(get_principal),
    uow: UnitOfWork = Depends(get_unit_of_work),
    policy: RetentionPolicy = Depends(get_retention_policy),
):
    """
    List audit events, newest first.

    Only accessible by ADMIN and MANAGER roles. When a cursor is given, page
    is ignored and rows strictly after the cursor are returned.

    Raises:
        - 400 Bad Request: VALIDATION_ERROR (filter, page or cursor)
        - 401 Unauthorized: Invalid or expired JWT
        - 403 Forbidden: INSUFFICIENT_ROLE
    """
    use_case = GetAuditEventsUseCase(uow, policy)
    result = await use_case.execute(
        principal, event_filter, page=page, limit=limit, cursor=cursor
    )

    if result.is_err():
        raise_for_error(result.error)

    return result.value


@router.get(
    "/stats",
    status_code=status.HTTP_200_OK,
    response_model=AuditStats,
)
async def get_audit_stats(
    days: int = Query(30, description="Window in days (1-3650)"),
    principal: Principal = Depends(get_principal),
    uow: UnitOfWork = Depends(get_unit_of_work),
    policy: RetentionPolicy = Depends(get_retention_policy),
):
    """
    Aggregate audit activity over the last `days` days. ADMIN only.
    """
    use_case = GetAuditStatsUseCase(uow, policy)
    result = await use_case.execute(principal, window_days=days)

    if result.is_err():
        raise_for_error(result.error)

    return result.value


@router.get("/export", status_code=status.HTTP_200_OK)
async def export_audit_events(
    event_filter: AuditEventFilter = Depends(get_event_filter),
    principal: Principal = Depends(get_principal),
    uow: UnitOfWork = Depends(get_unit_of_work),
    policy: RetentionPolicy = Depends(get_retention_policy),
):
    """
    Export filtered audit events as a semicolon-separated CSV. ADMIN only.

    The response carries X-Export-Row-Count and X-Export-Truncated headers;
    truncated is "true" when more rows matched than the export cap.
    """
    use_case = ExportAuditEventsUseCase(uow, policy)
    result = await use_case.execute(principal, event_filter)

    if result.is_err():
        raise_for_error(result.error)

    export = result.value
    filename = f"audit-log-{utcnow().date().isoformat()}.csv"
    return Response(
        content=export.content.encode("utf-8"),
        media_type="text/csv; charset=utf-8",
        headers={
            "Content-Disposition": f'attachment; filename="{filename}"',
            "X-Export-Row-Count": str(export.row_count),
            "X-Export-Truncated": "true" if export.truncated else "false",
        },
    )


@router.get(
    "/contract/{contract_id}",
    status_code=status.HTTP_200_OK,
    response_model=List[AuditEventView],
)
async def get_contract_audit_events(
    contract_id: UUID,
    principal: Principal = Depends(get_principal),
    uow: UnitOfWork = Depends(get_unit_of_work),
    policy: RetentionPolicy = Depends(get_retention_policy),
):
    """
    Full audit history of one contract, newest first. ADMIN and MANAGER only.
    """
    use_case = GetContractAuditEventsUseCase(uow, policy)
    result = await use_case.execute(principal, contract_id)

    if result.is_err():
        raise_for_error(result.error)

    return result.value

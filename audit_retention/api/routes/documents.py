"""
Document API Routes

Soft delete, restore, trash listing and permanent deletion of contract
documents.
"""

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, status

from audit_retention.libs.result import Error
from audit_retention.api.error import raise_for_error
from audit_retention.app.services.blob_store import IBlobStore
from audit_retention.app.services.retention_policy import RetentionPolicy
from audit_retention.app.services.unit_of_work import UnitOfWork
from audit_retention.app.use_cases.documents import (
    CleanupStats,
    DeletedDocumentView,
    DocumentResponse,
    GetCleanupStatsUseCase,
    ListDeletedDocumentsUseCase,
    PermanentDeleteDocumentUseCase,
    PermanentDeleteResponse,
    PurgeDueDocumentsUseCase,
    PurgeReport,
    RestoreDocumentUseCase,
    SoftDeleteDocumentUseCase,
)
from audit_retention.depends import (
    get_blob_store,
    get_principal,
    get_retention_policy,
    get_unit_of_work,
)
from audit_retention.domain.entities import UserRole
from audit_retention.domain.principal import Principal
from config import ApplicationConfig

router = APIRouter(prefix="/documents", tags=["Documents"])


@router.get(
    "/admin/deleted",
    status_code=status.HTTP_200_OK,
    response_model=List[DeletedDocumentView],
)
async def list_deleted_documents(
    principal: Principal = Depends(get_principal),
    uow: UnitOfWork = Depends(get_unit_of_work),
    policy: RetentionPolicy = Depends(get_retention_policy),
):
    """
    Trash listing with purge deadline and days remaining. ADMIN only.
    """
    use_case = ListDeletedDocumentsUseCase(uow, policy)
    result = await use_case.execute(principal)

    if result.is_err():
        raise_for_error(result.error)

    return result.value


@router.post(
    "/admin/purge",
    status_code=status.HTTP_200_OK,
    response_model=PurgeReport,
)
async def purge_due_documents(
    principal: Principal = Depends(get_principal),
    uow: UnitOfWork = Depends(get_unit_of_work),
    blob_store: IBlobStore = Depends(get_blob_store),
    policy: RetentionPolicy = Depends(get_retention_policy),
):
    """
    Run the retention sweep now instead of waiting for the nightly run.
    ADMIN only.
    """
    if not principal.has_role(UserRole.ADMIN):
        raise_for_error(
            Error("INSUFFICIENT_ROLE", "Only administrators can trigger a purge")
        )

    use_case = PurgeDueDocumentsUseCase(
        uow, blob_store, policy, system_user_email=ApplicationConfig.SYSTEM_USER_EMAIL
    )
    result = await use_case.execute()

    if result.is_err():
        raise_for_error(result.error)

    return result.value


@router.get(
    "/admin/cleanup-stats",
    status_code=status.HTTP_200_OK,
    response_model=CleanupStats,
)
async def get_cleanup_stats(
    principal: Principal = Depends(get_principal),
    uow: UnitOfWork = Depends(get_unit_of_work),
    policy: RetentionPolicy = Depends(get_retention_policy),
):
    """
    Pending and total soft-deleted documents plus the next sweep time. ADMIN only.
    """
    use_case = GetCleanupStatsUseCase(uow, policy)
    result = await use_case.execute(principal)

    if result.is_err():
        raise_for_error(result.error)

    return result.value


@router.delete(
    "/{document_id}",
    status_code=status.HTTP_200_OK,
    response_model=DocumentResponse,
)
async def soft_delete_document(
    document_id: UUID,
    principal: Principal = Depends(get_principal),
    uow: UnitOfWork = Depends(get_unit_of_work),
    policy: RetentionPolicy = Depends(get_retention_policy),
):
    """
    Move a document to the trash. The file is kept until the retention
    window elapses.

    Raises:
        - 403 Forbidden: ACCESS_DENIED (no access to the contract)
        - 404 Not Found: DOCUMENT_NOT_FOUND
    """
    use_case = SoftDeleteDocumentUseCase(uow, policy)
    result = await use_case.execute(document_id, principal)

    if result.is_err():
        raise_for_error(result.error)

    return result.value


@router.post(
    "/{document_id}/restore",
    status_code=status.HTTP_200_OK,
    response_model=DocumentResponse,
)
async def restore_document(
    document_id: UUID,
    principal: Principal = Depends(get_principal),
    uow: UnitOfWork = Depends(get_unit_of_work),
    policy: RetentionPolicy = Depends(get_retention_policy),
):
    """
    Restore a document from the trash. ADMIN and MANAGER only.

    Raises:
        - 404 Not Found: DOCUMENT_NOT_FOUND (missing or already purged)
        - 409 Conflict: INVALID_STATE (document is not deleted)
    """
    use_case = RestoreDocumentUseCase(uow, policy)
    result = await use_case.execute(document_id, principal)

    if result.is_err():
        raise_for_error(result.error)

    return result.value


@router.delete(
    "/{document_id}/permanent",
    status_code=status.HTTP_200_OK,
    response_model=PermanentDeleteResponse,
)
async def permanent_delete_document(
    document_id: UUID,
    principal: Principal = Depends(get_principal),
    uow: UnitOfWork = Depends(get_unit_of_work),
    blob_store: IBlobStore = Depends(get_blob_store),
    policy: RetentionPolicy = Depends(get_retention_policy),
):
    """
    Erase a deleted document immediately. ADMIN only.

    Raises:
        - 404 Not Found: DOCUMENT_NOT_FOUND
        - 409 Conflict: INVALID_STATE (document is still active)
        - 500 Internal Server Error: PARTIAL_PURGE_FAILURE
    """
    use_case = PermanentDeleteDocumentUseCase(uow, blob_store, policy)
    result = await use_case.execute(document_id, principal)

    if result.is_err():
        raise_for_error(result.error)

    return result.value

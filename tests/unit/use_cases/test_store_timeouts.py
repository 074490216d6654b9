import asyncio
from datetime import datetime

import pytest

from audit_retention.app.services.retention_policy import RetentionPolicy
from audit_retention.app.use_cases.audit import (
    ExportAuditEventsUseCase,
    GetAuditEventsUseCase,
    GetAuditStatsUseCase,
    GetContractAuditEventsUseCase,
)
from audit_retention.app.use_cases.audit.dtos import AuditEventFilter
from audit_retention.app.use_cases.documents import (
    GetCleanupStatsUseCase,
    ListDeletedDocumentsUseCase,
    PermanentDeleteDocumentUseCase,
    PurgeDueDocumentsUseCase,
    RestoreDocumentUseCase,
    SoftDeleteDocumentUseCase,
)
from audit_retention.domain.entities import UserRole
from tests.fixtures.factories import make_contract, make_document, make_principal, make_user

TIMEOUT = 0.05


async def never_returns(*args, **kwargs):
    await asyncio.sleep(3600)


@pytest.fixture
def policy():
    return RetentionPolicy(store_timeout_seconds=TIMEOUT)


@pytest.fixture
def admin():
    return make_principal(make_user(UserRole.ADMIN))


def assert_store_unavailable(result):
    assert result.is_err()
    assert result.error.code == "STORE_UNAVAILABLE"


@pytest.mark.asyncio
async def test_audit_listing_reports_stalled_store(mock_uow, policy, admin):
    mock_uow.audit_events.find.side_effect = never_returns

    result = await asyncio.wait_for(
        GetAuditEventsUseCase(mock_uow, policy).execute(admin, AuditEventFilter()),
        timeout=2,
    )

    assert_store_unavailable(result)


@pytest.mark.asyncio
async def test_contract_history_reports_stalled_store(mock_uow, policy, admin):
    mock_uow.audit_events.find_by_contract.side_effect = never_returns

    result = await asyncio.wait_for(
        GetContractAuditEventsUseCase(mock_uow, policy).execute(
            admin, make_contract(admin.user_id).id
        ),
        timeout=2,
    )

    assert_store_unavailable(result)


@pytest.mark.asyncio
async def test_stats_report_stalled_store(mock_uow, policy, admin):
    mock_uow.audit_events.top_users_since.side_effect = never_returns

    result = await asyncio.wait_for(
        GetAuditStatsUseCase(mock_uow, policy).execute(admin), timeout=2
    )

    assert_store_unavailable(result)


@pytest.mark.asyncio
async def test_export_reports_stalled_store_without_commit(mock_uow, policy, admin):
    mock_uow.contracts.get_by_ids.side_effect = never_returns

    result = await asyncio.wait_for(
        ExportAuditEventsUseCase(mock_uow, policy).execute(admin, AuditEventFilter()),
        timeout=2,
    )

    assert_store_unavailable(result)
    mock_uow.commit.assert_not_called()


@pytest.mark.asyncio
async def test_restore_reports_stalled_row_lock(mock_uow, policy, admin):
    mock_uow.documents.get_by_id_for_update.side_effect = never_returns

    result = await asyncio.wait_for(
        RestoreDocumentUseCase(mock_uow, policy).execute(
            make_document(make_user().id).id, admin
        ),
        timeout=2,
    )

    assert_store_unavailable(result)
    mock_uow.commit.assert_not_called()


@pytest.mark.asyncio
async def test_soft_delete_reports_stalled_commit(mock_uow, policy):
    owner = make_user(UserRole.USER)
    contract = make_contract(owner.id)
    document = make_document(contract.id)
    mock_uow.documents.get_by_id_for_update.return_value = document
    mock_uow.contracts.get_by_id.return_value = contract
    mock_uow.users.get_by_id.return_value = owner
    mock_uow.commit.side_effect = never_returns

    result = await asyncio.wait_for(
        SoftDeleteDocumentUseCase(mock_uow, policy).execute(
            document.id, make_principal(owner)
        ),
        timeout=2,
    )

    assert_store_unavailable(result)


@pytest.mark.asyncio
async def test_trash_listing_reports_stalled_store(mock_uow, policy, admin):
    mock_uow.documents.list_deleted.side_effect = never_returns

    result = await asyncio.wait_for(
        ListDeletedDocumentsUseCase(mock_uow, policy).execute(admin), timeout=2
    )

    assert_store_unavailable(result)


@pytest.mark.asyncio
async def test_cleanup_stats_report_stalled_store(mock_uow, policy, admin):
    mock_uow.documents.count_deleted.side_effect = never_returns

    result = await asyncio.wait_for(
        GetCleanupStatsUseCase(mock_uow, policy).execute(admin), timeout=2
    )

    assert_store_unavailable(result)


@pytest.mark.asyncio
async def test_permanent_delete_reports_stalled_row_lock(
    mock_uow, mock_blob_store, policy, admin
):
    mock_uow.documents.get_by_id_for_update.side_effect = never_returns

    result = await asyncio.wait_for(
        PermanentDeleteDocumentUseCase(mock_uow, mock_blob_store, policy).execute(
            make_document(make_user().id).id, admin
        ),
        timeout=2,
    )

    assert_store_unavailable(result)
    mock_blob_store.delete.assert_not_called()


@pytest.mark.asyncio
async def test_permanent_delete_stalled_row_delete_is_partial_failure(
    mock_uow, mock_blob_store, policy, admin
):
    document = make_document(make_user().id, deleted_at=datetime(2024, 1, 1))
    mock_uow.documents.get_by_id_for_update.return_value = document
    mock_uow.documents.delete.side_effect = never_returns

    result = await asyncio.wait_for(
        PermanentDeleteDocumentUseCase(mock_uow, mock_blob_store, policy).execute(
            document.id, admin
        ),
        timeout=2,
    )

    assert result.is_err()
    assert result.error.code == "PARTIAL_PURGE_FAILURE"
    assert result.error.details["stage"] == "row"
    mock_uow.commit.assert_not_called()


@pytest.mark.asyncio
async def test_purge_sweep_reports_stalled_selection(mock_uow, mock_blob_store, policy):
    mock_uow.documents.list_due_ids.side_effect = never_returns

    result = await asyncio.wait_for(
        PurgeDueDocumentsUseCase(mock_uow, mock_blob_store, policy).execute(
            now=datetime(2024, 6, 1)
        ),
        timeout=2,
    )

    assert_store_unavailable(result)

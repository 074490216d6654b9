from datetime import datetime

import pytest

from audit_retention.app.use_cases.documents import RestoreDocumentUseCase
from audit_retention.domain.entities import AuditAction, UserRole
from tests.fixtures.factories import (
    make_contract,
    make_document,
    make_principal,
    make_user,
)


@pytest.mark.asyncio
async def test_restore_clears_stamps_and_records_restore(mock_uow):
    manager = make_user(UserRole.MANAGER)
    contract = make_contract(manager.id)
    document = make_document(
        contract.id, deleted_at=datetime(2024, 1, 1), deleted_by_id=manager.id
    )

    mock_uow.documents.get_by_id_for_update.return_value = document
    mock_uow.users.get_by_id.return_value = manager

    use_case = RestoreDocumentUseCase(mock_uow)
    result = await use_case.execute(document.id, make_principal(manager))

    assert result.is_ok()
    assert result.value.state == "ACTIVE"
    assert document.deleted_at is None
    assert document.deleted_by_id is None

    event = mock_uow.audit_events.create.call_args[0][0]
    assert event.action == AuditAction.RESTORE
    assert event.old_value["deleted_at"] is not None
    assert event.new_value["deleted_at"] is None
    mock_uow.commit.assert_called_once()


@pytest.mark.asyncio
async def test_plain_user_cannot_restore(mock_uow):
    use_case = RestoreDocumentUseCase(mock_uow)
    result = await use_case.execute(
        make_document(make_user().id).id, make_principal(make_user(UserRole.USER))
    )

    assert result.is_err()
    assert result.error.code == "INSUFFICIENT_ROLE"
    mock_uow.documents.get_by_id_for_update.assert_not_called()


@pytest.mark.asyncio
async def test_restore_active_document_is_invalid_state(mock_uow):
    admin = make_user(UserRole.ADMIN)
    document = make_document(make_contract(admin.id).id)
    mock_uow.documents.get_by_id_for_update.return_value = document

    use_case = RestoreDocumentUseCase(mock_uow)
    result = await use_case.execute(document.id, make_principal(admin))

    assert result.is_err()
    assert result.error.code == "INVALID_STATE"
    assert result.error.message == "Document is not deleted"
    mock_uow.commit.assert_not_called()


@pytest.mark.asyncio
async def test_restore_purged_document_is_not_found(mock_uow):
    """A purged document has no row left"""
    admin = make_user(UserRole.ADMIN)
    mock_uow.documents.get_by_id_for_update.return_value = None

    use_case = RestoreDocumentUseCase(mock_uow)
    result = await use_case.execute(make_document(admin.id).id, make_principal(admin))

    assert result.is_err()
    assert result.error.code == "DOCUMENT_NOT_FOUND"

import pytest
from unittest.mock import AsyncMock, MagicMock


@pytest.fixture
def mock_uow():
    """Mock UnitOfWork with all repositories"""
    uow = MagicMock()
    uow.__aenter__ = AsyncMock(return_value=uow)
    uow.__aexit__ = AsyncMock(return_value=False)  # Must return False to not suppress exceptions
    uow.commit = AsyncMock()
    uow.rollback = AsyncMock()

    uow.audit_events = MagicMock()
    uow.audit_events.create = AsyncMock(side_effect=lambda event: event)
    uow.audit_events.find = AsyncMock(return_value=[])
    uow.audit_events.count = AsyncMock(return_value=0)
    uow.audit_events.find_by_contract = AsyncMock(return_value=[])
    uow.audit_events.count_since = AsyncMock(return_value=0)
    uow.audit_events.count_by_action_since = AsyncMock(return_value={})
    uow.audit_events.count_by_entity_type_since = AsyncMock(return_value={})
    uow.audit_events.top_users_since = AsyncMock(return_value=[])
    uow.audit_events.detach_document = AsyncMock(return_value=0)

    uow.documents = MagicMock()
    uow.documents.get_by_id = AsyncMock(return_value=None)
    uow.documents.get_by_id_for_update = AsyncMock(return_value=None)
    uow.documents.update = AsyncMock(side_effect=lambda document: document)
    uow.documents.delete = AsyncMock()
    uow.documents.list_deleted = AsyncMock(return_value=[])
    uow.documents.list_due_ids = AsyncMock(return_value=[])
    uow.documents.count_due = AsyncMock(return_value=0)
    uow.documents.count_deleted = AsyncMock(return_value=0)

    uow.users = MagicMock()
    uow.users.get_by_id = AsyncMock(return_value=None)
    uow.users.get_by_ids = AsyncMock(return_value={})
    uow.users.get_by_email = AsyncMock(return_value=None)
    uow.users.create = AsyncMock(side_effect=lambda user: user)

    uow.contracts = MagicMock()
    uow.contracts.get_by_id = AsyncMock(return_value=None)
    uow.contracts.get_by_ids = AsyncMock(return_value={})

    return uow


@pytest.fixture
def mock_blob_store():
    store = MagicMock()
    store.put = AsyncMock()
    store.get = AsyncMock(return_value=b"")
    store.delete = AsyncMock(return_value=True)
    store.exists = AsyncMock(return_value=True)
    return store

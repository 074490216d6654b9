from datetime import datetime
from types import SimpleNamespace
from uuid import uuid4

import pytest
from httpx import AsyncClient

from audit_retention.app.services.retention_policy import RetentionPolicy
from audit_retention.app.use_cases.documents import (
    ListDeletedDocumentsUseCase,
    PurgeDueDocumentsUseCase,
)
from audit_retention.domain.entities import Document, UserRole
from audit_retention.domain.principal import Principal
from tests.fixtures.factories import auth_headers


async def backdate_deletion(db_session, document_id, deleted_at: datetime):
    document = await db_session.get(Document, document_id)
    document.deleted_at = deleted_at
    db_session.add(document)
    await db_session.commit()


@pytest.mark.asyncio
async def test_owner_soft_deletes_document(client: AsyncClient, blob_store, seed):
    response = await client.delete(
        f"/api/documents/{seed.document.id}",
        headers=auth_headers(
            seed.owner, **{"X-Forwarded-For": "203.0.113.7, 10.0.0.1"}
        ),
    )

    assert response.status_code == 200
    body = response.json()
    assert body["state"] == "SOFT_DELETED"
    assert body["deleted_by_id"] == str(seed.owner.id)
    assert await blob_store.exists(seed.document.storage_key)

    response = await client.get(
        "/api/documents/admin/deleted", headers=auth_headers(seed.admin)
    )
    trash = response.json()
    assert [d["id"] for d in trash] == [str(seed.document.id)]
    assert trash[0]["contract_number"] == "V-2024-001"
    assert trash[0]["deleted_by_name"] == "Olga Owner"
    assert trash[0]["days_remaining"] == 90

    response = await client.get(
        "/api/audit-log",
        params={"entityType": "DOCUMENT", "action": "DELETE"},
        headers=auth_headers(seed.admin),
    )
    event = response.json()["data"][0]
    assert event["ip_address"] == "203.0.113.7"
    assert event["document_id"] == str(seed.document.id)
    assert event["contract_id"] == str(seed.contract.id)
    assert event["old_value"]["deleted_at"] is None
    assert event["new_value"]["deleted_at"] is not None


@pytest.mark.asyncio
async def test_soft_delete_access_and_repeat(client: AsyncClient, seed):
    response = await client.delete(
        f"/api/documents/{seed.document.id}", headers=auth_headers(seed.outsider)
    )
    assert response.status_code == 403
    assert response.json()["error"]["code"] == "ACCESS_DENIED"

    response = await client.delete(
        f"/api/documents/{seed.document.id}", headers=auth_headers(seed.owner)
    )
    assert response.status_code == 200

    response = await client.delete(
        f"/api/documents/{seed.document.id}", headers=auth_headers(seed.owner)
    )
    assert response.status_code == 404
    assert response.json()["error"]["code"] == "DOCUMENT_NOT_FOUND"


@pytest.mark.asyncio
async def test_token_for_unknown_user_is_rejected(client: AsyncClient, seed):
    ghost = SimpleNamespace(id=uuid4(), role=UserRole.ADMIN)

    response = await client.delete(
        f"/api/documents/{seed.document.id}", headers=auth_headers(ghost)
    )
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "UNKNOWN_PRINCIPAL"

    response = await client.get("/api/audit-log/export", headers=auth_headers(ghost))
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "UNKNOWN_PRINCIPAL"

    # Nothing was committed for the rejected delete
    response = await client.get(
        "/api/documents/admin/deleted", headers=auth_headers(seed.admin)
    )
    assert response.json() == []


@pytest.mark.asyncio
async def test_restore_returns_document_to_contract(client: AsyncClient, uow, seed):
    await client.delete(
        f"/api/documents/{seed.document.id}", headers=auth_headers(seed.owner)
    )

    response = await client.post(
        f"/api/documents/{seed.document.id}/restore", headers=auth_headers(seed.manager)
    )

    assert response.status_code == 200
    body = response.json()
    assert body["state"] == "ACTIVE"
    assert body["deleted_at"] is None
    assert body["deleted_by_id"] is None

    response = await client.get(
        "/api/documents/admin/deleted", headers=auth_headers(seed.admin)
    )
    assert response.json() == []

    async with uow:
        active = await uow.documents.get_active_by_contract(seed.contract.id)
        assert [d.id for d in active] == [seed.document.id]

    response = await client.get(
        "/api/audit-log", params={"action": "RESTORE"}, headers=auth_headers(seed.admin)
    )
    assert response.json()["meta"]["total"] == 1

    response = await client.post(
        f"/api/documents/{seed.document.id}/restore", headers=auth_headers(seed.manager)
    )
    assert response.status_code == 409
    assert response.json()["error"]["code"] == "INVALID_STATE"


@pytest.mark.asyncio
async def test_retention_lifecycle(client: AsyncClient, db_session, uow, blob_store, seed):
    """Deleted 2024-01-01, listed 2024-03-01, purged 2024-04-01"""
    await client.delete(
        f"/api/documents/{seed.document.id}", headers=auth_headers(seed.owner)
    )
    await backdate_deletion(db_session, seed.document.id, datetime(2024, 1, 1))
    policy = RetentionPolicy(retention_days=90)
    principal = Principal(user_id=seed.admin.id, role=seed.admin.role)

    # 2024 is a leap year: the deadline is 2024-03-31, 30 days after 2024-03-01
    result = await ListDeletedDocumentsUseCase(uow, policy).execute(
        principal, now=datetime(2024, 3, 1)
    )
    assert result.value[0].days_remaining == 30
    assert result.value[0].purge_at == "2024-03-31T00:00:00Z"

    result = await PurgeDueDocumentsUseCase(uow, blob_store, policy).execute(
        now=datetime(2024, 3, 30)
    )
    assert result.value.purged == 0

    result = await PurgeDueDocumentsUseCase(uow, blob_store, policy).execute(
        now=datetime(2024, 4, 1)
    )
    assert result.value.purged == 1
    assert result.value.failed == 0
    assert not await blob_store.exists(seed.document.storage_key)

    async with uow:
        assert await uow.documents.get_by_id(seed.document.id) is None

    response = await client.post(
        f"/api/documents/{seed.document.id}/restore", headers=auth_headers(seed.admin)
    )
    assert response.status_code == 404

    # Trail survives the purge, with the document link detached
    response = await client.get(
        "/api/audit-log",
        params={"entityType": "DOCUMENT", "action": "DELETE"},
        headers=auth_headers(seed.admin),
    )
    events = response.json()["data"]
    assert len(events) == 2
    assert all(e["entity_id"] == str(seed.document.id) for e in events)
    assert all(e["document_id"] is None for e in events)
    terminal = events[0]
    assert terminal["new_value"]["permanent"] is True
    assert terminal["new_value"]["reason"] == "retention_expired"
    assert terminal["user_email"] == "system@contracts.internal"

    result = await PurgeDueDocumentsUseCase(uow, blob_store, policy).execute(
        now=datetime(2024, 4, 2)
    )
    assert result.value.purged == 0
    assert result.value.failed == 0


@pytest.mark.asyncio
async def test_permanent_delete(client: AsyncClient, blob_store, seed):
    url = f"/api/documents/{seed.document.id}/permanent"

    response = await client.delete(url, headers=auth_headers(seed.admin))
    assert response.status_code == 409

    await client.delete(
        f"/api/documents/{seed.document.id}", headers=auth_headers(seed.owner)
    )

    response = await client.delete(url, headers=auth_headers(seed.manager))
    assert response.status_code == 403

    response = await client.delete(url, headers=auth_headers(seed.admin))
    assert response.status_code == 200
    assert response.json() == {"status": "purged", "document_id": str(seed.document.id)}
    assert not await blob_store.exists(seed.document.storage_key)

    response = await client.delete(url, headers=auth_headers(seed.admin))
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_manual_purge_and_cleanup_stats(client: AsyncClient, db_session, seed):
    await client.delete(
        f"/api/documents/{seed.document.id}", headers=auth_headers(seed.owner)
    )

    response = await client.get(
        "/api/documents/admin/cleanup-stats", headers=auth_headers(seed.admin)
    )
    assert response.status_code == 200
    stats = response.json()
    assert stats["pending_cleanup"] == 0
    assert stats["soft_deleted"] == 1
    assert stats["retention_days"] == 90

    response = await client.post(
        "/api/documents/admin/purge", headers=auth_headers(seed.admin)
    )
    assert response.json()["purged"] == 0

    await backdate_deletion(db_session, seed.document.id, datetime(2020, 1, 1))

    response = await client.get(
        "/api/documents/admin/cleanup-stats", headers=auth_headers(seed.admin)
    )
    assert response.json()["pending_cleanup"] == 1

    response = await client.post(
        "/api/documents/admin/purge", headers=auth_headers(seed.owner)
    )
    assert response.status_code == 403

    response = await client.post(
        "/api/documents/admin/purge", headers=auth_headers(seed.admin)
    )
    assert response.status_code == 200
    assert response.json() == {"purged": 1, "skipped": 0, "failed": 0, "failures": []}


@pytest.mark.asyncio
async def test_health(client: AsyncClient):
    response = await client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}

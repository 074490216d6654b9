import asyncio
from contextlib import asynccontextmanager
from datetime import datetime

import pytest

from audit_retention.app.services.purge_scheduler import PurgeScheduler
from audit_retention.app.services.retention_policy import RetentionPolicy
from audit_retention.app.services.store_errors import StoreUnavailable
from audit_retention.domain.entities import UserRole
from tests.fixtures.factories import make_contract, make_document, make_user


def _scope(uow):
    @asynccontextmanager
    async def scope():
        yield uow

    return scope


@pytest.mark.asyncio
async def test_run_once_sweeps_with_fresh_unit_of_work(mock_uow, mock_blob_store):
    system_user = make_user(UserRole.ADMIN)
    document = make_document(
        make_contract(system_user.id).id, deleted_at=datetime(2024, 1, 1)
    )
    mock_uow.documents.list_due_ids.return_value = [document.id]
    mock_uow.documents.get_by_id_for_update.return_value = document
    mock_uow.users.get_by_email.return_value = system_user
    mock_uow.users.get_by_id.return_value = system_user

    scheduler = PurgeScheduler(_scope(mock_uow), mock_blob_store, RetentionPolicy())
    report = await scheduler.run_once(now=datetime(2024, 4, 1))

    assert report.purged == 1
    mock_uow.users.get_by_email.assert_called_once_with("system@contracts.internal")


@pytest.mark.asyncio
async def test_run_once_raises_when_store_stalls(mock_uow, mock_blob_store):
    async def never_returns(*args, **kwargs):
        await asyncio.sleep(3600)

    mock_uow.documents.list_due_ids.side_effect = never_returns
    scheduler = PurgeScheduler(
        _scope(mock_uow), mock_blob_store, RetentionPolicy(store_timeout_seconds=0.05)
    )

    with pytest.raises(StoreUnavailable):
        await asyncio.wait_for(scheduler.run_once(now=datetime(2024, 4, 1)), timeout=2)


@pytest.mark.asyncio
async def test_next_run_uses_clock(mock_uow, mock_blob_store):
    scheduler = PurgeScheduler(
        _scope(mock_uow),
        mock_blob_store,
        RetentionPolicy(purge_run_hour=2),
        clock=lambda: datetime(2024, 4, 1, 3, 0),
    )

    assert scheduler.next_run_at() == datetime(2024, 4, 2, 2, 0)


@pytest.mark.asyncio
async def test_start_and_stop(mock_uow, mock_blob_store):
    scheduler = PurgeScheduler(_scope(mock_uow), mock_blob_store, RetentionPolicy())

    scheduler.start()
    assert scheduler.running

    await scheduler.stop(timeout=1)
    assert not scheduler.running
    mock_uow.documents.list_due_ids.assert_not_called()


@pytest.mark.asyncio
async def test_loop_runs_sweep_when_due(mock_uow, mock_blob_store):
    # start() log, next run lookup, delay computation; later reads push the next run a day out
    ticks = iter(
        [
            datetime(2024, 4, 1, 1, 0),
            datetime(2024, 4, 1, 1, 59, 59),
            datetime(2024, 4, 1, 2, 0),
        ]
    )

    def clock():
        return next(ticks, datetime(2024, 4, 1, 2, 0, 1))

    scheduler = PurgeScheduler(
        _scope(mock_uow), mock_blob_store, RetentionPolicy(), clock=clock
    )
    scheduler.start()
    for _ in range(50):
        if mock_uow.documents.list_due_ids.called:
            break
        await asyncio.sleep(0.01)
    await scheduler.stop(timeout=1)

    assert mock_uow.documents.list_due_ids.called

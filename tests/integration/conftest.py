from types import SimpleNamespace

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

from audit_retention.adapter.services.local_blob_store import LocalBlobStore
from audit_retention.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from audit_retention.depends import engine_options, get_blob_store, get_unit_of_work
from audit_retention.domain.entities import UserRole
from tests.fixtures.factories import make_contract, make_document, make_user, snapshot


@pytest_asyncio.fixture
async def engine(tmp_path):
    db_uri = f"sqlite+aiosqlite:///{tmp_path / 'test.db'}"
    engine = create_async_engine(db_uri, **engine_options(db_uri, 5))
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(engine):
    Session = sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with Session() as session:
        yield session


@pytest_asyncio.fixture
def uow(db_session):
    return SqlAlchemyUnitOfWork(db_session)


@pytest_asyncio.fixture
def blob_store(tmp_path):
    return LocalBlobStore(str(tmp_path / "blobs"))


@pytest_asyncio.fixture
async def client(db_session, blob_store):
    from audit_retention.api.app import create_app
    from config import ApplicationConfig

    app = create_app(ApplicationConfig)

    async def override_get_unit_of_work():
        yield SqlAlchemyUnitOfWork(db_session)

    app.dependency_overrides[get_unit_of_work] = override_get_unit_of_work
    app.dependency_overrides[get_blob_store] = lambda: blob_store

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest_asyncio.fixture
async def seed(db_session, blob_store):
    """Admin, manager, contract owner and one active document with its blob"""
    admin = make_user(UserRole.ADMIN, email="admin@example.com", first_name="Anna", last_name="Admin")
    manager = make_user(UserRole.MANAGER, email="manager@example.com", first_name="Max", last_name="Manager")
    owner = make_user(UserRole.USER, email="owner@example.com", first_name="Olga", last_name="Owner")
    outsider = make_user(UserRole.USER, email="outsider@example.com")
    contract = make_contract(owner.id, contract_number="V-2024-001", title="Mietvertrag; Lager")
    document = make_document(contract.id)

    db_session.add_all([admin, manager, owner, outsider])
    await db_session.flush()
    db_session.add(contract)
    await db_session.flush()
    db_session.add(document)
    await db_session.commit()

    await blob_store.put(document.storage_key, b"%PDF-1.4 test")

    return SimpleNamespace(
        admin=snapshot(admin),
        manager=snapshot(manager),
        owner=snapshot(owner),
        outsider=snapshot(outsider),
        contract=snapshot(contract),
        document=snapshot(document),
    )

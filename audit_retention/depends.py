from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional
from uuid import UUID

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel.ext.asyncio.session import AsyncSession

from config import ApplicationConfig
from audit_retention.adapter.services.local_blob_store import LocalBlobStore
from audit_retention.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from audit_retention.api.utils.jwt import verify_jwt
from audit_retention.app.services.blob_store import IBlobStore
from audit_retention.app.services.retention_policy import RetentionPolicy
from audit_retention.domain.entities import UserRole
from audit_retention.domain.principal import Principal


def engine_options(db_uri: str, timeout: float) -> dict:
    """Driver and pool timeouts so a stalled store surfaces as an error"""
    options = {"connect_args": {"timeout": timeout}}
    # In-memory SQLite runs on a static pool that takes no checkout timeout
    if ":memory:" not in db_uri:
        options["pool_timeout"] = timeout
    return options


engine = create_async_engine(
    ApplicationConfig.DB_URI,
    echo=False,
    future=True,
    **engine_options(ApplicationConfig.DB_URI, ApplicationConfig.STORE_TIMEOUT_SECONDS),
)

AsyncSessionLocal = sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
)

security = HTTPBearer()

retention_policy = RetentionPolicy.from_config(ApplicationConfig)
blob_store = LocalBlobStore(ApplicationConfig.STORAGE_PATH)


async def get_unit_of_work():
    async with AsyncSessionLocal() as session:
        yield SqlAlchemyUnitOfWork(session)


@asynccontextmanager
async def unit_of_work_scope() -> AsyncIterator[SqlAlchemyUnitOfWork]:
    """Unit of work outside a request, for background jobs"""
    async with AsyncSessionLocal() as session:
        yield SqlAlchemyUnitOfWork(session)


def get_blob_store() -> IBlobStore:
    return blob_store


def get_retention_policy() -> RetentionPolicy:
    return retention_policy


def client_ip(request: Request) -> Optional[str]:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip() or None
    return request.client.host if request.client else None


async def get_principal(
    request: Request,
    credentials: HTTPAuthorizationCredentials = Depends(security),
) -> Principal:
    """
    Dependency to build the calling principal from the Authorization header.

    Returns:
        Principal with user id, role and request origin

    Raises:
        HTTPException: 401 if token is invalid, expired or lacks claims
    """
    payload = verify_jwt(credentials.credentials)
    if payload is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
        )

    try:
        user_id = UUID(payload["user_id"])
        role = UserRole(payload["role"])
    except (KeyError, TypeError, ValueError):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token claims",
        )

    return Principal(
        user_id=user_id,
        role=role,
        ip_address=client_ip(request),
        user_agent=request.headers.get("user-agent"),
    )

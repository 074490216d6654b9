from sqlalchemy.exc import SQLAlchemyError
from sqlmodel.ext.asyncio.session import AsyncSession

from audit_retention.adapter.repositories.audit_event_repository import AuditEventRepository
from audit_retention.adapter.repositories.contract_repository import ContractRepository
from audit_retention.adapter.repositories.document_repository import DocumentRepository
from audit_retention.adapter.repositories.user_repository import UserRepository
from audit_retention.app.services.store_errors import StoreUnavailable
from audit_retention.app.services.unit_of_work import UnitOfWork


class SqlAlchemyUnitOfWork(UnitOfWork):
    """SQLAlchemy implementation of UnitOfWork pattern"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def __aenter__(self):
        # Initialize all repositories with the session
        self.audit_events = AuditEventRepository(self.session)
        self.documents = DocumentRepository(self.session)
        self.users = UserRepository(self.session)
        self.contracts = ContractRepository(self.session)
        return self

    async def __aexit__(self, *args):
        await self.rollback()

    async def commit(self):
        try:
            await self.session.commit()
        except SQLAlchemyError as exc:
            raise StoreUnavailable(f"Commit failed: {exc}") from exc

    async def rollback(self):
        await self.session.rollback()

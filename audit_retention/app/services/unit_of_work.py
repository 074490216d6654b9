from abc import ABC, abstractmethod

from audit_retention.app.repositories.audit_event_repository import IAuditEventRepository
from audit_retention.app.repositories.contract_repository import IContractRepository
from audit_retention.app.repositories.document_repository import IDocumentRepository
from audit_retention.app.repositories.user_repository import IUserRepository


class UnitOfWork(ABC):
    """Abstract UnitOfWork - defines repository access and transaction management"""

    # Repository properties (initialized in __aenter__)
    audit_events: IAuditEventRepository
    documents: IDocumentRepository
    users: IUserRepository
    contracts: IContractRepository

    @abstractmethod
    async def __aenter__(self):
        pass

    @abstractmethod
    async def __aexit__(self, *args):
        pass

    @abstractmethod
    async def commit(self):
        pass

    @abstractmethod
    async def rollback(self):
        pass

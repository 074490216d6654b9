from abc import ABC, abstractmethod
from typing import Dict, Iterable, Optional
from uuid import UUID

from audit_retention.domain.entities import Contract


class IContractRepository(ABC):
    """Contract repository interface - application layer"""

    @abstractmethod
    async def get_by_id(self, contract_id: UUID) -> Optional[Contract]:
        pass

    @abstractmethod
    async def get_by_ids(self, contract_ids: Iterable[UUID]) -> Dict[UUID, Contract]:
        pass

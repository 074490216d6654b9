from typing import Dict, Iterable, Optional
from uuid import UUID

from sqlmodel import col, select
from sqlmodel.ext.asyncio.session import AsyncSession

from audit_retention.app.repositories.contract_repository import IContractRepository
from audit_retention.domain.entities import Contract


class ContractRepository(IContractRepository):
    """Contract repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, contract_id: UUID) -> Optional[Contract]:
        """Get contract by ID"""
        stmt = select(Contract).where(Contract.id == contract_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_ids(self, contract_ids: Iterable[UUID]) -> Dict[UUID, Contract]:
        """Get contracts keyed by ID"""
        ids = [contract_id for contract_id in set(contract_ids) if contract_id is not None]
        if not ids:
            return {}
        stmt = select(Contract).where(col(Contract.id).in_(ids))
        result = await self.session.execute(stmt)
        return {contract.id: contract for contract in result.scalars().all()}

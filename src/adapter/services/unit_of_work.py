from sqlmodel.ext.asyncio.session import AsyncSession

from src.adapter.repositories.signature_request_repository import (
    SignatureRequestRepository,
)
from src.app.services.unit_of_work import UnitOfWork


class SqlAlchemyUnitOfWork(UnitOfWork):
    """SQLAlchemy implementation of UnitOfWork pattern"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def __aenter__(self):
        self.signature_requests = SignatureRequestRepository(self.session)
        return self

    async def __aexit__(self, *args):
        # Anything not committed inside the block is discarded
        await self.rollback()

    async def commit(self):
        await self.session.commit()

    async def rollback(self):
        await self.session.rollback()

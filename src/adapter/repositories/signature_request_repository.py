from typing import List, Optional

from sqlalchemy import func, update
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from src.app.repositories.signature_request_repository import (
    ISignatureRequestRepository,
)
from src.domain.entities import SignatureAuditEntry, SignatureRequest


class SignatureRequestRepository(ISignatureRequestRepository):
    """SignatureRequest repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_token(self, token: str) -> Optional[SignatureRequest]:
        """Get signature request by token"""
        stmt = (
            select(SignatureRequest)
            .where(SignatureRequest.token == token)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def create(self, signature_request: SignatureRequest) -> SignatureRequest:
        """Create a new signature request"""
        self.session.add(signature_request)
        await self.session.flush()
        await self.session.refresh(signature_request)
        return signature_request

    async def update(
        self, signature_request: SignatureRequest, expected_version: int
    ) -> bool:
        """Claim the row by bumping its version, then flush the new field values"""
        stmt = (
            update(SignatureRequest)
            .where(
                SignatureRequest.id == signature_request.id,
                SignatureRequest.version == expected_version,
            )
            .values(version=expected_version + 1)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        if result.rowcount != 1:
            return False

        signature_request.version = expected_version + 1
        self.session.add(signature_request)
        await self.session.flush()
        return True

    async def append_audit_entries(
        self, signature_request: SignatureRequest, entries: List[SignatureAuditEntry]
    ) -> List[SignatureAuditEntry]:
        """Append audit entries with consecutive sequence numbers"""
        stmt = select(func.max(SignatureAuditEntry.sequence)).where(
            SignatureAuditEntry.request_id == signature_request.id
        )
        result = await self.session.execute(stmt)
        last_sequence = result.scalar_one_or_none()
        next_sequence = 0 if last_sequence is None else last_sequence + 1

        for offset, entry in enumerate(entries):
            entry.request_id = signature_request.id
            entry.sequence = next_sequence + offset
            self.session.add(entry)

        await self.session.flush()
        return entries

    async def list_audit_entries(self, request_id: str) -> List[SignatureAuditEntry]:
        """Get audit entries ordered by sequence"""
        stmt = (
            select(SignatureAuditEntry)
            .where(SignatureAuditEntry.request_id == request_id)
            .order_by(SignatureAuditEntry.sequence)
        )
        result = await self.session.exec(stmt)
        return list(result.all())

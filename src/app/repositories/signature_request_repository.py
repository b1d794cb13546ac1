from abc import ABC, abstractmethod
from typing import List, Optional

from src.domain.entities import SignatureAuditEntry, SignatureRequest


class ISignatureRequestRepository(ABC):
    """SignatureRequest repository interface - application layer"""

    @abstractmethod
    async def get_by_token(self, token: str) -> Optional[SignatureRequest]:
        """Get signature request by token, always reading the stored row"""
        pass

    @abstractmethod
    async def create(self, signature_request: SignatureRequest) -> SignatureRequest:
        """Create a new signature request"""
        pass

    @abstractmethod
    async def update(
        self, signature_request: SignatureRequest, expected_version: int
    ) -> bool:
        """
        Compare-and-swap update.

        Writes the request only if the stored version still equals
        expected_version, bumping it by one. Returns False when another
        writer got there first; nothing is written in that case.
        """
        pass

    @abstractmethod
    async def append_audit_entries(
        self, signature_request: SignatureRequest, entries: List[SignatureAuditEntry]
    ) -> List[SignatureAuditEntry]:
        """Append entries after the existing audit trail, in the given order"""
        pass

    @abstractmethod
    async def list_audit_entries(self, request_id: str) -> List[SignatureAuditEntry]:
        """Get the audit trail of a request in audit order"""
        pass

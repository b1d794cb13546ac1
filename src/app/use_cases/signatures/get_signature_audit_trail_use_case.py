"""
Get Signature Audit Trail Use Case

Issuer-side view of a signature request with its full audit trail.
"""

from datetime import datetime
from typing import Callable

from libs.result import Result, Return
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utcnow

from .audit_trail import not_found_error
from .dtos import AuditEntryView, SignatureRequestDetail, isoformat_utc


class GetSignatureAuditTrailUseCase:
    """
    Use case for reading a signature request's audit trail.

    Business Rules:
    - Read only; never persists expiry
    - status is the effective status at the time of the call
    - Entries are returned in audit order
    """

    def __init__(self, uow: UnitOfWork, clock: Callable[[], datetime] = utcnow):
        self.uow = uow
        self.clock = clock

    async def execute(self, token: str) -> Result[SignatureRequestDetail]:
        async with self.uow:
            signature_request = await self.uow.signature_requests.get_by_token(token)
            if signature_request is None:
                return Return.err(not_found_error())

            entries = await self.uow.signature_requests.list_audit_entries(
                signature_request.id
            )

            return Return.ok(
                SignatureRequestDetail(
                    id=signature_request.id,
                    document_id=signature_request.document_id,
                    document_name=signature_request.document_name,
                    document_url=signature_request.document_url,
                    signer_name=signature_request.signer_name,
                    signer_email=signature_request.signer_email,
                    requested_by=signature_request.requested_by,
                    requested_at=isoformat_utc(signature_request.requested_at),
                    expires_at=isoformat_utc(signature_request.expires_at),
                    status=signature_request.effective_status(self.clock()).value,
                    signature=signature_request.signature,
                    signed_at=isoformat_utc(signature_request.signed_at),
                    ip_address=signature_request.ip_address,
                    signed_document_url=signature_request.signed_document_url,
                    document_sha256=signature_request.document_sha256,
                    signed_document_sha256=signature_request.signed_document_sha256,
                    audit_trail=[
                        AuditEntryView(
                            action=entry.action,
                            timestamp=isoformat_utc(entry.timestamp),
                            ip_address=entry.ip_address,
                            user_agent=entry.user_agent,
                        )
                        for entry in entries
                    ],
                )
            )

"""
View Signature Request Use Case

Signer opens the signing link.
"""

import logging
from datetime import datetime
from typing import Callable, Optional

from libs.result import Result, Return
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utcnow
from src.domain.entities import SignatureRequest, SignatureRequestStatus

from .audit_trail import (
    MAX_UPDATE_ATTEMPTS,
    already_signed_error,
    concurrent_update_error,
    expired_error,
    new_audit_entry,
    not_found_error,
    persist_expiry,
    short_token,
)
from .dtos import SignatureRequestPublicView, isoformat_utc

logger = logging.getLogger(__name__)


def to_public_view(signature_request: SignatureRequest) -> SignatureRequestPublicView:
    return SignatureRequestPublicView(
        id=signature_request.id,
        document_name=signature_request.document_name,
        document_url=signature_request.document_url,
        signer_name=signature_request.signer_name,
        signer_email=signature_request.signer_email,
        requested_by=signature_request.requested_by,
        requested_at=isoformat_utc(signature_request.requested_at),
        expires_at=isoformat_utc(signature_request.expires_at),
        status=signature_request.status.value,
    )


class ViewSignatureRequestUseCase:
    """
    Use case for a signer opening a signature request.

    Business Rules:
    - Unknown token -> SIGNATURE_REQUEST_NOT_FOUND
    - Past expiry and not signed -> persist expired once, SIGNATURE_REQUEST_EXPIRED
    - Already signed -> SIGNATURE_REQUEST_ALREADY_SIGNED with signedAt
    - pending -> viewed, audited once; repeated views change nothing
    - Response never includes audit trail, IP address or signature
    """

    def __init__(self, uow: UnitOfWork, clock: Callable[[], datetime] = utcnow):
        self.uow = uow
        self.clock = clock

    async def execute(
        self,
        token: str,
        ip_address: str = "unknown",
        user_agent: Optional[str] = None,
    ) -> Result[SignatureRequestPublicView]:
        """
        Execute view signature request use case.

        Args:
            token: Signature request token from the signing URL
            ip_address: Observed IP of the signer
            user_agent: Signer's User-Agent header

        Returns:
            Result with SignatureRequestPublicView DTO, or Error
        """
        for _ in range(MAX_UPDATE_ATTEMPTS):
            async with self.uow:
                signature_request = await self.uow.signature_requests.get_by_token(token)
                if signature_request is None:
                    return Return.err(not_found_error())

                now = self.clock()
                status = signature_request.effective_status(now)

                if status == SignatureRequestStatus.expired:
                    await persist_expiry(
                        self.uow, signature_request, now, ip_address, user_agent
                    )
                    return Return.err(expired_error())

                if status == SignatureRequestStatus.signed:
                    return Return.err(already_signed_error(signature_request))

                if status == SignatureRequestStatus.viewed:
                    return Return.ok(to_public_view(signature_request))

                expected_version = signature_request.version
                signature_request.status = SignatureRequestStatus.viewed
                if not await self.uow.signature_requests.update(
                    signature_request, expected_version
                ):
                    # Someone else moved it; re-read and decide again
                    continue

                await self.uow.signature_requests.append_audit_entries(
                    signature_request,
                    [
                        new_audit_entry(
                            "Document viewed by signer", now, ip_address, user_agent
                        )
                    ],
                )
                await self.uow.commit()

                logger.info("Signature request %s viewed", short_token(token))
                return Return.ok(to_public_view(signature_request))

        return Return.err(concurrent_update_error())

"""
Send Signature Request Use Case

Creates a signature request and notifies the signer.
"""

import logging
from datetime import datetime, timedelta
from typing import Callable, Optional

from pydantic.alias_generators import to_camel

from libs.result import Error, Result, Return
from src.app.services.email_sender import IEmailSender, NotificationError, OutgoingEmail
from src.app.services.email_templates import render_signature_request_email
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import generate_request_id, generate_token, utcnow
from src.domain.entities import SignatureRequest, SignatureRequestStatus

from .audit_trail import append_audit_entry, new_audit_entry, short_token
from .dtos import SendSignatureRequestCommand, SendSignatureRequestResponse, isoformat_utc

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = (
    "document_id",
    "document_name",
    "document_url",
    "signer_email",
    "signer_name",
)


class SendSignatureRequestUseCase:
    """
    Use case for issuing a signature request.

    Business Rules:
    - documentId, documentName, documentUrl, signerEmail, signerName are required
    - token (64 hex chars) and id (32 hex chars) are generated independently
    - Request expires ttl_days after creation
    - Record is committed before any email is attempted
    - Email is best effort: failure or missing configuration still returns
      the signing URL so it can be shared another way
    """

    def __init__(
        self,
        uow: UnitOfWork,
        email_sender: IEmailSender,
        base_url: str,
        ttl_days: int = 7,
        default_requested_by: str = "PulseCRM User",
        support_email: str = "support@pulsecrm.com",
        clock: Callable[[], datetime] = utcnow,
    ):
        self.uow = uow
        self.email_sender = email_sender
        self.base_url = base_url
        self.ttl_days = ttl_days
        self.default_requested_by = default_requested_by
        self.support_email = support_email
        self.clock = clock

    def signature_url(self, token: str) -> str:
        return f"{self.base_url.rstrip('/')}/sign/{token}"

    async def execute(
        self, command: SendSignatureRequestCommand, ip_address: str = "unknown"
    ) -> Result[SendSignatureRequestResponse]:
        """
        Execute send signature request use case.

        Args:
            command: Document and signer details
            ip_address: Observed IP of the issuing client

        Returns:
            Result with SendSignatureRequestResponse DTO, or Error
        """
        missing = [
            name
            for name in REQUIRED_FIELDS
            if not (getattr(command, name) or "").strip()
        ]
        if missing:
            return Return.err(
                Error(
                    "VALIDATION_ERROR",
                    "Missing required fields",
                    {"fields": [to_camel(name) for name in missing]},
                )
            )

        now = self.clock()
        token = generate_token()
        requested_by = (command.requested_by or "").strip() or self.default_requested_by

        async with self.uow:
            signature_request = SignatureRequest(
                id=generate_request_id(),
                token=token,
                document_id=command.document_id.strip(),
                document_name=command.document_name.strip(),
                document_url=command.document_url.strip(),
                signer_name=command.signer_name.strip(),
                signer_email=command.signer_email.strip(),
                requested_by=requested_by,
                status=SignatureRequestStatus.pending,
                requested_at=now,
                expires_at=now + timedelta(days=self.ttl_days),
            )
            await self.uow.signature_requests.create(signature_request)
            await self.uow.signature_requests.append_audit_entries(
                signature_request,
                [new_audit_entry("Signature request created", now, ip_address)],
            )
            await self.uow.commit()

            request_id = signature_request.id
            expires_at = signature_request.expires_at
            signature_url = self.signature_url(token)
            email = self._signer_email(signature_request, signature_url, command.message)

        logger.info(
            "Signature request %s created for document %s",
            short_token(token),
            command.document_id,
        )

        email_sent, email_error = await self._notify_signer(email)

        action = (
            "Signature request email sent"
            if email_sent
            else "Signature request created (link generated)"
        )
        await append_audit_entry(
            self.uow, token, new_audit_entry(action, self.clock(), ip_address)
        )

        return Return.ok(
            SendSignatureRequestResponse(
                success=True,
                message=(
                    "Signature request sent successfully"
                    if email_sent
                    else "Signature link generated successfully"
                ),
                request_id=request_id,
                token=token,
                signature_url=signature_url,
                expires_at=isoformat_utc(expires_at),
                email_sent=email_sent,
                email_error=email_error,
            )
        )

    def _signer_email(
        self,
        signature_request: SignatureRequest,
        signature_url: str,
        message: Optional[str],
    ) -> OutgoingEmail:
        return OutgoingEmail(
            to=signature_request.signer_email,
            subject=f"Signature Requested: {signature_request.document_name}",
            html=render_signature_request_email(
                signer_name=signature_request.signer_name,
                requested_by=signature_request.requested_by,
                document_name=signature_request.document_name,
                signature_url=signature_url,
                requested_at=signature_request.requested_at,
                ttl_days=self.ttl_days,
                support_email=self.support_email,
                message=message,
            ),
        )

    async def _notify_signer(self, email: OutgoingEmail) -> tuple[bool, Optional[str]]:
        if not self.email_sender.is_configured:
            logger.info(
                "Email service not configured, signature link generated but not sent"
            )
            return False, None

        try:
            await self.email_sender.send(email)
        except NotificationError as exc:
            logger.warning("Signature request email to %s failed: %s", email.to, exc)
            return False, "Failed to send email"

        return True, None

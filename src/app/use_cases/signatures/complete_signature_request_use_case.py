"""
Complete Signature Request Use Case

Signer submits a typed signature; the document is stamped and
confirmation emails go out with the signed PDF attached.
"""

import hashlib
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, List, Optional

from libs.result import Error, Result, Return
from src.app.services.document_storage import DocumentStorageError, IDocumentStorage
from src.app.services.email_sender import (
    EmailAttachment,
    IEmailSender,
    NotificationError,
    OutgoingEmail,
)
from src.app.services.email_templates import (
    format_timestamp,
    render_requester_confirmation_email,
    render_signer_confirmation_email,
)
from src.app.services.pdf_stamper import (
    PdfStampError,
    signature_block_lines,
    stamp_signature_block,
)
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utcnow
from src.domain.entities import (
    SignatureAuditEntry,
    SignatureRequest,
    SignatureRequestStatus,
)

from .audit_trail import (
    already_signed_error,
    append_audit_entry,
    concurrent_update_error,
    expired_error,
    new_audit_entry,
    not_found_error,
    persist_expiry,
    short_token,
)
from .dtos import CompleteSignatureResponse, isoformat_utc

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _PendingSignature:
    """Fields read in the guard phase, detached from the session"""

    request_id: str
    token: str
    document_url: str
    version: int


@dataclass(frozen=True)
class _StampedDocument:
    content: bytes
    url: str
    source_sha256: str
    sha256: str


def signed_filename(document_name: str) -> str:
    return f"Signed_{document_name}"


def signed_document_key(request_id: str, signed_sha256: str) -> str:
    # Every stamping attempt gets its own artifact; only the winner's is recorded
    return f"{request_id}-{signed_sha256[:16]}.pdf"


class CompleteSignatureRequestUseCase:
    """
    Use case for completing a signature request.

    Business Rules:
    - token, non-empty signature and consent=true are required
    - Expired requests are rejected (and the expiry persisted once)
    - Already signed requests are rejected; signed_at never changes
    - The PDF is fetched and stamped before any state changes, so a
      document failure leaves the request untouched
    - signed status + "Document signed" are written in one atomic update;
      losing the version race means another completion won and no email
      is sent from this call
    - Email is best effort and never rolls back the signing
    """

    def __init__(
        self,
        uow: UnitOfWork,
        document_storage: IDocumentStorage,
        email_sender: IEmailSender,
        notification_email: Optional[str] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.uow = uow
        self.document_storage = document_storage
        self.email_sender = email_sender
        self.notification_email = notification_email
        self.clock = clock

    async def execute(
        self,
        token: Optional[str],
        signature: Optional[str],
        consent: Optional[bool],
        ip_address: str = "unknown",
        user_agent: Optional[str] = None,
    ) -> Result[CompleteSignatureResponse]:
        """
        Execute complete signature use case.

        Args:
            token: Signature request token
            signature: Typed signer name
            consent: Signer agreed to sign electronically
            ip_address: Observed IP of the signer
            user_agent: Signer's User-Agent header

        Returns:
            Result with CompleteSignatureResponse DTO, or Error
        """
        signature = (signature or "").strip()
        if not token or not signature or consent is not True:
            return Return.err(Error("VALIDATION_ERROR", "Missing required fields"))

        # Phase 1: guard
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

            pending = _PendingSignature(
                request_id=signature_request.id,
                token=signature_request.token,
                document_url=signature_request.document_url,
                version=signature_request.version,
            )

        # Phase 2: stamp (no state change)
        stamp_result = await self._stamp(pending, signature, now, ip_address)
        if stamp_result.is_err():
            return stamp_result
        stamped: _StampedDocument = stamp_result.value

        # Phase 3: atomic transition to signed
        async with self.uow:
            signature_request = await self.uow.signature_requests.get_by_token(token)
            if signature_request is None:
                return Return.err(not_found_error())

            if signature_request.version != pending.version:
                return Return.err(self._lost_race_error(signature_request))

            signature_request.status = SignatureRequestStatus.signed
            signature_request.signature = signature
            signature_request.signed_at = now
            signature_request.ip_address = ip_address
            signature_request.signed_document_url = stamped.url
            signature_request.document_sha256 = stamped.source_sha256
            signature_request.signed_document_sha256 = stamped.sha256

            if not await self.uow.signature_requests.update(
                signature_request, pending.version
            ):
                return Return.err(concurrent_update_error())

            await self.uow.signature_requests.append_audit_entries(
                signature_request,
                [new_audit_entry("Document signed", now, ip_address, user_agent)],
            )
            await self.uow.commit()

            audit_entries = await self.uow.signature_requests.list_audit_entries(
                signature_request.id
            )
            emails = self._confirmation_emails(
                signature_request, stamped.content, audit_entries
            )

        logger.info("Signature request %s signed", short_token(token))

        # Phase 4: best-effort notification
        emails_sent = await self._send_confirmations(emails)
        await append_audit_entry(
            self.uow,
            token,
            new_audit_entry("Confirmation emails sent", self.clock(), ip_address),
        )

        return Return.ok(
            CompleteSignatureResponse(
                success=True,
                message="Document signed successfully",
                signed_at=isoformat_utc(now),
                document_id=pending.request_id,
                signed_document_url=stamped.url,
                emails_sent=emails_sent,
            )
        )

    def _lost_race_error(self, signature_request: SignatureRequest) -> Error:
        if signature_request.status == SignatureRequestStatus.signed:
            return already_signed_error(signature_request)
        return concurrent_update_error()

    async def _stamp(
        self,
        pending: _PendingSignature,
        signature: str,
        now: datetime,
        ip_address: str,
    ) -> Result[_StampedDocument]:
        try:
            source = await self.document_storage.fetch(pending.document_url)
        except DocumentStorageError as exc:
            logger.error(
                "Fetching document for signature request %s failed: %s",
                short_token(pending.token),
                exc,
            )
            return Return.err(
                Error("DOCUMENT_FETCH_FAILED", "Could not retrieve the document to sign")
            )

        lines = signature_block_lines(
            signature=signature,
            signed_at_text=format_timestamp(now),
            ip_address=ip_address,
            document_id=pending.request_id,
        )
        try:
            signed_pdf = stamp_signature_block(source, lines)
        except PdfStampError as exc:
            logger.error(
                "Stamping document for signature request %s failed: %s",
                short_token(pending.token),
                exc,
            )
            return Return.err(
                Error("DOCUMENT_INVALID", "The document is not a valid PDF")
            )

        signed_sha256 = hashlib.sha256(signed_pdf).hexdigest()
        try:
            url = await self.document_storage.store(
                signed_document_key(pending.request_id, signed_sha256), signed_pdf
            )
        except DocumentStorageError as exc:
            logger.error(
                "Storing signed document for signature request %s failed: %s",
                short_token(pending.token),
                exc,
            )
            return Return.err(
                Error("DOCUMENT_STORE_FAILED", "Could not store the signed document")
            )

        return Return.ok(
            _StampedDocument(
                content=signed_pdf,
                url=url,
                source_sha256=hashlib.sha256(source).hexdigest(),
                sha256=signed_sha256,
            )
        )

    def _confirmation_emails(
        self,
        signature_request: SignatureRequest,
        signed_pdf: bytes,
        audit_entries: List[SignatureAuditEntry],
    ) -> List[OutgoingEmail]:
        attachment = EmailAttachment(
            filename=signed_filename(signature_request.document_name),
            content=signed_pdf,
        )
        emails = [
            OutgoingEmail(
                to=signature_request.signer_email,
                subject=f"Document Signed: {signature_request.document_name}",
                html=render_signer_confirmation_email(
                    signer_name=signature_request.signer_name,
                    document_name=signature_request.document_name,
                    request_id=signature_request.id,
                    signed_at=signature_request.signed_at,
                    audit_entries=audit_entries,
                ),
                attachments=[attachment],
            )
        ]
        if self.notification_email:
            emails.append(
                OutgoingEmail(
                    to=self.notification_email,
                    subject=f"Signature Completed: {signature_request.document_name}",
                    html=render_requester_confirmation_email(
                        signer_name=signature_request.signer_name,
                        document_name=signature_request.document_name,
                        signed_at=signature_request.signed_at,
                    ),
                    attachments=[attachment],
                )
            )
        return emails

    async def _send_confirmations(self, emails: List[OutgoingEmail]) -> bool:
        if not self.email_sender.is_configured:
            logger.info("Email service not configured, confirmation emails skipped")
            return False

        all_sent = True
        for email in emails:
            try:
                await self.email_sender.send(email)
            except NotificationError as exc:
                all_sent = False
                logger.warning("Confirmation email to %s failed: %s", email.to, exc)
        return all_sent

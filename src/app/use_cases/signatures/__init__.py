"""
Signature Request Use Cases

All signature-request business logic.
"""

from .complete_signature_request_use_case import CompleteSignatureRequestUseCase
from .dtos import (
    AuditEntryView,
    CompleteSignatureResponse,
    SendSignatureRequestCommand,
    SendSignatureRequestResponse,
    SignatureRequestDetail,
    SignatureRequestPublicView,
    SignedDocument,
)
from .get_signature_audit_trail_use_case import GetSignatureAuditTrailUseCase
from .get_signed_document_use_case import GetSignedDocumentUseCase
from .send_signature_request_use_case import SendSignatureRequestUseCase
from .view_signature_request_use_case import ViewSignatureRequestUseCase

__all__ = [
    "SendSignatureRequestUseCase",
    "ViewSignatureRequestUseCase",
    "CompleteSignatureRequestUseCase",
    "GetSignatureAuditTrailUseCase",
    "GetSignedDocumentUseCase",
    "SendSignatureRequestCommand",
    "SendSignatureRequestResponse",
    "SignatureRequestPublicView",
    "CompleteSignatureResponse",
    "SignatureRequestDetail",
    "AuditEntryView",
    "SignedDocument",
]

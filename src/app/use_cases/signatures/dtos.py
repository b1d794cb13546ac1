"""
Signature Use Case DTOs (Data Transfer Objects)

All Command and Response classes for the signature request domain.
Field names are snake_case in Python and camelCase on the wire.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


def isoformat_utc(value: Optional[datetime]) -> Optional[str]:
    if value is None:
        return None
    return value.isoformat() + "Z"


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ============================================================================
# Command DTOs
# ============================================================================


class SendSignatureRequestCommand(CamelModel):
    """Issuer input; required fields are checked by the use case"""

    document_id: Optional[str] = None
    document_name: Optional[str] = None
    document_url: Optional[str] = None
    signer_email: Optional[str] = None
    signer_name: Optional[str] = None
    requested_by: Optional[str] = None
    message: Optional[str] = None


# ============================================================================
# Response DTOs
# ============================================================================


class SendSignatureRequestResponse(CamelModel):
    """Response for send signature request use case"""

    success: bool
    message: str
    request_id: str
    token: str
    signature_url: str
    expires_at: str
    email_sent: bool
    email_error: Optional[str] = None


class SignatureRequestPublicView(CamelModel):
    """What the signer-facing client may see"""

    id: str
    document_name: str
    document_url: str
    signer_name: str
    signer_email: str
    requested_by: str
    requested_at: str
    expires_at: str
    status: str


class CompleteSignatureResponse(CamelModel):
    """Response for complete signature use case"""

    success: bool
    message: str
    signed_at: str
    document_id: str
    signed_document_url: Optional[str] = None
    emails_sent: bool


class AuditEntryView(CamelModel):
    """Single audit trail entry"""

    action: str
    timestamp: str
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None


class SignatureRequestDetail(CamelModel):
    """Issuer-side view including the audit trail"""

    id: str
    document_id: str
    document_name: str
    document_url: str
    signer_name: str
    signer_email: str
    requested_by: str
    requested_at: str
    expires_at: str
    status: str
    signature: Optional[str] = None
    signed_at: Optional[str] = None
    ip_address: Optional[str] = None
    signed_document_url: Optional[str] = None
    document_sha256: Optional[str] = None
    signed_document_sha256: Optional[str] = None
    audit_trail: List[AuditEntryView]


class SignedDocument(BaseModel):
    """Stamped PDF ready for download"""

    filename: str
    content: bytes

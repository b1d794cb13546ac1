"""
SignatureRequest Entity

An outstanding ask for one named signer to electronically sign one document.
"""

from datetime import datetime
from typing import Optional

from sqlmodel import Column, DateTime, Field, Index, SQLModel

from src.domain.base import generate_request_id

from .enums import SignatureRequestStatus


class SignatureRequest(SQLModel, table=True):
    """
    SignatureRequest entity - token-addressed signing workflow record.

    Business Rules:
    - token is the only external identifier; id never appears in URLs
    - expires_at is fixed at creation (requested_at + 7 days)
    - Status only moves forward: pending -> viewed -> signed, with expired
      reachable from any non-signed state once the clock passes expires_at
    - signature/signed_at are written once, on signing
    - version increases on every update (optimistic concurrency)
    """

    __tablename__ = "signature_requests"

    id: str = Field(default_factory=generate_request_id, primary_key=True, max_length=32)
    token: str = Field(unique=True, index=True, max_length=64)

    # Source document (owned by the document store)
    document_id: str = Field(max_length=255)
    document_name: str = Field(max_length=255)
    document_url: str = Field(max_length=2048)

    # Signer identity, fixed at issuance
    signer_name: str = Field(max_length=255)
    signer_email: str = Field(max_length=255)
    requested_by: str = Field(max_length=255)

    status: SignatureRequestStatus = Field(default=SignatureRequestStatus.pending)
    signature: Optional[str] = Field(default=None, max_length=255)
    ip_address: Optional[str] = Field(default=None, max_length=255)

    # Signed artifact (written as a new file, the original is never touched)
    signed_document_url: Optional[str] = Field(default=None, max_length=2048)
    document_sha256: Optional[str] = Field(default=None, max_length=64)
    signed_document_sha256: Optional[str] = Field(default=None, max_length=64)

    version: int = Field(default=1, nullable=False)

    # Timestamps
    requested_at: datetime = Field(sa_column=Column(DateTime, nullable=False))
    expires_at: datetime = Field(sa_column=Column(DateTime, nullable=False))
    signed_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))

    __table_args__ = (
        Index("idx_signature_request_status", "status"),
        Index("idx_signature_request_document", "document_id"),
    )

    def is_past_expiry(self, now: datetime) -> bool:
        return now > self.expires_at

    def effective_status(self, now: datetime) -> SignatureRequestStatus:
        """Status as observed at `now`; expiry is derived from the clock."""
        if self.status == SignatureRequestStatus.signed:
            return SignatureRequestStatus.signed
        if self.status == SignatureRequestStatus.expired or self.is_past_expiry(now):
            return SignatureRequestStatus.expired
        return self.status

"""
SignatureAuditEntry Entity

Append-only log of actions taken against a signature request.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import UniqueConstraint
from sqlmodel import Column, DateTime, Field, Index, SQLModel


class SignatureAuditEntry(SQLModel, table=True):
    """
    SignatureAuditEntry entity - one timestamped action on a signature request.

    Business Rules:
    - Immutable (never updated or deleted)
    - sequence is 0-based and gapless per request; it is the audit order
    - ip_address/user_agent describe the HTTP caller that caused the action
    """

    __tablename__ = "signature_audit_entries"

    id: UUID = Field(default_factory=uuid4, primary_key=True)

    # Assigned by the repository when the entry is appended
    request_id: Optional[str] = Field(
        default=None, foreign_key="signature_requests.id", nullable=False, max_length=32
    )
    sequence: int = Field(default=0, nullable=False)

    action: str = Field(max_length=100)
    timestamp: datetime = Field(sa_column=Column(DateTime, nullable=False))
    ip_address: Optional[str] = Field(default=None, max_length=255)
    user_agent: Optional[str] = Field(default=None, max_length=1024)

    __table_args__ = (
        UniqueConstraint("request_id", "sequence", name="uq_signature_audit_sequence"),
        Index("idx_signature_audit_request", "request_id"),
    )

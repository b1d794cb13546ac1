"""
PulseCRM Domain Entities

Each entity lives in its own module; import them from here.
"""

from .enums import SignatureRequestStatus
from .signature_audit_entry import SignatureAuditEntry
from .signature_request import SignatureRequest

__all__ = [
    # Enums
    "SignatureRequestStatus",
    # Entities
    "SignatureRequest",
    "SignatureAuditEntry",
]

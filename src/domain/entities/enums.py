"""
PulseCRM Domain Enums

All enumeration types used across domain entities.
"""

from enum import Enum


class SignatureRequestStatus(str, Enum):
    """Signature request lifecycle status"""

    pending = "pending"
    viewed = "viewed"
    signed = "signed"
    expired = "expired"

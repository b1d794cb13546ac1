"""
Use Cases

Organized into domain folders:
- signatures/: Signature request lifecycle

Import from subdirectories for better organization.
"""

from .signatures import (
    CompleteSignatureRequestUseCase,
    GetSignatureAuditTrailUseCase,
    GetSignedDocumentUseCase,
    SendSignatureRequestUseCase,
    ViewSignatureRequestUseCase,
)

__all__ = [
    # Signatures
    "SendSignatureRequestUseCase",
    "ViewSignatureRequestUseCase",
    "CompleteSignatureRequestUseCase",
    "GetSignatureAuditTrailUseCase",
    "GetSignedDocumentUseCase",
]

"""
Get Signed Document Use Case

Returns the stamped PDF produced when a request was signed.
"""

import logging

from libs.result import Error, Result, Return
from src.app.services.document_storage import DocumentStorageError, IDocumentStorage
from src.app.services.unit_of_work import UnitOfWork
from src.domain.entities import SignatureRequestStatus

from .audit_trail import not_found_error, short_token
from .complete_signature_request_use_case import signed_filename
from .dtos import SignedDocument

logger = logging.getLogger(__name__)


class GetSignedDocumentUseCase:
    """
    Use case for downloading a signed document.

    Business Rules:
    - Only signed requests have a signed document
    - Bytes come from the stored artifact, never re-stamped
    """

    def __init__(self, uow: UnitOfWork, document_storage: IDocumentStorage):
        self.uow = uow
        self.document_storage = document_storage

    async def execute(self, token: str) -> Result[SignedDocument]:
        async with self.uow:
            signature_request = await self.uow.signature_requests.get_by_token(token)
            if signature_request is None:
                return Return.err(not_found_error())

            if (
                signature_request.status != SignatureRequestStatus.signed
                or not signature_request.signed_document_url
            ):
                return Return.err(
                    Error("SIGNED_DOCUMENT_NOT_FOUND", "This document has not been signed")
                )

            url = signature_request.signed_document_url
            filename = signed_filename(signature_request.document_name)

        try:
            content = await self.document_storage.fetch(url)
        except DocumentStorageError as exc:
            logger.error(
                "Reading signed document for %s failed: %s", short_token(token), exc
            )
            return Return.err(
                Error("DOCUMENT_FETCH_FAILED", "Could not retrieve the signed document")
            )

        return Return.ok(SignedDocument(filename=filename, content=content))

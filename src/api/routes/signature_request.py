"""
Signature Request API Routes

Issue, view and complete document signature requests.
"""

from datetime import datetime
from typing import Callable, Optional
from urllib.parse import quote

from fastapi import APIRouter, Depends, Request, Response, status
from pydantic import Field

from config import ApplicationConfig
from libs.result import Error
from src.api.error import ClientError, raise_for_error
from src.api.utils.admin_auth import verify_admin_api_key
from src.api.utils.request_meta import client_ip, user_agent
from src.app.services.document_storage import IDocumentStorage
from src.app.services.email_sender import IEmailSender
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.signatures import (
    CompleteSignatureRequestUseCase,
    CompleteSignatureResponse,
    GetSignatureAuditTrailUseCase,
    GetSignedDocumentUseCase,
    SendSignatureRequestCommand,
    SendSignatureRequestResponse,
    SendSignatureRequestUseCase,
    SignatureRequestDetail,
    SignatureRequestPublicView,
    ViewSignatureRequestUseCase,
)
from src.app.use_cases.signatures.dtos import CamelModel
from src.depends import (
    get_clock,
    get_document_storage,
    get_email_sender,
    get_unit_of_work,
)

router = APIRouter(prefix="/signature-requests", tags=["Signature Requests"])


class CompleteSignatureRequest(CamelModel):
    """
    Complete signature HTTP request payload

    token may be omitted since it is part of the path.
    """

    token: Optional[str] = Field(None, description="Signature request token")
    signature: Optional[str] = Field(None, description="Typed full name of the signer")
    consent: Optional[bool] = Field(None, description="Signer consents to e-signing")


@router.post(
    "",
    status_code=status.HTTP_200_OK,
    response_model=SendSignatureRequestResponse,
)
async def send_signature_request(
    command: SendSignatureRequestCommand,
    request: Request,
    uow: UnitOfWork = Depends(get_unit_of_work),
    email_sender: IEmailSender = Depends(get_email_sender),
    clock: Callable[[], datetime] = Depends(get_clock),
):
    """
    Send Signature Request

    Creates a signature request valid for 7 days and emails the signing
    link to the signer when email is configured. The link is always
    returned so it can be shared another way.

    Raises:
        - 400 Bad Request: VALIDATION_ERROR (missing required fields)
        - 500 Internal Server Error: Server error
    """
    use_case = SendSignatureRequestUseCase(
        uow,
        email_sender,
        base_url=ApplicationConfig.APP_BASE_URL,
        ttl_days=ApplicationConfig.SIGNATURE_REQUEST_TTL_DAYS,
        default_requested_by=ApplicationConfig.DEFAULT_REQUESTED_BY,
        support_email=ApplicationConfig.SUPPORT_EMAIL,
        clock=clock,
    )
    result = await use_case.execute(command, ip_address=client_ip(request))

    if result.is_err():
        raise_for_error(result.error)

    return result.value


@router.get(
    "/{token}",
    status_code=status.HTTP_200_OK,
    response_model=SignatureRequestPublicView,
)
async def view_signature_request(
    token: str,
    request: Request,
    uow: UnitOfWork = Depends(get_unit_of_work),
    clock: Callable[[], datetime] = Depends(get_clock),
):
    """
    View Signature Request

    Called when the signer opens the signing link. The first view moves
    the request from pending to viewed.

    Raises:
        - 404 Not Found: SIGNATURE_REQUEST_NOT_FOUND
        - 409 Conflict: SIGNATURE_REQUEST_ALREADY_SIGNED (includes signedAt)
        - 410 Gone: SIGNATURE_REQUEST_EXPIRED
    """
    use_case = ViewSignatureRequestUseCase(uow, clock=clock)
    result = await use_case.execute(
        token, ip_address=client_ip(request), user_agent=user_agent(request)
    )

    if result.is_err():
        raise_for_error(result.error)

    return result.value


@router.post(
    "/{token}/complete",
    status_code=status.HTTP_200_OK,
    response_model=CompleteSignatureResponse,
)
async def complete_signature_request(
    token: str,
    body: CompleteSignatureRequest,
    request: Request,
    uow: UnitOfWork = Depends(get_unit_of_work),
    document_storage: IDocumentStorage = Depends(get_document_storage),
    email_sender: IEmailSender = Depends(get_email_sender),
    clock: Callable[[], datetime] = Depends(get_clock),
):
    """
    Complete Signature Request

    Records the signature, stamps the document and emails the signed
    PDF to the signer (and the requester when configured).

    Raises:
        - 400 Bad Request: VALIDATION_ERROR (missing signature/consent, token mismatch)
        - 404 Not Found: SIGNATURE_REQUEST_NOT_FOUND
        - 409 Conflict: SIGNATURE_REQUEST_ALREADY_SIGNED, CONCURRENT_UPDATE
        - 410 Gone: SIGNATURE_REQUEST_EXPIRED
        - 502 Bad Gateway: DOCUMENT_FETCH_FAILED, DOCUMENT_INVALID, DOCUMENT_STORE_FAILED
    """
    if body.token is not None and body.token != token:
        raise ClientError(
            Error("VALIDATION_ERROR", "Token in body does not match the URL"),
            status_code=status.HTTP_400_BAD_REQUEST,
        )

    use_case = CompleteSignatureRequestUseCase(
        uow,
        document_storage,
        email_sender,
        notification_email=ApplicationConfig.NOTIFICATION_EMAIL or None,
        clock=clock,
    )
    result = await use_case.execute(
        token,
        body.signature,
        body.consent,
        ip_address=client_ip(request),
        user_agent=user_agent(request),
    )

    if result.is_err():
        raise_for_error(result.error)

    return result.value


@router.get(
    "/{token}/audit-trail",
    status_code=status.HTTP_200_OK,
    response_model=SignatureRequestDetail,
    dependencies=[Depends(verify_admin_api_key)],
)
async def get_signature_audit_trail(
    token: str,
    uow: UnitOfWork = Depends(get_unit_of_work),
    clock: Callable[[], datetime] = Depends(get_clock),
):
    """
    Get Signature Audit Trail

    Issuer-side view including signature details and every audit entry.

    Raises:
        - 401 Unauthorized: UNAUTHORIZED, INVALID_API_KEY
        - 404 Not Found: SIGNATURE_REQUEST_NOT_FOUND
    """
    use_case = GetSignatureAuditTrailUseCase(uow, clock=clock)
    result = await use_case.execute(token)

    if result.is_err():
        raise_for_error(result.error)

    return result.value


@router.get(
    "/{token}/signed-document",
    status_code=status.HTTP_200_OK,
    response_class=Response,
    dependencies=[Depends(verify_admin_api_key)],
)
async def get_signed_document(
    token: str,
    uow: UnitOfWork = Depends(get_unit_of_work),
    document_storage: IDocumentStorage = Depends(get_document_storage),
):
    """
    Download Signed Document

    Raises:
        - 401 Unauthorized: UNAUTHORIZED, INVALID_API_KEY
        - 404 Not Found: SIGNATURE_REQUEST_NOT_FOUND, SIGNED_DOCUMENT_NOT_FOUND
        - 502 Bad Gateway: DOCUMENT_FETCH_FAILED
    """
    use_case = GetSignedDocumentUseCase(uow, document_storage)
    result = await use_case.execute(token)

    if result.is_err():
        raise_for_error(result.error)

    document = result.value
    return Response(
        content=document.content,
        media_type="application/pdf",
        headers={
            "Content-Disposition": f"attachment; filename*=UTF-8''{quote(document.filename)}"
        },
    )

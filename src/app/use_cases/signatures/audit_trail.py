"""
Shared helpers for signature request state changes.

Every state change goes through a compare-and-swap update followed by
audit appends inside one transaction.
"""

import logging
from datetime import datetime
from typing import Optional

from libs.result import Error
from src.app.services.unit_of_work import UnitOfWork
from src.domain.entities import (
    SignatureAuditEntry,
    SignatureRequest,
    SignatureRequestStatus,
)

from .dtos import isoformat_utc

logger = logging.getLogger(__name__)

MAX_UPDATE_ATTEMPTS = 3


def new_audit_entry(
    action: str,
    timestamp: datetime,
    ip_address: Optional[str] = None,
    user_agent: Optional[str] = None,
) -> SignatureAuditEntry:
    return SignatureAuditEntry(
        action=action,
        timestamp=timestamp,
        ip_address=ip_address,
        user_agent=user_agent,
    )


def short_token(token: str) -> str:
    return token[:8]


def not_found_error() -> Error:
    return Error("SIGNATURE_REQUEST_NOT_FOUND", "Invalid or expired signature request")


def expired_error() -> Error:
    return Error("SIGNATURE_REQUEST_EXPIRED", "This signature request has expired")


def already_signed_error(signature_request: SignatureRequest) -> Error:
    return Error(
        "SIGNATURE_REQUEST_ALREADY_SIGNED",
        "This document has already been signed",
        {"signedAt": isoformat_utc(signature_request.signed_at)},
    )


def concurrent_update_error() -> Error:
    return Error(
        "CONCURRENT_UPDATE",
        "The signature request was modified concurrently, please retry",
    )


async def persist_expiry(
    uow: UnitOfWork,
    signature_request: SignatureRequest,
    now: datetime,
    ip_address: Optional[str] = None,
    user_agent: Optional[str] = None,
) -> None:
    """
    Write the one-time transition to expired and commit it.

    Must be called inside `async with uow`. Does nothing when the stored
    status is already expired or signed. Losing the version race is fine:
    whoever won already moved the request on.
    """
    if signature_request.status in (
        SignatureRequestStatus.expired,
        SignatureRequestStatus.signed,
    ):
        return

    expected_version = signature_request.version
    signature_request.status = SignatureRequestStatus.expired
    if not await uow.signature_requests.update(signature_request, expected_version):
        logger.info(
            "Expiry of signature request %s already written by another request",
            short_token(signature_request.token),
        )
        return

    await uow.signature_requests.append_audit_entries(
        signature_request,
        [new_audit_entry("Signature request expired", now, ip_address, user_agent)],
    )
    await uow.commit()
    logger.info("Signature request %s expired", short_token(signature_request.token))


async def append_audit_entry(
    uow: UnitOfWork, token: str, entry: SignatureAuditEntry
) -> bool:
    """Append one entry without changing status, retrying lost version races"""
    for _ in range(MAX_UPDATE_ATTEMPTS):
        async with uow:
            signature_request = await uow.signature_requests.get_by_token(token)
            if signature_request is None:
                return False

            if not await uow.signature_requests.update(
                signature_request, signature_request.version
            ):
                continue

            await uow.signature_requests.append_audit_entries(signature_request, [entry])
            await uow.commit()
            return True

    logger.warning(
        "Gave up appending audit entry %r to signature request %s",
        entry.action,
        short_token(token),
    )
    return False

import hashlib
from io import BytesIO

import pytest
from httpx import AsyncClient
from pypdf import PdfReader
from sqlmodel import select

from src.domain.entities import SignatureRequest
from tests.fixtures.signature_data import DOCUMENT_URL
from tests.utils.json_compare import pick_keys


async def send(client: AsyncClient, test_data) -> dict:
    response = await client.post(
        "/signature-requests", json=test_data.get_copy("send_signature_request")
    )
    assert response.status_code == 200
    return response.json()


async def complete(client: AsyncClient, token: str, payload: dict, **kwargs):
    return await client.post(f"/signature-requests/{token}/complete", json=payload, **kwargs)


@pytest.mark.asyncio
async def test_complete_signature(
    client: AsyncClient, test_data, clock, email_sender, document_storage, db_session
):
    """Signer signs the document

    Given a viewed signature request
    When the signer submits their typed name with consent
    Then the request is stored as signed with signature, time and IP
    And the stamped PDF is stored as a new file
    And the signer receives the signed PDF by email
    """
    issued = await send(client, test_data)
    await client.get(f"/signature-requests/{issued['token']}")
    clock.advance(hours=2)
    email_sender.sent.clear()

    response = await complete(
        client,
        issued["token"],
        test_data.get_copy("complete_signature_request"),
        headers={"X-Real-IP": "198.51.100.4", "User-Agent": "Mozilla/5.0"},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["signedDocumentUrl"].startswith(f"memory://signed/{issued['requestId']}-")
    assert pick_keys(data, {"success", "message", "signedAt", "documentId", "emailsSent"}) == {
        "success": True,
        "message": "Document signed successfully",
        "signedAt": "2026-10-01T11:30:00Z",
        "documentId": issued["requestId"],
        "emailsSent": True,
    }

    stored = (
        await db_session.exec(
            select(SignatureRequest).where(SignatureRequest.token == issued["token"])
        )
    ).one()
    assert stored.status == "signed"
    assert stored.signature == "Jane Doe"
    assert stored.ip_address == "198.51.100.4"
    assert stored.signed_document_url == data["signedDocumentUrl"]

    source = document_storage.documents[DOCUMENT_URL]
    signed = document_storage.documents[data["signedDocumentUrl"]]
    assert stored.document_sha256 == hashlib.sha256(source).hexdigest()
    assert stored.signed_document_sha256 == hashlib.sha256(signed).hexdigest()

    reader = PdfReader(BytesIO(signed))
    assert len(reader.pages) == 2
    stamp = reader.pages[-1].extract_text()
    assert "Electronically signed by: Jane Doe" in stamp
    assert "Date: 2026-10-01 11:30:00 UTC" in stamp
    assert "IP Address: 198.51.100.4" in stamp
    assert f"Document ID: {issued['requestId']}" in stamp

    assert [email.to for email in email_sender.sent] == ["jane@example.com"]
    confirmation = email_sender.sent[0]
    assert confirmation.subject == "Document Signed: NDA.pdf"
    assert confirmation.attachments[0].filename == "Signed_NDA.pdf"
    assert confirmation.attachments[0].content == signed


@pytest.mark.asyncio
async def test_complete_notifies_requester(client: AsyncClient, test_data, email_sender, monkeypatch):
    from config import ApplicationConfig

    monkeypatch.setattr(ApplicationConfig, "NOTIFICATION_EMAIL", "office@builder.com")
    issued = await send(client, test_data)
    email_sender.sent.clear()

    response = await complete(
        client, issued["token"], test_data.get_copy("complete_signature_request")
    )

    assert response.status_code == 200
    assert [(email.to, email.subject) for email in email_sender.sent] == [
        ("jane@example.com", "Document Signed: NDA.pdf"),
        ("office@builder.com", "Signature Completed: NDA.pdf"),
    ]


@pytest.mark.asyncio
async def test_complete_without_email_configured(client: AsyncClient, test_data, email_sender):
    issued = await send(client, test_data)
    email_sender.configured = False

    response = await complete(
        client, issued["token"], test_data.get_copy("complete_signature_request")
    )

    assert response.status_code == 200
    assert response.json()["emailsSent"] is False


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "payload",
    [
        {"consent": True},
        {"signature": "   ", "consent": True},
        {"signature": "Jane Doe"},
        {"signature": "Jane Doe", "consent": False},
    ],
)
async def test_complete_invalid_submission(client: AsyncClient, test_data, db_session, payload):
    """Missing signature or consent

    The request fails with 400 VALIDATION_ERROR and the record is untouched.
    """
    issued = await send(client, test_data)

    response = await complete(client, issued["token"], payload)

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "VALIDATION_ERROR"
    stored = (
        await db_session.exec(
            select(SignatureRequest).where(SignatureRequest.token == issued["token"])
        )
    ).one()
    assert stored.status == "pending"


@pytest.mark.asyncio
async def test_complete_token_mismatch(client: AsyncClient, test_data):
    issued = await send(client, test_data)
    payload = test_data.payload("complete_signature_request", token="f" * 64)

    response = await complete(client, issued["token"], payload)

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "VALIDATION_ERROR"


@pytest.mark.asyncio
async def test_complete_unknown_token(client: AsyncClient, test_data):
    response = await complete(client, "f" * 64, test_data.get_copy("complete_signature_request"))

    assert response.status_code == 404
    assert response.json()["error"]["code"] == "SIGNATURE_REQUEST_NOT_FOUND"


@pytest.mark.asyncio
async def test_complete_twice(client: AsyncClient, test_data, email_sender, clock):
    """Second signature attempt

    Given a signed request
    When the signer submits again
    Then the request fails with 409 carrying the first signedAt
    And no further emails are sent
    """
    issued = await send(client, test_data)
    first = await complete(client, issued["token"], test_data.get_copy("complete_signature_request"))
    sent_before = len(email_sender.sent)
    clock.advance(minutes=5)

    second = await complete(
        client, issued["token"], test_data.get_copy("complete_signature_request")
    )

    assert second.status_code == 409
    error = second.json()["error"]
    assert error["code"] == "SIGNATURE_REQUEST_ALREADY_SIGNED"
    assert error["signedAt"] == first.json()["signedAt"]
    assert len(email_sender.sent) == sent_before


@pytest.mark.asyncio
async def test_complete_after_expiry(client: AsyncClient, test_data, clock, db_session):
    issued = await send(client, test_data)
    clock.advance(days=8)

    response = await complete(
        client, issued["token"], test_data.get_copy("complete_signature_request")
    )

    assert response.status_code == 410
    assert response.json()["error"]["code"] == "SIGNATURE_REQUEST_EXPIRED"
    stored = (
        await db_session.exec(
            select(SignatureRequest).where(SignatureRequest.token == issued["token"])
        )
    ).one()
    assert stored.status == "expired"
    assert stored.signature is None


@pytest.mark.asyncio
async def test_complete_document_unavailable(
    client: AsyncClient, test_data, document_storage, db_session
):
    """Source document cannot be fetched

    The request fails with 502 and remains signable.
    """
    issued = await send(client, test_data)
    del document_storage.documents[DOCUMENT_URL]

    response = await complete(
        client, issued["token"], test_data.get_copy("complete_signature_request")
    )

    assert response.status_code == 502
    assert response.json()["error"]["code"] == "DOCUMENT_FETCH_FAILED"
    stored = (
        await db_session.exec(
            select(SignatureRequest).where(SignatureRequest.token == issued["token"])
        )
    ).one()
    assert stored.status == "pending"
    assert document_storage.stored == {}


@pytest.mark.asyncio
async def test_complete_document_not_pdf(client: AsyncClient, test_data, document_storage):
    issued = await send(client, test_data)
    document_storage.documents[DOCUMENT_URL] = b"<html>login required</html>"

    response = await complete(
        client, issued["token"], test_data.get_copy("complete_signature_request")
    )

    assert response.status_code == 502
    assert response.json()["error"]["code"] == "DOCUMENT_INVALID"

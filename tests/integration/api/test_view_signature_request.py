import pytest
from httpx import AsyncClient
from sqlmodel import select

from src.domain.entities import SignatureRequest
from tests.utils.json_compare import pick_keys


async def send(client: AsyncClient, test_data) -> dict:
    response = await client.post(
        "/signature-requests", json=test_data.get_copy("send_signature_request")
    )
    assert response.status_code == 200
    return response.json()


async def stored_status(db_session, token: str) -> str:
    stored = (
        await db_session.exec(select(SignatureRequest).where(SignatureRequest.token == token))
    ).one()
    return stored.status


@pytest.mark.asyncio
async def test_first_view_marks_viewed(client: AsyncClient, test_data, db_session):
    """Signer opens the link

    Given a pending signature request
    When the signer opens the signing link
    Then the public view is returned with status viewed
    And the request is stored as viewed
    """
    issued = await send(client, test_data)

    response = await client.get(f"/signature-requests/{issued['token']}")

    assert response.status_code == 200
    data = response.json()
    assert pick_keys(data, test_data.get("public_view").keys()) == test_data.get("public_view")
    assert data["id"] == issued["requestId"]
    assert data["expiresAt"] == issued["expiresAt"]
    assert data["requestedAt"] == "2026-10-01T09:30:00Z"
    assert "token" not in data
    assert "signature" not in data
    assert await stored_status(db_session, issued["token"]) == "viewed"


@pytest.mark.asyncio
async def test_repeat_view_is_unchanged(client: AsyncClient, test_data):
    issued = await send(client, test_data)

    first = await client.get(f"/signature-requests/{issued['token']}")
    second = await client.get(f"/signature-requests/{issued['token']}")

    assert second.status_code == 200
    assert second.json() == first.json()


@pytest.mark.asyncio
async def test_unknown_token(client: AsyncClient):
    response = await client.get(f"/signature-requests/{'f' * 64}")

    assert response.status_code == 404
    error = response.json()["error"]
    assert error["code"] == "SIGNATURE_REQUEST_NOT_FOUND"
    assert error["message"] == "Invalid or expired signature request"


@pytest.mark.asyncio
async def test_view_after_expiry(client: AsyncClient, test_data, clock, db_session):
    """Expired link

    Given a request issued more than 7 days ago
    When the signer opens the link
    Then the request fails with 410 Gone
    And the stored status becomes expired
    """
    issued = await send(client, test_data)
    clock.advance(days=7, seconds=1)

    response = await client.get(f"/signature-requests/{issued['token']}")

    assert response.status_code == 410
    assert response.json()["error"]["code"] == "SIGNATURE_REQUEST_EXPIRED"
    assert await stored_status(db_session, issued["token"]) == "expired"


@pytest.mark.asyncio
async def test_view_at_exact_expiry_is_allowed(client: AsyncClient, test_data, clock):
    issued = await send(client, test_data)
    clock.advance(days=7)

    response = await client.get(f"/signature-requests/{issued['token']}")

    assert response.status_code == 200
    assert response.json()["status"] == "viewed"


@pytest.mark.asyncio
async def test_view_signed_request(client: AsyncClient, test_data):
    """Signed link

    Given a signed request
    When the signer opens the link again
    Then the request fails with 409 and carries signedAt
    """
    issued = await send(client, test_data)
    await client.post(
        f"/signature-requests/{issued['token']}/complete",
        json=test_data.get_copy("complete_signature_request"),
    )

    response = await client.get(f"/signature-requests/{issued['token']}")

    assert response.status_code == 409
    error = response.json()["error"]
    assert error["code"] == "SIGNATURE_REQUEST_ALREADY_SIGNED"
    assert error["signedAt"] == "2026-10-01T09:30:00Z"

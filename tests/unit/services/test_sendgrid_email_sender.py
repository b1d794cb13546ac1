from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import pytest

from src.adapter.services.sendgrid_email_sender import SendGridEmailSender
from src.app.services.email_sender import EmailAttachment, NotificationError, OutgoingEmail

EMAIL = OutgoingEmail(
    to="jane@example.com",
    subject="Document Signed: NDA.pdf",
    html="<p>Signed</p>",
    attachments=[EmailAttachment(filename="Signed_NDA.pdf", content=b"%PDF-1.4")],
)


def test_is_configured_follows_api_key():
    assert SendGridEmailSender("SG.key", "noreply@pulsecrm.com").is_configured is True
    assert SendGridEmailSender("", "noreply@pulsecrm.com").is_configured is False


def test_build_message_attaches_files():
    sender = SendGridEmailSender("SG.key", "noreply@pulsecrm.com", "PulseCRM")

    payload = sender.build_message(EMAIL).get()

    assert payload["from"] == {"email": "noreply@pulsecrm.com", "name": "PulseCRM"}
    assert payload["subject"] == "Document Signed: NDA.pdf"
    assert payload["personalizations"][0]["to"] == [{"email": "jane@example.com"}]
    attachment = payload["attachments"][0]
    assert attachment["filename"] == "Signed_NDA.pdf"
    assert attachment["type"] == "application/pdf"
    assert attachment["disposition"] == "attachment"
    assert attachment["content"] == "JVBERi0xLjQ="


@pytest.mark.asyncio
async def test_send_without_key_raises():
    sender = SendGridEmailSender("", "noreply@pulsecrm.com")

    with pytest.raises(NotificationError):
        await sender.send(EMAIL)


@pytest.mark.asyncio
async def test_send_accepts_202():
    client = MagicMock()
    client.send.return_value = SimpleNamespace(status_code=202)

    with patch(
        "src.adapter.services.sendgrid_email_sender.SendGridAPIClient", return_value=client
    ):
        await SendGridEmailSender("SG.key", "noreply@pulsecrm.com").send(EMAIL)

    client.send.assert_called_once()


@pytest.mark.asyncio
async def test_send_wraps_provider_errors():
    client = MagicMock()
    client.send.side_effect = RuntimeError("401 Unauthorized")

    with patch(
        "src.adapter.services.sendgrid_email_sender.SendGridAPIClient", return_value=client
    ):
        with pytest.raises(NotificationError):
            await SendGridEmailSender("SG.key", "noreply@pulsecrm.com").send(EMAIL)


@pytest.mark.asyncio
async def test_send_rejects_unexpected_status():
    client = MagicMock()
    client.send.return_value = SimpleNamespace(status_code=500)

    with patch(
        "src.adapter.services.sendgrid_email_sender.SendGridAPIClient", return_value=client
    ):
        with pytest.raises(NotificationError):
            await SendGridEmailSender("SG.key", "noreply@pulsecrm.com").send(EMAIL)

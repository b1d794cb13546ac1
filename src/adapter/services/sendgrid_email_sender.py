import base64
import logging

from fastapi.concurrency import run_in_threadpool
from sendgrid import SendGridAPIClient
from sendgrid.helpers.mail import (
    Attachment,
    Content,
    Disposition,
    Email,
    FileContent,
    FileName,
    FileType,
    Mail,
    To,
)

from src.app.services.email_sender import IEmailSender, NotificationError, OutgoingEmail

logger = logging.getLogger(__name__)


class SendGridEmailSender(IEmailSender):
    """SendGrid implementation of the email sender"""

    def __init__(self, api_key: str, sender: str, sender_name: str = "PulseCRM"):
        self.api_key = api_key
        self.sender = sender
        self.sender_name = sender_name

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    def build_message(self, email: OutgoingEmail) -> Mail:
        message = Mail(
            from_email=Email(self.sender, self.sender_name),
            to_emails=To(email.to),
            subject=email.subject,
            html_content=Content("text/html", email.html),
        )
        for attachment in email.attachments:
            message.add_attachment(
                Attachment(
                    FileContent(base64.b64encode(attachment.content).decode("ascii")),
                    FileName(attachment.filename),
                    FileType(attachment.content_type),
                    Disposition("attachment"),
                )
            )
        return message

    async def send(self, email: OutgoingEmail) -> None:
        if not self.is_configured:
            raise NotificationError("SENDGRID_API_KEY is not configured")

        message = self.build_message(email)
        client = SendGridAPIClient(self.api_key)
        try:
            # The SendGrid client is blocking
            response = await run_in_threadpool(client.send, message)
        except Exception as exc:
            raise NotificationError(f"SendGrid request failed: {exc}") from exc

        if response.status_code not in (200, 202):
            raise NotificationError(f"SendGrid returned status {response.status_code}")

        logger.info("Email sent to %s: %s", email.to, email.subject)

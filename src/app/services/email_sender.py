from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import List


class NotificationError(Exception):
    """Raised when an email could not be delivered to the provider"""


@dataclass(frozen=True)
class EmailAttachment:
    filename: str
    content: bytes
    content_type: str = "application/pdf"


@dataclass(frozen=True)
class OutgoingEmail:
    to: str
    subject: str
    html: str
    attachments: List[EmailAttachment] = field(default_factory=list)


class IEmailSender(ABC):
    """Transactional email interface - application layer"""

    @property
    @abstractmethod
    def is_configured(self) -> bool:
        """False when no provider credentials are available"""
        pass

    @abstractmethod
    async def send(self, email: OutgoingEmail) -> None:
        """Send one email; raises NotificationError on failure"""
        pass

from datetime import datetime
from typing import Callable

from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel.ext.asyncio.session import AsyncSession
from config import ApplicationConfig
from src.adapter.services.document_storage import HttpDocumentStorage
from src.adapter.services.sendgrid_email_sender import SendGridEmailSender
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.app.services.document_storage import IDocumentStorage
from src.app.services.email_sender import IEmailSender
from src.domain.base import utcnow

engine = create_async_engine(ApplicationConfig.DB_URI, echo=False, future=True)

AsyncSessionLocal = sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
)


async def get_unit_of_work():
    async with AsyncSessionLocal() as session:
        yield SqlAlchemyUnitOfWork(session)


def get_email_sender() -> IEmailSender:
    return SendGridEmailSender(
        api_key=ApplicationConfig.SENDGRID_API_KEY,
        sender=ApplicationConfig.EMAIL_FROM,
        sender_name=ApplicationConfig.EMAIL_FROM_NAME,
    )


def get_document_storage() -> IDocumentStorage:
    return HttpDocumentStorage(
        base_url=ApplicationConfig.APP_BASE_URL,
        signed_documents_dir=ApplicationConfig.SIGNED_DOCUMENTS_DIR,
        timeout=ApplicationConfig.DOCUMENT_FETCH_TIMEOUT,
        max_bytes=ApplicationConfig.MAX_DOCUMENT_BYTES,
    )


def get_clock() -> Callable[[], datetime]:
    return utcnow

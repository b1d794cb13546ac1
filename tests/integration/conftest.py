import pytest
import pytest_asyncio
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession
from tests.fixtures.fakes import FakeDocumentStorage, FakeEmailSender, MutableClock, make_pdf
from tests.fixtures.json_loader import TestDataLoader
from tests.fixtures.signature_data import DOCUMENT_URL
from src.depends import get_clock, get_document_storage, get_email_sender, get_unit_of_work
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork

ADMIN_HEADERS = {"X-Admin-API-Key": "test-admin-key-12345"}


@pytest_asyncio.fixture
def test_data():
    return TestDataLoader()


@pytest.fixture
def admin_headers(monkeypatch):
    from config import ApplicationConfig

    monkeypatch.setattr(ApplicationConfig, "ADMIN_API_KEY", ADMIN_HEADERS["X-Admin-API-Key"])
    return ADMIN_HEADERS


@pytest.fixture
def email_sender():
    return FakeEmailSender()


@pytest.fixture
def document_storage():
    return FakeDocumentStorage({DOCUMENT_URL: make_pdf(pages=2)})


@pytest.fixture
def clock():
    return MutableClock()


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine("sqlite+aiosqlite:///./test.db")
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(engine):
    Session = sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with Session() as session:
        yield session


@pytest_asyncio.fixture
async def client(db_session, email_sender, document_storage, clock):
    from httpx import ASGITransport
    from src.api.app import create_app
    from config import ApplicationConfig

    app = create_app(ApplicationConfig)

    async def override_get_unit_of_work():
        yield SqlAlchemyUnitOfWork(db_session)

    app.dependency_overrides[get_unit_of_work] = override_get_unit_of_work
    app.dependency_overrides[get_email_sender] = lambda: email_sender
    app.dependency_overrides[get_document_storage] = lambda: document_storage
    app.dependency_overrides[get_clock] = lambda: clock

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

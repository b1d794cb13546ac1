from datetime import datetime

import pytest
from unittest.mock import AsyncMock, MagicMock

from tests.fixtures.fakes import FakeDocumentStorage, FakeEmailSender, MutableClock, make_pdf
from tests.fixtures.signature_data import DOCUMENT_URL


@pytest.fixture
def mock_uow():
    uow = MagicMock()
    uow.__aenter__ = AsyncMock(return_value=uow)
    uow.__aexit__ = AsyncMock(return_value=False)  # Must return False to not suppress exceptions
    uow.commit = AsyncMock()
    uow.rollback = AsyncMock()

    uow.signature_requests = MagicMock()
    uow.signature_requests.get_by_token = AsyncMock(return_value=None)
    uow.signature_requests.create = AsyncMock(side_effect=lambda request: request)
    uow.signature_requests.update = AsyncMock(return_value=True)
    uow.signature_requests.append_audit_entries = AsyncMock(
        side_effect=lambda request, entries: entries
    )
    uow.signature_requests.list_audit_entries = AsyncMock(return_value=[])
    return uow


@pytest.fixture
def clock():
    return MutableClock(datetime(2026, 10, 1, 9, 30, 0))


@pytest.fixture
def email_sender():
    return FakeEmailSender()


@pytest.fixture
def document_storage():
    return FakeDocumentStorage({DOCUMENT_URL: make_pdf(pages=2)})

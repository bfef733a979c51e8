from __future__ import annotations

import os

# Settings are read at import time
os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import app.models  # noqa
from app.core.config import Settings
from app.core.db import Base
from app.core.errors import TransportError
from app.services.dispatcher import LeadDispatcher
from app.services.mailer import EmailTransport


class RecordingTransport(EmailTransport):
    """Keeps every message instead of sending it. Recipients in `fail_for` raise."""

    def __init__(self):
        super().__init__(default_from="Studio <hello@studio.test>", default_reply_to="hello@studio.test")
        self.sent: list[dict] = []
        self.fail_for: set[str] = set()

    def send(self, to, subject, html, from_addr=None, reply_to=None) -> bool:
        recipients = [to] if isinstance(to, str) else list(to)
        if any(r in self.fail_for for r in recipients):
            raise TransportError(f"550 rejected: {recipients}")
        self.sent.append(
            {"to": recipients, "subject": subject, "html": html, "from": from_addr, "reply_to": reply_to}
        )
        return True

    def to(self, address: str) -> list[dict]:
        return [m for m in self.sent if address in m["to"]]


@pytest.fixture
def session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield sessionmaker(bind=engine, autoflush=False, autocommit=False)
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def test_settings():
    return Settings(
        DATABASE_URL="sqlite://",
        EMAIL_PROVIDER="smtp",
        SMTP_HOST="smtp.studio.test",
        SMTP_USER="postmaster@studio.test",
        SMTP_PASS="secret",
        BUSINESS_NAME="Studio Test Photography",
        FROM_EMAIL="hello@studio.test",
        REPLY_TO_EMAIL="hello@studio.test",
        ADMIN_EMAILS=["owner@studio.test", "assistant@studio.test"],
        ADMIN_BASE_URL="https://studio.test/admin/leads",
    )


@pytest.fixture
def transport():
    return RecordingTransport()


@pytest.fixture
def dispatcher(test_settings, session_factory, transport):
    return LeadDispatcher(test_settings, session_factory, transport_factory=lambda s: transport)


@pytest.fixture
def sarah():
    return {
        "firstName": "Sarah",
        "lastName": "Johnson",
        "email": "sarah@example.com",
        "eventType": "wedding",
        "eventDate": "2025-09-15",
    }

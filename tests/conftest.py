from __future__ import annotations

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from atelier import models  # noqa: F401  -- ensure all models are registered
from atelier.db import Base, get_db
from atelier.main import app
from atelier.services.audit import AuditLogStore
from atelier.services.mailer import DryRunMailer, EmailMessage, Mailer, MailResult


class FailingMailer(Mailer):
    """Mailer that rejects every message, for delivery-failure paths."""

    def __init__(self) -> None:
        self.attempts: list[EmailMessage] = []

    def send(self, message: EmailMessage) -> MailResult:
        self.attempts.append(message)
        return MailResult(success=False, error="provider rejected message")


# ---------------------------------------------------------------------------
# Sync test DB
# ---------------------------------------------------------------------------


def setup_test_db():
    """Create an in-memory SQLite engine and session factory for sync tests."""
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    TestingSessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)
    Base.metadata.create_all(engine)
    return engine, TestingSessionLocal


@pytest.fixture()
def session_factory():
    engine, TestingSessionLocal = setup_test_db()
    yield TestingSessionLocal
    engine.dispose()


@pytest.fixture()
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def client(session_factory):
    """TestClient wired to an in-memory database and fresh in-memory state."""

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.state.audit_store = AuditLogStore(capacity=100)
    app.state.mailer = DryRunMailer(default_from="Atelier <test@atelier.mx>")
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture()
def failing_mailer():
    return FailingMailer()

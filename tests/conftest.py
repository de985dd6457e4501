"""Shared test fixtures."""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from src.core.event_bus import EventBus
from src.db.database import get_db, init_db
from src.main import app
from src.services.guild_service import GuildService
from src.services.notification_service import NotificationService

TEST_ENGINE = create_engine(
    "sqlite:///:memory:",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestSession = sessionmaker(bind=TEST_ENGINE, autocommit=False, autoflush=False)

init_db(TEST_ENGINE)


def _override_get_db():
    db = TestSession()
    try:
        yield db
    finally:
        db.close()


app.dependency_overrides[get_db] = _override_get_db


@pytest.fixture()
def client() -> TestClient:
    """FastAPI TestClient wired to an in-memory SQLite database.

    A fresh seeded game is placed on app.state for every test, so tests
    never depend on the lifespan handler or on each other.
    """
    bus = EventBus()
    app.state.event_bus = bus
    app.state.notification_service = NotificationService(bus)
    app.state.guild_service = GuildService.new_game(bus, seed=7, gold=500)
    return TestClient(app)


@pytest.fixture()
def db_session() -> Session:
    """Raw database session for direct DB assertions."""
    session = TestSession()
    try:
        yield session
    finally:
        session.close()

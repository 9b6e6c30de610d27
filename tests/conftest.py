"""
Pytest configuration and fixtures.

Provides:
- In-memory SQLite engine/session (StaticPool so every connection shares it)
- A controllable clock
- A FastAPI TestClient with the database and clock dependencies overridden
- Small factories for cards and items
"""
import os

# Keep the module-level engine off any real database
os.environ["DATABASE_URL"] = "sqlite://"

from datetime import datetime, timedelta
from typing import Generator, Optional

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from flashback import models  # noqa: F401
from flashback.core.clock import get_clock
from flashback.core.config import settings
from flashback.core.database import get_session
from flashback.models import Card, Item


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests (in-memory database)")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)


class FixedClock:
    """Clock that only moves when told to."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


class NoShuffle:
    """Random source that keeps items in their given order."""

    def shuffle(self, items) -> None:
        pass


NOW = datetime(2024, 1, 1, 12, 0, 0)


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(NOW)


@pytest.fixture
def engine():
    """Fresh in-memory database per test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def session(engine) -> Generator[Session, None, None]:
    with Session(engine) as session:
        yield session


@pytest.fixture
def client(engine, clock) -> Generator[TestClient, None, None]:
    """HTTP client against the app, using the test database and clock."""
    from flashback.main import app

    def override_get_session():
        with Session(engine) as session:
            yield session

    app.dependency_overrides[get_session] = override_get_session
    app.dependency_overrides[get_clock] = lambda: clock
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides = {}


@pytest.fixture
def make_item(session):
    """Factory creating a card plus the reviewer's item for it."""

    def _make_item(
        front: str = "猫",
        back: str = "cat",
        stage: int = 0,
        streak: int = 0,
        max_streak: int = 0,
        next_available: Optional[datetime] = None,
        user_id: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> Item:
        card = Card(front=front, back=back, notes=notes)
        session.add(card)
        session.flush()
        item = Item(
            user_id=user_id or settings.reviewer_id,
            card_id=card.id,
            current_srs_stage=stage,
            next_available=next_available or NOW,
            current_streak=streak,
            max_streak=max_streak,
        )
        session.add(item)
        session.commit()
        session.refresh(item)
        return item

    return _make_item


@pytest.fixture
def no_shuffle() -> NoShuffle:
    return NoShuffle()

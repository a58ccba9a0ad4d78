"""
Shared fixtures

Every test gets its own SQLite database file and in-process item locks.
"""
import os
import tempfile

# Configure before the application modules read settings
_default_db_dir = tempfile.mkdtemp(prefix="marketplace-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{_default_db_dir}/default.db"
os.environ["LOCK_BACKEND"] = "memory"
os.environ["LOG_JSON"] = "false"

from datetime import timedelta

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from marketplace.core.clock import utc_now
from marketplace.infrastructure.database import build_engine, get_db, init_db
from marketplace.infrastructure.lock import LocalItemLock
from marketplace.main import app
from marketplace.services import AuctionService, BidService, UserService


@pytest.fixture
def engine(tmp_path):
    engine = build_engine(f"sqlite:///{tmp_path / 'marketplace.db'}")
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    init_db(bind=engine, session_factory=factory)
    return factory


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def bid_service():
    return BidService(LocalItemLock())


@pytest.fixture
def make_user(db):
    """Create users with unique emails"""
    counter = {"n": 0}

    def _make(first_name="Test", last_name="User", password="Passw0rd!"):
        counter["n"] += 1
        return UserService.create_user(
            db,
            first_name=first_name,
            last_name=last_name,
            email=f"user{counter['n']}@example.com",
            password=password,
        )

    return _make


@pytest.fixture
def make_item(db):
    """Create items closing one hour from now unless told otherwise"""

    def _make(owner, starting_price=100, closes_in=timedelta(hours=1), title="Vintage camera",
              description="Working film camera", category_ids=None, now=None):
        now = now or utc_now()
        return AuctionService.create_item(
            db,
            owner_id=owner.user_id,
            title=title,
            description=description,
            starting_price=starting_price,
            closing_time=now + closes_in,
            category_ids=category_ids,
            now=now,
        )

    return _make


@pytest.fixture
def client(session_factory):
    """API client bound to the per-test database"""

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()

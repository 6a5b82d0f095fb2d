from datetime import datetime, timedelta

import pytest
import pytz
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from app.config import settings
from app.database import Base, build_engine, get_db
from app.main import app
from app.models.book import Book, BookStatus
from app.utils.timezone import get_clock

ADMIN_HEADERS = {"X-Admin-Key": "admin123"}


class FrozenClock:
    """Clock whose time only moves when a test advances it."""

    def __init__(self, current):
        self.current = current

    def __call__(self):
        return self.current

    def advance(self, **kwargs):
        self.current = self.current + timedelta(**kwargs)
        return self.current


@pytest.fixture
def clock():
    return FrozenClock(datetime(2024, 5, 1, 12, 0, tzinfo=pytz.utc))


@pytest.fixture
def engine(tmp_path):
    # A separate SQLite file per test
    engine = build_engine(f"sqlite:///{tmp_path / 'bookshop_test.db'}")
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def make_book(db, clock):
    def _make_book(title="Солярис", author="Станислав Лем", year=1961, category="Фантастика",
                   price=400, status=BookStatus.AVAILABLE):
        book = Book(title=title, author=author, year=year, category=category, price=price,
                    status=status, created_at=clock())
        db.add(book)
        db.commit()
        db.refresh(book)
        clock.advance(seconds=1)
        return book
    return _make_book


@pytest.fixture
def client(session_factory, clock, monkeypatch):
    monkeypatch.setattr(settings, "admin_key", "admin123")

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_clock] = lambda: clock
    # Not used as a context manager: the lifespan (seed, sweeper) stays off in tests
    test_client = TestClient(app)
    try:
        yield test_client
    finally:
        app.dependency_overrides.clear()

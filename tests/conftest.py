# Pytest configuration for the API and booking-rule tests.
# Forces a local SQLite DB, disables Redis and outbound providers, and fixes the JWT secret.
import os
from typing import Iterator

import pytest
from fastapi.testclient import TestClient

os.environ.setdefault("DATABASE_URL", "sqlite:///./test.db")
os.environ.setdefault("REDIS_ENABLED", "false")
os.environ.setdefault("YALLAMBEE_JWT_SECRET", "test-secret")
os.environ.setdefault("YALLAMBEE_ADMIN_EMAILS", "admin@example.com")

import sys
# Ensure the project root is on sys.path so 'yallambee' resolves when running pytest from anywhere
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from yallambee.main import app  # noqa: E402
from yallambee.db import Base, SessionLocal, engine  # noqa: E402


@pytest.fixture(autouse=True)
def _clean_db() -> Iterator[None]:
    """
    Function-level isolation: drop and recreate schema before each test.
    """
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture(autouse=True)
def _offline_providers(monkeypatch: pytest.MonkeyPatch) -> None:
    # No real mail server or image host during tests; individual tests opt back in
    for name in ("SMTP_HOST", "CLOUDINARY_CLOUD_NAME", "CLOUDINARY_API_KEY", "CLOUDINARY_API_SECRET", "CANCELLED_BOOKINGS_BLOCK"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture()
def client() -> Iterator[TestClient]:
    """
    FastAPI TestClient bound to the application for HTTP-level tests.
    """
    with TestClient(app) as c:
        yield c


@pytest.fixture()
def db() -> Iterator:
    """
    A standalone SQLAlchemy session for tests that call booking_rules directly.
    """
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()

"""Pytest fixtures for testing"""

import pytest
from datetime import date
from typing import Generator
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from credimanager.api.main import create_app
from credimanager.config import settings
from credimanager.domain.models import Borrower, PortfolioState
from credimanager.domain.reconciliation import originate_loan
from credimanager.infrastructure.database.models import Base
from credimanager.infrastructure.database.repositories import SnapshotRepository
from credimanager.infrastructure.database.session import get_db


# Test database
TEST_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db() -> Generator[Session, None, None]:
    """Create test database and session"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db: Session) -> TestClient:
    """FastAPI test client on the test database, starting from an empty portfolio"""
    SnapshotRepository(db, settings.storage_key).save_state(PortfolioState())
    db.commit()

    app = create_app()

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    return TestClient(app)


@pytest.fixture
def borrower() -> Borrower:
    return Borrower(id="b-test-001", name="Ana Lima", national_id="111.222.333-44", phone="(11) 90000-0000")


@pytest.fixture
def zero_rate_loan():
    """1200 over 12 months at 0%, first due 2024-02-01 -> PMT 100"""
    return originate_loan("l-test-001", "b-test-001", 1200.0, 0.0, 12, date(2024, 1, 1))


@pytest.fixture
def portfolio(borrower, zero_rate_loan) -> PortfolioState:
    """One borrower (score 50) with one untouched zero-rate loan"""
    return PortfolioState(borrowers=(borrower,), loans=(zero_rate_loan,))

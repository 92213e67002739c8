"""Pytest fixtures for testing"""

import pytest
from datetime import date, timedelta
from decimal import Decimal
from typing import Callable, Generator
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from microlend_gateway.api.main import create_app
from microlend_gateway.infrastructure.database.models import Base
from microlend_gateway.infrastructure.database.session import get_db
from microlend_gateway.domain.models import Loan


# Test database
TEST_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Fixed reference day (a Monday) so weekday/day-of-month rules are deterministic
REFERENCE_DATE = date(2024, 3, 4)


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
    """Create FastAPI test client with test database"""
    app = create_app()

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    return TestClient(app)


@pytest.fixture
def reference_date() -> date:
    return REFERENCE_DATE


@pytest.fixture
def make_loan() -> Callable[..., Loan]:
    """Factory for loan snapshots: 1000 at 20% over 10 days unless overridden"""

    def _make_loan(**overrides) -> Loan:
        start_date = overrides.pop("start_date", REFERENCE_DATE)
        fields = dict(
            id="loan-1",
            borrower_id="borrower-1",
            principal=Decimal("1000"),
            interest_rate=Decimal("20"),
            total_payable=Decimal("1200"),
            balance=Decimal("1200"),
            start_date=start_date,
            due_date=start_date + timedelta(days=10),
            payment_frequency="daily",
            status="active",
        )
        fields.update(overrides)
        return Loan(**fields)

    return _make_loan

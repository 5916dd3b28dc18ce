"""Pytest fixtures for testing"""

import os

# Keep the app's own engine off PostgreSQL during tests
os.environ.setdefault("DATABASE_URL", "sqlite:///./test.db")

import pytest
from datetime import date
from decimal import Decimal
from typing import Dict, Generator
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from fintrack.api.main import create_app
from fintrack.api.dependencies import get_identity_client
from fintrack.domain.exceptions import AuthenticationError
from fintrack.domain.models import AuthenticatedUser, Debt, Expense, Income
from fintrack.infrastructure.database.models import Base
from fintrack.infrastructure.database.session import get_db


# Test database
TEST_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


class FakeIdentityClient:
    """Stands in for the identity provider; counts verification calls"""

    def __init__(self, users: Dict[str, AuthenticatedUser]):
        self.users = users
        self.calls = 0

    async def verify_token(self, token: str) -> AuthenticatedUser:
        self.calls += 1
        if token not in self.users:
            raise AuthenticationError("Token rejected by identity provider")
        return self.users[token]


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
def identity_client() -> FakeIdentityClient:
    return FakeIdentityClient(
        {
            "token-alice": AuthenticatedUser(uid="user_alice", email="alice@example.com", display_name="Alice"),
            "token-bob": AuthenticatedUser(uid="user_bob", email="bob@example.com", display_name="bob"),
        }
    )


@pytest.fixture
def client(db: Session, identity_client: FakeIdentityClient) -> TestClient:
    """Create FastAPI test client with test database and fake identity provider"""
    app = create_app()

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_identity_client] = lambda: identity_client
    return TestClient(app)


@pytest.fixture
def auth_headers() -> Dict[str, str]:
    return {"Authorization": "Bearer token-alice"}


@pytest.fixture
def other_user_headers() -> Dict[str, str]:
    return {"Authorization": "Bearer token-bob"}


@pytest.fixture
def sample_month_records() -> dict:
    """One month of money records for summary calculations (March 2024)"""
    return {
        "incomes": [
            Income(amount=Decimal("8000000"), date=date(2024, 3, 1), category="salary"),
            Income(amount=Decimal("2000000"), date=date(2024, 3, 20), category="freelance"),
            Income(amount=Decimal("9000000"), date=date(2024, 2, 1), category="salary"),  # previous month
        ],
        "expenses": [
            Expense(amount=Decimal("1500000"), date=date(2024, 3, 5), category="Housing"),
            Expense(amount=Decimal("500000"), date=date(2024, 3, 9), category="Food & Drinks"),
        ],
        "debts": [
            Debt(id="d1", amount=Decimal("1000000"), due_date=date(2024, 2, 15), paid=True),
            Debt(id="d2", amount=Decimal("1000000"), due_date=date(2024, 3, 25), paid=False),
            Debt(id="d3", amount=Decimal("1000000"), due_date=date(2024, 3, 15), paid=False),
            Debt(id="d4", amount=Decimal("1000000"), due_date=date(2024, 4, 15), paid=False),
            Debt(id="d5", amount=Decimal("400000"), due_date=date(2024, 3, 2), paid=True),
        ],
    }

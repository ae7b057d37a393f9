"""Pytest fixtures for testing"""

import uuid
from datetime import datetime, timezone
from typing import Callable, Generator, Sequence

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from pot_ledger.api.main import create_app
from pot_ledger.domain.ledger import LedgerState
from pot_ledger.domain.models import Expense, Member, Settlement, Split
from pot_ledger.domain.splits import equal_splits
from pot_ledger.infrastructure.database.models import Base
from pot_ledger.infrastructure.database.session import get_db

# Test database
TEST_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

POT_ID = "pot-bali"


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
def members() -> list[Member]:
    """Three friends on a trip"""
    return [
        Member(member_id="A", display_name="Alice"),
        Member(member_id="B", display_name="Bob"),
        Member(member_id="C", display_name="Carol"),
    ]


@pytest.fixture
def make_expense() -> Callable[..., Expense]:
    """Build an expense split equally unless explicit splits are given"""

    def _make(
        payer_id: str,
        amount_minor: int,
        participants: Sequence[str] = (),
        splits: Sequence[Split] | None = None,
        currency: str = "USD",
        **fields,
    ) -> Expense:
        return Expense(
            expense_id=fields.pop("expense_id", str(uuid.uuid4())),
            pot_id=fields.pop("pot_id", POT_ID),
            payer_id=payer_id,
            amount_minor=amount_minor,
            currency=currency,
            splits=tuple(splits if splits is not None else equal_splits(amount_minor, list(participants))),
            **fields,
        )

    return _make


@pytest.fixture
def make_settlement() -> Callable[..., Settlement]:
    def _make(from_member_id: str, to_member_id: str, amount_minor: int, currency: str = "USD", **fields) -> Settlement:
        return Settlement(
            settlement_id=fields.pop("settlement_id", str(uuid.uuid4())),
            pot_id=fields.pop("pot_id", POT_ID),
            from_member_id=from_member_id,
            to_member_id=to_member_id,
            amount_minor=amount_minor,
            currency=currency,
            created_at=fields.pop("created_at", datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)),
            **fields,
        )

    return _make


@pytest.fixture
def empty_state(members: list[Member]) -> LedgerState:
    return LedgerState(pot_id=POT_ID, currency="USD", members=tuple(members))

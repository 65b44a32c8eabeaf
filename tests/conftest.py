"""Pytest fixtures for testing"""

import os

# Point the app at SQLite before recurpay.config is imported
os.environ.setdefault("DATABASE_URL", "sqlite:///./test.db")

import pytest
from datetime import date
from decimal import Decimal
from typing import Generator
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from recurpay.api.main import create_app
from recurpay.infrastructure.database.models import Base
from recurpay.infrastructure.database.session import get_db
from recurpay.domain.financing import compute_financing
from recurpay.domain.models import Client, ContractTerms, PaymentRecord


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
def financed_client() -> Client:
    """6-month plan on a 1,000,000 contract with IVA and 10% down (192,780 per month)"""
    terms = ContractTerms(
        contract_value=Decimal("1000000"),
        apply_iva=True,
        down_payment_percentage=Decimal("10"),
        financing_plan_key=6,
    )
    breakdown = compute_financing(terms)
    return Client(
        id="client-financed",
        first_name="Ana",
        last_name="Pérez",
        email="ana.perez@mail.com",
        contract_value=terms.contract_value,
        apply_iva=True,
        down_payment_percentage=terms.down_payment_percentage,
        financing_plan=6,
        breakdown=breakdown,
        payment_amount=breakdown.monthly_installment,
        payment_day_of_month=15,
        next_payment_date=date(2025, 3, 15),
    )


@pytest.fixture
def recurring_client() -> Client:
    """Service subscription without a contract, 50,000 per month"""
    return Client(
        id="client-recurring",
        first_name="Luis",
        last_name="Gómez",
        email="luis.gomez@mail.com",
        payment_amount=Decimal("50000"),
        payment_day_of_month=5,
        next_payment_date=date(2025, 3, 5),
    )


@pytest.fixture
def single_payment_client() -> Client:
    """500,000 contract without financing, billed once"""
    terms = ContractTerms(contract_value=Decimal("500000"), apply_iva=True)
    breakdown = compute_financing(terms)
    return Client(
        id="client-single",
        first_name="Marta",
        last_name="Ruiz",
        email="marta.ruiz@mail.com",
        contract_value=terms.contract_value,
        breakdown=breakdown,
        payment_amount=breakdown.monthly_installment,
        payment_day_of_month=20,
        next_payment_date=date(2025, 3, 20),
    )


@pytest.fixture
def make_payment():
    """Factory for payment records; validated unless told otherwise"""

    def _make(payment_date: date, amount: str, status: str | None = "validated") -> PaymentRecord:
        return PaymentRecord(payment_date=payment_date, amount_paid=Decimal(amount), status=status)

    return _make

"""Pytest fixtures for testing"""

import pytest
from datetime import date
from decimal import Decimal
from typing import Generator
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker
from loan_engine.api.main import create_app
from loan_engine.api.dependencies import provide_session_factory
from loan_engine.domain.models import Company, Loan, LoanStatus
from loan_engine.infrastructure.database.models import Base
from loan_engine.infrastructure.database.session import create_db_engine, create_session_factory
from loan_engine.services.companies import CompanyRegistry
from loan_engine.services.loans import LoanLifecycleManager
from loan_engine.services.payments import PaymentProcessor


@pytest.fixture
def session_factory(tmp_path) -> Generator[sessionmaker, None, None]:
    """Fresh SQLite file database per test (file, not :memory:, so threads share it)"""
    engine = create_db_engine(f"sqlite:///{tmp_path / 'loans.db'}")
    Base.metadata.create_all(bind=engine)
    try:
        yield create_session_factory(engine)
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def registry(session_factory: sessionmaker) -> CompanyRegistry:
    return CompanyRegistry(session_factory)


@pytest.fixture
def manager(session_factory: sessionmaker) -> LoanLifecycleManager:
    return LoanLifecycleManager(session_factory)


@pytest.fixture
def processor(session_factory: sessionmaker) -> PaymentProcessor:
    return PaymentProcessor(session_factory)


@pytest.fixture
def lender(registry: CompanyRegistry) -> Company:
    return registry.create_company(
        Company(name="Lender Corp", registration_number="LC123456", tax_id="LTAX123456")
    )


@pytest.fixture
def borrower(registry: CompanyRegistry) -> Company:
    return registry.create_company(
        Company(name="Borrower Inc", registration_number="BI123456", tax_id="BTAX123456")
    )


@pytest.fixture
def loan_terms(lender: Company, borrower: Company) -> Loan:
    """Two-year monthly loan: 100,000 at 5% from 2025-01-01"""
    return Loan(
        loan_number="L2025-001",
        lender_company_id=lender.id,
        borrower_company_id=borrower.id,
        principal_amount=Decimal("100000"),
        interest_rate=Decimal("5.0"),
        start_date=date(2025, 1, 1),
        maturity_date=date(2027, 1, 1),
        payment_frequency="Monthly",
        status=LoanStatus.ACTIVE.value,
    )


@pytest.fixture
def client(session_factory: sessionmaker) -> TestClient:
    """Create FastAPI test client with test database"""
    app = create_app()
    app.dependency_overrides[provide_session_factory] = lambda: session_factory
    return TestClient(app)

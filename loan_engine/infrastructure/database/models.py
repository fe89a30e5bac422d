"""SQLAlchemy ORM models for companies, loans, schedules and payments"""

import uuid
from datetime import datetime, timezone
from sqlalchemy import Column, String, Boolean, DateTime, Date, Integer, Numeric, ForeignKey, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()

MONEY = Numeric(14, 2)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CompanyRecord(Base):
    """Lender or borrower party"""

    __tablename__ = "companies"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(Text, nullable=False)
    registration_number = Column(String(64), nullable=False, unique=True)
    tax_id = Column(Text, nullable=False, default="")
    contact_person = Column(Text, nullable=False, default="")
    email = Column(Text, nullable=False, default="")
    phone = Column(Text, nullable=False, default="")
    address = Column(Text, nullable=False, default="")
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)


class LoanRecord(Base):
    """Loan agreement; outstanding_amount and status are the mutable ledger state"""

    __tablename__ = "loans"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    loan_number = Column(String(64), nullable=False, unique=True)
    lender_company_id = Column(UUID(as_uuid=True), ForeignKey("companies.id"), nullable=False, index=True)
    borrower_company_id = Column(UUID(as_uuid=True), ForeignKey("companies.id"), nullable=False, index=True)
    principal_amount = Column(MONEY, nullable=False)
    outstanding_amount = Column(MONEY, nullable=False)
    interest_rate = Column(Numeric(9, 4), nullable=False)
    start_date = Column(Date, nullable=False)
    maturity_date = Column(Date, nullable=False)
    payment_frequency = Column(String(20), nullable=False)
    payment_day = Column(Integer, nullable=False, default=0)
    status = Column(String(20), nullable=False, default="Pending", index=True)
    collateral_details = Column(Text, nullable=False, default="")
    notes = Column(Text, nullable=False, default="")
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)

    schedule_items = relationship(
        "LoanScheduleItemRecord", back_populates="loan", order_by="LoanScheduleItemRecord.scheduled_date"
    )
    payments = relationship("LoanPaymentRecord", back_populates="loan")


class LoanPaymentRecord(Base):
    """Immutable settlement record"""

    __tablename__ = "loan_payments"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    loan_id = Column(UUID(as_uuid=True), ForeignKey("loans.id"), nullable=False, index=True)
    payment_number = Column(String(64), nullable=False)
    payment_date = Column(Date, nullable=False)
    principal_amount = Column(MONEY, nullable=False)
    interest_amount = Column(MONEY, nullable=False)
    total_amount = Column(MONEY, nullable=False)
    payment_method = Column(Text, nullable=False)
    transaction_reference = Column(Text, nullable=False, default="")
    notes = Column(Text, nullable=False, default="")
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    loan = relationship("LoanRecord", back_populates="payments")


class LoanScheduleItemRecord(Base):
    """Planned installment; only status and actual_payment_id change after creation"""

    __tablename__ = "loan_schedule_items"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    loan_id = Column(UUID(as_uuid=True), ForeignKey("loans.id"), nullable=False, index=True)
    scheduled_date = Column(Date, nullable=False, index=True)
    principal_amount = Column(MONEY, nullable=False)
    interest_amount = Column(MONEY, nullable=False)
    total_amount = Column(MONEY, nullable=False)
    status = Column(String(20), nullable=False, default="Pending", index=True)
    actual_payment_id = Column(UUID(as_uuid=True), ForeignKey("loan_payments.id"), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)

    loan = relationship("LoanRecord", back_populates="schedule_items")

"""Data access layer for companies, loans, schedule items and payments"""

import uuid
from datetime import date
from decimal import Decimal
from typing import List, Optional
from sqlalchemy import and_, or_
from sqlalchemy.orm import Session
from loan_engine.infrastructure.database.models import (
    CompanyRecord,
    LoanRecord,
    LoanPaymentRecord,
    LoanScheduleItemRecord,
)
from loan_engine.domain.models import (
    Company,
    Loan,
    LoanStatus,
    PartyRole,
    Payment,
    ScheduleItem,
    ScheduleItemStatus,
)


class CompanyRepository:
    """Repository for lender/borrower companies"""

    def __init__(self, db: Session):
        self.db = db

    def create_company(self, company: Company) -> CompanyRecord:
        db_company = CompanyRecord(
            name=company.name,
            registration_number=company.registration_number,
            tax_id=company.tax_id,
            contact_person=company.contact_person,
            email=company.email,
            phone=company.phone,
            address=company.address,
            is_active=company.is_active,
        )
        self.db.add(db_company)
        self.db.flush()  # Get ID without committing
        return db_company

    def get_company_by_id(self, company_id: uuid.UUID) -> Optional[CompanyRecord]:
        return self.db.query(CompanyRecord).filter(CompanyRecord.id == company_id).first()

    def get_company_by_registration_number(self, registration_number: str) -> Optional[CompanyRecord]:
        return (
            self.db.query(CompanyRecord)
            .filter(CompanyRecord.registration_number == registration_number)
            .first()
        )


class LoanRepository:
    """Repository for loans"""

    def __init__(self, db: Session):
        self.db = db

    def create_loan(self, loan: Loan) -> LoanRecord:
        db_loan = LoanRecord(
            loan_number=loan.loan_number,
            lender_company_id=loan.lender_company_id,
            borrower_company_id=loan.borrower_company_id,
            principal_amount=loan.principal_amount,
            outstanding_amount=loan.outstanding_amount,
            interest_rate=loan.interest_rate,
            start_date=loan.start_date,
            maturity_date=loan.maturity_date,
            payment_frequency=loan.payment_frequency,
            payment_day=loan.payment_day,
            status=loan.status,
            collateral_details=loan.collateral_details,
            notes=loan.notes,
        )
        self.db.add(db_loan)
        self.db.flush()
        return db_loan

    def get_loan_by_id(self, loan_id: uuid.UUID) -> Optional[LoanRecord]:
        return self.db.query(LoanRecord).filter(LoanRecord.id == loan_id).first()

    def get_loan_for_update(self, loan_id: uuid.UUID) -> Optional[LoanRecord]:
        """Fetch loan holding an exclusive row lock until the transaction ends"""
        return (
            self.db.query(LoanRecord)
            .filter(LoanRecord.id == loan_id)
            .with_for_update()
            .first()
        )

    def get_loan_by_number(self, loan_number: str) -> Optional[LoanRecord]:
        return self.db.query(LoanRecord).filter(LoanRecord.loan_number == loan_number).first()

    def list_loans_by_party(self, company_id: uuid.UUID, role: PartyRole) -> List[LoanRecord]:
        """Loans where the company plays the given role, most recent first"""
        if role == PartyRole.LENDER:
            condition = LoanRecord.lender_company_id == company_id
        elif role == PartyRole.BORROWER:
            condition = LoanRecord.borrower_company_id == company_id
        else:
            condition = or_(
                LoanRecord.lender_company_id == company_id,
                LoanRecord.borrower_company_id == company_id,
            )
        return (
            self.db.query(LoanRecord)
            .filter(condition)
            .order_by(LoanRecord.created_at.desc())
            .all()
        )

    def set_status(self, loan_id: uuid.UUID, status: str) -> int:
        """Overwrite status; returns the number of rows matched"""
        return (
            self.db.query(LoanRecord)
            .filter(LoanRecord.id == loan_id)
            .update({LoanRecord.status: status}, synchronize_session=False)
        )

    def default_loans_with_overdue_items(self, overdue_before: date) -> int:
        """Mark Active loans Defaulted when an Overdue item is dated before the cutoff"""
        return (
            self.db.query(LoanRecord)
            .filter(
                LoanRecord.status == LoanStatus.ACTIVE.value,
                LoanRecord.schedule_items.any(
                    and_(
                        LoanScheduleItemRecord.status == ScheduleItemStatus.OVERDUE.value,
                        LoanScheduleItemRecord.scheduled_date < overdue_before,
                    )
                ),
            )
            .update({LoanRecord.status: LoanStatus.DEFAULTED.value}, synchronize_session=False)
        )


class ScheduleRepository:
    """Repository for planned installments"""

    def __init__(self, db: Session):
        self.db = db

    def create_items(self, loan_id: uuid.UUID, items: List[ScheduleItem]) -> List[LoanScheduleItemRecord]:
        db_items = [
            LoanScheduleItemRecord(
                loan_id=loan_id,
                scheduled_date=item.scheduled_date,
                principal_amount=item.principal_amount,
                interest_amount=item.interest_amount,
                total_amount=item.total_amount,
                status=ScheduleItemStatus.PENDING.value,
            )
            for item in items
        ]
        self.db.add_all(db_items)
        self.db.flush()
        return db_items

    def get_schedule(self, loan_id: uuid.UUID) -> List[LoanScheduleItemRecord]:
        return (
            self.db.query(LoanScheduleItemRecord)
            .filter(LoanScheduleItemRecord.loan_id == loan_id)
            .order_by(LoanScheduleItemRecord.scheduled_date.asc())
            .all()
        )

    def get_item_for_update(self, item_id: uuid.UUID) -> Optional[LoanScheduleItemRecord]:
        """Fetch schedule item holding an exclusive row lock until the transaction ends"""
        return (
            self.db.query(LoanScheduleItemRecord)
            .filter(LoanScheduleItemRecord.id == item_id)
            .with_for_update()
            .first()
        )

    def mark_overdue(self, today: date) -> int:
        """Pending items dated strictly before today become Overdue; returns the count"""
        return (
            self.db.query(LoanScheduleItemRecord)
            .filter(
                LoanScheduleItemRecord.status == ScheduleItemStatus.PENDING.value,
                LoanScheduleItemRecord.scheduled_date < today,
            )
            .update(
                {LoanScheduleItemRecord.status: ScheduleItemStatus.OVERDUE.value},
                synchronize_session=False,
            )
        )


class PaymentRepository:
    """Repository for recorded payments"""

    def __init__(self, db: Session):
        self.db = db

    def create_payment(self, payment: Payment) -> LoanPaymentRecord:
        db_payment = LoanPaymentRecord(
            loan_id=payment.loan_id,
            payment_number=payment.payment_number,
            payment_date=payment.payment_date,
            principal_amount=payment.principal_amount,
            interest_amount=payment.interest_amount,
            total_amount=payment.total_amount,
            payment_method=payment.payment_method,
            transaction_reference=payment.transaction_reference,
            notes=payment.notes,
        )
        self.db.add(db_payment)
        self.db.flush()
        return db_payment

    def get_payments(self, loan_id: uuid.UUID) -> List[LoanPaymentRecord]:
        return (
            self.db.query(LoanPaymentRecord)
            .filter(LoanPaymentRecord.loan_id == loan_id)
            .order_by(LoanPaymentRecord.payment_date.asc(), LoanPaymentRecord.created_at.asc())
            .all()
        )


def to_company(record: CompanyRecord) -> Company:
    return Company(
        id=record.id,
        name=record.name,
        registration_number=record.registration_number,
        tax_id=record.tax_id,
        contact_person=record.contact_person,
        email=record.email,
        phone=record.phone,
        address=record.address,
        is_active=record.is_active,
        created_at=record.created_at,
    )


def to_loan(record: LoanRecord) -> Loan:
    return Loan(
        id=record.id,
        loan_number=record.loan_number,
        lender_company_id=record.lender_company_id,
        borrower_company_id=record.borrower_company_id,
        principal_amount=Decimal(record.principal_amount),
        outstanding_amount=Decimal(record.outstanding_amount),
        interest_rate=Decimal(record.interest_rate),
        start_date=record.start_date,
        maturity_date=record.maturity_date,
        payment_frequency=record.payment_frequency,
        payment_day=record.payment_day,
        status=record.status,
        collateral_details=record.collateral_details,
        notes=record.notes,
        created_at=record.created_at,
        updated_at=record.updated_at,
    )


def to_schedule_item(record: LoanScheduleItemRecord) -> ScheduleItem:
    return ScheduleItem(
        id=record.id,
        loan_id=record.loan_id,
        scheduled_date=record.scheduled_date,
        principal_amount=Decimal(record.principal_amount),
        interest_amount=Decimal(record.interest_amount),
        total_amount=Decimal(record.total_amount),
        status=record.status,
        actual_payment_id=record.actual_payment_id,
    )


def to_payment(record: LoanPaymentRecord) -> Payment:
    return Payment(
        id=record.id,
        loan_id=record.loan_id,
        payment_number=record.payment_number,
        payment_date=record.payment_date,
        principal_amount=Decimal(record.principal_amount),
        interest_amount=Decimal(record.interest_amount),
        total_amount=Decimal(record.total_amount),
        payment_method=record.payment_method,
        transaction_reference=record.transaction_reference,
        notes=record.notes,
        created_at=record.created_at,
    )

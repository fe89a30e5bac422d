"""Loan lifecycle: creation with schedule, lookups, listing and status changes"""

import logging
import threading
import uuid
from dataclasses import replace
from typing import List, Optional
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import sessionmaker
from loan_engine.domain.exceptions import (
    ConflictError,
    InvalidAmountError,
    InvalidRateError,
    InvalidRoleError,
    InvalidStatusError,
    InvalidTermError,
    NotFoundError,
    SamePartyError,
    UnsupportedFrequencyError,
)
from loan_engine.domain.models import Loan, LoanStatus, PartyRole, PaymentFrequency, ScheduleItem
from loan_engine.domain.schedule import generate_schedule
from loan_engine.infrastructure.database.repositories import (
    CompanyRepository,
    LoanRepository,
    ScheduleRepository,
    to_loan,
    to_schedule_item,
)
from loan_engine.infrastructure.database.session import unit_of_work
from loan_engine.infrastructure.observability.logging import log_loan_created
from loan_engine.infrastructure.observability.metrics import loans_created_counter, schedule_items_generated_counter
from loan_engine.utils.money import MAX_AMOUNT, MAX_RATE, ZERO, bounded_decimal, to_money, to_rate

VALID_STATUSES = {status.value for status in LoanStatus}


def parse_status(status: str) -> str:
    if status not in VALID_STATUSES:
        raise InvalidStatusError(f"Invalid loan status: {status}")
    return LoanStatus(status).value


def parse_frequency(frequency: str) -> str:
    try:
        return PaymentFrequency(frequency).value
    except ValueError:
        raise UnsupportedFrequencyError(f"Unsupported payment frequency: {frequency}") from None


def parse_role(role: str) -> PartyRole:
    try:
        return PartyRole(role)
    except ValueError:
        raise InvalidRoleError(f"Invalid role specified: {role}") from None


def validate_terms(loan: Loan) -> Loan:
    """
    Check loan terms and return a normalized copy (amounts in cents, rate
    to four places, outstanding reset to principal).

    Raises the matching ValidationError subclass on the first failed rule.
    """
    if loan.lender_company_id == loan.borrower_company_id:
        raise SamePartyError("Lender and borrower cannot be the same company")

    amount = bounded_decimal(loan.principal_amount, MAX_AMOUNT)
    if amount is None:
        raise InvalidAmountError(f"Principal amount must be a finite value below {MAX_AMOUNT:f}")
    principal = to_money(amount)
    if principal <= ZERO:
        raise InvalidAmountError("Principal amount must be greater than zero")

    rate = bounded_decimal(loan.interest_rate, MAX_RATE)
    if rate is None:
        raise InvalidRateError(f"Interest rate must be a finite percentage below {MAX_RATE:f}")
    if rate < 0:
        raise InvalidRateError("Interest rate cannot be negative")
    # Stored as NUMERIC(9,4); the schedule is built from the stored value
    rate = to_rate(rate)

    if loan.start_date >= loan.maturity_date:
        raise InvalidTermError("Start date must be before maturity date")

    if not 0 <= loan.payment_day <= 31:
        raise InvalidTermError(f"Payment day must be between 1 and 31 (0 for none), got {loan.payment_day}")

    return replace(
        loan,
        principal_amount=principal,
        outstanding_amount=principal,
        interest_rate=rate,
        payment_frequency=parse_frequency(loan.payment_frequency),
        status=parse_status(loan.status),
    )


class LoanLifecycleManager:
    """Creates loans together with their schedules and manages loan status"""

    def __init__(self, session_factory: Optional[sessionmaker] = None):
        self.session_factory = session_factory

    def create_loan(self, loan: Loan, cancel_event: Optional[threading.Event] = None) -> Loan:
        """
        Validate terms, persist the loan and its Pending schedule in one
        unit of work. Nothing is persisted if any step fails.

        Raises:
            SamePartyError, InvalidAmountError, InvalidRateError, InvalidTermError,
            InvalidStatusError, UnsupportedFrequencyError: invalid terms
            NotFoundError: lender or borrower company does not exist
            ConflictError: loan number already used
        """
        terms = validate_terms(loan)
        schedule = generate_schedule(terms)

        try:
            with unit_of_work(self.session_factory, cancel_event=cancel_event) as db:
                companies = CompanyRepository(db)
                for role, company_id in (("Lender", terms.lender_company_id), ("Borrower", terms.borrower_company_id)):
                    if companies.get_company_by_id(company_id) is None:
                        raise NotFoundError(f"{role} company {company_id} not found")

                loans = LoanRepository(db)
                if loans.get_loan_by_number(terms.loan_number) is not None:
                    raise ConflictError(f"Loan number {terms.loan_number} already exists")

                db_loan = loans.create_loan(terms)
                ScheduleRepository(db).create_items(db_loan.id, schedule)
                created = to_loan(db_loan)
        except IntegrityError as e:
            raise ConflictError(f"Loan number {terms.loan_number} already exists") from e

        loans_created_counter.labels(frequency=created.payment_frequency).inc()
        schedule_items_generated_counter.inc(len(schedule))
        log_loan_created(str(created.id), created.loan_number, created.principal_amount, len(schedule))
        return created

    def get_loan(self, loan_id: uuid.UUID, cancel_event: Optional[threading.Event] = None) -> Loan:
        with unit_of_work(self.session_factory, serializable=False, cancel_event=cancel_event) as db:
            record = LoanRepository(db).get_loan_by_id(loan_id)
            if record is None:
                raise NotFoundError(f"Loan {loan_id} not found")
            return to_loan(record)

    def get_schedule(self, loan_id: uuid.UUID, cancel_event: Optional[threading.Event] = None) -> List[ScheduleItem]:
        """Schedule items ordered by scheduled date"""
        with unit_of_work(self.session_factory, serializable=False, cancel_event=cancel_event) as db:
            if LoanRepository(db).get_loan_by_id(loan_id) is None:
                raise NotFoundError(f"Loan {loan_id} not found")
            return [to_schedule_item(item) for item in ScheduleRepository(db).get_schedule(loan_id)]

    def list_loans_by_party(
        self, company_id: uuid.UUID, role: str, cancel_event: Optional[threading.Event] = None
    ) -> List[Loan]:
        """
        Loans where the company is the lender, the borrower, or either
        ("any"), most recent first.
        """
        party_role = parse_role(role)
        with unit_of_work(self.session_factory, serializable=False, cancel_event=cancel_event) as db:
            return [to_loan(record) for record in LoanRepository(db).list_loans_by_party(company_id, party_role)]

    def update_status(self, loan_id: uuid.UUID, status: str, cancel_event: Optional[threading.Event] = None) -> None:
        """
        Overwrite the loan status. Any of the four statuses is accepted from
        any current status; there is no transition graph.
        """
        new_status = parse_status(status)
        with unit_of_work(self.session_factory, cancel_event=cancel_event) as db:
            if LoanRepository(db).set_status(loan_id, new_status) == 0:
                raise NotFoundError(f"Loan {loan_id} not found")

        logging.info(
            "Loan status updated",
            extra={"step": "loan_status_updated", "loan_id": str(loan_id), "status": new_status},
        )

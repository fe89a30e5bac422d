"""Payment processing against a loan's schedule"""

import logging
import threading
import uuid
from dataclasses import replace
from typing import List, Optional
from sqlalchemy.orm import sessionmaker
from loan_engine.domain.exceptions import (
    AlreadyPaidError,
    AmountMismatchError,
    ExceedsOutstandingError,
    InvalidAmountError,
    MismatchedLoanError,
    NotFoundError,
    PaymentRejectedError,
    ValidationError,
)
from loan_engine.domain.models import LoanStatus, Payment, ScheduleItemStatus
from loan_engine.infrastructure.database.repositories import (
    LoanRepository,
    PaymentRepository,
    ScheduleRepository,
    to_payment,
)
from loan_engine.infrastructure.database.session import unit_of_work
from loan_engine.infrastructure.observability.logging import log_payment_recorded
from loan_engine.infrastructure.observability.metrics import loans_completed_counter, record_payment_outcome
from loan_engine.utils.money import MAX_AMOUNT, ZERO, bounded_decimal, to_money


class PaymentProcessor:
    """Records payments, keeping schedule item, payment row and loan balance consistent"""

    def __init__(self, session_factory: Optional[sessionmaker] = None):
        self.session_factory = session_factory

    def record_payment(
        self,
        payment: Payment,
        schedule_item_id: uuid.UUID,
        cancel_event: Optional[threading.Event] = None,
    ) -> Payment:
        """
        Record a payment settling one schedule item.

        Flow (single unit of work):
        1. Lock the loan row, then the schedule item row (FOR UPDATE)
        2. Validate amounts against the locked state
        3. Insert payment, mark item Paid, decrement outstanding
        4. Loan becomes Completed when outstanding reaches zero

        Concurrent payments on the same loan serialize on the loan row lock,
        so each one sees the balance left by the previous one.

        Raises:
            NotFoundError: loan or schedule item does not exist
            InvalidAmountError: total is not positive, a portion is negative,
                or an amount is not finite or too large to store
            AmountMismatchError: total != principal + interest
            ExceedsOutstandingError: principal above the outstanding balance
            MismatchedLoanError: schedule item belongs to another loan
            AlreadyPaidError: schedule item already settled
        """
        try:
            payment = self._normalize(payment)

            with unit_of_work(self.session_factory, cancel_event=cancel_event) as db:
                loans = LoanRepository(db)
                schedule = ScheduleRepository(db)

                db_loan = loans.get_loan_for_update(payment.loan_id)
                if db_loan is None:
                    raise NotFoundError(f"Loan {payment.loan_id} not found")

                db_item = schedule.get_item_for_update(schedule_item_id)
                if db_item is None:
                    raise NotFoundError(f"Schedule item {schedule_item_id} not found")

                outstanding = to_money(db_loan.outstanding_amount)
                self._validate(payment, outstanding, db_item.loan_id, db_item.status)

                db_payment = PaymentRepository(db).create_payment(payment)

                db_item.status = ScheduleItemStatus.PAID.value
                db_item.actual_payment_id = db_payment.id

                new_outstanding = outstanding - payment.principal_amount
                db_loan.outstanding_amount = new_outstanding
                if new_outstanding <= ZERO:
                    db_loan.status = LoanStatus.COMPLETED.value

                db.flush()
                recorded = to_payment(db_payment)
                loan_status = db_loan.status
        except (ValidationError, PaymentRejectedError) as e:
            record_payment_outcome(e.kind)
            logging.warning(
                f"Payment rejected: {e}",
                extra={"loan_id": str(payment.loan_id), "schedule_item_id": str(schedule_item_id), "kind": e.kind},
            )
            raise

        record_payment_outcome("recorded")
        if loan_status == LoanStatus.COMPLETED.value:
            loans_completed_counter.inc()
        log_payment_recorded(
            str(recorded.loan_id),
            str(recorded.id),
            str(schedule_item_id),
            recorded.principal_amount,
            new_outstanding,
            loan_status,
        )
        return recorded

    @staticmethod
    def _normalize(payment: Payment) -> Payment:
        """Round the three amounts to cents; non-finite or oversized values are InvalidAmount"""
        amounts = {}
        for field in ("principal_amount", "interest_amount", "total_amount"):
            value = bounded_decimal(getattr(payment, field), MAX_AMOUNT)
            if value is None:
                raise InvalidAmountError(f"Payment {field} must be a finite value below {MAX_AMOUNT:f}")
            amounts[field] = to_money(value)
        return replace(payment, **amounts)

    @staticmethod
    def _validate(payment: Payment, outstanding, item_loan_id: uuid.UUID, item_status: str) -> None:
        if payment.total_amount <= ZERO:
            raise InvalidAmountError("Payment amount must be greater than zero")

        if payment.principal_amount < ZERO or payment.interest_amount < ZERO:
            raise InvalidAmountError("Principal and interest portions cannot be negative")

        if payment.total_amount != payment.principal_amount + payment.interest_amount:
            raise AmountMismatchError("Total payment amount must equal principal amount plus interest amount")

        if payment.principal_amount > outstanding:
            raise ExceedsOutstandingError(
                f"Principal payment amount ({payment.principal_amount}) exceeds outstanding loan amount ({outstanding})"
            )

        if item_loan_id != payment.loan_id:
            raise MismatchedLoanError("Schedule item does not belong to the specified loan")

        if item_status == ScheduleItemStatus.PAID.value:
            raise AlreadyPaidError("This schedule item has already been paid")

    def list_payments(self, loan_id: uuid.UUID, cancel_event: Optional[threading.Event] = None) -> List[Payment]:
        """Payments recorded against a loan, oldest first"""
        with unit_of_work(self.session_factory, serializable=False, cancel_event=cancel_event) as db:
            if LoanRepository(db).get_loan_by_id(loan_id) is None:
                raise NotFoundError(f"Loan {loan_id} not found")
            return [to_payment(record) for record in PaymentRepository(db).get_payments(loan_id)]

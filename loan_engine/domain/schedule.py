"""Amortization schedule generation for fixed-rate loans"""

from decimal import Decimal
from typing import Dict, List
from loan_engine.domain.exceptions import InvalidTermError, UnsupportedFrequencyError
from loan_engine.domain.models import Loan, ScheduleItem, ScheduleItemStatus
from loan_engine.utils.date_utils import add_months, months_between, set_day_of_month
from loan_engine.utils.money import ZERO, as_decimal, to_money

FREQUENCY_MONTHS: Dict[str, int] = {
    "Monthly": 1,
    "Quarterly": 3,
    "Semi-Annually": 6,
    "Annually": 12,
}


def period_months(frequency: str) -> int:
    """Length of one payment period in months"""
    try:
        return FREQUENCY_MONTHS[frequency]
    except KeyError:
        raise UnsupportedFrequencyError(f"Unsupported payment frequency: {frequency}") from None


def monthly_payment(principal: Decimal, monthly_rate: Decimal, term_months: int) -> Decimal:
    """
    Level monthly payment: P = r * PV / (1 - (1 + r)^-n).

    A zero rate makes the formula 0/0; the payment is then a straight
    principal / n split.
    """
    if monthly_rate == 0:
        return principal / term_months
    return (monthly_rate * principal) / (1 - (1 + monthly_rate) ** -term_months)


def generate_schedule(loan: Loan) -> List[ScheduleItem]:
    """
    Generate the Pending installments for a loan.

    The fixed payment is computed at monthly granularity over the whole term
    and scaled by the period length. Each period charges simple interest on
    the remaining principal for the whole months it spans. The final period
    falls on the maturity date and pays off whatever principal is left.

    Rounding: principal and interest are rounded half-up to cents and the
    total is their sum. The remaining principal is reduced by the rounded
    portion, so the final installment absorbs all rounding drift and the
    principal portions add up to the loan principal exactly.

    A non-final period whose rounded principal and interest are both zero
    (a tiny principal spread over many periods) emits no item: a zero total
    could never be paid. Its interest keeps accruing and is charged by the
    next item emitted, and its date still advances the calendar.

    Raises:
        InvalidTermError: maturity is not at least one calendar month after start
        UnsupportedFrequencyError: unknown payment frequency
    """
    term = months_between(loan.start_date, loan.maturity_date)
    if term <= 0:
        raise InvalidTermError(
            f"Loan term must span at least one month (start {loan.start_date}, maturity {loan.maturity_date})"
        )

    months_per_period = period_months(loan.payment_frequency)
    num_payments = -(-term // months_per_period)  # ceil

    principal = to_money(loan.principal_amount)
    monthly_rate = as_decimal(loan.interest_rate) / 100 / 12
    periodic_payment = monthly_payment(principal, monthly_rate, term) * months_per_period

    items: List[ScheduleItem] = []
    remaining = principal
    current_date = loan.start_date
    accrued_from = loan.start_date

    for i in range(num_payments):
        if remaining <= ZERO:
            break

        is_last = i == num_payments - 1

        payment_date = add_months(current_date, months_per_period)
        if loan.payment_day:
            payment_date = set_day_of_month(payment_date, loan.payment_day)
        if is_last or payment_date > loan.maturity_date:
            payment_date = loan.maturity_date

        months_elapsed = months_between(accrued_from, payment_date)
        interest = remaining * monthly_rate * months_elapsed

        if is_last:
            principal_portion = remaining
        else:
            principal_portion = min(max(periodic_payment - interest, ZERO), remaining)

        principal_portion = to_money(principal_portion)
        interest = to_money(interest)

        if not is_last and principal_portion + interest == ZERO:
            current_date = payment_date
            continue

        items.append(
            ScheduleItem(
                scheduled_date=payment_date,
                principal_amount=principal_portion,
                interest_amount=interest,
                total_amount=principal_portion + interest,
                status=ScheduleItemStatus.PENDING.value,
            )
        )

        remaining -= principal_portion
        accrued_from = payment_date
        current_date = payment_date

    return items

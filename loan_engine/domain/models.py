"""Domain models - pure Python dataclasses representing business entities"""

import uuid
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Optional


class PaymentFrequency(str, Enum):
    MONTHLY = "Monthly"
    QUARTERLY = "Quarterly"
    SEMI_ANNUALLY = "Semi-Annually"
    ANNUALLY = "Annually"


class LoanStatus(str, Enum):
    PENDING = "Pending"
    ACTIVE = "Active"
    COMPLETED = "Completed"
    DEFAULTED = "Defaulted"


class ScheduleItemStatus(str, Enum):
    PENDING = "Pending"
    PAID = "Paid"
    OVERDUE = "Overdue"


class PartyRole(str, Enum):
    LENDER = "lender"
    BORROWER = "borrower"
    ANY = "any"


@dataclass
class Company:
    """Lender or borrower party"""

    name: str
    registration_number: str
    tax_id: str = ""
    contact_person: str = ""
    email: str = ""
    phone: str = ""
    address: str = ""
    is_active: bool = True
    id: Optional[uuid.UUID] = None
    created_at: Optional[datetime] = None


@dataclass
class Loan:
    """Loan agreement between two companies"""

    loan_number: str
    lender_company_id: uuid.UUID
    borrower_company_id: uuid.UUID
    principal_amount: Decimal
    interest_rate: Decimal  # Annual rate as a percentage, e.g. 5.0 for 5%
    start_date: date
    maturity_date: date
    payment_frequency: str  # PaymentFrequency value
    payment_day: int = 0  # Preferred day of month, 0 = keep the start date's day
    status: str = LoanStatus.PENDING.value
    collateral_details: str = ""
    notes: str = ""
    outstanding_amount: Optional[Decimal] = None
    id: Optional[uuid.UUID] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass
class ScheduleItem:
    """Single planned installment of a loan"""

    scheduled_date: date
    principal_amount: Decimal
    interest_amount: Decimal
    total_amount: Decimal
    status: str = ScheduleItemStatus.PENDING.value
    loan_id: Optional[uuid.UUID] = None
    actual_payment_id: Optional[uuid.UUID] = None
    id: Optional[uuid.UUID] = None


@dataclass
class Payment:
    """Actual settlement recorded against a loan"""

    loan_id: uuid.UUID
    payment_number: str
    payment_date: date
    principal_amount: Decimal
    interest_amount: Decimal
    total_amount: Decimal
    payment_method: str
    transaction_reference: str = ""
    notes: str = ""
    id: Optional[uuid.UUID] = None
    created_at: Optional[datetime] = None

"""Pydantic schemas for API request/response validation

Business rules (positive principal, valid frequency, ...) are enforced by the
services so that every failure surfaces with its domain error kind; the
schemas only check shape and types.
"""

import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field


class CompanyCreateRequest(BaseModel):
    """Request body for POST /v1/companies"""

    name: str = Field(..., min_length=1)
    registration_number: str = Field(..., min_length=1)
    tax_id: str = ""
    contact_person: str = ""
    email: str = ""
    phone: str = ""
    address: str = ""
    is_active: bool = True


class CompanyResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    registration_number: str
    tax_id: str
    contact_person: str
    email: str
    phone: str
    address: str
    is_active: bool
    created_at: Optional[datetime] = None


class LoanCreateRequest(BaseModel):
    """Request body for POST /v1/loans"""

    loan_number: str = Field(..., min_length=1)
    lender_company_id: uuid.UUID
    borrower_company_id: uuid.UUID
    principal_amount: Decimal
    interest_rate: Decimal = Field(..., description="Annual rate as a percentage")
    start_date: date
    maturity_date: date
    payment_frequency: str = Field(..., description="Monthly | Quarterly | Semi-Annually | Annually")
    payment_day: int = 0
    status: str = "Pending"
    collateral_details: str = ""
    notes: str = ""


class LoanResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    loan_number: str
    lender_company_id: uuid.UUID
    borrower_company_id: uuid.UUID
    principal_amount: Decimal
    outstanding_amount: Decimal
    interest_rate: Decimal
    start_date: date
    maturity_date: date
    payment_frequency: str
    payment_day: int
    status: str
    collateral_details: str
    notes: str
    created_at: Optional[datetime] = None


class LoanStatusRequest(BaseModel):
    """Request body for PATCH /v1/loans/{loan_id}/status"""

    status: str


class ScheduleItemSchema(BaseModel):
    """Single installment in a loan schedule"""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    scheduled_date: date
    principal_amount: Decimal
    interest_amount: Decimal
    total_amount: Decimal
    status: str
    actual_payment_id: Optional[uuid.UUID] = None


class ScheduleResponse(BaseModel):
    loan_id: uuid.UUID
    items: List[ScheduleItemSchema]


class PaymentRequest(BaseModel):
    """Request body for POST /v1/loans/{loan_id}/payments"""

    schedule_item_id: uuid.UUID
    payment_number: str = Field(..., min_length=1)
    payment_date: date
    principal_amount: Decimal
    interest_amount: Decimal
    total_amount: Decimal
    payment_method: str = Field(..., min_length=1)
    transaction_reference: str = ""
    notes: str = ""


class PaymentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    loan_id: uuid.UUID
    payment_number: str
    payment_date: date
    principal_amount: Decimal
    interest_amount: Decimal
    total_amount: Decimal
    payment_method: str
    transaction_reference: str
    notes: str


class OverdueScanResponse(BaseModel):
    """Response for POST /v1/overdue-scan"""

    items_marked_overdue: int

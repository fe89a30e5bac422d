"""Loan creation, lookup, schedule and status endpoints"""

import uuid
from fastapi import APIRouter, Depends, Response

from loan_engine.api.v1.schemas import (
    LoanCreateRequest,
    LoanResponse,
    LoanStatusRequest,
    ScheduleItemSchema,
    ScheduleResponse,
)
from loan_engine.api.dependencies import get_loan_manager
from loan_engine.domain.models import Loan
from loan_engine.services.loans import LoanLifecycleManager

router = APIRouter()


@router.post("/loans", response_model=LoanResponse, status_code=201)
def create_loan(request_body: LoanCreateRequest, manager: LoanLifecycleManager = Depends(get_loan_manager)):
    """
    Create a loan and its amortization schedule.

    The loan and every schedule item are written in one transaction;
    invalid terms are rejected with 422 before anything is stored.
    """
    loan = manager.create_loan(Loan(**request_body.model_dump()))
    return LoanResponse.model_validate(loan)


@router.get("/loans/{loan_id}", response_model=LoanResponse)
def get_loan(loan_id: uuid.UUID, manager: LoanLifecycleManager = Depends(get_loan_manager)):
    return LoanResponse.model_validate(manager.get_loan(loan_id))


@router.get("/loans/{loan_id}/schedule", response_model=ScheduleResponse)
def get_schedule(loan_id: uuid.UUID, manager: LoanLifecycleManager = Depends(get_loan_manager)):
    items = manager.get_schedule(loan_id)
    return ScheduleResponse(
        loan_id=loan_id,
        items=[ScheduleItemSchema.model_validate(item) for item in items],
    )


@router.patch("/loans/{loan_id}/status", status_code=204)
def update_status(
    loan_id: uuid.UUID,
    request_body: LoanStatusRequest,
    manager: LoanLifecycleManager = Depends(get_loan_manager),
):
    manager.update_status(loan_id, request_body.status)
    return Response(status_code=204)

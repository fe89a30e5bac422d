"""Payment recording and overdue scan endpoints"""

import uuid
from typing import List
from fastapi import APIRouter, Depends

from loan_engine.api.v1.schemas import OverdueScanResponse, PaymentRequest, PaymentResponse
from loan_engine.api.dependencies import get_overdue_scanner, get_payment_processor
from loan_engine.domain.models import Payment
from loan_engine.services.overdue import OverdueScanner
from loan_engine.services.payments import PaymentProcessor

router = APIRouter()


@router.post("/loans/{loan_id}/payments", response_model=PaymentResponse, status_code=201)
def record_payment(
    loan_id: uuid.UUID,
    request_body: PaymentRequest,
    processor: PaymentProcessor = Depends(get_payment_processor),
):
    """Settle one schedule item; 409 if it is already paid, 422 on amount errors"""
    fields = request_body.model_dump(exclude={"schedule_item_id"})
    payment = processor.record_payment(Payment(loan_id=loan_id, **fields), request_body.schedule_item_id)
    return PaymentResponse.model_validate(payment)


@router.get("/loans/{loan_id}/payments", response_model=List[PaymentResponse])
def list_payments(loan_id: uuid.UUID, processor: PaymentProcessor = Depends(get_payment_processor)):
    return [PaymentResponse.model_validate(payment) for payment in processor.list_payments(loan_id)]


@router.post("/overdue-scan", response_model=OverdueScanResponse)
def scan_overdue(scanner: OverdueScanner = Depends(get_overdue_scanner)):
    """Run one overdue pass on demand (normally run on a timer)"""
    return OverdueScanResponse(items_marked_overdue=scanner.scan_overdue())

"""Company registration and lookup endpoints"""

import uuid
from typing import List
from fastapi import APIRouter, Depends, Query

from loan_engine.api.v1.schemas import CompanyCreateRequest, CompanyResponse, LoanResponse
from loan_engine.api.dependencies import get_company_registry, get_loan_manager
from loan_engine.domain.models import Company
from loan_engine.services.companies import CompanyRegistry
from loan_engine.services.loans import LoanLifecycleManager

router = APIRouter()


@router.post("/companies", response_model=CompanyResponse, status_code=201)
def create_company(
    request_body: CompanyCreateRequest,
    registry: CompanyRegistry = Depends(get_company_registry),
):
    """Register a lender or borrower company (409 on duplicate registration number)"""
    company = registry.create_company(Company(**request_body.model_dump()))
    return CompanyResponse.model_validate(company)


@router.get("/companies/by-registration/{registration_number}", response_model=CompanyResponse)
def get_company_by_registration_number(
    registration_number: str,
    registry: CompanyRegistry = Depends(get_company_registry),
):
    return CompanyResponse.model_validate(registry.get_company_by_registration_number(registration_number))


@router.get("/companies/{company_id}", response_model=CompanyResponse)
def get_company(company_id: uuid.UUID, registry: CompanyRegistry = Depends(get_company_registry)):
    return CompanyResponse.model_validate(registry.get_company(company_id))


@router.get("/companies/{company_id}/loans", response_model=List[LoanResponse])
def list_company_loans(
    company_id: uuid.UUID,
    role: str = Query("any", description="lender | borrower | any"),
    manager: LoanLifecycleManager = Depends(get_loan_manager),
):
    """Loans where the company is lender, borrower or either, most recent first"""
    return [LoanResponse.model_validate(loan) for loan in manager.list_loans_by_party(company_id, role)]

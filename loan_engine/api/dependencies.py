"""Dependency injection for FastAPI endpoints"""

from fastapi import Depends, Request
from sqlalchemy.orm import sessionmaker
from loan_engine.infrastructure.database.session import get_session_factory
from loan_engine.services.companies import CompanyRegistry
from loan_engine.services.loans import LoanLifecycleManager
from loan_engine.services.overdue import OverdueScanner
from loan_engine.services.payments import PaymentProcessor


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def provide_session_factory() -> sessionmaker:
    """Session factory for the configured database; overridden in tests"""
    return get_session_factory()


def get_company_registry(session_factory: sessionmaker = Depends(provide_session_factory)) -> CompanyRegistry:
    return CompanyRegistry(session_factory)


def get_loan_manager(session_factory: sessionmaker = Depends(provide_session_factory)) -> LoanLifecycleManager:
    return LoanLifecycleManager(session_factory)


def get_payment_processor(session_factory: sessionmaker = Depends(provide_session_factory)) -> PaymentProcessor:
    return PaymentProcessor(session_factory)


def get_overdue_scanner(session_factory: sessionmaker = Depends(provide_session_factory)) -> OverdueScanner:
    return OverdueScanner(session_factory)

"""Company registry: lender and borrower parties"""

import logging
import threading
import uuid
from typing import Optional
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import sessionmaker
from loan_engine.domain.exceptions import ConflictError, NotFoundError
from loan_engine.domain.models import Company
from loan_engine.infrastructure.database.repositories import CompanyRepository, to_company
from loan_engine.infrastructure.database.session import unit_of_work


class CompanyRegistry:
    """Creates and looks up companies; registration numbers are unique"""

    def __init__(self, session_factory: Optional[sessionmaker] = None):
        self.session_factory = session_factory

    def create_company(self, company: Company, cancel_event: Optional[threading.Event] = None) -> Company:
        """
        Register a company.

        Raises:
            ConflictError: registration number already registered
        """
        try:
            with unit_of_work(self.session_factory, cancel_event=cancel_event) as db:
                repo = CompanyRepository(db)
                if repo.get_company_by_registration_number(company.registration_number) is not None:
                    raise ConflictError(
                        f"Company with registration number {company.registration_number} already exists"
                    )
                created = to_company(repo.create_company(company))
        except IntegrityError as e:
            # Concurrent insert won the unique index after our pre-check
            raise ConflictError(
                f"Company with registration number {company.registration_number} already exists"
            ) from e

        logging.info("Company created", extra={"company_id": str(created.id), "step": "company_created"})
        return created

    def get_company(self, company_id: uuid.UUID, cancel_event: Optional[threading.Event] = None) -> Company:
        with unit_of_work(self.session_factory, serializable=False, cancel_event=cancel_event) as db:
            record = CompanyRepository(db).get_company_by_id(company_id)
            if record is None:
                raise NotFoundError(f"Company {company_id} not found")
            return to_company(record)

    def get_company_by_registration_number(
        self, registration_number: str, cancel_event: Optional[threading.Event] = None
    ) -> Company:
        with unit_of_work(self.session_factory, serializable=False, cancel_event=cancel_event) as db:
            record = CompanyRepository(db).get_company_by_registration_number(registration_number)
            if record is None:
                raise NotFoundError(f"Company with registration number {registration_number} not found")
            return to_company(record)

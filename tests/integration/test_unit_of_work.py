"""Tests for the transactional scope: commit, rollback, cancellation and error translation"""

import pytest
import sqlite3
import threading
from sqlalchemy import func
from sqlalchemy.exc import DBAPIError
from loan_engine.domain.exceptions import OperationCancelledError, SerializationConflictError
from loan_engine.domain.models import Company
from loan_engine.infrastructure.database.models import CompanyRecord
from loan_engine.infrastructure.database.session import translate_db_error, unit_of_work

pytestmark = pytest.mark.integration


class FakePgError(Exception):
    def __init__(self, pgcode):
        super().__init__(f"pgcode {pgcode}")
        self.pgcode = pgcode


def company_count(session_factory) -> int:
    with session_factory() as db:
        return db.query(func.count(CompanyRecord.id)).scalar()


def test_clean_exit_commits(session_factory):
    with unit_of_work(session_factory) as db:
        db.add(CompanyRecord(name="Acme", registration_number="AC-1"))

    assert company_count(session_factory) == 1


def test_exception_rolls_back(session_factory):
    with pytest.raises(ValueError):
        with unit_of_work(session_factory) as db:
            db.add(CompanyRecord(name="Acme", registration_number="AC-1"))
            db.flush()
            raise ValueError("boom")

    assert company_count(session_factory) == 0


def test_cancelled_before_start(session_factory, registry):
    cancel_event = threading.Event()
    cancel_event.set()

    with pytest.raises(OperationCancelledError) as exc_info:
        registry.create_company(Company(name="Acme", registration_number="AC-1"), cancel_event=cancel_event)

    assert exc_info.value.kind == "OperationCancelled"
    assert company_count(session_factory) == 0


def test_cancelled_mid_operation_commits_nothing(session_factory):
    cancel_event = threading.Event()

    with pytest.raises(OperationCancelledError):
        with unit_of_work(session_factory, cancel_event=cancel_event) as db:
            db.add(CompanyRecord(name="Acme", registration_number="AC-1"))
            db.flush()
            cancel_event.set()

    assert company_count(session_factory) == 0


def test_cancellation_blocks_further_statements(session_factory):
    cancel_event = threading.Event()

    with pytest.raises(OperationCancelledError):
        with unit_of_work(session_factory, cancel_event=cancel_event) as db:
            cancel_event.set()
            db.query(CompanyRecord).all()


def test_deadline_exceeded(session_factory):
    with pytest.raises(OperationCancelledError):
        with unit_of_work(session_factory, timeout=0) as db:
            db.add(CompanyRecord(name="Acme", registration_number="AC-1"))

    assert company_count(session_factory) == 0


def test_driver_conflict_surfaces_as_serialization_conflict(session_factory):
    with pytest.raises(SerializationConflictError) as exc_info:
        with unit_of_work(session_factory):
            raise DBAPIError("UPDATE loans", {}, FakePgError("40001"))

    assert exc_info.value.kind == "SerializationConflict"


@pytest.mark.parametrize(
    "orig",
    [
        FakePgError("40001"),
        FakePgError("40P01"),
        Exception(1213, "Deadlock found when trying to get lock"),
        Exception(1205, "Lock wait timeout exceeded"),
        sqlite3.OperationalError("database is locked"),
    ],
)
def test_translate_conflict_errors(orig):
    assert isinstance(translate_db_error(DBAPIError("SELECT 1", {}, orig)), SerializationConflictError)


@pytest.mark.parametrize(
    "orig",
    [
        FakePgError("23505"),
        Exception(1062, "Duplicate entry"),
        sqlite3.OperationalError("no such table: loans"),
    ],
)
def test_translate_leaves_other_errors(orig):
    assert translate_db_error(DBAPIError("SELECT 1", {}, orig)) is None

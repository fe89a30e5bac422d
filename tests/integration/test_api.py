"""HTTP adapter tests: routing, serialization and error kind to status mapping"""

import pytest
import uuid
from datetime import date
from decimal import Decimal
from loan_engine.api.dependencies import get_overdue_scanner
from loan_engine.services.overdue import OverdueScanner

pytestmark = pytest.mark.integration


def create_company(client, name: str, registration_number: str) -> dict:
    response = client.post("/v1/companies", json={"name": name, "registration_number": registration_number})
    assert response.status_code == 201
    return response.json()


@pytest.fixture
def parties(client):
    return create_company(client, "Lender Corp", "LC-API"), create_company(client, "Borrower Inc", "BI-API")


@pytest.fixture
def loan_payload(parties) -> dict:
    lender, borrower = parties
    return {
        "loan_number": "API-LOAN-1",
        "lender_company_id": lender["id"],
        "borrower_company_id": borrower["id"],
        "principal_amount": "100000",
        "interest_rate": "5.0",
        "start_date": "2025-01-01",
        "maturity_date": "2027-01-01",
        "payment_frequency": "Monthly",
        "status": "Active",
    }


def test_health_check(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"
    assert "X-Request-ID" in response.headers


def test_request_id_propagated(client):
    response = client.get("/health", headers={"X-Request-ID": "trace-123"})
    assert response.headers["X-Request-ID"] == "trace-123"


def test_metrics_endpoint(client):
    client.get("/health")
    response = client.get("/metrics")
    assert response.status_code == 200
    assert "http_request_duration_seconds" in response.text


def test_company_lookup(client, parties):
    lender, _ = parties

    response = client.get(f"/v1/companies/{lender['id']}")
    assert response.status_code == 200
    assert response.json()["registration_number"] == "LC-API"

    response = client.get("/v1/companies/by-registration/LC-API")
    assert response.json()["id"] == lender["id"]


def test_duplicate_company_is_conflict(client, parties):
    response = client.post("/v1/companies", json={"name": "Again", "registration_number": "LC-API"})
    assert response.status_code == 409
    assert response.json()["kind"] == "Conflict"


def test_missing_company_is_not_found(client):
    response = client.get(f"/v1/companies/{uuid.uuid4()}")
    assert response.status_code == 404
    assert response.json()["kind"] == "NotFound"


def test_create_loan_and_fetch_schedule(client, loan_payload):
    response = client.post("/v1/loans", json=loan_payload)
    assert response.status_code == 201
    loan = response.json()
    assert Decimal(loan["outstanding_amount"]) == Decimal("100000.00")

    response = client.get(f"/v1/loans/{loan['id']}/schedule")
    assert response.status_code == 200
    schedule = response.json()
    assert schedule["loan_id"] == loan["id"]
    assert len(schedule["items"]) == 24
    assert schedule["items"][0]["scheduled_date"] == "2025-02-01"
    assert Decimal(schedule["items"][0]["interest_amount"]) == Decimal("416.67")


def test_invalid_loan_terms_are_unprocessable(client, loan_payload):
    response = client.post("/v1/loans", json={**loan_payload, "principal_amount": "0"})
    assert response.status_code == 422
    assert response.json()["kind"] == "InvalidAmount"

    response = client.post("/v1/loans", json={**loan_payload, "payment_frequency": "Weekly"})
    assert response.status_code == 422
    assert response.json()["kind"] == "UnsupportedFrequency"


def test_list_company_loans(client, parties, loan_payload):
    lender, borrower = parties
    client.post("/v1/loans", json=loan_payload)

    response = client.get(f"/v1/companies/{borrower['id']}/loans", params={"role": "borrower"})
    assert [loan["loan_number"] for loan in response.json()] == ["API-LOAN-1"]

    response = client.get(f"/v1/companies/{borrower['id']}/loans", params={"role": "lender"})
    assert response.json() == []

    response = client.get(f"/v1/companies/{lender['id']}/loans", params={"role": "guarantor"})
    assert response.status_code == 422
    assert response.json()["kind"] == "InvalidRole"


def test_update_status(client, loan_payload):
    loan_id = client.post("/v1/loans", json=loan_payload).json()["id"]

    response = client.patch(f"/v1/loans/{loan_id}/status", json={"status": "Defaulted"})
    assert response.status_code == 204
    assert client.get(f"/v1/loans/{loan_id}").json()["status"] == "Defaulted"

    response = client.patch(f"/v1/loans/{loan_id}/status", json={"status": "Closed"})
    assert response.status_code == 422
    assert response.json()["kind"] == "InvalidStatus"


def test_record_payment_and_reject_repeat(client, loan_payload):
    loan_id = client.post("/v1/loans", json=loan_payload).json()["id"]
    item = client.get(f"/v1/loans/{loan_id}/schedule").json()["items"][0]
    body = {
        "schedule_item_id": item["id"],
        "payment_number": "PAY-001",
        "payment_date": item["scheduled_date"],
        "principal_amount": item["principal_amount"],
        "interest_amount": item["interest_amount"],
        "total_amount": item["total_amount"],
        "payment_method": "Bank Transfer",
    }

    response = client.post(f"/v1/loans/{loan_id}/payments", json=body)
    assert response.status_code == 201
    payment = response.json()

    schedule = client.get(f"/v1/loans/{loan_id}/schedule").json()
    assert schedule["items"][0]["status"] == "Paid"
    assert schedule["items"][0]["actual_payment_id"] == payment["id"]

    response = client.post(f"/v1/loans/{loan_id}/payments", json={**body, "payment_number": "PAY-002"})
    assert response.status_code == 409
    assert response.json()["kind"] == "AlreadyPaid"

    response = client.get(f"/v1/loans/{loan_id}/payments")
    assert [p["id"] for p in response.json()] == [payment["id"]]


def test_amount_mismatch_is_unprocessable(client, loan_payload):
    loan_id = client.post("/v1/loans", json=loan_payload).json()["id"]
    item = client.get(f"/v1/loans/{loan_id}/schedule").json()["items"][0]

    response = client.post(
        f"/v1/loans/{loan_id}/payments",
        json={
            "schedule_item_id": item["id"],
            "payment_number": "PAY-001",
            "payment_date": "2025-02-01",
            "principal_amount": "100",
            "interest_amount": "10",
            "total_amount": "200",
            "payment_method": "Cash",
        },
    )
    assert response.status_code == 422
    assert response.json()["kind"] == "AmountMismatch"


def test_overdue_scan_endpoint(client, session_factory, loan_payload):
    client.post("/v1/loans", json=loan_payload)
    client.app.dependency_overrides[get_overdue_scanner] = lambda: OverdueScanner(
        session_factory, today=lambda: date(2025, 3, 2)
    )

    response = client.post("/v1/overdue-scan")
    assert response.status_code == 200
    assert response.json() == {"items_marked_overdue": 2}

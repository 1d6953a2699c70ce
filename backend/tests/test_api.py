"""
Tests per la superficie HTTP /api/v1.

I service sono sostituiti con quelli costruiti sui repository in memoria;
l'operatore arriva da un vero token JWT.
"""

import uuid

import pytest
from fastapi.testclient import TestClient

from app.core.clock import station_now
from app.core.deps import (
    get_employee_ledger_service,
    get_nozzle_assignment_service,
    get_shift_accounting_service,
    get_shift_service,
)
from app.core.security import create_access_token
from app.main import app
from app.schemas.enums import Role


def auth_header(user_id, username, role: Role) -> dict[str, str]:
    token = create_access_token(str(user_id), username, role.value)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def client(services):
    app.dependency_overrides[get_shift_service] = lambda: services.shifts
    app.dependency_overrides[get_nozzle_assignment_service] = lambda: services.nozzles
    app.dependency_overrides[get_shift_accounting_service] = lambda: services.accounting
    app.dependency_overrides[get_employee_ledger_service] = lambda: services.ledger
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def manager_headers():
    return auth_header(uuid.uuid4(), "manager", Role.MANAGER)


class TestSystem:
    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_missing_token(self, client):
        response = client.get(f"/api/v1/shifts/{uuid.uuid4()}")

        assert response.status_code == 401

    def test_invalid_token(self, client):
        response = client.get(
            f"/api/v1/shifts/{uuid.uuid4()}",
            headers={"Authorization": "Bearer not-a-token"},
        )

        assert response.status_code == 401

    def test_not_found_mapping(self, client, manager_headers):
        response = client.get(f"/api/v1/shifts/{uuid.uuid4()}", headers=manager_headers)

        assert response.status_code == 404
        assert response.json()["error_code"] == "RESOURCE_NOT_FOUND"


class TestShiftFlow:
    """Test flusso completo: turno, erogatore, chiusura, contabilità, partitario."""

    def test_full_flow(self, client, station, manager_headers):
        worker = station.worker("arun")
        nozzle = station.nozzle(reading="1000.000", unit_price="100.00")

        response = client.post(
            "/api/v1/shifts/",
            json={
                "worker_id": str(worker.id),
                "opening_cash": "500",
                "start_datetime": "2024-03-01T06:00:00",
            },
            headers=manager_headers,
        )
        assert response.status_code == 201
        shift_id = response.json()["id"]

        response = client.post(
            f"/api/v1/shifts/{shift_id}/nozzle-assignments",
            json={
                "nozzle_id": str(nozzle.id),
                "worker_id": str(worker.id),
                "opening_balance": "1000.000",
                "start_time": "2024-03-01T06:00:00",
            },
            headers=manager_headers,
        )
        assert response.status_code == 201
        assignment_id = response.json()["id"]
        assert response.json()["status"] == "OPEN"

        # Seconda assegnazione sullo stesso erogatore
        response = client.post(
            f"/api/v1/shifts/{shift_id}/nozzle-assignments",
            json={
                "nozzle_id": str(nozzle.id),
                "worker_id": str(worker.id),
                "opening_balance": "1000.000",
            },
            headers=manager_headers,
        )
        assert response.status_code == 409
        assert response.json()["error_code"] == "CONFLICT_STATE"

        # Chiusura turno con erogatore aperto
        response = client.post(
            f"/api/v1/shifts/{shift_id}/close",
            json={"end_datetime": "2024-03-01T14:00:00"},
            headers=manager_headers,
        )
        assert response.status_code == 409
        assert response.json()["error_code"] == "INVALID_STATE"

        response = client.post(
            f"/api/v1/nozzle-assignments/{assignment_id}/close",
            json={"closing_balance": "1100.000", "end_time": "2024-03-01T14:00:00"},
            headers=manager_headers,
        )
        assert response.status_code == 200
        assert response.json()["dispensed_amount"] == "100.000"
        assert response.json()["total_amount"] == "10000.00"

        response = client.post(
            f"/api/v1/shifts/{shift_id}/expenses",
            json={"amount": "200", "expense_date": "2024-03-01T10:00:00"},
            headers=manager_headers,
        )
        assert response.status_code == 201

        response = client.post(
            f"/api/v1/shifts/{shift_id}/close",
            json={"end_datetime": "2024-03-01T14:00:00"},
            headers=manager_headers,
        )
        assert response.status_code == 200
        assert response.json()["status"] == "CLOSED"

        response = client.get(f"/api/v1/shifts/{shift_id}/totals", headers=manager_headers)
        assert response.json()["fuel_sales"] == "10000.00"
        assert response.json()["is_complete"] is True

        body = {
            "electronic_totals": {"upi": "3000", "card": "2000"},
            "denominations": {"notes_2000": 2, "notes_500": 2, "notes_100": 2},
        }
        response = client.post(
            f"/api/v1/shifts/{shift_id}/accounting", json=body, headers=manager_headers
        )
        assert response.status_code == 201
        result = response.json()
        assert result["expected_cash"] == "5300.00"
        assert result["cash_in_hand"] == "5200.00"
        assert result["balance"] == "-100.00"
        assert result["advance_payment_id"] is not None

        response = client.post(
            f"/api/v1/shifts/{shift_id}/accounting", json=body, headers=manager_headers
        )
        assert response.status_code == 409

        response = client.get(
            f"/api/v1/workers/{worker.id}/ledger",
            params={"from_date": "2024-03-01", "to_date": station_now().date().isoformat()},
            headers=manager_headers,
        )
        assert response.status_code == 200
        ledger = response.json()
        assert len(ledger["entries"]) == 1
        assert ledger["entries"][0]["direction"] == "debit"
        assert ledger["summary"]["closing_balance"] == "-100.00"


class TestApiErrors:
    def test_business_validation_mapping(self, client, station, manager_headers):
        worker = station.worker("arun")

        response = client.post(
            "/api/v1/shifts/",
            json={"worker_id": str(worker.id), "opening_cash": "-5"},
            headers=manager_headers,
        )

        assert response.status_code == 422
        assert response.json()["error_code"] == "BUSINESS_VALIDATION_ERROR"

    def test_salesman_cannot_update_accounting(self, client, station):
        worker = station.worker("arun")
        headers = auth_header(worker.id, "arun", Role.SALESMAN)

        response = client.put(
            f"/api/v1/shifts/{uuid.uuid4()}/accounting",
            json={},
            headers=headers,
        )

        assert response.status_code == 403
        assert response.json()["error_code"] == "FORBIDDEN"

    def test_ledger_date_order(self, client, station, manager_headers):
        worker = station.worker("arun")

        response = client.get(
            f"/api/v1/workers/{worker.id}/ledger",
            params={"from_date": "2024-03-02", "to_date": "2024-03-01"},
            headers=manager_headers,
        )

        assert response.status_code == 422

    def test_close_assignment_with_utc_offset(self, client, station, manager_headers):
        """Test orario con offset: convertito in ora del distributore, nessun 500."""
        worker = station.worker("arun")
        nozzle = station.nozzle(reading="1000.000", unit_price="100.00")
        response = client.post(
            "/api/v1/shifts/",
            json={
                "worker_id": str(worker.id),
                "start_datetime": "2024-03-01T06:00:00",
            },
            headers=manager_headers,
        )
        shift_id = response.json()["id"]
        response = client.post(
            f"/api/v1/shifts/{shift_id}/nozzle-assignments",
            json={
                "nozzle_id": str(nozzle.id),
                "worker_id": str(worker.id),
                "opening_balance": "1000.000",
                "start_time": "2024-03-01T06:00:00",
            },
            headers=manager_headers,
        )
        assignment_id = response.json()["id"]

        response = client.post(
            f"/api/v1/nozzle-assignments/{assignment_id}/close",
            json={"closing_balance": "1010.000", "end_time": "2024-03-01T08:30:00Z"},
            headers=manager_headers,
        )
        assert response.status_code == 200
        assert response.json()["end_time"] == "2024-03-01T14:00:00"

        response = client.post(
            f"/api/v1/shifts/{shift_id}/close",
            json={"end_datetime": "2024-03-01T00:00:00Z"},
            headers=manager_headers,
        )
        assert response.status_code == 422
        assert response.json()["error_code"] == "BUSINESS_VALIDATION_ERROR"

"""End-to-end tests for the /api/clients and /api/vehicles routes."""

from __future__ import annotations

from datetime import date

import pytest
from fastapi.testclient import TestClient

from carhire.deps import database
from carhire.main import app
from carhire.repos.memory import BookingRepository, ClientRepository, seed_demo_data


@pytest.fixture(autouse=True)
def _reset_database():
    database.connect()
    database.reset()
    yield
    database.connect()
    database.reset()


@pytest.fixture()
def client():
    return TestClient(app)


_CLIENT = {
    "fullName": "  Jane Doe ",
    "idOrPassport": "ab123",
    "phone": "+254 700 000 001",
    "citizenship": "Kenyan",
    "licenseNumber": "dl-77",
}

_VEHICLE = {
    "make": "Toyota",
    "model": "Corolla",
    "year": 2021,
    "licensePlate": " kda 123a ",
    "dailyRate": 45.5,
}


# ---------------------------------------------------------------------------
# Clients
# ---------------------------------------------------------------------------


def test_add_client_normalizes_fields(client):
    resp = client.post("/api/clients", json=_CLIENT)

    assert resp.status_code == 201
    data = resp.json()["data"]
    assert data["fullName"] == "Jane Doe"
    assert data["idOrPassport"] == "AB123"
    assert data["licenseNumber"] == "DL-77"
    assert data["status"] == "ACTIVE"


def test_add_client_missing_fields(client):
    resp = client.post("/api/clients", json={"fullName": "Jane Doe", "phone": "0700"})
    assert resp.status_code == 400
    assert resp.json()["message"] == (
        "Missing required fields: idOrPassport, licenseNumber, citizenship"
    )


@pytest.mark.parametrize(
    "override, message",
    [
        ({"idOrPassport": "AB123 ", "phone": "1", "licenseNumber": "X"}, "ID/Passport number"),
        ({"idOrPassport": "Z", "phone": "+254 700 000 001", "licenseNumber": "X"}, "phone number"),
        ({"idOrPassport": "Z", "phone": "1", "licenseNumber": "DL-77"}, "license number"),
    ],
)
def test_add_duplicate_client(client, override, message):
    client.post("/api/clients", json=_CLIENT)
    resp = client.post("/api/clients", json={**_CLIENT, **override})
    assert resp.status_code == 400
    assert resp.json()["message"] == f"Client already exists with this {message}"


def test_add_client_bad_phone(client):
    resp = client.post("/api/clients", json={**_CLIENT, "phone": "call me"})
    assert resp.status_code == 400
    assert resp.json()["message"].startswith("phone")


def test_client_crud(client):
    client_id = client.post("/api/clients", json=_CLIENT).json()["data"]["id"]

    assert client.get(f"/api/clients/{client_id}").json()["data"]["id"] == client_id
    assert client.get("/api/clients").json()["count"] == 1

    resp = client.put(f"/api/clients/{client_id}", json={"address": " 2 Side Rd ", "licenseNumber": "dl-88"})
    assert resp.status_code == 200
    assert resp.json()["data"]["address"] == "2 Side Rd"
    assert resp.json()["data"]["licenseNumber"] == "DL-88"
    assert resp.json()["data"]["fullName"] == "Jane Doe"

    assert client.delete(f"/api/clients/{client_id}").status_code == 200
    assert client.get(f"/api/clients/{client_id}").status_code == 404


def test_update_client_to_taken_phone(client):
    client.post("/api/clients", json=_CLIENT)
    other_id = client.post(
        "/api/clients",
        json={**_CLIENT, "idOrPassport": "Z1", "phone": "0711", "licenseNumber": "Z2"},
    ).json()["data"]["id"]

    resp = client.put(f"/api/clients/{other_id}", json={"phone": "+254 700 000 001"})
    assert resp.status_code == 400
    assert resp.json()["message"] == "Phone number already exists"


def test_client_status_and_filter(client):
    client_id = client.post("/api/clients", json=_CLIENT).json()["data"]["id"]

    resp = client.put(f"/api/clients/{client_id}/status", json={"status": "SUSPENDED"})
    assert resp.status_code == 200
    assert resp.json()["message"] == "Client status updated to SUSPENDED successfully"

    assert client.get("/api/clients/filter", params={"status": "SUSPENDED"}).json()["count"] == 1
    assert client.get("/api/clients/filter", params={"status": "ACTIVE"}).json()["count"] == 0
    assert client.get("/api/clients/filter", params={"status": "GONE"}).status_code == 400


def test_client_status_invalid(client):
    client_id = client.post("/api/clients", json=_CLIENT).json()["data"]["id"]
    resp = client.put(f"/api/clients/{client_id}/status", json={"status": "BANNED"})
    assert resp.status_code == 400


# ---------------------------------------------------------------------------
# Vehicles
# ---------------------------------------------------------------------------


def test_add_vehicle(client):
    resp = client.post("/api/vehicles", json=_VEHICLE)

    assert resp.status_code == 201
    data = resp.json()["data"]
    assert data["licensePlate"] == "KDA 123A"
    assert data["status"] == "Available"
    assert data["dailyRate"] == 45.5


def test_add_vehicle_missing_fields(client):
    resp = client.post("/api/vehicles", json={"make": "Toyota"})
    assert resp.status_code == 400
    assert resp.json()["message"] == "Missing required fields: model, year, licensePlate, dailyRate"


def test_add_vehicle_duplicate_plate(client):
    client.post("/api/vehicles", json=_VEHICLE)
    resp = client.post("/api/vehicles", json={**_VEHICLE, "licensePlate": "KDA 123A"})
    assert resp.status_code == 400
    assert resp.json()["message"] == "License plate already exists"


@pytest.mark.parametrize(
    "override",
    [
        {"year": 1899},
        {"year": date.today().year + 2},
        {"dailyRate": -1},
        {"licensePlate": "KDA_1"},
        {"timeOut": "25:00"},
        {"status": "Stolen"},
        {"dateOut": "2026-05-10", "dateIn": "2026-05-01"},
    ],
)
def test_add_vehicle_rejects_bad_fields(client, override):
    resp = client.post("/api/vehicles", json={**_VEHICLE, **override})
    assert resp.status_code == 400
    assert resp.json()["success"] is False


def test_free_vehicle_has_zero_rate_allowed(client):
    resp = client.post("/api/vehicles", json={**_VEHICLE, "dailyRate": 0})
    assert resp.status_code == 201


def test_vehicle_crud(client):
    vehicle_id = client.post("/api/vehicles", json=_VEHICLE).json()["data"]["id"]

    resp = client.put(f"/api/vehicles/{vehicle_id}", json={"color": " Red ", "dailyRate": 50})
    assert resp.status_code == 200
    assert resp.json()["data"]["color"] == "Red"
    assert resp.json()["data"]["dailyRate"] == 50

    resp = client.patch(f"/api/vehicles/{vehicle_id}/status", json={"status": "Maintenance"})
    assert resp.status_code == 200
    assert resp.json()["data"]["status"] == "Maintenance"

    assert client.patch(f"/api/vehicles/{vehicle_id}/status", json={"status": "x"}).status_code == 400
    assert client.get("/api/vehicles").json()["count"] == 1
    assert client.delete(f"/api/vehicles/{vehicle_id}").status_code == 200
    assert client.get(f"/api/vehicles/{vehicle_id}").status_code == 404


def test_update_vehicle_to_taken_plate(client):
    client.post("/api/vehicles", json=_VEHICLE)
    other_id = client.post("/api/vehicles", json={**_VEHICLE, "licensePlate": "KDB 1"}).json()["data"]["id"]

    resp = client.put(f"/api/vehicles/{other_id}", json={"licensePlate": "kda 123a"})
    assert resp.status_code == 400


# ---------------------------------------------------------------------------
# Demo data
# ---------------------------------------------------------------------------


def test_seed_demo_data_is_consistent():
    seed_demo_data(database, today=date(2026, 6, 1))
    seed_demo_data(database, today=date(2026, 6, 1))

    clients = ClientRepository(database).list_all()
    bookings = BookingRepository(database).list_all()
    assert len(clients) == 2
    assert len(bookings) == 2
    assert all(b.start_date > date(2026, 6, 1) for b in bookings)

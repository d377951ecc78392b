"""
End-to-end tests of the HTTP API against an in-memory database.
"""

import pendulum
import pytest
from fastapi.testclient import TestClient

from slotbooker.adapters.security import TokenService
from slotbooker.api import create_app
from slotbooker.domain.models import User

GENERATE_BODY = {
    "start_date": "2024-01-01",
    "end_date": "2024-01-01",
    "start_time": "09:00",
    "end_time": "11:00",
    "interval": 0,
}


@pytest.fixture
def client(app_config):
    with TestClient(create_app(app_config)) as test_client:
        yield test_client


def _register(client, email="owner@example.com", timezone="UTC"):
    response = client.post(
        "/api/register",
        json={
            "business_name": "Barber Shop",
            "email": email,
            "full_name": "Sam Owner",
            "password": "hunter22",
            "timezone": timezone,
        },
    )
    assert response.status_code == 201, response.text
    return response.json()


def _auth(token):
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def owner(client):
    """A registered business owner with one 30 minute service."""
    registration = _register(client)
    headers = _auth(registration["token"])
    service = client.post(
        "/api/services",
        json={"name": "Haircut", "description": "Classic cut", "duration": 30},
        headers=headers,
    )
    assert service.status_code == 201, service.text
    return {
        "headers": headers,
        "business_id": registration["business"]["id"],
        "service_id": service.json()["id"],
    }


def _generate(client, owner, **overrides):
    body = dict(GENERATE_BODY, service_id=owner["service_id"])
    body.update(overrides)
    return client.post("/api/slots/generate", json=body, headers=owner["headers"])


class TestAccounts:
    """Registration, login and profile."""

    def test_health(self, client):
        response = client.get("/api/health")

        assert response.status_code == 200
        assert response.json() == {"message": "Server and database are running!"}

    def test_register_returns_token_and_business(self, client):
        body = _register(client, email="Owner@Example.com", timezone="Europe/Berlin")

        assert body["message"] == "Registration successful"
        assert body["user"]["email"] == "owner@example.com"
        assert body["user"]["role"] == "business_admin"
        assert body["user"]["business_id"] == body["business"]["id"]
        assert body["business"]["timezone"] == "Europe/Berlin"

    def test_duplicate_email_conflicts(self, client):
        _register(client)
        response = client.post(
            "/api/register",
            json={
                "business_name": "Other",
                "email": "owner@example.com",
                "full_name": "Other",
                "password": "hunter22",
            },
        )

        assert response.status_code == 409
        assert response.json() == {"error": "Email already exists"}

    def test_invalid_registration_timezone(self, client):
        response = client.post(
            "/api/register",
            json={
                "business_name": "Shop",
                "email": "a@example.com",
                "full_name": "A",
                "password": "hunter22",
                "timezone": "Mars/Olympus",
            },
        )

        assert response.status_code == 400

    def test_login(self, client):
        _register(client)

        ok = client.post("/api/login", json={"email": "owner@example.com", "password": "hunter22"})
        wrong = client.post("/api/login", json={"email": "owner@example.com", "password": "nope123"})

        assert ok.status_code == 200
        assert ok.json()["message"] == "Login successful"
        assert wrong.status_code == 401
        assert wrong.json() == {"error": "Invalid email or password"}

    def test_profile(self, client):
        token = _register(client)["token"]

        response = client.get("/api/profile", headers=_auth(token))

        assert response.status_code == 200
        assert response.json()["message"] == "Welcome to protected route!"
        assert response.json()["user"]["email"] == "owner@example.com"

    @pytest.mark.parametrize(
        "headers,error",
        [
            ({}, "Authorization header is required"),
            ({"Authorization": "Token abc"}, "Authorization format must be 'Bearer {token}'"),
            ({"Authorization": "Bearer not-a-token"}, "Invalid or expired token"),
        ],
    )
    def test_profile_requires_valid_token(self, client, headers, error):
        response = client.get("/api/profile", headers=headers)

        assert response.status_code == 401
        assert response.json() == {"error": error}

    def test_update_timezone(self, client, owner):
        response = client.put(
            "/api/business/timezone",
            json={"timezone": "Asia/Tokyo"},
            headers=owner["headers"],
        )
        rejected = client.put(
            "/api/business/timezone",
            json={"timezone": "Nowhere/Special"},
            headers=owner["headers"],
        )

        assert response.status_code == 200
        assert response.json()["timezone"] == "Asia/Tokyo"
        assert rejected.status_code == 400


class TestServices:
    """Service catalogue endpoints."""

    def test_list_services(self, client, owner):
        response = client.get("/api/services", headers=owner["headers"])
        public = client.get("/api/public/services", params={"business_id": owner["business_id"]})

        assert [s["name"] for s in response.json()] == ["Haircut"]
        assert public.json() == response.json()

    @pytest.mark.parametrize("duration", [0, 24 * 60 + 1])
    def test_duration_out_of_bounds_rejected(self, client, owner, duration):
        response = client.post(
            "/api/services",
            json={"name": "Nothing", "duration": duration},
            headers=owner["headers"],
        )

        assert response.status_code == 400
        assert response.json()["error"].startswith("Invalid input")

    def test_delete_service_removes_slots(self, client, owner):
        _generate(client, owner)

        first = client.delete(f"/api/services/{owner['service_id']}", headers=owner["headers"])
        second = client.delete(f"/api/services/{owner['service_id']}", headers=owner["headers"])

        assert first.status_code == 200
        assert first.json() == {"message": "Service deleted successfully"}
        assert second.status_code == 404
        assert client.get("/api/slots", headers=owner["headers"]).json() == []

    def test_user_without_business_is_forbidden(self, client, app_config):
        token = TokenService(app_config.auth).issue(
            User(id=99, email="c@example.com", full_name="Customer", role="customer")
        )

        response = client.get("/api/services", headers=_auth(token))

        assert response.status_code == 403


class TestSlotGeneration:
    """POST /api/slots/generate and the slot listings."""

    def test_generate_slots(self, client, owner):
        response = _generate(client, owner)

        assert response.status_code == 201, response.text
        body = response.json()
        assert body["message"] == "Generated 4 time slots"
        starts = [pendulum.parse(slot["start_time"]) for slot in body["slots"]]
        assert starts == [
            pendulum.datetime(2024, 1, 1, 9, 0, tz="UTC"),
            pendulum.datetime(2024, 1, 1, 9, 30, tz="UTC"),
            pendulum.datetime(2024, 1, 1, 10, 0, tz="UTC"),
            pendulum.datetime(2024, 1, 1, 10, 30, tz="UTC"),
        ]
        assert all(slot["id"] is not None for slot in body["slots"])
        assert all(slot["is_available"] for slot in body["slots"])

    def test_generate_in_business_timezone(self, client):
        token = _register(client, timezone="Asia/Tokyo")["token"]
        service = client.post(
            "/api/services", json={"name": "Massage", "duration": 60}, headers=_auth(token)
        ).json()

        response = client.post(
            "/api/slots/generate",
            json=dict(GENERATE_BODY, service_id=service["id"], end_time="10:00"),
            headers=_auth(token),
        )

        slot = response.json()["slots"][0]
        assert pendulum.parse(slot["start_time"]) == pendulum.datetime(2024, 1, 1, 0, 0, tz="UTC")

    def test_sunday_yields_no_slots(self, client, owner):
        response = _generate(client, owner, start_date="2024-01-07", end_date="2024-01-07")

        assert response.status_code == 201
        assert response.json() == {"message": "Generated 0 time slots", "slots": []}

    def test_duplicate_generation_conflicts(self, client, owner):
        assert _generate(client, owner).status_code == 201

        response = _generate(client, owner)

        assert response.status_code == 409
        assert len(client.get("/api/slots", headers=owner["headers"]).json()) == 4

    @pytest.mark.parametrize(
        "overrides",
        [
            {"start_time": "25:00"},
            {"start_date": "not-a-date"},
            {"start_date": "2024-01-05", "end_date": "2024-01-01"},
            {"interval": -5},
            {"interval": 10**12},
        ],
    )
    def test_invalid_request(self, client, owner, overrides):
        response = _generate(client, owner, **overrides)

        assert response.status_code == 400
        assert "error" in response.json()

    def test_missing_field(self, client, owner):
        body = {"service_id": owner["service_id"], "start_date": "2024-01-01"}

        response = client.post("/api/slots/generate", json=body, headers=owner["headers"])

        assert response.status_code == 400

    def test_foreign_service_not_found(self, client, owner):
        other = _register(client, email="rival@example.com")

        response = client.post(
            "/api/slots/generate",
            json=dict(GENERATE_BODY, service_id=owner["service_id"]),
            headers=_auth(other["token"]),
        )

        assert response.status_code == 404
        assert response.json() == {"error": "Service not found or access denied"}

    def test_generation_requires_token(self, client, owner):
        response = client.post(
            "/api/slots/generate", json=dict(GENERATE_BODY, service_id=owner["service_id"])
        )

        assert response.status_code == 401

    def test_business_slot_listing(self, client, owner):
        _generate(client, owner)

        slots = client.get("/api/slots", headers=owner["headers"]).json()

        assert len(slots) == 4
        assert {slot["service_name"] for slot in slots} == {"Haircut"}

    def test_public_slots_by_date(self, client, owner):
        _generate(client, owner)
        params = {"business_id": owner["business_id"], "service_id": owner["service_id"]}

        on_day = client.get("/api/public/slots", params=dict(params, date="2024-01-01"))
        other_day = client.get("/api/public/slots", params=dict(params, date="2024-01-02"))
        upcoming = client.get("/api/public/slots", params=params)

        assert on_day.status_code == 200
        assert len(on_day.json()) == 4
        assert on_day.json()[0]["duration"] == 30
        assert other_day.json() == []
        # every generated slot lies in the past
        assert upcoming.json() == []

    def test_public_slots_require_ids(self, client):
        response = client.get("/api/public/slots", params={"business_id": 1})

        assert response.status_code == 400

    def test_slots_past_the_last_calendar_date(self, client):
        token = _register(client, timezone="America/New_York")["token"]
        service = client.post(
            "/api/services", json={"name": "Late cut", "duration": 30}, headers=_auth(token)
        ).json()

        response = client.post(
            "/api/slots/generate",
            json=dict(
                GENERATE_BODY,
                service_id=service["id"],
                start_date="9999-12-31",
                end_date="9999-12-31",
                start_time="20:00",
                end_time="22:00",
            ),
            headers=_auth(token),
        )

        assert response.status_code == 400
        assert "calendar range" in response.json()["error"]


def test_lookup_failure_returns_json_error(app_config):
    """Without tables every lookup fails; the body is still an error object."""
    with TestClient(create_app(app_config, create_schema=False)) as client:
        response = client.get("/api/public/services", params={"business_id": 1})

    assert response.status_code == 500
    assert response.json() == {"error": "Could not list services"}

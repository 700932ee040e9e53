"""
HTTP API tests through FastAPI's TestClient with injected dependencies
"""

from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from conftest import FakeSession, make_state, states_response
from flightwatch.core.config import get_settings
from flightwatch.main import app
from flightwatch.services.opensky import OpenSkyClient, get_opensky_client
from flightwatch.services.providers.base import ScheduleProvider
from flightwatch.services.providers.chain import ScheduleProviderChain, get_schedule_chain
from flightwatch.services.providers.mock import MockScheduleProvider
from flightwatch.services.snapshot_cache import SnapshotCache
from flightwatch.services.verifier import FlightVerifier, get_flight_verifier


class NotFoundProvider(ScheduleProvider):
    name = MockScheduleProvider.name

    def fetch(self, flight_number, flight_date, arrival_airport=None):
        return self.not_found()


@pytest.fixture
def live_session():
    return FakeSession(get=[states_response(make_state("SIA114"), make_state("AXM712"))])


@pytest.fixture
def client(settings, event_now, live_session):
    chain = ScheduleProviderChain([MockScheduleProvider()])
    tracker = OpenSkyClient(SnapshotCache(), session=live_session)
    verifier = FlightVerifier(chain, tracker, settings, sleep=lambda seconds: None, now=lambda: event_now)

    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_schedule_chain] = lambda: chain
    app.dependency_overrides[get_opensky_client] = lambda: tracker
    app.dependency_overrides[get_flight_verifier] = lambda: verifier
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_health_reports_provider_configuration(client):
    response = client.get("/api/v1/health")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "healthy"
    assert body["providers"]["amadeus"] == "not configured"
    assert body["providers"]["mock"] == "enabled"


def test_flight_status_lookup(client):
    response = client.get("/api/v1/flights/status", params={"flight_number": "SQ238", "date": "2026-01-18"})

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["source"] == "mock"
    assert body["data"]["arrival"]["iata"] == "KUL"


def test_flight_status_not_found(client):
    app.dependency_overrides[get_schedule_chain] = lambda: ScheduleProviderChain([NotFoundProvider()])

    response = client.get("/api/v1/flights/status", params={"flight_number": "SQ238", "date": "2026-01-18"})

    assert response.status_code == 404


def test_verify_flight_flags_changed_time(client):
    payload = {"flight_number": "SQ238", "flight_date": "2026-01-18", "direction": "arrival", "expected_time": "18:10"}

    response = client.post("/api/v1/flights/verify", json=payload)

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "changed"
    assert body["time_difference"] == "-2h 55m"
    assert body["source"] == "mock"


def test_verify_flight_rejects_bad_time(client):
    payload = {"flight_number": "SQ238", "flight_date": "2026-01-18", "direction": "arrival", "expected_time": "6pm"}

    response = client.post("/api/v1/flights/verify", json=payload)

    assert response.status_code == 422
    assert response.json()["status"] == "error"


def test_verify_batch(client):
    payload = {"flights": [
        {"flight_number": "SQ238", "flight_date": "2026-01-18", "direction": "arrival", "expected_time": "18:10"},
        {"flight_number": "MH123", "flight_date": "2026-01-18", "direction": "arrival", "expected_time": "12:00"},
        {"flight_number": "SQ114", "flight_date": "2026-01-15", "direction": "arrival"},
    ]}

    response = client.post("/api/v1/flights/verify-batch", json=payload)

    assert response.status_code == 200
    body = response.json()
    assert body["total"] == 3
    assert body["changed"] == 1
    assert body["results"]["SQ114-2026-01-15-arrival"]["status"] == "verified"


def test_verify_batch_requires_flights(client):
    assert client.post("/api/v1/flights/verify-batch", json={"flights": []}).status_code == 422


def test_unique_flights_with_schedule_and_usage(client):
    flight_date = (datetime.now(timezone.utc).date() + timedelta(days=3)).isoformat()
    guests = [
        {"name": "Guest A", "arrivalFlightNumber": "SQ238", "arrivalDate": flight_date, "arrivalTime": "18:10"},
        {"name": "Guest B", "arrivalFlightNumber": "sq238", "arrivalDate": flight_date, "arrivalTime": "18:00"},
        {"name": "Guest C", "arrivalFlightNumber": "MH123", "arrivalDate": flight_date},
    ]

    response = client.post("/api/v1/flights/unique", json={"guests": guests})

    assert response.status_code == 200
    body = response.json()
    assert [f["flight_number"] for f in body["flights"]] == ["SQ238", "MH123"]
    assert body["flights"][0]["expected_time"] == "18:10"
    assert body["flights"][0]["schedule"]["frequency"] == "five_daily"
    assert body["api_usage"]["schedule_provider_calls"] == 30
    assert body["api_usage"]["unique_flights"] == 2


def test_polling_schedule(client):
    flight_date = (datetime.now(timezone.utc).date() + timedelta(days=20)).isoformat()

    response = client.get("/api/v1/flights/polling-schedule", params={"flight_date": flight_date})

    assert response.status_code == 200
    assert response.json()["frequency"] == "twice_daily"


def test_live_flight_status(client):
    response = client.get("/api/v1/flights/live/SQ114")

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["data"]["callsign"] == "SIA114"


def test_batch_live_status_uses_one_snapshot(client, live_session):
    response = client.post("/api/v1/flights/live/batch", json={"flight_numbers": ["SQ114", "AK712", "MH999"]})

    assert response.status_code == 200
    body = response.json()
    assert body["api_calls_used"] == 1
    assert [entry["found"] for entry in body["results"]] == [True, True, False]
    assert len(live_session.get_calls) == 1


def test_flights_near_known_airport(client):
    response = client.get("/api/v1/flights/near-airport/KUL")

    assert response.status_code == 200
    assert response.json()["success"] is True


def test_flights_near_unknown_airport(client):
    assert client.get("/api/v1/flights/near-airport/XYZ").status_code == 404


def test_mismatch_check(client):
    response = client.post(
        "/api/v1/flights/mismatch",
        params={"entered": "18:10", "scheduled": "2026-01-18T15:15:00+08:00"},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["time_mismatch"] is True
    assert body["scheduled"] == "15:15"
    assert body["time_difference"] == "-2h 55m"


def test_root_lists_endpoints(client):
    body = client.get("/").json()
    assert body["health"] == "/api/v1/health"

"""
Flight verifier tests - scheduled and real-time paths, batch pacing, isolation
"""

from datetime import date

import pytest

from conftest import FakeResponse, FakeSession, make_state, states_response
from flightwatch.core.exceptions import ScheduleProviderError
from flightwatch.models.flight import Direction, FlightToTrack, ProviderSource, VerificationStatus
from flightwatch.services.opensky import OpenSkyClient
from flightwatch.services.providers.base import ScheduleProvider
from flightwatch.services.providers.chain import ScheduleProviderChain
from flightwatch.services.providers.mock import MockScheduleProvider
from flightwatch.services.snapshot_cache import SnapshotCache
from flightwatch.services.verifier import FlightVerifier

EVENT_DAY = date(2026, 1, 15)
PRE_EVENT = date(2026, 1, 18)


class StubProvider(ScheduleProvider):
    """Answers not-found for everything, or raises for selected flight numbers"""

    name = ProviderSource.AMADEUS

    def __init__(self, explode=(), transient=()):
        self.explode = set(explode)
        self.transient = set(transient)
        self.arrival_airports = []

    def fetch(self, flight_number, flight_date, arrival_airport=None):
        self.arrival_airports.append(arrival_airport)
        if flight_number in self.explode:
            raise RuntimeError(f"unexpected failure for {flight_number}")
        if flight_number in self.transient:
            raise ScheduleProviderError("Request failed: timeout", provider=self.name.value)
        return self.not_found()


class BrokenTracker(OpenSkyClient):
    def get_all_flights(self):
        raise RuntimeError("snapshot decode failed")


class SleepRecorder:
    def __init__(self):
        self.calls = []

    def __call__(self, seconds):
        self.calls.append(seconds)


@pytest.fixture
def sleeps():
    return SleepRecorder()


@pytest.fixture
def live_session():
    return FakeSession(get=[states_response(make_state("SIA114"))])


def _verifier(settings, event_now, sleeps, chain=None, session=None):
    chain = chain or ScheduleProviderChain([MockScheduleProvider()])
    tracker = OpenSkyClient(SnapshotCache(), session=session or FakeSession())
    return FlightVerifier(chain, tracker, settings, sleep=sleeps, now=lambda: event_now)


def _flight(number, flight_date=PRE_EVENT, direction=Direction.ARRIVAL, expected_time=None):
    return FlightToTrack(flight_number=number, flight_date=flight_date, direction=direction, expected_time=expected_time)


def test_changed_arrival_time_is_flagged(settings, event_now, sleeps):
    verifier = _verifier(settings, event_now, sleeps)

    result = verifier.verify_flight(_flight("SQ238", expected_time="18:10"))

    assert result.status == VerificationStatus.CHANGED
    assert result.time_mismatch is True
    assert result.scheduled_time == "15:15"
    assert result.time_difference == "-2h 55m"
    assert result.source == ProviderSource.MOCK
    assert result.scheduled_info.arrival.iata == "KUL"


def test_departure_uses_departure_leg(settings, event_now, sleeps):
    verifier = _verifier(settings, event_now, sleeps)

    result = verifier.verify_flight(_flight("SQ238", direction=Direction.DEPARTURE, expected_time="12:30"))

    assert result.status == VerificationStatus.VERIFIED
    assert result.scheduled_time == "12:15"
    assert result.time_mismatch is False
    assert result.time_difference == "-15m"


def test_missing_expected_time_is_verified(settings, event_now, sleeps):
    result = _verifier(settings, event_now, sleeps).verify_flight(_flight("MH123"))

    assert result.status == VerificationStatus.VERIFIED
    assert result.time_mismatch is False
    assert result.time_difference is None


def test_threshold_comes_from_settings(settings, event_now, sleeps):
    strict = settings.model_copy(update={"mismatch_threshold_minutes": 5})

    result = _verifier(strict, event_now, sleeps).verify_flight(_flight("MH123", expected_time="12:10"))

    assert result.status == VerificationStatus.CHANGED


def test_definitive_absence_is_not_found(settings, event_now, sleeps):
    chain = ScheduleProviderChain([StubProvider(), MockScheduleProvider()])

    result = _verifier(settings, event_now, sleeps, chain=chain).verify_flight(_flight("SQ238"))

    assert result.status == VerificationStatus.NOT_FOUND
    assert result.error == "Flight not found"


def test_exhausted_chain_is_an_error(settings, event_now, sleeps):
    chain = ScheduleProviderChain([StubProvider(transient={"SQ238"})])

    result = _verifier(settings, event_now, sleeps, chain=chain).verify_flight(_flight("SQ238"))

    assert result.status == VerificationStatus.ERROR
    assert result.error == "Request failed: timeout"


def test_event_airport_filters_arrivals_only(settings, event_now, sleeps):
    stub = StubProvider()
    verifier = _verifier(settings, event_now, sleeps, chain=ScheduleProviderChain([stub]))

    verifier.verify_flight(_flight("SQ238"))
    verifier.verify_flight(_flight("SQ239", direction=Direction.DEPARTURE))

    assert stub.arrival_airports == ["KUL", None]


def test_event_day_uses_live_tracking(settings, event_now, sleeps, live_session):
    verifier = _verifier(settings, event_now, sleeps, session=live_session)

    found = verifier.verify_flight(_flight("SQ114", flight_date=EVENT_DAY))
    missing = verifier.verify_flight(_flight("MH999", flight_date=EVENT_DAY))

    assert found.status == VerificationStatus.VERIFIED
    assert found.live_status.callsign == "SIA114"
    assert found.source == ProviderSource.OPENSKY
    assert missing.status == VerificationStatus.NOT_FOUND
    assert missing.live_status is None
    assert len(live_session.get_calls) == 1


def test_live_feed_failure_is_an_error(settings, event_now, sleeps):
    session = FakeSession(get=[FakeResponse(429)])

    result = _verifier(settings, event_now, sleeps, session=session).verify_flight(
        _flight("SQ114", flight_date=EVENT_DAY)
    )

    assert result.status == VerificationStatus.ERROR
    assert result.error == "Rate limit exceeded"
    assert result.source == ProviderSource.OPENSKY


def test_batch_runs_scheduled_first_then_realtime(settings, event_now, sleeps, live_session):
    verifier = _verifier(settings, event_now, sleeps, session=live_session)
    flights = [
        _flight("SQ114", flight_date=EVENT_DAY),
        _flight("SQ238", expected_time="18:10"),
        _flight("MH123", expected_time="12:00"),
    ]

    results = verifier.verify_all_flights(flights)

    assert list(results) == [
        "SQ238-2026-01-18-arrival",
        "MH123-2026-01-18-arrival",
        "SQ114-2026-01-15-arrival",
    ]
    assert sleeps.calls == [1.0, 1.0, 0.1]
    assert results["SQ238-2026-01-18-arrival"].status == VerificationStatus.CHANGED
    assert results["MH123-2026-01-18-arrival"].status == VerificationStatus.VERIFIED
    assert results["SQ114-2026-01-15-arrival"].status == VerificationStatus.VERIFIED


def test_batch_keeps_arrival_and_departure_of_same_flight(settings, event_now, sleeps):
    flights = [
        _flight("SQ238"),
        _flight("SQ238", direction=Direction.DEPARTURE),
    ]

    results = _verifier(settings, event_now, sleeps).verify_all_flights(flights)

    assert len(results) == 2


def test_one_failing_flight_does_not_abort_batch(settings, event_now, sleeps):
    chain = ScheduleProviderChain([StubProvider(explode={"SQ999"})])
    flights = [_flight("SQ238"), _flight("SQ999"), _flight("MH123")]

    results = _verifier(settings, event_now, sleeps, chain=chain).verify_all_flights(flights)

    assert len(results) == 3
    assert results["SQ999-2026-01-18-arrival"].status == VerificationStatus.ERROR
    assert "unexpected failure" in results["SQ999-2026-01-18-arrival"].error
    assert results["MH123-2026-01-18-arrival"].status == VerificationStatus.NOT_FOUND
    assert len(sleeps.calls) == 3


def test_empty_batch(settings, event_now, sleeps):
    assert _verifier(settings, event_now, sleeps).verify_all_flights([]) == {}
    assert sleeps.calls == []


def test_failing_live_flight_in_batch_is_tagged_opensky(settings, event_now, sleeps):
    chain = ScheduleProviderChain([StubProvider(explode={"SQ999"})])
    tracker = BrokenTracker(SnapshotCache(), session=FakeSession())
    verifier = FlightVerifier(chain, tracker, settings, sleep=sleeps, now=lambda: event_now)

    results = verifier.verify_all_flights([_flight("SQ999"), _flight("SQ114", flight_date=EVENT_DAY)])

    live = results["SQ114-2026-01-15-arrival"]
    assert live.status == VerificationStatus.ERROR
    assert live.source == ProviderSource.OPENSKY
    assert "snapshot decode failed" in live.error
    assert results["SQ999-2026-01-18-arrival"].source is None

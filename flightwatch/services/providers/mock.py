"""
Mock Adapter - deterministic synthetic schedules, the chain's terminal fallback
Never fails; every response is tagged source=mock so callers can tell it apart
"""

from datetime import date
from typing import Any, Dict, Optional

from flightwatch.models.flight import (
    FlightEndpoint,
    FlightStatus,
    ProviderResponse,
    ProviderSource,
    ScheduledFlight,
)
from flightwatch.services.callsign import clean_flight_number, parse_flight_number
from flightwatch.services.providers.base import ScheduleProvider


MOCK_FLIGHTS: Dict[str, Dict[str, Any]] = {
    "SQ238": {
        "carrier_code": "SQ",
        "airline_name": "Singapore Airlines",
        "departure": {
            "airport": "Singapore Changi Airport",
            "iata": "SIN",
            "icao": "WSSS",
            "terminal": "3",
            "gate": "B12",
            "scheduled": "12:15",
            "timezone": "Asia/Singapore",
        },
        "arrival": {
            "airport": "Kuala Lumpur International Airport",
            "iata": "KUL",
            "icao": "WMKK",
            "terminal": "1",
            "gate": "C8",
            "baggage": "Belt 5",
            "scheduled": "15:15",
            "timezone": "Asia/Kuala_Lumpur",
        },
        "duration": "PT1H0M",
        "aircraft_registration": "9V-SMG",
        "aircraft_type": "B789",
    },
    "SQ114": {
        "carrier_code": "SQ",
        "airline_name": "Singapore Airlines",
        "departure": {
            "airport": "Singapore Changi Airport",
            "iata": "SIN",
            "icao": "WSSS",
            "terminal": "2",
            "gate": "D5",
            "scheduled": "12:40",
            "timezone": "Asia/Singapore",
        },
        "arrival": {
            "airport": "Kuala Lumpur International Airport",
            "iata": "KUL",
            "icao": "WMKK",
            "terminal": "1",
            "gate": "A3",
            "scheduled": "13:50",
            "timezone": "Asia/Kuala_Lumpur",
        },
        "duration": "PT1H10M",
    },
    "MH123": {
        "carrier_code": "MH",
        "airline_name": "Malaysia Airlines",
        "departure": {
            "airport": "Hong Kong International",
            "iata": "HKG",
            "icao": "VHHH",
            "terminal": "1",
            "gate": "A15",
            "scheduled": "08:00",
            "timezone": "Asia/Hong_Kong",
        },
        "arrival": {
            "airport": "Kuala Lumpur International Airport",
            "iata": "KUL",
            "icao": "WMKK",
            "terminal": "1",
            "gate": "A22",
            "baggage": "Belt 3",
            "scheduled": "12:00",
            "timezone": "Asia/Kuala_Lumpur",
        },
        "duration": "PT4H0M",
        "aircraft_registration": "9M-MTB",
        "aircraft_type": "A359",
    },
}


def _placeholder(flight_number: str) -> Dict[str, Any]:
    carrier, _ = parse_flight_number(flight_number)
    return {
        "carrier_code": carrier or "XX",
        "departure": {"airport": "Origin Airport", "iata": "XXX", "scheduled": "12:00"},
        "arrival": {
            "airport": "Kuala Lumpur International Airport",
            "iata": "KUL",
            "icao": "WMKK",
            "terminal": "1",
            "scheduled": "16:00",
            "timezone": "Asia/Kuala_Lumpur",
        },
    }


class MockScheduleProvider(ScheduleProvider):
    """Static lookup table plus a generic placeholder for unknown flights"""

    name = ProviderSource.MOCK

    def fetch(
        self,
        flight_number: str,
        flight_date: date,
        arrival_airport: Optional[str] = None
    ) -> ProviderResponse[ScheduledFlight]:
        cleaned = clean_flight_number(flight_number)
        template = MOCK_FLIGHTS.get(cleaned) or _placeholder(cleaned)

        flight = ScheduledFlight(
            flight_number=cleaned,
            carrier_code=template["carrier_code"],
            airline_name=template.get("airline_name"),
            flight_date=flight_date,
            departure=FlightEndpoint(**template["departure"]),
            arrival=FlightEndpoint(**template["arrival"]),
            status=FlightStatus.SCHEDULED,
            duration=template.get("duration"),
            aircraft_registration=template.get("aircraft_registration"),
            aircraft_type=template.get("aircraft_type"),
        )
        return self.found(flight)

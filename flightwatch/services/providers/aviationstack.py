"""
AviationStack Adapter - real-time and scheduled flights endpoint
Free tier: 100 requests/month
Docs: https://aviationstack.com/documentation
"""

import logging
from datetime import date
from typing import Any, Dict, Optional

import requests

from flightwatch.core.exceptions import ProviderHTTPError, ScheduleProviderError
from flightwatch.models.flight import (
    FlightEndpoint,
    FlightStatus,
    ProviderResponse,
    ProviderSource,
    ScheduledFlight,
)
from flightwatch.services.callsign import clean_flight_number, parse_flight_number
from flightwatch.services.providers.base import INCOMPLETE_FLIGHT_DATA, ScheduleProvider

logger = logging.getLogger(__name__)

_STATUS_MAP = {
    "scheduled": FlightStatus.SCHEDULED,
    "active": FlightStatus.ACTIVE,
    "en-route": FlightStatus.ACTIVE,
    "landed": FlightStatus.LANDED,
    "arrived": FlightStatus.LANDED,
    "cancelled": FlightStatus.CANCELLED,
    "diverted": FlightStatus.DIVERTED,
}


def map_aviationstack_status(status: Optional[str]) -> FlightStatus:
    return _STATUS_MAP.get((status or "").lower(), FlightStatus.UNKNOWN)


def _endpoint(raw: Dict[str, Any]) -> FlightEndpoint:
    iata = raw.get("iata") or "N/A"
    return FlightEndpoint(
        airport=raw.get("airport") or iata,
        iata=iata,
        icao=raw.get("icao"),
        terminal=raw.get("terminal"),
        gate=raw.get("gate"),
        baggage=raw.get("baggage"),
        scheduled=raw.get("scheduled"),
        estimated=raw.get("estimated"),
        actual=raw.get("actual"),
        delay=raw.get("delay"),
        timezone=raw.get("timezone"),
    )


def parse_aviationstack_flight(
    raw_flight: Dict[str, Any],
    flight_date: date,
    requested_number: str = ""
) -> Optional[ScheduledFlight]:
    """
    Parse one row of the /flights response

    Returns:
        ScheduledFlight, or None when departure or arrival is missing
    """
    departure = raw_flight.get("departure")
    arrival = raw_flight.get("arrival")
    if not departure or not arrival:
        return None

    flight = raw_flight.get("flight") or {}
    airline = raw_flight.get("airline") or {}
    aircraft = raw_flight.get("aircraft") or {}

    flight_number = flight.get("iata") or requested_number
    carrier, _ = parse_flight_number(flight_number)

    return ScheduledFlight(
        flight_number=flight_number,
        carrier_code=airline.get("iata") or carrier,
        airline_name=airline.get("name"),
        flight_date=raw_flight.get("flight_date") or flight_date,
        departure=_endpoint(departure),
        arrival=_endpoint(arrival),
        status=map_aviationstack_status(raw_flight.get("flight_status")),
        aircraft_registration=aircraft.get("registration"),
        aircraft_type=aircraft.get("iata") or aircraft.get("icao"),
    )


class AviationStackProvider(ScheduleProvider):
    """
    Secondary schedule provider

    The free tier enforces a strict per-minute ceiling; callers pace batches.
    Errors reported inside a 200 body (quota reached, invalid key) count as
    provider failures, not as "flight not found".
    """

    name = ProviderSource.AVIATIONSTACK

    def __init__(
        self,
        api_key: Optional[str],
        base_url: str = "http://api.aviationstack.com/v1",
        session: Optional[requests.Session] = None,
        timeout: int = 30,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout

    def is_configured(self) -> bool:
        return bool(self.api_key)

    def fetch(
        self,
        flight_number: str,
        flight_date: date,
        arrival_airport: Optional[str] = None
    ) -> ProviderResponse[ScheduledFlight]:
        carrier, number = parse_flight_number(flight_number)
        params = {
            "access_key": self.api_key,
            "flight_iata": f"{carrier}{number}" if carrier else clean_flight_number(flight_number),
            "flight_date": flight_date.isoformat(),
        }
        if arrival_airport:
            params["arr_iata"] = arrival_airport.upper()

        logger.info(f"Querying AviationStack: {params['flight_iata']} on {flight_date}")
        try:
            response = self.session.get(f"{self.base_url}/flights", params=params, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            logger.error(f"AviationStack request error: {str(e)}")
            raise ScheduleProviderError(f"Request failed: {str(e)}", provider=self.name.value)

        if response.status_code == 404:
            return self.not_found()

        if not response.ok:
            raise ProviderHTTPError(
                f"API request failed: {response.status_code}",
                response.status_code,
                provider=self.name.value,
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise ScheduleProviderError(f"Malformed AviationStack response: {str(e)}", provider=self.name.value)

        if not isinstance(payload, dict):
            raise ScheduleProviderError("Malformed AviationStack response: expected an object", provider=self.name.value)

        if payload.get("error"):
            error = payload["error"]
            info = (error.get("info") or error.get("type")) if isinstance(error, dict) else error
            logger.error(f"AviationStack API error: {error}")
            raise ScheduleProviderError(f"AviationStack error: {info}", provider=self.name.value)

        rows = payload.get("data") or []
        if not rows:
            return self.not_found()

        try:
            flight = parse_aviationstack_flight(rows[0], flight_date, params["flight_iata"])
        except (AttributeError, TypeError, ValueError) as e:
            raise ScheduleProviderError(f"Malformed AviationStack flight record: {str(e)}", provider=self.name.value)
        if flight is None:
            return self.not_found(INCOMPLETE_FLIGHT_DATA)
        return self.found(flight)

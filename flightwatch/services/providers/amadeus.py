"""
Amadeus Adapter - On-Demand Flight Status (schedule) API
Free tier: 2,000 requests/month
Docs: https://developers.amadeus.com/self-service/category/flights/api-doc/on-demand-flight-status
"""

import logging
from datetime import date
from typing import Any, Dict, List, Optional

import requests

from flightwatch.core.exceptions import ProviderHTTPError, ScheduleProviderError
from flightwatch.models.flight import (
    FlightEndpoint,
    FlightStatus,
    ProviderResponse,
    ProviderSource,
    ScheduledFlight,
)
from flightwatch.services.callsign import parse_flight_number
from flightwatch.services.providers.base import (
    INCOMPLETE_FLIGHT_DATA,
    INVALID_FLIGHT_NUMBER,
    ScheduleProvider,
)
from flightwatch.services.token_cache import TokenCache

logger = logging.getLogger(__name__)


def map_amadeus_status(segments: List[Dict[str, Any]]) -> FlightStatus:
    """Map the free-text status of the first segment to FlightStatus"""
    if not segments:
        return FlightStatus.UNKNOWN

    status = str(segments[0].get("status") or "").lower()

    if "cancel" in status:
        return FlightStatus.CANCELLED
    if "divert" in status:
        return FlightStatus.DIVERTED
    if "land" in status or "arrived" in status:
        return FlightStatus.LANDED
    if "active" in status or "airborne" in status or "departed" in status:
        return FlightStatus.ACTIVE
    if "scheduled" in status or "confirmed" in status:
        return FlightStatus.SCHEDULED
    return FlightStatus.UNKNOWN


def _timing(timings: List[Dict[str, Any]], qualifier: str) -> Optional[str]:
    for timing in timings or []:
        if timing.get("qualifier") == qualifier:
            return timing.get("value")
    return None


def _code(value: Any) -> Optional[str]:
    """Terminal and gate arrive either as plain strings or as {"code": ...} objects"""
    if isinstance(value, dict):
        return value.get("code") or value.get("mainGate")
    return value or None


def _endpoint(point: Dict[str, Any], side: str, prefix: str) -> FlightEndpoint:
    details = point.get(side) or {}
    timings = details.get("timings") or []
    iata = point.get("iataCode", "N/A")
    return FlightEndpoint(
        airport=iata,
        iata=iata,
        terminal=_code(details.get("terminal")),
        gate=_code(details.get("gate")),
        scheduled=_timing(timings, f"S{prefix}"),
        estimated=_timing(timings, f"E{prefix}"),
        actual=_timing(timings, f"A{prefix}"),
    )


def parse_amadeus_flight(
    raw_flight: Dict[str, Any],
    carrier: str,
    number: str,
    flight_date: date,
    arrival_airport: Optional[str] = None
) -> Optional[ScheduledFlight]:
    """
    Parse one DatedFlight object into a ScheduledFlight

    Departure is the first flight point with departure data. Arrival is the
    point landing at arrival_airport when given, otherwise the first point
    with arrival data.

    Returns:
        ScheduledFlight, or None when either end is missing
    """
    points = raw_flight.get("flightPoints") or []
    segments = raw_flight.get("segments") or []
    legs = raw_flight.get("legs") or []

    departure_point = next((p for p in points if p.get("departure")), None)
    arrival_points = [p for p in points if p.get("arrival")]
    arrival_point = None
    if arrival_airport:
        arrival_point = next(
            (p for p in arrival_points if str(p.get("iataCode", "")).upper() == arrival_airport.upper()),
            None,
        )
    if arrival_point is None and arrival_points:
        arrival_point = arrival_points[0]

    if not departure_point or not arrival_point:
        return None

    equipment = (legs[0].get("aircraftEquipment") or {}) if legs else {}

    return ScheduledFlight(
        flight_number=f"{carrier}{number}",
        carrier_code=carrier,
        flight_date=flight_date,
        departure=_endpoint(departure_point, "departure", "TD"),
        arrival=_endpoint(arrival_point, "arrival", "TA"),
        status=map_amadeus_status(segments),
        duration=segments[0].get("scheduledSegmentDuration") if segments else None,
        aircraft_type=equipment.get("aircraftType"),
    )


class AmadeusProvider(ScheduleProvider):
    """
    Primary schedule provider

    Features:
    - Bearer token from the shared TokenCache
    - 401: invalidate token once and retry once
    - 404 or empty result: definitive "Flight not found"
    - Anything else failing: ScheduleProviderError (chain falls through)
    """

    name = ProviderSource.AMADEUS
    SCHEDULE_PATH = "/v2/schedule/flights"
    TOKEN_PATH = "/v1/security/oauth2/token"

    def __init__(
        self,
        token_cache: Optional[TokenCache],
        base_url: str,
        session: Optional[requests.Session] = None,
        timeout: int = 30,
    ):
        """
        Args:
            token_cache: Token cache, or None when credentials are not configured
            base_url: Test or production Amadeus base URL
            session: HTTP session shared with the token cache
            timeout: Request timeout in seconds
        """
        self.token_cache = token_cache
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout

    def is_configured(self) -> bool:
        return self.token_cache is not None

    def _make_request(self, params: Dict[str, Any], retry_on_401: bool = True) -> Optional[Any]:
        """
        Make an authenticated schedule request

        Returns:
            Decoded JSON, or None when Amadeus answers 404

        Raises:
            ScheduleProviderError: On network errors, unusable status codes,
                invalid JSON, or a second 401
        """
        token = self.token_cache.get_token()
        url = f"{self.base_url}{self.SCHEDULE_PATH}"
        headers = {
            "Authorization": f"Bearer {token}",
            "Accept": "application/json"
        }

        try:
            response = self.session.get(url, headers=headers, params=params, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            logger.error(f"Amadeus request error: {str(e)}")
            raise ScheduleProviderError(f"Request failed: {str(e)}", provider=self.name.value)

        if response.status_code == 401:
            self.token_cache.invalidate()
            if retry_on_401:
                logger.warning("Amadeus rejected the access token, refreshing and retrying once")
                return self._make_request(params, retry_on_401=False)
            raise ProviderHTTPError("Amadeus rejected a freshly issued token", 401, provider=self.name.value)

        if response.status_code == 404:
            return None

        if not response.ok:
            logger.error(f"Amadeus API HTTP error: {response.status_code} - {response.text[:200]}")
            raise ProviderHTTPError(
                f"API request failed: {response.status_code}",
                response.status_code,
                provider=self.name.value,
            )

        try:
            return response.json()
        except ValueError as e:
            raise ScheduleProviderError(f"Malformed Amadeus response: {str(e)}", provider=self.name.value)

    def fetch(
        self,
        flight_number: str,
        flight_date: date,
        arrival_airport: Optional[str] = None
    ) -> ProviderResponse[ScheduledFlight]:
        carrier, number = parse_flight_number(flight_number)
        if not carrier:
            return self.not_found(INVALID_FLIGHT_NUMBER)

        params = {
            "carrierCode": carrier,
            "flightNumber": number,
            "scheduledDepartureDate": flight_date.isoformat(),
        }

        logger.info(f"Querying Amadeus schedule: {carrier}{number} on {flight_date}")
        payload = self._make_request(params)
        if payload is None:
            return self.not_found()

        if not isinstance(payload, dict):
            raise ScheduleProviderError("Malformed Amadeus response: expected an object", provider=self.name.value)

        flights = payload.get("data") or []
        if not flights:
            return self.not_found()

        try:
            flight = parse_amadeus_flight(flights[0], carrier, number, flight_date, arrival_airport)
        except (AttributeError, TypeError, ValueError) as e:
            raise ScheduleProviderError(f"Malformed Amadeus flight record: {str(e)}", provider=self.name.value)
        if flight is None:
            return self.not_found(INCOMPLETE_FLIGHT_DATA)
        return self.found(flight)

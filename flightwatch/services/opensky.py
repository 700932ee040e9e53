"""
OpenSky Network Client - live flight tracking from the global state-vector feed
Free tier: 4,000 calls/day (anonymous)
Docs: https://openskynetwork.github.io/opensky-api/rest.html
"""

import logging
from typing import Dict, Iterable, List, Optional

import requests

from flightwatch.models.flight import (
    LiveFlightStatus,
    ProviderResponse,
    ProviderSource,
    SnapshotResult,
    StateVector,
)
from flightwatch.models.request import FlightsNearAirportResponse
from flightwatch.services.callsign import flight_number_to_callsign
from flightwatch.services.snapshot_cache import SnapshotCache

logger = logging.getLogger(__name__)

RATE_LIMIT_ERROR = "Rate limit exceeded"

# Approximate bounding boxes around event airports
AIRPORT_BOUNDS = {
    "KUL": {"lamin": 2.5, "lomin": 101.4, "lamax": 3.0, "lomax": 101.9},    # Kuala Lumpur
    "SIN": {"lamin": 1.2, "lomin": 103.8, "lamax": 1.5, "lomax": 104.1},    # Singapore
    "HKG": {"lamin": 22.2, "lomin": 113.8, "lamax": 22.4, "lomax": 114.0},  # Hong Kong
    "BKK": {"lamin": 13.6, "lomin": 100.6, "lamax": 13.8, "lomax": 100.8},  # Bangkok
}


def _row_callsign(row: List) -> str:
    callsign = row[1] if len(row) > 1 else None
    return callsign.strip().upper() if isinstance(callsign, str) else ""


def _callsign_matches(state_callsign: str, callsign: str) -> bool:
    if not state_callsign or not callsign:
        return False
    return state_callsign == callsign or state_callsign.startswith(callsign)


class OpenSkyClient:
    """
    Live tracking on top of a shared all-flights snapshot

    Features:
    - One /states/all call serves every lookup inside the cache TTL
    - Batch lookups resolve every requested flight from a single snapshot
    - 429 and transport failures come back as error results, never exceptions
    """

    BASE_URL = "https://opensky-network.org/api"

    def __init__(
        self,
        cache: SnapshotCache,
        session: Optional[requests.Session] = None,
        base_url: Optional[str] = None,
        timeout: int = 30,
    ):
        self.cache = cache
        self.session = session or requests.Session()
        self.base_url = (base_url or self.BASE_URL).rstrip("/")
        self.timeout = timeout

    def _fetch_states(self, params: Optional[Dict] = None) -> SnapshotResult:
        url = f"{self.base_url}/states/all"
        try:
            response = self.session.get(
                url,
                params=params,
                headers={"Accept": "application/json"},
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as e:
            logger.error(f"OpenSky request error: {str(e)}")
            return SnapshotResult(success=False, error=str(e))

        if response.status_code == 429:
            logger.warning("OpenSky rate limit exceeded")
            return SnapshotResult(success=False, error=RATE_LIMIT_ERROR)

        if not response.ok:
            logger.error(f"OpenSky API error: {response.status_code}")
            return SnapshotResult(success=False, error=f"OpenSky API error: {response.status_code}")

        try:
            payload = response.json()
        except ValueError as e:
            logger.error(f"OpenSky returned invalid JSON: {str(e)}")
            return SnapshotResult(success=False, error="Invalid response from OpenSky")

        states = (payload or {}).get("states") or []
        return SnapshotResult.model_construct(success=True, states=states, error=None)

    def get_all_flights(self) -> SnapshotResult:
        """
        Get every tracked flight, served from the snapshot cache when fresh

        Returns:
            SnapshotResult; success=False carries "Rate limit exceeded" on 429
        """
        cached = self.cache.get()
        if cached is not None:
            return SnapshotResult.model_construct(success=True, states=cached.states, error=None)

        result = self._fetch_states()
        if result.success:
            self.cache.store(result.states)
            logger.info(f"Fetched OpenSky snapshot with {len(result.states)} state vectors")
        return result

    def get_live_flight_status(self, flight_number: str) -> ProviderResponse[LiveFlightStatus]:
        """
        Get live status of one flight

        Args:
            flight_number: IATA flight number (e.g., 'SQ114')

        Returns:
            ProviderResponse with LiveFlightStatus, or an error when the flight
            is not broadcasting or the feed is unavailable
        """
        callsign = flight_number_to_callsign(flight_number)
        snapshot = self.get_all_flights()

        if not snapshot.success:
            return ProviderResponse[LiveFlightStatus](
                success=False, error=snapshot.error, source=ProviderSource.OPENSKY
            )

        if not snapshot.states:
            return ProviderResponse[LiveFlightStatus](
                success=False, error="No flights currently tracked", source=ProviderSource.OPENSKY
            )

        match = None
        for row in snapshot.states:
            state_callsign = _row_callsign(row)
            if callsign and state_callsign == callsign:
                match = row
                break
            if match is None and _callsign_matches(state_callsign, callsign):
                match = row

        if match is None:
            return ProviderResponse[LiveFlightStatus](
                success=False,
                error=f"Flight {flight_number} ({callsign}) not currently in the air",
                source=ProviderSource.OPENSKY,
            )

        status = LiveFlightStatus.from_state(flight_number, callsign, StateVector.from_row(match))
        return ProviderResponse[LiveFlightStatus](success=True, data=status, source=ProviderSource.OPENSKY)

    def get_batch_flight_status(self, flight_numbers: Iterable[str]) -> Dict[str, Optional[LiveFlightStatus]]:
        """
        Get live status of many flights from ONE snapshot

        Every requested flight number is present in the result; flights that
        are not broadcasting (or a failed fetch) map to None.
        """
        flight_numbers = list(flight_numbers)
        results: Dict[str, Optional[LiveFlightStatus]] = {fn: None for fn in flight_numbers}
        exact: Dict[str, bool] = {}

        callsign_map: Dict[str, List[str]] = {}
        for fn in flight_numbers:
            callsign_map.setdefault(flight_number_to_callsign(fn), []).append(fn)

        snapshot = self.get_all_flights()
        if not snapshot.success or not snapshot.states:
            return results

        for row in snapshot.states:
            state_callsign = _row_callsign(row)
            if not state_callsign:
                continue
            for callsign, originals in callsign_map.items():
                if not _callsign_matches(state_callsign, callsign):
                    continue
                is_exact = state_callsign == callsign
                # An exact callsign beats an earlier prefix match
                if results[originals[0]] is not None and (exact.get(callsign) or not is_exact):
                    continue
                state = StateVector.from_row(row)
                for fn in originals:
                    results[fn] = LiveFlightStatus.from_state(fn, callsign, state)
                exact[callsign] = is_exact

        found = sum(1 for status in results.values() if status is not None)
        logger.info(f"Batch live status: {found}/{len(results)} flights found in snapshot")
        return results

    def get_flights_near_airport(self, airport_code: str) -> FlightsNearAirportResponse:
        """
        Get all flights inside an airport's bounding box

        Bypasses the snapshot cache: the bounded query is a separate, much
        smaller upstream request.
        """
        bounds = AIRPORT_BOUNDS.get(airport_code.strip().upper())
        if not bounds:
            return FlightsNearAirportResponse(success=False, error=f"Unknown airport: {airport_code}")

        result = self._fetch_states(params=bounds)
        if not result.success:
            return FlightsNearAirportResponse(success=False, error=result.error)

        flights = []
        for row in result.states:
            state = StateVector.from_row(row)
            label = state.callsign or "Unknown"
            flights.append(LiveFlightStatus.from_state(label, state.callsign or "", state))
        return FlightsNearAirportResponse(success=True, flights=flights)


# Singleton pattern for easy reuse
_client_instance: Optional[OpenSkyClient] = None


def get_opensky_client() -> OpenSkyClient:
    """
    Get singleton OpenSky client with its shared snapshot cache

    Returns:
        OpenSkyClient instance
    """
    global _client_instance

    if _client_instance is None:
        from flightwatch.core.config import get_settings
        settings = get_settings()
        _client_instance = OpenSkyClient(
            SnapshotCache(ttl_seconds=settings.snapshot_ttl_seconds),
            base_url=settings.opensky_base_url,
            timeout=settings.api_timeout,
        )

    return _client_instance

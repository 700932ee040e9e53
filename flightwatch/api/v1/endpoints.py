"""
API v1 Endpoints - flight verification and live tracking
Handlers are plain `def`: provider calls are blocking and run in the threadpool.
"""

from datetime import date
import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from flightwatch.core.config import Settings, get_settings
from flightwatch.models.flight import (
    FlightToTrack,
    FlightVerificationResult,
    LiveFlightStatus,
    PollingSchedule,
    ProviderResponse,
    ScheduledFlight,
    VerificationStatus,
)
from flightwatch.models.request import (
    BatchLiveStatusRequest,
    BatchLiveStatusResponse,
    FlightsNearAirportResponse,
    LiveStatusEntry,
    MismatchCheckResponse,
    ScheduledFlightToTrack,
    UniqueFlightsRequest,
    UniqueFlightsResponse,
    VerifyFlightsRequest,
    VerifyFlightsResponse,
)
from flightwatch.services.opensky import AIRPORT_BOUNDS, OpenSkyClient, get_opensky_client
from flightwatch.services.providers.base import DEFINITIVE_ABSENCE_ERRORS
from flightwatch.services.providers.chain import ScheduleProviderChain, get_schedule_chain
from flightwatch.services.scheduler import estimate_api_usage, get_polling_schedule, get_unique_flights
from flightwatch.services.time_utils import extract_time, format_time_difference, has_time_mismatch
from flightwatch.services.verifier import FlightVerifier, get_flight_verifier

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1", tags=["Flight Tracking"])


@router.get("/health", summary="Service health and provider configuration")
async def health(settings: Settings = Depends(get_settings)) -> Dict[str, Any]:
    return {
        "status": "healthy",
        "version": settings.app_version,
        "providers": {
            "amadeus": "configured" if settings.is_amadeus_configured() else "not configured",
            "aviationstack": "configured" if settings.is_aviationstack_configured() else "not configured",
            "opensky": "anonymous",
            "mock": "enabled",
        },
        "amadeus_environment": settings.amadeus_env,
        "event_airport": settings.event_airport,
    }


@router.get("/flights/status", summary="Look up scheduled flight data through the provider chain")
def get_flight_status(
    flight_number: str,
    flight_date: date = Query(..., alias="date"),
    arrival_airport: Optional[str] = None,
    chain: ScheduleProviderChain = Depends(get_schedule_chain),
) -> ProviderResponse[ScheduledFlight]:
    """Raw schedule lookup; 404 when a provider confirms the flight does not exist"""
    logger.info(f"Querying flight status: {flight_number} on {flight_date}")
    response = chain.lookup(flight_number, flight_date, arrival_airport)

    if not response.success:
        if response.error in DEFINITIVE_ABSENCE_ERRORS:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Flight {flight_number} not found for date {flight_date}: {response.error}",
            )
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"Schedule providers unavailable: {response.error}",
        )

    return response


@router.post("/flights/verify", summary="Verify one flight against provider data")
def verify_flight(
    flight: FlightToTrack,
    verifier: FlightVerifier = Depends(get_flight_verifier),
) -> FlightVerificationResult:
    return verifier.verify_flight(flight)


@router.post("/flights/verify-batch", summary="Verify a batch of unique flights")
def verify_flights(
    request: VerifyFlightsRequest,
    verifier: FlightVerifier = Depends(get_flight_verifier),
) -> VerifyFlightsResponse:
    """
    Verify every flight in the batch

    Schedule-provider calls are paced, so large batches take roughly one
    second per pre-event flight.
    """
    results = verifier.verify_all_flights(request.flights)
    changed = sum(1 for result in results.values() if result.status == VerificationStatus.CHANGED)
    return VerifyFlightsResponse(total=len(results), changed=changed, results=results)


@router.post("/flights/unique", summary="Collapse guest records into unique flights")
def unique_flights(
    request: UniqueFlightsRequest,
    settings: Settings = Depends(get_settings),
) -> UniqueFlightsResponse:
    """
    Deduplicate guest flights, attach each one's polling schedule and
    estimate provider usage for the whole set
    """
    flights = get_unique_flights(request.guests)
    scheduled = [
        ScheduledFlightToTrack(**flight.model_dump(), schedule=get_polling_schedule(flight.flight_date))
        for flight in flights
    ]
    usage = estimate_api_usage(flights, primary_configured=settings.is_amadeus_configured())
    return UniqueFlightsResponse(flights=scheduled, api_usage=usage)


@router.get("/flights/polling-schedule", summary="Polling schedule for a flight date")
async def polling_schedule(flight_date: date) -> PollingSchedule:
    return get_polling_schedule(flight_date)


@router.get("/flights/live/{flight_number}", summary="Live status of one flight from OpenSky")
def live_flight_status(
    flight_number: str,
    tracker: OpenSkyClient = Depends(get_opensky_client),
) -> ProviderResponse[LiveFlightStatus]:
    return tracker.get_live_flight_status(flight_number)


@router.post("/flights/live/batch", summary="Live status of many flights from one snapshot")
def batch_live_status(
    request: BatchLiveStatusRequest,
    tracker: OpenSkyClient = Depends(get_opensky_client),
) -> BatchLiveStatusResponse:
    statuses = tracker.get_batch_flight_status(request.flight_numbers)
    return BatchLiveStatusResponse(
        results=[LiveStatusEntry.from_status(fn, status_) for fn, status_ in statuses.items()],
    )


@router.get("/flights/near-airport/{airport_code}", summary="Flights inside an airport's bounding box")
def flights_near_airport(
    airport_code: str,
    tracker: OpenSkyClient = Depends(get_opensky_client),
) -> FlightsNearAirportResponse:
    if airport_code.strip().upper() not in AIRPORT_BOUNDS:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Unknown airport: {airport_code}. Supported: {', '.join(sorted(AIRPORT_BOUNDS))}",
        )
    return tracker.get_flights_near_airport(airport_code)


@router.post("/flights/mismatch", summary="Compare an entered time with a scheduled time")
async def check_mismatch(
    entered: Optional[str] = None,
    scheduled: Optional[str] = None,
    settings: Settings = Depends(get_settings),
) -> MismatchCheckResponse:
    scheduled_time = extract_time(scheduled)
    return MismatchCheckResponse(
        entered=entered,
        scheduled=scheduled_time,
        time_mismatch=has_time_mismatch(entered, scheduled_time, settings.mismatch_threshold_minutes),
        time_difference=format_time_difference(entered, scheduled_time) or None,
    )

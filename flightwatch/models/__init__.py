"""
Models package - Pydantic schemas for data validation
"""

from .flight import (
    ApiUsageEstimate,
    CachedSnapshot,
    Direction,
    FlightEndpoint,
    FlightStatus,
    FlightToTrack,
    FlightVerificationResult,
    LiveFlightStatus,
    PollingFrequency,
    PollingSchedule,
    Position,
    ProviderResponse,
    ProviderSource,
    ScheduledFlight,
    SnapshotResult,
    StateVector,
    VerificationStatus,
)
from .request import (
    BatchLiveStatusRequest,
    BatchLiveStatusResponse,
    FlightsNearAirportResponse,
    GuestFlightRecord,
    LiveStatusEntry,
    MismatchCheckResponse,
    ScheduledFlightToTrack,
    UniqueFlightsRequest,
    UniqueFlightsResponse,
    VerifyFlightsRequest,
    VerifyFlightsResponse,
)

__all__ = [
    "ApiUsageEstimate",
    "CachedSnapshot",
    "Direction",
    "FlightEndpoint",
    "FlightStatus",
    "FlightToTrack",
    "FlightVerificationResult",
    "LiveFlightStatus",
    "PollingFrequency",
    "PollingSchedule",
    "Position",
    "ProviderResponse",
    "ProviderSource",
    "ScheduledFlight",
    "SnapshotResult",
    "StateVector",
    "VerificationStatus",
    "BatchLiveStatusRequest",
    "BatchLiveStatusResponse",
    "FlightsNearAirportResponse",
    "GuestFlightRecord",
    "LiveStatusEntry",
    "MismatchCheckResponse",
    "ScheduledFlightToTrack",
    "UniqueFlightsRequest",
    "UniqueFlightsResponse",
    "VerifyFlightsRequest",
    "VerifyFlightsResponse",
]

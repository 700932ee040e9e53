"""
Flight data models - Pydantic schemas shared by providers, scheduler and verifier
Every provider adapter normalizes its upstream payload into these shapes
"""

from pydantic import BaseModel, Field, field_validator
from typing import Optional, List, Generic, TypeVar, Any
from datetime import date, datetime, timezone
from enum import Enum
import re


_TIME_RE = re.compile(r"^(\d{1,2}):(\d{2})(?::\d{2}(?:\.\d+)?)?$")


class Direction(str, Enum):
    """Which leg of a guest's trip a flight covers"""
    ARRIVAL = "arrival"
    DEPARTURE = "departure"


class PollingFrequency(str, Enum):
    """How often a flight should be re-checked"""
    TWICE_DAILY = "twice_daily"
    FIVE_DAILY = "five_daily"
    REALTIME = "realtime"


class VerificationStatus(str, Enum):
    """Outcome of verifying one flight"""
    VERIFIED = "verified"
    CHANGED = "changed"
    NOT_FOUND = "not_found"
    ERROR = "error"


class FlightStatus(str, Enum):
    """Operational flight status normalized across providers"""
    SCHEDULED = "scheduled"
    ACTIVE = "active"
    LANDED = "landed"
    CANCELLED = "cancelled"
    DIVERTED = "diverted"
    UNKNOWN = "unknown"


class ProviderSource(str, Enum):
    """Identifier of the provider that produced a response"""
    AMADEUS = "amadeus"
    AVIATIONSTACK = "aviationstack"
    MOCK = "mock"
    OPENSKY = "opensky"


DataT = TypeVar("DataT")


class ProviderResponse(BaseModel, Generic[DataT]):
    """
    Uniform envelope returned by every provider adapter

    success=False with data=None means the provider answered definitively
    (flight absent, incomplete record, invalid number). Transport failures
    are raised as ScheduleProviderError instead so the chain can fall through.
    """
    success: bool
    data: Optional[DataT] = None
    error: Optional[str] = None
    source: ProviderSource


class FlightEndpoint(BaseModel):
    """One end (departure or arrival) of a scheduled flight"""
    airport: str = Field(..., description="Airport name, or IATA code when the provider gives no name")
    iata: str = Field(..., description="3-letter IATA airport code")
    icao: Optional[str] = Field(None, description="4-letter ICAO airport code")
    terminal: Optional[str] = None
    gate: Optional[str] = None
    baggage: Optional[str] = None
    scheduled: Optional[str] = Field(None, description="Scheduled time (ISO datetime or HH:MM)")
    estimated: Optional[str] = Field(None, description="Estimated time (ISO datetime or HH:MM)")
    actual: Optional[str] = Field(None, description="Actual time (ISO datetime or HH:MM)")
    delay: Optional[int] = Field(None, description="Delay in minutes")
    timezone: Optional[str] = None

    def get_effective_time(self) -> Optional[str]:
        """Most accurate time available (actual > estimated > scheduled)"""
        return self.actual or self.estimated or self.scheduled


class ScheduledFlight(BaseModel):
    """
    Normalized schedule record for a single flight on a single date

    Built from Amadeus flight points, AviationStack rows, or the mock table.
    """

    flight_number: str = Field(..., description="IATA flight code, e.g. SQ238")
    carrier_code: str = Field(..., description="Airline code parsed from the flight number")
    airline_name: Optional[str] = Field(None, description="Airline display name when known")
    flight_date: date
    departure: FlightEndpoint
    arrival: FlightEndpoint
    status: FlightStatus = FlightStatus.UNKNOWN
    duration: Optional[str] = Field(None, description="ISO 8601 duration, e.g. PT1H10M")
    aircraft_registration: Optional[str] = None
    aircraft_type: Optional[str] = None

    def leg(self, direction: Direction) -> FlightEndpoint:
        """Endpoint a guest cares about: arrival leg for arrivals, departure leg otherwise"""
        return self.arrival if direction == Direction.ARRIVAL else self.departure

    class Config:
        json_schema_extra = {
            "example": {
                "flight_number": "SQ238",
                "carrier_code": "SQ",
                "airline_name": "Singapore Airlines",
                "flight_date": "2026-01-18",
                "departure": {"airport": "Singapore Changi Airport", "iata": "SIN", "scheduled": "2026-01-18T12:15:00+08:00"},
                "arrival": {"airport": "Kuala Lumpur International Airport", "iata": "KUL", "scheduled": "2026-01-18T15:15:00+08:00"},
                "status": "scheduled"
            }
        }


class FlightToTrack(BaseModel):
    """
    A unique flight that needs verification

    Identity is (flight_number, flight_date, direction); many guests collapse
    into one of these.
    """
    flight_number: str = Field(..., min_length=1, description="IATA flight code")
    flight_date: date
    direction: Direction
    expected_time: Optional[str] = Field(None, description="Guest-entered time in HH:MM")

    @field_validator("flight_number")
    @classmethod
    def normalize_flight_number(cls, v: str) -> str:
        return re.sub(r"\s+", "", v).upper()

    @field_validator("expected_time", mode="before")
    @classmethod
    def normalize_expected_time(cls, v: Any) -> Optional[str]:
        """Accept HH:MM, HH:MM:SS or time objects; blank becomes None"""
        if v is None:
            return None
        if hasattr(v, "strftime"):
            return v.strftime("%H:%M")
        v = str(v).strip()
        if not v:
            return None
        match = _TIME_RE.match(v)
        if not match:
            raise ValueError(f"expected_time must be HH:MM, got {v!r}")
        return f"{int(match.group(1)):02d}:{match.group(2)}"

    @property
    def key(self) -> str:
        return f"{self.flight_number}-{self.flight_date.isoformat()}-{self.direction.value}"

    class Config:
        json_schema_extra = {
            "example": {
                "flight_number": "SQ238",
                "flight_date": "2026-01-18",
                "direction": "arrival",
                "expected_time": "18:10"
            }
        }


class PollingSchedule(BaseModel):
    """When and how often a flight should be checked next"""
    frequency: PollingFrequency
    next_check_at: datetime
    checks_remaining: int = Field(..., description="Checks left until the flight; -1 means unlimited")
    reason: str


class Position(BaseModel):
    """Last reported aircraft position"""
    lat: float
    lng: float
    altitude: float = Field(0.0, description="Altitude in meters")
    heading: float = Field(0.0, description="True track in degrees, 0 = North")
    speed: float = Field(0.0, description="Ground speed in km/h")


class StateVector(BaseModel):
    """One parsed row of an OpenSky state-vector snapshot"""
    icao24: str
    callsign: Optional[str] = None
    origin_country: Optional[str] = None
    time_position: Optional[int] = None
    last_contact: int
    longitude: Optional[float] = None
    latitude: Optional[float] = None
    baro_altitude: Optional[float] = None
    on_ground: bool = False
    velocity: Optional[float] = Field(None, description="Ground speed in m/s")
    true_track: Optional[float] = None
    vertical_rate: Optional[float] = None
    geo_altitude: Optional[float] = None

    @classmethod
    def from_row(cls, row: List[Any]) -> "StateVector":
        """
        Parse a raw OpenSky state row

        Index 12 (sensors) is skipped; geo_altitude sits at index 13.
        """
        def at(i: int) -> Any:
            return row[i] if len(row) > i else None

        callsign = at(1)
        return cls(
            icao24=str(at(0) or ""),
            callsign=callsign.strip() if isinstance(callsign, str) and callsign.strip() else None,
            origin_country=at(2),
            time_position=at(3),
            last_contact=int(at(4) or 0),
            longitude=at(5),
            latitude=at(6),
            baro_altitude=at(7),
            on_ground=bool(at(8)),
            velocity=at(9),
            true_track=at(10),
            vertical_rate=at(11),
            geo_altitude=at(13),
        )


class LiveFlightStatus(BaseModel):
    """Live position status derived from one state vector"""
    flight_number: str
    callsign: str
    is_in_air: bool
    has_landed: bool
    position: Optional[Position] = None
    last_update: datetime

    @classmethod
    def from_state(cls, flight_number: str, callsign: str, state: StateVector) -> "LiveFlightStatus":
        has_fix = state.latitude is not None
        position = None
        if state.latitude is not None and state.longitude is not None:
            position = Position(
                lat=state.latitude,
                lng=state.longitude,
                altitude=state.baro_altitude or state.geo_altitude or 0.0,
                heading=state.true_track or 0.0,
                speed=state.velocity * 3.6 if state.velocity else 0.0,
            )
        return cls(
            flight_number=flight_number,
            callsign=state.callsign or callsign,
            is_in_air=not state.on_ground and has_fix,
            has_landed=state.on_ground and has_fix,
            position=position,
            last_update=datetime.fromtimestamp(state.last_contact, tz=timezone.utc),
        )


class CachedSnapshot(BaseModel):
    """Whole-feed OpenSky snapshot; replaced wholesale, never patched"""
    states: List[List[Any]] = Field(default_factory=list)
    timestamp: float


class SnapshotResult(BaseModel):
    """Result of asking for the all-flights snapshot"""
    success: bool
    states: List[List[Any]] = Field(default_factory=list)
    error: Optional[str] = None


class FlightVerificationResult(BaseModel):
    """
    Verification outcome for one FlightToTrack

    status:
    - changed: entered time disagrees with the scheduled time beyond the threshold
    - verified: data found and consistent (or live position found on event day)
    - not_found: no provider returned data
    - error: a provider call failed at transport level
    """
    flight_number: str
    flight_date: date
    direction: Direction
    status: VerificationStatus
    scheduled_info: Optional[ScheduledFlight] = None
    live_status: Optional[LiveFlightStatus] = None
    time_mismatch: Optional[bool] = None
    scheduled_time: Optional[str] = Field(None, description="Scheduled HH:MM of the relevant leg")
    time_difference: Optional[str] = Field(None, description="Signed difference, e.g. -2h 55m")
    source: Optional[ProviderSource] = None
    error: Optional[str] = None
    last_checked_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class ApiUsageEstimate(BaseModel):
    """Expected provider call volume for a set of flights"""
    schedule_provider_calls: int
    live_provider_calls: int
    within_free_tier: bool
    unique_flights: int = 0

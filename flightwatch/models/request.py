"""
Request models - Pydantic schemas for API input and output payloads
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel
from typing import Optional, List, Dict
from datetime import date, datetime

from .flight import (
    ApiUsageEstimate,
    FlightToTrack,
    FlightVerificationResult,
    LiveFlightStatus,
    PollingSchedule,
    Position,
)


class GuestFlightRecord(BaseModel):
    """
    Flight fields of one guest row

    Accepts both snake_case and the camelCase keys used by the dashboard
    (arrivalFlightNumber, arrivalDate, ...). Any other guest columns are ignored.
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    arrival_flight_number: Optional[str] = None
    arrival_date: Optional[date] = None
    arrival_time: Optional[str] = None
    departure_flight_number: Optional[str] = None
    departure_date: Optional[date] = None
    departure_time: Optional[str] = None

    @field_validator("arrival_flight_number", "arrival_date", "arrival_time",
                     "departure_flight_number", "departure_date", "departure_time", mode="before")
    @classmethod
    def blank_to_none(cls, v):
        """Spreadsheet imports leave empty strings in unset cells"""
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("arrival_time", "departure_time", mode="before")
    @classmethod
    def time_to_string(cls, v):
        if hasattr(v, "strftime"):
            return v.strftime("%H:%M")
        return v


class UniqueFlightsRequest(BaseModel):
    """Guest list to collapse into unique flights"""
    guests: List[GuestFlightRecord] = Field(default_factory=list)


class ScheduledFlightToTrack(FlightToTrack):
    """Unique flight annotated with its polling schedule"""
    schedule: PollingSchedule


class UniqueFlightsResponse(BaseModel):
    flights: List[ScheduledFlightToTrack]
    api_usage: ApiUsageEstimate


class VerifyFlightsRequest(BaseModel):
    """Batch of unique flights to verify"""
    flights: List[FlightToTrack] = Field(..., min_length=1)

    class Config:
        json_schema_extra = {
            "example": {
                "flights": [
                    {"flight_number": "SQ238", "flight_date": "2026-01-18", "direction": "arrival", "expected_time": "18:10"},
                    {"flight_number": "MH123", "flight_date": "2026-01-18", "direction": "arrival", "expected_time": "12:00"}
                ]
            }
        }


class VerifyFlightsResponse(BaseModel):
    total: int
    changed: int
    results: Dict[str, FlightVerificationResult]


class BatchLiveStatusRequest(BaseModel):
    flight_numbers: List[str] = Field(..., min_length=1)


class LiveStatusEntry(BaseModel):
    """One flight in a batch live-status response"""
    flight_number: str
    found: bool
    is_in_air: Optional[bool] = None
    has_landed: Optional[bool] = None
    position: Optional[Position] = None
    last_update: Optional[datetime] = None

    @classmethod
    def from_status(cls, flight_number: str, status: Optional[LiveFlightStatus]) -> "LiveStatusEntry":
        if status is None:
            return cls(flight_number=flight_number, found=False)
        return cls(
            flight_number=flight_number,
            found=True,
            is_in_air=status.is_in_air,
            has_landed=status.has_landed,
            position=status.position,
            last_update=status.last_update,
        )


class BatchLiveStatusResponse(BaseModel):
    success: bool = True
    api_calls_used: int = Field(1, description="Upstream calls the batch can cost at most")
    results: List[LiveStatusEntry]


class FlightsNearAirportResponse(BaseModel):
    success: bool
    flights: List[LiveFlightStatus] = Field(default_factory=list)
    error: Optional[str] = None


class MismatchCheckResponse(BaseModel):
    entered: Optional[str] = None
    scheduled: Optional[str] = None
    time_mismatch: bool
    time_difference: Optional[str] = None

"""
Schedule provider interface shared by every adapter in the fallback chain
"""

from abc import ABC, abstractmethod
from datetime import date
from typing import Optional

from flightwatch.models.flight import ProviderResponse, ProviderSource, ScheduledFlight


FLIGHT_NOT_FOUND = "Flight not found"
INCOMPLETE_FLIGHT_DATA = "Incomplete flight data"
INVALID_FLIGHT_NUMBER = "Invalid flight number format"

# Errors a provider returns when it answered and the flight is definitively absent
DEFINITIVE_ABSENCE_ERRORS = frozenset({FLIGHT_NOT_FOUND, INCOMPLETE_FLIGHT_DATA, INVALID_FLIGHT_NUMBER})


class ScheduleProvider(ABC):
    """
    One source of scheduled flight data

    fetch() returns a ProviderResponse for any definitive answer, including
    "flight not found". It raises ScheduleProviderError when the provider
    cannot answer (network error, 5xx, rate limit, malformed payload, auth).
    """

    name: ProviderSource

    def is_configured(self) -> bool:
        """Whether the provider has the credentials it needs to take part"""
        return True

    @abstractmethod
    def fetch(
        self,
        flight_number: str,
        flight_date: date,
        arrival_airport: Optional[str] = None
    ) -> ProviderResponse[ScheduledFlight]:
        """
        Look up one flight on one date

        Args:
            flight_number: IATA flight number (e.g., 'SQ238')
            flight_date: Scheduled departure date
            arrival_airport: Optional IATA code to narrow multi-leg results

        Raises:
            ScheduleProviderError: If the provider is unavailable
        """
        ...

    def found(self, flight: ScheduledFlight) -> ProviderResponse[ScheduledFlight]:
        return ProviderResponse[ScheduledFlight](success=True, data=flight, source=self.name)

    def not_found(self, error: str = FLIGHT_NOT_FOUND) -> ProviderResponse[ScheduledFlight]:
        return ProviderResponse[ScheduledFlight](success=False, error=error, source=self.name)

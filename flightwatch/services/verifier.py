"""
Flight Verifier - checks guest-entered flight details against provider data

Pre-event flights go through the schedule provider chain and get a mismatch
check; event-day flights go to OpenSky live tracking.
"""

import logging
import time
from datetime import datetime, timezone
from typing import Callable, Dict, Iterable, List, Optional

from flightwatch.core.config import Settings
from flightwatch.models.flight import (
    Direction,
    FlightToTrack,
    FlightVerificationResult,
    PollingFrequency,
    ProviderSource,
    VerificationStatus,
)
from flightwatch.services.opensky import OpenSkyClient
from flightwatch.services.providers.base import DEFINITIVE_ABSENCE_ERRORS
from flightwatch.services.providers.chain import ScheduleProviderChain
from flightwatch.services.scheduler import get_polling_schedule
from flightwatch.services.time_utils import extract_time, format_time_difference, has_time_mismatch

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class FlightVerifier:
    """
    Verification orchestrator

    Features:
    - Routes each flight by its polling schedule (realtime vs scheduled)
    - Paces batches: schedule-provider flights first, live flights second
    - One failing flight never aborts a batch
    """

    def __init__(
        self,
        chain: ScheduleProviderChain,
        live_tracker: OpenSkyClient,
        settings: Settings,
        sleep: Callable[[float], None] = time.sleep,
        now: Optional[Callable[[], datetime]] = None,
    ):
        """
        Args:
            chain: Schedule provider chain for pre-event flights
            live_tracker: OpenSky client for event-day flights
            settings: Application settings (threshold, delays, event airport)
            sleep: Pause function used between batch calls
            now: Returns the current time; defaults to now in UTC
        """
        self.chain = chain
        self.live_tracker = live_tracker
        self.settings = settings
        self._sleep = sleep
        self._now = now or _utcnow

    def is_realtime(self, flight: FlightToTrack) -> bool:
        schedule = get_polling_schedule(flight.flight_date, self._now())
        return schedule.frequency == PollingFrequency.REALTIME

    def verify_flight(self, flight: FlightToTrack) -> FlightVerificationResult:
        """
        Verify one flight

        Returns:
            FlightVerificationResult with status verified, changed, not_found
            or error
        """
        if self.is_realtime(flight):
            return self._verify_live(flight)
        return self._verify_scheduled(flight)

    def _verify_live(self, flight: FlightToTrack) -> FlightVerificationResult:
        snapshot = self.live_tracker.get_all_flights()
        if not snapshot.success:
            logger.warning(f"Live feed unavailable for {flight.flight_number}: {snapshot.error}")
            return FlightVerificationResult(
                flight_number=flight.flight_number,
                flight_date=flight.flight_date,
                direction=flight.direction,
                status=VerificationStatus.ERROR,
                source=ProviderSource.OPENSKY,
                error=snapshot.error,
            )

        response = self.live_tracker.get_live_flight_status(flight.flight_number)
        return FlightVerificationResult(
            flight_number=flight.flight_number,
            flight_date=flight.flight_date,
            direction=flight.direction,
            status=VerificationStatus.VERIFIED if response.success else VerificationStatus.NOT_FOUND,
            live_status=response.data,
            source=response.source,
            error=response.error,
        )

    def _verify_scheduled(self, flight: FlightToTrack) -> FlightVerificationResult:
        arrival_airport = self.settings.event_airport if flight.direction == Direction.ARRIVAL else None
        response = self.chain.lookup(flight.flight_number, flight.flight_date, arrival_airport)

        if not response.success or response.data is None:
            definitive = response.error in DEFINITIVE_ABSENCE_ERRORS
            return FlightVerificationResult(
                flight_number=flight.flight_number,
                flight_date=flight.flight_date,
                direction=flight.direction,
                status=VerificationStatus.NOT_FOUND if definitive else VerificationStatus.ERROR,
                source=response.source,
                error=response.error,
            )

        scheduled_time = extract_time(response.data.leg(flight.direction).scheduled)
        mismatch = has_time_mismatch(
            flight.expected_time,
            scheduled_time,
            self.settings.mismatch_threshold_minutes,
        )
        if mismatch:
            logger.info(
                f"Time mismatch for {flight.flight_number} on {flight.flight_date}: "
                f"entered {flight.expected_time}, scheduled {scheduled_time}"
            )

        return FlightVerificationResult(
            flight_number=flight.flight_number,
            flight_date=flight.flight_date,
            direction=flight.direction,
            status=VerificationStatus.CHANGED if mismatch else VerificationStatus.VERIFIED,
            scheduled_info=response.data,
            time_mismatch=mismatch,
            scheduled_time=scheduled_time,
            time_difference=format_time_difference(flight.expected_time, scheduled_time) or None,
            source=response.source,
        )

    def _verify_safely(self, flight: FlightToTrack) -> FlightVerificationResult:
        try:
            return self.verify_flight(flight)
        except Exception as e:
            logger.exception(f"Verification failed for {flight.key}")
            return FlightVerificationResult(
                flight_number=flight.flight_number,
                flight_date=flight.flight_date,
                direction=flight.direction,
                status=VerificationStatus.ERROR,
                source=ProviderSource.OPENSKY if self.is_realtime(flight) else None,
                error=str(e),
            )

    def verify_all_flights(self, flights: Iterable[FlightToTrack]) -> Dict[str, FlightVerificationResult]:
        """
        Verify a batch of unique flights

        Schedule-provider flights run first with schedule_call_delay after each
        call, then event-day flights with realtime_call_delay. Input order is
        kept within each group.

        Args:
            flights: Unique flights to verify

        Returns:
            Dict keyed by FlightToTrack.key
        """
        scheduled: List[FlightToTrack] = []
        realtime: List[FlightToTrack] = []
        for flight in flights:
            (realtime if self.is_realtime(flight) else scheduled).append(flight)

        logger.info(f"Verifying {len(scheduled)} scheduled and {len(realtime)} real-time flights")

        results: Dict[str, FlightVerificationResult] = {}
        for group, delay in (
            (scheduled, self.settings.schedule_call_delay),
            (realtime, self.settings.realtime_call_delay),
        ):
            for flight in group:
                results[flight.key] = self._verify_safely(flight)
                self._sleep(delay)

        changed = sum(1 for r in results.values() if r.status == VerificationStatus.CHANGED)
        logger.info(f"Verification complete: {len(results)} flights, {changed} changed")
        return results


# Singleton pattern for easy reuse
_verifier_instance: Optional[FlightVerifier] = None


def get_flight_verifier() -> FlightVerifier:
    """
    Get singleton flight verifier wired to the shared chain and OpenSky client

    Returns:
        FlightVerifier instance
    """
    global _verifier_instance

    if _verifier_instance is None:
        from flightwatch.core.config import get_settings
        from flightwatch.services.opensky import get_opensky_client
        from flightwatch.services.providers.chain import get_schedule_chain

        _verifier_instance = FlightVerifier(get_schedule_chain(), get_opensky_client(), get_settings())

    return _verifier_instance

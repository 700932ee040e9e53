"""
Polling Scheduler - how often each flight is checked, and what that costs

Frequency by days until the flight:
- event day (or past): real-time via OpenSky every 5 minutes
- within 7 days: schedule provider 5x daily
- further out: schedule provider 2x daily
"""

import logging
from datetime import date, datetime, timedelta, timezone
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from pydantic import ValidationError

from flightwatch.models.flight import (
    ApiUsageEstimate,
    Direction,
    FlightToTrack,
    PollingFrequency,
    PollingSchedule,
)
from flightwatch.models.request import GuestFlightRecord

logger = logging.getLogger(__name__)

FIVE_DAILY_WINDOW_DAYS = 7
TWICE_DAILY_MAX_DAYS = 30

REALTIME_INTERVAL = timedelta(minutes=5)
FIVE_DAILY_INTERVAL = timedelta(hours=24 / 5)
TWICE_DAILY_INTERVAL = timedelta(hours=12)

# 5-minute polling over a 12 hour event-day window
REALTIME_CALLS_PER_DAY = 144

# Free tier ceilings
SECONDARY_MONTHLY_LIMIT = 100
PRIMARY_MONTHLY_LIMIT = 2000
LIVE_DAILY_LIMIT = 4000


def days_until_flight(flight_date: date, today: date) -> int:
    """Whole calendar days between today and the flight date (negative when past)"""
    return (flight_date - today).days


def get_polling_frequency(days_away: int) -> PollingFrequency:
    if days_away <= 0:
        return PollingFrequency.REALTIME
    if days_away <= FIVE_DAILY_WINDOW_DAYS:
        return PollingFrequency.FIVE_DAILY
    return PollingFrequency.TWICE_DAILY


def get_polling_schedule(flight_date: date, now: Optional[datetime] = None) -> PollingSchedule:
    """
    Work out the polling schedule for a flight

    Args:
        flight_date: Scheduled flight date
        now: Current time (defaults to now in UTC)

    Returns:
        PollingSchedule with the frequency, next check time and checks left

    Example:
        schedule = get_polling_schedule(date(2026, 1, 18), datetime(2026, 1, 15, 9, 0))
        schedule.frequency  # five_daily, 15 checks remaining
    """
    now = now or datetime.now(timezone.utc)
    days_away = days_until_flight(flight_date, now.date())
    frequency = get_polling_frequency(days_away)

    if frequency == PollingFrequency.REALTIME:
        return PollingSchedule(
            frequency=frequency,
            next_check_at=now + REALTIME_INTERVAL,
            checks_remaining=-1,
            reason="Event day - real-time tracking via OpenSky",
        )

    if frequency == PollingFrequency.FIVE_DAILY:
        return PollingSchedule(
            frequency=frequency,
            next_check_at=now + FIVE_DAILY_INTERVAL,
            checks_remaining=days_away * 5,
            reason=f"{days_away} day{'s' if days_away != 1 else ''} until flight - checking 5x daily",
        )

    return PollingSchedule(
        frequency=frequency,
        next_check_at=now + TWICE_DAILY_INTERVAL,
        checks_remaining=days_away * 2,
        reason=f"{days_away} days until flight - checking 2x daily",
    )


def _as_guest(guest: Union[GuestFlightRecord, Mapping[str, Any]]) -> GuestFlightRecord:
    if isinstance(guest, GuestFlightRecord):
        return guest
    return GuestFlightRecord.model_validate(guest)


def _to_flight(
    flight_number: str,
    flight_date: date,
    direction: Direction,
    expected_time: Optional[str]
) -> FlightToTrack:
    try:
        return FlightToTrack(
            flight_number=flight_number,
            flight_date=flight_date,
            direction=direction,
            expected_time=expected_time,
        )
    except ValidationError:
        logger.warning(
            f"Ignoring unreadable {direction.value} time {expected_time!r} for {flight_number} on {flight_date}"
        )
        return FlightToTrack(flight_number=flight_number, flight_date=flight_date, direction=direction)


def get_unique_flights(guests: Iterable[Union[GuestFlightRecord, Mapping[str, Any]]]) -> List[FlightToTrack]:
    """
    Collapse guest records into the unique flights that need checking

    Each guest contributes up to two flights (arrival, departure), only when
    both flight number and date are set. The first guest seen on a flight
    supplies its expected time. Output keeps first-seen order. A guest
    record that fails validation (for example a date that is not
    YYYY-MM-DD) is logged and skipped; the rest of the list still counts.

    Args:
        guests: GuestFlightRecord models or plain dicts (snake_case or camelCase)

    Returns:
        List of FlightToTrack, one per (flight number, date, direction)
    """
    unique: Dict[str, FlightToTrack] = {}
    total = 0

    for raw in guests:
        total += 1
        try:
            guest = _as_guest(raw)
        except ValidationError as e:
            logger.warning(f"Skipping guest record {total} with unreadable flight fields: {e.error_count()} error(s)")
            continue
        legs = (
            (guest.arrival_flight_number, guest.arrival_date, guest.arrival_time, Direction.ARRIVAL),
            (guest.departure_flight_number, guest.departure_date, guest.departure_time, Direction.DEPARTURE),
        )
        for number, flight_date, expected_time, direction in legs:
            if not number or not flight_date:
                continue
            flight = _to_flight(number, flight_date, direction, expected_time)
            if flight.key not in unique:
                unique[flight.key] = flight

    logger.info(f"Deduplicated {total} guest records into {len(unique)} unique flights")
    return list(unique.values())


def estimate_api_usage(
    flights: Iterable[FlightToTrack],
    today: Optional[date] = None,
    primary_configured: bool = False
) -> ApiUsageEstimate:
    """
    Estimate provider calls needed to keep these flights verified until they fly

    Schedule calls follow each flight's full polling forecast: a flight
    still in its 2x daily phase is also charged for the 7-day 5x daily
    window it will pass through later (7 * 5 calls), so the total is
    higher than counting only the current frequency.

    Live calls are batched: one snapshot answers every realtime flight, so
    event-day flights share a single 144-call daily budget rather than
    144 calls each.

    Args:
        flights: Unique flights
        today: Reference date (defaults to today in UTC)
        primary_configured: Compare against the primary provider's ceiling
            instead of the secondary's

    Returns:
        ApiUsageEstimate
    """
    today = today or datetime.now(timezone.utc).date()
    flights = list(flights)

    schedule_calls = 0
    has_realtime = False
    for flight in flights:
        days_away = days_until_flight(flight.flight_date, today)
        frequency = get_polling_frequency(days_away)
        if frequency == PollingFrequency.REALTIME:
            has_realtime = True
        elif frequency == PollingFrequency.FIVE_DAILY:
            schedule_calls += days_away * 5
        else:
            twice_daily_days = min(days_away - FIVE_DAILY_WINDOW_DAYS, TWICE_DAILY_MAX_DAYS)
            schedule_calls += twice_daily_days * 2 + FIVE_DAILY_WINDOW_DAYS * 5

    live_calls = REALTIME_CALLS_PER_DAY if has_realtime else 0
    schedule_limit = PRIMARY_MONTHLY_LIMIT if primary_configured else SECONDARY_MONTHLY_LIMIT

    return ApiUsageEstimate(
        schedule_provider_calls=schedule_calls,
        live_provider_calls=live_calls,
        within_free_tier=schedule_calls <= schedule_limit and live_calls <= LIVE_DAILY_LIMIT,
        unique_flights=len(flights),
    )

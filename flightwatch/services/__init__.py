"""
Services package - Business logic and external API integrations
"""

from .callsign import flight_number_to_callsign, parse_flight_number
from .opensky import OpenSkyClient, get_opensky_client
from .scheduler import estimate_api_usage, get_polling_schedule, get_unique_flights
from .snapshot_cache import SnapshotCache
from .token_cache import TokenCache
from .verifier import FlightVerifier, get_flight_verifier

__all__ = [
    "flight_number_to_callsign",
    "parse_flight_number",
    "OpenSkyClient",
    "get_opensky_client",
    "estimate_api_usage",
    "get_polling_schedule",
    "get_unique_flights",
    "SnapshotCache",
    "TokenCache",
    "FlightVerifier",
    "get_flight_verifier"
]

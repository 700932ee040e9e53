"""
Callsign Mapper - IATA flight numbers to ICAO callsigns used by live feeds
e.g. SQ114 -> SIA114
"""

import re
from typing import Tuple


AIRLINE_CALLSIGN_MAP = {
    "SQ": "SIA",  # Singapore Airlines
    "MH": "MAS",  # Malaysia Airlines
    "AK": "AXM",  # AirAsia
    "TR": "TGW",  # Scoot
    "CX": "CPA",  # Cathay Pacific
    "QF": "QFA",  # Qantas
    "EK": "UAE",  # Emirates
    "BA": "BAW",  # British Airways
    "QR": "QTR",  # Qatar Airways
    "TG": "THA",  # Thai Airways
    "GA": "GIA",  # Garuda Indonesia
    "JL": "JAL",  # Japan Airlines
    "NH": "ANA",  # All Nippon Airways
    "KE": "KAL",  # Korean Air
    "OZ": "AAR",  # Asiana Airlines
    "CI": "CAL",  # China Airlines
    "BR": "EVA",  # EVA Air
    "PR": "PAL",  # Philippine Airlines
    "VN": "HVN",  # Vietnam Airlines
}

_IATA_FLIGHT_RE = re.compile(r"^([A-Z]{2})(\d+)$")
_ICAO_FLIGHT_RE = re.compile(r"^([A-Z]{3})(\d+)$")


def clean_flight_number(flight_number: str) -> str:
    """Strip all whitespace and uppercase"""
    return re.sub(r"\s+", "", flight_number or "").upper()


def parse_flight_number(flight_number: str) -> Tuple[str, str]:
    """
    Split a flight number into carrier code and numeric part

    Examples:
        parse_flight_number("sq 114") -> ("SQ", "114")
        parse_flight_number("SIA114") -> ("SIA", "114")
        parse_flight_number(" 12 ab ") -> ("", "12AB")

    Returns an empty carrier when the number does not look like a flight code.
    """
    cleaned = clean_flight_number(flight_number)
    match = _IATA_FLIGHT_RE.match(cleaned) or _ICAO_FLIGHT_RE.match(cleaned)
    if match:
        return match.group(1), match.group(2)
    return "", cleaned


def flight_number_to_callsign(flight_number: str) -> str:
    """
    Convert an IATA flight number to its ICAO callsign

    Unmapped airlines keep their IATA code, so the result is a best-effort
    guess rather than an error.
    """
    cleaned = clean_flight_number(flight_number)
    match = _IATA_FLIGHT_RE.match(cleaned)
    if not match:
        return cleaned
    airline, number = match.groups()
    return f"{AIRLINE_CALLSIGN_MAP.get(airline, airline)}{number}"

"""
Callsign mapping tests
"""

from flightwatch.services.callsign import (
    AIRLINE_CALLSIGN_MAP,
    clean_flight_number,
    flight_number_to_callsign,
    parse_flight_number,
)


def test_known_airline_maps_to_icao_callsign():
    assert flight_number_to_callsign("SQ114") == "SIA114"
    assert flight_number_to_callsign("MH123") == "MAS123"
    assert flight_number_to_callsign("CX 751") == "CPA751"


def test_lowercase_and_spaces_are_normalized():
    assert flight_number_to_callsign(" sq 114 ") == "SIA114"
    assert clean_flight_number("mh 1 23") == "MH123"


def test_unmapped_airline_keeps_iata_code():
    assert flight_number_to_callsign("ZZ123") == "ZZ123"


def test_non_iata_shape_is_passed_through():
    assert flight_number_to_callsign("SIA114") == "SIA114"


def test_map_covers_nineteen_carriers():
    assert len(AIRLINE_CALLSIGN_MAP) == 19
    assert all(len(code) == 3 for code in AIRLINE_CALLSIGN_MAP.values())


def test_parse_flight_number():
    assert parse_flight_number("SQ238") == ("SQ", "238")
    assert parse_flight_number("sq 238") == ("SQ", "238")
    assert parse_flight_number("SIA238") == ("SIA", "238")
    assert parse_flight_number("??") == ("", "??")
    assert parse_flight_number(" 12 ab ") == ("", "12AB")
    assert parse_flight_number("u2 1234x") == ("", "U21234X")

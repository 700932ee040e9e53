"""
Shared fixtures: fake HTTP session, state-vector rows, settings, clocks
No test touches the network.
"""

from datetime import datetime, timezone

import pytest
import requests

from flightwatch.core.config import Settings


class FakeResponse:
    """Just enough of requests.Response for the clients under test"""

    def __init__(self, status_code=200, json_data=None, text=""):
        self.status_code = status_code
        self._json = json_data
        self.text = text
        self.ok = 200 <= status_code < 400

    def json(self):
        if isinstance(self._json, Exception):
            raise self._json
        return self._json

    def raise_for_status(self):
        if not self.ok:
            raise requests.exceptions.HTTPError(f"{self.status_code} Error")


class FakeSession:
    """
    Queue-driven stand-in for requests.Session

    Each queue item is a FakeResponse or an exception to raise. The last item
    is repeated once the queue runs dry.
    """

    def __init__(self, get=None, post=None):
        self._get = list(get or [])
        self._post = list(post or [])
        self.get_calls = []
        self.post_calls = []

    @staticmethod
    def _next(queue):
        if not queue:
            raise AssertionError("Unexpected HTTP call")
        item = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(item, Exception):
            raise item
        return item

    def get(self, url, **kwargs):
        self.get_calls.append((url, kwargs))
        return self._next(self._get)

    def post(self, url, **kwargs):
        self.post_calls.append((url, kwargs))
        return self._next(self._post)


class FakeClock:
    def __init__(self, start=1000.0):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


def make_state(callsign, lat=2.9, lon=101.6, on_ground=False, velocity=250.0, last_contact=1768730400):
    """Build one OpenSky state row (17 columns, callsign padded like the live feed)"""
    return [
        "76cdb9",                 # icao24
        f"{callsign:<8}",         # callsign
        "Singapore",              # origin_country
        last_contact,             # time_position
        last_contact,             # last_contact
        lon,                      # longitude
        lat,                      # latitude
        10668.0,                  # baro_altitude
        on_ground,                # on_ground
        velocity,                 # velocity
        45.0,                     # true_track
        0.0,                      # vertical_rate
        None,                     # sensors
        10900.0,                  # geo_altitude
        "2211",                   # squawk
        False,                    # spi
        0,                        # position_source
    ]


def states_response(*rows):
    return FakeResponse(200, {"time": 1768730400, "states": list(rows)})


@pytest.fixture
def settings():
    return Settings(
        _env_file=None,
        environment="development",
        amadeus_client_id=None,
        amadeus_client_secret=None,
        aviationstack_api_key=None,
        event_airport="KUL",
        mismatch_threshold_minutes=30,
        schedule_call_delay=1.0,
        realtime_call_delay=0.1,
    )


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def event_now():
    """Three days before the SQ238 test flight on 2026-01-18"""
    return datetime(2026, 1, 15, 9, 0, tzinfo=timezone.utc)

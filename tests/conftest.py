import gzip
import threading

import pytest
import requests

from bysykkel.models.trip import TRIP_COLUMNS


class FakeResponse:
    def __init__(self, status_code: int, content: bytes = b""):
        self.status_code = status_code
        self.content = content


class FakeSession:
    """
    Serves canned bodies per URL. A route value may be bytes (200), an int
    status code, or an exception instance to raise. ``get_routes`` overrides
    what GET returns after HEAD succeeded.
    """

    def __init__(self, routes=None, get_routes=None):
        self.routes = routes or {}
        self.get_routes = get_routes or {}
        self.calls = []
        self._lock = threading.Lock()

    def head(self, url, **kwargs):
        return self._respond("HEAD", url, self.routes.get(url, 404))

    def get(self, url, **kwargs):
        value = self.get_routes.get(url, self.routes.get(url, 404))
        return self._respond("GET", url, value)

    def close(self):
        pass

    def _respond(self, method, url, value):
        with self._lock:
            self.calls.append((method, url))
        if isinstance(value, Exception):
            raise value
        if isinstance(value, int):
            return FakeResponse(value)
        return FakeResponse(200, value)


def _trip_line(started, ended, duration=600, start_id=1, end_id=2):
    duration = "" if duration is None else duration
    return (
        f"{started},{ended},{duration},"
        f"{start_id},Stasjon {start_id},ved parken,59.91,10.75,"
        f"{end_id},Stasjon {end_id},ved kaia,59.92,10.76"
    )


@pytest.fixture
def fake_session():
    return FakeSession


@pytest.fixture
def trip_csv():
    def _build(*rows, header=",".join(TRIP_COLUMNS)) -> bytes:
        lines = [header] + [_trip_line(*r) for r in rows]
        return ("\n".join(lines) + "\n").encode()
    return _build


@pytest.fixture
def weather_gz():
    def _build(*lines, compress=True) -> bytes:
        body = ("\n".join(lines) + "\n").encode()
        return gzip.compress(body) if compress else body
    return _build


@pytest.fixture
def connection_reset():
    return requests.ConnectionError("connection reset by peer")

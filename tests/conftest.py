"""
Shared fixtures: a Qt core application, a hand-driven clock and a fetcher
that never touches the network.
"""
import pytest
from PyQt5 import QtCore

from flight_telemetry.engine import SyncEngine

LOG_URL = "http://test/log.jsonl"
WEATHER_URL = "http://test/sounding.txt"
LIVE_URL = "http://test/readings"


@pytest.fixture(scope="session", autouse=True)
def qapp():
    app = QtCore.QCoreApplication.instance() or QtCore.QCoreApplication([])
    yield app


class FakeClock:
    """Monotonic clock the tests set by hand (seconds)."""

    def __init__(self, now: float = 0.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


class FakeFetcher(QtCore.QObject):
    """Same signals as HttpFetchWorker; requests complete when the test says so."""

    fetched = QtCore.pyqtSignal(int, str)
    failed = QtCore.pyqtSignal(int, str)

    def __init__(self):
        super().__init__()
        self.requests = []       # (request_id, url)
        self.cancelled = []
        self._next_id = 1

    def submit(self, url: str) -> int:
        request_id = self._next_id
        self._next_id += 1
        self.requests.append((request_id, url))
        return request_id

    def cancel(self, request_id: int) -> None:
        self.cancelled.append(request_id)

    def requests_for(self, url: str):
        return [rid for rid, u in self.requests if u == url]

    def last_request_for(self, url: str) -> int:
        return self.requests_for(url)[-1]

    def complete(self, request_id: int, body: str) -> None:
        self.fetched.emit(request_id, body)

    def fail(self, request_id: int, message: str) -> None:
        self.failed.emit(request_id, message)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def fetcher():
    return FakeFetcher()


@pytest.fixture
def engine(clock, fetcher):
    e = SyncEngine(fetcher, log_url=LOG_URL, weather_url=WEATHER_URL, live_url=LIVE_URL, clock=clock)
    e.start()
    yield e
    e.shutdown()


def make_log(runtimes, altitude=100):
    """Flight log text with one record per runtime."""
    lines = []
    for i, runtime in enumerate(runtimes):
        lines.append(
            '{"Runtime": "%s", "Baro_Alt_m": "%s", "VAR_Kal_m_s": "0.5", "meanACC_Kal_m_s2": "0.01", '
            '"HDG_deg": "45", "GS_kt": "3.2", "Envelope_Temp_Deg": "20.5", "varioVar_m_s": "0.1", '
            '"Date": "2025-05-04", "Time": "10:00:%02d"}' % (runtime, altitude, i % 60)
        )
    return "\n".join(lines) + "\n"

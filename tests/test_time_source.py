import pytest

from conftest import FakeClock, FakeFetcher, LIVE_URL
from flight_telemetry.model import LogRecord
from flight_telemetry.time_source import LiveTimeSource, ReplayClock, ReplayTimeSource


class TestReplayClock:
    def test_accelerated(self):
        clock = ReplayClock(t0=50.0, now=0.0, factor=10.0)
        assert clock.virtual_time(2.0) == pytest.approx(70.0)

    def test_pause_freezes_virtual_time(self):
        clock = ReplayClock(t0=0.0, now=0.0, factor=10.0)
        clock.pause(1.0)
        assert clock.virtual_time(5.0) == pytest.approx(10.0)
        clock.resume(5.0)
        assert clock.virtual_time(5.0) == pytest.approx(10.0)
        assert clock.virtual_time(6.0) == pytest.approx(20.0)

    def test_pause_and_resume_are_idempotent(self):
        clock = ReplayClock(t0=0.0, now=0.0, factor=1.0)
        clock.pause(1.0)
        clock.pause(3.0)
        clock.resume(4.0)
        clock.resume(9.0)
        assert clock.virtual_time(5.0) == pytest.approx(2.0)


def _records(n):
    return [LogRecord(runtime=float(i), baro_altitude=100.0) for i in range(n)]


class TestReplayTimeSource:
    def test_drains_in_order_up_to_virtual_time(self):
        clock = FakeClock()
        source = ReplayTimeSource(clock)
        drained = []
        source.record_drained.connect(drained.append)
        source.load(_records(25))
        source.start()

        clock.now = 1.3
        source.tick()
        assert [r.runtime for r in drained] == [float(i) for i in range(14)]
        assert source.cursor == 14
        source.stop()

    def test_finished_when_exhausted(self):
        clock = FakeClock()
        source = ReplayTimeSource(clock)
        finished = []
        source.finished.connect(lambda: finished.append(True))
        source.load(_records(3))
        source.start()

        clock.now = 5.0
        source.tick()
        assert finished == [True]
        assert not source.is_active

    def test_start_without_records_is_idle(self):
        source = ReplayTimeSource(FakeClock())
        source.start()
        assert not source.is_active
        assert source.replay_clock is None

    def test_paused_tick_drains_nothing(self):
        clock = FakeClock()
        source = ReplayTimeSource(clock)
        source.load(_records(25))
        source.start()
        clock.now = 0.5
        source.tick()
        source.pause()
        clock.now = 10.0
        source.tick()
        assert source.cursor == 6
        source.stop()


class TestLiveTimeSource:
    def test_single_flight(self):
        fetcher = FakeFetcher()
        source = LiveTimeSource(fetcher, LIVE_URL, FakeClock())
        source.tick()
        source.tick()
        assert len(fetcher.requests_for(LIVE_URL)) == 1
        assert source.poll_in_flight

        fetcher.fail(fetcher.last_request_for(LIVE_URL), "timeout")
        assert not source.poll_in_flight
        source.tick()
        assert len(fetcher.requests_for(LIVE_URL)) == 2

    def test_stop_cancels_in_flight_poll(self):
        fetcher = FakeFetcher()
        source = LiveTimeSource(fetcher, LIVE_URL, FakeClock())
        readings = []
        source.reading_received.connect(readings.append)
        source.start()
        source.tick()
        request_id = fetcher.last_request_for(LIVE_URL)
        source.stop()

        assert fetcher.cancelled == [request_id]
        fetcher.complete(request_id, '{"calt": "100"}')
        assert readings == []

    def test_elapsed_since_start(self):
        clock = FakeClock(now=10.0)
        source = LiveTimeSource(FakeFetcher(), LIVE_URL, clock)
        source.start()
        clock.now = 12.5
        assert source.elapsed() == pytest.approx(2.5)
        source.stop()

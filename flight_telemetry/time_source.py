"""
Time sources that drive the flight display.

Exactly one source runs at a time:

- LiveTimeSource polls the live telemetry endpoint every LIVE_POLL_INTERVAL_MS
  and reports decoded readings.
- ReplayTimeSource plays the loaded flight log on an accelerated, pausable
  virtual clock, ticking every REPLAY_TICK_INTERVAL_MS.

Both run on the Qt event loop (QTimer). Results are delivered through
signals so the engine does its fan-out on the same thread.
"""

from __future__ import annotations

import logging
import time
from typing import Callable, Optional, Sequence, Tuple

from PyQt5 import QtCore

from .config import LIVE_POLL_INTERVAL_MS, REPLAY_TICK_INTERVAL_MS, REPLAY_TIME_FACTOR
from .model import LogRecord
from .parsing import LiveReadingError, parse_live_reading

logger = logging.getLogger(__name__)

Clock = Callable[[], float]


class ReplayClock:
    """
    Virtual clock for replay.

    virtual_time = t0 + running_elapsed * factor, where running_elapsed only
    accumulates while the clock is not paused.
    """

    def __init__(self, t0: float, now: float, factor: float = REPLAY_TIME_FACTOR):
        self.t0 = t0
        self.factor = factor
        self._accumulated = 0.0
        self._run_started = now
        self.paused = False

    def pause(self, now: float) -> None:
        if self.paused:
            return
        self._accumulated += now - self._run_started
        self.paused = True

    def resume(self, now: float) -> None:
        if not self.paused:
            return
        self._run_started = now
        self.paused = False

    def running_elapsed(self, now: float) -> float:
        if self.paused:
            return self._accumulated
        return self._accumulated + (now - self._run_started)

    def virtual_time(self, now: float) -> float:
        return self.t0 + self.running_elapsed(now) * self.factor


class TimeSource(QtCore.QObject):
    """QTimer-backed driver. ``tick()`` never re-enters itself."""

    def __init__(self, interval_ms: int, clock: Clock = time.monotonic, parent=None):
        super().__init__(parent)
        self.clock = clock
        self._in_tick = False
        self._timer = QtCore.QTimer(self)
        self._timer.setInterval(interval_ms)
        self._timer.timeout.connect(self.tick)

    @property
    def is_active(self) -> bool:
        return self._timer.isActive()

    def start(self) -> None:
        self._timer.start()

    def stop(self) -> None:
        self._timer.stop()

    def tick(self) -> None:
        if self._in_tick:
            return
        self._in_tick = True
        try:
            self._step()
        finally:
            self._in_tick = False

    def _step(self) -> None:
        raise NotImplementedError


class LiveTimeSource(TimeSource):
    """
    Polls the live endpoint through the shared fetcher.

    At most one poll is in flight: a tick that finds the previous request
    still outstanding does nothing.

    Signals:
        reading_received(Reading) - decoded payload (not yet gated)
        poll_failed(str) - network, HTTP or decode failure
    """

    reading_received = QtCore.pyqtSignal(object)
    poll_failed = QtCore.pyqtSignal(str)

    def __init__(self, fetcher, url: str, clock: Clock = time.monotonic,
                 interval_ms: int = LIVE_POLL_INTERVAL_MS, parent=None):
        super().__init__(interval_ms, clock, parent)
        self.fetcher = fetcher
        self.url = url
        self.started_at = clock()
        self._pending: Optional[int] = None

        fetcher.fetched.connect(self._on_fetched)
        fetcher.failed.connect(self._on_failed)

    @property
    def poll_in_flight(self) -> bool:
        return self._pending is not None

    def start(self) -> None:
        self.started_at = self.clock()
        super().start()

    def stop(self) -> None:
        super().stop()
        if self._pending is not None:
            self.fetcher.cancel(self._pending)
            self._pending = None

    def elapsed(self) -> float:
        """Seconds since live mode was entered."""
        return self.clock() - self.started_at

    def _step(self) -> None:
        if self._pending is not None:
            logger.debug("Previous live poll still in flight, skipping tick")
            return
        self._pending = self.fetcher.submit(self.url)

    def _on_fetched(self, request_id: int, text: str) -> None:
        if request_id != self._pending:
            return
        self._pending = None
        try:
            reading = parse_live_reading(text)
        except LiveReadingError as e:
            logger.warning(f"Failed to decode live reading: {e}")
            self.poll_failed.emit(str(e))
            return
        self.reading_received.emit(reading)

    def _on_failed(self, request_id: int, message: str) -> None:
        if request_id != self._pending:
            return
        self._pending = None
        logger.warning(f"Failed to fetch readings: {message}")
        self.poll_failed.emit(message)


class ReplayTimeSource(TimeSource):
    """
    Plays a runtime-sorted flight log against a ReplayClock.

    Every tick drains, in order, each record whose runtime is at or before
    the current virtual time. When the log is exhausted the timer stops and
    ``finished`` is emitted.

    Signals:
        record_drained(LogRecord) - next record in playback order
        finished() - all records have been played
    """

    record_drained = QtCore.pyqtSignal(object)
    finished = QtCore.pyqtSignal()

    def __init__(self, clock: Clock = time.monotonic,
                 interval_ms: int = REPLAY_TICK_INTERVAL_MS,
                 factor: float = REPLAY_TIME_FACTOR, parent=None):
        super().__init__(interval_ms, clock, parent)
        self.factor = factor
        self.records: Tuple[LogRecord, ...] = ()
        self.cursor = 0
        self.replay_clock: Optional[ReplayClock] = None

    @property
    def paused(self) -> bool:
        return self.replay_clock is not None and self.replay_clock.paused

    @property
    def total(self) -> int:
        return len(self.records)

    def load(self, records: Sequence[LogRecord]) -> None:
        """Rewind to the first record of ``records`` (not started)."""
        self.stop()
        self.records = tuple(records)
        self.cursor = 0
        self.replay_clock = None

    def start(self) -> None:
        if not self.records:
            logger.info("Replay requested but no log records are loaded")
            return
        self.cursor = 0
        self.replay_clock = ReplayClock(self.records[0].runtime, self.clock(), self.factor)
        logger.info(f"Replay started: {len(self.records)} records at {self.factor:g}x")
        super().start()

    def pause(self) -> None:
        if self.replay_clock is None or self.replay_clock.paused:
            return
        self.replay_clock.pause(self.clock())
        super().stop()

    def resume(self) -> None:
        if self.replay_clock is None or not self.replay_clock.paused:
            return
        self.replay_clock.resume(self.clock())
        super().start()

    def _step(self) -> None:
        if self.replay_clock is None or self.replay_clock.paused:
            return
        simulated_time = self.replay_clock.virtual_time(self.clock())
        while self.cursor < len(self.records) and self.records[self.cursor].runtime <= simulated_time:
            record = self.records[self.cursor]
            self.cursor += 1
            self.record_drained.emit(record)

        if self.cursor >= len(self.records):
            logger.info("Replay completed")
            super().stop()
            self.replay_clock = None
            self.finished.emit()

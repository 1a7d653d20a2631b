"""
Synchronisation engine for the flight display.

Owns the loaded LogStore, the six windowed series, the latest reading, the
mode (live / replay, with replay pausable) and the current error string.
Exactly one time source drives it at a time; every accepted reading is fanned
out to all six series before control returns to the event loop.

The UI reads the engine only through ``snapshot()`` and the change signals.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple

from PyQt5 import QtCore

from . import config
from .log_store import LogStore
from .model import LogRecord, Mode, Quantity, Reading, Sample, WeatherSample
from .parsing import is_valid_reading, reading_rejection
from .time_source import Clock, LiveTimeSource, ReplayTimeSource
from .windowed_series import WindowedSeries

logger = logging.getLogger(__name__)

LOG_SOURCE = "log"
WEATHER_SOURCE = "weather"


@dataclass(frozen=True)
class EngineSnapshot:
    """Read-only view of the engine state for one redraw."""

    mode: Mode = Mode.LIVE
    paused: bool = False
    error: Optional[str] = None
    latest: Reading = Reading()
    series: Dict[Quantity, Tuple[Sample, ...]] = field(default_factory=dict)
    weather: Tuple[WeatherSample, ...] = ()
    weather_visible: bool = False
    replay_position: int = 0
    replay_total: int = 0

    @property
    def is_replay(self) -> bool:
        return self.mode is Mode.REPLAY

    @property
    def pausable(self) -> bool:
        """Pause/continue only applies while a loaded log is being replayed."""
        return self.is_replay and self.replay_total > 0

    @property
    def overlay(self) -> Tuple[WeatherSample, ...]:
        """Weather samples to draw, empty when the overlay is hidden."""
        return self.weather if self.weather_visible else ()


class SyncEngine(QtCore.QObject):
    """
    Live/replay state machine.

    Signals:
        data_changed() - series or latest reading changed
        state_changed() - mode or pause state changed
        error_changed(str) - new error text ("" when cleared)
    """

    data_changed = QtCore.pyqtSignal()
    state_changed = QtCore.pyqtSignal()
    error_changed = QtCore.pyqtSignal(str)

    def __init__(
        self,
        fetcher,
        log_url: Optional[str] = None,
        weather_url: Optional[str] = None,
        live_url: Optional[str] = None,
        clock: Clock = time.monotonic,
        parent=None,
    ):
        super().__init__(parent)
        self.fetcher = fetcher
        self.log_url = log_url or config.get_log_url()
        self.weather_url = weather_url or config.get_weather_url()

        self.store = LogStore.empty()
        self.series: Dict[Quantity, WindowedSeries] = {q: WindowedSeries(q) for q in Quantity}
        self.latest = Reading()
        self.mode = Mode.LIVE
        self.error: Optional[str] = None
        self.weather_visible = False
        self.running = False
        self._rejecting = False

        # request id -> LOG_SOURCE / WEATHER_SOURCE
        self._source_requests: Dict[int, str] = {}

        self.live_source = LiveTimeSource(fetcher, live_url or config.get_live_url(), clock, parent=self)
        self.live_source.reading_received.connect(self._on_live_reading)
        self.live_source.poll_failed.connect(self._on_live_failed)

        self.replay_source = ReplayTimeSource(clock, parent=self)
        self.replay_source.record_drained.connect(self._on_record_drained)
        self.replay_source.finished.connect(self._on_replay_finished)

        fetcher.fetched.connect(self._on_source_fetched)
        fetcher.failed.connect(self._on_source_failed)

    # ==========================================================================
    # Lifecycle
    # ==========================================================================

    def start(self) -> None:
        """Fetch the sources and start the driver for the current mode."""
        if self.running:
            return
        self.running = True
        logger.info(f"Engine starting in {self.mode.value} mode")
        self.reload()
        self._start_driver()

    def shutdown(self) -> None:
        """Stop all timers and cancel every outstanding request."""
        self.running = False
        self._stop_drivers()
        for request_id in list(self._source_requests):
            self.fetcher.cancel(request_id)
        self._source_requests.clear()
        logger.info("Engine stopped")

    def reload(self) -> None:
        """Re-fetch the flight log, and the sounding when the overlay is shown."""
        self._cancel_source(LOG_SOURCE)
        self._source_requests[self.fetcher.submit(self.log_url)] = LOG_SOURCE
        if self.weather_visible:
            self._request_weather()

    # ==========================================================================
    # Mode transitions
    # ==========================================================================

    @property
    def paused(self) -> bool:
        return self.mode is Mode.REPLAY and self.replay_source.paused

    def toggle_mode(self) -> None:
        """Switch live <-> replay. Clears the series, the latest reading and the error."""
        self._stop_drivers()
        self.mode = Mode.REPLAY if self.mode is Mode.LIVE else Mode.LIVE
        logger.info(f"Switched to {self.mode.value} mode")

        self._reset_series()
        self._set_error(None)

        if self.mode is Mode.REPLAY:
            self.replay_source.load(self.store.records)
        self._start_driver()
        self.state_changed.emit()
        self.data_changed.emit()

    def pause(self) -> None:
        """Freeze the replay clock. No-op unless a replay is running."""
        if self.mode is not Mode.REPLAY or self.replay_source.replay_clock is None or self.paused:
            return
        self.replay_source.pause()
        logger.info(f"Replay paused at record {self.replay_source.cursor}/{self.replay_source.total}")
        self.state_changed.emit()

    def resume(self) -> None:
        """Continue a paused replay from where its virtual clock stopped."""
        if not self.paused:
            return
        self.replay_source.resume()
        logger.info("Replay resumed")
        self.state_changed.emit()

    def toggle_pause(self) -> None:
        if self.paused:
            self.resume()
        else:
            self.pause()

    # ==========================================================================
    # Weather overlay
    # ==========================================================================

    def set_weather_visible(self, visible: bool) -> None:
        if visible == self.weather_visible:
            return
        self.weather_visible = visible
        if visible:
            self._request_weather()
        else:
            self._cancel_source(WEATHER_SOURCE)
            self.store = self.store.without_weather()
        self.state_changed.emit()
        self.data_changed.emit()

    def toggle_weather(self) -> None:
        self.set_weather_visible(not self.weather_visible)

    # ==========================================================================
    # Driving (also called directly by tests)
    # ==========================================================================

    def live_tick(self) -> None:
        self.live_source.tick()

    def replay_tick(self) -> None:
        self.replay_source.tick()

    def snapshot(self) -> EngineSnapshot:
        return EngineSnapshot(
            mode=self.mode,
            paused=self.paused,
            error=self.error,
            latest=self.latest,
            series={q: s.snapshot() for q, s in self.series.items()},
            weather=self.store.weather,
            weather_visible=self.weather_visible,
            replay_position=self.replay_source.cursor,
            replay_total=self.replay_source.total,
        )

    # ==========================================================================
    # Internals
    # ==========================================================================

    def _start_driver(self) -> None:
        if not self.running:
            return
        if self.mode is Mode.LIVE:
            self.live_source.start()
        else:
            self.replay_source.start()

    def _stop_drivers(self) -> None:
        self.live_source.stop()
        self.replay_source.stop()

    def _set_error(self, message: Optional[str]) -> None:
        if message == self.error:
            return
        self.error = message
        self.error_changed.emit(message or "")

    def _request_weather(self) -> None:
        self._cancel_source(WEATHER_SOURCE)
        self._source_requests[self.fetcher.submit(self.weather_url)] = WEATHER_SOURCE

    def _cancel_source(self, kind: str) -> None:
        for request_id, source in list(self._source_requests.items()):
            if source == kind:
                self.fetcher.cancel(request_id)
                del self._source_requests[request_id]

    def _reset_series(self) -> None:
        for series in self.series.values():
            series.reset()
        self.latest = Reading()

    def _admit(self, reading: Reading, t: float) -> None:
        """Fan one gated reading out to every series and the latest-reading snapshot."""
        for quantity, series in self.series.items():
            altitude = reading.altitude if quantity.with_altitude else None
            series.append(Sample(time=t, value=reading.value_of(quantity), altitude=altitude))
        self.latest = reading
        self.data_changed.emit()

    def _on_live_reading(self, reading: Reading) -> None:
        if self.mode is not Mode.LIVE:
            return
        reason = reading_rejection(reading)
        if reason is not None:
            # Warn once per run of rejected readings
            level = logging.DEBUG if self._rejecting else logging.WARNING
            logger.log(level, f"Discarding live reading: {reason}")
            self._rejecting = True
            return
        self._rejecting = False
        self._admit(reading, self.live_source.elapsed())
        self._set_error(None)

    def _on_live_failed(self, message: str) -> None:
        if self.mode is not Mode.LIVE:
            return
        self._set_error(f"Failed to fetch live data: {message}")

    def _on_record_drained(self, record: LogRecord) -> None:
        reading = record.to_reading()
        if is_valid_reading(reading):
            self._admit(reading, record.runtime)

    def _on_replay_finished(self) -> None:
        # Terminal transition: the series keep the replayed data
        self.mode = Mode.LIVE
        logger.info("Replay finished, back to live mode")
        self._start_driver()
        self.state_changed.emit()

    def _on_source_fetched(self, request_id: int, text: str) -> None:
        kind = self._source_requests.pop(request_id, None)
        if kind == LOG_SOURCE:
            self.store = self.store.with_log_text(text)
            self._set_error(None)
            self._restart_replay()
        elif kind == WEATHER_SOURCE:
            self.store = self.store.with_sounding_text(text)
            self._set_error(None)
        else:
            return
        self.data_changed.emit()

    def _on_source_failed(self, request_id: int, message: str) -> None:
        kind = self._source_requests.pop(request_id, None)
        if kind == LOG_SOURCE:
            logger.error(f"Error fetching log data: {message}")
            self.store = self.store.without_log()
            self._set_error("Failed to fetch log data.")
            self._restart_replay()
        elif kind == WEATHER_SOURCE:
            logger.error(f"Error fetching weather data: {message}")
            self.store = self.store.without_weather()
            self._set_error("Failed to fetch weather data.")
        else:
            return
        self.data_changed.emit()

    def _restart_replay(self) -> None:
        """
        A new log replaces the one being replayed.

        In replay mode the series are cleared and playback starts again from
        the first record; a paused replay stays paused at that record.
        """
        was_paused = self.paused
        self.replay_source.load(self.store.records)
        if self.mode is not Mode.REPLAY:
            return
        self._reset_series()
        self._start_driver()
        if was_paused:
            self.replay_source.pause()
        self.state_changed.emit()

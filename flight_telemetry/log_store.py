"""
Loaded flight log and weather sounding.

A LogStore is never edited in place: every successful fetch builds a new one
and the engine swaps it in.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Tuple

from .model import LogRecord, WeatherSample
from .parsing import parse_log_text, parse_sounding_text

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LogStore:
    records: Tuple[LogRecord, ...] = ()     # ascending by runtime
    weather: Tuple[WeatherSample, ...] = ()

    @classmethod
    def empty(cls) -> "LogStore":
        return cls()

    @staticmethod
    def sort_records(records) -> Tuple[LogRecord, ...]:
        # sorted() is stable: equal runtimes keep their file order
        return tuple(sorted(records, key=lambda r: r.runtime))

    def with_log_text(self, text: str) -> "LogStore":
        """Return a store whose records come from ``text``; weather is kept."""
        records = self.sort_records(parse_log_text(text))
        if records:
            logger.info(f"Log spans runtime {records[0].runtime:.1f}s .. {records[-1].runtime:.1f}s")
        return replace(self, records=records)

    def with_sounding_text(self, text: str) -> "LogStore":
        """Return a store whose weather comes from ``text``; records are kept."""
        return replace(self, weather=tuple(parse_sounding_text(text)))

    def without_log(self) -> "LogStore":
        return replace(self, records=())

    def without_weather(self) -> "LogStore":
        return replace(self, weather=())

    @property
    def start_runtime(self) -> float:
        return self.records[0].runtime if self.records else 0.0

    def __len__(self) -> int:
        return len(self.records)

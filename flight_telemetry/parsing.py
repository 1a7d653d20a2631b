"""
Record parsers for the three flight data sources.

- Historical log: one JSON object per line.
- Weather sounding: whitespace-separated columns, first line holds headers.
- Live telemetry: one JSON object per poll.

Numeric fields are read the way the logger firmware writes them: the longest
leading decimal literal counts ("12.5m" -> 12.5), anything else is not a
number.
"""

from __future__ import annotations

import json
import logging
import math
import re
from typing import Any, Dict, List, Optional

from .config import ALT_MAX, ALT_MIN
from .model import LogRecord, Reading, SoundingValue, WeatherSample

logger = logging.getLogger(__name__)

_FLOAT_PREFIX = re.compile(r"[+-]?(?:Infinity|(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")

# Sounding header -> WeatherSample attribute
SOUNDING_HEADERS: Dict[str, str] = {
    "h(mAMSL)": "altitude",
    "T(°C)": "temperature",
    "Spd(kt)": "speed",
    "RH(%)": "humidity",
    "Dir(°)": "direction",
    "p(hPa)": "pressure",
    "Dew(°C)": "dew_point",
}

_WEATHER_ATTRS = set(SOUNDING_HEADERS.values())


class LiveReadingError(ValueError):
    """Live telemetry payload could not be decoded."""


def parse_float(value: Any) -> float:
    """Parse a leading decimal literal; NaN if there is none."""
    if isinstance(value, bool) or value is None:
        return math.nan
    if isinstance(value, (int, float)):
        return float(value)
    match = _FLOAT_PREFIX.match(str(value).strip())
    if match is None:
        return math.nan
    return float(match.group(0))


def parse_float_or_zero(value: Any) -> float:
    """Like parse_float, but non-numeric input reads as 0."""
    number = parse_float(value)
    return 0.0 if math.isnan(number) else number


def in_altitude_band(altitude: Any) -> bool:
    """The altitude gate: ALT_MIN <= altitude <= ALT_MAX."""
    if not isinstance(altitude, (int, float)) or isinstance(altitude, bool):
        return False
    return ALT_MIN <= altitude <= ALT_MAX


# =============================================================================
# Historical log
# =============================================================================

def parse_log_line(line: str) -> Optional[LogRecord]:
    """
    Parse one log line into a LogRecord.

    Returns None when the line is not a JSON object or when Runtime or
    Baro_Alt_m is not numeric. Every other numeric field falls back to 0.
    """
    try:
        point = json.loads(line)
    except json.JSONDecodeError:
        logger.debug(f"Dropping undecodable log line: {line[:80]!r}")
        return None
    if not isinstance(point, dict):
        return None

    runtime = parse_float(point.get("Runtime"))
    baro_altitude = parse_float(point.get("Baro_Alt_m"))
    if math.isnan(runtime) or math.isnan(baro_altitude):
        logger.debug(f"Dropping log record without runtime/altitude: {line[:80]!r}")
        return None

    return LogRecord(
        runtime=runtime,
        baro_altitude=baro_altitude,
        vertical_speed=parse_float_or_zero(point.get("VAR_Kal_m_s")),
        mean_acceleration=parse_float_or_zero(point.get("meanACC_Kal_m_s2")),
        heading=parse_float_or_zero(point.get("HDG_deg")),
        ground_speed=parse_float_or_zero(point.get("GS_kt")),
        envelope_temp=parse_float_or_zero(point.get("Envelope_Temp_Deg")),
        humidity_proxy=parse_float_or_zero(point.get("varioVar_m_s")),
        date=str(point.get("Date") or ""),
        time=str(point.get("Time") or ""),
    )


def parse_log_text(text: str) -> List[LogRecord]:
    """Parse a whole log file. Output keeps file order (unsorted)."""
    lines = [line for line in text.split("\n") if line.strip()]
    records = []
    for line in lines:
        record = parse_log_line(line)
        if record is not None:
            records.append(record)
    logger.info(f"Parsed {len(records)} of {len(lines)} log records")
    return records


# =============================================================================
# Weather sounding
# =============================================================================

def normalize_direction(degrees: float) -> float:
    """Turn a wind-origin bearing into the heading a balloon drifts to, in [0, 360)."""
    heading = (degrees + 180.0) % 360.0
    # -1e-20 % 360 rounds to 360.0
    return 0.0 if heading >= 360.0 else heading


def parse_sounding_row(headers: List[str], line: str) -> Optional[WeatherSample]:
    """
    Map one sounding row onto its headers.

    A row whose column count differs from the header count is rejected.
    A column that does not parse as a number keeps its raw text.
    """
    values = line.split()
    if len(values) != len(headers):
        logger.warning(f"Mismatch in number of columns for line: {line!r}")
        return None

    fields: Dict[str, SoundingValue] = {}
    extra: Dict[str, SoundingValue] = {}
    for header, raw in zip(headers, values):
        key = SOUNDING_HEADERS.get(header, header)
        number = parse_float(raw)
        if key == "direction" and not math.isnan(number):
            number = normalize_direction(number)
        value: SoundingValue = raw if math.isnan(number) else number
        if key in _WEATHER_ATTRS:
            fields[key] = value
        else:
            extra[key] = value

    altitude = fields.pop("altitude", None)
    if not in_altitude_band(altitude):
        return None
    return WeatherSample(altitude=altitude, extra=extra, **fields)


def parse_sounding_text(text: str) -> List[WeatherSample]:
    """Parse a sounding file, keeping only levels inside the altitude band."""
    lines = [line for line in text.split("\n") if line.strip()]
    if not lines:
        return []
    headers = lines[0].split()
    samples = []
    for line in lines[1:]:
        sample = parse_sounding_row(headers, line)
        if sample is not None:
            samples.append(sample)
    logger.info(f"Parsed {len(samples)} of {len(lines) - 1} sounding rows")
    return samples


# =============================================================================
# Live telemetry
# =============================================================================

def _pad2(value: Any) -> str:
    return str("" if value is None else value).rjust(2, "0")


def gps_datetime(data: Dict[str, Any]) -> str:
    """Assemble 'YYYY-MM-DD HH:MM:SS' from the two-digit GPS subfields."""
    return (
        f"20{_pad2(data.get('gpsYear'))}-{_pad2(data.get('gpsMon'))}-{_pad2(data.get('gpsDay'))} "
        f"{_pad2(data.get('gpsStd'))}:{_pad2(data.get('gpsMin'))}:{_pad2(data.get('gpsSek'))}"
    )


def parse_live_reading(text: str) -> Reading:
    """
    Decode one live telemetry payload.

    Raises LiveReadingError for malformed JSON. Numeric fields that do not
    parse read as 0; whether the reading is usable is decided by the
    altitude gate, not here.
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise LiveReadingError(f"malformed JSON: {e}") from e
    if not isinstance(data, dict):
        raise LiveReadingError(f"expected a JSON object, got {type(data).__name__}")

    return Reading(
        altitude=parse_float_or_zero(data.get("calt")),
        vertical_speed=parse_float_or_zero(data.get("cvario")),
        acceleration=parse_float_or_zero(data.get("cacc")),
        direction=parse_float_or_zero(data.get("gpsAngle")),
        speed=parse_float_or_zero(data.get("gpsSpeed")),
        temperature=parse_float_or_zero(data.get("tbt")),
        humidity=parse_float_or_zero(data.get("lbc")),
        timestamp=gps_datetime(data),
    )


_READING_FIELDS = (
    "altitude", "vertical_speed", "acceleration", "direction", "speed", "temperature", "humidity",
)


def reading_rejection(reading: Reading) -> Optional[str]:
    """Why the reading fails the gate, or None when it is admitted."""
    missing = [name for name in _READING_FIELDS if math.isnan(getattr(reading, name))]
    if missing:
        return f"non-numeric {', '.join(missing)}"
    if not in_altitude_band(reading.altitude):
        return f"altitude {reading.altitude:g} m outside [{ALT_MIN:g}, {ALT_MAX:g}]"
    return None


def is_valid_reading(reading: Reading) -> bool:
    """A reading is admitted when every quantity is a number and the altitude is in band."""
    return reading_rejection(reading) is None

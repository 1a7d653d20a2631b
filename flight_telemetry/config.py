"""
Configuration for the flight display.

Display and timing constants are fixed. Source URLs are deployment settings
and may be overridden through environment variables (or a .env file loaded
by main.py):

  FLIGHT_LOG_URL      newline-delimited JSON flight log
  WEATHER_URL         whitespace-column upper-air sounding
  LIVE_READINGS_URL   live telemetry endpoint on the balloon
  LOG_LEVEL           root logging level (default INFO)
"""

from __future__ import annotations

import os

# =============================================================================
# Altitude gate
# =============================================================================

ALT_MIN = 0.0
ALT_MAX = 1500.0

# =============================================================================
# Timing
# =============================================================================

LIVE_POLL_INTERVAL_MS = 1000
REPLAY_TICK_INTERVAL_MS = 100
REPLAY_TIME_FACTOR = 10.0     # replay runs this many times faster than wall clock
FETCH_TIMEOUT_S = 10.0

# =============================================================================
# Series capacities and plotting
# =============================================================================

MAX_POINTS_ACC = 60
MAX_POINTS_ALT = 10000
OMIT_POINTS = 10              # plot only every Nth primary point on altitude plots
MAX_ACC = 0.05                # default +/- acceleration range [m/s2]

# =============================================================================
# Sources
# =============================================================================

DEFAULT_LOG_URL = "https://raw.githubusercontent.com/hlballon/hltemp/refs/heads/main/temp.jsonl"
DEFAULT_WEATHER_URL = "https://raw.githubusercontent.com/hlballon/hltemp/refs/heads/main/temp_w.txt"
DEFAULT_LIVE_URL = "http://192.168.4.1/readings"


def _get_str(name: str, default: str) -> str:
    v = os.getenv(name)
    if v is None or v.strip() == "":
        return default
    return v.strip()


def get_log_url() -> str:
    """Return the URL of the historical flight log."""
    return _get_str("FLIGHT_LOG_URL", DEFAULT_LOG_URL)


def get_weather_url() -> str:
    """Return the URL of the weather sounding."""
    return _get_str("WEATHER_URL", DEFAULT_WEATHER_URL)


def get_live_url() -> str:
    """Return the URL of the live telemetry endpoint."""
    return _get_str("LIVE_READINGS_URL", DEFAULT_LIVE_URL)


def get_log_level() -> str:
    return _get_str("LOG_LEVEL", "INFO").upper()

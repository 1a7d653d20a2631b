# flight_telemetry/model.py
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional, Union

from .config import MAX_POINTS_ACC, MAX_POINTS_ALT

# Sounding fields keep the raw column text when it does not parse as a number
SoundingValue = Union[float, str]


class Mode(Enum):
    LIVE = "live"
    REPLAY = "replay"


class Quantity(Enum):
    """Measured quantities that get their own windowed series."""

    VERTICAL_SPEED = "vertical_speed"
    ACCELERATION = "acceleration"
    DIRECTION = "direction"
    SPEED = "speed"
    TEMPERATURE = "temperature"
    HUMIDITY = "humidity"

    @property
    def capacity(self) -> int:
        return MAX_POINTS_ACC if self is Quantity.ACCELERATION else MAX_POINTS_ALT

    @property
    def with_altitude(self) -> bool:
        """Direction, speed, temperature and humidity are plotted against altitude."""
        return self in (Quantity.DIRECTION, Quantity.SPEED, Quantity.TEMPERATURE, Quantity.HUMIDITY)


@dataclass(frozen=True)
class Sample:
    time: float                       # seconds (mode elapsed time or log runtime)
    value: float
    altitude: Optional[float] = None  # only for altitude-plotted quantities


@dataclass(frozen=True)
class Reading:
    """One accepted snapshot of all measured quantities."""

    altitude: float = 0.0
    vertical_speed: float = 0.0       # m/s
    acceleration: float = 0.0         # m/s2
    direction: float = 0.0            # deg, balloon heading
    speed: float = 0.0                # kt
    temperature: float = 0.0          # degC
    humidity: float = 0.0             # %
    timestamp: str = ""               # GPS (live) or log date/time (replay)

    def value_of(self, quantity: Quantity) -> float:
        return getattr(self, quantity.value)


@dataclass(frozen=True)
class LogRecord:
    runtime: float                    # seconds since logger start
    baro_altitude: float              # m
    vertical_speed: float = 0.0       # m/s (VAR_Kal_m_s)
    mean_acceleration: float = 0.0    # m/s2 (meanACC_Kal_m_s2)
    heading: float = 0.0              # deg (HDG_deg)
    ground_speed: float = 0.0         # kt (GS_kt)
    envelope_temp: float = 0.0        # degC (Envelope_Temp_Deg)
    humidity_proxy: float = 0.0       # varioVar_m_s, shown on the humidity plot
    date: str = ""
    time: str = ""

    def to_reading(self) -> Reading:
        return Reading(
            altitude=self.baro_altitude,
            vertical_speed=self.vertical_speed,
            acceleration=self.mean_acceleration,
            direction=self.heading,
            speed=self.ground_speed,
            temperature=self.envelope_temp,
            humidity=self.humidity_proxy,
            timestamp=f"{self.date} {self.time}",
        )


@dataclass(frozen=True)
class WeatherSample:
    """
    One sounding level.

    Known columns are mapped to attributes; unmapped header columns are kept
    in ``extra`` under their literal header text.
    """

    altitude: float
    temperature: Optional[SoundingValue] = None
    speed: Optional[SoundingValue] = None
    humidity: Optional[SoundingValue] = None
    direction: Optional[SoundingValue] = None
    pressure: Optional[SoundingValue] = None
    dew_point: Optional[SoundingValue] = None
    extra: Dict[str, SoundingValue] = field(default_factory=dict)

    def get(self, name: str) -> Optional[SoundingValue]:
        if name in self.extra:
            return self.extra[name]
        return getattr(self, name, None)

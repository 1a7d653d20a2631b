"""
Projection of windowed series into screen space.

Two plot kinds are supported:

- Scatter: one Sample attribute on x against another on y, with an optional
  weather overlay (a sounding column against altitude).
- Polar: heading (angle, 0 deg up, clockwise) against altitude (radius).

Both are pure functions of the series, the overlay and the viewport size.
Pixel coordinates have their origin in the top-left corner with y growing
downwards. When there is nothing to draw a NoData placeholder is returned.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple, Union

import numpy as np

from .config import ALT_MAX, ALT_MIN, MAX_ACC, OMIT_POINTS
from .model import Sample, WeatherSample

PADDING = 20
LEFT_PADDING = 30
POLAR_MARGIN = 20

X_TICK_COUNT = 3
Y_TICK_COUNT = 5
Y_LABEL_BASELINE = 3          # y labels are drawn this far below their tick
AXIS_TITLE_ANCHOR_Y = 180.0   # where the rotated y-axis title sits
LABEL_OVERLAP_PX = 10

RING_FRACTIONS = (0.25, 0.5, 0.75, 1.0)
COMPASS_ANGLES = (0, 90, 180, 270)


# =============================================================================
# Plot descriptions
# =============================================================================

@dataclass(frozen=True)
class ScatterSpec:
    """
    What one scatter plot shows.

    ``x_field``/``y_field`` name Sample attributes ("time", "value",
    "altitude"); ``overlay_field`` names the sounding column drawn against
    altitude. Explicit ``y_min``/``y_max`` override ``y_default``.
    """

    title: str
    x_title: str
    x_field: str
    y_field: str
    overlay_field: Optional[str] = None
    y_min: Optional[float] = None
    y_max: Optional[float] = None
    y_default: Tuple[float, float] = (ALT_MIN, ALT_MAX)
    x_axis_at_zero: bool = False
    y_tick_decimals: int = 0


@dataclass(frozen=True)
class PolarSpec:
    title: str = "Direction vs Altitude"
    altitude_min: Optional[float] = None
    altitude_max: Optional[float] = None


DIRECTION_PLOT = PolarSpec(altitude_min=ALT_MIN, altitude_max=ALT_MAX)
TEMPERATURE_PLOT = ScatterSpec("Altitude (m)", "Temperature (°C)", "value", "altitude",
                               overlay_field="temperature", y_min=ALT_MIN, y_max=ALT_MAX)
ACCELERATION_PLOT = ScatterSpec("Accel (m/s²)", "Time (s)", "time", "value",
                                y_default=(-MAX_ACC, MAX_ACC), x_axis_at_zero=True, y_tick_decimals=3)
SPEED_PLOT = ScatterSpec("Altitude (m)", "Speed (kt)", "value", "altitude",
                         overlay_field="speed", y_min=ALT_MIN, y_max=ALT_MAX)
HUMIDITY_PLOT = ScatterSpec("Altitude (m)", "Humidity (%)", "value", "altitude",
                            overlay_field="humidity", y_min=ALT_MIN, y_max=ALT_MAX)

# =============================================================================
# Geometry
# =============================================================================

@dataclass(frozen=True)
class NoData:
    title: str

    @property
    def message(self) -> str:
        return f"No data available for {self.title}"


@dataclass(frozen=True)
class Tick:
    value: float
    position: float           # pixel coordinate along the axis
    label: Optional[str]      # None when the label is suppressed


@dataclass(frozen=True)
class ScatterGeometry:
    spec: ScatterSpec
    width: float
    height: float
    frame: Tuple[float, float, float, float]   # x, y, w, h of the plot area
    x_range: Tuple[float, float]
    y_range: Tuple[float, float]
    x_axis_y: float
    y_axis_x: float
    x_ticks: Tuple[Tick, ...]
    y_ticks: Tuple[Tick, ...]
    points: np.ndarray                          # (n, 2) pixel coordinates
    overlay_points: np.ndarray


@dataclass(frozen=True)
class Ring:
    radius: float
    altitude: float
    label: str


@dataclass(frozen=True)
class AngleLabel:
    x: float
    y: float
    text: str
    dy: float


@dataclass(frozen=True)
class PolarGeometry:
    spec: PolarSpec
    width: float
    height: float
    center: Tuple[float, float]
    radius: float
    altitude_range: Tuple[float, float]
    rings: Tuple[Ring, ...]
    angle_labels: Tuple[AngleLabel, ...]
    points: np.ndarray
    overlay_points: np.ndarray


Projection = Union[ScatterGeometry, PolarGeometry, NoData]


# =============================================================================
# Helpers
# =============================================================================

def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and not math.isnan(value)


def _js_round(value: float) -> int:
    """Round half up, as the display labels always have."""
    return int(math.floor(value + 0.5))


def decimate(samples: Sequence[Sample], stride: int = OMIT_POINTS) -> Sequence[Sample]:
    """Keep every ``stride``-th sample, starting with the first."""
    return samples[::stride]


def _overlay_pairs(overlay: Optional[Sequence[WeatherSample]], field: Optional[str]) -> np.ndarray:
    """(field, altitude) pairs of the overlay; levels with a non-numeric field are skipped."""
    if not overlay or field is None:
        return np.empty((0, 2))
    pairs = [(w.get(field), w.altitude) for w in overlay]
    pairs = [(v, a) for v, a in pairs if _is_number(v) and _is_number(a)]
    return np.array(pairs, dtype=float).reshape(-1, 2)


def _sample_values(samples: Sequence[Sample], field: str) -> np.ndarray:
    values = [getattr(s, field) for s in samples]
    return np.array([v if v is not None else np.nan for v in values], dtype=float)


# =============================================================================
# Scatter
# =============================================================================

def project_scatter(
    samples: Sequence[Sample],
    spec: ScatterSpec,
    width: float,
    height: float,
    overlay: Optional[Sequence[WeatherSample]] = None,
) -> Union[ScatterGeometry, NoData]:
    """
    Map ``samples`` (and the weather ``overlay``, if any) onto a scatter plot.

    The x range covers every primary sample plus the overlay. On altitude
    plots only every OMIT_POINTS-th primary sample is drawn; the overlay is
    always drawn in full.
    """
    overlay_xy = _overlay_pairs(overlay, spec.overlay_field)
    if len(samples) == 0 and len(overlay_xy) == 0:
        return NoData(spec.title)

    all_x = np.concatenate([_sample_values(samples, spec.x_field), overlay_xy[:, 0]])
    all_x = all_x[~np.isnan(all_x)]
    x_min = float(all_x.min()) if all_x.size else 0.0
    x_max = float(all_x.max()) if all_x.size else 1.0
    x_span = x_max - x_min

    y_min = spec.y_min if spec.y_min is not None else spec.y_default[0]
    y_max = spec.y_max if spec.y_max is not None else spec.y_default[1]
    y_span = y_max - y_min

    plot_w = width - LEFT_PADDING - PADDING
    plot_h = height - 2 * PADDING

    def x_scale(x):
        x = np.asarray(x, dtype=float)
        if x_span == 0:
            return np.full_like(x, plot_w / 2 + LEFT_PADDING)
        return LEFT_PADDING + (x - x_min) / x_span * plot_w

    def y_scale(y):
        y = np.asarray(y, dtype=float)
        if y_span == 0:
            return np.full_like(y, height / 2)
        return height - PADDING - (y - y_min) / y_span * plot_h

    x_axis_y = float(y_scale(0.0 if spec.x_axis_at_zero else y_min))
    y_axis_x = float(x_scale(x_min))

    x_values = [x_min] if x_span == 0 else [x_min + i * x_span / (X_TICK_COUNT - 1) for i in range(X_TICK_COUNT)]
    x_ticks = tuple(Tick(v, float(x_scale(v)), str(_js_round(v))) for v in x_values)

    y_values = [y_min] if y_span == 0 else [y_min + i * y_span / (Y_TICK_COUNT - 1) for i in range(Y_TICK_COUNT)]
    y_ticks = []
    for v in y_values:
        position = float(y_scale(v))
        label: Optional[str] = f"{v:.{spec.y_tick_decimals}f}"
        if abs(position + Y_LABEL_BASELINE - AXIS_TITLE_ANCHOR_Y) < LABEL_OVERLAP_PX:
            label = None
        y_ticks.append(Tick(v, position, label))

    shown = decimate(samples) if spec.y_field == "altitude" else samples
    xs = _sample_values(shown, spec.x_field)
    ys = _sample_values(shown, spec.y_field)
    points = np.column_stack([x_scale(xs), y_scale(ys)]).reshape(-1, 2)

    if len(overlay_xy):
        overlay_points = np.column_stack([x_scale(overlay_xy[:, 0]), y_scale(overlay_xy[:, 1])])
    else:
        overlay_points = np.empty((0, 2))

    return ScatterGeometry(
        spec=spec,
        width=width,
        height=height,
        frame=(LEFT_PADDING, PADDING, plot_w, plot_h),
        x_range=(x_min, x_max),
        y_range=(y_min, y_max),
        x_axis_y=x_axis_y,
        y_axis_x=y_axis_x,
        x_ticks=x_ticks,
        y_ticks=tuple(y_ticks),
        points=points,
        overlay_points=overlay_points,
    )


# =============================================================================
# Polar
# =============================================================================

def polar_angle(direction) -> np.ndarray:
    """Screen angle in radians for a compass heading (0 deg up, clockwise)."""
    return (np.asarray(direction, dtype=float) - 90.0) * np.pi / 180.0


def project_polar(
    samples: Sequence[Sample],
    spec: PolarSpec,
    width: float,
    height: float,
    overlay: Optional[Sequence[WeatherSample]] = None,
) -> Union[PolarGeometry, NoData]:
    """
    Map heading samples onto a direction/altitude polar plot.

    Altitude bounds come from the spec, else from the data. Every
    OMIT_POINTS-th primary sample is drawn; overlay levels are not thinned.
    """
    overlay_da = _overlay_pairs(overlay, "direction")
    if len(samples) == 0 and len(overlay_da) == 0:
        return NoData(spec.title)

    radius = max(min(width, height) / 2 - POLAR_MARGIN, 0.0)
    cx, cy = width / 2, height / 2

    altitudes = np.concatenate([overlay_da[:, 1], _sample_values(samples, "altitude")])
    altitudes = altitudes[~np.isnan(altitudes)]
    if spec.altitude_min is not None:
        alt_min = spec.altitude_min
    else:
        alt_min = float(altitudes.min()) if altitudes.size else ALT_MIN
    if spec.altitude_max is not None:
        alt_max = spec.altitude_max
    else:
        alt_max = float(altitudes.max()) if altitudes.size else ALT_MAX
    alt_span = (alt_max - alt_min) or 1.0

    def to_xy(directions, alts) -> np.ndarray:
        theta = polar_angle(directions)
        r = (np.asarray(alts, dtype=float) - alt_min) / alt_span * radius
        return np.column_stack([cx + r * np.cos(theta), cy + r * np.sin(theta)]).reshape(-1, 2)

    shown = decimate(samples)
    points = to_xy(_sample_values(shown, "value"), _sample_values(shown, "altitude"))
    overlay_points = to_xy(overlay_da[:, 0], overlay_da[:, 1])

    rings = []
    for fraction in RING_FRACTIONS:
        altitude = alt_min + fraction * alt_span
        rings.append(Ring(fraction * radius, altitude, f"{altitude:.0f} m"))

    labels = []
    for angle in COMPASS_ANGLES:
        rad = angle * math.pi / 180.0
        labels.append(AngleLabel(
            x=cx + radius * math.cos(rad),
            y=cy + radius * math.sin(rad),
            text=f"{(angle + 90) % 360}°",
            dy=3.0 if angle in (90, 270) else 0.0,
        ))

    return PolarGeometry(
        spec=spec,
        width=width,
        height=height,
        center=(cx, cy),
        radius=radius,
        altitude_range=(alt_min, alt_max),
        rings=tuple(rings),
        angle_labels=tuple(labels),
        points=points,
        overlay_points=overlay_points,
    )

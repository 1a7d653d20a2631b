"""
Polar plot canvas: heading against altitude.
"""
from typing import Optional, Sequence

from matplotlib.backends.backend_qt5agg import FigureCanvasQTAgg as FigureCanvas
from matplotlib.figure import Figure
from matplotlib.patches import Circle

from flight_telemetry.model import Sample, WeatherSample
from flight_telemetry.projection import NoData, PolarSpec, project_polar
from ui.styles import (
    BG_COLOR,
    BG_COLOR_LIGHT,
    GRID_COLOR,
    MARKER_EDGE,
    MARKER_SIZE,
    SENSOR_COLOR,
    TEXT_COLOR,
    TEXT_COLOR_DIM,
    WEATHER_COLOR,
)


class PolarPlotCanvas(FigureCanvas):
    """
    Matplotlib canvas for the direction vs altitude plot.

    Rings mark quarter steps of the altitude range, compass labels sit on the
    outer ring. Sounding levels are drawn below the balloon samples.
    """

    def __init__(self, spec: PolarSpec, parent=None, width=4, height=3.6, dpi=100):
        self.spec = spec
        self.fig = Figure(figsize=(width, height), dpi=dpi)
        self.ax = self.fig.add_axes([0, 0, 1, 1])
        super().__init__(self.fig)
        self.setParent(parent)

        self.fig.patch.set_facecolor(BG_COLOR)
        self.ax.set_facecolor(BG_COLOR_LIGHT)

    def update_data(self, samples: Sequence[Sample], overlay: Optional[Sequence[WeatherSample]] = None):
        width, height = self.width(), self.height()
        geometry = project_polar(samples, self.spec, width, height, overlay)

        ax = self.ax
        ax.clear()
        ax.set_xlim(0, width)
        ax.set_ylim(height, 0)
        ax.set_aspect("equal", adjustable="box")
        ax.axis("off")

        if isinstance(geometry, NoData):
            ax.text(width / 2, height / 2, geometry.message, color=TEXT_COLOR,
                    fontsize=9, ha="center", va="center")
            self.draw_idle()
            return

        cx, cy = geometry.center
        ax.text(cx, 12, self.spec.title, color=TEXT_COLOR, fontsize=9, fontweight="bold", ha="center")

        for ring in geometry.rings:
            ax.add_patch(Circle((cx, cy), ring.radius, fill=False, edgecolor=GRID_COLOR, linewidth=0.5))
            ax.text(cx + ring.radius + 5, cy, ring.label, color=TEXT_COLOR_DIM,
                    fontsize=7, fontweight="bold", ha="left")

        for label in geometry.angle_labels:
            ax.text(label.x, label.y + label.dy, label.text, color=TEXT_COLOR_DIM,
                    fontsize=7, fontweight="bold", ha="center")

        if len(geometry.overlay_points):
            ax.scatter(geometry.overlay_points[:, 0], geometry.overlay_points[:, 1], s=MARKER_SIZE,
                       c=WEATHER_COLOR, edgecolors=MARKER_EDGE, linewidths=1.5)
        if len(geometry.points):
            ax.scatter(geometry.points[:, 0], geometry.points[:, 1], s=MARKER_SIZE,
                       c=SENSOR_COLOR, edgecolors=MARKER_EDGE, linewidths=1.5)

        self.draw_idle()

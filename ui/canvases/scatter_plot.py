"""
Scatter plot canvas: paints a ScatterGeometry in pixel coordinates.
"""
from typing import Optional, Sequence

from matplotlib.backends.backend_qt5agg import FigureCanvasQTAgg as FigureCanvas
from matplotlib.figure import Figure
from matplotlib.patches import Rectangle

from flight_telemetry.model import Sample, WeatherSample
from flight_telemetry.projection import (
    AXIS_TITLE_ANCHOR_Y,
    Y_LABEL_BASELINE,
    NoData,
    ScatterSpec,
    project_scatter,
)
from ui.styles import (
    BG_COLOR,
    BG_COLOR_LIGHT,
    MARKER_EDGE,
    MARKER_SIZE,
    SENSOR_COLOR,
    TEXT_COLOR,
    TEXT_COLOR_DIM,
    WEATHER_COLOR,
)


class ScatterPlotCanvas(FigureCanvas):
    """
    Matplotlib canvas for one scatter plot (e.g. temperature vs altitude).

    The axes span the widget in pixels with y pointing down, so projected
    coordinates are drawn as they are.
    """

    def __init__(self, spec: ScatterSpec, parent=None, width=4, height=3.6, dpi=100):
        """
        Initialize scatter canvas.

        Args:
            spec: Which fields this plot shows
            parent: Parent QWidget
            width: Figure width in inches
            height: Figure height in inches
            dpi: Dots per inch resolution
        """
        self.spec = spec
        self.fig = Figure(figsize=(width, height), dpi=dpi)
        self.ax = self.fig.add_axes([0, 0, 1, 1])
        super().__init__(self.fig)
        self.setParent(parent)

        self.fig.patch.set_facecolor(BG_COLOR)
        self.ax.set_facecolor(BG_COLOR_LIGHT)

    def update_data(self, samples: Sequence[Sample], overlay: Optional[Sequence[WeatherSample]] = None):
        """
        Project and redraw.

        Args:
            samples: Primary series snapshot
            overlay: Weather levels to overlay, or None
        """
        width, height = self.width(), self.height()
        geometry = project_scatter(samples, self.spec, width, height, overlay)

        ax = self.ax
        ax.clear()
        ax.set_xlim(0, width)
        ax.set_ylim(height, 0)
        ax.axis("off")

        if isinstance(geometry, NoData):
            ax.text(width / 2, height / 2, geometry.message, color=TEXT_COLOR,
                    fontsize=9, ha="center", va="center")
            self.draw_idle()
            return

        x0, y0, w, h = geometry.frame
        ax.add_patch(Rectangle((x0, y0), w, h, fill=False, edgecolor=TEXT_COLOR_DIM, linewidth=1))
        ax.plot([x0, x0 + w], [geometry.x_axis_y] * 2, color=TEXT_COLOR_DIM, linewidth=1)
        ax.plot([geometry.y_axis_x] * 2, [y0, y0 + h], color=TEXT_COLOR_DIM, linewidth=1)

        for tick in geometry.x_ticks:
            ax.text(tick.position, geometry.x_axis_y + 15, tick.label, color=TEXT_COLOR_DIM,
                    fontsize=7, fontweight="bold", ha="center", va="baseline")
        for tick in geometry.y_ticks:
            if tick.label is None:
                continue
            ax.text(geometry.y_axis_x - 15, tick.position + Y_LABEL_BASELINE, tick.label,
                    color=TEXT_COLOR_DIM, fontsize=7, fontweight="bold", ha="right", va="baseline")

        ax.text(8, AXIS_TITLE_ANCHOR_Y, self.spec.title, color=TEXT_COLOR, fontsize=8,
                fontweight="bold", rotation=90, ha="center", va="center")
        ax.text(x0 + w / 2, height - 4, self.spec.x_title, color=TEXT_COLOR, fontsize=8,
                fontweight="bold", ha="center", va="bottom")

        if len(geometry.points):
            ax.scatter(geometry.points[:, 0], geometry.points[:, 1], s=MARKER_SIZE,
                       c=SENSOR_COLOR, edgecolors=MARKER_EDGE, linewidths=1.5)
        if len(geometry.overlay_points):
            ax.scatter(geometry.overlay_points[:, 0], geometry.overlay_points[:, 1], s=MARKER_SIZE,
                       c=WEATHER_COLOR, edgecolors=MARKER_EDGE, linewidths=1.5)

        self.draw_idle()

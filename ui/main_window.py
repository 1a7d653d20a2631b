"""
Main window for the balloon flight display.
"""
from PyQt5 import QtCore
from PyQt5.QtWidgets import (
    QGridLayout,
    QGroupBox,
    QHBoxLayout,
    QLabel,
    QMainWindow,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from flight_telemetry.config import ALT_MAX, ALT_MIN
from flight_telemetry.engine import EngineSnapshot, SyncEngine
from flight_telemetry.model import Quantity
from flight_telemetry.projection import (
    ACCELERATION_PLOT,
    DIRECTION_PLOT,
    HUMIDITY_PLOT,
    SPEED_PLOT,
    TEMPERATURE_PLOT,
)
from ui.canvases import PolarPlotCanvas, ScatterPlotCanvas
from ui.styles import DARK_STYLESHEET

RENDER_INTERVAL_MS = 250

# (label, Reading attribute, decimals, unit)
READING_ROWS = [
    ("Altitude", "altitude", 2, "m"),
    ("v_Speed", "vertical_speed", 2, "m/s"),
    ("Acceleration", "acceleration", 3, "m/s²"),
    ("Direction", "direction", 2, "°"),
    ("Speed", "speed", 2, "kt"),
    ("Temperature", "temperature", 2, "°C"),
    ("Humidity", "humidity", 2, "%"),
]


class MainWindow(QMainWindow):
    """
    Flight display window.

    Displays:
    - Latest reading panel with mode, pause and weather buttons
    - Direction vs altitude polar plot
    - Temperature, speed and humidity vs altitude
    - Acceleration vs time

    Plots are redrawn on a render timer, only when the engine reported a change.
    """

    def __init__(self, engine: SyncEngine):
        super().__init__()
        self.engine = engine
        self._dirty = True

        self.setWindowTitle("hlballon Flight Display")
        self.resize(1500, 850)

        central = QWidget()
        self.setCentralWidget(central)

        grid = QGridLayout()
        grid.setContentsMargins(8, 8, 8, 8)
        grid.setSpacing(10)
        central.setLayout(grid)

        self.direction_canvas = PolarPlotCanvas(DIRECTION_PLOT, self)
        self.temperature_canvas = ScatterPlotCanvas(TEMPERATURE_PLOT, self)
        self.acceleration_canvas = ScatterPlotCanvas(ACCELERATION_PLOT, self)
        self.speed_canvas = ScatterPlotCanvas(SPEED_PLOT, self)
        self.humidity_canvas = ScatterPlotCanvas(HUMIDITY_PLOT, self)

        grid.addWidget(self._build_readings_panel(), 0, 0)
        grid.addWidget(self.direction_canvas, 0, 1)
        grid.addWidget(self.temperature_canvas, 0, 2)
        grid.addWidget(self.acceleration_canvas, 1, 0)
        grid.addWidget(self.speed_canvas, 1, 1)
        grid.addWidget(self.humidity_canvas, 1, 2)

        self.error_label = QLabel("")
        self.error_label.setObjectName("errorLabel")
        self.error_label.setAlignment(QtCore.Qt.AlignCenter)
        grid.addWidget(self.error_label, 2, 0, 1, 3)

        self.setStyleSheet(DARK_STYLESHEET)

        engine.data_changed.connect(self._mark_dirty)
        engine.state_changed.connect(self._mark_dirty)
        engine.error_changed.connect(self._show_error)

        self.render_timer = QtCore.QTimer(self)
        self.render_timer.setInterval(RENDER_INTERVAL_MS)
        self.render_timer.timeout.connect(self.refresh)
        self.render_timer.start()

    def _build_readings_panel(self):
        """Build the readings table and control buttons."""
        group = QGroupBox("hlballon Flight Display v:250504")
        layout = QVBoxLayout()
        layout.setSpacing(2)
        group.setLayout(layout)

        layout.addWidget(QLabel("https://hlballon.com"))
        self.gps_label = QLabel("GPS Date Time: ")
        layout.addWidget(self.gps_label)

        self.value_labels = {}
        rows = READING_ROWS + [("Altitude Min", None, 2, "m"), ("Altitude Max", None, 2, "m")]
        for label, attr, decimals, unit in rows:
            row = QHBoxLayout()
            name = QLabel(label)
            name.setFixedWidth(110)
            value = QLabel()
            value.setFixedWidth(90)
            value.setAlignment(QtCore.Qt.AlignRight | QtCore.Qt.AlignVCenter)
            row.addWidget(name)
            row.addWidget(value)
            row.addWidget(QLabel(unit))
            row.addStretch()
            layout.addLayout(row)
            if attr is None:
                bound = ALT_MIN if label == "Altitude Min" else ALT_MAX
                value.setText(f"{bound:.{decimals}f}")
            else:
                self.value_labels[attr] = (value, decimals)

        layout.addStretch()

        buttons = QHBoxLayout()
        self.mode_button = QPushButton()
        self.mode_button.clicked.connect(self.engine.toggle_mode)
        self.pause_button = QPushButton()
        self.pause_button.setObjectName("pauseButton")
        self.pause_button.clicked.connect(self.engine.toggle_pause)
        self.weather_button = QPushButton()
        self.weather_button.setObjectName("weatherButton")
        self.weather_button.clicked.connect(self.engine.toggle_weather)
        buttons.addWidget(self.mode_button)
        buttons.addWidget(self.pause_button)
        buttons.addWidget(self.weather_button)
        layout.addLayout(buttons)

        return group

    # ==========================================================================
    # Data Update Methods
    # ==========================================================================

    def _mark_dirty(self):
        self._dirty = True

    def _show_error(self, message: str):
        self.error_label.setText(message)

    def refresh(self):
        """Redraw from a fresh engine snapshot if anything changed."""
        if not self._dirty:
            return
        self._dirty = False
        snapshot = self.engine.snapshot()
        self._update_readings(snapshot)
        self._update_buttons(snapshot)
        self._update_plots(snapshot)

    def _update_readings(self, snapshot: EngineSnapshot):
        latest = snapshot.latest
        self.gps_label.setText(f"GPS Date Time: {latest.timestamp}")
        for attr, (label, decimals) in self.value_labels.items():
            label.setText(f"{getattr(latest, attr):.{decimals}f}")

    def _update_buttons(self, snapshot: EngineSnapshot):
        self.mode_button.setText("Switch to Live Data" if snapshot.is_replay else "Switch to Replay Mode")
        self.pause_button.setVisible(snapshot.is_replay)
        self.pause_button.setEnabled(snapshot.pausable)
        self.pause_button.setText("Continue" if snapshot.paused else "Pause")
        self.weather_button.setText(
            "Hide WetterHeidi Upper_Winds" if snapshot.weather_visible else "WetterHeidi Upper_Winds"
        )

    def _update_plots(self, snapshot: EngineSnapshot):
        overlay = snapshot.overlay
        series = snapshot.series
        self.direction_canvas.update_data(series[Quantity.DIRECTION], overlay)
        self.temperature_canvas.update_data(series[Quantity.TEMPERATURE], overlay)
        self.acceleration_canvas.update_data(series[Quantity.ACCELERATION])
        self.speed_canvas.update_data(series[Quantity.SPEED], overlay)
        self.humidity_canvas.update_data(series[Quantity.HUMIDITY], overlay)

    def closeEvent(self, event):
        self.render_timer.stop()
        super().closeEvent(event)

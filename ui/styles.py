"""
Styling constants and theme configuration for the flight display UI.
"""

# =============================================================================
# Color Palette
# =============================================================================

# Dark theme colors
BG_COLOR = "#111111"          # Main background
BG_COLOR_LIGHT = "#181818"    # Lighter background (plots, panels)
TEXT_COLOR = "#EEEEEE"        # Main text
TEXT_COLOR_DIM = "#CCCCCC"    # Dimmed text (axis labels, ticks)
BORDER_COLOR = "#555555"      # Borders
GRID_COLOR = "#333333"        # Reference rings

# Accent colors
ACCENT_BLUE = "#6FA8FF"       # Mode button
ACCENT_RED = "#FF6B6B"        # Error text
ACCENT_YELLOW = "#FFD93D"     # Pause / continue button
ACCENT_GREEN = "#006400"      # Weather overlay button

# Plot markers
SENSOR_COLOR = "#FF6384"      # Balloon samples
WEATHER_COLOR = "green"       # Sounding overlay
MARKER_EDGE = "black"
MARKER_SIZE = 36              # matplotlib scatter area, ~3 px radius

# =============================================================================
# PyQt5 Stylesheet
# =============================================================================

DARK_STYLESHEET = f"""
    QMainWindow {{
        background-color: {BG_COLOR};
        color: {TEXT_COLOR};
    }}
    QGroupBox {{
        border: 1px solid {BORDER_COLOR};
        border-radius: 4px;
        margin-top: 8px;
        padding-top: 10px;
        font-weight: bold;
        color: {TEXT_COLOR};
    }}
    QGroupBox::title {{
        subcontrol-origin: margin;
        left: 8px;
        padding: 0 4px 0 4px;
    }}
    QLabel {{
        color: {TEXT_COLOR};
        font-size: 10pt;
    }}
    QLabel#errorLabel {{
        color: {ACCENT_RED};
        font-weight: bold;
    }}
    QPushButton {{
        background-color: {ACCENT_BLUE};
        color: #FFFFFF;
        border: none;
        border-radius: 4px;
        padding: 6px 12px;
        font-weight: bold;
    }}
    QPushButton:hover {{
        background-color: #5A98EF;
    }}
    QPushButton:pressed {{
        background-color: #4A88DF;
    }}
    QPushButton#pauseButton {{
        background-color: {ACCENT_YELLOW};
        color: #000000;
    }}
    QPushButton#weatherButton {{
        background-color: {ACCENT_GREEN};
    }}
"""

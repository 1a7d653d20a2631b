"""Qt user interface for the flight display."""

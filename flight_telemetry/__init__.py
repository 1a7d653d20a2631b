"""
Flight telemetry core: parsing, bounded series, live/replay engine and
plot projections for the balloon flight display.
"""

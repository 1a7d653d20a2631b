#!/usr/bin/env python3
"""
Balloon Flight Display - Main Entry Point

Live and replay visualization of balloon flight telemetry (altitude,
vertical speed, acceleration, heading, ground speed, temperature, humidity)
with an optional upper-air weather sounding overlay.

Usage:
    python main.py              # Start in live mode
    python main.py --replay     # Start replaying the flight log
    python main.py --weather    # Show the sounding overlay from the start
"""
import sys
import logging

# Load environment variables from .env file
from dotenv import load_dotenv
load_dotenv()

from flight_telemetry import config

# Configure logging before the engine and UI modules are imported
logging.basicConfig(
    level=getattr(logging, config.get_log_level(), logging.INFO),
    format='[%(levelname)s] %(name)s: %(message)s',
    stream=sys.stdout
)

from PyQt5 import QtWidgets

print("="*60)
print("🎈 FLIGHT DISPLAY STARTING...")
print("="*60)

from flight_telemetry.engine import SyncEngine
from flight_telemetry.fetch import HttpFetchWorker
from ui.main_window import MainWindow

print("✅ All core modules imported successfully")


def main(replay: bool = False, weather: bool = False):
    """
    Entry point for the flight display.

    Args:
        replay: Start in replay mode instead of live mode
        weather: Show the weather sounding overlay from the start
    """
    print("🔧 Creating Qt application...")
    app = QtWidgets.QApplication(sys.argv)

    print("🌐 Starting fetch worker...")
    fetcher = HttpFetchWorker()
    fetcher.status_update.connect(lambda msg: print(f"[Fetch] {msg}"))
    fetcher.start()

    print(f"📡 Live endpoint: {config.get_live_url()}")
    print(f"📜 Flight log:    {config.get_log_url()}")
    print(f"☁️  Sounding:      {config.get_weather_url()}")
    engine = SyncEngine(fetcher)
    engine.error_changed.connect(lambda msg: msg and print(f"[Error] {msg}"))

    print("🖥️  Creating main window...")
    window = MainWindow(engine)

    engine.start()
    if replay:
        engine.toggle_mode()
    if weather:
        engine.set_weather_visible(True)

    window.show()

    print("\n" + "="*60)
    print(f"✅ DISPLAY READY - {engine.mode.value.upper()} MODE")
    print("="*60 + "\n")

    # Run Qt event loop
    result = app.exec_()

    # Clean shutdown
    print("\n🛑 Shutting down...")
    engine.shutdown()
    fetcher.stop()
    fetcher.wait()

    print("👋 Goodbye!")
    sys.exit(result)


if __name__ == "__main__":
    replay = "--replay" in sys.argv
    weather = "--weather" in sys.argv

    print(f"🎯 Command line args: {sys.argv}")
    print(f"⏯️  Replay mode: {replay}")
    print(f"☁️  Weather overlay: {weather}\n")

    try:
        main(replay, weather)
    except Exception as e:
        print("\n" + "="*60)
        print("❌ FATAL ERROR:")
        print("="*60)
        print(f"Error type: {type(e).__name__}")
        print(f"Error message: {e}")
        import traceback
        print("\nFull traceback:")
        traceback.print_exc()
        print("="*60)
        sys.exit(1)

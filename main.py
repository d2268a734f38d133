#!/usr/bin/env python3
"""
Running Pace Tracker - Main Entry Point

Live distance, speed and pace for a run, with a spoken status update every
tenth of a mile.

Usage:
    python main.py                # Listen for position fixes on UDP
    python main.py --simulate     # Run a simulated loop instead
    python main.py --no-voice     # Don't speak announcements
"""
import sys
import os
import logging
from PyQt5 import QtWidgets

# Configure logging FIRST - before any other imports
logging.basicConfig(
    level=logging.INFO,
    format='[%(levelname)s] %(name)s: %(message)s',
    stream=sys.stdout
)

# Load environment variables from .env file
from dotenv import load_dotenv
load_dotenv()

from tracking.config import ConfigError, TrackingConfig
from tracking.engine import TrackingEngine
from tracking.location_worker import LocationWorker, SimulatedLocationWorker
from tracking.session import RunSession
from ui.main_window import MainWindow

logger = logging.getLogger("main")

# Spoken announcements are optional (need PyAudio and Watson credentials)
try:
    from speech.announcer import DEFAULT_VOICE, AnnouncementSpeaker, WatsonTTSClient
    TTS_AVAILABLE = True
except ImportError as e:
    TTS_AVAILABLE = False
    logger.warning(f"TTS Output not available: {e}")


def create_speaker():
    """Build the announcement speaker from environment settings, or None if not configured."""
    api_key = os.getenv("WATSON_TTS_API_KEY", "")
    url = os.getenv("WATSON_TTS_URL", "")
    if not api_key or not url:
        print("⚠️  TTS Output requires WATSON_TTS_API_KEY and WATSON_TTS_URL in .env")
        return None

    try:
        rate = int(os.getenv("WATSON_TTS_RATE", "0"))
    except ValueError:
        raise ConfigError(f"WATSON_TTS_RATE must be an integer, got '{os.getenv('WATSON_TTS_RATE')}'") from None

    client = WatsonTTSClient(
        api_key=api_key,
        service_url=url,
        voice=os.getenv("WATSON_TTS_VOICE", DEFAULT_VOICE),
        rate_percentage=rate,
    )
    return AnnouncementSpeaker(client)


def main(simulate: bool = False, enable_voice: bool = True):
    """
    Entry point for the run tracker.

    Args:
        simulate: Use the simulated loop instead of the UDP position feed
        enable_voice: Speak announcements through Watson TTS
    """
    config = TrackingConfig.from_env()

    app = QtWidgets.QApplication(sys.argv)
    window = MainWindow()

    if simulate:
        location_thread = SimulatedLocationWorker(config)
    else:
        location_thread = LocationWorker(config)
    location_thread.status_update.connect(lambda msg: print(f"[Location] {msg}"))

    # Speech output
    speaker_thread = None
    if enable_voice and TTS_AVAILABLE:
        speaker_thread = create_speaker()
        if speaker_thread:
            speaker_thread.status_update.connect(lambda msg: print(f"[Voice] {msg}"))
            speaker_thread.error_occurred.connect(window.append_error)
    elif enable_voice:
        print("⚠️  TTS Output module not available (missing dependencies)")

    engine = TrackingEngine(config)
    session = RunSession(
        engine,
        location_thread,
        announce=speaker_thread.announce if speaker_thread else None,
    )

    # Window <-> session
    session.snapshot_changed.connect(window.update_snapshot)
    session.announcement_made.connect(window.append_announcement)
    session.error_reported.connect(window.append_error)
    window.start_run_requested.connect(session.start_run)
    window.stop_run_requested.connect(session.stop_run)
    window.authorization_requested.connect(session.request_authorization)

    window.update_snapshot(session.snapshot())

    location_thread.start()
    if speaker_thread:
        speaker_thread.start()

    window.show()

    print("\n" + "="*60)
    if speaker_thread:
        print("✅ TRACKER READY - voice announcements ON")
    else:
        print("✅ TRACKER READY - voice announcements OFF")
    if not simulate:
        print(f"📡 Send position fixes to udp://{config.feed_host}:{config.feed_port}")
    print("="*60 + "\n")

    result = app.exec_()

    # Clean shutdown
    print("\n🛑 Shutting down...")
    session.stop_run()
    location_thread.stop()
    location_thread.wait()

    if speaker_thread:
        speaker_thread.stop()
        speaker_thread.wait()

    sys.exit(result)


if __name__ == "__main__":
    simulate = "--simulate" in sys.argv
    enable_voice = "--no-voice" not in sys.argv

    try:
        main(simulate, enable_voice)
    except ConfigError as e:
        print(f"❌ Configuration error: {e}")
        sys.exit(2)
    except Exception:
        logger.exception("Fatal error")
        sys.exit(1)

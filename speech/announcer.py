"""
Spoken run announcements.

Synthesis goes through IBM Watson Text-to-Speech (aiohttp), playback
through PyAudio. The tracker decides when and what to say; this module
only says it.

Only the newest announcement is kept while another one is playing: a pace
update that has been waiting behind an earlier one is already out of date.
"""

import asyncio
import io
import logging
import wave
from typing import Optional

import aiohttp
import pyaudio
from PyQt5 import QtCore

logger = logging.getLogger(__name__)

DEFAULT_VOICE = "en-US_AllisonV3Voice"
SYNTHESIS_TIMEOUT = 10.0  # seconds
CHUNK_FRAMES = 1024


class TTSError(RuntimeError):
    """Watson TTS answered with a non-200 status."""

    def __init__(self, status: int, body: str):
        super().__init__(f"TTS API error {status}: {body}")
        self.status = status
        self.body = body


class WatsonTTSClient:
    """Minimal client for the Watson /v1/synthesize endpoint."""

    def __init__(
        self,
        api_key: str,
        service_url: str,
        voice: str = DEFAULT_VOICE,
        rate_percentage: int = 0,
    ):
        self.api_key = api_key
        self.service_url = service_url.rstrip("/")
        self.voice = voice
        self.rate_percentage = rate_percentage

    def build_request(self, text: str) -> dict:
        """Keyword arguments for ClientSession.post(), minus auth."""
        params = {"voice": self.voice}
        if self.rate_percentage:
            params["rate_percentage"] = str(self.rate_percentage)

        return {
            "url": f"{self.service_url}/v1/synthesize",
            "headers": {"Accept": "audio/wav", "Content-Type": "application/json"},
            "params": params,
            "json": {"text": text},
        }

    async def synthesize(self, text: str) -> bytes:
        """Return WAV bytes for ``text``."""
        timeout = aiohttp.ClientTimeout(total=SYNTHESIS_TIMEOUT)
        auth = aiohttp.BasicAuth("apikey", self.api_key)

        async with aiohttp.ClientSession(timeout=timeout) as session:
            async with session.post(auth=auth, **self.build_request(text)) as response:
                if response.status != 200:
                    raise TTSError(response.status, await response.text())
                return await response.read()


class WavPlayer:
    """Blocking WAV playback on the default output device."""

    def __init__(self):
        self._audio = pyaudio.PyAudio()

    def play(self, wav_bytes: bytes, keep_playing=lambda: True) -> None:
        with wave.open(io.BytesIO(wav_bytes), "rb") as wav_file:
            stream = self._audio.open(
                format=self._audio.get_format_from_width(wav_file.getsampwidth()),
                channels=wav_file.getnchannels(),
                rate=wav_file.getframerate(),
                output=True,
            )
            try:
                frames = wav_file.readframes(CHUNK_FRAMES)
                while frames and keep_playing():
                    stream.write(frames)
                    frames = wav_file.readframes(CHUNK_FRAMES)
            finally:
                stream.stop_stream()
                stream.close()

    def close(self) -> None:
        self._audio.terminate()


class AnnouncementSpeaker(QtCore.QThread):
    """
    Speech worker thread.

    Runs its own asyncio loop; announce() may be called from any thread.

    Signals:
        status_update(str) - progress messages for the console
        error_occurred(str) - synthesis or playback failure, for the user
        playback_started()
        playback_finished()
    """

    status_update = QtCore.pyqtSignal(str)
    error_occurred = QtCore.pyqtSignal(str)
    playback_started = QtCore.pyqtSignal()
    playback_finished = QtCore.pyqtSignal()

    def __init__(self, client: WatsonTTSClient, parent=None):
        super().__init__(parent)
        self.client = client
        self.player: Optional[WavPlayer] = None

        self._running = False
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        # Size 1: holds the next announcement only
        self._pending: Optional[asyncio.Queue] = None

    def run(self):
        self._running = True
        self._loop = asyncio.new_event_loop()
        asyncio.set_event_loop(self._loop)
        self._pending = asyncio.Queue(maxsize=1)

        try:
            self.player = WavPlayer()
            self.status_update.emit(f"Voice ready ({self.client.voice})")
            self._loop.run_until_complete(self._speak_loop())
        except Exception as e:
            logger.error(f"Audio output unavailable: {e}", exc_info=True)
            self.error_occurred.emit(f"Audio output unavailable: {e}")
        finally:
            self._loop.close()
            self._loop = None
            if self.player is not None:
                self.player.close()
                self.player = None
            self.status_update.emit("Voice stopped")

    async def _speak_loop(self):
        while self._running:
            try:
                text = await asyncio.wait_for(self._pending.get(), timeout=1.0)
            except asyncio.TimeoutError:
                continue
            try:
                await self._say(text)
            except Exception as e:
                # Keep the speaker alive for later announcements
                logger.error(f"Error in announcement loop: {e}", exc_info=True)
                self.error_occurred.emit(f"TTS error: {e}")

    async def _say(self, text: str):
        try:
            wav_bytes = await self.client.synthesize(text)
            logger.debug(f"Synthesized {len(wav_bytes)} bytes for: {text}")

            self.playback_started.emit()
            await asyncio.get_running_loop().run_in_executor(
                None, self.player.play, wav_bytes, lambda: self._running
            )
            self.playback_finished.emit()
        except (TTSError, aiohttp.ClientError, asyncio.TimeoutError, OSError, wave.Error) as e:
            logger.error(f"Announcement failed: {e}")
            self.error_occurred.emit(f"TTS error: {e}")

    def _replace_pending(self, text: str):
        # Runs on the speaker loop
        if self._pending.full():
            stale = self._pending.get_nowait()
            logger.info(f"Dropping stale announcement: {stale}")
        self._pending.put_nowait(text)

    def announce(self, text: str) -> bool:
        """
        Queue ``text`` to be spoken. Returns False if the worker is not
        running or the text is blank.
        """
        if not self._running or self._loop is None or not text.strip():
            return False
        self._loop.call_soon_threadsafe(self._replace_pending, text)
        return True

    def stop(self):
        logger.info("Stopping announcement speaker...")
        self._running = False

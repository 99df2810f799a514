"""Microphone capture delivering float32 frames to a callback."""

import time
import logging
from threading import Thread, Event, Lock
from typing import Optional, Callable
from datetime import datetime

import numpy as np
import pyaudio

from ..errors import MicrophoneAccessError
from ..models.audio import AudioStats
from ..models.events import AudioEvent


logger = logging.getLogger(__name__)


class AudioCapture:
    """Continuous microphone capture on a background thread.

    The PyAudio stream is the source, ``callback`` is the processor and
    whatever the callback forwards to is the destination. ``stop_recording``
    detaches the callback, stops the stream and releases the device; the
    device is released at most once per instance.
    """

    def __init__(
        self,
        callback: Optional[Callable[[AudioEvent], None]] = None,
        sample_rate: int = 16000,
        chunk_size: int = 4096,
        channels: int = 1,
    ):
        """Initialize audio capture with specified parameters.

        Args:
            callback: Receives one AudioEvent per captured frame
            sample_rate: Audio sample rate (16kHz for the diarization socket)
            chunk_size: Size of each audio frame in samples
            channels: Number of audio channels (1 for mono)
        """
        self.audio_event_callback = callback
        self.sample_rate = sample_rate
        self.chunk_size = chunk_size
        self.channels = channels

        # Recording thread management
        self.recording_thread: Optional[Thread] = None
        self.stop_event = Event()
        self.is_recording = False
        self._release_lock = Lock()
        self.released = False

        # Statistics tracking
        self.start_time: Optional[datetime] = None
        self.stop_time: Optional[datetime] = None
        self.total_chunks = 0

        self.pyaudio_instance: Optional[pyaudio.PyAudio] = None
        self.stream = None

    def start_recording(self) -> None:
        """Open the microphone and start recording in a background thread.

        Raises:
            MicrophoneAccessError: If the input device cannot be opened
        """
        if self.is_recording:
            logger.warning("Recording already in progress")
            return

        logger.info("Starting audio recording")
        self.stream = self.__open_audio_stream()
        self.stop_event.clear()
        self.start_time = datetime.now()
        self.stop_time = None
        self.total_chunks = 0

        self.recording_thread = Thread(target=self._record_continuously, daemon=True)
        self.recording_thread.name = "AudioCaptureThread"
        self.recording_thread.start()
        self.is_recording = True

    def detach(self) -> None:
        """Stop forwarding frames without touching the device."""
        self.audio_event_callback = None

    def stop_recording(self) -> None:
        """Stop recording and release the microphone."""
        self.detach()
        if self.is_recording:
            logger.info("Stopping audio recording")
            self.stop_event.set()
            if self.recording_thread and self.recording_thread.is_alive():
                self.recording_thread.join(timeout=2.0)
                if self.recording_thread.is_alive():
                    logger.warning("Recording thread did not stop cleanly")
            self.is_recording = False
            self.stop_time = datetime.now()
            logger.info(f"Recording stopped. Total chunks: {self.total_chunks}")
        self._release()

    def __open_audio_stream(self):
        self.pyaudio_instance = pyaudio.PyAudio()
        try:
            stream = self.pyaudio_instance.open(
                format=pyaudio.paFloat32,
                channels=self.channels,
                rate=self.sample_rate,
                input=True,
                frames_per_buffer=self.chunk_size,
                stream_callback=None
            )
        except (OSError, ValueError) as e:
            self._release()
            raise MicrophoneAccessError(str(e)) from e
        logger.info(f"Audio stream opened: {self.sample_rate}Hz, "
                    f"{self.chunk_size} samples/chunk")
        return stream

    def __read_audio_chunk(self) -> np.ndarray:
        raw = self.stream.read(self.chunk_size, exception_on_overflow=False)
        self.total_chunks += 1
        return np.frombuffer(raw, dtype=np.float32)

    def __publish_audio_event(self, samples: np.ndarray) -> None:
        callback = self.audio_event_callback
        if callback is None:
            return
        callback(AudioEvent(
            chunk_id=f"chunk_{self.total_chunks}",
            samples=samples,
            timestamp=time.time(),
            sequence_number=self.total_chunks,
            sample_rate=self.sample_rate,
            channels=self.channels,
            final=self.stop_event.is_set()
        ))

    def _record_continuously(self) -> None:
        """Internal method: continuous recording loop in background thread."""
        try:
            while not self.stop_event.is_set():
                samples = self.__read_audio_chunk()
                self.__publish_audio_event(samples)
        except OSError as e:
            if not self.stop_event.is_set():
                logger.error(f"Audio stream read failed: {e}")

    def _release(self) -> None:
        """Close the stream and terminate PyAudio exactly once."""
        with self._release_lock:
            if self.released or self.pyaudio_instance is None:
                return
            self.released = True
        if self.stream is not None:
            try:
                self.stream.stop_stream()
                self.stream.close()
            except OSError as e:
                logger.warning(f"Error closing audio stream: {e}")
            self.stream = None
        self.pyaudio_instance.terminate()
        self.pyaudio_instance = None
        logger.debug("Microphone released")

    def get_recording_stats(self) -> AudioStats:
        """Get recording statistics; the duration stops growing once recording stops."""
        duration = 0.0
        if self.start_time:
            duration = ((self.stop_time or datetime.now()) - self.start_time).total_seconds()

        return AudioStats(
            is_recording=self.is_recording,
            duration_seconds=duration,
            sample_rate=self.sample_rate,
            chunk_size=self.chunk_size,
            total_chunks=self.total_chunks,
        )

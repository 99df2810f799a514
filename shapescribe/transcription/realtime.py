"""Realtime speaker diarization over the provider's websocket.

A RealtimeSession owns its HTTP session, websocket, microphone capture and
pump tasks. ``stop()`` is the only way to release them and may be called any
number of times, including before the socket has opened.
"""

import asyncio
import json
import logging
from enum import Enum
from typing import Any, Awaitable, Callable, Optional

import aiohttp
from pydantic import ValidationError

from .base import DiarizationProxyClient, TRANSPORT_ERRORS
from ..audio.encoder import SAMPLE_RATE, encode_frame
from ..errors import MicrophoneAccessError, ShapeScribeError, SocketError
from ..models.audio import AudioStats
from ..models.events import AudioEvent
from ..models.wire import RealtimeMessage

logger = logging.getLogger(__name__)

DEFAULT_REALTIME_URL = "wss://api.assemblyai.com/v2/realtime/ws"
FINAL_TRANSCRIPT = "FinalTranscript"
PARTIAL_TRANSCRIPT = "PartialTranscript"

TranscriptCallback = Callable[[str, bool], None]
ErrorCallback = Callable[[str], None]
FrameCallback = Callable[[AudioEvent], None]
# Returns an object with start_recording(), detach(), stop_recording() and
# get_recording_stats()
CaptureFactory = Callable[[FrameCallback], Any]


class SessionState(Enum):
    CONNECTING = "connecting"
    STREAMING = "streaming"
    CLOSED = "closed"
    ERROR = "error"


def microphone_capture(callback: FrameCallback, sample_rate: int = SAMPLE_RATE, chunk_size: int = 4096):
    """Default capture factory: a mono PyAudio microphone at ``sample_rate``."""
    # Imported lazily so the client works without PyAudio when a capture is injected
    from ..audio.capture import AudioCapture
    return AudioCapture(callback=callback, sample_rate=sample_rate, chunk_size=chunk_size, channels=1)


class RealtimeSession:
    """A live transcription session bound to one socket and one microphone."""

    def __init__(self,
                 url: str,
                 params: dict,
                 on_transcript: TranscriptCallback,
                 on_error: ErrorCallback,
                 capture_factory: CaptureFactory = microphone_capture):
        self.url = url
        self.params = params
        self.on_transcript = on_transcript
        self.on_error = on_error
        self.capture_factory = capture_factory

        self.state = SessionState.CONNECTING
        self.http: Optional[aiohttp.ClientSession] = None
        self.socket: Optional[aiohttp.ClientWebSocketResponse] = None
        self.capture = None
        self.frames_sent = 0
        self.error: Optional[SocketError] = None

        self._frames: "asyncio.Queue[AudioEvent]" = asyncio.Queue()
        self._run_task: Optional[asyncio.Task] = None
        self._send_task: Optional[asyncio.Task] = None
        self._stopping = False
        self._stopped = False

    def begin(self) -> None:
        """Schedule the connection; returns immediately in CONNECTING state."""
        self.http = aiohttp.ClientSession()
        self._run_task = asyncio.create_task(self._run(), name="realtime-session")

    @property
    def is_open(self) -> bool:
        return self.socket is not None and not self.socket.closed

    def get_recording_stats(self) -> Optional[AudioStats]:
        """Statistics of the session's microphone; None if it was never opened."""
        if self.capture is None:
            return None
        return self.capture.get_recording_stats()

    async def _run(self) -> None:
        try:
            self.socket = await self.http.ws_connect(self.url, params=self.params)
        except TRANSPORT_ERRORS as e:
            logger.error(f"Realtime socket failed to open: {e}")
            self._fail("WebSocket connection error")
            return

        logger.info("Realtime socket open")
        self._open_microphone()
        await self._receive_loop()

    def _open_microphone(self) -> None:
        loop = asyncio.get_running_loop()

        def on_frame(event: AudioEvent) -> None:
            # Called from the capture thread
            loop.call_soon_threadsafe(self._frames.put_nowait, event)

        try:
            self.capture = self.capture_factory(on_frame)
            self.capture.start_recording()
        except (MicrophoneAccessError, ImportError, OSError) as e:
            # Socket stays open; the caller is expected to stop() the session
            logger.error(f"Microphone access failed: {e}")
            self._fail(f"Microphone access failed: {e}")
            return

        self.state = SessionState.STREAMING
        self._send_task = asyncio.create_task(self._send_loop(), name="realtime-sender")

    async def _send_loop(self) -> None:
        while True:
            event = await self._frames.get()
            if not self.is_open:
                continue
            try:
                await self.socket.send_str(json.dumps({"audio_data": encode_frame(event.samples)}))
                self.frames_sent += 1
            except (ConnectionError, aiohttp.ClientError) as e:
                logger.warning(f"Dropped audio frame {event.chunk_id}: {e}")

    async def _receive_loop(self) -> None:
        while True:
            msg = await self.socket.receive()
            if msg.type == aiohttp.WSMsgType.TEXT:
                self._dispatch(msg.data)
            elif msg.type == aiohttp.WSMsgType.CLOSE:
                close_code, close_reason = msg.data, msg.extra
                break
            elif msg.type in (aiohttp.WSMsgType.CLOSING, aiohttp.WSMsgType.CLOSED):
                if self._stopping:
                    return
                # No close frame: the transport dropped mid-stream
                logger.error(f"Realtime socket lost without a close frame (code={self.socket.close_code})")
                self._fail("WebSocket connection error")
                return
            elif msg.type == aiohttp.WSMsgType.ERROR:
                logger.error(f"Realtime socket error: {msg.data}")
                self._fail("WebSocket connection error")
                return

        if self._stopping:
            return
        logger.info(f"Realtime socket closed: code={close_code} reason={close_reason!r}")
        if close_code != aiohttp.WSCloseCode.OK:
            self._fail(f"Connection closed: {close_reason or 'Unknown reason'}")
        else:
            self.state = SessionState.CLOSED

    def _dispatch(self, raw: str) -> None:
        try:
            message = RealtimeMessage.model_validate(json.loads(raw))
        except (ValueError, ValidationError):
            logger.debug(f"Ignoring unreadable realtime message: {raw[:80]}")
            return

        if not message.text:
            return
        if message.message_type == FINAL_TRANSCRIPT:
            self.on_transcript(message.text, True)
        elif message.message_type == PARTIAL_TRANSCRIPT:
            self.on_transcript(message.text, False)

    def _fail(self, message: str) -> None:
        if self._stopping:
            return
        self.state = SessionState.ERROR
        self.error = SocketError(message)
        self.on_error(message)

    async def stop(self) -> None:
        """Terminate the session and release every resource it owns.

        Each teardown step runs even if an earlier one fails.
        """
        if self._stopped:
            return
        self._stopped = True
        self._stopping = True
        logger.info("Stopping realtime session")

        for task in (self._send_task, self._run_task):
            await _cancel(task)

        if self.is_open:
            try:
                await self.socket.send_str(json.dumps({"terminate_session": True}))
            except (ConnectionError, aiohttp.ClientError) as e:
                logger.warning(f"Could not send terminate message: {e}")
        if self.socket is not None:
            try:
                await self.socket.close()
            except (ConnectionError, aiohttp.ClientError, asyncio.TimeoutError) as e:
                logger.warning(f"Error closing realtime socket: {e}")

        if self.capture is not None:
            try:
                self.capture.detach()
            except Exception as e:
                logger.warning(f"Error detaching audio capture: {e}")
            try:
                self.capture.stop_recording()
            except Exception as e:
                logger.warning(f"Error stopping audio capture: {e}")

        if self.http is not None:
            await self.http.close()

        if self.state is not SessionState.ERROR:
            self.state = SessionState.CLOSED
        logger.info(f"Realtime session stopped; {self.frames_sent} frames sent")


async def _cancel(task: Optional[asyncio.Task]) -> None:
    if task is None or task.done() or task is asyncio.current_task():
        return
    task.cancel()
    try:
        await task
    except asyncio.CancelledError:
        pass
    except Exception as e:
        logger.warning(f"Realtime task ended with error: {e}")


class RealtimeTranscriptionClient:
    """Starts realtime diarization sessions against the provider's socket."""

    def __init__(self,
                 token_provider: Optional[Callable[[], Awaitable[str]]] = None,
                 realtime_url: str = DEFAULT_REALTIME_URL,
                 proxy_base_url: str = "",
                 sample_rate: int = SAMPLE_RATE,
                 capture_factory: CaptureFactory = microphone_capture):
        """Initialize the realtime client.

        Args:
            token_provider: Coroutine function returning a temporary socket token;
                            defaults to the proxy's ``/api/assembly-token``
            realtime_url: Websocket endpoint of the diarization provider
            proxy_base_url: Origin of the token proxy when no provider is given
            sample_rate: Sample rate announced to the socket
            capture_factory: Builds the microphone capture for each session
        """
        if token_provider is None:
            token_provider = DiarizationProxyClient(proxy_base_url).get_realtime_token
        self.token_provider = token_provider
        self.realtime_url = realtime_url
        self.sample_rate = sample_rate
        self.capture_factory = capture_factory

    async def start(self, on_transcript: TranscriptCallback, on_error: ErrorCallback) -> RealtimeSession:
        """Start a session; transcripts and errors arrive through the callbacks.

        Raises:
            ShapeScribeError: If no token could be obtained (``on_error`` is called first)
        """
        try:
            token = await self.token_provider()
        except ShapeScribeError as e:
            on_error(str(e))
            raise

        session = RealtimeSession(
            url=self.realtime_url,
            params={"sample_rate": str(self.sample_rate), "token": token},
            on_transcript=on_transcript,
            on_error=on_error,
            capture_factory=self.capture_factory,
        )
        session.begin()
        return session

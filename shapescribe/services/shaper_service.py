"""Shaper service that drives transcription and transformation for one user session."""

import base64
import functools
import logging
import mimetypes
import uuid
from datetime import datetime
from pathlib import Path
from typing import Callable, List, Optional

from pubsub import pub

from ..config import ShapeScribeConfig
from ..errors import ShapeScribeError
from ..models.audio import AudioStats
from ..models.session import ShapeSession, LiveStatus
from ..models.transcription import DiarizedTranscript, TranscriptEvent
from ..models.transform import OutputFormat, SummaryLength, TransformOptions
from ..storage.output_writer import OutputWriter
from ..transcription.batch import BatchTranscriptionClient, PollPolicy
from ..transcription.formatting import format_diarized_transcript
from ..transcription.publisher import TranscriptPublisher, REALTIME_TOPIC
from ..transcription.realtime import (
    RealtimeSession,
    RealtimeTranscriptionClient,
    DEFAULT_REALTIME_URL,
    microphone_capture,
)
from ..transformation.gemini import GeminiEngine, DEFAULT_MODEL, DEFAULT_BASE_URL
from ..transformation.prompts import SAMPLE_TEXT
from ..transformation.transformer import ContentTransformer

logger = logging.getLogger(__name__)

TRANSFORM_FAILED = "Failed to transform content."


class ShaperService:
    """Holds the working transcript and output, and runs the remote clients on demand.

    Clients are built from configuration the first time they are needed;
    tests and embedders may pass their own instead.
    """

    def __init__(self,
                 config: ShapeScribeConfig,
                 transformer: Optional[ContentTransformer] = None,
                 batch_client: Optional[BatchTranscriptionClient] = None,
                 realtime_client: Optional[RealtimeTranscriptionClient] = None,
                 output_writer: Optional[OutputWriter] = None,
                 topic: str = REALTIME_TOPIC):
        """Initialize shaper service.

        Args:
            config: Application configuration
            transformer: Content transformer; built from the Gemini settings if omitted
            batch_client: Batch diarization client; built from the proxy settings if omitted
            realtime_client: Realtime diarization client; built from the proxy settings if omitted
            output_writer: Artifact writer; targets the configured output directory if omitted
            topic: Pub/sub topic carrying realtime transcript events
        """
        self.config = config
        self.topic = topic
        self._transformer = transformer
        self._batch_client = batch_client
        self._realtime_client = realtime_client
        self._output_writer = output_writer

        self.transcript = ""
        self.output = ""
        self.output_format = OutputFormat(config.get('transform.format', OutputFormat.EMAIL.value))
        self.options = TransformOptions(
            summary_length=SummaryLength(config.get('transform.summary_length', SummaryLength.MEDIUM.value)),
            tone=config.get('transform.tone', 'professional'),
            language=config.get('transform.language', 'en'),
            style_guide=config.get('transform.style_guide') or None,
        )
        self.history: List[ShapeSession] = []
        self.last_error: Optional[str] = None

        self.live_session: Optional[RealtimeSession] = None
        self.live_status = LiveStatus()
        self.recording_stats: Optional[AudioStats] = None
        self.publisher = TranscriptPublisher(topic)

        logger.info(f"ShaperService initialized (format={self.output_format.value})")

    # Working transcript

    def load_text(self, text: str) -> None:
        self.transcript = text
        logger.debug(f"Loaded transcript: {self.word_count} words")

    def load_sample(self) -> None:
        """Load the built-in sample text to try the tool."""
        self.load_text(SAMPLE_TEXT)

    def clear(self) -> None:
        self.transcript = ""
        self.output = ""
        self.last_error = None

    @property
    def word_count(self) -> int:
        return len(self.transcript.split())

    def set_format(self, output_format: OutputFormat) -> None:
        self.output_format = output_format

    def update_options(self, **changes) -> TransformOptions:
        """Replace selected transform options, keeping the rest."""
        for name, value in changes.items():
            if not hasattr(self.options, name):
                raise ValueError(f"Unknown transform option: {name}")
            setattr(self.options, name, value)
        return self.options

    # Transcription

    async def transcribe_file(self, audio_path: str, on_progress: Optional[Callable[[str], None]] = None) -> DiarizedTranscript:
        """Diarize an audio file and make the speaker-labelled text the working transcript.

        The working transcript is left untouched when the job fails.
        """
        result = await self._get_batch_client().transcribe_with_diarization(audio_path, on_progress)
        if result.is_error:
            self.last_error = result.error
            logger.error(f"Diarization failed for {audio_path}: {result.error}")
        else:
            self.load_text(format_diarized_transcript(result))
        return result

    async def dictate_file(self, audio_path: str, mime_type: Optional[str] = None) -> str:
        """Transcribe an audio file in one request to the generative model."""
        path = Path(audio_path)
        if mime_type is None:
            mime_type = mimetypes.guess_type(path.name)[0] or "audio/wav"
        data = base64.b64encode(path.read_bytes()).decode("ascii")

        logger.info(f"Dictating {path.name} ({mime_type})")
        text = await self._get_transformer().transcribe_audio(data, mime_type)
        self.load_text(text)
        return text

    # Transformation

    async def transform(self, on_fragment: Optional[Callable[[str], None]] = None) -> str:
        """Transform the working transcript with the current format and options.

        Args:
            on_fragment: Receives each streamed fragment as it arrives

        Returns:
            The full transformed text
        """
        if not self.transcript:
            raise ValueError("Nothing to transform: the transcript is empty")

        self.output = ""
        self.last_error = None
        try:
            async for fragment in self._get_transformer().transform_stream(
                    self.transcript, self.output_format, self.options):
                self.output += fragment
                if on_fragment:
                    on_fragment(fragment)
        except ShapeScribeError as e:
            self.last_error = TRANSFORM_FAILED
            logger.error(f"Transform failed: {e}")
            raise

        self.history.append(ShapeSession(
            session_id=uuid.uuid4().hex,
            timestamp=datetime.now(),
            transcript=self.transcript,
            output=self.output,
            format=self.output_format,
        ))
        return self.output

    async def retransform(self, on_fragment: Optional[Callable[[str], None]] = None) -> Optional[str]:
        """Run the transform again if there is a transcript; no-op otherwise."""
        if not self.transcript:
            return None
        return await self.transform(on_fragment)

    def save_output(self) -> str:
        """Write the current output to a timestamped artifact."""
        if not self.output:
            raise ValueError("No output to save")
        return self._get_output_writer().save_output(self.output, self.output_format)

    # Live transcription

    async def start_live(self, on_error: Optional[Callable[[str], None]] = None) -> RealtimeSession:
        """Start streaming the microphone; final transcripts extend the working transcript."""
        if self.live_session is not None:
            raise RuntimeError("A live session is already running")

        def handle_error(message: str) -> None:
            self.last_error = message
            logger.error(f"Live transcription error: {message}")
            if on_error:
                on_error(message)

        pub.subscribe(self._on_transcript_event, self.topic)
        try:
            self.live_session = await self._get_realtime_client().start(self.publisher.get_callback(), handle_error)
        except ShapeScribeError:
            pub.unsubscribe(self._on_transcript_event, self.topic)
            raise
        self.live_status = LiveStatus(is_recording=True, started_at=datetime.now())
        self.recording_stats = None
        return self.live_session

    async def stop_live(self) -> None:
        """Stop the live session, if any, and release the microphone."""
        session, self.live_session = self.live_session, None
        if session is None:
            return
        try:
            await session.stop()
        finally:
            self.live_status.is_recording = False
            self.live_status.partial_text = ""
            self.recording_stats = session.get_recording_stats()
            try:
                pub.unsubscribe(self._on_transcript_event, self.topic)
            except Exception as e:
                logger.warning(f"Error during unsubscribe: {e}")

    def _on_transcript_event(self, event: TranscriptEvent) -> None:
        if event.is_final:
            self.live_status.final_segments.append(event.text)
            self.live_status.partial_text = ""
            self.transcript = f"{self.transcript}{event.text} "
        else:
            self.live_status.partial_text = event.text

    # Client construction

    def _get_transformer(self) -> ContentTransformer:
        if self._transformer is None:
            engine = GeminiEngine(
                api_key=self.config.get_api_key(),
                model=self.config.get('gemini.model', DEFAULT_MODEL),
                base_url=self.config.get('gemini.base_url', DEFAULT_BASE_URL),
            )
            self._transformer = ContentTransformer(engine)
        return self._transformer

    def _get_batch_client(self) -> BatchTranscriptionClient:
        if self._batch_client is None:
            policy = PollPolicy(
                interval=float(self.config.get('assembly.poll_interval_seconds', 3.0)),
                backoff=float(self.config.get('assembly.poll_backoff', 1.0)),
                max_interval=float(self.config.get('assembly.poll_max_interval_seconds', 3.0)),
                max_duration=self.config.get('assembly.poll_max_duration_seconds'),
            )
            self._batch_client = BatchTranscriptionClient(self._proxy_base_url(), poll_policy=policy)
        return self._batch_client

    def _get_realtime_client(self) -> RealtimeTranscriptionClient:
        if self._realtime_client is None:
            sample_rate = int(self.config.get('audio.sample_rate', 16000))
            self._realtime_client = RealtimeTranscriptionClient(
                token_provider=self._get_batch_client().get_realtime_token,
                realtime_url=self.config.get('assembly.realtime_url', DEFAULT_REALTIME_URL),
                sample_rate=sample_rate,
                capture_factory=functools.partial(
                    microphone_capture,
                    sample_rate=sample_rate,
                    chunk_size=int(self.config.get('audio.chunk_size', 4096)),
                ),
            )
        return self._realtime_client

    def _get_output_writer(self) -> OutputWriter:
        if self._output_writer is None:
            self._output_writer = OutputWriter(self.config.get_output_directory())
        return self._output_writer

    def _proxy_base_url(self) -> str:
        return self.config.get('assembly.proxy_base_url', '')

    async def check_diarization_available(self) -> bool:
        return await self._get_batch_client().check_available()

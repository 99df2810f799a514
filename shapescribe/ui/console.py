"""Console rendering for ShapeScribe commands."""

import logging
from typing import Optional

from pubsub import pub
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from ..models.audio import AudioStats
from ..models.transcription import DiarizedTranscript, TranscriptEvent
from ..transcription.publisher import REALTIME_TOPIC

logger = logging.getLogger(__name__)


class ConsoleView:
    """Prints progress, transcripts and streamed output with rich."""

    def __init__(self, console: Optional[Console] = None, topic: str = REALTIME_TOPIC):
        self.console = console or Console()
        self.topic = topic
        self.subscribed = False

    def progress(self, stage: str) -> None:
        self.console.print(f"⏳ {stage}", style="blue")

    def error(self, message: str) -> None:
        self.console.print(f"❌ {message}", style="bold red", markup=False)

    def info(self, message: str) -> None:
        self.console.print(message, style="green")

    def fragment(self, text: str) -> None:
        """Print one streamed fragment without a line break."""
        self.console.print(text, end="", soft_wrap=True, highlight=False, markup=False)

    def end_stream(self) -> None:
        self.console.print()

    def show_transcript(self, text: str, title: str = "Transcript") -> None:
        words = len(text.split())
        self.console.print(Panel(Text(text), title=title, subtitle=f"{words} WORDS"))

    def show_diarization(self, result: DiarizedTranscript) -> None:
        """Render a diarized transcript as a per-speaker table."""
        if result.is_error:
            self.error(f"Error: {result.error}")
            return
        if not result.utterances:
            self.show_transcript(result.text)
            return

        table = Table(title=f"Speakers: {', '.join(result.speakers)}")
        table.add_column("Speaker", style="bold cyan")
        table.add_column("Start", justify="right")
        table.add_column("Text")
        for u in result.utterances:
            table.add_row(u.speaker, f"{u.start / 1000:.1f}s", Text(u.text))
        self.console.print(table)

    def show_recording_stats(self, stats: AudioStats) -> None:
        """Summarize how much microphone audio a live run captured."""
        seconds = stats.total_chunks * stats.chunk_size / stats.sample_rate
        self.console.print(
            f"🎙️  Recorded {stats.duration_seconds:.1f}s "
            f"({stats.total_chunks} chunks, {seconds:.1f}s of audio at {stats.sample_rate} Hz)",
            style="blue",
        )

    # Live transcript events

    def attach(self) -> None:
        """Subscribe to realtime transcript events."""
        if not self.subscribed:
            pub.subscribe(self._on_transcript_event, self.topic)
            self.subscribed = True

    def detach(self) -> None:
        if self.subscribed:
            try:
                pub.unsubscribe(self._on_transcript_event, self.topic)
            except Exception as e:
                logger.warning(f"Error during unsubscribe: {e}")
            self.subscribed = False

    def _on_transcript_event(self, event: TranscriptEvent) -> None:
        if event.is_final:
            self.console.print(f"📝 {event.text}", markup=False)
        else:
            self.console.print(f"   … {event.text}", style="dim", markup=False)

"""Transcription-related data models."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Iterable, Optional, Tuple


class TranscriptStatus(Enum):
    """Terminal status of a diarization job."""
    COMPLETED = "completed"
    ERROR = "error"


@dataclass(frozen=True)
class Utterance:
    """One speaker turn as returned by the diarization provider."""
    speaker: str
    text: str
    start: int  # milliseconds
    end: int    # milliseconds
    confidence: float = 0.0


@dataclass(frozen=True)
class DiarizedTranscript:
    """Result of a batch diarization job.

    Instances are never mutated. A failed job yields an ``ERROR`` instance
    with no text and no utterances rather than a partial result.
    """
    text: str
    utterances: Tuple[Utterance, ...]
    speakers: Tuple[str, ...]
    status: TranscriptStatus
    error: Optional[str] = None

    @classmethod
    def completed(cls, text: str, utterances: Iterable[Utterance]) -> "DiarizedTranscript":
        """Build a completed transcript, deriving the speaker set.

        Args:
            text: Full transcript text
            utterances: Utterances in provider order (kept as-is)

        Returns:
            Completed DiarizedTranscript
        """
        ordered = tuple(utterances)
        speakers = tuple(sorted({u.speaker for u in ordered}))
        return cls(
            text=text or "",
            utterances=ordered,
            speakers=speakers,
            status=TranscriptStatus.COMPLETED,
        )

    @classmethod
    def failed(cls, message: str) -> "DiarizedTranscript":
        """Build a terminal error transcript carrying ``message``."""
        return cls(
            text="",
            utterances=(),
            speakers=(),
            status=TranscriptStatus.ERROR,
            error=message,
        )

    @property
    def is_error(self) -> bool:
        return self.status is TranscriptStatus.ERROR


@dataclass
class TranscriptEvent:
    """A realtime transcript message relayed from the diarization socket."""
    text: str
    is_final: bool
    timestamp: datetime = field(default_factory=datetime.now)

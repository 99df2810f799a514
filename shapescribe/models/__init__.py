"""Data models for the ShapeScribe application."""

from .transcription import TranscriptStatus, Utterance, DiarizedTranscript, TranscriptEvent
from .audio import AudioStats, EncodedAudio
from .events import AudioEvent
from .session import ShapeSession, LiveStatus
from .transform import OutputFormat, SummaryLength, TransformOptions, TransformRequest

__all__ = [
    "TranscriptStatus",
    "Utterance",
    "DiarizedTranscript",
    "TranscriptEvent",
    "AudioStats",
    "EncodedAudio",
    "AudioEvent",
    "ShapeSession",
    "LiveStatus",
    # Transformation models
    "OutputFormat",
    "SummaryLength",
    "TransformOptions",
    "TransformRequest",
]

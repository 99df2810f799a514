"""Transcription module for ShapeScribe."""

from .base import DiarizationProxyClient
from .batch import BatchTranscriptionClient, PollPolicy
from .realtime import RealtimeTranscriptionClient, RealtimeSession, SessionState
from .formatting import format_diarized_transcript
from .publisher import TranscriptPublisher, REALTIME_TOPIC
from ..models.transcription import DiarizedTranscript, Utterance

__all__ = [
    "DiarizationProxyClient",
    "BatchTranscriptionClient",
    "PollPolicy",
    "RealtimeTranscriptionClient",
    "RealtimeSession",
    "SessionState",
    "format_diarized_transcript",
    "TranscriptPublisher",
    "REALTIME_TOPIC",
    "DiarizedTranscript",
    "Utterance",
]

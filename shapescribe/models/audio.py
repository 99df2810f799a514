"""Audio-related data models."""

from dataclasses import dataclass


@dataclass
class AudioStats:
    """Audio recording statistics."""
    is_recording: bool
    duration_seconds: float
    sample_rate: int
    chunk_size: int
    total_chunks: int


@dataclass(frozen=True)
class EncodedAudio:
    """Base64 PCM payload ready for inline upload."""
    data: str
    mime_type: str

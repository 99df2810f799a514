"""Event models for the capture and transcript pipelines."""

from dataclasses import dataclass
from typing import Optional

import numpy as np


@dataclass
class AudioEvent:
    """A captured audio frame with metadata."""
    chunk_id: str
    samples: np.ndarray  # float32, range [-1, 1]
    timestamp: float  # Unix timestamp when the frame was captured
    sequence_number: int
    sample_rate: int = 16000
    channels: int = 1
    chunk_duration_ms: Optional[int] = None
    final: bool = False  # True for the last frame of a capture

    def __post_init__(self):
        """Calculate frame duration if not provided."""
        if self.chunk_duration_ms is None and self.samples is not None:
            frames = len(self.samples) / max(self.channels, 1)
            self.chunk_duration_ms = int(frames * 1000 / self.sample_rate)

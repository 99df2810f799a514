"""Session-related data models."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from .transform import OutputFormat


@dataclass
class ShapeSession:
    """One transform run kept in the in-process history."""
    session_id: str
    timestamp: datetime
    transcript: str
    output: Optional[str] = None
    format: Optional[OutputFormat] = None


@dataclass
class LiveStatus:
    """Status information for a live transcription run."""
    is_recording: bool = False
    started_at: Optional[datetime] = None
    partial_text: str = ""
    final_segments: list = field(default_factory=list)

    @property
    def duration_seconds(self) -> float:
        if self.started_at is None:
            return 0.0
        return (datetime.now() - self.started_at).total_seconds()

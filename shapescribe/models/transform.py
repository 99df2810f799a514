"""Data models for content transformation requests."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class OutputFormat(Enum):
    """Target shapes a transcript can be transformed into."""
    BEAUTIFY = "BEAUTIFY"
    EMAIL = "EMAIL"
    SUMMARY = "SUMMARY"
    MEETING = "MEETING"
    SOCIAL = "SOCIAL"
    ACTION_ITEMS = "ACTION_ITEMS"
    CUSTOM = "CUSTOM"


class SummaryLength(Enum):
    SHORT = "SHORT"
    MEDIUM = "MEDIUM"
    LONG = "LONG"


@dataclass
class TransformOptions:
    """Style options for a transformation.

    ``tone`` and ``language`` are free-form keys; unknown values fall back to
    the professional tone and English output when the prompt is built.
    """
    summary_length: SummaryLength = SummaryLength.MEDIUM
    tone: str = "professional"
    language: str = "en"
    custom_prompt: Optional[str] = None
    style_guide: Optional[str] = None


@dataclass
class TransformRequest:
    """A single transformation call."""
    text: str
    output_format: OutputFormat
    options: TransformOptions = field(default_factory=TransformOptions)

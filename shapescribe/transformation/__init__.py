"""Content transformation module for ShapeScribe."""

from .gemini import GeminiEngine
from .prompts import build_system_instruction, SAMPLE_TEXT
from .transformer import ContentTransformer, GenerationEngine

__all__ = [
    "GeminiEngine",
    "ContentTransformer",
    "GenerationEngine",
    "build_system_instruction",
    "SAMPLE_TEXT",
]

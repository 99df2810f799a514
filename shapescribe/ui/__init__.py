"""Console user interface for ShapeScribe."""

from .console import ConsoleView

__all__ = [
    "ConsoleView",
]

"""Services layer for ShapeScribe application logic."""

from .shaper_service import ShaperService, TRANSFORM_FAILED

__all__ = [
    "ShaperService",
    "TRANSFORM_FAILED",
]

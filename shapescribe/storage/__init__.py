"""Local storage for output artifacts."""

from .output_writer import OutputWriter, artifact_name

__all__ = ["OutputWriter", "artifact_name"]

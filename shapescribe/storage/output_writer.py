"""Output artifact storage for transformed text."""

import re
import time
import logging
from pathlib import Path
from typing import List, Optional

from ..models.transform import OutputFormat

logger = logging.getLogger(__name__)

ARTIFACT_PREFIX = "shapescribe"
ARTIFACT_PATTERN = re.compile(rf"^{ARTIFACT_PREFIX}-[a-z_]+-(\d+)\.txt$")


def artifact_name(output_format: OutputFormat, timestamp_ms: Optional[int] = None) -> str:
    """Build ``shapescribe-<format>-<epoch ms>.txt`` for an output artifact."""
    if timestamp_ms is None:
        timestamp_ms = int(time.time() * 1000)
    return f"{ARTIFACT_PREFIX}-{output_format.value.lower()}-{timestamp_ms}.txt"


class OutputWriter:
    """Writes transformed output to plain-text files."""

    def __init__(self, output_dir: str = "./output"):
        """Initialize output writer with its target directory.

        Args:
            output_dir: Directory receiving the artifacts; created if missing
        """
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)
        logger.info(f"OutputWriter initialized with output_dir: {self.output_dir}")

    def save_output(self, text: str, output_format: OutputFormat, timestamp_ms: Optional[int] = None) -> str:
        """Save transformed text and return the artifact path.

        Args:
            text: Output text to write
            output_format: Format tag used in the file name
            timestamp_ms: Epoch milliseconds for the name; defaults to now

        Returns:
            Full path to the saved artifact
        """
        path = self.output_dir / artifact_name(output_format, timestamp_ms)
        path.write_text(text, encoding="utf-8")
        logger.info(f"Output saved: {path} ({len(text)} chars)")
        return str(path)

    def list_outputs(self) -> List[str]:
        """List saved artifact file names, oldest first.

        Files that do not follow the artifact naming scheme are ignored.
        """
        artifacts = []
        for path in self.output_dir.glob(f"{ARTIFACT_PREFIX}-*.txt"):
            match = ARTIFACT_PATTERN.match(path.name)
            if match and path.is_file():
                artifacts.append((int(match.group(1)), path.name))
        return [name for _, name in sorted(artifacts)]

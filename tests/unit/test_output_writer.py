"""Unit tests for OutputWriter artifacts."""

from pathlib import Path

import pytest

from shapescribe.models.transform import OutputFormat
from shapescribe.storage.output_writer import OutputWriter, artifact_name


@pytest.mark.unit
class TestOutputWriter:
    """Test cases for saving transformed output."""

    def test_artifact_name(self):
        assert artifact_name(OutputFormat.EMAIL, 1700000000000) == "shapescribe-email-1700000000000.txt"
        assert artifact_name(OutputFormat.ACTION_ITEMS, 5) == "shapescribe-action_items-5.txt"

    def test_artifact_name_defaults_to_now(self):
        name = artifact_name(OutputFormat.SUMMARY)
        assert name.startswith("shapescribe-summary-")
        assert int(name[len("shapescribe-summary-"):-len(".txt")]) > 1_600_000_000_000

    def test_creates_directory(self, temp_data_dir):
        target = Path(temp_data_dir) / "nested" / "out"
        OutputWriter(str(target))
        assert target.is_dir()

    def test_save_output(self, temp_data_dir):
        writer = OutputWriter(temp_data_dir)

        path = writer.save_output("Subject: Hi\n\nHello 👋", OutputFormat.EMAIL, timestamp_ms=42)

        assert Path(path) == Path(temp_data_dir) / "shapescribe-email-42.txt"
        assert Path(path).read_text(encoding="utf-8") == "Subject: Hi\n\nHello 👋"

    def test_list_outputs_oldest_first(self, temp_data_dir):
        writer = OutputWriter(temp_data_dir)
        writer.save_output("b", OutputFormat.SOCIAL, timestamp_ms=200)
        writer.save_output("a", OutputFormat.MEETING, timestamp_ms=100)
        writer.save_output("c", OutputFormat.EMAIL, timestamp_ms=1000)
        (Path(temp_data_dir) / "notes.txt").write_text("unrelated")

        assert writer.list_outputs() == [
            "shapescribe-meeting-100.txt",
            "shapescribe-social-200.txt",
            "shapescribe-email-1000.txt",
        ]

    def test_list_outputs_skips_foreign_names(self, temp_data_dir):
        writer = OutputWriter(temp_data_dir)
        writer.save_output("a", OutputFormat.EMAIL, timestamp_ms=7)
        for stray in ("shapescribe-email-copy.txt", "shapescribe-.txt", "shapescribe-email-12.txt.bak"):
            (Path(temp_data_dir) / stray).write_text("stray")
        (Path(temp_data_dir) / "shapescribe-email-9.txt").mkdir()

        assert writer.list_outputs() == ["shapescribe-email-7.txt"]

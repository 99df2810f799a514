"""Main application entry point for ShapeScribe."""

import sys
import asyncio
import argparse
import logging
from pathlib import Path
from typing import Optional

from .config import ShapeScribeConfig
from .errors import ShapeScribeError
from .models.transform import OutputFormat, SummaryLength
from .services.shaper_service import ShaperService
from .ui.console import ConsoleView

logger = logging.getLogger(__name__)


class App:
    """Wires configuration, the shaper service and the console view for one CLI run."""

    def __init__(self, config_path: Optional[str], log_level: Optional[str] = None):
        self.config = ShapeScribeConfig(config_path)
        level = log_level or self.config.get('logging.level', 'INFO')
        setup_logging(self.config, level)
        self.service = ShaperService(self.config)
        self.view = ConsoleView()

    def apply_options(self, args: argparse.Namespace) -> None:
        """Apply format and style flags on top of the configured defaults."""
        if getattr(args, "format", None):
            self.service.set_format(OutputFormat(args.format))
        changes = {}
        if getattr(args, "length", None):
            changes["summary_length"] = SummaryLength(args.length)
        for name in ("tone", "language", "custom_prompt", "style_guide"):
            value = getattr(args, name, None)
            if value:
                changes[name] = value
        if changes:
            self.service.update_options(**changes)

    async def run(self, args: argparse.Namespace) -> int:
        self.apply_options(args)
        handler = getattr(self, f"cmd_{args.command}")
        return await handler(args)

    async def cmd_transform(self, args: argparse.Namespace) -> int:
        if args.sample:
            self.service.load_sample()
        elif args.file:
            self.service.load_text(Path(args.file).read_text(encoding="utf-8"))
        elif args.text:
            self.service.load_text(args.text)
        else:
            self.service.load_text(sys.stdin.read())
        return await self._transform_and_save(args)

    async def cmd_transcribe(self, args: argparse.Namespace) -> int:
        result = await self.service.transcribe_file(args.audio, self.view.progress)
        self.view.show_diarization(result)
        if result.is_error:
            return 1
        if args.transform:
            return await self._transform_and_save(args)
        return 0

    async def cmd_dictate(self, args: argparse.Namespace) -> int:
        text = await self.service.dictate_file(args.audio, args.mime_type)
        self.view.show_transcript(text)
        if args.transform:
            return await self._transform_and_save(args)
        return 0

    async def cmd_live(self, args: argparse.Namespace) -> int:
        self.view.attach()
        self.view.info("🎙️  Listening... press Ctrl+C to stop")
        try:
            await self.service.start_live(on_error=self.view.error)
            if args.duration:
                await asyncio.sleep(args.duration)
            else:
                await asyncio.Event().wait()
        except asyncio.CancelledError:
            # Ctrl+C cancels the main task; finish with the transcript so far
            logger.info("Live transcription interrupted")
        finally:
            await self.service.stop_live()
            self.view.detach()

        if self.service.recording_stats is not None:
            self.view.show_recording_stats(self.service.recording_stats)
        self.view.show_transcript(self.service.transcript.strip())
        if args.transform and self.service.transcript.strip():
            return await self._transform_and_save(args)
        return 0 if self.service.last_error is None else 1

    async def cmd_check(self, args: argparse.Namespace) -> int:
        available = await self.service.check_diarization_available()
        if available:
            self.view.info("✅ Speaker diarization proxy available")
            return 0
        self.view.error("Speaker diarization proxy not available")
        return 1

    async def _transform_and_save(self, args: argparse.Namespace) -> int:
        self.view.progress(f"Transforming to {self.service.output_format.value}...")
        await self.service.transform(self.view.fragment)
        self.view.end_stream()
        if getattr(args, "save", False):
            path = self.service.save_output()
            self.view.info(f"💾 Saved {path}")
        return 0


def setup_logging(config, level: str = "INFO") -> None:
    """Set up logging configuration from YAML config."""
    log_file_path = config.get('logging.file_path', 'data/logs/shapescribe.log')
    console_output = config.get('logging.console_output', True)

    log_dir = Path(log_file_path).parent
    log_dir.mkdir(parents=True, exist_ok=True)

    handlers = []

    # File handler - always write to file
    file_handler = logging.FileHandler(log_file_path)
    file_handler.setLevel(logging.DEBUG)
    file_formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s'
    )
    file_handler.setFormatter(file_formatter)
    handlers.append(file_handler)

    # Console handler - only if enabled in config
    if console_output:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(logging.WARNING)  # Only show warnings and above on console
        console_formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
        console_handler.setFormatter(console_formatter)
        handlers.append(console_handler)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(getattr(logging, level.upper()))
    for handler in handlers:
        root_logger.addHandler(handler)

    logger.info("=" * 50)
    logger.info("ShapeScribe starting up")
    logger.info(f"Log file: {log_file_path}")
    logger.info(f"Log level set to: {level}")
    logger.info("=" * 50)


def _add_style_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--format", choices=[f.value for f in OutputFormat], help="Output format")
    parser.add_argument("--length", choices=[s.value for s in SummaryLength], help="Summary/email length")
    parser.add_argument("--tone", help="Tone key: professional, casual or friendly")
    parser.add_argument("--language", help="Output language key: en, zh, ms or ta")
    parser.add_argument("--prompt", dest="custom_prompt", help="Instruction used by the CUSTOM format")
    parser.add_argument("--style-guide", dest="style_guide", help="Extra writing style rules")
    parser.add_argument("--save", action="store_true", help="Save the output to a timestamped file")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="ShapeScribe - Speak it. Shape it.",
    )
    parser.add_argument(
        "--config",
        type=str,
        help="Path to configuration YAML file (default: shapescribe.yaml)"
    )
    parser.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Override the configured logging level"
    )
    parser.add_argument("--version", action="version", version="ShapeScribe v0.1.0")

    commands = parser.add_subparsers(dest="command", required=True)

    transform = commands.add_parser("transform", help="Transform text into a target format")
    source = transform.add_mutually_exclusive_group()
    source.add_argument("--file", help="Read the transcript from a text file")
    source.add_argument("--text", help="Transcript text")
    source.add_argument("--sample", action="store_true", help="Use the built-in sample text")
    _add_style_arguments(transform)

    transcribe = commands.add_parser("transcribe", help="Diarize an audio file by speaker")
    transcribe.add_argument("audio", help="Audio file to upload")
    transcribe.add_argument("--transform", action="store_true", help="Transform the transcript afterwards")
    _add_style_arguments(transcribe)

    dictate = commands.add_parser("dictate", help="Transcribe an audio file with the generative model")
    dictate.add_argument("audio", help="Audio file to transcribe")
    dictate.add_argument("--mime-type", dest="mime_type", help="Override the detected MIME type")
    dictate.add_argument("--transform", action="store_true", help="Transform the transcript afterwards")
    _add_style_arguments(dictate)

    live = commands.add_parser("live", help="Stream the microphone for realtime transcription")
    live.add_argument("--duration", type=int, default=0, help="Seconds to record (default: until Ctrl+C)")
    live.add_argument("--transform", action="store_true", help="Transform the transcript afterwards")
    _add_style_arguments(live)

    commands.add_parser("check", help="Check whether the diarization proxy is available")
    return parser


def main() -> None:
    """Main entry point for ShapeScribe."""
    args = build_parser().parse_args()

    try:
        app = App(args.config, args.log_level)
        exit_code = asyncio.run(app.run(args))
    except KeyboardInterrupt:
        print("\n👋 Goodbye!")
        exit_code = 0
    except (ShapeScribeError, ValueError, FileNotFoundError) as e:
        print(f"❌ Error: {e}")
        logging.error(f"Application error: {e}")
        exit_code = 1
    sys.exit(exit_code)


if __name__ == "__main__":
    main()

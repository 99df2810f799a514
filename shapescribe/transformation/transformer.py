"""Reshapes transcripts into target formats with a generative text engine."""

import logging
from typing import AsyncIterator, Optional, Protocol

from ..models.transform import OutputFormat, TransformOptions, TransformRequest
from .gemini import GeminiEngine, inline_audio_part, text_part
from .prompts import TRANSCRIBE_INSTRUCTION, build_system_instruction

logger = logging.getLogger(__name__)

TRANSCRIPTION_FALLBACK = "Transcription failed."


class GenerationEngine(Protocol):
    """Protocol for engines that can generate text from content parts."""

    async def generate_content(self, parts: list, system_instruction: Optional[str] = None) -> str:
        ...

    def stream_generate_content(self, parts: list, system_instruction: Optional[str] = None) -> AsyncIterator[str]:
        ...


class ContentTransformer:
    """Transforms transcripts into emails, summaries, meeting notes and more."""

    def __init__(self, engine: GenerationEngine):
        """Initialize content transformer.

        Args:
            engine: Generation engine that implements the GenerationEngine protocol
        """
        self.engine = engine
        logger.info("ContentTransformer initialized")

    @classmethod
    def from_api_key(cls, api_key: str, **engine_kwargs) -> "ContentTransformer":
        return cls(GeminiEngine(api_key, **engine_kwargs))

    async def transform_stream(
        self,
        text: str,
        output_format: OutputFormat,
        options: Optional[TransformOptions] = None,
    ) -> AsyncIterator[str]:
        """Stream the transformed text as provider fragments.

        The iterator is single-pass and finite; concatenating every fragment
        in order yields the full output. Errors end the stream and propagate.

        Args:
            text: Transcript to transform
            output_format: Target shape
            options: Tone, language, length and style options

        Yields:
            Text fragments in arrival order
        """
        request = TransformRequest(text=text, output_format=output_format, options=options or TransformOptions())
        system_instruction = build_system_instruction(request.output_format, request.options)
        logger.info(f"Transforming {len(text)} chars to {output_format.value} "
                    f"(tone={request.options.tone}, language={request.options.language})")

        async for fragment in self.engine.stream_generate_content([text_part(request.text)], system_instruction):
            yield fragment

    async def transform(
        self,
        text: str,
        output_format: OutputFormat,
        options: Optional[TransformOptions] = None,
    ) -> str:
        """Run a transformation to completion and return the full text."""
        fragments = []
        async for fragment in self.transform_stream(text, output_format, options):
            fragments.append(fragment)
        return "".join(fragments)

    async def transcribe_audio(self, data: str, mime_type: str) -> str:
        """Transcribe inline base64 audio word for word.

        Returns:
            Transcript text, or a fallback string when the provider returns none
        """
        parts = [inline_audio_part(data, mime_type), text_part(TRANSCRIBE_INSTRUCTION)]
        text = await self.engine.generate_content(parts)
        return text or TRANSCRIPTION_FALLBACK

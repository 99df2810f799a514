"""Plain-text rendering of diarized transcripts."""

from ..models.transcription import DiarizedTranscript


def format_diarized_transcript(result: DiarizedTranscript) -> str:
    """Render a transcript as ``Speaker <label>: <text>`` blocks.

    Error transcripts render their message, and transcripts without
    utterances fall back to the raw full text.
    """
    if result.is_error:
        return f"Error: {result.error}"

    if not result.utterances:
        return result.text

    return "\n\n".join(f"Speaker {u.speaker}: {u.text}" for u in result.utterances)

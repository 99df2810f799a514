"""ShapeScribe - speak it, shape it.

Transcribes speech (batch diarization, live streaming or single-shot
generative transcription) and reshapes the text into emails, summaries,
meeting notes and other formats.
"""

__version__ = "0.1.0"

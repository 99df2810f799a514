"""Exception types raised by ShapeScribe clients."""


class ShapeScribeError(Exception):
    """Base class for all ShapeScribe failures."""


class NetworkError(ShapeScribeError):
    """Transport-level failure talking to a remote service."""


class UploadError(ShapeScribeError):
    """The diarization proxy rejected an audio upload."""


class JobStartError(ShapeScribeError):
    """The diarization proxy refused to start a transcription job."""


class TranscriptionError(ShapeScribeError):
    """The remote transcription job reported a failure."""


class PollTimeoutError(TranscriptionError):
    """A transcription job did not reach a terminal status in time."""


class TokenError(ShapeScribeError):
    """A realtime session token could not be issued."""


class MicrophoneAccessError(ShapeScribeError):
    """The microphone could not be opened."""


class SocketError(ShapeScribeError):
    """The realtime socket failed or closed abnormally."""


class ProviderError(ShapeScribeError):
    """The generative text provider returned a non-success response."""

    def __init__(self, message: str, status: int = 0):
        super().__init__(message)
        self.status = status


class StreamError(ShapeScribeError):
    """A streaming generation was interrupted mid-flight."""

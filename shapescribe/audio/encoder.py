"""PCM encoding for captured audio.

Captured audio arrives as float32 samples in [-1, 1]. Both the inline upload
payload and the realtime socket frames expect 16-bit signed little-endian PCM
at 16 kHz mono, base64 encoded.
"""

import base64
from typing import Sequence, Union

import numpy as np

from ..models.audio import EncodedAudio

SAMPLE_RATE = 16000
PCM_MIME_TYPE = f"audio/pcm;rate={SAMPLE_RATE}"

# Positive full scale; -1.0 maps to -32767 so the range stays symmetric.
_INT16_SCALE = 32767

Samples = Union[np.ndarray, Sequence[float]]


def float_to_pcm16(samples: Samples) -> bytes:
    """Convert float samples to 16-bit little-endian PCM bytes.

    Args:
        samples: Float samples, nominally in [-1, 1]; out-of-range values are clamped

    Returns:
        Raw PCM bytes, two per sample
    """
    # Scaled in float64; truncation is the only rounding step
    data = np.asarray(samples, dtype=np.float64)
    if data.size == 0:
        return b""
    clamped = np.clip(data, -1.0, 1.0)
    # astype truncates toward zero
    pcm = (clamped * _INT16_SCALE).astype("<i2")
    return pcm.tobytes()


def encode_frame(samples: Samples) -> str:
    """Encode one captured frame as a base64 PCM string for the realtime socket."""
    return base64.b64encode(float_to_pcm16(samples)).decode("ascii")


def create_pcm_blob(samples: Samples) -> EncodedAudio:
    """Build an inline audio payload from a float sample buffer.

    Args:
        samples: Float32 samples captured at 16 kHz mono

    Returns:
        EncodedAudio with base64 data and the PCM MIME type
    """
    return EncodedAudio(data=encode_frame(samples), mime_type=PCM_MIME_TYPE)


def decode_pcm16(data: str) -> np.ndarray:
    """Decode a base64 PCM payload back to int16 samples."""
    raw = base64.b64decode(data)
    return np.frombuffer(raw, dtype="<i2")

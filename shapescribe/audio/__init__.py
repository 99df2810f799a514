"""Audio capture and encoding module.

``capture`` needs PyAudio and is imported explicitly by its users.
"""

from .encoder import SAMPLE_RATE, PCM_MIME_TYPE, float_to_pcm16, encode_frame, create_pcm_blob

__all__ = [
    'SAMPLE_RATE',
    'PCM_MIME_TYPE',
    'float_to_pcm16',
    'encode_frame',
    'create_pcm_blob',
]

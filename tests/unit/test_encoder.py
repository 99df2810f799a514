"""Unit tests for PCM encoding of captured audio."""

import base64

import numpy as np
import pytest

from shapescribe.audio.encoder import (
    PCM_MIME_TYPE,
    create_pcm_blob,
    decode_pcm16,
    encode_frame,
    float_to_pcm16,
)


@pytest.mark.unit
class TestFloatToPcm16:
    """Test cases for float32 to 16-bit PCM conversion."""

    def test_empty_buffer(self):
        assert float_to_pcm16(np.array([], dtype=np.float32)) == b""
        assert encode_frame([]) == ""

    def test_full_scale_values(self):
        pcm = np.frombuffer(float_to_pcm16([1.0, -1.0, 0.0]), dtype="<i2")
        assert pcm.tolist() == [32767, -32767, 0]

    def test_out_of_range_values_are_clamped(self):
        pcm = np.frombuffer(float_to_pcm16([2.5, -7.0]), dtype="<i2")
        assert pcm.tolist() == [32767, -32767]

    def test_truncates_toward_zero(self):
        pcm = np.frombuffer(float_to_pcm16([0.5, -0.5]), dtype="<i2")
        assert pcm.tolist() == [16383, -16383]

    def test_little_endian_byte_order(self):
        assert float_to_pcm16([1.0]) == b"\xff\x7f"

    def test_two_bytes_per_sample_for_large_buffer(self):
        samples = np.zeros(10 ** 6, dtype=np.float32)
        assert len(float_to_pcm16(samples)) == 2 * 10 ** 6

    def test_within_one_step_of_exact_value(self, sample_float_frame):
        pcm = np.frombuffer(float_to_pcm16(sample_float_frame), dtype="<i2").astype(np.int32)
        expected = sample_float_frame.astype(np.float64) * 32767
        assert np.all(np.abs(pcm - expected) < 1.01)


@pytest.mark.unit
class TestBlobs:
    """Test cases for base64 payload helpers."""

    def test_create_pcm_blob(self, sample_float_frame):
        blob = create_pcm_blob(sample_float_frame)

        assert blob.mime_type == PCM_MIME_TYPE == "audio/pcm;rate=16000"
        assert len(base64.b64decode(blob.data)) == 2 * len(sample_float_frame)

    def test_encode_frame_matches_raw_bytes(self):
        raw = float_to_pcm16([0.25, -0.25])
        assert base64.b64decode(encode_frame([0.25, -0.25])) == raw

    def test_decode_pcm16(self):
        decoded = decode_pcm16(encode_frame([1.0, 0.0, -1.0]))
        assert decoded.tolist() == [32767, 0, -32767]

    def test_random_million_sample_buffer_round_trips_within_one_step(self):
        samples = np.random.default_rng(20240607).uniform(-1.5, 1.5, 10 ** 6)

        decoded = decode_pcm16(create_pcm_blob(samples).data)

        assert len(decoded) == 10 ** 6
        expected = np.clip(samples, -1.0, 1.0) * 32767
        assert np.all(np.abs(decoded.astype(np.float64) - expected) <= 1)
        assert decoded.min() == -32767
        assert decoded.max() == 32767

"""
VoxAnalysis v1 Pipeline Tests

Coverage:
- End-to-end results for known inputs
- Serialized record shape and field names
- Determinism: repeated runs, parallel vs sequential
- Error taxonomy: envelope, container, empty audio
- Base64 envelope entrypoint
"""

import base64

import numpy as np
import pytest

from voxanalysis import (
    AnalysisConfig,
    AnalysisError,
    EmptyAudioError,
    EnvelopeError,
    UnsupportedContainerError,
    analyze_base64,
    analyze_bytes,
)
from voxanalysis.audio import compute_sha256
from voxanalysis.pipeline import STAGE_NAMES
from voxanalysis.result import RESULT_FIELDS
from voxanalysis.utils import encode_envelope, serialize_json
from tests.conftest import SR, constant, tone, wav_bytes


# =============================================================================
# Test: End-to-End Results
# =============================================================================


class TestAnalyzeBytes:

    def test_stage_order(self):
        assert STAGE_NAMES == ["decode", "fingerprint", "statistics", "waveform"]

    def test_tone_metadata(self, tone_wav):
        result = analyze_bytes(tone_wav)
        assert result.metadata.sample_rate == SR
        assert result.metadata.channels == 1
        assert result.metadata.bits_per_sample == 16
        assert result.metadata.duration_seconds == pytest.approx(1.0)
        assert result.metadata.file_hash == compute_sha256(tone_wav)

    def test_tone_statistics(self, tone_wav):
        result = analyze_bytes(tone_wav)
        assert result.rms_level == pytest.approx(0.5 / np.sqrt(2), rel=1e-3)
        assert result.peak_amplitude == pytest.approx(0.5, rel=1e-3)
        assert result.rms_level <= result.peak_amplitude
        assert 0.0 <= result.silence_ratio <= 1.0
        assert len(result.waveform_data) == 500
        assert result.dropped_samples == 0

    def test_silent_input(self, silent_wav):
        result = analyze_bytes(silent_wav)
        assert result.rms_level == pytest.approx(0.0)
        assert result.peak_amplitude == pytest.approx(0.0)
        assert result.silence_ratio == pytest.approx(1.0)
        assert result.splice_timestamps == ()

    def test_step_input_flags_boundary(self, step_wav):
        result = analyze_bytes(step_wav)
        assert result.metadata.duration_seconds == pytest.approx(2.0)
        assert any(abs(t - 1.0) <= 0.01 for t in result.splice_timestamps)

    def test_uniform_input_not_flagged(self):
        result = analyze_bytes(wav_bytes(constant(0.5, 2.0)))
        assert result.splice_timestamps == ()

    def test_stereo_duration_counts_frames(self):
        frames = np.column_stack([constant(0.25, 0.5), constant(-0.25, 0.5)])
        result = analyze_bytes(wav_bytes(frames))
        assert result.metadata.channels == 2
        assert result.metadata.duration_seconds == pytest.approx(0.5)

    def test_short_input_waveform_is_verbatim(self):
        values = np.array([0.25, -0.5, 0.125])
        result = analyze_bytes(wav_bytes(values, subtype="DOUBLE"))
        assert list(result.waveform_data) == [0.25, -0.5, 0.125]

    def test_custom_waveform_points(self, tone_wav):
        result = analyze_bytes(tone_wav, AnalysisConfig(waveform_points=64))
        assert len(result.waveform_data) == 64

    def test_dropped_samples_reported(self):
        values = np.array([0.1, np.nan, 0.2], dtype=np.float64)
        result = analyze_bytes(wav_bytes(values, subtype="DOUBLE"))
        assert result.dropped_samples == 1
        assert result.metadata.duration_seconds == pytest.approx(2 / SR)


# =============================================================================
# Test: Serialized Record
# =============================================================================


class TestSerializedRecord:

    def test_field_names(self, tone_wav):
        record = analyze_bytes(tone_wav).to_dict()
        assert tuple(record) == RESULT_FIELDS

    def test_field_types(self, step_wav):
        record = analyze_bytes(step_wav).to_dict()
        assert isinstance(record["duration_seconds"], float)
        assert isinstance(record["sample_rate"], int)
        assert isinstance(record["channels"], int)
        assert isinstance(record["bits_per_sample"], int)
        assert isinstance(record["file_hash"], str)
        assert isinstance(record["splice_timestamps"], list)
        assert isinstance(record["waveform_data"], list)
        assert all(isinstance(t, float) for t in record["splice_timestamps"])

    def test_dropped_samples_not_serialized(self, tone_wav):
        assert "dropped_samples" not in analyze_bytes(tone_wav).to_dict()


# =============================================================================
# Test: Determinism
# =============================================================================


class TestDeterminism:

    def test_repeated_runs_identical(self, step_wav):
        first = serialize_json(analyze_bytes(step_wav).to_dict())
        second = serialize_json(analyze_bytes(step_wav).to_dict())
        assert first == second

    def test_parallel_matches_sequential(self, tone_wav):
        parallel = analyze_bytes(tone_wav, AnalysisConfig(parallel=True))
        sequential = analyze_bytes(tone_wav, AnalysisConfig(parallel=False))
        assert parallel == sequential

    def test_base64_matches_bytes(self, tone_wav):
        assert analyze_base64(encode_envelope(tone_wav)) == analyze_bytes(tone_wav)


# =============================================================================
# Test: Error Taxonomy
# =============================================================================


class TestErrors:

    def test_random_bytes_unsupported(self):
        rng = np.random.default_rng(7)
        data = rng.integers(0, 256, size=2048, dtype=np.uint8).tobytes()
        with pytest.raises(UnsupportedContainerError):
            analyze_bytes(data)

    def test_random_bytes_as_envelope(self):
        rng = np.random.default_rng(7)
        data = rng.integers(128, 256, size=2048, dtype=np.uint8).tobytes()
        with pytest.raises(EnvelopeError):
            analyze_base64(data)

    def test_malformed_envelope(self):
        with pytest.raises(EnvelopeError, match="base64"):
            analyze_base64("not*base64!")

    def test_non_ascii_envelope(self):
        with pytest.raises(EnvelopeError):
            analyze_base64("ñandú")

    def test_valid_envelope_non_wav(self):
        with pytest.raises(UnsupportedContainerError):
            analyze_base64(base64.b64encode(b"hello world").decode())

    def test_wrapped_envelope_accepted(self, tone_wav):
        text = encode_envelope(tone_wav)
        wrapped = "\n".join(text[i:i + 76] for i in range(0, len(text), 76))
        assert analyze_base64(wrapped) == analyze_bytes(tone_wav)

    def test_empty_audio(self):
        with pytest.raises(EmptyAudioError):
            analyze_bytes(wav_bytes(np.zeros(0), subtype="PCM_16"))

    def test_errors_share_base_class(self):
        for cls in (EnvelopeError, UnsupportedContainerError, EmptyAudioError):
            assert issubclass(cls, AnalysisError)

    def test_error_to_dict(self):
        with pytest.raises(UnsupportedContainerError) as exc_info:
            analyze_bytes(b"OggS" + b"\x00" * 60)
        error = exc_info.value.to_dict()
        assert error["code"] == "CONTAINER_UNSUPPORTED"
        assert error["stage"] == "decode"
        assert "Only WAV" in error["message"]

    def test_envelope_error_has_no_stage(self):
        with pytest.raises(EnvelopeError) as exc_info:
            analyze_base64("%%%")
        assert "stage" not in exc_info.value.to_dict()


# =============================================================================
# Test: Properties over generated inputs
# =============================================================================


@pytest.mark.parametrize("amplitude", [0.0, 0.005, 0.3, 0.99])
@pytest.mark.parametrize("subtype", ["PCM_16", "FLOAT"])
def test_result_bounds(amplitude, subtype):
    result = analyze_bytes(wav_bytes(tone(amplitude=amplitude, duration_sec=0.25), subtype=subtype))
    assert 0.0 <= result.silence_ratio <= 1.0
    assert result.peak_amplitude >= 0.0
    assert result.rms_level <= result.peak_amplitude
    assert all(0.0 <= v <= result.peak_amplitude for v in result.waveform_data)

"""
VoxAnalysis v1 Result Types.

Responsibilities:
- AudioFormat, AudioMetadata and AnalysisResult value types
- Flat serialization of AnalysisResult for callers

Invariants:
- All types are frozen; sequences are stored as tuples
- Serialized field names and order are fixed
"""

from dataclasses import dataclass
from typing import Any


# Serialized record fields (FIXED ORDER)
RESULT_FIELDS = (
    "duration_seconds",
    "sample_rate",
    "channels",
    "bits_per_sample",
    "file_hash",
    "rms_level",
    "peak_amplitude",
    "silence_ratio",
    "splice_timestamps",
    "waveform_data",
)


@dataclass(frozen=True)
class AudioFormat:
    """Format fields extracted once from the container header."""

    sample_rate: int
    channels: int
    bits_per_sample: int
    sample_encoding: str  # "int" or "float"


@dataclass(frozen=True)
class AudioMetadata:
    duration_seconds: float
    sample_rate: int
    channels: int
    bits_per_sample: int
    file_hash: str

    @classmethod
    def from_format(cls, fmt: AudioFormat, sample_count: int, file_hash: str) -> "AudioMetadata":
        """Derive metadata; duration = sample_count / (sample_rate * channels)."""
        return cls(
            duration_seconds=float(sample_count / (fmt.sample_rate * fmt.channels)),
            sample_rate=fmt.sample_rate,
            channels=fmt.channels,
            bits_per_sample=fmt.bits_per_sample,
            file_hash=file_hash,
        )


@dataclass(frozen=True)
class AnalysisResult:
    """
    Sole externally visible artifact of one analysis run.

    Attributes:
        metadata: Duration, format and content fingerprint
        rms_level: Root-mean-square over the whole sequence
        peak_amplitude: Maximum absolute sample
        silence_ratio: Fraction of near-silent samples, in [0, 1]
        splice_timestamps: Edit-candidate times in seconds, ascending
        waveform_data: Visualization envelope
        dropped_samples: Samples discarded by tolerant decoding (not serialized)
    """

    metadata: AudioMetadata
    rms_level: float
    peak_amplitude: float
    silence_ratio: float
    splice_timestamps: tuple[float, ...]
    waveform_data: tuple[float, ...]
    dropped_samples: int = 0

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the flat caller-facing record."""
        return {
            "duration_seconds": self.metadata.duration_seconds,
            "sample_rate": self.metadata.sample_rate,
            "channels": self.metadata.channels,
            "bits_per_sample": self.metadata.bits_per_sample,
            "file_hash": self.metadata.file_hash,
            "rms_level": self.rms_level,
            "peak_amplitude": self.peak_amplitude,
            "silence_ratio": self.silence_ratio,
            "splice_timestamps": list(self.splice_timestamps),
            "waveform_data": list(self.waveform_data),
        }

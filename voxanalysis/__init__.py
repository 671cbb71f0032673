"""
VoxAnalysis v1 — Local Forensic Audio Analysis Pipeline

Pipeline Stages (fixed groups, joined in order):
    1. decode + fingerprint       (independent, may run concurrently)
    2. statistics + waveform      (independent, may run concurrently)

Invariants:
    - All timestamps are seconds (float)
    - No network or file-system access inside the pipeline
    - Only WAV containers (PCM integer or IEEE float) are decoded
    - Same input bytes + same config = identical output
"""

from voxanalysis.config import AnalysisConfig
from voxanalysis.errors import (
    AnalysisError,
    EmptyAudioError,
    EnvelopeError,
    UnsupportedContainerError,
)
from voxanalysis.pipeline import analyze_base64, analyze_bytes
from voxanalysis.result import AnalysisResult, AudioFormat, AudioMetadata

__version__ = "1.0.0"

__all__ = [
    "AnalysisConfig",
    "AnalysisError",
    "AnalysisResult",
    "AudioFormat",
    "AudioMetadata",
    "EmptyAudioError",
    "EnvelopeError",
    "UnsupportedContainerError",
    "analyze_base64",
    "analyze_bytes",
]

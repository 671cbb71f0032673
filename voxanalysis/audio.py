"""
VoxAnalysis v1 Audio Utilities

Deterministic, CPU-only audio processing primitives.

Library Stack:
    - soundfile: WAV decoding (libsndfile-backed), in-memory only
    - numpy: Array operations
    - hashlib: SHA-256 content fingerprint

INVARIANTS:
    - All operations are deterministic
    - No randomness, seeds, or time-based logic
    - Same input → identical output
    - Samples stay interleaved exactly as stored in the container

ALLOWED PRIMITIVES:
    - WAV decode (PCM 8/16/24/32-bit integer, IEEE float 32/64-bit)
    - RMS, peak absolute value, silence ratio
    - Fixed-window mean absolute amplitude
    - Chunked mean absolute amplitude (waveform envelope)
"""

import hashlib
import io
import logging
import struct
from dataclasses import dataclass

import numpy as np
import soundfile as sf

from voxanalysis.errors import EmptyAudioError, UnsupportedContainerError


logger = logging.getLogger("voxanalysis.audio")


# =============================================================================
# Constants
# =============================================================================

WAV_CONTAINERS = frozenset({"WAV", "WAVEX", "RF64"})

# libsndfile subtype -> (bits per sample, sample encoding)
SUPPORTED_SUBTYPES = {
    "PCM_U8": (8, "int"),
    "PCM_S8": (8, "int"),
    "PCM_16": (16, "int"),
    "PCM_24": (24, "int"),
    "PCM_32": (32, "int"),
    "FLOAT": (32, "float"),
    "DOUBLE": (64, "float"),
}


@dataclass(frozen=True)
class DecodedAudio:
    """Decoder output: header fields plus the interleaved sample sequence."""

    sample_rate: int
    channels: int
    bits_per_sample: int
    sample_encoding: str
    samples: np.ndarray
    dropped_samples: int


# =============================================================================
# Fingerprint
# =============================================================================


def compute_sha256(data: bytes) -> str:
    """Return lowercase hex SHA-256 digest of raw bytes."""
    return hashlib.sha256(data).hexdigest()


# =============================================================================
# WAV Decoding
# =============================================================================


def scan_riff_data_chunk(data: bytes) -> int:
    """
    Walk the RIFF chunk list and return the usable size of the data chunk.

    Args:
        data: Raw container bytes

    Returns:
        Number of data-chunk bytes actually present in the buffer
        (the declared size, clipped to the end of the buffer).

    Raises:
        UnsupportedContainerError: If the RIFF/WAVE header or data chunk is missing
    """
    if len(data) < 12 or data[0:4] not in (b"RIFF", b"RF64") or data[8:12] != b"WAVE":
        raise UnsupportedContainerError("Input is not a WAV container (missing RIFF/WAVE header)")

    offset = 12
    while offset + 8 <= len(data):
        chunk_id = data[offset:offset + 4]
        (chunk_size,) = struct.unpack_from("<I", data, offset + 4)
        body = offset + 8
        if chunk_id == b"data":
            return min(chunk_size, len(data) - body)
        # Chunks are word-aligned
        offset = body + chunk_size + (chunk_size & 1)

    raise UnsupportedContainerError("WAV container has no data chunk")


def decode_wav_bytes(data: bytes) -> DecodedAudio:
    """
    Decode an in-memory WAV container into normalized float64 samples.

    Args:
        data: Raw WAV bytes

    Returns:
        DecodedAudio with interleaved samples in approximately [-1, 1]

    Raises:
        UnsupportedContainerError: Not a WAV, or not a PCM/IEEE-float encoding
        EmptyAudioError: No usable samples remain after tolerant decoding

    Note:
        - Integer samples are divided by 2**(bits-1) (libsndfile's normalized
          read), so the most negative code maps to -1.0 exactly and the most
          positive one to slightly below +1.0.
        - Non-finite float samples and trailing bytes that do not complete a
          frame are dropped and counted instead of failing the decode.
    """
    data_bytes = scan_riff_data_chunk(data)

    try:
        with sf.SoundFile(io.BytesIO(data)) as f:
            container = f.format
            subtype = f.subtype
            sample_rate = int(f.samplerate)
            channels = int(f.channels)
            if container not in WAV_CONTAINERS:
                raise UnsupportedContainerError(f"Unsupported container '{container}'")
            if subtype not in SUPPORTED_SUBTYPES:
                raise UnsupportedContainerError(
                    f"Unsupported WAV sample format '{subtype}'",
                    detail={"subtype": subtype},
                )
            frames = f.read(dtype="float64", always_2d=True)
    except RuntimeError as e:
        # libsndfile rejects malformed headers with LibsndfileError (a RuntimeError)
        raise UnsupportedContainerError(f"Failed to read WAV: {e}") from e

    bits_per_sample, encoding = SUPPORTED_SUBTYPES[subtype]

    # Frames (n, channels) flattened row-major keep the stored interleaving
    samples = frames.reshape(-1)

    # A trailing partial sample still counts as one unparseable sample
    declared = -(-data_bytes // (bits_per_sample // 8))
    truncated = max(0, declared - len(samples))

    finite = np.isfinite(samples)
    non_finite = int(len(samples) - np.count_nonzero(finite))
    if non_finite:
        samples = samples[finite]

    dropped = truncated + non_finite
    if dropped:
        logger.warning(
            "Dropped %d unparseable samples (%d non-finite, %d truncated)",
            dropped, non_finite, truncated,
        )

    if len(samples) == 0:
        raise EmptyAudioError(
            "No audio samples found",
            stage="decode",
            detail={"dropped_samples": dropped},
        )

    samples = np.ascontiguousarray(samples, dtype=np.float64)
    samples.setflags(write=False)

    return DecodedAudio(
        sample_rate=sample_rate,
        channels=channels,
        bits_per_sample=bits_per_sample,
        sample_encoding=encoding,
        samples=samples,
        dropped_samples=dropped,
    )


# =============================================================================
# Metrics Computation
# =============================================================================


def compute_rms(samples: np.ndarray) -> float:
    """Compute RMS of entire signal."""
    if len(samples) == 0:
        return 0.0
    return float(np.sqrt(np.mean(np.square(samples, dtype=np.float64))))


def compute_peak_abs(samples: np.ndarray) -> float:
    """Compute peak absolute value of signal."""
    if len(samples) == 0:
        return 0.0
    return float(np.max(np.abs(samples)))


def compute_silence_ratio(samples: np.ndarray, threshold: float) -> float:
    """
    Fraction of samples whose magnitude is strictly below threshold.

    Returns:
        Ratio in [0.0, 1.0] (count-based, not time-weighted)
    """
    if len(samples) == 0:
        return 0.0
    silent = np.count_nonzero(np.abs(samples) < threshold)
    return float(silent / len(samples))


def compute_window_means(samples: np.ndarray, window: int) -> np.ndarray:
    """
    Mean absolute amplitude of contiguous fixed-size windows.

    Args:
        samples: Input samples (1D)
        window: Window length in samples (>= 1)

    Returns:
        One mean per window; a trailing partial window is averaged over
        the samples it actually holds.

    Note:
        The tail mean is sum / len(tail), not sum / window. With window 3,
        a one-sample tail of 0.8 reads 0.8, not 0.8 / 3.
    """
    mags = np.abs(np.asarray(samples, dtype=np.float64))
    full = len(mags) // window
    means = mags[:full * window].reshape(full, window).mean(axis=1)
    if len(mags) % window:
        means = np.append(means, mags[full * window:].mean())
    return means


# =============================================================================
# Edit-Candidate Detection
# =============================================================================


def detect_edit_candidates(
    samples: np.ndarray,
    sample_rate: int,
    window: int,
    delta_threshold: float,
    energy_floor: float,
) -> list[float]:
    """
    Flag window boundaries where mean amplitude jumps abruptly.

    Args:
        samples: Input samples (1D, interleaved)
        sample_rate: Sample rate in Hz
        window: Window length in samples
        delta_threshold: |after - before| must exceed this
        energy_floor: Window before the boundary must exceed this

    Returns:
        Boundary times in seconds (boundary index / sample_rate), ascending.

    Note:
        Coarse discontinuity heuristic, recall over precision. Natural
        loudness changes will also be flagged.
    """
    if len(samples) < window:
        return []

    means = compute_window_means(samples, window)
    before = means[:-1]
    after = means[1:]

    hits = (np.abs(after - before) > delta_threshold) & (before > energy_floor)

    # Boundary k sits at sample index k * window (k >= 1)
    boundaries = (np.flatnonzero(hits) + 1) * window
    return [float(i / sample_rate) for i in boundaries]


# =============================================================================
# Waveform Envelope
# =============================================================================


def reduce_waveform(samples: np.ndarray, target_points: int) -> list[float]:
    """
    Downsample to a fixed-size mean-absolute-amplitude envelope.

    Args:
        samples: Input samples (1D)
        target_points: Desired number of output points (>= 1)

    Returns:
        - [] for empty input
        - the raw samples verbatim when there are fewer than target_points
        - otherwise exactly target_points chunk means

    Note:
        chunk = n // target_points. Remainder samples are folded into the
        final chunk, so every sample contributes.
    """
    n = len(samples)
    if n == 0:
        return []

    chunk = n // max(target_points, 1)
    if chunk == 0:
        return [float(s) for s in samples]

    mags = np.abs(np.asarray(samples, dtype=np.float64))
    head_len = chunk * (target_points - 1)
    head = mags[:head_len].reshape(target_points - 1, chunk).mean(axis=1)
    tail = mags[head_len:].mean()

    return [float(v) for v in head] + [float(tail)]

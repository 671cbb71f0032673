"""
Stage 1a: Decode

Responsibilities:
    - Validate the RIFF/WAVE container header
    - Reject any sample format other than PCM integer or IEEE float
    - Normalize samples to float in approximately [-1, 1]
    - Count samples dropped by tolerant decoding

Invariants:
    - Leaf stage: knows nothing about the rest of the pipeline
    - Zero usable samples is a hard failure (EmptyAudioError)
"""

import logging

from voxanalysis import audio
from voxanalysis.contracts import Stage, StageContract, StageContext
from voxanalysis.result import AudioFormat


logger = logging.getLogger("voxanalysis.stages.decode")


# =============================================================================
# Stage Contract (LOCKED)
# =============================================================================

CONTRACT = StageContract(
    name="decode",
    requires=frozenset(),  # Raw bytes only
    produces=frozenset({"format", "samples", "dropped_samples"}),
    version="1.0.0",
)


class DecodeStage(Stage):
    """Decode raw WAV bytes into format metadata and a sample sequence."""

    contract = CONTRACT

    def run(self, ctx: StageContext) -> dict:
        decoded = audio.decode_wav_bytes(ctx.raw)

        fmt = AudioFormat(
            sample_rate=decoded.sample_rate,
            channels=decoded.channels,
            bits_per_sample=decoded.bits_per_sample,
            sample_encoding=decoded.sample_encoding,
        )
        logger.debug(
            "Decoded %d samples (%d Hz, %d ch, %d-bit %s)",
            len(decoded.samples), fmt.sample_rate, fmt.channels,
            fmt.bits_per_sample, fmt.sample_encoding,
        )

        return {
            "format": fmt,
            "samples": decoded.samples,
            "dropped_samples": decoded.dropped_samples,
        }


STAGE = DecodeStage()

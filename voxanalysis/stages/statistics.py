"""
Stage 2a: Statistics

Responsibilities:
    - Compute whole-signal descriptors:
        - rms_level: float
        - peak_amplitude: float
        - silence_ratio: float (in [0, 1])
    - Flag edit candidates (splice_timestamps, seconds)

Invariants:
    - Metrics are objective, non-semantic
    - All accumulation in float64, strict threshold comparisons
    - Thresholds come from AnalysisConfig, never hard-coded here
"""

import logging

from voxanalysis import audio
from voxanalysis.contracts import Stage, StageContract, StageContext


logger = logging.getLogger("voxanalysis.stages.statistics")


# =============================================================================
# Stage Contract (LOCKED)
# =============================================================================

CONTRACT = StageContract(
    name="statistics",
    requires=frozenset({"format", "samples"}),
    produces=frozenset({"rms_level", "peak_amplitude", "silence_ratio", "splice_timestamps"}),
    version="1.0.0",
)


class StatisticsStage(Stage):
    """
    Compute scalar descriptors and edit candidates over the full sequence.

    The edit detector steps window-by-window (window = edit_window_ms of
    samples at the declared sample rate) and compares mean absolute
    amplitude on either side of each boundary.
    """

    contract = CONTRACT

    def run(self, ctx: StageContext) -> dict:
        samples = ctx.values["samples"]
        sample_rate = ctx.values["format"].sample_rate
        config = ctx.config

        window = config.window_samples(sample_rate)
        splices = audio.detect_edit_candidates(
            samples,
            sample_rate,
            window=window,
            delta_threshold=config.edit_delta_threshold,
            energy_floor=config.edit_energy_floor,
        )
        logger.debug("Edit detector: window=%d samples, %d candidates", window, len(splices))

        return {
            "rms_level": audio.compute_rms(samples),
            "peak_amplitude": audio.compute_peak_abs(samples),
            "silence_ratio": audio.compute_silence_ratio(samples, config.silence_threshold),
            "splice_timestamps": tuple(splices),
        }


STAGE = StatisticsStage()

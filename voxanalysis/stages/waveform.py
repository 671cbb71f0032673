"""
Stage 2b: Waveform

Reduces the sample sequence to a small envelope for visualization
(AnalysisConfig.waveform_points values, 500 by default).
"""

from voxanalysis import audio
from voxanalysis.contracts import Stage, StageContract, StageContext


CONTRACT = StageContract(
    name="waveform",
    requires=frozenset({"samples"}),
    produces=frozenset({"waveform_data"}),
    version="1.0.0",
)


class WaveformStage(Stage):

    contract = CONTRACT

    def run(self, ctx: StageContext) -> dict:
        envelope = audio.reduce_waveform(ctx.values["samples"], ctx.config.waveform_points)
        return {"waveform_data": tuple(envelope)}


STAGE = WaveformStage()

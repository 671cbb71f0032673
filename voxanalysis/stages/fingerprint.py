"""
Stage 1b: Fingerprint

Computes the SHA-256 content fingerprint of the raw bytes. Independent of
decoding and has no failure path: empty input has a digest too.
"""

from voxanalysis import audio
from voxanalysis.contracts import Stage, StageContract, StageContext


CONTRACT = StageContract(
    name="fingerprint",
    requires=frozenset(),
    produces=frozenset({"file_hash"}),
    version="1.0.0",
)


class FingerprintStage(Stage):

    contract = CONTRACT

    def run(self, ctx: StageContext) -> dict:
        return {"file_hash": audio.compute_sha256(ctx.raw)}


STAGE = FingerprintStage()

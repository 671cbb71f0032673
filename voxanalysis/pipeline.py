"""
VoxAnalysis v1 Pipeline Orchestrator

PIPELINE STAGES (FIXED GROUPS — DO NOT MODIFY):

    Group 1 (raw bytes):
        decode       → voxanalysis.stages.decode
        fingerprint  → voxanalysis.stages.fingerprint
    Group 2 (decoded samples):
        statistics   → voxanalysis.stages.statistics
        waveform     → voxanalysis.stages.waveform

INVARIANTS:
    - Groups execute in order; stages within a group never see each other
    - Stages never call each other (only orchestrator sequences)
    - Each stage module exposes a stateless STAGE instance
    - Pipeline stops on the first failure, raised in declared stage order
    - Same input + same config = identical output, parallel or not
"""

import importlib
import logging
from concurrent.futures import ThreadPoolExecutor
from types import MappingProxyType
from typing import Any

from voxanalysis.config import AnalysisConfig
from voxanalysis.contracts import PIPELINE_VERSION, Stage, StageContext, StageValidator
from voxanalysis.errors import AnalysisError
from voxanalysis.result import AnalysisResult, AudioMetadata
from voxanalysis.utils import decode_envelope


logger = logging.getLogger("voxanalysis.pipeline")


# Stage registry: groups of (name, module_path)
# FROZEN: DO NOT MODIFY ORDER OR NAMES
STAGE_GROUPS = [
    (
        ("decode", "voxanalysis.stages.decode"),
        ("fingerprint", "voxanalysis.stages.fingerprint"),
    ),
    (
        ("statistics", "voxanalysis.stages.statistics"),
        ("waveform", "voxanalysis.stages.waveform"),
    ),
]

STAGE_NAMES = [name for group in STAGE_GROUPS for name, _ in group]


def load_stage(module_path: str) -> Stage:
    """Import a stage module and return its STAGE instance."""
    module = importlib.import_module(module_path)
    return module.STAGE


def _run_group(stages: list[Stage], ctx: StageContext) -> list[dict[str, Any]]:
    """
    Run independent stages over the same context.

    Results (and the first exception) come back in declared order,
    regardless of completion order.
    """
    if not ctx.config.parallel or len(stages) < 2:
        return [stage.run(ctx) for stage in stages]

    with ThreadPoolExecutor(max_workers=len(stages)) as executor:
        futures = [executor.submit(stage.run, ctx) for stage in stages]
        return [future.result() for future in futures]


def run_stages(raw: bytes, config: AnalysisConfig) -> dict[str, Any]:
    """
    Execute all stage groups in order and return every produced value.

    Raises:
        AnalysisError: On the first stage failure
        ValidationError: If stage wiring violates a contract
    """
    validator = StageValidator()
    values: dict[str, Any] = {}

    for group in STAGE_GROUPS:
        stages = [load_stage(module_path) for _, module_path in group]
        ctx = StageContext(
            raw=raw,
            config=config,
            values=MappingProxyType(dict(values)),
            pipeline_version=PIPELINE_VERSION,
        )

        for stage in stages:
            validator.validate(stage.contract, ctx.values)

        outputs = _run_group(stages, ctx)

        for stage, produced in zip(stages, outputs):
            validator.validate_outputs(stage.contract, produced)
            values.update(produced)

    return values


def analyze_bytes(raw: bytes, config: AnalysisConfig | None = None) -> AnalysisResult:
    """
    Run the full local analysis over raw audio bytes.

    Args:
        raw: Encoded WAV container bytes
        config: Analysis parameters (defaults if None)

    Returns:
        AnalysisResult for this input.

    Raises:
        UnsupportedContainerError: Input is not a supported WAV
        EmptyAudioError: No usable samples
    """
    config = config or AnalysisConfig()
    logger.debug("Analyzing %d bytes (pipeline %s)", len(raw), PIPELINE_VERSION)

    try:
        values = run_stages(bytes(raw), config)
    except AnalysisError as e:
        logger.info("Analysis failed [%s]: %s", e.code, e.message)
        raise

    samples = values["samples"]
    metadata = AudioMetadata.from_format(values["format"], len(samples), values["file_hash"])

    return AnalysisResult(
        metadata=metadata,
        rms_level=values["rms_level"],
        peak_amplitude=values["peak_amplitude"],
        silence_ratio=values["silence_ratio"],
        splice_timestamps=values["splice_timestamps"],
        waveform_data=values["waveform_data"],
        dropped_samples=values["dropped_samples"],
    )


def analyze_base64(text: str | bytes, config: AnalysisConfig | None = None) -> AnalysisResult:
    """
    Decode a base64 envelope and analyze the contained audio.

    Raises:
        EnvelopeError: Envelope is not valid base64
        UnsupportedContainerError, EmptyAudioError: As analyze_bytes
    """
    try:
        raw = decode_envelope(text)
    except AnalysisError as e:
        logger.info("Analysis failed [%s]: %s", e.code, e.message)
        raise
    return analyze_bytes(raw, config)

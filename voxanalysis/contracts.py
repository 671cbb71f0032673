"""
VoxAnalysis v1 Stage Contracts

Formal stage contracts, centralized validation, and immutable context.

This module provides:
- StageContract: Frozen, declarative contract for a stage
- StageContext: Immutable execution context snapshot
- Stage: Abstract base class for all stages
- StageValidator: Centralized input/output validation
- ValidationError: Structured validation failure

INVARIANTS:
- Contracts are frozen and immutable
- Validation happens before and after stage execution
- Stages do NOT validate their own wiring
- Stages do NOT mutate context
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Mapping

from voxanalysis.config import AnalysisConfig


# =============================================================================
# StageContract — Frozen, Declarative
# =============================================================================


@dataclass(frozen=True)
class StageContract:
    """
    Frozen contract declaring what a stage requires and produces.

    Attributes:
        name: Stage identifier (e.g., "decode", "statistics")
        requires: Value names required to run (e.g., {"samples"})
        produces: Value names this stage creates (e.g., {"waveform_data"})
        version: Semantic version for reproducibility (e.g., "1.0.0")

    Rules:
        - No behavior, no mutation
        - One contract per stage
        - Hashable for use in sets/dicts
    """
    name: str
    requires: frozenset[str]
    produces: frozenset[str]
    version: str


# =============================================================================
# StageContext — Immutable Execution Snapshot
# =============================================================================


@dataclass(frozen=True)
class StageContext:
    """
    Immutable snapshot of execution context passed to stages.

    Attributes:
        raw: Raw audio bytes for this invocation
        config: Analysis parameters
        values: Read-only mapping of values produced by earlier groups
        pipeline_version: Version of the pipeline for reproducibility

    Rules:
        - Constructed by pipeline, not stages
        - Read-only (frozen dataclass + MappingProxyType values)
    """
    raw: bytes
    config: AnalysisConfig
    values: Mapping[str, Any]
    pipeline_version: str


# =============================================================================
# Stage — Abstract Base Class
# =============================================================================


class Stage(ABC):
    """
    Abstract base class for all pipeline stages.

    Subclasses must:
        - Define a `contract` class attribute of type StageContract
        - Implement `run(ctx)` returning newly produced values

    Rules:
        - Stages are stateless; one instance may serve many invocations
        - Stages return only the values declared in contract.produces
    """

    contract: StageContract

    @abstractmethod
    def run(self, ctx: StageContext) -> dict[str, Any]:
        """
        Execute the stage.

        Args:
            ctx: Immutable execution context

        Returns:
            Mapping of value name to value, keyed exactly by contract.produces.
        """
        ...


# =============================================================================
# ValidationError — Structured Validation Failure
# =============================================================================


class ValidationError(Exception):
    """
    Raised when stage wiring violates a contract.

    Attributes:
        stage: Name of the stage that failed validation
        missing: Values required (or declared) but not present
        unexpected: Values produced but not declared
        available: Values that were present
    """

    def __init__(
        self,
        stage: str,
        missing: set[str],
        unexpected: set[str],
        available: set[str],
    ):
        self.stage = stage
        self.missing = missing
        self.unexpected = unexpected
        self.available = available

        parts = [f"Validation failed for stage '{stage}'"]
        if missing:
            parts.append(f"Missing values: {sorted(missing)}")
            parts.append(f"Available values: {sorted(available)}")
        if unexpected:
            parts.append(f"Undeclared values: {sorted(unexpected)}")

        super().__init__("; ".join(parts))


# =============================================================================
# StageValidator — Centralized Validation
# =============================================================================


class StageValidator:
    """
    Validates stage inputs and outputs against contracts.

    Rules:
        - validate() runs BEFORE stage.run()
        - validate_outputs() runs AFTER stage.run()
        - No side effects; fail fast with ValidationError
    """

    def validate(self, contract: StageContract, available: Mapping[str, Any]) -> None:
        """
        Check that every required value is available.

        Raises:
            ValidationError: If any required value is missing
        """
        available_names = set(available)
        missing = set(contract.requires) - available_names
        if missing:
            raise ValidationError(
                stage=contract.name,
                missing=missing,
                unexpected=set(),
                available=available_names,
            )

    def validate_outputs(self, contract: StageContract, produced: Mapping[str, Any]) -> None:
        """
        Check that a stage produced exactly its declared values.

        Raises:
            ValidationError: If values are missing or undeclared
        """
        produced_names = set(produced)
        missing = set(contract.produces) - produced_names
        unexpected = produced_names - set(contract.produces)
        if missing or unexpected:
            raise ValidationError(
                stage=contract.name,
                missing=missing,
                unexpected=unexpected,
                available=produced_names,
            )


# =============================================================================
# Pipeline Version
# =============================================================================

PIPELINE_VERSION = "1.0.0"

"""
VoxAnalysis v1 AnalysisConfig - Tunable analysis parameters.

Responsibilities:
- Hold detector thresholds and reducer size for one analysis run
- Serialization for config files and logging

Invariants:
- Immutable (frozen dataclass)
- Defaults reproduce the reference behaviour exactly
"""

import math
from dataclasses import asdict, dataclass, fields
from typing import Any


# =============================================================================
# Defaults
# =============================================================================

SILENCE_THRESHOLD = 0.01
EDIT_WINDOW_MS = 10
EDIT_DELTA_THRESHOLD = 0.15
EDIT_ENERGY_FLOOR = 0.01
WAVEFORM_POINTS = 500


@dataclass(frozen=True)
class AnalysisConfig:
    """
    Parameters for the statistics engine and waveform reducer.

    Attributes:
        silence_threshold: |sample| strictly below this counts as silent
        edit_window_ms: Window length for the edit-candidate detector
        edit_delta_threshold: Minimum change in mean amplitude between windows
        edit_energy_floor: Preceding window must be louder than this
        waveform_points: Target length of the waveform envelope
        parallel: Run independent stages on a thread pool
    """

    silence_threshold: float = SILENCE_THRESHOLD
    edit_window_ms: int = EDIT_WINDOW_MS
    edit_delta_threshold: float = EDIT_DELTA_THRESHOLD
    edit_energy_floor: float = EDIT_ENERGY_FLOOR
    waveform_points: int = WAVEFORM_POINTS
    parallel: bool = True

    def __post_init__(self) -> None:
        # bool is an int subclass; JSON true must not pass as a count
        for name in ("edit_window_ms", "waveform_points"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValueError(f"{name} must be an integer, got {value!r}")
        if not isinstance(self.parallel, bool):
            raise ValueError(f"parallel must be a boolean, got {self.parallel!r}")
        for name in ("silence_threshold", "edit_delta_threshold", "edit_energy_floor"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
                raise ValueError(f"{name} must be a finite number, got {value!r}")

        if self.edit_window_ms <= 0:
            raise ValueError(f"edit_window_ms must be positive, got {self.edit_window_ms}")
        if self.waveform_points <= 0:
            raise ValueError(f"waveform_points must be positive, got {self.waveform_points}")
        for name in ("silence_threshold", "edit_delta_threshold", "edit_energy_floor"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must be non-negative, got {getattr(self, name)}")

    def window_samples(self, sample_rate: int) -> int:
        """Edit-detector window length in samples (at least 1)."""
        return max(1, sample_rate * self.edit_window_ms // 1000)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AnalysisConfig":
        """
        Deserialize from dictionary.

        Raises:
            ValueError: If data contains unknown keys or invalid values
        """
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f"Unknown config keys: {unknown}")
        return cls(**data)

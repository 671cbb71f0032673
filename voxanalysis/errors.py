"""
VoxAnalysis v1 Error Taxonomy.

Responsibilities:
- AnalysisError hierarchy for failures reported back to the caller
- Structured error object builder

Invariants:
- Every error carries a stable code and a human-readable message
- Errors are never retried internally
"""


def build_error(
    code: str,
    message: str,
    stage: str | None = None,
    detail: dict | None = None,
) -> dict:
    """
    Build structured error object.

    Args:
        code: Error code (e.g., "CONTAINER_UNSUPPORTED")
        message: Human-readable error message
        stage: Stage name where error occurred, if any
        detail: Optional additional details

    Returns:
        Structured error dictionary.
    """
    error: dict = {
        "code": code,
        "message": message,
    }
    if stage is not None:
        error["stage"] = stage
    if detail is not None:
        error["detail"] = detail
    return error


class AnalysisError(Exception):
    """
    Base class for all analysis failures surfaced to the caller.

    Attributes:
        message: Human-readable description
        stage: Stage that raised the error (None for envelope errors)
        detail: Optional structured context
    """

    code = "ANALYSIS_ERROR"

    def __init__(self, message: str, stage: str | None = None, detail: dict | None = None):
        self.message = message
        self.stage = stage
        self.detail = detail
        super().__init__(message)

    def to_dict(self) -> dict:
        return build_error(self.code, self.message, stage=self.stage, detail=self.detail)


class EnvelopeError(AnalysisError):
    """Input text is not valid in its transport encoding (base64)."""

    code = "ENVELOPE_INVALID"


class UnsupportedContainerError(AnalysisError):
    """Audio container is not a supported WAV layout."""

    code = "CONTAINER_UNSUPPORTED"

    LIMITATION = "Only WAV (PCM integer or IEEE float) is supported for local analysis."

    def __init__(self, problem: str, stage: str | None = "decode", detail: dict | None = None):
        self.problem = problem
        super().__init__(f"{problem}. {self.LIMITATION}", stage=stage, detail=detail)


class EmptyAudioError(AnalysisError):
    """Container decoded structurally but yielded zero usable samples."""

    code = "AUDIO_EMPTY"

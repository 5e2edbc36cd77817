"""
Errors — Exception hierarchy for the deletion-safety engine.

Each stage raises its own type so callers can tell malformed input,
context assembly failure and backend failure apart. Messages carry a
stage prefix; wrapped causes are chained with ``raise ... from``.
"""


class DeadrefError(Exception):
    """Base class for all engine errors."""


class DiffParseError(DeadrefError):
    """
    Raised when unified diff text cannot be decomposed.

    Only two situations are fatal: a ``diff --git`` header whose paths
    cannot be extracted, and a malformed ``@@`` hunk header.
    """

    def __init__(self, message: str, line_number: int = 0):
        self.line_number = line_number
        if line_number:
            message = f"line {line_number}: {message}"
        super().__init__(message)


class WorkspaceError(DeadrefError):
    """Raised when the workspace root itself cannot be walked."""


class ContextAssemblyError(DeadrefError):
    """Raised when the AI analysis context cannot be built."""


class BackendError(DeadrefError):
    """Raised when the configured analysis backend fails."""


class InvalidResponseError(BackendError):
    """Raised when an LLM response violates the analysis result contract."""


class AnalysisCancelled(BackendError):
    """Raised when a cancellation event is observed during analysis."""

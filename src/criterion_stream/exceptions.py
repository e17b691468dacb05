"""
Custom exceptions for criterion-stream.
"""


class CriterionStreamError(Exception):
    """Base exception for criterion-stream errors."""

    pass


class ReportError(CriterionStreamError):
    """Raised when the test tool produced output that is not a usable report."""

    pass


class ReportDecodeError(ReportError):
    """Raised when an accumulated JSON document cannot be decoded."""

    def __init__(self, buffer: str, original_error: Exception):
        # Keep only the head of the document to avoid flooding logs
        self.buffer = buffer[:200] if buffer else ""
        self.original_error = original_error
        super().__init__(f"Unparseable test report: {original_error}")


class ReportStructureError(ReportError):
    """Raised when a decoded report lacks a documented field."""

    def __init__(self, field_path: str, reason: str = "missing"):
        self.field_path = field_path
        self.reason = reason
        super().__init__(f"Malformed test report: field '{field_path}' is {reason}")


class CaptureSpentError(CriterionStreamError):
    """Raised when feeding a capture that already failed to decode a report."""

    def __init__(self) -> None:
        super().__init__("Capture context is spent after a report error; start a new one")


class RunnerError(CriterionStreamError):
    """Raised when the build tool cannot be started."""

    def __init__(self, command: str, original_error: Exception):
        self.command = command
        self.original_error = original_error
        super().__init__(f"Failed to start '{command}': {original_error}")

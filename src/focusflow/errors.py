"""
Focus Flow error types.

Every remote failure is recoverable: callers fall back to the local log,
the pending queue or a default quote. Only ValidationFailed is reported
back to the user as-is.
"""

from typing import Any, Optional


class FocusFlowError(Exception):
    def __init__(self, code: str, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.code = code
        self.details = details


class NetworkUnavailable(FocusFlowError):
    """Transport-level failure: DNS, refused connection, timeout."""

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__("network_unavailable", message, details)


class RemoteReadFailed(FocusFlowError):
    def __init__(self, message: str, status_code: Optional[int] = None, details: Optional[dict[str, Any]] = None):
        super().__init__("remote_read_failed", message, details)
        self.status_code = status_code


class RemoteWriteFailed(FocusFlowError):
    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        details: Optional[dict[str, Any]] = None,
        code: str = "remote_write_failed",
    ):
        super().__init__(code, message, details)
        self.status_code = status_code


class ValidationFailed(RemoteWriteFailed):
    """The server (or the local model layer) rejected a session body."""

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(message, status_code=400, details=details, code="validation_failed")


class TimerStateError(FocusFlowError):
    def __init__(self, message: str):
        super().__init__("timer_state", message)


class StoreError(FocusFlowError):
    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__("store_error", message, details)

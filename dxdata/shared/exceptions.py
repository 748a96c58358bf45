# dxdata/shared/exceptions.py
from __future__ import annotations

from typing import Any

from dxdata.errors import (
    CONTEXT_NOT_INITIALIZED,
    INVALID_REFERENCE,
    REMOTE_ERROR,
    UNEXPECTED_TERMINAL_STATE,
    WAIT_TIMEOUT,
    ErrorData,
)


class DXError(Exception):
    """
    Base exception for everything raised by dxdata.
    """

    error: ErrorData

    def __init__(self, error: ErrorData):
        """Initialize DXError."""
        super().__init__(error.message)
        self.error = error


class InvalidReference(DXError):
    """Empty or malformed object id, or a handle with no project association."""

    def __init__(self, message: str, data: Any | None = None):
        super().__init__(ErrorData(code=INVALID_REFERENCE, message=message, data=data))


class RemoteError(DXError):
    """The platform reported a failure for a remote call."""

    def __init__(
        self,
        error_type: str,
        message: str,
        *,
        status_code: int | None = None,
        data: Any | None = None,
    ):
        super().__init__(
            ErrorData(
                code=REMOTE_ERROR,
                type=error_type,
                message=message,
                data=data,
            )
        )
        self.status_code = status_code

    @property
    def error_type(self) -> str:
        return self.error.type or ""

    def __str__(self) -> str:
        return f"{self.error.type}: {self.error.message}"


class Timeout(DXError):
    """wait_on_state ran out of time before the object reached the target state."""

    def __init__(self, object_id: str, state: str, timeout: float, last_state: str | None):
        super().__init__(
            ErrorData(
                code=WAIT_TIMEOUT,
                message=(
                    f"{object_id} did not reach state {state!r} within {timeout}s "
                    f"(last observed: {last_state!r})"
                ),
                data={"object_id": object_id, "state": state, "last_state": last_state},
            )
        )
        self.last_state = last_state


class UnexpectedTerminalState(DXError):
    """The object settled in a terminal state other than the one being waited on."""

    def __init__(self, object_id: str, expected: str, observed: str):
        super().__init__(
            ErrorData(
                code=UNEXPECTED_TERMINAL_STATE,
                message=f"{object_id} reached terminal state {observed!r} while waiting for {expected!r}",
                data={"object_id": object_id, "expected": expected, "observed": observed},
            )
        )
        self.observed = observed


class ContextNotInitialized(DXError):
    """No DXContext is active and none was passed explicitly."""

    def __init__(self, message: str = "No DXContext is active; call use_context() or pass context="):
        super().__init__(ErrorData(code=CONTEXT_NOT_INITIALIZED, message=message))

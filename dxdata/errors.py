# dxdata/errors.py
from typing import Any
from pydantic import BaseModel, ConfigDict

# SDK error codes
INVALID_REFERENCE = -32010
REMOTE_ERROR = -32011
WAIT_TIMEOUT = -32012
UNEXPECTED_TERMINAL_STATE = -32013
CONTEXT_NOT_INITIALIZED = -32014

# Platform error types (the "type" member of an API error body)
RESOURCE_NOT_FOUND = "ResourceNotFound"
PERMISSION_DENIED = "PermissionDenied"
INVALID_INPUT = "InvalidInput"
INVALID_STATE = "InvalidState"
TRANSPORT_ERROR = "TransportError"
INVALID_RESPONSE = "InvalidResponse"

# Reported by some deployments for set mutations that change nothing; the
# handle layer treats both as success.
ALREADY_PRESENT = "AlreadyPresent"
ALREADY_ABSENT = "AlreadyAbsent"


class ErrorData(BaseModel):
    """Error information carried by every dxdata exception."""

    code: int
    """The SDK-level error category."""

    message: str
    """
    A short description of the error. For platform failures this is the
    platform's message, verbatim.
    """

    type: str | None = None
    """The platform error type (e.g. ``ResourceNotFound``), when there is one."""

    data: Any | None = None
    """
    Additional information about the error (HTTP status, observed state, the
    raw error body, ...).
    """

    model_config = ConfigDict(extra="allow")

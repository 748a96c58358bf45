"""
dxdata - handles for versioned data objects on the DNAnexus-style platform API.

    >>> import dxdata
    >>> ctx = dxdata.DXContext.from_config(dxdata.DXConfig())
    >>> with dxdata.use_context(ctx):
    ...     record = dxdata.DXRecord("record-B4xqv0j0K2zQ4yV1pKG00005")
    ...     record.rename("report.csv")
    ...     record.describe().name
    'report.csv'
"""

from .bindings import (
    BackoffPolicy,
    DXDataObject,
    DXFile,
    DXRecord,
    StateWaiter,
    get_object_id,
    is_link,
    make_link,
)
from .calls import ApiRemoteCalls, InMemoryPlatform, RemoteCalls
from .client import DXApiClient
from .config import DXConfig
from .shared.context import DXContext, current_context, reset_context, set_context, use_context
from .shared.exceptions import (
    ContextNotInitialized,
    DXError,
    InvalidReference,
    RemoteError,
    Timeout,
    UnexpectedTerminalState,
)
from .types import DescribeResult, ObjectReference, ObjectState

__version__ = "0.1.0"

__all__ = [
    "ApiRemoteCalls",
    "BackoffPolicy",
    "ContextNotInitialized",
    "DXApiClient",
    "DXConfig",
    "DXContext",
    "DXDataObject",
    "DXError",
    "DXFile",
    "DXRecord",
    "DescribeResult",
    "InMemoryPlatform",
    "InvalidReference",
    "ObjectReference",
    "ObjectState",
    "RemoteCalls",
    "RemoteError",
    "StateWaiter",
    "Timeout",
    "UnexpectedTerminalState",
    "current_context",
    "get_object_id",
    "is_link",
    "make_link",
    "reset_context",
    "set_context",
    "use_context",
]

"""Handles for remote data objects."""

from .file import DXFile
from .handle import DXDataObject
from .link import get_object_id, is_link, make_link
from .record import DXRecord
from .waiter import DEFAULT_WAIT_TIMEOUT, BackoffPolicy, StateWaiter

__all__ = (
    "BackoffPolicy",
    "DEFAULT_WAIT_TIMEOUT",
    "DXDataObject",
    "DXFile",
    "DXRecord",
    "StateWaiter",
    "get_object_id",
    "is_link",
    "make_link",
)

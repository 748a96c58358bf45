# dxdata/bindings/link.py
from __future__ import annotations

from typing import Any

from dxdata.types import LINK_KEY, ObjectReference


def make_link(object_id: str, project_id: str = "") -> dict[str, Any]:
    """
    Build a link to an existing object for use inside details or other payloads.

    Without a project only the id is encoded and the platform resolves the
    project from the caller's permissions.
    """
    return ObjectReference(objectId=object_id, projectId=project_id or None).to_link()


def is_link(value: Any) -> bool:
    if not isinstance(value, dict) or len(value) != 1 or LINK_KEY not in value:
        return False
    inner = value[LINK_KEY]
    return isinstance(inner, str) or (isinstance(inner, dict) and isinstance(inner.get("id"), str))


def get_object_id(value: Any) -> str:
    return ObjectReference.from_link(value).objectId

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

"""
Data types exchanged between data-object handles and the platform API.
"""

LINK_KEY = "$dnanexus_link"

# Object id: "<class>-<token>", e.g. "record-B4xqv0j0K2zQ4yV1pKG00005"
OBJECT_ID_PATTERN = r"^[a-z][a-zA-Z]*-[0-9A-Za-z_]+$"


class ObjectState(str, Enum):
    open = "open"
    closing = "closing"
    closed = "closed"
    failed = "failed"


TERMINAL_STATES = frozenset({ObjectState.closed, ObjectState.failed})


class ObjectReference(BaseModel):
    """A reference to another object, embeddable wherever the protocol accepts a link."""

    objectId: str
    projectId: str | None = None

    model_config = ConfigDict(frozen=True)

    def to_link(self) -> dict[str, Any]:
        if self.projectId:
            return {LINK_KEY: {"project": self.projectId, "id": self.objectId}}
        return {LINK_KEY: self.objectId}

    @classmethod
    def from_link(cls, value: Any) -> "ObjectReference":
        if not isinstance(value, dict) or LINK_KEY not in value:
            raise ValueError(f"Not a link: {value!r}")
        inner = value[LINK_KEY]
        if isinstance(inner, str):
            return cls(objectId=inner)
        if isinstance(inner, dict) and isinstance(inner.get("id"), str):
            return cls(objectId=inner["id"], projectId=inner.get("project"))
        raise ValueError(f"Malformed link: {value!r}")


class DescribeResult(BaseModel):
    """
    Object description. The minimum contract is id/class/types/createdAt; every
    other field depends on the object kind and on what was requested.
    """

    id: str
    class_: str = Field(alias="class")
    types: list[str]
    createdAt: int
    """Creation time, milliseconds since the epoch."""

    project: str | None = None
    name: str | None = None
    folder: str | None = None
    state: str | None = None
    """Lifecycle state; usually an ObjectState value, but some kinds report their own."""
    hidden: bool | None = None
    tags: list[str] | None = None
    modified: int | None = None

    properties: dict[str, str] | None = None
    """Only present when requested."""

    details: Any | None = None
    """Only present when requested."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)


DESCRIBE_SCHEMA: dict[str, Any] = {
    "type": "object",
    "required": ["id", "class", "types", "createdAt"],
    "properties": {
        "id": {"type": "string"},
        "class": {"type": "string"},
        "types": {"type": "array", "items": {"type": "string"}},
        "createdAt": {"type": "integer"},
        "properties": {"type": "object", "additionalProperties": {"type": "string"}},
    },
}


# ---- request parameters -------------------------------------------------


class Params(BaseModel):
    """Base class for remote call parameters."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class DescribeParams(Params):
    project: str | None = None
    properties: bool = False
    details: bool = False


class TypesParams(Params):
    types: list[str]


class SetVisibilityParams(Params):
    hidden: bool
    project: str | None = None


class RenameParams(Params):
    project: str
    name: str


class SetPropertiesParams(Params):
    project: str
    properties: dict[str, str | None]
    """A None value removes the property."""

    def to_payload(self) -> dict[str, Any]:
        # None values are meaningful here; keep them
        return {"project": self.project, "properties": dict(self.properties)}


class TagsParams(Params):
    project: str
    tags: list[str]


class CloneParams(Params):
    objects: list[str]
    project: str
    destination: str = "/"
    parents: bool = True


class MoveParams(Params):
    objects: list[str]
    destination: str


class RemoveObjectsParams(Params):
    objects: list[str]


class NewObjectParams(Params):
    project: str
    name: str | None = None
    folder: str = "/"
    parents: bool = True
    types: list[str] | None = None
    tags: list[str] | None = None
    properties: dict[str, str] | None = None
    details: Any | None = None
    hidden: bool | None = None
    close: bool | None = None


__all__ = [
    "CloneParams",
    "DESCRIBE_SCHEMA",
    "DescribeParams",
    "DescribeResult",
    "LINK_KEY",
    "MoveParams",
    "NewObjectParams",
    "OBJECT_ID_PATTERN",
    "ObjectReference",
    "ObjectState",
    "Params",
    "RemoveObjectsParams",
    "RenameParams",
    "SetPropertiesParams",
    "SetVisibilityParams",
    "TERMINAL_STATES",
    "TagsParams",
    "TypesParams",
]

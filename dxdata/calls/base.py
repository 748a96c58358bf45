# dxdata/calls/base.py
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

# Object-level API methods
DESCRIBE = "describe"
ADD_TYPES = "addTypes"
REMOVE_TYPES = "removeTypes"
GET_DETAILS = "getDetails"
SET_DETAILS = "setDetails"
SET_VISIBILITY = "setVisibility"
RENAME = "rename"
SET_PROPERTIES = "setProperties"
ADD_TAGS = "addTags"
REMOVE_TAGS = "removeTags"
CLOSE = "close"
LIST_PROJECTS = "listProjects"

# Container-level API methods
CLONE = "clone"
MOVE = "move"
REMOVE_OBJECTS = "removeObjects"

# Class-level API methods
NEW = "new"


class RemoteCalls(ABC):
    """
    Call contract between data-object handles and the platform.

    Implementations supply `invoke`; every named operation routes through it
    by default and may be overridden where a particular object kind shapes its
    requests differently. Params and results are JSON-like values.
    """

    @abstractmethod
    def invoke(self, resource_id: str, operation: str, params: Any) -> Any: ...

    # ---- object-level --------------------------------------------------------
    def describe(self, object_id: str, params: dict[str, Any]) -> dict[str, Any]:
        return self.invoke(object_id, DESCRIBE, params)

    def add_types(self, object_id: str, params: dict[str, Any]) -> Any:
        return self.invoke(object_id, ADD_TYPES, params)

    def remove_types(self, object_id: str, params: dict[str, Any]) -> Any:
        return self.invoke(object_id, REMOVE_TYPES, params)

    def get_details(self, object_id: str, params: dict[str, Any]) -> Any:
        return self.invoke(object_id, GET_DETAILS, params)

    def set_details(self, object_id: str, params: Any) -> Any:
        return self.invoke(object_id, SET_DETAILS, params)

    def set_visibility(self, object_id: str, params: dict[str, Any]) -> Any:
        return self.invoke(object_id, SET_VISIBILITY, params)

    def rename(self, object_id: str, params: dict[str, Any]) -> Any:
        return self.invoke(object_id, RENAME, params)

    def set_properties(self, object_id: str, params: dict[str, Any]) -> Any:
        return self.invoke(object_id, SET_PROPERTIES, params)

    def add_tags(self, object_id: str, params: dict[str, Any]) -> Any:
        return self.invoke(object_id, ADD_TAGS, params)

    def remove_tags(self, object_id: str, params: dict[str, Any]) -> Any:
        return self.invoke(object_id, REMOVE_TAGS, params)

    def close(self, object_id: str, params: dict[str, Any]) -> Any:
        return self.invoke(object_id, CLOSE, params)

    def list_projects(self, object_id: str, params: dict[str, Any]) -> Any:
        return self.invoke(object_id, LIST_PROJECTS, params)

    # ---- container-level -----------------------------------------------------
    def clone(self, project_id: str, params: dict[str, Any]) -> Any:
        return self.invoke(project_id, CLONE, params)

    def move(self, project_id: str, params: dict[str, Any]) -> Any:
        return self.invoke(project_id, MOVE, params)

    def remove_objects(self, project_id: str, params: dict[str, Any]) -> Any:
        return self.invoke(project_id, REMOVE_OBJECTS, params)

    # ---- class-level ---------------------------------------------------------
    def new(self, object_class: str, params: dict[str, Any]) -> dict[str, Any]:
        return self.invoke(object_class, NEW, params)

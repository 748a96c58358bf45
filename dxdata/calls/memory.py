# dxdata/calls/memory.py
from __future__ import annotations

import copy
import itertools
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, TypeVar

from pydantic import ValidationError
from mcp.server.fastmcp.utilities.logging import get_logger

from dxdata.errors import INVALID_INPUT, INVALID_STATE, RESOURCE_NOT_FOUND
from dxdata.shared.exceptions import RemoteError
from dxdata.types import (
    CloneParams,
    DescribeParams,
    MoveParams,
    NewObjectParams,
    ObjectState,
    Params,
    RemoveObjectsParams,
    RenameParams,
    SetPropertiesParams,
    SetVisibilityParams,
    TagsParams,
    TypesParams,
)

from . import base as ops
from .base import RemoteCalls

logger = get_logger(__name__)

ParamsT = TypeVar("ParamsT", bound=Params)

CREATABLE_CLASSES = frozenset({"record", "file"})


def _now_ms() -> int:
    return int(datetime.now(timezone.utc).timestamp() * 1000)


@dataclass
class _Content:
    """Data shared by every project copy of an object id."""

    object_id: str
    object_class: str
    created_at: int
    types: list[str] = field(default_factory=list)
    details: Any = field(default_factory=dict)
    state: ObjectState = ObjectState.open
    fail_on_close: bool = False
    closing_polls: int = 0


@dataclass
class _Entry:
    """Per-project metadata of one object copy."""

    name: str
    folder: str = "/"
    tags: list[str] = field(default_factory=list)
    properties: dict[str, str] = field(default_factory=dict)
    hidden: bool = False
    modified: int = field(default_factory=_now_ms)


class InMemoryPlatform(RemoteCalls):
    """
    Non-durable stand-in for the platform.

    Models what the generic handles rely on: content (class, types, details,
    state) is keyed by object id, while name, folder, tags, properties and
    visibility live on a per-project entry. `close` moves an object to
    `closing`; it settles to `closed` (or `failed`, see `fail_on_close`) after
    `closing_describes` further describe calls.
    """

    def __init__(self, *, closing_describes: int = 1):
        self.closing_describes = closing_describes
        self._contents: dict[str, _Content] = {}
        self._entries: dict[tuple[str, str], _Entry] = {}  # (project_id, object_id)
        self._ids = itertools.count(1)
        self.calls: list[tuple[str, str, Any]] = []  # (resource_id, operation, params)

        self._object_ops: dict[str, Callable[[str, Any], Any]] = {
            ops.DESCRIBE: self._describe,
            ops.ADD_TYPES: self._add_types,
            ops.REMOVE_TYPES: self._remove_types,
            ops.GET_DETAILS: self._get_details,
            ops.SET_DETAILS: self._set_details,
            ops.SET_VISIBILITY: self._set_visibility,
            ops.RENAME: self._rename,
            ops.SET_PROPERTIES: self._set_properties,
            ops.ADD_TAGS: self._add_tags,
            ops.REMOVE_TAGS: self._remove_tags,
            ops.CLOSE: self._close,
            ops.LIST_PROJECTS: self._list_projects,
        }
        self._container_ops: dict[str, Callable[[str, Any], Any]] = {
            ops.CLONE: self._clone,
            ops.MOVE: self._move,
            ops.REMOVE_OBJECTS: self._remove_objects,
        }

    # ---- RemoteCalls ---------------------------------------------------------
    def invoke(self, resource_id: str, operation: str, params: Any) -> Any:
        self.calls.append((resource_id, operation, copy.deepcopy(params)))
        logger.debug("invoke %s/%s", resource_id, operation)

        if operation == ops.NEW:
            return self._new(resource_id, params)
        if operation in self._container_ops:
            return self._container_ops[operation](resource_id, params)
        if operation in self._object_ops:
            return self._object_ops[operation](resource_id, params)
        raise RemoteError(INVALID_INPUT, f"Unknown method /{resource_id}/{operation}", status_code=400)

    # ---- test hooks ----------------------------------------------------------
    def create_object(
        self,
        object_class: str,
        project_id: str,
        *,
        name: str | None = None,
        folder: str = "/",
        state: ObjectState = ObjectState.open,
        fail_on_close: bool = False,
        object_id: str | None = None,
    ) -> str:
        object_id = object_id or self._next_id(object_class)
        if object_id in self._contents:
            raise ValueError(f"{object_id} already exists")
        self._contents[object_id] = _Content(
            object_id=object_id,
            object_class=object_class,
            created_at=_now_ms(),
            state=state,
            fail_on_close=fail_on_close,
        )
        self._entries[(project_id, object_id)] = _Entry(name=name or object_id, folder=folder)
        return object_id

    def fail_on_close(self, object_id: str) -> None:
        self._content(object_id).fail_on_close = True

    def set_state(self, object_id: str, state: ObjectState) -> None:
        self._content(object_id).state = state

    def projects_of(self, object_id: str) -> set[str]:
        return {p for (p, o) in self._entries if o == object_id}

    def calls_for(self, operation: str) -> list[tuple[str, str, Any]]:
        return [c for c in self.calls if c[1] == operation]

    # ---- helpers -------------------------------------------------------------
    def _next_id(self, object_class: str) -> str:
        return f"{object_class}-{next(self._ids):024d}"

    @staticmethod
    def _parse(model: type[ParamsT], params: Any) -> ParamsT:
        try:
            return model.model_validate(params or {})
        except ValidationError as e:
            raise RemoteError(INVALID_INPUT, str(e), status_code=422) from e

    def _content(self, object_id: str) -> _Content:
        content = self._contents.get(object_id)
        if content is None:
            raise RemoteError(RESOURCE_NOT_FOUND, f'"{object_id}" could not be found', status_code=404)
        return content

    def _entry(self, project_id: str, object_id: str) -> _Entry:
        self._content(object_id)
        entry = self._entries.get((project_id, object_id))
        if entry is None:
            raise RemoteError(
                RESOURCE_NOT_FOUND,
                f'"{object_id}" could not be found in "{project_id}"',
                status_code=404,
            )
        return entry

    def _any_project(self, object_id: str) -> str:
        projects = sorted(self.projects_of(object_id))
        if not projects:
            raise RemoteError(RESOURCE_NOT_FOUND, f'"{object_id}" could not be found', status_code=404)
        return projects[0]

    def _advance_state(self, content: _Content) -> None:
        if content.state is not ObjectState.closing:
            return
        if content.closing_polls >= self.closing_describes:
            content.state = ObjectState.failed if content.fail_on_close else ObjectState.closed
        else:
            content.closing_polls += 1

    def _require_open(self, content: _Content, what: str) -> None:
        if content.state is not ObjectState.open:
            raise RemoteError(
                INVALID_STATE,
                f"Cannot {what} on {content.object_id}: object is {content.state.value}",
                status_code=422,
            )

    # ---- object-level --------------------------------------------------------
    def _describe(self, object_id: str, params: Any) -> dict[str, Any]:
        p = self._parse(DescribeParams, params)
        content = self._content(object_id)
        project = p.project or self._any_project(object_id)
        entry = self._entry(project, object_id)
        self._advance_state(content)

        desc: dict[str, Any] = {
            "id": object_id,
            "class": content.object_class,
            "types": list(content.types),
            "createdAt": content.created_at,
            "modified": entry.modified,
            "project": project,
            "name": entry.name,
            "folder": entry.folder,
            "state": content.state.value,
            "hidden": entry.hidden,
            "tags": list(entry.tags),
        }
        if p.properties:
            desc["properties"] = dict(entry.properties)
        if p.details:
            desc["details"] = copy.deepcopy(content.details)
        return desc

    def _add_types(self, object_id: str, params: Any) -> dict[str, Any]:
        p = self._parse(TypesParams, params)
        content = self._content(object_id)
        for t in p.types:
            if t not in content.types:
                content.types.append(t)
        return {"id": object_id}

    def _remove_types(self, object_id: str, params: Any) -> dict[str, Any]:
        p = self._parse(TypesParams, params)
        content = self._content(object_id)
        content.types = [t for t in content.types if t not in p.types]
        return {"id": object_id}

    def _get_details(self, object_id: str, params: Any) -> Any:
        return copy.deepcopy(self._content(object_id).details)

    def _set_details(self, object_id: str, params: Any) -> dict[str, Any]:
        if not isinstance(params, (dict, list)):
            raise RemoteError(INVALID_INPUT, "Details must be a JSON object or array", status_code=422)
        content = self._content(object_id)
        self._require_open(content, "set details")
        content.details = copy.deepcopy(params)
        return {"id": object_id}

    def _set_visibility(self, object_id: str, params: Any) -> dict[str, Any]:
        p = self._parse(SetVisibilityParams, params)
        project = p.project or self._any_project(object_id)
        entry = self._entry(project, object_id)
        entry.hidden = p.hidden
        entry.modified = _now_ms()
        return {"id": object_id}

    def _rename(self, object_id: str, params: Any) -> dict[str, Any]:
        p = self._parse(RenameParams, params)
        entry = self._entry(p.project, object_id)
        entry.name = p.name
        entry.modified = _now_ms()
        return {"id": object_id}

    def _set_properties(self, object_id: str, params: Any) -> dict[str, Any]:
        p = self._parse(SetPropertiesParams, params)
        entry = self._entry(p.project, object_id)
        for key, value in p.properties.items():
            if value is None:
                entry.properties.pop(key, None)
            else:
                entry.properties[key] = value
        entry.modified = _now_ms()
        return {"id": object_id}

    def _add_tags(self, object_id: str, params: Any) -> dict[str, Any]:
        p = self._parse(TagsParams, params)
        entry = self._entry(p.project, object_id)
        for t in p.tags:
            if t not in entry.tags:
                entry.tags.append(t)
        entry.modified = _now_ms()
        return {"id": object_id}

    def _remove_tags(self, object_id: str, params: Any) -> dict[str, Any]:
        p = self._parse(TagsParams, params)
        entry = self._entry(p.project, object_id)
        entry.tags = [t for t in entry.tags if t not in p.tags]
        entry.modified = _now_ms()
        return {"id": object_id}

    def _close(self, object_id: str, params: Any) -> dict[str, Any]:
        content = self._content(object_id)
        if content.state is ObjectState.open:
            content.state = ObjectState.closing
            content.closing_polls = 0
        return {"id": object_id}

    def _list_projects(self, object_id: str, params: Any) -> dict[str, str]:
        self._content(object_id)
        return {project: "ADMINISTER" for project in sorted(self.projects_of(object_id))}

    # ---- container-level -----------------------------------------------------
    def _clone(self, project_id: str, params: Any) -> dict[str, Any]:
        p = self._parse(CloneParams, params)
        sources = [(object_id, self._entry(project_id, object_id)) for object_id in p.objects]
        for object_id, _ in sources:
            content = self._content(object_id)
            if content.state is not ObjectState.closed:
                raise RemoteError(
                    INVALID_STATE,
                    f"{object_id} must be closed to be cloned (currently {content.state.value})",
                    status_code=422,
                )

        exists: list[str] = []
        for object_id, src in sources:
            key = (p.project, object_id)
            if key in self._entries:
                exists.append(object_id)
                self._entries[key].folder = p.destination
                continue
            self._entries[key] = _Entry(
                name=src.name,
                folder=p.destination,
                tags=list(src.tags),
                properties=dict(src.properties),
                hidden=src.hidden,
            )
        return {"id": project_id, "project": p.project, "exists": exists}

    def _move(self, project_id: str, params: Any) -> dict[str, Any]:
        p = self._parse(MoveParams, params)
        entries = [self._entry(project_id, object_id) for object_id in p.objects]
        for entry in entries:
            entry.folder = p.destination
            entry.modified = _now_ms()
        return {"id": project_id}

    def _remove_objects(self, project_id: str, params: Any) -> dict[str, Any]:
        p = self._parse(RemoveObjectsParams, params)
        for object_id in p.objects:
            self._entry(project_id, object_id)
        for object_id in p.objects:
            del self._entries[(project_id, object_id)]
            if not self.projects_of(object_id):
                del self._contents[object_id]
        return {"id": project_id}

    # ---- class-level ---------------------------------------------------------
    def _new(self, object_class: str, params: Any) -> dict[str, Any]:
        if object_class not in CREATABLE_CLASSES:
            raise RemoteError(INVALID_INPUT, f"Cannot create objects of class {object_class!r}", status_code=400)
        p = self._parse(NewObjectParams, params)
        object_id = self.create_object(object_class, p.project, name=p.name, folder=p.folder)
        content = self._contents[object_id]
        entry = self._entries[(p.project, object_id)]
        content.types = list(dict.fromkeys(p.types or []))
        if p.details is not None:
            content.details = copy.deepcopy(p.details)
        entry.tags = list(dict.fromkeys(p.tags or []))
        entry.properties = dict(p.properties or {})
        entry.hidden = bool(p.hidden)
        if p.close:
            content.state = ObjectState.closed
        return {"id": object_id}

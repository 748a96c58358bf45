# dxdata/bindings/handle.py
from __future__ import annotations

import re
from enum import Enum
from typing import Any, Callable, ClassVar, Iterable, Mapping, TypeVar

from jsonschema import SchemaError, ValidationError, validate
from mcp.server.fastmcp.utilities.logging import get_logger

from dxdata.bindings.link import make_link
from dxdata.bindings.waiter import DEFAULT_WAIT_TIMEOUT, StateWaiter
from dxdata.calls.base import RemoteCalls
from dxdata.errors import ALREADY_ABSENT, ALREADY_PRESENT, INVALID_RESPONSE
from dxdata.shared.context import DXContext, current_context
from dxdata.shared.exceptions import InvalidReference, RemoteError
from dxdata.types import (
    DESCRIBE_SCHEMA,
    OBJECT_ID_PATTERN,
    CloneParams,
    DescribeParams,
    DescribeResult,
    MoveParams,
    NewObjectParams,
    ObjectReference,
    Params,
    RemoveObjectsParams,
    RenameParams,
    SetPropertiesParams,
    SetVisibilityParams,
    TagsParams,
    TypesParams,
)

logger = get_logger(__name__)

HandleT = TypeVar("HandleT", bound="DXDataObject")

_OBJECT_ID_RE = re.compile(OBJECT_ID_PATTERN)


class DXDataObject:
    """
    Handle to a remote data object, seen through one project.

    A handle is two ids: the object id, and the id of the project whose copy
    of the object it reads and writes. Two handles with the same object id and
    different projects share content (types, details, state) but have
    independent names, properties, tags, visibility and folders.

    Handles are plain values. Copying one duplicates the ids and shares the
    context; nothing is held open on the platform.
    """

    _class: ClassVar[str | None] = None
    """Object class of the concrete kind ("record", "file", ...); None accepts any id."""

    def __init__(
        self,
        dxid: str | None = None,
        project: str | None = None,
        *,
        context: DXContext | None = None,
        waiter: StateWaiter | None = None,
    ) -> None:
        self._context = context
        self._waiter = waiter
        self._dxid = ""
        self._proj = ""
        if dxid is not None:
            self.set_ids(dxid, project)

    # ---- identity ------------------------------------------------------------
    @property
    def context(self) -> DXContext:
        # Pinned on first use so later changes to the ambient context don't move the handle
        if self._context is None:
            self._context = current_context()
        return self._context

    @property
    def _calls(self) -> RemoteCalls:
        return self.context.calls

    def set_ids(self, dxid: str, project: str | None = None) -> None:
        """
        Rebind the handle. `project` defaults to the context's workspace.
        No remote call is made.
        """
        if dxid:
            self._validate_id(dxid)
        self._dxid = dxid
        self._proj = project if project else self.context.workspace_id

    def get_id(self) -> str:
        return self._dxid

    def get_project_id(self) -> str:
        return self._proj

    @classmethod
    def _validate_id(cls, dxid: str) -> None:
        if not isinstance(dxid, str) or not _OBJECT_ID_RE.match(dxid):
            raise InvalidReference(f"Malformed object id: {dxid!r}", data={"id": dxid})
        if cls._class is not None and not dxid.startswith(f"{cls._class}-"):
            raise InvalidReference(
                f"{cls.__name__} cannot be bound to {dxid!r}; expected a {cls._class}- id",
                data={"id": dxid, "class": cls._class},
            )

    def _require_ids(self) -> tuple[str, str]:
        if not self._dxid:
            raise InvalidReference("Handle is not bound to an object id")
        if not self._proj:
            raise InvalidReference(
                f"Handle for {self._dxid} has no project association",
                data={"id": self._dxid},
            )
        return self._dxid, self._proj

    def link(self, *, include_project: bool = False) -> dict[str, Any]:
        dxid, proj = self._require_ids()
        return make_link(dxid, proj if include_project else "")

    @classmethod
    def from_link(cls: type[HandleT], value: Any, *, context: DXContext | None = None) -> HandleT:
        try:
            ref = ObjectReference.from_link(value)
        except ValueError as e:
            raise InvalidReference(str(e)) from e
        return cls(ref.objectId, ref.projectId, context=context)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} id={self._dxid!r} project={self._proj!r}>"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, DXDataObject):
            return NotImplemented
        return (self._dxid, self._proj) == (other._dxid, other._proj)

    # ---- remote plumbing -----------------------------------------------------
    def _invoke(self, method: Callable[[str, Any], Any], resource_id: str, params: Params | Any) -> Any:
        payload = params.to_payload() if isinstance(params, Params) else params
        logger.debug("%s %s (project=%s)", method.__name__, resource_id, self._proj)
        return method(resource_id, payload)

    def _mutate_set(self, method: Callable[[str, Any], Any], params: Params) -> None:
        dxid, _ = self._require_ids()
        try:
            self._invoke(method, dxid, params)
        except RemoteError as e:
            if e.error_type in (ALREADY_PRESENT, ALREADY_ABSENT):
                logger.debug("%s on %s was a no-op: %s", method.__name__, dxid, e)
                return
            raise

    # ---- describe ------------------------------------------------------------
    def describe(self, incl_properties: bool = False, incl_details: bool = False) -> DescribeResult:
        """
        Describe the object through this handle's project.

        The result always has id, class, types and createdAt; properties and
        details are included only when asked for.
        """
        dxid, proj = self._require_ids()
        params = DescribeParams(project=proj, properties=incl_properties, details=incl_details)
        raw = self._invoke(self._calls.describe, dxid, params)
        try:
            validate(raw, DESCRIBE_SCHEMA)
        except (ValidationError, SchemaError) as e:
            raise RemoteError(INVALID_RESPONSE, f"Invalid describe response for {dxid}: {e.message}") from e
        return DescribeResult.model_validate(raw)

    # ---- types ---------------------------------------------------------------
    def add_types(self, types: Iterable[str]) -> None:
        self._mutate_set(self._calls.add_types, TypesParams(types=sorted(set(types))))

    def remove_types(self, types: Iterable[str]) -> None:
        self._mutate_set(self._calls.remove_types, TypesParams(types=sorted(set(types))))

    # ---- details -------------------------------------------------------------
    def get_details(self) -> Any:
        dxid, _ = self._require_ids()
        return self._invoke(self._calls.get_details, dxid, {})

    def set_details(self, details: Mapping[str, Any] | list[Any] | tuple[Any, ...]) -> None:
        """Replace the stored details wholesale. Details must be a JSON object or array."""
        dxid, _ = self._require_ids()
        if isinstance(details, (dict, list)):
            payload = details
        elif isinstance(details, Mapping):
            payload = dict(details)
        elif isinstance(details, tuple):
            payload = list(details)
        else:
            raise TypeError(f"details must be a mapping or a list, not {type(details).__name__}")
        self._invoke(self._calls.set_details, dxid, payload)

    # ---- visibility / name ---------------------------------------------------
    def hide(self) -> None:
        self._set_visibility(True)

    def unhide(self) -> None:
        self._set_visibility(False)

    def _set_visibility(self, hidden: bool) -> None:
        dxid, proj = self._require_ids()
        self._invoke(self._calls.set_visibility, dxid, SetVisibilityParams(hidden=hidden, project=proj))

    def rename(self, name: str) -> None:
        dxid, proj = self._require_ids()
        self._invoke(self._calls.rename, dxid, RenameParams(project=proj, name=name))

    # ---- properties ----------------------------------------------------------
    def set_properties(self, properties: Mapping[str, str | None]) -> None:
        """Merge properties into this project's copy; a None value removes that key."""
        dxid, proj = self._require_ids()
        self._invoke(self._calls.set_properties, dxid, SetPropertiesParams(project=proj, properties=dict(properties)))

    def get_properties(self) -> dict[str, str]:
        return dict(self.describe(incl_properties=True).properties or {})

    # ---- tags ----------------------------------------------------------------
    def add_tags(self, tags: Iterable[str]) -> None:
        _, proj = self._require_ids()
        self._mutate_set(self._calls.add_tags, TagsParams(project=proj, tags=sorted(set(tags))))

    def remove_tags(self, tags: Iterable[str]) -> None:
        _, proj = self._require_ids()
        self._mutate_set(self._calls.remove_tags, TagsParams(project=proj, tags=sorted(set(tags))))

    # ---- lifecycle -----------------------------------------------------------
    def close(self) -> None:
        """Request that the object be closed. Returns without waiting; see wait_on_state."""
        dxid, _ = self._require_ids()
        self._invoke(self._calls.close, dxid, {})

    def wait_on_state(
        self, state: str | Enum = "closed", timeout: float | None = DEFAULT_WAIT_TIMEOUT
    ) -> DescribeResult:
        dxid, _ = self._require_ids()
        waiter = self._waiter or StateWaiter()
        return waiter.wait(dxid, self.describe, state=state, timeout=timeout)

    # ---- projects / containers -----------------------------------------------
    def list_projects(self) -> set[str]:
        dxid, _ = self._require_ids()
        result = self._invoke(self._calls.list_projects, dxid, {})
        if isinstance(result, Mapping):
            return set(result.keys())
        if isinstance(result, list):
            return set(result)
        raise RemoteError(INVALID_RESPONSE, f"Unexpected listProjects response for {dxid}: {result!r}")

    def move(self, destination: str) -> None:
        """Move this project's copy into another folder of the same project."""
        dxid, proj = self._require_ids()
        self._invoke(self._calls.move, proj, MoveParams(objects=[dxid], destination=destination))

    def remove(self) -> None:
        """
        Remove the object from this handle's project. Copies in other projects
        are unaffected. The handle keeps its object id but loses its project,
        so further remote operations through it raise InvalidReference.
        """
        dxid, proj = self._require_ids()
        self._invoke(self._calls.remove_objects, proj, RemoveObjectsParams(objects=[dxid]))
        logger.info("Removed %s from %s", dxid, proj)
        self._proj = ""

    def _clone(self, project: str, folder: str = "/") -> None:
        dxid, proj = self._require_ids()
        self._invoke(
            self._calls.clone,
            proj,
            CloneParams(objects=[dxid], project=project, destination=folder),
        )
        logger.info("Cloned %s from %s into %s:%s", dxid, proj, project, folder)

    # ---- creation (used by concrete kinds) -----------------------------------
    @classmethod
    def _create(
        cls: type[HandleT],
        params: NewObjectParams,
        *,
        context: DXContext | None = None,
        waiter: StateWaiter | None = None,
    ) -> HandleT:
        if cls._class is None:
            raise TypeError(f"{cls.__name__} has no object class to create")
        ctx = context or current_context()
        result = ctx.calls.new(cls._class, params.to_payload())
        dxid = result.get("id") if isinstance(result, Mapping) else None
        if not isinstance(dxid, str):
            raise RemoteError(INVALID_RESPONSE, f"/{cls._class}/new returned no id: {result!r}")
        logger.info("Created %s in %s", dxid, params.project)
        return cls(dxid, params.project, context=ctx, waiter=waiter)

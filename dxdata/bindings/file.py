# dxdata/bindings/file.py
from __future__ import annotations

from typing import Iterable, Mapping

from dxdata.bindings.handle import DXDataObject
from dxdata.bindings.waiter import DEFAULT_WAIT_TIMEOUT, StateWaiter
from dxdata.shared.context import DXContext, current_context
from dxdata.types import DescribeResult, NewObjectParams, ObjectState


class DXFile(DXDataObject):
    """
    File objects. Only the shared metadata and lifecycle are handled here;
    content upload and download are left to the transfer tooling.
    """

    _class = "file"

    @classmethod
    def create(
        cls,
        *,
        name: str | None = None,
        project: str | None = None,
        folder: str = "/",
        types: Iterable[str] | None = None,
        tags: Iterable[str] | None = None,
        properties: Mapping[str, str] | None = None,
        hidden: bool = False,
        context: DXContext | None = None,
        waiter: StateWaiter | None = None,
    ) -> "DXFile":
        ctx = context or current_context()
        params = NewObjectParams(
            project=project or ctx.workspace_id,
            name=name,
            folder=folder,
            types=sorted(set(types)) if types is not None else None,
            tags=sorted(set(tags)) if tags is not None else None,
            properties=dict(properties) if properties is not None else None,
            hidden=hidden or None,
        )
        return cls._create(params, context=ctx, waiter=waiter)

    def wait_on_close(self, timeout: float | None = DEFAULT_WAIT_TIMEOUT) -> DescribeResult:
        return self.wait_on_state(ObjectState.closed.value, timeout=timeout)

    def clone(self, project: str, folder: str = "/") -> "DXFile":
        self._clone(project, folder)
        return DXFile(self.get_id(), project, context=self.context, waiter=self._waiter)

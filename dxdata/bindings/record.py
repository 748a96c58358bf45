# dxdata/bindings/record.py
from __future__ import annotations

from typing import Any, Iterable, Mapping

from dxdata.bindings.handle import DXDataObject
from dxdata.bindings.waiter import StateWaiter
from dxdata.shared.context import DXContext, current_context
from dxdata.types import NewObjectParams


class DXRecord(DXDataObject):
    """Records carry only metadata and details."""

    _class = "record"

    @classmethod
    def create(
        cls,
        *,
        details: Mapping[str, Any] | list[Any] | None = None,
        types: Iterable[str] | None = None,
        name: str | None = None,
        project: str | None = None,
        folder: str = "/",
        tags: Iterable[str] | None = None,
        properties: Mapping[str, str] | None = None,
        hidden: bool = False,
        close: bool = False,
        context: DXContext | None = None,
        waiter: StateWaiter | None = None,
    ) -> "DXRecord":
        ctx = context or current_context()
        params = NewObjectParams(
            project=project or ctx.workspace_id,
            name=name,
            folder=folder,
            types=sorted(set(types)) if types is not None else None,
            tags=sorted(set(tags)) if tags is not None else None,
            properties=dict(properties) if properties is not None else None,
            details=details,
            hidden=hidden or None,
            close=close or None,
        )
        return cls._create(params, context=ctx, waiter=waiter)

    def clone(self, project: str, folder: str = "/") -> "DXRecord":
        """Clone into `project` and return a handle to the copy there (same object id)."""
        self._clone(project, folder)
        return DXRecord(self.get_id(), project, context=self.context, waiter=self._waiter)

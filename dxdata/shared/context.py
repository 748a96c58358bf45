# dxdata/shared/context.py
from __future__ import annotations

from contextlib import contextmanager
from contextvars import ContextVar, Token
from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterator

from dxdata.shared.exceptions import ContextNotInitialized

if TYPE_CHECKING:
    from dxdata.calls.base import RemoteCalls
    from dxdata.config import DXConfig


@dataclass(frozen=True)
class DXContext:
    """
    What a handle needs from its environment: the default project to scope
    itself to and the call interface to reach the platform through.
    """

    workspace_id: str
    calls: "RemoteCalls"

    @classmethod
    def from_config(cls, config: "DXConfig") -> "DXContext":
        from dxdata.calls.api import ApiRemoteCalls
        from dxdata.client.api import DXApiClient

        if not config.workspace_id:
            raise ContextNotInitialized("No workspace configured (set DX_WORKSPACE_ID or DX_PROJECT_CONTEXT_ID)")
        return cls(workspace_id=config.workspace_id, calls=ApiRemoteCalls(DXApiClient(config)))

    def with_workspace(self, workspace_id: str) -> "DXContext":
        return DXContext(workspace_id=workspace_id, calls=self.calls)


_current: ContextVar[DXContext | None] = ContextVar("dxdata_context", default=None)


def current_context() -> DXContext:
    ctx = _current.get()
    if ctx is None:
        raise ContextNotInitialized()
    return ctx


def set_context(ctx: DXContext) -> Token[DXContext | None]:
    """Install `ctx` as the ambient context; pass the token to `reset_context` to undo."""
    return _current.set(ctx)


def reset_context(token: Token[DXContext | None]) -> None:
    _current.reset(token)


@contextmanager
def use_context(ctx: DXContext) -> Iterator[DXContext]:
    token = _current.set(ctx)
    try:
        yield ctx
    finally:
        _current.reset(token)

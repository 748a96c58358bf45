# tests/unit/shared/test_context.py
import pytest

from dxdata.calls.api import ApiRemoteCalls
from dxdata.calls.memory import InMemoryPlatform
from dxdata.config import DXConfig
from dxdata.shared.context import (
    DXContext,
    current_context,
    reset_context,
    set_context,
    use_context,
)
from dxdata.shared.exceptions import ContextNotInitialized


def test_no_ambient_context_by_default():
    with pytest.raises(ContextNotInitialized):
        current_context()


def test_use_context_nests_and_restores():
    calls = InMemoryPlatform()
    outer = DXContext("project-outer", calls)
    inner = outer.with_workspace("project-inner")

    with use_context(outer):
        assert current_context() is outer
        with use_context(inner):
            assert current_context().workspace_id == "project-inner"
            assert current_context().calls is calls
        assert current_context() is outer

    with pytest.raises(ContextNotInitialized):
        current_context()


def test_set_and_reset_context():
    ctx = DXContext("project-a", InMemoryPlatform())
    token = set_context(ctx)
    try:
        assert current_context() is ctx
    finally:
        reset_context(token)
    with pytest.raises(ContextNotInitialized):
        current_context()


def test_from_config_builds_http_calls():
    ctx = DXContext.from_config(DXConfig(workspace_id="project-a", apiserver_host="localhost"))
    try:
        assert ctx.workspace_id == "project-a"
        assert isinstance(ctx.calls, ApiRemoteCalls)
        assert ctx.calls.client.config.apiserver_host == "localhost"
    finally:
        ctx.calls.close_client()


def test_from_config_requires_a_workspace():
    with pytest.raises(ContextNotInitialized):
        DXContext.from_config(DXConfig())

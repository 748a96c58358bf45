# tests/unit/bindings/test_handle.py
import copy
from typing import Any

import pytest

from dxdata.bindings.handle import DXDataObject
from dxdata.bindings.record import DXRecord
from dxdata.bindings.waiter import DEFAULT_WAIT_TIMEOUT, BackoffPolicy, StateWaiter
from dxdata.calls.base import RemoteCalls
from dxdata.errors import (
    ALREADY_ABSENT,
    ALREADY_PRESENT,
    INVALID_RESPONSE,
    INVALID_STATE,
    RESOURCE_NOT_FOUND,
)
from dxdata.shared.context import DXContext
from dxdata.shared.exceptions import (
    ContextNotInitialized,
    InvalidReference,
    RemoteError,
    Timeout,
    UnexpectedTerminalState,
)
from dxdata.types import ObjectState

P2 = "project-000000000000000000000002"


@pytest.fixture
def record(platform, ctx):
    dxid = platform.create_object("record", ctx.workspace_id, name="r1", state=ObjectState.closed)
    return DXRecord(dxid, context=ctx)


class ScriptedCalls(RemoteCalls):
    """RemoteCalls stub that raises or returns per-operation scripted values."""

    def __init__(self, responses: dict[str, Any]):
        self.responses = responses
        self.invocations: list[tuple[str, str, Any]] = []

    def invoke(self, resource_id: str, operation: str, params: Any) -> Any:
        self.invocations.append((resource_id, operation, params))
        value = self.responses.get(operation, {})
        if isinstance(value, Exception):
            raise value
        return value


# ------------------------------------------------------------------------------
# Identity
# ------------------------------------------------------------------------------

def test_default_project_is_the_workspace(ambient, platform):
    """A handle built without a project is scoped to the context's workspace."""
    platform.create_object("obj", ambient.workspace_id, object_id="obj-123")

    handle = DXDataObject("obj-123")
    assert handle.get_id() == "obj-123"
    assert handle.get_project_id() == ambient.workspace_id

    handle.rename("report.csv")
    assert handle.describe().name == "report.csv"


def test_explicit_context_beats_ambient(ambient, platform):
    other = DXContext(workspace_id=P2, calls=platform)
    handle = DXDataObject("obj-123", context=other)
    assert handle.get_project_id() == P2


def test_set_ids_rebinds_without_remote_calls(ctx, platform):
    handle = DXDataObject("record-1", context=ctx)
    handle.set_ids("record-2", P2)

    assert (handle.get_id(), handle.get_project_id()) == ("record-2", P2)
    assert platform.calls == []


def test_no_context_raises():
    with pytest.raises(ContextNotInitialized):
        DXDataObject("record-1")


@pytest.mark.parametrize("bad", ["record", "record-", "Record 1", "-abc", "record-a b"])
def test_malformed_id_is_rejected(ctx, bad):
    with pytest.raises(InvalidReference):
        DXDataObject(bad, context=ctx)


def test_kind_prefix_is_enforced(ctx):
    with pytest.raises(InvalidReference):
        DXRecord("file-000000000000000000000001", context=ctx)


def test_unbound_handle_fails_before_any_remote_call(ctx, platform):
    handle = DXDataObject(context=ctx)
    with pytest.raises(InvalidReference):
        handle.describe()
    with pytest.raises(InvalidReference):
        handle.add_tags({"x"})
    assert platform.calls == []


def test_copy_duplicates_ids_only(record):
    clone = copy.copy(record)
    clone.set_ids(record.get_id(), P2)

    assert record.get_project_id() != P2
    assert clone.context is record.context


def test_handle_has_no_implicit_id_conversion(record):
    assert str(record) != record.get_id()
    assert record.get_id() in repr(record)


def test_equality_is_by_ids(ctx, record):
    assert record == DXRecord(record.get_id(), record.get_project_id(), context=ctx)
    assert record != DXRecord(record.get_id(), P2, context=ctx)


def test_handles_are_unhashable(record):
    # set_ids rebinds in place, so a hash would go stale inside a set or dict
    with pytest.raises(TypeError):
        hash(record)
    with pytest.raises(TypeError):
        {record}


# ------------------------------------------------------------------------------
# Describe
# ------------------------------------------------------------------------------

def test_describe_minimum_contract(record):
    desc = record.describe()

    assert desc.id == record.get_id()
    assert desc.class_ == "record"
    assert desc.types == []
    assert isinstance(desc.createdAt, int)
    assert desc.properties is None
    assert desc.details is None


def test_describe_optional_fields(platform, ctx):
    rec = DXRecord.create(details={"a": 1}, properties={"k": "v"}, context=ctx)
    desc = rec.describe(incl_properties=True, incl_details=True)

    assert desc.properties == {"k": "v"}
    assert desc.details == {"a": 1}
    _, _, params = platform.calls_for("describe")[-1]
    assert params == {"project": ctx.workspace_id, "properties": True, "details": True}


def test_describe_rejects_response_missing_required_keys(ctx):
    calls = ScriptedCalls({"describe": {"id": "record-1", "class": "record"}})
    handle = DXDataObject("record-1", context=DXContext(ctx.workspace_id, calls))

    with pytest.raises(RemoteError) as exc:
        handle.describe()
    assert exc.value.error_type == INVALID_RESPONSE


def test_remote_failure_is_surfaced_verbatim(ctx):
    handle = DXDataObject("record-999", context=ctx)
    with pytest.raises(RemoteError) as exc:
        handle.describe()

    assert exc.value.error_type == RESOURCE_NOT_FOUND
    assert "record-999" in exc.value.error.message
    assert exc.value.status_code == 404


# ------------------------------------------------------------------------------
# Types / tags idempotence
# ------------------------------------------------------------------------------

def test_add_types_is_idempotent(record):
    record.add_types({"T"})
    once = record.describe().types
    record.add_types({"T"})

    assert record.describe().types == once == ["T"]


def test_remove_absent_type_and_tag_succeeds(record):
    record.remove_types({"never-added"})
    record.remove_tags({"x"})

    assert record.describe().tags == []


def test_tags_round_trip(record):
    record.add_tags(["b", "a", "a"])
    assert sorted(record.describe().tags) == ["a", "b"]

    record.remove_tags({"a"})
    assert record.describe().tags == ["b"]


@pytest.mark.parametrize("error_type", [ALREADY_PRESENT, ALREADY_ABSENT])
def test_no_op_set_errors_count_as_success(ctx, error_type):
    calls = ScriptedCalls({
        "addTags": RemoteError(error_type, "nothing to do"),
        "removeTypes": RemoteError(error_type, "nothing to do"),
    })
    handle = DXDataObject("record-1", context=DXContext(ctx.workspace_id, calls))

    handle.add_tags({"x"})
    handle.remove_types({"T"})
    assert [op for _, op, _ in calls.invocations] == ["addTags", "removeTypes"]


def test_other_set_errors_propagate(ctx):
    calls = ScriptedCalls({"addTypes": RemoteError("PermissionDenied", "VIEW access only")})
    handle = DXDataObject("record-1", context=DXContext(ctx.workspace_id, calls))

    with pytest.raises(RemoteError, match="VIEW access only"):
        handle.add_types({"T"})


def test_invalid_state_is_not_treated_as_a_no_op(ctx):
    calls = ScriptedCalls({"addTags": RemoteError(INVALID_STATE, "tag already present")})
    handle = DXDataObject("record-1", context=DXContext(ctx.workspace_id, calls))

    with pytest.raises(RemoteError) as exc:
        handle.add_tags({"x"})
    assert exc.value.error_type == INVALID_STATE


# ------------------------------------------------------------------------------
# Details / visibility / properties
# ------------------------------------------------------------------------------

def test_set_details_replaces_wholesale(ctx):
    rec = DXRecord.create(details={"a": 1, "b": 2}, context=ctx)
    rec.set_details({"c": 3})
    assert rec.get_details() == {"c": 3}

    rec.set_details([1, 2, 3])
    assert rec.get_details() == [1, 2, 3]

    rec.set_details((4, 5))
    assert rec.get_details() == [4, 5]


@pytest.mark.parametrize("bad", ["abc", 5, None, {1, 2}])
def test_set_details_rejects_non_json_containers(ctx, platform, bad):
    rec = DXRecord.create(details={"a": 1}, context=ctx)

    with pytest.raises(TypeError):
        rec.set_details(bad)
    assert platform.calls_for("setDetails") == []
    assert rec.get_details() == {"a": 1}


def test_hide_and_unhide_use_one_visibility_call_each(record, platform):
    record.hide()
    assert record.describe().hidden is True
    record.unhide()
    assert record.describe().hidden is False

    visibility = platform.calls_for("setVisibility")
    assert [params["hidden"] for _, _, params in visibility] == [True, False]


def test_set_properties_merges_and_none_deletes(record):
    record.set_properties({"a": "1", "b": "2"})
    record.set_properties({"b": None, "c": "3"})

    assert record.get_properties() == {"a": "1", "c": "3"}


def test_rename_sends_project_scope(record, platform):
    record.rename("new-name")
    _, _, params = platform.calls_for("rename")[-1]
    assert params == {"project": record.get_project_id(), "name": "new-name"}


# ------------------------------------------------------------------------------
# Project scoping
# ------------------------------------------------------------------------------

def test_two_projects_share_content_not_metadata(platform, ctx):
    rec = DXRecord.create(details={"x": 1}, types=["T"], name="orig", close=True, context=ctx)
    there = rec.clone(P2, "/shared")

    here_desc = rec.describe(incl_properties=True, incl_details=True)
    there_desc = there.describe(incl_properties=True, incl_details=True)
    assert here_desc.types == there_desc.types == ["T"]
    assert here_desc.details == there_desc.details == {"x": 1}

    there.rename("copy")
    there.set_properties({"where": "p2"})
    there.add_tags({"remote"})

    here_desc = rec.describe(incl_properties=True)
    there_desc = there.describe(incl_properties=True)
    assert (here_desc.name, there_desc.name) == ("orig", "copy")
    assert here_desc.properties == {}
    assert there_desc.properties == {"where": "p2"}
    assert here_desc.tags == [] and there_desc.tags == ["remote"]


def test_clone_then_list_projects(record, platform):
    clone = record.clone(P2, "/folder")

    assert P2 in record.list_projects()
    assert clone.describe().id == record.describe().id
    assert clone.describe().folder == "/folder"
    _, _, params = platform.calls_for("clone")[-1]
    assert params == {
        "objects": [record.get_id()],
        "project": P2,
        "destination": "/folder",
        "parents": True,
    }


def test_list_projects_accepts_list_responses(ctx):
    calls = ScriptedCalls({"listProjects": ["project-a", "project-b"]})
    handle = DXDataObject("record-1", context=DXContext(ctx.workspace_id, calls))
    assert handle.list_projects() == {"project-a", "project-b"}


def test_move_changes_folder_only(record):
    clone = record.clone(P2, "/stay")
    before = record.describe().id

    record.move("/newFolder")

    assert record.describe().id == before
    assert record.describe().folder == "/newFolder"
    assert clone.describe().folder == "/stay"


def test_remove_detaches_only_this_project(record):
    clone = record.clone(P2)
    dxid = record.get_id()

    record.remove()

    assert record.get_id() == dxid
    assert record.get_project_id() == ""
    with pytest.raises(InvalidReference):
        record.describe()

    assert clone.describe().id == dxid
    assert clone.list_projects() == {P2}


def test_link_from_handle(record):
    assert record.link() == {"$dnanexus_link": record.get_id()}
    assert record.link(include_project=True) == {
        "$dnanexus_link": {"project": record.get_project_id(), "id": record.get_id()}
    }


def test_from_link_round_trip(record, ctx):
    again = DXRecord.from_link(record.link(include_project=True), context=ctx)
    assert again == record

    with pytest.raises(InvalidReference):
        DXRecord.from_link({"not": "a link"}, context=ctx)


# ------------------------------------------------------------------------------
# Lifecycle
# ------------------------------------------------------------------------------

def test_close_does_not_block(ctx):
    rec = DXRecord.create(context=ctx)
    rec.close()
    assert rec.describe().state == "closing"


def test_wait_on_state_reaches_closed(ctx, clock):
    waiter = StateWaiter(BackoffPolicy(initial=1.0), clock=clock, sleep=clock.sleep)
    rec = DXRecord.create(context=ctx, waiter=waiter)
    rec.close()

    desc = rec.wait_on_state("closed", timeout=60)
    assert desc.state == "closed"
    assert clock.sleeps == [1.0]


def test_wait_on_state_zero_timeout_never_blocks(ctx, clock):
    waiter = StateWaiter(clock=clock, sleep=clock.sleep)
    rec = DXRecord.create(context=ctx, waiter=waiter)

    with pytest.raises(Timeout) as exc:
        rec.wait_on_state("closed", timeout=0)
    assert exc.value.last_state == "open"
    assert clock.sleeps == []


def test_wait_on_state_default_timeout_is_bounded(ctx, clock):
    waiter = StateWaiter(BackoffPolicy(initial=1e10, maximum=1e10), clock=clock, sleep=clock.sleep)
    rec = DXRecord.create(context=ctx, waiter=waiter)

    with pytest.raises(Timeout) as exc:
        rec.wait_on_state()
    assert exc.value.last_state == "open"
    assert clock.sleeps == [DEFAULT_WAIT_TIMEOUT]


def test_wait_on_state_unexpected_terminal(platform, ctx, clock):
    waiter = StateWaiter(clock=clock, sleep=clock.sleep)
    rec = DXRecord.create(context=ctx, waiter=waiter)
    platform.fail_on_close(rec.get_id())
    rec.close()

    with pytest.raises(UnexpectedTerminalState) as exc:
        rec.wait_on_state("closed", timeout=60)
    assert exc.value.observed == "failed"

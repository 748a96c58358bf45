# tests/conftest.py
import logging
import os

import pytest

from dxdata.calls.memory import InMemoryPlatform
from dxdata.shared.context import DXContext, use_context

WORKSPACE = "project-000000000000000000000001"
OTHER_PROJECT = "project-000000000000000000000002"

# ------------------------------------------------------------------------------
# 1. Global Configuration
# ------------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def setup_test_logging(caplog):
    """
    Automatically captures logging at DEBUG level for every test.
    If a test fails, pytest will show the logs (every remote call is logged).
    """
    caplog.set_level(logging.DEBUG)


@pytest.fixture(autouse=True)
def clean_dx_environment(monkeypatch):
    """Tests never see the developer's own DX_* settings."""
    for name in list(os.environ):
        if name.upper().startswith("DX_"):
            monkeypatch.delenv(name, raising=False)


# ------------------------------------------------------------------------------
# 2. Platform Fixtures
# ------------------------------------------------------------------------------

class FakeClock:
    """Monotonic clock + sleep pair that advances only when slept on."""

    def __init__(self, start: float = 100.0):
        self.now = start
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


@pytest.fixture
def platform():
    """A fresh in-memory platform per test."""
    return InMemoryPlatform()


@pytest.fixture
def ctx(platform):
    return DXContext(workspace_id=WORKSPACE, calls=platform)


@pytest.fixture
def ambient(ctx):
    """
    Installs `ctx` as the ambient context for the duration of the test, the
    way an application would after reading its environment.
    """
    with use_context(ctx):
        yield ctx


@pytest.fixture
def clock():
    return FakeClock()

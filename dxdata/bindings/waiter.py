# dxdata/bindings/waiter.py
from __future__ import annotations

import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Collection, Iterator

from mcp.server.fastmcp.utilities.logging import get_logger

from dxdata.shared.exceptions import Timeout, UnexpectedTerminalState
from dxdata.types import TERMINAL_STATES, DescribeResult

logger = get_logger(__name__)


def _state_name(state: str | Enum) -> str:
    return state.value if isinstance(state, Enum) else str(state)


@dataclass(frozen=True)
class BackoffPolicy:
    """Capped exponential delays between state polls."""

    initial: float = 0.5
    factor: float = 2.0
    maximum: float = 10.0

    def __post_init__(self) -> None:
        if self.initial <= 0 or self.maximum <= 0:
            raise ValueError("Backoff delays must be positive")
        if self.factor < 1:
            raise ValueError("Backoff factor must be >= 1")

    def delays(self) -> Iterator[float]:
        delay = min(self.initial, self.maximum)
        while True:
            yield delay
            delay = min(delay * self.factor, self.maximum)


DEFAULT_BACKOFF = BackoffPolicy()

# Largest wait the platform bindings accept, in seconds; None means no deadline at all
DEFAULT_WAIT_TIMEOUT = float(2**31 - 1)


class StateWaiter:
    """
    Polls an object's lifecycle state until it reaches a target.

    `fetch` is called once per attempt and returns a fresh description. The
    wait ends when the observed state equals the target, when it is a
    different terminal state (UnexpectedTerminalState), or when `timeout`
    seconds have passed (Timeout). The default timeout is DEFAULT_WAIT_TIMEOUT
    (about 68 years); `timeout=None` waits without a deadline;
    `timeout=0` polls exactly once. Sleeps are clipped so the deadline is
    never overshot by more than one poll.
    """

    def __init__(
        self,
        policy: BackoffPolicy | None = None,
        *,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
        terminal_states: Collection[str] = TERMINAL_STATES,
    ) -> None:
        self.policy = policy or DEFAULT_BACKOFF
        self._clock = clock
        self._sleep = sleep
        self._terminal = frozenset(_state_name(s) for s in terminal_states)

    def wait(
        self,
        object_id: str,
        fetch: Callable[[], DescribeResult],
        state: str | Enum = "closed",
        timeout: float | None = DEFAULT_WAIT_TIMEOUT,
    ) -> DescribeResult:
        if timeout is not None and timeout < 0:
            raise ValueError("timeout must be >= 0")
        target = _state_name(state)
        start = self._clock()
        deadline = None if timeout is None else start + timeout
        delays = self.policy.delays()
        attempts = 0

        logger.info("Waiting for %s to reach state %r (timeout=%s)", object_id, target, timeout)
        while True:
            desc = fetch()
            attempts += 1
            observed = None if desc.state is None else _state_name(desc.state)
            logger.debug("%s state=%r (attempt %d)", object_id, observed, attempts)

            if observed == target:
                return desc
            if observed in self._terminal:
                raise UnexpectedTerminalState(object_id, target, observed)

            now = self._clock()
            if deadline is not None and now >= deadline:
                raise Timeout(object_id, target, timeout, observed)

            delay = next(delays)
            if deadline is not None:
                delay = min(delay, deadline - now)
            self._sleep(delay)

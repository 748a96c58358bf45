"""Utilities for creating standardized httpx Client instances."""

from contextlib import contextmanager
from typing import Any, Generator

import httpx

__all__ = ["build_dx_http_client", "create_dx_http_client"]


def build_dx_http_client(
    headers: dict[str, str] | None = None,
    timeout: httpx.Timeout | None = None,
    transport: httpx.BaseTransport | None = None,
) -> httpx.Client:
    """Build an httpx.Client with the defaults used throughout dxdata.

    - follow_redirects=True (always enabled)
    - Default timeout of 30 seconds if not specified

    The caller owns the client and must close it.
    """
    kwargs: dict[str, Any] = {
        "follow_redirects": True,
    }

    if timeout is None:
        kwargs["timeout"] = httpx.Timeout(30.0)
    else:
        kwargs["timeout"] = timeout

    if headers is not None:
        kwargs["headers"] = headers

    # Tests plug in httpx.MockTransport here
    if transport is not None:
        kwargs["transport"] = transport

    return httpx.Client(**kwargs)


@contextmanager
def create_dx_http_client(
    headers: dict[str, str] | None = None,
    timeout: httpx.Timeout | None = None,
    transport: httpx.BaseTransport | None = None,
) -> Generator[httpx.Client, None, None]:
    """Provide a standardized httpx Client as a context manager.

    Examples:
        with create_dx_http_client() as client:
            response = client.post("https://api.example.com/record-xxxx/describe", json={})

        headers = {"Authorization": "Bearer token"}
        with create_dx_http_client(headers=headers, timeout=httpx.Timeout(60.0)) as client:
            response = client.post("/system/whoami", json={})
    """
    client = build_dx_http_client(headers=headers, timeout=timeout, transport=transport)
    try:
        yield client
    finally:
        client.close()

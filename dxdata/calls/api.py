from __future__ import annotations

from typing import Any

from dxdata.client.api import DXApiClient

from .base import RemoteCalls


class ApiRemoteCalls(RemoteCalls):
    """RemoteCalls backed by the HTTP API: `invoke(id, op, params)` is `POST /{id}/{op}`."""

    def __init__(self, client: DXApiClient):
        self._client = client

    @property
    def client(self) -> DXApiClient:
        return self._client

    def invoke(self, resource_id: str, operation: str, params: Any) -> Any:
        return self._client.call(resource_id, operation, params)

    def close_client(self) -> None:
        self._client.close()

import logging
from typing import Any

import httpx

from dxdata.config import DXConfig
from dxdata.errors import TRANSPORT_ERROR
from dxdata.shared._httpx_utils import build_dx_http_client
from dxdata.shared.exceptions import RemoteError

logger = logging.getLogger("client")


class DXApiClient:
    """
    Synchronous JSON-over-HTTP client for the platform API.

    Every API method is a POST of a JSON object to `/{resource}/{method}`; the
    response body is the JSON result. Error bodies have the shape
    `{"error": {"type": ..., "message": ...}}` and are raised as RemoteError
    with type and message passed through unchanged.
    """

    def __init__(
        self,
        config: DXConfig | None = None,
        *,
        http_client: httpx.Client | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._config = config or DXConfig()
        if http_client is not None:
            self._http = http_client
            self._owns_http = False
        else:
            self._http = build_dx_http_client(
                headers=self._config.auth_headers(),
                timeout=httpx.Timeout(self._config.timeout_seconds),
                transport=transport,
            )
            self._owns_http = True

    @property
    def config(self) -> DXConfig:
        return self._config

    def call(self, resource: str, method: str, params: Any | None = None) -> Any:
        url = f"{self._config.api_server_url}/{resource}/{method}"
        logger.debug("POST /%s/%s", resource, method)
        try:
            response = self._http.post(url, json=params if params is not None else {})
        except httpx.HTTPError as e:
            raise RemoteError(TRANSPORT_ERROR, f"{type(e).__name__}: {e}") from e

        if response.is_error:
            raise self._to_remote_error(response)

        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError as e:
            raise RemoteError(
                TRANSPORT_ERROR,
                f"Invalid JSON in response to /{resource}/{method}",
                status_code=response.status_code,
            ) from e

    @staticmethod
    def _to_remote_error(response: httpx.Response) -> RemoteError:
        body: Any = None
        try:
            body = response.json()
        except ValueError:
            pass

        err = body.get("error") if isinstance(body, dict) else None
        if isinstance(err, dict):
            return RemoteError(
                str(err.get("type") or "Unknown"),
                str(err.get("message") or ""),
                status_code=response.status_code,
                data=err.get("details"),
            )
        return RemoteError(
            "HTTPError",
            f"HTTP {response.status_code}: {response.text[:200]}",
            status_code=response.status_code,
        )

    def close(self) -> None:
        if self._owns_http:
            self._http.close()

    def __enter__(self) -> "DXApiClient":
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

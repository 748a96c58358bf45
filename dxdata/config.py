# dxdata/config.py
from __future__ import annotations

import json

from pydantic import AliasChoices, Field, SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from mcp.server.fastmcp.utilities.logging import get_logger

logger = get_logger(__name__)


class DXConfig(BaseSettings):
    """Connection settings for the platform API.

    All settings can be configured via environment variables with the prefix DX_.
    For example, DX_APISERVER_HOST=localhost will set apiserver_host="localhost".
    The workspace is read from DX_WORKSPACE_ID (or DX_PROJECT_CONTEXT_ID), and
    the auth token from DX_AUTH_TOKEN or the JSON DX_SECURITY_CONTEXT.
    """

    model_config = SettingsConfigDict(
        env_prefix="DX_",
        extra="ignore",
        populate_by_name=True,
    )

    apiserver_protocol: str = "https"
    apiserver_host: str = "api.dnanexus.com"
    apiserver_port: int = 443
    auth_token: SecretStr | None = None
    security_context: SecretStr | None = Field(default=None, exclude=True)
    """`{"auth_token": ..., "auth_token_type": "Bearer"}`; its token wins over auth_token."""

    workspace_id: str | None = Field(
        default=None,
        validation_alias=AliasChoices("DX_WORKSPACE_ID", "DX_PROJECT_CONTEXT_ID"),
    )
    timeout_seconds: float = Field(default=30.0, validation_alias=AliasChoices("DX_API_TIMEOUT"))

    @model_validator(mode="after")
    def _token_from_security_context(self) -> "DXConfig":
        if self.security_context is None:
            return self
        try:
            token = json.loads(self.security_context.get_secret_value()).get("auth_token")
        except (ValueError, AttributeError):
            logger.warning("Ignoring unparseable DX_SECURITY_CONTEXT")
            return self
        if token:
            self.auth_token = SecretStr(str(token))
        return self

    @property
    def api_server_url(self) -> str:
        default_port = {"https": 443, "http": 80}.get(self.apiserver_protocol)
        if self.apiserver_port == default_port:
            return f"{self.apiserver_protocol}://{self.apiserver_host}"
        return f"{self.apiserver_protocol}://{self.apiserver_host}:{self.apiserver_port}"

    def auth_headers(self) -> dict[str, str]:
        if self.auth_token is None:
            return {}
        return {"Authorization": f"Bearer {self.auth_token.get_secret_value()}"}

"""Identity provider settings."""

from __future__ import annotations

from typing import Literal

from pydantic import AnyUrl, Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

IdentityBackend = Literal["http", "static"]


class AuthSettings(BaseSettings):
    """Authentication settings.

    Environment variables use AUTH_ prefix.
    Example: AUTH_SERVICE_URL="http://auth:9999", AUTH_BACKEND=http

    The ``static`` backend resolves tokens from ``static_tokens`` (token ->
    user id) and is meant for local development only.
    """

    backend: IdentityBackend = Field(
        default="static",
        description="Identity provider backend: http|static",
    )
    service_url: AnyUrl | None = Field(
        default=None,
        alias="AUTH_SERVICE_URL",
        description="Base URL of the identity service (e.g., http://auth:9999)",
    )
    user_endpoint: str = Field(
        default="/user",
        description="Path returning the user bound to a bearer token",
    )
    request_timeout: float = Field(
        default=5.0,
        ge=0.1,
        le=60.0,
        description="Request timeout in seconds for identity service calls",
    )
    token_header: str = Field(
        default="Authorization",
        description="HTTP header containing the bearer token",
    )
    token_scheme: str = Field(default="Bearer", description="Token authentication scheme")
    static_tokens: dict[str, str] = Field(
        default_factory=dict,
        description="Token -> user id table for the static backend (JSON object)",
    )

    @model_validator(mode="after")
    def validate_backend(self) -> AuthSettings:
        """The http backend needs a service URL."""
        if self.backend == "http" and self.service_url is None:
            msg = "AUTH_SERVICE_URL is required when AUTH_BACKEND=http"
            raise ValueError(msg)
        return self

    model_config = SettingsConfigDict(
        env_prefix="AUTH_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        frozen=True,
        extra="ignore",
        env_ignore_empty=True,
        populate_by_name=True,
    )

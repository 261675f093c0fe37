"""Pydantic configuration models for netkit clients and sessions."""

import os
import re
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator


class DateFormat(str, Enum):
    """How datetimes are written to (and expected from) the wire."""

    ISO8601 = "iso8601"
    EPOCH_SECONDS = "epoch_seconds"
    EPOCH_MILLISECONDS = "epoch_milliseconds"


class KeyCase(str, Enum):
    """Field-name convention used on the wire."""

    # Wire keys match Python attribute names
    SNAKE = "snake_case"
    # Wire keys are camelCase, converted to/from snake_case attributes
    CAMEL = "camelCase"


class SessionKind(str, Enum):
    """Transport session flavours a SessionProvider can ask for."""

    DEFAULT = "default"
    EPHEMERAL = "ephemeral"
    BACKGROUND = "background"


def _expand_env_var(value: str) -> str:
    """Expand $VAR and ${VAR} references, leaving unset variables verbatim."""
    pattern = r"\$\{([^}]+)\}|\$([A-Za-z_][A-Za-z0-9_]*)"

    def replace(match: re.Match) -> str:
        var_name = match.group(1) or match.group(2)
        return os.environ.get(var_name, match.group(0))

    return re.sub(pattern, replace, value)


class SessionConfiguration(BaseModel):
    """
    Transport session settings produced by a SessionProvider.

    Example:
        config = SessionConfiguration.ephemeral()
        assert config.persist_cookies is False

        config = SessionConfiguration.background("com.app.upload")
        assert config.identifier == "com.app.upload"
    """

    kind: SessionKind = Field(SessionKind.DEFAULT, description="Session flavour")
    identifier: Optional[str] = Field(
        None,
        description="Opaque identifier for background sessions",
    )
    persist_cookies: bool = Field(True, description="Keep cookies between requests")
    request_timeout: Optional[float] = Field(
        60.0,
        gt=0,
        description="Seconds to wait for data on an open connection",
    )
    connect_timeout: Optional[float] = Field(None, gt=0, description="Seconds to establish a connection")
    resource_timeout: Optional[float] = Field(
        None,
        gt=0,
        description="Upper bound in seconds for a whole request/transfer (None = unlimited)",
    )
    max_connections: int = Field(100, ge=1, description="Total connection pool size")
    max_connections_per_host: int = Field(10, ge=0, description="Connections per host (0 = unlimited)")
    headers: dict[str, str] = Field(default_factory=dict, description="Headers sent by every request on the session")
    proxy: Optional[str] = Field(None, description="Proxy URL (http://...)")

    model_config = {"extra": "forbid", "frozen": True}

    @model_validator(mode="after")
    def _check_background_identifier(self) -> "SessionConfiguration":
        if self.kind == SessionKind.BACKGROUND and not self.identifier:
            raise ValueError("Background sessions require an identifier")
        return self

    @classmethod
    def default(cls) -> "SessionConfiguration":
        """Configuration with cookie persistence and standard timeouts."""
        return cls()

    @classmethod
    def ephemeral(cls) -> "SessionConfiguration":
        """Configuration that never persists cookies."""
        return cls(kind=SessionKind.EPHEMERAL, persist_cookies=False)

    @classmethod
    def background(cls, identifier: str) -> "SessionConfiguration":
        """Configuration tagged for long-running transfers."""
        return cls(
            kind=SessionKind.BACKGROUND,
            identifier=identifier,
            request_timeout=None,
            resource_timeout=None,
        )


class ClientConfiguration(BaseModel):
    """
    Client-wide settings for NetworkClient.

    Header values support environment variable expansion using $VAR or
    ${VAR} syntax, so tokens need not be hard-coded:

        ClientConfiguration(
            base_url="https://api.example.com/v1",
            default_headers={"Authorization": "Bearer $API_TOKEN"},
        )
    """

    base_url: str = Field(..., description="Base URL every request path is appended to")
    default_headers: dict[str, str] = Field(
        default_factory=dict,
        description="Headers applied to every request (lowest precedence after built-ins)",
    )
    date_format: DateFormat = Field(DateFormat.ISO8601, description="Wire format for datetimes")
    key_case: KeyCase = Field(KeyCase.SNAKE, description="Wire field-name convention")
    body_preview_limit: int = Field(
        1024,
        ge=0,
        description="Bytes of response body passed to the logger",
    )

    model_config = {"extra": "forbid", "frozen": True}

    @field_validator("default_headers")
    @classmethod
    def _expand_header_values(cls, headers: dict[str, str]) -> dict[str, str]:
        return {name: _expand_env_var(value) for name, value in headers.items()}
